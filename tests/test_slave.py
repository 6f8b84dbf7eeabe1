from relay_tester.device import read_device_info
from relay_tester.simulator import RelayBoardSlave, SimulatorConfig
from relay_tester.simulator.board import FC_HOLDING


class DatastoreTransport:
    """Serve relay operations straight from the simulator datastore."""

    def __init__(self, device):
        self.device = device

    def read_holding_registers(self, address, count):
        return list(self.device.getValues(FC_HOLDING, address, count))


def test_identity_registers_are_populated():
    slave = RelayBoardSlave(
        config=SimulatorConfig(
            firmware_version=203, device_name="Bench Board", serial_number=7654321
        )
    )

    info = read_device_info(DatastoreTransport(slave.device))

    assert info.firmware_version == (2, 0, 3)
    assert info.device_name == "Bench Board"
    assert info.serial_number == 7654321


def test_default_identity_matches_firmware():
    slave = RelayBoardSlave()

    info = read_device_info(DatastoreTransport(slave.device))

    assert info.version_string == "v1.0.1"
    assert info.device_name == "ESP32 Relay Board"


def test_server_context_serves_configured_unit():
    slave = RelayBoardSlave(config=SimulatorConfig(unit_id=7))

    assert slave.context[7] is slave.device
    assert not slave.is_running


def test_stop_without_start_is_noop():
    slave = RelayBoardSlave()
    slave.stop()

    assert not slave.is_running
