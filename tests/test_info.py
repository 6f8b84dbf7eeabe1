import pytest

from relay_tester.device import DeviceInfo, RelayBoard, read_device_info
from relay_tester.errors import TransportError
from relay_tester.modbus.protocols import RelayBoardEncoder


@pytest.fixture
def identity(transport):
    encoder = RelayBoardEncoder()
    transport.registers[500] = 101
    for i, reg in enumerate(encoder.encode_device_name("ESP32 Relay Board")):
        transport.registers[501 + i] = reg
    high, low = encoder.encode_serial_number(4567890)
    transport.registers.update({511: high, 512: low})
    return transport


def test_read_device_info(identity):
    info = read_device_info(identity)

    assert info == DeviceInfo(
        firmware_version=(1, 0, 1),
        device_name="ESP32 Relay Board",
        serial_number=4567890,
    )
    assert info.version_string == "v1.0.1"
    assert identity.calls == [
        ("read_holding_registers", 500, 1),
        ("read_holding_registers", 501, 10),
        ("read_holding_registers", 511, 2),
    ]


@pytest.mark.parametrize("failing_call", [0, 1, 2])
def test_read_device_info_fails_fast(identity, timeout_error, failing_call):
    identity.fail_on[failing_call] = timeout_error

    with pytest.raises(TransportError):
        read_device_info(identity)

    assert len(identity.calls) == failing_call + 1


def test_device_info_is_not_cached(identity):
    board = RelayBoard(identity)

    first = board.read_device_info()
    identity.registers[500] = 102
    second = board.read_device_info()

    assert first.firmware_version == (1, 0, 1)
    assert second.firmware_version == (1, 0, 2)
    assert len(identity.calls) == 6
