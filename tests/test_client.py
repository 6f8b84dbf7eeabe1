from unittest.mock import MagicMock, create_autospec

import pytest
from pymodbus.client import ModbusTcpClient
from pymodbus.exceptions import ConnectionException, ModbusIOException

from relay_tester.errors import TransportError, ValidationError
from relay_tester.modbus import client as client_module
from relay_tester.modbus.client import ClientConfig, RelayBoardClient


def _response(bits=None, registers=None, error=False):
    rr = MagicMock()
    rr.bits = bits or []
    rr.registers = registers or []
    rr.isError.return_value = error
    return rr


@pytest.fixture
def pymodbus_client(monkeypatch):
    mock = create_autospec(ModbusTcpClient, instance=True)
    mock.connect.return_value = True
    created = {}

    def factory(**kwargs):
        created.update(kwargs)
        return mock

    monkeypatch.setattr(client_module, "ModbusTcpClient", factory)
    mock.created_with = created
    return mock


@pytest.fixture
def client(pymodbus_client):
    c = RelayBoardClient(ClientConfig(host="10.0.0.5", unit_id=3, timeout_ms=2500))
    c.connect()
    return c


def test_config_defaults():
    config = ClientConfig()

    assert config.port == 502
    assert config.unit_id == 1
    assert config.timeout_ms == 5000
    assert config.timeout_sec == 5.0


@pytest.mark.parametrize(
    "kwargs",
    [{"port": 0}, {"port": 70000}, {"unit_id": 248}, {"timeout_ms": 0}, {"host": ""}],
)
def test_config_validation(kwargs):
    with pytest.raises(ValidationError):
        ClientConfig(**kwargs)


def test_client_is_built_without_retries(client, pymodbus_client):
    assert pymodbus_client.created_with == {
        "host": "10.0.0.5",
        "port": 502,
        "timeout": 2.5,
        "retries": 0,
    }
    assert client.is_connected


def test_connect_refused(pymodbus_client):
    pymodbus_client.connect.return_value = False
    c = RelayBoardClient(ClientConfig(host="10.0.0.5"))

    with pytest.raises(TransportError) as excinfo:
        c.connect()

    assert excinfo.value.reason == TransportError.CONNECTION
    assert not c.is_connected


def test_request_before_connect_fails(pymodbus_client):
    c = RelayBoardClient(ClientConfig())

    with pytest.raises(TransportError):
        c.read_coils(0, 8)

    pymodbus_client.read_coils.assert_not_called()


def test_read_coils_truncates_padding_bits(client, pymodbus_client):
    # Coil responses are padded to a whole byte
    pymodbus_client.read_coils.return_value = _response(
        bits=[True, False, False, False, False, False, False, False]
    )

    assert client.read_coils(40, 1) == [True]
    pymodbus_client.read_coils.assert_called_once_with(40, count=1, device_id=3)


def test_read_holding_registers(client, pymodbus_client):
    pymodbus_client.read_holding_registers.return_value = _response(
        registers=[0x0098, 0x967F]
    )

    assert client.read_holding_registers(511, 2) == [0x0098, 0x967F]
    pymodbus_client.read_holding_registers.assert_called_once_with(
        511, count=2, device_id=3
    )


def test_short_response_is_transport_error(client, pymodbus_client):
    pymodbus_client.read_holding_registers.return_value = _response(registers=[1])

    with pytest.raises(TransportError):
        client.read_holding_registers(501, 10)


def test_write_coil_and_register(client, pymodbus_client):
    pymodbus_client.write_coil.return_value = _response()
    pymodbus_client.write_register.return_value = _response()

    client.write_register(103, 1500)
    client.write_coil(23, True)

    pymodbus_client.write_register.assert_called_once_with(103, 1500, device_id=3)
    pymodbus_client.write_coil.assert_called_once_with(23, True, device_id=3)


def test_exception_response(client, pymodbus_client):
    pymodbus_client.write_coil.return_value = _response(error=True)

    with pytest.raises(TransportError) as excinfo:
        client.write_coil(30, True)

    assert excinfo.value.reason == TransportError.EXCEPTION_RESPONSE


def test_no_response_is_timeout(client, pymodbus_client):
    pymodbus_client.read_coils.side_effect = ModbusIOException("no response")

    with pytest.raises(TransportError) as excinfo:
        client.read_coils(0, 8)

    assert excinfo.value.reason == TransportError.TIMEOUT
    assert isinstance(excinfo.value.__cause__, ModbusIOException)
    # Exactly one attempt
    assert pymodbus_client.read_coils.call_count == 1


def test_dropped_connection(client, pymodbus_client):
    pymodbus_client.write_register.side_effect = ConnectionException("reset")

    with pytest.raises(TransportError) as excinfo:
        client.write_register(100, 10)

    assert excinfo.value.reason == TransportError.CONNECTION
    assert not client.is_connected


def test_none_response(client, pymodbus_client):
    pymodbus_client.write_coil.return_value = None

    with pytest.raises(TransportError):
        client.write_coil(0, True)


def test_context_manager_closes(pymodbus_client):
    with RelayBoardClient(ClientConfig()) as c:
        assert c.is_connected

    pymodbus_client.close.assert_called_once()
    assert not c.is_connected
