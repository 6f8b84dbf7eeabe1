import pytest

from relay_tester.device import RelayBoard
from relay_tester.shell import RelayTesterShell, parse_int, parse_relay_state
from relay_tester.errors import TransportError, ValidationError
from relay_tester.modbus.protocols import RelayState


def make_shell(transport, answers):
    lines = []
    answers = iter(answers)

    def fake_input(prompt):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError

    shell = RelayTesterShell(
        RelayBoard(transport), target="10.0.0.5:502", input_func=fake_input,
        output=lines.append,
    )
    return shell, lines


def test_parse_helpers():
    assert parse_int(" 42 ", "relay number") == 42
    assert parse_relay_state("ON") == RelayState.ON
    assert parse_relay_state("0") == RelayState.OFF
    with pytest.raises(ValidationError):
        parse_int("seven", "relay number")
    with pytest.raises(ValidationError):
        parse_relay_state("2")


def test_status_then_exit(transport):
    transport.coils.update({5: True, 40: True})
    shell, lines = make_shell(transport, ["1", "0"])

    shell.run()

    assert "Relay 5: ON" in lines
    assert "Relay 0: OFF" in lines
    assert "Master Status (Any Relay On): ON" in lines
    assert lines[-1] == "Exiting..."


def test_toggle_relay(transport):
    shell, lines = make_shell(transport, ["2", "6", "1", "q"])

    shell.run()

    assert transport.calls == [("write_coil", 6, True)]
    assert "Command sent successfully." in lines


def test_invalid_relay_number_issues_no_request(transport):
    shell, lines = make_shell(transport, ["2", "8", "3", "abc", "0"])

    shell.run()

    assert transport.calls == []
    assert sum(1 for line in lines if line.startswith("Invalid input")) == 2


def test_arm_relay(transport):
    shell, lines = make_shell(transport, ["3", "3", "1500", "0"])

    shell.run()

    assert transport.calls == [("write_register", 103, 1500), ("write_coil", 23, True)]
    assert "Relay 3 is ARMED and ready to be triggered." in lines


def test_arm_relay_rejects_zero_duration(transport):
    shell, lines = make_shell(transport, ["3", "1", "0", "0"])

    shell.run()

    assert transport.calls == []


def test_transport_error_keeps_loop_running(transport):
    transport.fail_on[1] = TransportError("no response", TransportError.TIMEOUT)
    shell, lines = make_shell(transport, ["1", "4", "0"])

    shell.run()

    assert not any(line.startswith("Relay 0") for line in lines)
    assert any(line.startswith("Error:") for line in lines)
    # The trigger after the failed status read still goes out
    assert transport.calls[-1] == ("write_coil", 30, True)


def test_device_info(transport):
    transport.registers.update({500: 101, 501: 0x4142, 511: 0, 512: 42})
    shell, lines = make_shell(transport, ["5", "0"])

    shell.run()

    assert "Device Name:      AB" in lines
    assert "Firmware Version: v1.0.1" in lines
    assert "Serial Number:    42" in lines


def test_durations(transport):
    transport.registers[104] = 750
    shell, lines = make_shell(transport, ["6", "0"])

    shell.run()

    assert "Relay 4: 750 ms" in lines


def test_emergency_stop_requires_confirmation(transport):
    shell, lines = make_shell(transport, ["7", "n", "7", "y", "0"])

    shell.run()

    assert transport.calls == [("write_coil", 60, True)]
    assert "Emergency stop cancelled." in lines


def test_unknown_choice_and_eof(transport):
    shell, lines = make_shell(transport, ["9"])

    shell.run()

    assert "Invalid choice. Please try again." in lines
    assert lines[-1] == "Exiting..."


def test_dispatch_reports_validation_error(transport):
    shell, lines = make_shell(transport, [])

    def bad_action():
        raise ValidationError("Relay index must be 0-7, got 9")

    assert shell.dispatch(bad_action) is None
    assert lines == ["Invalid input: Relay index must be 0-7, got 9"]
    assert transport.calls == []
