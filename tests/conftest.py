"""
Shared fixtures: an in-memory relay board transport recording every request.
"""

import pytest

from relay_tester.errors import TransportError


class FakeTransport:
    """
    In-memory coils/registers with the RelayBoardClient interface.

    ``fail_on`` maps a call index (0-based, over all calls) to an exception
    raised instead of performing that call.
    """

    def __init__(self):
        self.coils = {}
        self.registers = {}
        self.calls = []
        self.fail_on = {}

    def _record(self, *call):
        index = len(self.calls)
        self.calls.append(call)
        if index in self.fail_on:
            raise self.fail_on[index]

    def read_coils(self, address, count):
        self._record("read_coils", address, count)
        return [self.coils.get(address + i, False) for i in range(count)]

    def write_coil(self, address, value):
        self._record("write_coil", address, value)
        self.coils[address] = bool(value)

    def read_holding_registers(self, address, count):
        self._record("read_holding_registers", address, count)
        return [self.registers.get(address + i, 0) for i in range(count)]

    def write_register(self, address, value):
        self._record("write_register", address, value)
        self.registers[address] = value


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def timeout_error():
    return TransportError("no response", TransportError.TIMEOUT)
