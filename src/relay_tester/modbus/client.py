"""
Modbus TCP Client Adapter
=========================

Synchronous transport used by the relay operations.

Wraps pymodbus' ModbusTcpClient and exposes exactly the four primitives the
relay board needs:
- read_coils (FC 01)
- write_coil (FC 05)
- read_holding_registers (FC 03)
- write_register (FC 06)

Every failure (refused connection, dropped socket, timeout, exception
response) surfaces as TransportError. Requests are never retried here:
the client is built with retries=0 and each call is one round trip.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import inspect
import logging
from dataclasses import dataclass
from typing import List

from pymodbus.client import ModbusTcpClient
from pymodbus.exceptions import (
    ConnectionException,
    ModbusException,
    ModbusIOException,
)

from ..errors import TransportError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    """Connection settings for one tester session."""

    host: str = "127.0.0.1"
    port: int = 502
    unit_id: int = 1
    timeout_ms: int = 5000

    def __post_init__(self):
        if not self.host:
            raise ValidationError("Host must not be empty")
        if not 1 <= self.port <= 65535:
            raise ValidationError(f"Port {self.port} out of range [1, 65535]")
        if not 0 <= self.unit_id <= 247:
            raise ValidationError(f"Unit id {self.unit_id} out of range [0, 247]")
        if self.timeout_ms <= 0:
            raise ValidationError(f"Timeout must be positive, got {self.timeout_ms} ms")

    @property
    def timeout_sec(self) -> float:
        return self.timeout_ms / 1000.0


class RelayBoardClient:
    """
    Modbus TCP session to one relay board.

    One instance owns one socket. Calls are strictly sequential: each method
    returns only after its response (or failure) has been received.
    """

    def __init__(self, config: ClientConfig):
        self.config = config
        self._client = ModbusTcpClient(
            host=config.host,
            port=config.port,
            timeout=config.timeout_sec,
            retries=0,
        )
        self._connected = False

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self):
        """
        Open the TCP connection.

        Raises:
            TransportError: If the device cannot be reached
        """
        try:
            ok = self._client.connect()
        except (ModbusException, OSError) as e:
            raise TransportError(
                f"Cannot connect to {self.config.host}:{self.config.port}: {e}",
                TransportError.CONNECTION,
            ) from e

        if not ok:
            raise TransportError(
                f"Cannot connect to {self.config.host}:{self.config.port}",
                TransportError.CONNECTION,
            )

        self._connected = True
        logger.info(f"Connected to {self.config.host}:{self.config.port}")

    def close(self):
        """Close the TCP connection."""
        if not self._connected:
            return
        self._client.close()
        self._connected = False
        logger.info(f"Disconnected from {self.config.host}:{self.config.port}")

    def read_coils(self, address: int, count: int) -> List[bool]:
        """Read ``count`` coils starting at ``address``."""
        rr = self._execute("read_coils", address, count=count)
        bits = list(rr.bits[:count])
        if len(bits) != count:
            raise TransportError(
                f"read_coils({address}, {count}) returned {len(bits)} bits"
            )
        return bits

    def write_coil(self, address: int, value: bool):
        """Write a single coil."""
        self._execute("write_coil", address, bool(value))

    def read_holding_registers(self, address: int, count: int) -> List[int]:
        """Read ``count`` holding registers starting at ``address``."""
        rr = self._execute("read_holding_registers", address, count=count)
        registers = list(rr.registers[:count])
        if len(registers) != count:
            raise TransportError(
                f"read_holding_registers({address}, {count}) returned "
                f"{len(registers)} registers"
            )
        return registers

    def write_register(self, address: int, value: int):
        """Write a single holding register."""
        self._execute("write_register", address, int(value))

    def _execute(self, name: str, *args, **kwargs):
        if not self._connected:
            raise TransportError("Not connected", TransportError.CONNECTION)

        func = getattr(self._client, name)
        kwargs.update(self._unit_kw(func))

        logger.debug(f"{name} {args} {kwargs}")

        try:
            rr = func(*args, **kwargs)
        except ConnectionException as e:
            self._connected = False
            raise TransportError(f"{name} failed: {e}", TransportError.CONNECTION) from e
        except ModbusIOException as e:
            raise TransportError(f"{name} failed: {e}", TransportError.TIMEOUT) from e
        except ModbusException as e:
            raise TransportError(f"{name} failed: {e}", TransportError.PROTOCOL) from e
        except OSError as e:
            self._connected = False
            raise TransportError(f"{name} failed: {e}", TransportError.CONNECTION) from e

        if rr is None:
            raise TransportError(f"No response from {name}", TransportError.TIMEOUT)
        if rr.isError():
            raise TransportError(
                f"Modbus {name} error: {rr}", TransportError.EXCEPTION_RESPONSE
            )

        return rr

    def _unit_kw(self, func) -> dict:
        # pymodbus renamed the unit keyword across releases
        sig = inspect.signature(func)
        if "device_id" in sig.parameters:
            return {"device_id": self.config.unit_id}
        if "slave" in sig.parameters:
            return {"slave": self.config.unit_id}
        if "unit" in sig.parameters:
            return {"unit": self.config.unit_id}
        return {}
