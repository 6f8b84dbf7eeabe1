"""
Modbus Interface Package
========================

Modbus/TCP protocol layer for the 8-channel relay board.

This package provides:
- Register mapping (where every relay quantity lives)
- Data encoding/decoding (coils, durations, version, name, serial number)
- A synchronous TCP client used by the tester

It does NOT:
- Decide which operations to run
- Validate operator input
- Simulate the device (see relay_tester.simulator)

Components:
- register_map.py: Address space definition
- protocols.py: Data encoding/decoding
- client.py: Modbus TCP client

Usage Example:
>>> from relay_tester.modbus import RelayBoardClient, ClientConfig
>>> from relay_tester.device import RelayBoard
>>>
>>> with RelayBoardClient(ClientConfig(host="192.168.20.119")) as client:
...     board = RelayBoard(client)
...     board.arm_relay(3, 1500)
...     board.execute_global_trigger()

Dependencies:
- pymodbus: Python Modbus library
  Install: pip install pymodbus

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"

from .register_map import RelayBoardRegisterMap, RegisterDefinition, RegisterType

from .protocols import RelayBoardEncoder, RelayBoardDecoder, RelayState

from .client import RelayBoardClient, ClientConfig

__all__ = [
    # Register mapping
    "RelayBoardRegisterMap",
    "RegisterDefinition",
    "RegisterType",
    # Encoding/decoding
    "RelayBoardEncoder",
    "RelayBoardDecoder",
    "RelayState",
    # Client
    "RelayBoardClient",
    "ClientConfig",
]
