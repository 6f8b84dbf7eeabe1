"""
Relay Board Simulator Package
=============================

Firmware behaviour model of the 8-channel relay board.

Components:
- board.py: Firmware loop operating on the Modbus datastore
- slave.py: Modbus TCP server hosting the datastore and the firmware loop

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"

from .board import RelayBoardFirmware
from .slave import RelayBoardSlave, SimulatorConfig

__all__ = [
    "RelayBoardFirmware",
    "RelayBoardSlave",
    "SimulatorConfig",
]
