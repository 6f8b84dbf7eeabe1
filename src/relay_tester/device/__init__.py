"""
Relay Board Device Package
==========================

Domain operations on the remote relay bank.

Components:
- relays.py: Relay status, manual control, arming, trigger, emergency stop
- info.py: Firmware version, device name and serial number query

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"

from .info import DeviceInfo, read_device_info
from .relays import (
    MAX_DURATION_MS,
    RelayBoard,
    RelayStatus,
    validate_duration,
    validate_relay_index,
    validate_relay_state,
)

__all__ = [
    "DeviceInfo",
    "read_device_info",
    "RelayBoard",
    "RelayStatus",
    "MAX_DURATION_MS",
    "validate_duration",
    "validate_relay_index",
    "validate_relay_state",
]
