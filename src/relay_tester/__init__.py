"""
Modbus Relay Board Tester
=========================

Interactive Modbus/TCP tester for an 8-channel relay board: relay status,
manual switching, timed runs armed for a global trigger, emergency stop and
device identity.

Packages:
- modbus: Register map, encoding/decoding, TCP client
- device: Relay operations and device information query
- simulator: Firmware model and TCP server for testing without hardware

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"
