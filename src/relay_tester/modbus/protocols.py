"""
Relay Board Encoding/Decoding
=============================

Data conversion utilities for the relay board register layout.

This module handles ONLY data format conversion:
- Coil bits <-> RelayState
- Duration [ms] <-> holding register
- Packed version word <-> (major, minor, patch)
- Packed ASCII registers <-> device name
- Two registers (high word, low word) <-> 32-bit serial number

No protocol logic and no range checking of operator input.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
import struct
from enum import IntEnum
from typing import List, Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

DEVICE_NAME_MAX_CHARS = 20


class RelayState(IntEnum):
    """Relay output state as stored in a coil."""

    OFF = 0
    ON = 1

    def __str__(self) -> str:
        return self.name


class RelayBoardEncoder:
    """
    Encoder for converting Python values to relay board register format.

    Byte Order: Big-endian (network byte order) - Modbus standard
    """

    @staticmethod
    def encode_relay_state(state: RelayState) -> bool:
        """
        Convert relay state to a coil value.

        Args:
            state: RelayState (or any truthy/falsy value)

        Returns:
            True for ON, False for OFF
        """
        return bool(state)

    @staticmethod
    def encode_duration(duration_ms: int) -> int:
        """
        Convert a run duration to its holding register value.

        The caller guarantees 0 < duration_ms <= 65535.
        """
        return int(duration_ms)

    @staticmethod
    def encode_device_name(name: str, register_count: int = 10) -> List[int]:
        """
        Pack a device name into holding registers.

        Two characters per register, first character in the high byte.
        Names longer than ``2 * register_count`` characters are truncated and
        unused bytes are zero.

        Args:
            name: Device name (latin-1 encodable)
            register_count: Number of registers in the name block

        Returns:
            List of ``register_count`` 16-bit register values
        """
        raw = name.encode("latin-1")[: 2 * register_count]
        raw = raw.ljust(2 * register_count, b"\x00")

        # Reinterpret byte pairs as big-endian 16-bit words
        words = np.frombuffer(raw, dtype=">u2")

        return [int(word) for word in words]

    @staticmethod
    def encode_serial_number(serial: int) -> Tuple[int, int]:
        """
        Split a 32-bit serial number into two registers.

        Returns:
            Tuple of (high word, low word)
        """
        packed = struct.pack(">I", serial)
        high, low = struct.unpack(">HH", packed)

        return high, low


class RelayBoardDecoder:
    """
    Decoder for converting relay board registers to Python values.

    Performs the inverse operations of RelayBoardEncoder.
    """

    @staticmethod
    def decode_coil_array(raw: Union[Sequence[int], np.ndarray]) -> List[RelayState]:
        """
        Convert coil bits to relay states.

        Order is preserved: element i of the result is relay i.
        """
        bits = np.asarray(raw, dtype=bool)

        return [RelayState.ON if bit else RelayState.OFF for bit in bits]

    @staticmethod
    def decode_duration(register: int) -> int:
        """Convert a duration register to milliseconds."""
        return int(register)

    @staticmethod
    def decode_version(register: int) -> Tuple[int, int, int]:
        """
        Convert the packed firmware version word to (major, minor, patch).

        Example:
            >>> RelayBoardDecoder.decode_version(101)
            (1, 0, 1)

        Words outside 0..999 do not encode a three digit version; they decode
        to (0, 0, 0) instead of raising.
        """
        if not 0 <= register <= 999:
            logger.warning(f"Firmware version word {register} outside 0..999")
            return 0, 0, 0

        major = register // 100
        minor = (register % 100) // 10
        patch = register % 10

        return major, minor, patch

    @staticmethod
    def decode_device_name(registers: Sequence[int]) -> str:
        """
        Convert packed name registers to a string.

        Each register holds two characters, high byte first. Zero bytes are
        padding and are dropped wherever they appear; they do NOT terminate
        the name, so embedded padding closes up rather than truncating.
        """
        raw = np.asarray(registers, dtype=">u2").tobytes()

        return bytes(byte for byte in raw if byte != 0).decode("latin-1")

    @staticmethod
    def decode_serial_number(registers: Sequence[int]) -> int:
        """
        Convert two registers to the 32-bit serial number.

        Args:
            registers: [high word, low word]

        Returns:
            Unsigned integer ``(high << 16) | low``
        """
        high, low = registers[0], registers[1]

        packed = struct.pack(">HH", high, low)
        (result,) = struct.unpack(">I", packed)

        return result
