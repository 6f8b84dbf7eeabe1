"""
Device Information Query
========================

Reads the identity block of the relay board (firmware version, device name,
serial number) and decodes it into a DeviceInfo record.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from ..modbus.protocols import RelayBoardDecoder
from ..modbus.register_map import (
    HREG_DEVICE_NAME_LEN,
    HREG_DEVICE_NAME_START_ADDR,
    HREG_FIRMWARE_VERSION_ADDR,
    HREG_SERIAL_NUMBER_LEN,
    HREG_SERIAL_NUMBER_START_ADDR,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceInfo:
    """Identity of the connected relay board."""

    firmware_version: Tuple[int, int, int]
    device_name: str
    serial_number: int

    @property
    def version_string(self) -> str:
        major, minor, patch = self.firmware_version
        return f"v{major}.{minor}.{patch}"


def read_device_info(transport) -> DeviceInfo:
    """
    Read and decode the device identity block.

    Three reads are issued in order: version word, name block, serial
    number pair. The first failing read aborts the query; nothing partial is
    returned.

    Args:
        transport: Connected client exposing read_holding_registers()

    Returns:
        DeviceInfo

    Raises:
        TransportError: If any of the reads fails
    """
    decoder = RelayBoardDecoder()

    version_regs = transport.read_holding_registers(HREG_FIRMWARE_VERSION_ADDR, 1)
    name_regs = transport.read_holding_registers(
        HREG_DEVICE_NAME_START_ADDR, HREG_DEVICE_NAME_LEN
    )
    serial_regs = transport.read_holding_registers(
        HREG_SERIAL_NUMBER_START_ADDR, HREG_SERIAL_NUMBER_LEN
    )

    info = DeviceInfo(
        firmware_version=decoder.decode_version(version_regs[0]),
        device_name=decoder.decode_device_name(name_regs),
        serial_number=decoder.decode_serial_number(serial_regs),
    )
    logger.debug(f"Device info: {info}")

    return info
