"""
Relay Board Register Map
========================

Defines the mapping between relay board concepts and Modbus addresses.

This module contains ONLY the address layout - it does not:
- Talk to the device
- Encode or decode values
- Validate operator input

Per-relay quantities live in contiguous blocks of RELAY_COUNT points, so the
address of relay i is always ``base + i``.

Coils (FC 01/05):
- 0-7:   manual relay state
- 20-27: arm flag
- 30:    global trigger
- 40:    any relay on (status, written by the device)
- 60:    emergency stop

Holding Registers (FC 03/06):
- 100-107: armed run duration [ms]
- 500:     firmware version (major*100 + minor*10 + patch)
- 501-510: device name, two ASCII characters per register
- 511-512: serial number, high word first

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from dataclasses import dataclass
from typing import List, Optional
from enum import IntEnum


RELAY_COUNT = 8

# Coils
COIL_MANUAL_START_ADDR = 0
COIL_ARM_RELAY_START_ADDR = 20
COIL_GLOBAL_TRIGGER_ADDR = 30
COIL_ANY_RELAY_ON_ADDR = 40
COIL_EMERGENCY_STOP_ADDR = 60

# Holding registers
HREG_DURATION_START_ADDR = 100
HREG_FIRMWARE_VERSION_ADDR = 500
HREG_DEVICE_NAME_START_ADDR = 501
HREG_DEVICE_NAME_LEN = 10
HREG_SERIAL_NUMBER_START_ADDR = 511
HREG_SERIAL_NUMBER_LEN = 2


class RegisterType(IntEnum):
    """Modbus tables used by the relay board."""

    COIL = 0  # Discrete output (read/write)
    HOLDING_REGISTER = 4  # 16-bit word (read/write)


@dataclass
class RegisterDefinition:
    """
    Definition of a block of consecutive coils or holding registers.

    Attributes:
        address: Starting address (0-based)
        name: Human-readable identifier
        register_type: Coil or holding register
        data_type: 'bool', 'uint16', 'version', 'ascii' or 'uint32'
        count: Number of consecutive points in the block
        units: Physical units (e.g. 'ms')
        description: What this block represents
        read_only: Whether the tester only ever reads this block
    """

    address: int
    name: str
    register_type: RegisterType
    data_type: str
    count: int
    units: str
    description: str
    read_only: bool = False

    def validate(self):
        """Validate register definition."""
        if self.count < 1:
            raise ValueError(f"Register block {self.name} must hold at least one point")

        if self.address < 0 or self.end_address > 65535:
            raise ValueError(
                f"Register block {self.name} [{self.address}-{self.end_address}] "
                f"out of range [0, 65535]"
            )

        if self.data_type not in ["bool", "uint16", "version", "ascii", "uint32"]:
            raise ValueError(f"Unknown data type: {self.data_type}")

        if self.register_type == RegisterType.COIL and self.data_type != "bool":
            raise ValueError(f"Coil block {self.name} must be boolean")

    @property
    def end_address(self) -> int:
        """Last address occupied by this block."""
        return self.address + self.count - 1

    def address_of(self, offset: int) -> int:
        """Address of the point at ``offset`` within the block."""
        if not 0 <= offset < self.count:
            raise IndexError(f"Offset {offset} outside {self.name} (count={self.count})")
        return self.address + offset


class RelayBoardRegisterMap:
    """
    Complete Modbus address layout of the 8-channel relay board.

    It only defines WHERE data lives in the Modbus address space; reading,
    writing and decoding are done by the caller.
    """

    def __init__(self):
        """Initialize register map with the firmware layout."""
        self.coils: List[RegisterDefinition] = []
        self.holding_registers: List[RegisterDefinition] = []

        self._define_coils()
        self._define_holding_registers()

    def _define_coils(self):
        """Define coils (single-bit read/write points)."""
        self.coils.extend(
            [
                RegisterDefinition(
                    address=COIL_MANUAL_START_ADDR,
                    name="relay_manual",
                    register_type=RegisterType.COIL,
                    data_type="bool",
                    count=RELAY_COUNT,
                    units="",
                    description="Relay output state (True=ON, False=OFF)",
                ),
                RegisterDefinition(
                    address=COIL_ARM_RELAY_START_ADDR,
                    name="relay_arm",
                    register_type=RegisterType.COIL,
                    data_type="bool",
                    count=RELAY_COUNT,
                    units="",
                    description="Arm relay for the next global trigger",
                ),
                RegisterDefinition(
                    address=COIL_GLOBAL_TRIGGER_ADDR,
                    name="global_trigger",
                    register_type=RegisterType.COIL,
                    data_type="bool",
                    count=1,
                    units="",
                    description="Start all armed relays",
                ),
                RegisterDefinition(
                    address=COIL_ANY_RELAY_ON_ADDR,
                    name="any_relay_on",
                    register_type=RegisterType.COIL,
                    data_type="bool",
                    count=1,
                    units="",
                    description="At least one relay output is energized",
                    read_only=True,
                ),
                RegisterDefinition(
                    address=COIL_EMERGENCY_STOP_ADDR,
                    name="emergency_stop",
                    register_type=RegisterType.COIL,
                    data_type="bool",
                    count=1,
                    units="",
                    description="Switch all relays off and clear armed state",
                ),
            ]
        )

    def _define_holding_registers(self):
        """Define holding registers (16-bit words)."""
        self.holding_registers.extend(
            [
                RegisterDefinition(
                    address=HREG_DURATION_START_ADDR,
                    name="relay_duration",
                    register_type=RegisterType.HOLDING_REGISTER,
                    data_type="uint16",
                    count=RELAY_COUNT,
                    units="ms",
                    description="Run duration applied when an armed relay is triggered",
                ),
                RegisterDefinition(
                    address=HREG_FIRMWARE_VERSION_ADDR,
                    name="firmware_version",
                    register_type=RegisterType.HOLDING_REGISTER,
                    data_type="version",
                    count=1,
                    units="",
                    description="Firmware version packed as major*100+minor*10+patch",
                    read_only=True,
                ),
                RegisterDefinition(
                    address=HREG_DEVICE_NAME_START_ADDR,
                    name="device_name",
                    register_type=RegisterType.HOLDING_REGISTER,
                    data_type="ascii",
                    count=HREG_DEVICE_NAME_LEN,
                    units="",
                    description="Device name, 2 chars per register, zero padded",
                    read_only=True,
                ),
                RegisterDefinition(
                    address=HREG_SERIAL_NUMBER_START_ADDR,
                    name="serial_number",
                    register_type=RegisterType.HOLDING_REGISTER,
                    data_type="uint32",
                    count=HREG_SERIAL_NUMBER_LEN,
                    units="",
                    description="Serial number, high word first",
                    read_only=True,
                ),
            ]
        )

    def validate(self):
        """Validate all register definitions and check for conflicts."""
        for reg in self.coils + self.holding_registers:
            reg.validate()

        self._check_address_conflicts(self.coils, "Coils")
        self._check_address_conflicts(self.holding_registers, "Holding registers")

    def _check_address_conflicts(
        self, registers: List[RegisterDefinition], type_name: str
    ):
        """Check for overlapping register blocks."""
        ordered = sorted(registers, key=lambda reg: reg.address)

        for curr, nxt in zip(ordered, ordered[1:]):
            if curr.end_address >= nxt.address:
                raise ValueError(
                    f"{type_name} address conflict: {curr.name} "
                    f"[{curr.address}-{curr.end_address}] overlaps with {nxt.name} "
                    f"[{nxt.address}-{nxt.end_address}]"
                )

    def get_register_by_name(self, name: str) -> Optional[RegisterDefinition]:
        """
        Find register block by name.

        Args:
            name: Register block name

        Returns:
            RegisterDefinition if found, None otherwise
        """
        for reg in self.coils + self.holding_registers:
            if reg.name == name:
                return reg

        return None

    def highest_address(self, register_type: RegisterType) -> int:
        """Highest address used in the given table."""
        registers = (
            self.coils if register_type == RegisterType.COIL else self.holding_registers
        )
        return max((reg.end_address for reg in registers), default=0)

    def print_register_map(self):
        """Print complete register map for documentation."""
        print("=" * 80)
        print("RELAY BOARD REGISTER MAP")
        print("=" * 80)

        print("\nCOILS (Read/Write Discrete Outputs)")
        print("-" * 80)
        print(f"{'Address':<10} {'Name':<18} {'Access':<8} {'Description':<40}")
        print("-" * 80)
        for reg in self.coils:
            print(
                f"{_address_range(reg):<10} {reg.name:<18} "
                f"{_access(reg):<8} {reg.description:<40}"
            )

        print("\nHOLDING REGISTERS (Read/Write Words)")
        print("-" * 80)
        print(
            f"{'Address':<10} {'Name':<18} {'Type':<8} {'Units':<6} {'Description':<34}"
        )
        print("-" * 80)
        for reg in self.holding_registers:
            print(
                f"{_address_range(reg):<10} {reg.name:<18} {reg.data_type:<8} "
                f"{reg.units:<6} {reg.description:<34}"
            )

        print("\n" + "=" * 80)


def _address_range(reg: RegisterDefinition) -> str:
    if reg.count == 1:
        return str(reg.address)
    return f"{reg.address}-{reg.end_address}"


def _access(reg: RegisterDefinition) -> str:
    return "R" if reg.read_only else "R/W"
