"""
Relay Control Operations
========================

Domain operations on the relay bank, each expressed as a fixed sequence of
Modbus requests against the register map.

Observed relay lifecycle (the device owns the actual state):

    IDLE --arm_relay--> ARMED --global trigger--> RUNNING --duration--> IDLE

RUNNING is internal to the device. It is visible here only through a
later read_all_relay_status() showing the relay ON.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from ..errors import ValidationError
from ..modbus.protocols import RelayBoardDecoder, RelayBoardEncoder, RelayState
from ..modbus.register_map import (
    COIL_ANY_RELAY_ON_ADDR,
    COIL_EMERGENCY_STOP_ADDR,
    COIL_GLOBAL_TRIGGER_ADDR,
    RELAY_COUNT,
    RelayBoardRegisterMap,
)
from .info import DeviceInfo, read_device_info

logger = logging.getLogger(__name__)

MAX_DURATION_MS = 65535


@dataclass(frozen=True)
class RelayStatus:
    """Snapshot of all relay outputs plus the device's any-on flag."""

    relays: Tuple[RelayState, ...]
    any_relay_on: bool


def validate_relay_index(index: int) -> int:
    """Validate a relay index (0..RELAY_COUNT-1)."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValidationError(f"Relay index must be an integer, got {index!r}")
    if not 0 <= index < RELAY_COUNT:
        raise ValidationError(
            f"Relay index {index} out of range [0, {RELAY_COUNT - 1}]"
        )
    return index


def validate_duration(duration_ms: int) -> int:
    """Validate a run duration (1..65535 ms, one holding register)."""
    if isinstance(duration_ms, bool) or not isinstance(duration_ms, int):
        raise ValidationError(f"Duration must be an integer, got {duration_ms!r}")
    if not 0 < duration_ms <= MAX_DURATION_MS:
        raise ValidationError(
            f"Duration {duration_ms} ms out of range [1, {MAX_DURATION_MS}]"
        )
    return duration_ms


def validate_relay_state(state) -> RelayState:
    """Validate a relay state (RelayState, 0/1 or bool)."""
    if not isinstance(state, int):
        raise ValidationError(f"Relay state must be ON or OFF, got {state!r}")
    try:
        return RelayState(state)
    except ValueError:
        raise ValidationError(
            f"Relay state must be ON or OFF, got {state!r}"
        ) from None


class RelayBoard:
    """
    Relay bank operations over an injected transport.

    The transport (normally a connected RelayBoardClient) is owned by the
    caller. Nothing read from the device is cached.
    """

    def __init__(self, transport):
        self.transport = transport
        self.encoder = RelayBoardEncoder()
        self.decoder = RelayBoardDecoder()

        reg_map = RelayBoardRegisterMap()
        self._manual = reg_map.get_register_by_name("relay_manual")
        self._arm = reg_map.get_register_by_name("relay_arm")
        self._duration = reg_map.get_register_by_name("relay_duration")

    def read_all_relay_status(self) -> RelayStatus:
        """
        Read every relay output and the any-relay-on flag.

        Raises:
            TransportError: If either read fails (no partial status)
        """
        raw = self.transport.read_coils(self._manual.address, self._manual.count)
        any_on = self.transport.read_coils(COIL_ANY_RELAY_ON_ADDR, 1)

        return RelayStatus(
            relays=tuple(self.decoder.decode_coil_array(raw)),
            any_relay_on=bool(any_on[0]),
        )

    def set_relay_manual(self, index: int, state: RelayState):
        """
        Switch one relay on or off.

        Raises:
            ValidationError: Index or state invalid (nothing is written)
            TransportError: Write failed
        """
        validate_relay_index(index)
        state = validate_relay_state(state)

        logger.info(f"Setting relay {index} to {state.name}")
        self.transport.write_coil(
            self._manual.address_of(index), self.encoder.encode_relay_state(state)
        )

    def arm_relay(self, index: int, duration_ms: int):
        """
        Configure a relay's run duration and arm it for the global trigger.

        The duration register is written first and the arm flag second, so
        the device never sees an armed relay with a stale duration. If the
        arm write fails after the duration write succeeded, the error is
        raised as-is: the relay stays unarmed with its new duration.

        Raises:
            ValidationError: Index or duration out of range (nothing is written)
            TransportError: Either write failed
        """
        validate_relay_index(index)
        validate_duration(duration_ms)

        logger.info(f"Setting duration for relay {index} to {duration_ms} ms")
        self.transport.write_register(
            self._duration.address_of(index), self.encoder.encode_duration(duration_ms)
        )

        logger.info(f"Arming relay {index}")
        self.transport.write_coil(self._arm.address_of(index), True)

    def execute_global_trigger(self):
        """Start all relays currently armed on the device."""
        logger.info("Sending global trigger")
        self.transport.write_coil(COIL_GLOBAL_TRIGGER_ADDR, True)

    def emergency_stop(self):
        """Switch all relays off and clear durations and armed state."""
        logger.warning("Sending emergency stop")
        self.transport.write_coil(COIL_EMERGENCY_STOP_ADDR, True)

    def read_relay_durations(self) -> List[int]:
        """Read the configured run duration [ms] of every relay."""
        regs = self.transport.read_holding_registers(
            self._duration.address, self._duration.count
        )
        return [self.decoder.decode_duration(reg) for reg in regs]

    def read_device_info(self) -> DeviceInfo:
        """Read firmware version, device name and serial number."""
        return read_device_info(self.transport)
