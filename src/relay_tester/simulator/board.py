"""
Relay Board Firmware Model
==========================

Behavioural model of the relay board firmware, operating directly on a
pymodbus device context (the same datastore the TCP server serves).

Each tick reproduces one pass of the firmware main loop:

0. Emergency stop (highest priority): all outputs off, manual coils and
   durations cleared, armed and running state dropped, stop coil reset.
1. Arming: every set arm coil latches the relay as armed and is reset.
2. Global trigger: every armed, idle relay starts a timed run using its
   duration register; its manual coil is set and it is disarmed.
3. Timed runs end once their duration has elapsed. Relays not in a timed
   run follow their manual coil.
4. The any-relay-on coil mirrors the OR of all outputs.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
import time
from typing import Callable, List, Optional

from ..modbus.protocols import RelayBoardEncoder
from ..modbus.register_map import (
    COIL_ANY_RELAY_ON_ADDR,
    COIL_ARM_RELAY_START_ADDR,
    COIL_EMERGENCY_STOP_ADDR,
    COIL_GLOBAL_TRIGGER_ADDR,
    COIL_MANUAL_START_ADDR,
    HREG_DEVICE_NAME_LEN,
    HREG_DEVICE_NAME_START_ADDR,
    HREG_DURATION_START_ADDR,
    HREG_FIRMWARE_VERSION_ADDR,
    HREG_SERIAL_NUMBER_START_ADDR,
    RELAY_COUNT,
)

logger = logging.getLogger(__name__)

# pymodbus function codes used to address the datastore tables
FC_COILS = 1
FC_HOLDING = 3


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class RelayBoardFirmware:
    """
    Firmware state machine for RELAY_COUNT relays.

    Args:
        device: pymodbus ModbusDeviceContext holding coils and registers
        clock: Millisecond clock, monotonic by default
    """

    def __init__(self, device, clock: Callable[[], int] = _monotonic_ms):
        self.device = device
        self.clock = clock

        # Physical relay outputs
        self.outputs: List[bool] = [False] * RELAY_COUNT

        # Internal firmware state (not exposed over Modbus)
        self.armed: List[bool] = [False] * RELAY_COUNT
        self.in_timed_run: List[bool] = [False] * RELAY_COUNT
        self.run_start_ms: List[int] = [0] * RELAY_COUNT
        self.run_duration_ms: List[int] = [0] * RELAY_COUNT

    # ------------------------------------------------------------------
    # Datastore helpers
    # ------------------------------------------------------------------

    def _coil(self, address: int) -> bool:
        return bool(self.device.getValues(FC_COILS, address, 1)[0])

    def _set_coil(self, address: int, value: bool):
        self.device.setValues(FC_COILS, address, [bool(value)])

    def _hreg(self, address: int) -> int:
        return int(self.device.getValues(FC_HOLDING, address, 1)[0])

    def _set_hreg(self, address: int, value: int):
        self.device.setValues(FC_HOLDING, address, [int(value)])

    def load_identity(self, version: int, name: str, serial: int):
        """Populate firmware version, device name and serial number registers."""
        encoder = RelayBoardEncoder()

        self._set_hreg(HREG_FIRMWARE_VERSION_ADDR, version)
        self.device.setValues(
            FC_HOLDING,
            HREG_DEVICE_NAME_START_ADDR,
            encoder.encode_device_name(name, HREG_DEVICE_NAME_LEN),
        )
        self.device.setValues(
            FC_HOLDING,
            HREG_SERIAL_NUMBER_START_ADDR,
            list(encoder.encode_serial_number(serial)),
        )

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def tick(self, now_ms: Optional[int] = None):
        """Run one pass of the firmware loop."""
        now = self.clock() if now_ms is None else now_ms

        if self._coil(COIL_EMERGENCY_STOP_ADDR):
            self._emergency_stop()
            return

        self._latch_arm_commands()

        if self._coil(COIL_GLOBAL_TRIGGER_ADDR):
            self._start_armed_relays(now)
            self._set_coil(COIL_GLOBAL_TRIGGER_ADDR, False)

        for i in range(RELAY_COUNT):
            if self.in_timed_run[i]:
                if now - self.run_start_ms[i] >= self.run_duration_ms[i]:
                    self.outputs[i] = False
                    self._set_coil(COIL_MANUAL_START_ADDR + i, False)
                    self.in_timed_run[i] = False
                    logger.info(f"Relay {i} timed run finished")
            else:
                self.outputs[i] = self._coil(COIL_MANUAL_START_ADDR + i)

        self._set_coil(COIL_ANY_RELAY_ON_ADDR, any(self.outputs))

    def _emergency_stop(self):
        logger.warning("Emergency stop: all relays off")
        for i in range(RELAY_COUNT):
            self.outputs[i] = False
            self._set_coil(COIL_MANUAL_START_ADDR + i, False)
            self._set_hreg(HREG_DURATION_START_ADDR + i, 0)
            self.in_timed_run[i] = False
            self.armed[i] = False
        self._set_coil(COIL_EMERGENCY_STOP_ADDR, False)

    def _latch_arm_commands(self):
        for i in range(RELAY_COUNT):
            if self._coil(COIL_ARM_RELAY_START_ADDR + i):
                self.armed[i] = True
                self._set_coil(COIL_ARM_RELAY_START_ADDR + i, False)
                logger.info(f"Relay {i} armed")

    def _start_armed_relays(self, now: int):
        for i in range(RELAY_COUNT):
            if self.armed[i] and not self.in_timed_run[i]:
                self.in_timed_run[i] = True
                self.run_start_ms[i] = now
                self.run_duration_ms[i] = self._hreg(HREG_DURATION_START_ADDR + i)

                self.outputs[i] = True
                self._set_coil(COIL_MANUAL_START_ADDR + i, True)
                self.armed[i] = False
                logger.info(
                    f"Relay {i} started for {self.run_duration_ms[i]} ms"
                )
