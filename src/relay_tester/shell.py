"""
Interactive Relay Tester Shell
==============================

Numbered text menu driving the relay board operations.

Every action issues exactly the Modbus requests it needs, prints the result
and returns to the menu. Validation and transport errors are reported once
and the loop continues; nothing is retried.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from typing import Callable

from .device import RelayBoard, validate_duration, validate_relay_index
from .errors import TransportError, ValidationError
from .modbus.protocols import RelayState
from .modbus.register_map import RELAY_COUNT

logger = logging.getLogger(__name__)

EXIT_CHOICES = ("0", "q", "quit", "exit")


def parse_int(text: str, what: str) -> int:
    """Parse operator input as a base-10 integer."""
    try:
        return int(text.strip(), 10)
    except ValueError:
        raise ValidationError(f"Invalid {what}: {text.strip()!r}") from None


def parse_relay_state(text: str) -> RelayState:
    """Parse '1'/'on' or '0'/'off'."""
    value = text.strip().lower()
    if value in ("1", "on"):
        return RelayState.ON
    if value in ("0", "off"):
        return RelayState.OFF
    raise ValidationError(f"Invalid state: {text.strip()!r} (use 1/ON or 0/OFF)")


class RelayTesterShell:
    """
    Menu loop over a RelayBoard.

    Args:
        board: RelayBoard bound to a connected transport
        target: Description of the connected device, shown in the menu header
        input_func: Prompt reader (input() by default)
        output: Line printer (print() by default)
    """

    def __init__(
        self,
        board: RelayBoard,
        target: str = "",
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self.board = board
        self.target = target
        self.input = input_func
        self.output = output

        self.actions = {
            "1": ("Read all relay statuses", self.show_relay_status),
            "2": ("Toggle a relay manually (ON/OFF)", self.toggle_relay),
            "3": ("Configure and arm a relay for a timed run", self.arm_relay),
            "4": ("Execute global trigger (start all armed relays)", self.global_trigger),
            "5": ("Read device information", self.show_device_info),
            "6": ("Read relay durations", self.show_durations),
            "7": ("EMERGENCY STOP (all relays off)", self.emergency_stop),
        }

    def show_menu(self):
        self.output("\n--- Modbus Relay Tester ---")
        if self.target:
            self.output(f"Connected to: {self.target}")
        for key, (label, _) in self.actions.items():
            self.output(f"{key}. {label}")
        self.output("0. Exit")

    def run(self):
        """Loop until the operator chooses to exit (or input ends)."""
        while True:
            self.show_menu()
            try:
                choice = self.input("Enter your choice: ").strip().lower()
            except EOFError:
                choice = "0"

            if choice in EXIT_CHOICES:
                self.output("Exiting...")
                return

            action = self.actions.get(choice)
            if action is None:
                self.output("Invalid choice. Please try again.")
                continue

            try:
                self.dispatch(action[1])
            except EOFError:
                self.output("Exiting...")
                return

    def dispatch(self, handler: Callable[[], None]):
        """Run one menu action, reporting errors."""
        try:
            handler()
        except ValidationError as e:
            self.output(f"Invalid input: {e}")
        except TransportError as e:
            logger.error(f"Modbus request failed: {e}")
            self.output(f"Error: {e}")

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------

    def show_relay_status(self):
        self.output("\nReading current relay status...")
        status = self.board.read_all_relay_status()

        self.output("-" * 33)
        for index, state in enumerate(status.relays):
            self.output(f"Relay {index}: {state.name}")
        self.output("---")
        self.output(
            f"Master Status (Any Relay On): {'ON' if status.any_relay_on else 'OFF'}"
        )
        self.output("-" * 33)

    def _ask_relay_index(self, prompt: str) -> int:
        index = parse_int(self.input(prompt), "relay number")
        return validate_relay_index(index)

    def toggle_relay(self):
        index = self._ask_relay_index(f"Enter relay number (0-{RELAY_COUNT - 1}): ")
        state = parse_relay_state(self.input("Enter state (1 for ON, 0 for OFF): "))

        self.output(f"\nSetting Relay {index} to {state.name}...")
        self.board.set_relay_manual(index, state)
        self.output("Command sent successfully.")

    def arm_relay(self):
        index = self._ask_relay_index(
            f"Enter relay number to arm (0-{RELAY_COUNT - 1}): "
        )
        duration = parse_int(
            self.input("Enter duration in milliseconds for this relay: "), "duration"
        )
        validate_duration(duration)

        self.output(f"\nArming Relay {index} for {duration} ms...")
        self.board.arm_relay(index, duration)
        self.output(f"Relay {index} is ARMED and ready to be triggered.")

    def global_trigger(self):
        self.output("\nSending GLOBAL TRIGGER to start all armed relays...")
        self.board.execute_global_trigger()
        self.output("Global trigger command sent successfully.")

    def show_device_info(self):
        self.output("\nReading device information...")
        info = self.board.read_device_info()

        self.output("-" * 33)
        self.output(f"Device Name:      {info.device_name}")
        self.output(f"Firmware Version: {info.version_string}")
        self.output(f"Serial Number:    {info.serial_number}")
        self.output("-" * 33)

    def show_durations(self):
        durations = self.board.read_relay_durations()

        self.output("-" * 33)
        for index, duration in enumerate(durations):
            self.output(f"Relay {index}: {duration} ms")
        self.output("-" * 33)

    def emergency_stop(self):
        answer = self.input("Really switch ALL relays off? [y/N]: ").strip().lower()
        if answer not in ("y", "yes"):
            self.output("Emergency stop cancelled.")
            return

        self.board.emergency_stop()
        self.output("Emergency stop command sent.")
