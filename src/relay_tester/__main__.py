"""
Relay Tester Entry Point
========================

Command line entry point for the Modbus relay board tester.

Commands:
- shell (default): connect to a relay board and run the interactive menu
- simulate: serve a simulated relay board over Modbus TCP
- map: print the relay board register map

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import argparse
import logging
import signal
import sys
import time
from contextlib import suppress
from typing import List, Optional

from .device import RelayBoard
from .errors import TransportError, ValidationError
from .modbus import ClientConfig, RelayBoardClient, RelayBoardRegisterMap
from .shell import RelayTesterShell
from .simulator import RelayBoardSlave, SimulatorConfig

logger = logging.getLogger(__name__)

COMMANDS = ("shell", "simulate", "map")

# Global running flag for graceful simulator shutdown
running = True


def signal_handler(sig, frame):
    """Handle Ctrl+C for clean shutdown."""
    global running
    logger.info("Shutdown signal received. Stopping simulator...")
    running = False


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )

    parser = argparse.ArgumentParser(
        prog="relay-tester", description="Modbus TCP relay board tester"
    )
    sub = parser.add_subparsers(dest="command")

    shell = sub.add_parser(
        "shell", parents=[common], help="Interactive relay tester (default)"
    )
    shell.add_argument("--host", type=str, default="127.0.0.1", help="Device address")
    shell.add_argument("--port", type=int, default=502, help="Modbus TCP port")
    shell.add_argument("--unit-id", type=int, default=1, help="Modbus unit identifier")
    shell.add_argument(
        "--timeout", type=int, default=5000, help="Request timeout [ms]"
    )

    simulate = sub.add_parser(
        "simulate", parents=[common], help="Serve a simulated relay board"
    )
    simulate.add_argument(
        "--host", type=str, default="127.0.0.1", help="Modbus bind address"
    )
    simulate.add_argument("--port", type=int, default=5020, help="Modbus TCP port")
    simulate.add_argument("--unit-id", type=int, default=1, help="Modbus unit identifier")
    simulate.add_argument(
        "--name", type=str, default="ESP32 Relay Board", help="Device name"
    )
    simulate.add_argument(
        "--serial", type=int, default=1234567, help="Device serial number"
    )
    simulate.add_argument(
        "--firmware-version",
        type=int,
        default=101,
        help="Firmware version word (major*100 + minor*10 + patch)",
    )

    sub.add_parser("map", parents=[common], help="Print the register map")

    return parser


def run_shell(args) -> int:
    try:
        config = ClientConfig(
            host=args.host,
            port=args.port,
            unit_id=args.unit_id,
            timeout_ms=args.timeout,
        )
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    client = RelayBoardClient(config)

    logger.info(f"Attempting to connect to {config.host}:{config.port}...")
    try:
        client.connect()
    except TransportError as e:
        logger.error(f"Connection error: {e}")
        return 1

    try:
        shell = RelayTesterShell(
            RelayBoard(client), target=f"{config.host}:{config.port}"
        )
        shell.run()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        client.close()

    return 0


def run_simulator(args) -> int:
    global running
    running = True

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    config = SimulatorConfig(
        host=args.host,
        port=args.port,
        unit_id=args.unit_id,
        firmware_version=args.firmware_version,
        device_name=args.name,
        serial_number=args.serial,
    )

    slave = RelayBoardSlave(config=config)
    try:
        slave.start(blocking=False)
    except RuntimeError as e:
        logger.error(f"Simulator startup failed: {e}")
        return 1

    logger.info("Press Ctrl+C to stop")
    try:
        while running and slave.is_running:
            time.sleep(0.2)
    finally:
        with suppress(Exception):
            slave.stop()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # 'shell' is the default command
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help")):
        argv.insert(0, "shell")

    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "map":
        reg_map = RelayBoardRegisterMap()
        reg_map.validate()
        reg_map.print_register_map()
        return 0

    if args.command == "simulate":
        return run_simulator(args)

    return run_shell(args)


if __name__ == "__main__":
    sys.exit(main())
