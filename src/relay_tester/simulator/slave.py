"""
Relay Board Simulator Server
============================

Modbus/TCP server hosting the relay board firmware model.

The pymodbus server and the firmware tick loop share one asyncio event loop
running in a background thread (or the calling thread when blocking).

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import asyncio
import threading
import logging
from typing import Optional
from dataclasses import dataclass
from contextlib import suppress

# Modern pymodbus 3.x imports
from pymodbus import ModbusDeviceIdentification
from pymodbus.server import StartAsyncTcpServer, ServerAsyncStop
from pymodbus.datastore import (
    ModbusSequentialDataBlock,
    ModbusDeviceContext,
    ModbusServerContext,
)

from ..modbus.register_map import RelayBoardRegisterMap, RegisterType
from .board import RelayBoardFirmware

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """Configuration for the simulated relay board."""

    host: str = "127.0.0.1"
    port: int = 5020
    unit_id: int = 1

    # Identity registers
    firmware_version: int = 101  # v1.0.1
    device_name: str = "ESP32 Relay Board"
    serial_number: int = 1234567

    # Firmware loop period
    tick_interval_sec: float = 0.01

    # Server identification
    vendor_name: str = "Relay Tester"
    product_code: str = "RB-8"
    product_name: str = "8-Channel Relay Board Simulator"
    model_name: str = "Virtual Relay Board"
    version: str = "1.0.1"

    # Timeouts
    startup_timeout_sec: float = 5.0
    shutdown_timeout_sec: float = 3.0


class RelayBoardSlave:
    """
    Modbus TCP slave serving a simulated relay board.
    """

    def __init__(
        self,
        register_map: Optional[RelayBoardRegisterMap] = None,
        config: Optional[SimulatorConfig] = None,
    ):
        """Initialize simulator server (does not open the socket)."""

        self.register_map = register_map or RelayBoardRegisterMap()
        self.register_map.validate()
        self.config = config or SimulatorConfig()

        self._create_data_blocks()

        self.device = ModbusDeviceContext(co=self.co_block, hr=self.hr_block)
        self.context = ModbusServerContext(
            devices={self.config.unit_id: self.device}, single=False
        )

        self.firmware = RelayBoardFirmware(self.device)
        self.firmware.load_identity(
            self.config.firmware_version,
            self.config.device_name,
            self.config.serial_number,
        )

        self.identity = ModbusDeviceIdentification()
        self.identity.VendorName = self.config.vendor_name
        self.identity.ProductCode = self.config.product_code
        self.identity.ProductName = self.config.product_name
        self.identity.ModelName = self.config.model_name
        self.identity.MajorMinorRevision = self.config.version

        # Lifecycle management
        self.server_thread: Optional[threading.Thread] = None
        self._event_loop: Optional[asyncio.AbstractEventLoop] = None

        # Synchronization
        self._running = threading.Event()
        self._server_ready = threading.Event()
        self._shutdown_requested = threading.Event()

        logger.info(
            f"Relay board simulator initialized: {self.config.host}:{self.config.port}, "
            f"unit_id={self.config.unit_id}"
        )

    def _create_data_blocks(self):
        """Create Modbus data blocks large enough for the register map."""
        max_co_addr = self.register_map.highest_address(RegisterType.COIL)
        max_hr_addr = self.register_map.highest_address(RegisterType.HOLDING_REGISTER)

        co_size = max(max_co_addr + 10, 100)
        hr_size = max(max_hr_addr + 10, 600)

        self.co_block = ModbusSequentialDataBlock(0, [False] * co_size)
        self.hr_block = ModbusSequentialDataBlock(0, [0] * hr_size)

    def start(self, blocking: bool = True):
        """
        Start the simulator.

        Args:
            blocking: If True, block until the server stops
                     If False, run in background thread
        """
        if self._running.is_set():
            logger.warning("Simulator already running")
            return

        self._running.set()
        self._server_ready.clear()
        self._shutdown_requested.clear()

        if blocking:
            self._run_server()
        else:
            self.server_thread = threading.Thread(
                target=self._run_server, daemon=True, name="RelayBoardSimulator"
            )
            self.server_thread.start()

            if not self._server_ready.wait(timeout=self.config.startup_timeout_sec):
                self._running.clear()
                raise RuntimeError("Server startup timeout")

            if not self._running.is_set():
                raise RuntimeError("Server failed to start")

            logger.info(
                f"Simulator listening on {self.config.host}:{self.config.port}"
            )

    def _run_server(self):
        """Run server and firmware loop on a private event loop."""
        loop = None
        try:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._event_loop = loop

            loop.run_until_complete(self._async_run_server())

        except Exception as e:
            logger.error(f"Simulator error: {type(e).__name__}: {e}")
            self._running.clear()

        finally:
            # Signal ready even on error (to unblock waiting threads)
            self._server_ready.set()

            if loop and not loop.is_closed():
                pending = asyncio.all_tasks(loop)
                for task in pending:
                    task.cancel()

                with suppress(Exception):
                    loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )

                loop.close()

            self._event_loop = None

    async def _async_run_server(self):
        """Serve Modbus requests and tick the firmware until stopped."""
        server_task = asyncio.create_task(
            StartAsyncTcpServer(
                context=self.context,
                identity=self.identity,
                address=(self.config.host, self.config.port),
            )
        )
        self._server_ready.set()

        try:
            while not self._shutdown_requested.is_set():
                if server_task.done():
                    # Surfaces bind errors raised by the server task
                    server_task.result()
                    break
                self.firmware.tick()
                await asyncio.sleep(self.config.tick_interval_sec)
        finally:
            with suppress(Exception):
                await ServerAsyncStop()
            server_task.cancel()
            with suppress(asyncio.CancelledError):
                await server_task

    def stop(self):
        """Stop the simulator (graceful shutdown)."""
        if not self._running.is_set():
            return

        self._shutdown_requested.set()
        self._running.clear()

        if self.server_thread and self.server_thread.is_alive():
            self.server_thread.join(timeout=self.config.shutdown_timeout_sec)

            if self.server_thread.is_alive():
                logger.warning("Simulator thread did not terminate cleanly")

        logger.info("Simulator stopped")

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running.is_set()
