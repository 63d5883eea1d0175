"""Startup sequencing: delay, bind, serve, then signal readiness.

The sequence is strictly ordered:

0. Remove any readiness file left over from an earlier run.
1. Cooperative sleep for `startup_delay_ms` (other tasks keep running).
   SIGTERM during the delay is logged with the shutdown state, then the
   signal is re-delivered with its default disposition.
2. Bind and listen on the configured port. The socket is created here
   rather than inside uvicorn so that an occupied port surfaces as a
   `BindError` before anything else happens. There is no retry.
3. Hand the listening socket to uvicorn and wait until it reports
   `started`, i.e. it is accepting connections.
4. Write the readiness file exactly once.

`run()` is the join point used by the process entry: startup failures
propagate out of it instead of being lost in a background task.

Usage:
    sequencer = StartupSequencer(settings, app, coordinator)
    asyncio.run(sequencer.run())
"""

import asyncio
import signal
import socket
import time
from pathlib import Path
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI

from random_employee.config import Settings
from random_employee.errors import BindError, PersistenceError, StartupError
from random_employee.observability.logging import get_logger
from random_employee.observability.metrics import set_gauge
from random_employee.readiness import ResourceSnapshot, clear_readiness, write_readiness
from random_employee.shutdown import ServiceServer, ShutdownCoordinator

logger = get_logger(__name__)

LISTEN_BACKLOG = 2048


class StartupSequencer:
    """Owns the listening socket and the server task for one process run."""

    def __init__(
        self,
        settings: Settings,
        app: FastAPI,
        coordinator: ShutdownCoordinator,
        readiness_writer: Callable[[Path], ResourceSnapshot] = write_readiness,
        poll_interval: float = 0.01,
    ):
        self.settings = settings
        self.app = app
        self.coordinator = coordinator
        self.poll_interval = poll_interval
        self.server: Optional[ServiceServer] = None
        self.bound_at: Optional[float] = None
        self.bound_port: Optional[int] = None
        self.snapshot: Optional[ResourceSnapshot] = None
        self._readiness_writer = readiness_writer
        self._sock: Optional[socket.socket] = None
        self._serve_task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Run steps 1-4 of the startup sequence.

        Raises:
            BindError: the port could not be bound
            StartupError: the server stopped before accepting connections
            PersistenceError: the readiness file could not be written
        """
        if self._serve_task is not None:
            raise StartupError("Startup sequence has already been run")

        clear_readiness(self.settings.readiness_file)

        delay = self.settings.startup_delay_seconds
        set_gauge("startup_delay_seconds", delay)
        logger.info("startup_delay_started", delay_ms=self.settings.startup_delay_ms)
        installed = self._install_signal_handlers()
        try:
            await asyncio.sleep(delay)
        finally:
            self._remove_signal_handlers(installed)

        self._sock = self._bind()
        self.bound_at = time.monotonic()
        self.bound_port = self._sock.getsockname()[1]
        logger.info(
            "listener_bound",
            host=self.settings.listen_host,
            port=self.bound_port,
        )

        config = uvicorn.Config(
            self.app,
            host=self.settings.listen_host,
            port=self.settings.listen_port,
            log_config=None,
            timeout_graceful_shutdown=self.settings.graceful_shutdown_timeout_s,
        )
        self.server = ServiceServer(config, self.coordinator)
        self._serve_task = asyncio.create_task(self.server.serve(sockets=[self._sock]))
        await self._wait_started()
        logger.info("application_running", port=self.bound_port)

        try:
            self.snapshot = await asyncio.to_thread(
                self._readiness_writer, self.settings.readiness_file
            )
        except PersistenceError:
            self.request_exit()
            await asyncio.gather(self._serve_task, return_exceptions=True)
            self._close_socket()
            raise
        set_gauge("readiness_written", 1)

    async def wait_closed(self) -> None:
        """Wait for the server to finish shutting down."""
        if self._serve_task is None:
            return
        try:
            await self._serve_task
        finally:
            self._close_socket()
            logger.info(
                "server_stopped",
                shutdown_state=self.coordinator.state.value,
            )

    def request_exit(self) -> None:
        """Ask the server to stop accepting and drain open connections."""
        if self.server is not None:
            self.server.should_exit = True

    async def run(self) -> None:
        """Start the service and block until it stops."""
        await self.start()
        await self.wait_closed()

    def _bind(self) -> socket.socket:
        host = self.settings.listen_host
        port = self.settings.listen_port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(LISTEN_BACKLOG)
        except OSError as exc:
            sock.close()
            logger.error("listener_bind_failed", host=host, port=port, error=str(exc))
            raise BindError(
                message=f"Cannot listen on {host}:{port}",
                host=host,
                port=port,
                error_details=str(exc),
            ) from exc
        return sock

    def _install_signal_handlers(self) -> bool:
        """Observe SIGTERM until uvicorn installs its own handlers."""
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(
                signal.SIGTERM, self._handle_startup_signal, signal.SIGTERM
            )
        except (NotImplementedError, RuntimeError, ValueError) as exc:
            # Not on the main thread, or no signal support in this loop
            logger.warning("startup_signal_handler_unavailable", error=str(exc))
            return False
        return True

    def _remove_signal_handlers(self, installed: bool) -> None:
        if installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGTERM)

    def _handle_startup_signal(self, sig: signal.Signals) -> None:
        logger.info(
            "termination_signal_received",
            signal=sig.name,
            shutdown_state=self.coordinator.state.value,
            phase="startup_delay",
        )
        # Default disposition, as after uvicorn's graceful shutdown
        self._remove_signal_handlers(True)
        signal.raise_signal(sig)

    async def _wait_started(self) -> None:
        if self.server is None or self._serve_task is None:
            raise StartupError("Server has not been launched")
        while not self.server.started:
            if self._serve_task.done():
                self._close_socket()
                cause = None
                if not self._serve_task.cancelled():
                    cause = self._serve_task.exception()
                raise StartupError(
                    "Server stopped before it started accepting connections"
                ) from cause
            await asyncio.sleep(self.poll_interval)

    def _close_socket(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


__all__ = ["StartupSequencer"]
