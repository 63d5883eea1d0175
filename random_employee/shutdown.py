"""
random-employee - Shutdown Coordination

Records whether an explicit shutdown request (`GET /shutdown`) was seen
before the process received a termination signal.

The coordinator is a plain object shared by reference between the HTTP
handler and the server's signal handling. It has exactly two states and
one transition:

    NOT_CALLED --mark_requested()--> CALLED

A termination signal only reports the current state; it never changes it.
Whether `/shutdown` should itself drain and stop the server is still an
open requirement, so the request is observed and logged but the process
keeps serving until it is signalled.
"""

import signal
from enum import Enum
from types import FrameType
from typing import Optional

import uvicorn

from random_employee.observability.logging import get_logger
from random_employee.observability.metrics import increment_counter

logger = get_logger(__name__)


class ShutdownState(str, Enum):
    """Observed shutdown request state."""

    NOT_CALLED = "not-called"
    CALLED = "called"


class ShutdownCoordinator:
    """Shared record of explicit shutdown requests."""

    def __init__(self) -> None:
        self._state = ShutdownState.NOT_CALLED

    @property
    def state(self) -> ShutdownState:
        return self._state

    def mark_requested(self) -> None:
        """Record an explicit shutdown request. Safe to call repeatedly."""
        increment_counter("shutdown_requests_total")
        if self._state is ShutdownState.CALLED:
            return
        self._state = ShutdownState.CALLED
        logger.info("shutdown_requested", shutdown_state=self._state.value)

    def was_requested(self) -> bool:
        return self._state is ShutdownState.CALLED


class ServiceServer(uvicorn.Server):
    """uvicorn server that reports the shutdown state on termination signals."""

    def __init__(self, config: uvicorn.Config, coordinator: ShutdownCoordinator):
        super().__init__(config)
        self.coordinator = coordinator

    def handle_exit(self, sig: int, frame: Optional[FrameType]) -> None:
        try:
            sig_name = signal.Signals(sig).name
        except ValueError:
            sig_name = str(sig)
        logger.info(
            "termination_signal_received",
            signal=sig_name,
            shutdown_state=self.coordinator.state.value,
        )
        super().handle_exit(sig, frame)


__all__ = ["ShutdownState", "ShutdownCoordinator", "ServiceServer"]
