"""
random-employee - Startup Exceptions

This module defines the exception hierarchy for the startup sequence.
Every error here is fatal at the layer that raises it: nothing is retried
and no fallback is attempted. The process entry maps them to non-zero
exit codes.
"""

from pathlib import Path
from typing import Optional


class StartupError(Exception):
    """
    Base exception for all startup failures.

    Also raised directly when the server stops before it reports itself
    as started, which does not fit a more specific category.
    """

    pass


class ConfigError(StartupError):
    """Raised when configuration cannot be loaded or validated."""


class BindError(StartupError):
    """
    Raised when the listening socket cannot be bound (FATAL).

    There is no retry and no fallback port; an operator has to free the
    port or change the configuration.

    Attributes:
        host: Interface the bind was attempted on
        port: Port the bind was attempted on
        error_details: Details from the underlying OSError

    Example:
        >>> raise BindError(
        ...     message="Port 3000 is already in use",
        ...     host="0.0.0.0",
        ...     port=3000,
        ...     error_details="[Errno 98] Address already in use"
        ... )
    """

    def __init__(self, message: str, host: str, port: int, error_details: str):
        """
        Initialize BindError.

        Args:
            message: Human-readable error message
            host: Interface the bind was attempted on
            port: Port the bind was attempted on
            error_details: Technical details about the failure
        """
        super().__init__(message)
        self.host = host
        self.port = port
        self.error_details = error_details


class PersistenceError(StartupError):
    """
    Raised when the readiness file cannot be written (FATAL).

    Orchestration polls for this file, so a failed write must stop the
    service rather than leave it serving without the marker.

    Attributes:
        path: Readiness file path
        error_details: Details about the write failure
    """

    def __init__(
        self,
        message: str,
        path: Path,
        error_details: Optional[str] = None,
    ):
        super().__init__(message)
        self.path = path
        self.error_details = error_details


__all__ = [
    "StartupError",
    "ConfigError",
    "BindError",
    "PersistenceError",
]
