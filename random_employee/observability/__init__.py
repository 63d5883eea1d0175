"""Observability for the random-employee service.

Components:
    - logging: Structured logging with structlog
    - metrics: Prometheus metrics export

Usage:
    from random_employee.observability import get_logger, set_gauge

    logger = get_logger(__name__)
    logger.info("listener_bound", port=3000)

    set_gauge("readiness_written", 1)
"""

from random_employee.observability.logging import get_logger, configure_logging
from random_employee.observability.metrics import (
    increment_counter,
    record_histogram,
    set_gauge,
    get_metrics_registry,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "increment_counter",
    "record_histogram",
    "set_gauge",
    "get_metrics_registry",
]
