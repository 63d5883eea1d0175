"""Prometheus-compatible metrics export for the random-employee service.

Metrics:
    - random_employee_http_requests_total: Requests by method, route and status
    - random_employee_http_request_duration_seconds: Request latency by route
    - random_employee_startup_delay_seconds: Configured startup delay
    - random_employee_readiness_written: 1 once the readiness file exists
    - random_employee_shutdown_requests_total: Explicit shutdown requests

Usage:
    from random_employee.observability.metrics import increment_counter, set_gauge

    increment_counter("shutdown_requests_total")
    set_gauge("readiness_written", 1)
"""

from typing import Any, Dict, Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

METRIC_PREFIX = "random_employee_"

# Service-local registry, kept apart from the process-wide default one
_registry = CollectorRegistry()

# HTTP Metrics
http_requests_total = Counter(
    "random_employee_http_requests_total",
    "Total number of HTTP requests by method, route and status",
    ["method", "path", "status"],
    registry=_registry,
)

http_request_duration_seconds = Histogram(
    "random_employee_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "path"],
    registry=_registry,
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, float("inf")),
)

# Lifecycle Metrics
startup_delay_seconds = Gauge(
    "random_employee_startup_delay_seconds",
    "Configured delay before the listener is bound",
    registry=_registry,
)

readiness_written = Gauge(
    "random_employee_readiness_written",
    "Whether the readiness file has been written (1=written, 0=not yet)",
    registry=_registry,
)

shutdown_requests_total = Counter(
    "random_employee_shutdown_requests_total",
    "Total number of explicit shutdown requests",
    registry=_registry,
)


def increment_counter(
    metric_name: str,
    value: float = 1.0,
    labels: Optional[Dict[str, str]] = None,
) -> None:
    """Increment a counter metric.

    Args:
        metric_name: Name of the counter (without random_employee_ prefix)
        value: Amount to increment by (default: 1.0)
        labels: Optional labels as key-value pairs

    Example:
        >>> increment_counter("http_requests_total", labels={"method": "GET", "path": "/health", "status": "200"})
    """
    labels = labels or {}
    metric = _get_metric(metric_name)
    if metric and isinstance(metric, Counter):
        if labels:
            metric.labels(**labels).inc(value)
        else:
            metric.inc(value)


def record_histogram(
    metric_name: str,
    value: float,
    labels: Optional[Dict[str, str]] = None,
) -> None:
    """Record a histogram observation.

    Args:
        metric_name: Name of the histogram (without random_employee_ prefix)
        value: Value to observe
        labels: Optional labels as key-value pairs
    """
    labels = labels or {}
    metric = _get_metric(metric_name)
    if metric and isinstance(metric, Histogram):
        if labels:
            metric.labels(**labels).observe(value)
        else:
            metric.observe(value)


def set_gauge(
    metric_name: str,
    value: float,
    labels: Optional[Dict[str, str]] = None,
) -> None:
    """Set a gauge metric value.

    Args:
        metric_name: Name of the gauge (without random_employee_ prefix)
        value: Value to set
        labels: Optional labels as key-value pairs

    Example:
        >>> set_gauge("startup_delay_seconds", 1.5)
    """
    labels = labels or {}
    metric = _get_metric(metric_name)
    if metric and isinstance(metric, Gauge):
        if labels:
            metric.labels(**labels).set(value)
        else:
            metric.set(value)


def get_metrics_registry() -> CollectorRegistry:
    """Get the service metrics registry."""
    return _registry


def get_metrics_output() -> bytes:
    """Get Prometheus-formatted metrics output."""
    return generate_latest(_registry)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST


def _get_metric(metric_name: str) -> Any:
    """Get metric by name (with or without the random_employee_ prefix)."""
    if metric_name.startswith(METRIC_PREFIX):
        metric_name = metric_name[len(METRIC_PREFIX):]

    return globals().get(metric_name)


__all__ = [
    "increment_counter",
    "record_histogram",
    "set_gauge",
    "get_metrics_registry",
    "get_metrics_output",
    "get_metrics_content_type",
    # Metric objects
    "http_requests_total",
    "http_request_duration_seconds",
    "startup_delay_seconds",
    "readiness_written",
    "shutdown_requests_total",
]
