"""FastAPI application for the random-employee service.

Endpoints:
- GET /health: liveness check, always `"ok"` while the process serves
- GET /shutdown: records an explicit shutdown request, answers `closing`
- GET /metrics: Prometheus metrics
- <api_prefix>/employees: employee resource router

Readiness is not an endpoint: it is signalled by the `service-ready` file
written by the startup sequencer once the listener is accepting.

Usage:
    settings = load_config()
    app = create_app(settings, ShutdownCoordinator())
"""

import time
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from random_employee import __version__
from random_employee.api.employees import EmployeeStore, router as employee_router
from random_employee.config import Settings
from random_employee.observability.logging import (
    clear_correlation_id,
    get_logger,
    set_correlation_id,
)
from random_employee.observability.metrics import (
    get_metrics_content_type,
    get_metrics_output,
    increment_counter,
    record_histogram,
)
from random_employee.shutdown import ShutdownCoordinator

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(
    settings: Settings,
    coordinator: ShutdownCoordinator,
    store: Optional[EmployeeStore] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Resolved service settings
        coordinator: Shutdown coordinator shared with the server
        store: Employee store (a seeded one is created if omitted)

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title="random-employee",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.shutdown_coordinator = coordinator
    app.state.employee_store = store if store is not None else EmployeeStore()

    @app.middleware("http")
    async def request_context(request: Request, call_next) -> Response:
        """Attach a correlation ID and record request metrics."""
        correlation_id = set_correlation_id(request.headers.get(REQUEST_ID_HEADER))
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()

        elapsed = time.perf_counter() - start
        route = request.scope.get("route")
        path = getattr(route, "path", "unmatched")
        increment_counter(
            "http_requests_total",
            labels={
                "method": request.method,
                "path": path,
                "status": str(response.status_code),
            },
        )
        record_histogram(
            "http_request_duration_seconds",
            elapsed,
            labels={"method": request.method, "path": path},
        )
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            latency_ms=round(elapsed * 1000, 3),
            correlation_id=correlation_id,
        )
        response.headers[REQUEST_ID_HEADER] = correlation_id
        return response

    @app.get("/health", response_class=JSONResponse)
    async def health() -> JSONResponse:
        """Liveness check.

        Answers unconditionally while the process is serving; readiness is
        reported separately through the readiness file.
        """
        return JSONResponse(content="ok", status_code=200)

    @app.get("/shutdown", response_class=PlainTextResponse)
    async def shutdown(request: Request) -> PlainTextResponse:
        """Record an explicit shutdown request.

        Idempotent. The server keeps serving until it receives a
        termination signal.
        """
        request.app.state.shutdown_coordinator.mark_requested()
        return PlainTextResponse("closing", status_code=200)

    @app.get("/metrics", response_class=PlainTextResponse)
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=get_metrics_output(),
            media_type=get_metrics_content_type(),
        )

    app.include_router(employee_router, prefix=settings.api_prefix)

    return app


__all__ = ["create_app", "REQUEST_ID_HEADER"]
