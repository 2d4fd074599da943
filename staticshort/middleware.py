"""
Middleware for observability features.
"""
import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import structlog

UNMATCHED_PATH = "<unmatched>"


def route_path(request: Request) -> str:
    """Path template of the route that handled ``request``, if any."""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_PATH)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add correlation IDs to request logs.

    - Extracts correlation ID from X-Correlation-ID header if present
    - Generates new UUID if not present
    - Binds correlation ID to structlog context
    - Echoes the header back only when the client sent it, so identical
      requests keep getting identical responses
    """

    async def dispatch(self, request: Request, call_next):
        supplied = request.headers.get("x-correlation-id")
        correlation_id = supplied or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            http_method=request.method,
            http_path=request.url.path,
        )

        response = await call_next(request)

        if supplied:
            response.headers["x-correlation-id"] = supplied

        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP metrics for Prometheus.

    - Records request count by method, route path, status
    - Records request duration histogram
    - Tracks active requests

    Requests that match no route are labelled "<unmatched>" so arbitrary
    paths cannot grow the label set.
    """

    def __init__(self, app, metrics, metrics_path: str | None = None):
        super().__init__(app)
        self.metrics = metrics
        self.metrics_path = metrics_path

    async def dispatch(self, request: Request, call_next):
        # Skip metrics endpoint to avoid recursion
        if self.metrics_path and request.url.path == self.metrics_path:
            return await call_next(request)

        active = self.metrics.active_requests()
        active.inc()
        start_time = time.perf_counter()
        logger = structlog.get_logger()

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            self.metrics.http_requests_total.labels(
                service=self.metrics.service_name,
                method=request.method,
                path=route_path(request),
                status=500,
            ).inc()
            logger.error(
                "http.request_error",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration * 1000, 2),
            )
            raise
        finally:
            active.dec()

        duration = time.perf_counter() - start_time
        path = route_path(request)

        self.metrics.http_requests_total.labels(
            service=self.metrics.service_name,
            method=request.method,
            path=path,
            status=response.status_code,
        ).inc()

        self.metrics.http_request_duration.labels(
            service=self.metrics.service_name,
            method=request.method,
            path=path,
        ).observe(duration)

        logger.info(
            "http.request",
            http_status=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        return response
