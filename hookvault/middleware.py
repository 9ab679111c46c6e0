"""Request correlation and HTTP metrics middleware."""
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .metrics import Metrics

CORRELATION_HEADER = "x-correlation-id"

log = structlog.get_logger()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Binds a correlation id to the structlog context for each request.

    Reuses the X-Correlation-ID header when present, otherwise generates a
    UUID, and echoes it back on the response.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            http_method=request.method,
            http_path=request.url.path,
        )

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


def route_label(request: Request) -> str:
    """Path template of the matched route, so event ids don't explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Counts and times every request except the /metrics scrape itself."""

    def __init__(self, app, metrics: Metrics):
        super().__init__(app)
        self.metrics = metrics

    def _record(self, request: Request, status: int, elapsed: float) -> None:
        labels = {
            "service": self.metrics.service_name,
            "method": request.method,
            "path": route_label(request),
        }
        self.metrics.http_requests_total.labels(status=status, **labels).inc()
        self.metrics.http_request_duration.labels(**labels).observe(elapsed)

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith("/metrics"):
            return await call_next(request)

        active = self.metrics.http_requests_active.labels(service=self.metrics.service_name)
        active.inc()
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            self._record(request, 500, elapsed)
            log.error(
                "http_request_error",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(elapsed * 1000, 2),
            )
            raise
        finally:
            active.dec()

        elapsed = time.perf_counter() - started
        self._record(request, response.status_code, elapsed)
        log.info("http_request", http_status=response.status_code, duration_ms=round(elapsed * 1000, 2))
        return response
