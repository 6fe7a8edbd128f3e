"""Request Middleware for Logging and Tracing

Binds a correlation ID to the logging context and logs each request with
its status and duration.
"""
import time
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from core.logging import (
    generate_correlation_id,
    bind_context,
    clear_context,
    api_logger,
)

log = api_logger()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs requests/responses and manages correlation context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or generate_correlation_id()

        clear_context()
        bind_context(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception(
                "request_failed",
                error_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        response.headers["X-Correlation-ID"] = correlation_id
        status = response.status_code
        log_method = log.info if status < 400 else (log.warning if status < 500 else log.error)
        log_method(
            "request_completed",
            status=status,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response
