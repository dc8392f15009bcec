"""Application middleware: request logging and correlation ids."""

import time
import uuid

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from barber_finance.core.exceptions import ApiError, InternalServerError

logger = structlog.get_logger()

CORRELATION_HEADER = "X-Correlation-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each incoming request with timing information.

    Every request gets a correlation id (taken from ``X-Correlation-ID`` when the
    caller sends one) that is bound into the structlog context, kept on
    ``request.state`` for response bodies and echoed back as a header.
    Exceptions that escape the route are logged and turned into a 500 error body.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        request.state.correlation_id = correlation_id
        request.state.started_at = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error", method=request.method, path=request.url.path)
            response = error_response(request, InternalServerError())

        duration_ms = elapsed_ms(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        return response


def correlation_id_for(request: Request) -> str:
    """Correlation id assigned by the middleware (a fresh one if it did not run)."""
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id is None:
        correlation_id = uuid.uuid4().hex
        request.state.correlation_id = correlation_id
    return correlation_id


def elapsed_ms(request: Request) -> float:
    """Milliseconds since the middleware saw the request."""
    started_at = getattr(request.state, "started_at", None)
    if started_at is None:
        return 0.0
    return round((time.perf_counter() - started_at) * 1000, 2)


def error_response(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.error,
            "message": exc.detail,
            "correlationId": correlation_id_for(request),
            "durationMs": elapsed_ms(request),
        },
        headers=exc.headers,
    )
