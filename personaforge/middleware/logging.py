"""Structured request logging with per-request and per-operator context."""

import logging
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog for JSON output.

    ``level`` is one of the standard names (DEBUG, INFO, WARNING, ERROR,
    CRITICAL); ``Settings`` rejects anything else.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds a request id for every event logged while serving a request.

    An incoming ``X-Request-ID`` is reused so calls can be traced across
    services. AuthMiddleware adds ``operator_id`` once the token is checked;
    the completion event reads it back from ``request.state``.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        logger.info("Request started", method=request.method, path=request.url.path)

        response = await call_next(request)

        log_method = logger.info if response.status_code < 400 else logger.warning
        log_method(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            operator_id=getattr(request.state, "user_id", None),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
