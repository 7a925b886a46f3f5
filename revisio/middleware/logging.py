"""
Revisio Backend — Access Log Middleware
========================================

What:  One access-log line per submission: method, path, status, duration,
       request size and request ID.
How:   Times call_next and picks the level from the status code, so a
       502 extraction failure shows up as an error and a 400 as a warning.
Who:   Applied to every request via Starlette middleware.

Request bodies are never logged: they hold the user's notes and images.
Polled and documentation paths are not logged at all.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from revisio.middleware.request_id import request_id_var

logger = logging.getLogger("revisio.access")

QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each non-quiet request once it has been answered.

    A full revision sheet takes two Gemini calls, so durations of several
    seconds on /api/revision-sheets are normal.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        size = request.headers.get("content-length", "-")
        rid = request_id_var.get("")

        logger.log(
            level_for_status(response.status_code),
            "[%s] %s %s -> %d in %.0fms (%s bytes in)",
            rid,
            request.method,
            path,
            response.status_code,
            duration_ms,
            size,
            extra={
                "request_id": rid,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
