"""
Revisio Backend — Request ID Middleware
========================================

What:  Gives every submission a short correlation ID, returned in the
       X-Request-ID response header.
How:   The ID lives in a ContextVar for the duration of the request, so the
       log lines of both Gemini calls of one revision sheet carry it.
Who:   Applied to every request via Starlette middleware.

A client-supplied X-Request-ID is reused only when it is a short token of
letters, digits, '-' or '_'; it is echoed into log lines, so anything else is
replaced with a fresh ID.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# Coroutine-local: concurrent submissions each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(header_value: str) -> str:
    """Reuse a well-formed client ID, otherwise mint one."""
    candidate = (header_value or "").strip()
    if _CLIENT_ID_PATTERN.match(candidate):
        return candidate
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds the request ID for the whole request and echoes it back."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        request.state.request_id = rid

        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
