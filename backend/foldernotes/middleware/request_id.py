"""
FolderNotes Backend — Request ID Middleware
============================================

What:  Assigns a short correlation id to each request and echoes it back.
Why:   Ties together every log line written while handling one request.
How:   Reuses the client's X-Request-ID header when present, otherwise
       generates one (overlong or unprintable client ids are replaced); stores
       it in a ContextVar and on request.state.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


def resolve_request_id(header_value: Optional[str]) -> str:
    """Client id if it is short printable text, else a fresh 8-char id."""
    if header_value and len(header_value) <= MAX_CLIENT_ID_LENGTH and header_value.isprintable():
        return header_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets X-Request-ID on every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID"))
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
