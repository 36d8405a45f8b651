"""
FolderNotes Backend — Request Logging Middleware
=================================================

What:  One access log line per request: method, path, status, duration.
Why:   Uvicorn's access log is silenced in setup_logging(); this replaces it
       with request-id correlation and status-based log levels.

What we log vs what we DON'T log:
    Log: method, path, status, duration, client IP, request ID
    Don't log: request bodies (note content and base64 attachments)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from foldernotes.middleware.request_id import request_id_var

logger = logging.getLogger("foldernotes.access")


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each HTTP request once its response is ready.

    Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
    /health is not logged (probes hit it every few seconds).
    The declared body size is logged so large attachment uploads stand out.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        body_bytes = request.headers.get("content-length", "-")
        peer = request.client.host if request.client else "unknown"

        logger.log(
            _level_for(response.status_code),
            "[%s] %s %s → %d in %.1fms (body %s bytes, peer %s)",
            rid,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            body_bytes,
            peer,
        )
        return response
