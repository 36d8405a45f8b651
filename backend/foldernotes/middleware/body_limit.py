"""
FolderNotes Backend — Request Body Size Limit Middleware
=========================================================

What:  Rejects request bodies larger than `max_body_size` with 413.
Why:   Attachments arrive as base64 strings inside JSON bodies, so the limit
       is generous (50MB by default) but still bounded.
How:   Two checks, both answering `{"error": ...}`:
       1. A declared Content-Length above the limit is refused before the
          body is read (a malformed header gets 400).
       2. Bytes are counted as the body streams in, which covers chunked
          uploads and clients that under-declare. Once the count passes the
          limit, reading the body raises HTTPException(413), which the app's
          HTTPException handler turns into the usual error response.

Written as a plain ASGI middleware (like Starlette's GZip and CORS
middleware) because it has to wrap `receive`, which BaseHTTPMiddleware
does not expose.
"""

import logging

from fastapi import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """
    Configuration:
        max_body_size: Maximum accepted body size in bytes
    """

    def __init__(self, app: ASGIApp, max_body_size: int = 52_428_800):
        self.app = app
        self.max_body_size = max_body_size

    @property
    def error_message(self) -> str:
        limit_mb = self.max_body_size / (1024 * 1024)
        return f"Request body exceeds the {limit_mb:.0f}MB limit"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                length = int(declared)
            except ValueError:
                response = JSONResponse(
                    status_code=400,
                    content={"error": "Invalid Content-Length header"},
                )
                await response(scope, receive, send)
                return

            if length > self.max_body_size:
                self._log_rejection(request, length)
                response = JSONResponse(status_code=413, content={"error": self.error_message})
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    self._log_rejection(request, received)
                    raise HTTPException(status_code=413, detail=self.error_message)
            return message

        await self.app(scope, limited_receive, send)

    def _log_rejection(self, request: Request, size: int) -> None:
        logger.warning(
            "Rejected %s %s: body of %d+ bytes exceeds limit of %d",
            request.method,
            request.url.path,
            size,
            self.max_body_size,
        )
