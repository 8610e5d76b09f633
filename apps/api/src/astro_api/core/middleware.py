"""
HTTP Middleware

Cross-cutting request/response handling registered in front of every route:
- Security headers on every response
- Request body size ceiling, checked against the declared Content-Length
  and again while the body streams in
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from astro_api.core.config import Settings

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}
HSTS_HEADER = "max-age=15552000; includeSubDomains"
BODY_TOO_LARGE_MESSAGE = "Request body is too large."

CallNext = Callable[[Request], Awaitable[Response]]


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than ``max_body_bytes``.

    A declared Content-Length is checked before the app runs. The body is
    also counted as it is received, so a chunked request (no
    Content-Length) fails with 413 on the read that passes the ceiling
    instead of being buffered in full.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                length = int(declared)
            except ValueError:
                length = -1
            if length < 0:
                response = JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"code": "BAD_REQUEST", "message": "Invalid Content-Length header."},
                )
                await response(scope, receive, send)
                return
            if length > self.max_body_bytes:
                logger.warning(f"Rejected {length}-byte body on {scope['path']}")
                response = JSONResponse(
                    status_code=status.HTTP_413_CONTENT_TOO_LARGE,
                    content={"code": "PAYLOAD_TOO_LARGE", "message": BODY_TOO_LARGE_MESSAGE},
                )
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.warning(
                        f"Rejected streamed body over {self.max_body_bytes} bytes on {scope['path']}"
                    )
                    raise HTTPException(
                        status_code=status.HTTP_413_CONTENT_TOO_LARGE,
                        detail=BODY_TOO_LARGE_MESSAGE,
                    )
            return message

        await self.app(scope, limited_receive, send)


def register_middleware(app: FastAPI, settings: Settings) -> None:
    """Attach security headers and the body size limit to the app."""

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    @app.middleware("http")
    async def security_headers(request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if settings.is_production:
            response.headers.setdefault("Strict-Transport-Security", HSTS_HEADER)
        return response
