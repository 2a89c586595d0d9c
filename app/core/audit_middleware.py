"""
Request Logging Middleware for the Visa Processing System
Logs one line per API request with method, path, status and duration, and
adds the X-Process-Time header to every response
"""

import re
import time
import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Per-request access log; 4xx/5xx responses are logged as warnings"""

    def __init__(self, app, exclude_paths: Optional[list] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or [
            "/health",
            "/favicon.ico",
            "/docs",
            "/redoc",
            "/openapi.json",
        ]

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(f"{request.method} {request.url.path} failed after {duration_ms:.1f}ms")
            raise

        duration = time.time() - start_time
        response.headers["X-Process-Time"] = f"{duration:.4f}"

        if not self._should_exclude_path(request.url.path):
            message = f"{request.method} {request.url.path} {response.status_code} {duration * 1000:.1f}ms"
            if response.status_code >= 400:
                logger.warning(message)
            else:
                logger.info(message)
        return response

    def _should_exclude_path(self, path: str) -> bool:
        return any(excluded in path for excluded in self.exclude_paths)


def setup_request_logging(app, exclude_paths: Optional[list] = None):
    """Install the request logging middleware"""
    app.add_middleware(RequestLoggingMiddleware, exclude_paths=exclude_paths)
    logger.info("Request logging middleware initialized")


BODY_PREVIEW_LIMIT = 2048
SENSITIVE_FIELD = re.compile(r'("[A-Za-z_]*(?:password|token|secret)[A-Za-z_]*"\s*:\s*)"(?:[^"\\]|\\.)*"', re.IGNORECASE)


class RequestBodyCaptureMiddleware:
    """
    Pure ASGI middleware that keeps the first BODY_PREVIEW_LIMIT bytes of the
    request body on request.state as it streams through, so error handlers can
    log it without re-reading the stream.
    """

    def __init__(self, app, limit: int = BODY_PREVIEW_LIMIT):
        self.app = app
        self.limit = limit

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        preview = bytearray()
        scope.setdefault("state", {})["body_preview"] = preview

        async def capture_receive():
            message = await receive()
            if message["type"] == "http.request" and len(preview) < self.limit:
                preview.extend(message.get("body", b"")[: self.limit - len(preview)])
            return message

        await self.app(scope, capture_receive, send)


def request_body_preview(request: Request) -> str:
    """Truncated request body with credential fields masked"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/"):
        return "<multipart body omitted>"
    preview = getattr(request.state, "body_preview", None)
    if not preview:
        return "<empty>"
    text = bytes(preview).decode("utf-8", errors="replace")
    text = SENSITIVE_FIELD.sub(r'\1"***"', text)
    if len(preview) >= BODY_PREVIEW_LIMIT:
        text += "...<truncated>"
    return text
