"""Security middleware for the news pipeline API."""

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

MAX_REQUEST_SIZE = 10 * 1024 * 1024


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security middleware providing:
    - Security headers
    - Request size limiting
    """

    def __init__(self, app, max_request_size: int = MAX_REQUEST_SIZE):
        super().__init__(app)
        self.max_request_size = max_request_size

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_request_size:
            logger.warning(f"⚠️  Request too large: {content_length} bytes (max: {self.max_request_size})")
            return JSONResponse(
                status_code=413,
                content={"error": "Request entity too large", "max_size": self.max_request_size}
            )

        response = await call_next(request)
        self._add_security_headers(response)
        return response

    def _add_security_headers(self, response: Response):
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # API only, nothing to render
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        if "server" in response.headers:
            del response.headers["server"]
