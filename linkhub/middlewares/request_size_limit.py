"""
Request body size limit middleware.

Rejects oversized control-plane requests (e.g. huge broadcast payloads)
before they are read.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from linkhub.logging import logger
from linkhub.settings import app_settings


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware that enforces a maximum request body size.

    Requests whose Content-Length exceeds the limit get 413 with the same
    {success, error} envelope the broadcast endpoint uses.
    """

    def __init__(self, app: ASGIApp, max_size: int | None = None):
        """
        Initialize the request size limit middleware.

        Args:
            app: The ASGI application.
            max_size: Maximum request body size in bytes.
                     If None, uses app_settings.MAX_REQUEST_BODY_SIZE.
        """
        super().__init__(app)
        self.max_size = max_size or app_settings.MAX_REQUEST_BODY_SIZE

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")

        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                # Let the framework reject malformed requests
                logger.warning(f"Invalid Content-Length header: {content_length}")
                return await call_next(request)

            if size > self.max_size:
                logger.warning(
                    f"Request rejected: body size {size} bytes "
                    f"exceeds limit of {self.max_size} bytes"
                )
                return JSONResponse(
                    status_code=413,
                    content={
                        "success": False,
                        "error": f"Request body too large. Maximum allowed: {self.max_size} bytes",
                    },
                )

        return await call_next(request)
