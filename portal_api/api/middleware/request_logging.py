"""Concise development request logging."""

from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs one line per request/response pair.

    Line format: `METHOD URL STATUS DURATION ms - CONTENT_LENGTH`.
    Installed only when the runtime environment is `development`.
    """

    def __init__(self, app, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("portal_api.requests")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        content_length = response.headers.get("content-length", "-")
        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        self.logger.log(
            log_level,
            f"{request.method} {url} {response.status_code} {duration_ms:.3f} ms - {content_length}",
        )

        return response
