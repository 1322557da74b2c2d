"""Fixed-window rate limiting for `/api/` requests.

Counters live in a `limits` in-memory storage owned by the middleware
instance; client identity is the remote address as resolved by slowapi.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from portal_api.domain import RateLimitPolicy

API_PATH_PREFIX = "/api"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware that limits requests per client within a fixed window.

    Only paths under `/api` are counted. Every counted response carries
    `X-RateLimit-Limit`, `X-RateLimit-Remaining` and `X-RateLimit-Reset`;
    rejections also carry `Retry-After`.
    """

    def __init__(
        self,
        app: ASGIApp,
        policy: RateLimitPolicy,
        key_func: Callable[[Request], str] = get_remote_address,
        storage: Storage | None = None,
    ):
        super().__init__(app)
        self.policy = policy
        self.key_func = key_func
        self.limit_item = RateLimitItemPerSecond(policy.max_requests, policy.window_seconds)
        self.limiter = FixedWindowRateLimiter(storage or MemoryStorage())
        self.logger = logging.getLogger("portal_api.rate_limit")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not _is_api_path(request.url.path):
            return await call_next(request)

        client_key = self.key_func(request)
        allowed = self.limiter.hit(self.limit_item, client_key)
        reset_time, remaining = self.limiter.get_window_stats(self.limit_item, client_key)
        reset_seconds = max(0, math.ceil(reset_time - time.time()))

        if not allowed:
            self.logger.warning(f"Rate limit exceeded: client={client_key} path={request.url.path}")
            response: Response = JSONResponse(status_code=429, content=self.policy.rejection_payload())
            response.headers["Retry-After"] = str(reset_seconds)
        else:
            response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.policy.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, remaining))
        response.headers["X-RateLimit-Reset"] = str(reset_seconds)
        return response


def _is_api_path(path: str) -> bool:
    return path == API_PATH_PREFIX or path.startswith(f"{API_PATH_PREFIX}/")
