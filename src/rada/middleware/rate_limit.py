"""Redis-backed fixed window rate limiting middleware."""

import logging
import time
from typing import Any

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from rada.redis_client import get_redis

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/ready"})


def client_key(request: Request) -> str:
    """Client identity for rate limiting: the peer address.

    Forwarded headers are not read here. Behind a proxy, run uvicorn with
    ``--proxy-headers --forwarded-allow-ips`` so the peer is the real client.
    """
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limit requests per client per window using a Redis counter.

    Without Redis, or when Redis errors, requests pass through unthrottled.
    """

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 60) -> None:  # noqa: ANN401
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds

    async def _hit(self, key: str) -> int | None:
        try:
            redis = get_redis()
        except RuntimeError:
            return None
        try:
            pipe = redis.pipeline()
            pipe.incr(key)
            pipe.expire(key, self.window_seconds + 1)
            results: list[Any] = await pipe.execute()
        except RedisError:
            logger.warning("Rate limit check failed; allowing request", exc_info=True)
            return None
        return int(results[0])

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        window = int(time.time()) // self.window_seconds
        count = await self._hit(f"ratelimit:{client_key(request)}:{window}")
        if count is None:
            return await call_next(request)

        limit_headers = {"X-RateLimit-Limit": str(self.requests_per_window)}
        if count > self.requests_per_window:
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={**limit_headers, "Retry-After": str(self.window_seconds), "X-RateLimit-Remaining": "0"},
            )

        response = await call_next(request)
        response.headers.update(limit_headers)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.requests_per_window - count))
        return response
