"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator
import hmac

from fastapi import Header, HTTPException

from rada.config import get_settings
from rada.database import get_session as _get_session
from rada.redis_client import get_redis as _get_redis

get_db = _get_session


async def get_redis_dep() -> AsyncGenerator[object | None, None]:
    """Yield the Redis client, or None when Redis is not configured."""
    try:
        client = _get_redis()
    except RuntimeError:
        client = None
    yield client


async def require_admin(x_admin_key: str | None = Header(default=None)) -> None:
    """Gate admin routes behind the configured X-Admin-Key."""
    expected = get_settings().admin_api_key
    if not expected:
        raise HTTPException(status_code=503, detail="Admin API is disabled")
    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=401, detail="Invalid admin key")
