"""Redis connection pool and reward event publishing."""

import json
import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

_pool: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 50) -> None:
    """Initialize the Redis connection pool. No connection is opened until first use."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Get the Redis client."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool


async def publish_event(client: object | None, channel: str, payload: dict) -> bool:
    """Publish a JSON payload on a pub/sub channel.

    Best effort: a missing client or a Redis failure is logged and reported
    as False, never raised into the caller's transaction.
    """
    if client is None:
        return False
    try:
        await client.publish(channel, json.dumps(payload, default=str))  # type: ignore[attr-defined]
    except Exception:
        logger.warning("Failed to publish %s event", channel, exc_info=True)
        return False
    return True
