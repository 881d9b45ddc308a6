"""Shared Redis pool for the catalog cache and the rate limiter.

Both consumers treat an uninitialized pool (``get_redis`` raising
RuntimeError) as Redis being unavailable and carry on without it.
"""

import redis.asyncio as redis

_pool: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Open the pool at startup when the cache is enabled."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )


async def close_redis() -> None:
    """Close the pool on shutdown. Safe to call when it was never opened."""
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Return the pool, or raise RuntimeError if the cache was never started."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool
