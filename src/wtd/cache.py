"""Best-effort Redis read-through cache for catalog lookups.

The cache is advisory. Every failure (cache disabled, Redis not initialized,
connection errors, undecodable payloads) degrades to a miss or a no-op and is
never surfaced to the caller. Truth always lives in the database.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog
from redis.exceptions import RedisError

from wtd.config import get_settings
from wtd.redis_client import get_redis

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger()


class CacheKeys:
    """Cache key builders (unprefixed; the instance prefix is applied by CacheService)."""

    SHOW_PREFIX = "show:"
    CHARACTER_PREFIX = "character:"
    EPISODE_PREFIX = "episode:"
    SEASON_PREFIX = "season:"

    @staticmethod
    def show(show_id: int) -> str:
        return f"{CacheKeys.SHOW_PREFIX}{show_id}"

    @staticmethod
    def shows_list() -> str:
        return f"{CacheKeys.SHOW_PREFIX}list"

    @staticmethod
    def characters_by_show(show_id: int) -> str:
        return f"{CacheKeys.CHARACTER_PREFIX}show:{show_id}"

    @staticmethod
    def episode(episode_id: int) -> str:
        return f"{CacheKeys.EPISODE_PREFIX}{episode_id}"

    @staticmethod
    def season_episodes(season_id: int) -> str:
        return f"{CacheKeys.SEASON_PREFIX}{season_id}:episodes"


_CACHE_ERRORS = (RedisError, RuntimeError, OSError, ValueError, TypeError)


class CacheService:
    """JSON get/set/remove by key over Redis, tolerant of every failure."""

    def __init__(
        self,
        redis: Redis | None = None,
        *,
        enabled: bool | None = None,
        prefix: str | None = None,
        default_ttl: int | None = None,
    ) -> None:
        settings = get_settings()
        self._redis = redis
        self.enabled = settings.cache_enabled if enabled is None else enabled
        self.prefix = settings.cache_key_prefix if prefix is None else prefix
        self.default_ttl = settings.cache_default_ttl_seconds if default_ttl is None else default_ttl

    def _client(self) -> Redis:
        return self._redis if self._redis is not None else get_redis()

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get_json(self, key: str) -> Any | None:  # noqa: ANN401
        """Return the decoded value for key, or None on miss or any cache failure."""
        if not self.enabled:
            return None
        try:
            raw = await self._client().get(self._full_key(key))
            if raw is None:
                logger.debug("cache_miss", key=key)
                return None
            logger.debug("cache_hit", key=key)
            return json.loads(raw)
        except _CACHE_ERRORS as exc:
            logger.warning("cache_error", op="get", key=key, error=str(exc))
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:  # noqa: ANN401
        """Store value under key with a TTL in seconds."""
        if not self.enabled:
            return
        try:
            await self._client().set(
                self._full_key(key),
                json.dumps(value, default=str),
                ex=ttl or self.default_ttl,
            )
        except _CACHE_ERRORS as exc:
            logger.warning("cache_error", op="set", key=key, error=str(exc))

    async def delete(self, *keys: str) -> None:
        """Remove one or more keys."""
        if not self.enabled or not keys:
            return
        try:
            await self._client().delete(*(self._full_key(k) for k in keys))
        except _CACHE_ERRORS as exc:
            logger.warning("cache_error", op="delete", keys=list(keys), error=str(exc))


def get_cache() -> CacheService:
    """Get a cache service bound to the shared Redis pool (FastAPI dependency)."""
    return CacheService()
