"""Settlement arq worker — out-of-band episode outcome and cancellation jobs.

Run with: arq wtd.bets.worker.SettlementWorkerSettings

Each job runs one settlement batch in a single transaction, then drops the
cached catalog views the batch made stale.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from arq.connections import RedisSettings
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.bets.settlement import refund_episode, resolve_outcome
from wtd.cache import CacheService
from wtd.config import get_settings
from wtd.database import close_db, get_session, init_db
from wtd.db.models import Character, Episode, Season
from wtd.shows.service import invalidate_characters, invalidate_episode

logger = logging.getLogger(__name__)


async def _get_db_session() -> AsyncSession:
    """Get a database session for the worker."""
    async for session in get_session():
        return session
    raise RuntimeError("Failed to get database session")


def _cache(ctx: dict) -> CacheService:  # type: ignore[type-arg]
    return CacheService(ctx.get("redis"))


async def settlement_startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize DB + Redis cache connections on worker startup."""
    settings = get_settings()
    await init_db(settings.database_url)
    ctx["redis"] = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=10,
    )
    logger.info("Settlement worker started")


async def settlement_shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Clean up on worker shutdown."""
    redis_client: aioredis.Redis | None = ctx.get("redis")
    if redis_client:
        await redis_client.aclose()
    await close_db()
    logger.info("Settlement worker shut down")


async def resolve_outcome_job(ctx: dict, episode_id: int, character_id: int, died: bool) -> int:  # type: ignore[type-arg]
    """Settle every pending bet on (episode, character). Returns bets resolved."""
    db = await _get_db_session()
    try:
        resolved = await resolve_outcome(db, episode_id, character_id, died)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Settlement failed for episode %s character %s", episode_id, character_id)
        raise
    else:
        show_id = (
            await db.execute(select(Character.show_id).where(Character.id == character_id))
        ).scalar_one_or_none()
        if show_id is not None:
            await invalidate_characters(_cache(ctx), show_id)
    finally:
        await db.close()

    logger.info(
        "Settled episode %s character %s (died=%s): %d bets", episode_id, character_id, died, resolved
    )
    return resolved


async def refund_episode_job(ctx: dict, episode_id: int) -> int:  # type: ignore[type-arg]
    """Cancel an episode and refund its pending bets. Returns bets refunded."""
    db = await _get_db_session()
    try:
        refunded = await refund_episode(db, episode_id)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Refund failed for episode %s", episode_id)
        raise
    else:
        row = (
            await db.execute(
                select(Episode, Season.show_id)
                .join(Season, Season.id == Episode.season_id)
                .where(Episode.id == episode_id)
            )
        ).first()
        if row is not None:
            episode, show_id = row
            await invalidate_episode(_cache(ctx), episode, show_id)
    finally:
        await db.close()

    logger.info("Refunded episode %s: %d bets", episode_id, refunded)
    return refunded


class SettlementWorkerSettings:
    """arq worker settings for settlement jobs."""

    functions = [resolve_outcome_job, refund_episode_job]
    on_startup = settlement_startup
    on_shutdown = settlement_shutdown
    redis_settings = RedisSettings.from_dsn(get_settings().redis_url)
    max_jobs = 4
    job_timeout = 120
