"""Show catalog queries — shows, seasons, episodes, characters.

Reads go through the advisory cache: hit returns the cached payload, miss or
any cache failure falls back to the database and repopulates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import structlog
from pydantic import BaseModel, ValidationError
from sqlalchemy import select

from wtd.cache import CacheKeys, CacheService
from wtd.db.models import CHARACTER_ALIVE, Character, Episode, Season, Show
from wtd.shows.schemas import (
    CharacterResponse,
    EpisodeResponse,
    SeasonResponse,
    ShowDetailResponse,
    ShowResponse,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


async def _cached_one(cache: CacheService | None, key: str, model: type[M]) -> M | None:
    if cache is None:
        return None
    payload = await cache.get_json(key)
    if payload is None:
        return None
    try:
        return model.model_validate(payload)
    except ValidationError:
        logger.warning("cache_payload_invalid", key=key)
        return None


async def _cached_list(cache: CacheService | None, key: str, model: type[M]) -> list[M] | None:
    if cache is None:
        return None
    payload = await cache.get_json(key)
    if not isinstance(payload, list):
        return None
    try:
        return [model.model_validate(item) for item in payload]
    except ValidationError:
        logger.warning("cache_payload_invalid", key=key)
        return None


async def _store(cache: CacheService | None, key: str, value: BaseModel | list[BaseModel]) -> None:
    if cache is None:
        return
    if isinstance(value, list):
        await cache.set_json(key, [v.model_dump(mode="json") for v in value])
    else:
        await cache.set_json(key, value.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Shows
# ---------------------------------------------------------------------------


async def get_show(db: AsyncSession, show_id: int) -> Show | None:
    """Fetch a show row by ID."""
    result = await db.execute(select(Show).where(Show.id == show_id))
    return result.scalar_one_or_none()


async def list_active_shows(db: AsyncSession, cache: CacheService | None = None) -> list[ShowResponse]:
    """All shows flagged active."""
    key = CacheKeys.shows_list()
    cached = await _cached_list(cache, key, ShowResponse)
    if cached is not None:
        return cached

    result = await db.execute(select(Show).where(Show.is_active.is_(True)).order_by(Show.id))
    shows = [ShowResponse.model_validate(s) for s in result.scalars()]
    await _store(cache, key, shows)
    return shows


async def get_show_detail(
    db: AsyncSession, show_id: int, cache: CacheService | None = None
) -> ShowDetailResponse | None:
    """Show with its seasons (episodes by number) and characters. None if absent."""
    key = CacheKeys.show(show_id)
    cached = await _cached_one(cache, key, ShowDetailResponse)
    if cached is not None:
        return cached

    show = await get_show(db, show_id)
    if show is None:
        return None

    seasons_result = await db.execute(
        select(Season).where(Season.show_id == show_id).order_by(Season.season_number, Season.id)
    )
    seasons = list(seasons_result.scalars())

    episodes_by_season: dict[int, list[EpisodeResponse]] = {s.id: [] for s in seasons}
    if seasons:
        episodes_result = await db.execute(
            select(Episode)
            .where(Episode.season_id.in_(episodes_by_season.keys()))
            .order_by(Episode.episode_number, Episode.id)
        )
        for ep in episodes_result.scalars():
            episodes_by_season[ep.season_id].append(EpisodeResponse.model_validate(ep))

    characters_result = await db.execute(
        select(Character).where(Character.show_id == show_id).order_by(Character.id)
    )

    detail = ShowDetailResponse(
        id=show.id,
        name=show.name,
        description=show.description,
        image_url=show.image_url,
        currency_name=show.currency_name,
        currency_symbol=show.currency_symbol,
        is_active=show.is_active,
        initial_balance=float(show.initial_balance),
        seasons=[
            SeasonResponse(
                id=s.id,
                show_id=s.show_id,
                season_number=s.season_number,
                name=s.name,
                episodes=episodes_by_season[s.id],
            )
            for s in seasons
        ],
        characters=[CharacterResponse.model_validate(c) for c in characters_result.scalars()],
    )
    await _store(cache, key, detail)
    return detail


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------


async def list_show_characters(
    db: AsyncSession,
    show_id: int,
    alive_only: bool = False,
    cache: CacheService | None = None,
) -> list[CharacterResponse]:
    """Characters of a show; only status 'alive' when alive_only is set."""
    key = CacheKeys.characters_by_show(show_id)
    characters = await _cached_list(cache, key, CharacterResponse)
    if characters is None:
        result = await db.execute(
            select(Character).where(Character.show_id == show_id).order_by(Character.id)
        )
        characters = [CharacterResponse.model_validate(c) for c in result.scalars()]
        await _store(cache, key, characters)

    if alive_only:
        return [c for c in characters if c.status == CHARACTER_ALIVE]
    return characters


# ---------------------------------------------------------------------------
# Seasons / episodes
# ---------------------------------------------------------------------------


async def list_season_episodes(
    db: AsyncSession, season_id: int, cache: CacheService | None = None
) -> list[EpisodeResponse]:
    """Episodes of a season ordered by episode number."""
    key = CacheKeys.season_episodes(season_id)
    cached = await _cached_list(cache, key, EpisodeResponse)
    if cached is not None:
        return cached

    result = await db.execute(
        select(Episode).where(Episode.season_id == season_id).order_by(Episode.episode_number, Episode.id)
    )
    episodes = [EpisodeResponse.model_validate(e) for e in result.scalars()]
    await _store(cache, key, episodes)
    return episodes


async def get_episode(
    db: AsyncSession, episode_id: int, cache: CacheService | None = None
) -> EpisodeResponse | None:
    """Episode detail. None if absent."""
    key = CacheKeys.episode(episode_id)
    cached = await _cached_one(cache, key, EpisodeResponse)
    if cached is not None:
        return cached

    result = await db.execute(select(Episode).where(Episode.id == episode_id))
    episode = result.scalar_one_or_none()
    if episode is None:
        return None
    response = EpisodeResponse.model_validate(episode)
    await _store(cache, key, response)
    return response


async def invalidate_episode(cache: CacheService | None, episode: Episode, show_id: int) -> None:
    """Drop cached views that embed an episode's betting state."""
    if cache is None:
        return
    await cache.delete(
        CacheKeys.episode(episode.id),
        CacheKeys.season_episodes(episode.season_id),
        CacheKeys.show(show_id),
    )


async def invalidate_characters(cache: CacheService | None, show_id: int) -> None:
    """Drop cached views that embed character status."""
    if cache is None:
        return
    await cache.delete(CacheKeys.characters_by_show(show_id), CacheKeys.show(show_id))
