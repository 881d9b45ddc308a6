"""Catalog endpoints — shows, seasons, episodes, characters, leaderboards."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.auth.dependencies import get_current_user
from wtd.cache import CacheService, get_cache
from wtd.database import get_session
from wtd.db.models import User
from wtd.memberships.service import MembershipError, join_show
from wtd.shows.leaderboard import DEFAULT_LIMIT, MAX_LIMIT, get_leaderboard
from wtd.shows.schemas import (
    CharacterResponse,
    EpisodeResponse,
    LeaderboardEntryResponse,
    ShowDetailResponse,
    ShowResponse,
)
from wtd.shows.service import (
    get_episode,
    get_show_detail,
    list_active_shows,
    list_season_episodes,
    list_show_characters,
)

router = APIRouter(prefix="/api/shows", tags=["Shows"])
episodes_router = APIRouter(prefix="/api", tags=["Episodes"])


# ── Shows ──


@router.get("", response_model=list[ShowResponse])
async def shows(
    db: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    """Active shows."""
    return await list_active_shows(db, cache)


@router.get("/{show_id}", response_model=ShowDetailResponse)
async def show_detail(
    show_id: int,
    db: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    """Show with seasons, episodes and characters."""
    detail = await get_show_detail(db, show_id, cache)
    if detail is None:
        raise HTTPException(status_code=404, detail="Show not found")
    return detail


@router.post("/{show_id}/join")
async def join(
    show_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, object]:
    """Join a show and receive its starting balance."""
    try:
        membership = await join_show(db, user.id, show_id)
    except MembershipError as e:
        await db.rollback()
        raise HTTPException(
            status_code=400, detail="Unable to join show. You may already be a member."
        ) from e
    await db.commit()
    return {"message": "Successfully joined show", "balance": float(membership.balance)}


@router.get("/{show_id}/characters", response_model=list[CharacterResponse])
async def show_characters(
    show_id: int,
    alive_only: bool | None = Query(None, alias="aliveOnly"),
    db: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    """Characters of a show, optionally only the living."""
    return await list_show_characters(db, show_id, alive_only=bool(alive_only), cache=cache)


@router.get("/{show_id}/leaderboard", response_model=list[LeaderboardEntryResponse])
async def show_leaderboard(
    show_id: int,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    db: AsyncSession = Depends(get_session),
):
    """Members ranked by balance."""
    entries = await get_leaderboard(db, show_id, limit)
    return [LeaderboardEntryResponse(**e) for e in entries]


# ── Seasons / Episodes ──


@episodes_router.get("/seasons/{season_id}/episodes", response_model=list[EpisodeResponse])
async def season_episodes(
    season_id: int,
    db: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    """Episodes of a season ordered by number."""
    return await list_season_episodes(db, season_id, cache)


@episodes_router.get("/episodes/{episode_id}", response_model=EpisodeResponse)
async def episode_detail(
    episode_id: int,
    db: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    """Single episode."""
    episode = await get_episode(db, episode_id, cache)
    if episode is None:
        raise HTTPException(status_code=404, detail="Episode not found")
    return episode
