"""Pydantic response models for the show catalog.

Fields serialize as camelCase; money values are floats on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ── Catalog ──


class ShowResponse(_ApiModel):
    id: int
    name: str
    description: str
    image_url: str | None = None
    currency_name: str
    currency_symbol: str
    is_active: bool


class EpisodeResponse(_ApiModel):
    id: int
    season_id: int
    episode_number: int
    title: str
    air_date: datetime | None = None
    is_betting_open: bool


class SeasonResponse(_ApiModel):
    id: int
    show_id: int
    season_number: int
    name: str
    episodes: list[EpisodeResponse] = []


class CharacterResponse(_ApiModel):
    id: int
    show_id: int
    name: str
    actor: str | None = None
    image_url: str | None = None
    status: str


class ShowDetailResponse(ShowResponse):
    initial_balance: float
    seasons: list[SeasonResponse] = []
    characters: list[CharacterResponse] = []


# ── Leaderboard ──


class LeaderboardEntryResponse(_ApiModel):
    rank: int
    user_id: int
    username: str
    balance: float
