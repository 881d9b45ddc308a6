"""Request/response schemas for bet endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PlaceBetRequest(_ApiModel):
    """Stake on a character's fate in an episode.

    Prediction and amount range are checked by the service so that every
    business rejection surfaces the same way.
    """

    character_id: int
    episode_id: int
    amount: Decimal = Field(..., max_digits=18, decimal_places=2)
    prediction: str = Field(..., max_length=16)


class PlaceBetResponse(_ApiModel):
    success: bool = True
    bet_id: int
    new_balance: float
    message: str = "Bet placed"


class BetResponse(_ApiModel):
    id: int
    user_id: int
    character_id: int
    character_name: str
    episode_id: int
    episode_title: str
    amount: float
    prediction: str
    status: str
    placed_at: datetime
    resolved_at: datetime | None = None
