"""Wager ledger — bet placement and per-user bet history.

Placement is all-or-nothing: every precondition is checked before any write,
and the balance debit is a conditional UPDATE so concurrent placements on the
same membership can never drive it below zero. The caller owns the
transaction (commit on success, rollback on BetRejectedError).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.orm.attributes import set_committed_value

from wtd.db.models import (
    BET_PENDING,
    CHARACTER_ALIVE,
    PREDICTIONS,
    Bet,
    Character,
    Episode,
    Membership,
    Season,
)
from wtd.memberships.service import get_membership

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_CENT = Decimal("0.01")


class BetRejectedError(ValueError):
    """Raised when any placement precondition fails. Carries no state detail."""

    def __init__(self, reason: str) -> None:
        super().__init__("Unable to place bet")
        self.reason = reason


@dataclass(frozen=True)
class PlacementResult:
    bet_id: int
    new_balance: Decimal


def _coerce_amount(amount: Decimal | int | float | str) -> Decimal:
    try:
        value = Decimal(str(amount))
        # Stakes are stored as NUMERIC(18, 2): whole cents only
        whole_cents = value.is_finite() and value == value.quantize(_CENT)
    except (InvalidOperation, ValueError) as e:
        raise BetRejectedError("invalid_amount") from e
    if not whole_cents or value <= 0:
        raise BetRejectedError("invalid_amount")
    return value


async def place_bet(
    db: AsyncSession,
    user_id: int,
    character_id: int,
    episode_id: int,
    amount: Decimal | int | float | str,
    prediction: str,
) -> PlacementResult:
    """
    Debit the stake and record a pending bet.

    Raises:
        BetRejectedError: If the episode is missing or closed, the character is
            missing or not alive, the prediction is not 'dies'/'survives', the
            amount is not positive, or the user has no membership with enough
            balance. Nothing is written in that case.
    """
    if prediction not in PREDICTIONS:
        raise BetRejectedError("invalid_prediction")
    stake = _coerce_amount(amount)

    episode = (await db.execute(select(Episode).where(Episode.id == episode_id))).scalar_one_or_none()
    if episode is None or not episode.is_betting_open:
        raise BetRejectedError("betting_closed")

    character = (await db.execute(select(Character).where(Character.id == character_id))).scalar_one_or_none()
    if character is None or character.status != CHARACTER_ALIVE:
        raise BetRejectedError("character_unavailable")

    show_id = (await db.execute(select(Season.show_id).where(Season.id == episode.season_id))).scalar_one_or_none()
    if show_id is None or character.show_id != show_id:
        raise BetRejectedError("character_not_in_show")

    membership = await get_membership(db, user_id, show_id, for_update=True)
    if membership is None or membership.balance < stake:
        raise BetRejectedError("insufficient_balance")

    debit = await db.execute(
        update(Membership)
        .where(Membership.id == membership.id, Membership.balance >= stake)
        .values(balance=Membership.balance - stake)
        .returning(Membership.balance)
        .execution_options(synchronize_session=False)
    )
    new_balance = debit.scalar_one_or_none()
    if new_balance is None:
        raise BetRejectedError("insufficient_balance")
    set_committed_value(membership, "balance", new_balance)

    bet = Bet(
        user_id=user_id,
        character_id=character_id,
        episode_id=episode_id,
        amount=stake,
        prediction=prediction,
        status=BET_PENDING,
        placed_at=datetime.now(timezone.utc),
        resolved_at=None,
    )
    db.add(bet)
    await db.flush()

    logger.info(
        "bet_placed",
        bet_id=bet.id,
        user_id=user_id,
        episode_id=episode_id,
        character_id=character_id,
        amount=str(stake),
        prediction=prediction,
    )
    return PlacementResult(bet_id=bet.id, new_balance=Decimal(new_balance))


async def list_user_bets(
    db: AsyncSession, user_id: int, episode_id: int | None = None
) -> list[dict[str, Any]]:
    """A user's bets with character name and episode title, newest first."""
    stmt = (
        select(Bet, Character.name, Episode.title)
        .join(Character, Character.id == Bet.character_id)
        .join(Episode, Episode.id == Bet.episode_id)
        .where(Bet.user_id == user_id)
    )
    if episode_id is not None:
        stmt = stmt.where(Bet.episode_id == episode_id)
    stmt = stmt.order_by(Bet.placed_at.desc(), Bet.id.desc())

    result = await db.execute(stmt)
    return [
        {
            "id": bet.id,
            "user_id": bet.user_id,
            "character_id": bet.character_id,
            "character_name": character_name,
            "episode_id": bet.episode_id,
            "episode_title": episode_title,
            "amount": bet.amount,
            "prediction": bet.prediction,
            "status": bet.status,
            "placed_at": bet.placed_at,
            "resolved_at": bet.resolved_at,
        }
        for bet, character_name, episode_title in result.all()
    ]
