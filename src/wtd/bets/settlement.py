"""Settlement engine — resolves pending bets against an episode outcome.

Payout is flat even-money: a winning bet returns its stake plus equal
winnings (``amount * 2``); a losing bet returns nothing. A refunded bet
returns exactly its stake.

Every status change is guarded by ``WHERE status = 'pending'`` so a bet can
leave the pending state once and only once, even if two settlement runs
overlap. The caller owns the transaction; the whole batch commits or rolls
back together.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update
from sqlalchemy.orm.attributes import set_committed_value

from wtd.db.models import (
    BET_LOST,
    BET_PENDING,
    BET_REFUNDED,
    BET_WON,
    CHARACTER_ALIVE,
    CHARACTER_DEAD,
    PREDICTION_DIES,
    PREDICTION_SURVIVES,
    Bet,
    Character,
    Episode,
    Membership,
    Season,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

WIN_MULTIPLIER = Decimal("2")
REFUND_MULTIPLIER = Decimal("1")


class SettlementError(ValueError):
    """Raised when a settlement target does not exist."""


def bet_wins(prediction: str, died: bool) -> bool:
    """True when the prediction matches the outcome."""
    return (died and prediction == PREDICTION_DIES) or (not died and prediction == PREDICTION_SURVIVES)


def payout_for(amount: Decimal, status: str) -> Decimal:
    """Credit owed to the membership for a bet leaving the pending state."""
    if status == BET_WON:
        return amount * WIN_MULTIPLIER
    if status == BET_REFUNDED:
        return amount * REFUND_MULTIPLIER
    return Decimal("0")


async def _transition(db: AsyncSession, bet: Bet, status: str, resolved_at: datetime) -> bool:
    """Move one bet out of pending. False if another run already did."""
    result = await db.execute(
        update(Bet)
        .where(Bet.id == bet.id, Bet.status == BET_PENDING)
        .values(status=status, resolved_at=resolved_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False
    set_committed_value(bet, "status", status)
    set_committed_value(bet, "resolved_at", resolved_at)
    return True


async def _credit(db: AsyncSession, user_id: int, show_id: int, amount: Decimal) -> None:
    if amount <= 0:
        return
    await db.execute(
        update(Membership)
        .where(Membership.user_id == user_id, Membership.show_id == show_id)
        .values(balance=Membership.balance + amount)
    )


def _pending_bets_query(episode_id: int, character_id: int | None = None):  # noqa: ANN202
    stmt = (
        select(Bet, Season.show_id)
        .join(Episode, Episode.id == Bet.episode_id)
        .join(Season, Season.id == Episode.season_id)
        .where(Bet.episode_id == episode_id, Bet.status == BET_PENDING)
    )
    if character_id is not None:
        stmt = stmt.where(Bet.character_id == character_id)
    return stmt.order_by(Bet.id).with_for_update(of=Bet)


async def resolve_outcome(db: AsyncSession, episode_id: int, character_id: int, died: bool) -> int:
    """
    Resolve every pending bet on (episode, character) and credit winners.

    When ``died`` is true the character's status also moves alive -> dead.

    Returns:
        Number of bets resolved by this call.
    """
    now = datetime.now(timezone.utc)
    rows = (await db.execute(_pending_bets_query(episode_id, character_id))).all()

    resolved = won = 0
    paid_out = Decimal("0")
    for bet, show_id in rows:
        status = BET_WON if bet_wins(bet.prediction, died) else BET_LOST
        if not await _transition(db, bet, status, now):
            continue
        resolved += 1
        credit = payout_for(bet.amount, status)
        if credit:
            won += 1
            paid_out += credit
            await _credit(db, bet.user_id, show_id, credit)

    if died:
        await db.execute(
            update(Character)
            .where(Character.id == character_id, Character.status == CHARACTER_ALIVE)
            .values(status=CHARACTER_DEAD)
        )

    await db.flush()
    logger.info(
        "bets_resolved",
        episode_id=episode_id,
        character_id=character_id,
        died=died,
        resolved=resolved,
        won=won,
        lost=resolved - won,
        paid_out=str(paid_out),
    )
    return resolved


async def refund_episode(db: AsyncSession, episode_id: int) -> int:
    """
    Cancel an episode: close betting and refund every pending bet on it.

    Raises:
        SettlementError: If the episode does not exist.

    Returns:
        Number of bets refunded by this call.
    """
    episode = (
        await db.execute(select(Episode).where(Episode.id == episode_id).with_for_update())
    ).scalar_one_or_none()
    if episode is None:
        msg = f"Episode {episode_id} not found"
        raise SettlementError(msg)
    episode.is_betting_open = False

    now = datetime.now(timezone.utc)
    rows = (await db.execute(_pending_bets_query(episode_id))).all()

    refunded = 0
    for bet, show_id in rows:
        if not await _transition(db, bet, BET_REFUNDED, now):
            continue
        refunded += 1
        await _credit(db, bet.user_id, show_id, payout_for(bet.amount, BET_REFUNDED))

    await db.flush()
    logger.info("episode_refunded", episode_id=episode_id, refunded=refunded)
    return refunded
