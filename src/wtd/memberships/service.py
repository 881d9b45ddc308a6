"""Membership ledger — joining shows and per-show balances."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from wtd.db.models import Membership, Show

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class MembershipError(ValueError):
    """Raised when a join is rejected (unknown show or already a member)."""


async def get_membership(
    db: AsyncSession, user_id: int, show_id: int, *, for_update: bool = False
) -> Membership | None:
    """Fetch the (user, show) membership, optionally row-locked."""
    stmt = select(Membership).where(Membership.user_id == user_id, Membership.show_id == show_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def join_show(db: AsyncSession, user_id: int, show_id: int) -> Membership:
    """
    Enroll a user in a show with the show's initial balance.

    Raises:
        MembershipError: If the show does not exist or the user already joined.
    """
    show = (await db.execute(select(Show).where(Show.id == show_id))).scalar_one_or_none()
    if show is None:
        msg = "Show not found"
        raise MembershipError(msg)

    if await get_membership(db, user_id, show_id) is not None:
        msg = "Already a member of this show"
        raise MembershipError(msg)

    membership = Membership(
        user_id=user_id,
        show_id=show_id,
        balance=show.initial_balance,
        joined_at=datetime.now(timezone.utc),
    )
    db.add(membership)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "Already a member of this show"
        raise MembershipError(msg) from e

    logger.info("show_joined", user_id=user_id, show_id=show_id, balance=str(membership.balance))
    return membership


async def get_balance(db: AsyncSession, user_id: int, show_id: int) -> Decimal | None:
    """Current balance, or None when the user has not joined the show."""
    result = await db.execute(
        select(Membership.balance).where(Membership.user_id == user_id, Membership.show_id == show_id)
    )
    return result.scalar_one_or_none()
