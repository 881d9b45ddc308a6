"""Per-show leaderboard — memberships ranked by balance.

Order: balance DESC, then membership insertion order (id ASC). Rank is the
1-based position in the truncated output and is never stored.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.db.models import Membership, User

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def rank_entries(rows: list[dict[str, Any]], limit: int) -> list[dict[str, Any]]:
    """Sort rows by balance descending (stable) and assign 1-based ranks.

    Input: dicts with at least ``balance``; rows must already be in insertion
    order so equal balances keep it.
    """
    if limit <= 0:
        return []
    ordered = sorted(rows, key=lambda r: -Decimal(r["balance"]))[:limit]
    for idx, row in enumerate(ordered):
        row["rank"] = idx + 1
    return ordered


async def get_leaderboard(db: AsyncSession, show_id: int, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    """Top memberships of a show with usernames."""
    # SQL order is authoritative; the stable re-sort in rank_entries keeps it.
    result = await db.execute(
        select(Membership.user_id, User.username, Membership.balance)
        .join(User, User.id == Membership.user_id)
        .where(Membership.show_id == show_id)
        .order_by(Membership.balance.desc(), Membership.id.asc())
        .limit(limit)
    )
    rows = [
        {"user_id": row.user_id, "username": row.username, "balance": row.balance}
        for row in result
    ]
    return rank_entries(rows, limit)
