"""User endpoints — all /api/users/* routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.auth.dependencies import get_current_user
from wtd.database import get_session
from wtd.db.models import User
from wtd.memberships.service import get_balance

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/me/shows/{show_id}/balance")
async def my_balance(
    show_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, float]:
    """Current balance in a show the caller has joined."""
    balance = await get_balance(db, user.id, show_id)
    if balance is None:
        raise HTTPException(status_code=404, detail="User has not joined this show")
    return {"balance": float(balance)}
