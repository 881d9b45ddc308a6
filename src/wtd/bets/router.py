"""Bet endpoints — place a bet, list my bets."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.auth.dependencies import get_current_user
from wtd.bets.schemas import BetResponse, PlaceBetRequest, PlaceBetResponse
from wtd.bets.service import BetRejectedError, list_user_bets, place_bet
from wtd.database import get_session
from wtd.db.models import User
from wtd.features.service import BETTING_ENABLED, is_enabled

logger = structlog.get_logger()

router = APIRouter(prefix="/api/bets", tags=["Bets"])

_REJECTED_DETAIL = "Unable to place bet. Check episode status, character status, and balance."


@router.post("", response_model=PlaceBetResponse)
async def create_bet(
    body: PlaceBetRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PlaceBetResponse:
    """Place a bet; the stake is debited immediately."""
    if not is_enabled(BETTING_ENABLED):
        raise HTTPException(status_code=403, detail="Betting is currently disabled")

    user_id = user.id
    try:
        result = await place_bet(
            db,
            user_id=user_id,
            character_id=body.character_id,
            episode_id=body.episode_id,
            amount=body.amount,
            prediction=body.prediction,
        )
    except BetRejectedError as e:
        await db.rollback()
        logger.info("bet_rejected", user_id=user_id, reason=e.reason)
        raise HTTPException(status_code=400, detail=_REJECTED_DETAIL) from e

    await db.commit()
    return PlaceBetResponse(bet_id=result.bet_id, new_balance=float(result.new_balance))


@router.get("/me", response_model=list[BetResponse])
async def my_bets(
    episode_id: int | None = Query(None, alias="episodeId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[BetResponse]:
    """The caller's bets, newest first, optionally for one episode."""
    rows = await list_user_bets(db, user.id, episode_id)
    return [BetResponse(**row) for row in rows]
