"""Authentication router — all /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.auth.dependencies import get_current_user
from wtd.auth.jwt import create_access_token
from wtd.auth.password import PasswordStrengthError
from wtd.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from wtd.auth.service import authenticate_user, register_user
from wtd.config import get_settings
from wtd.database import get_session
from wtd.db.models import User

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
        last_login=user.last_login,
    )


def _issue_token(user: User) -> TokenResponse:
    """Create an access token for the user."""
    settings = get_settings()
    return TokenResponse(
        token=create_access_token(user.id, user.username),
        token_type="bearer",
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=_user_response(user),
    )


@router.post("/register", response_model=TokenResponse)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Register with username + email + password."""
    try:
        user = await register_user(db, username=body.username, email=body.email, password=body.password)
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    await db.commit()
    return _issue_token(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Login with username + password."""
    try:
        user = await authenticate_user(db, body.username, body.password)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    await db.commit()
    return _issue_token(user)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Get the caller's profile."""
    return _user_response(user)
