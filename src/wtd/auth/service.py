"""
Authentication business logic.

Handles user creation, credential verification and user lookups.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from wtd.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from wtd.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DUPLICATE_USER_MESSAGE = "Username or email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by exact username."""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(db: AsyncSession, username: str, email: str, password: str) -> User:
    """
    Register a new user with username, email and password.

    Raises:
        PasswordStrengthError: If the password is outside the allowed length.
        ValueError: If the username or email is already taken.
    """
    validate_password_strength(password)

    email = email.lower().strip()
    existing = await db.execute(
        select(User.id).where(or_(User.username == username, func.lower(User.email) == email))
    )
    if existing.first() is not None:
        raise ValueError(DUPLICATE_USER_MESSAGE)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same name/email
        await db.rollback()
        raise ValueError(DUPLICATE_USER_MESSAGE) from e

    logger.info("user_created", user_id=user.id, username=username)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    """
    Authenticate a user with username + password and record the login time.

    Raises:
        ValueError: If credentials are invalid.
    """
    user = await get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username)
        raise ValueError(INVALID_CREDENTIALS_MESSAGE)

    user.last_login = datetime.now(timezone.utc)
    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        logger.info("password_rehashed", user_id=user.id)
    await db.flush()
    return user
