"""ORM models for users, the show catalog, memberships and bets.

Relations are plain foreign-key columns; queries join explicitly. The schema
matches the Alembic migrations under alembic/versions.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from wtd.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Character.status values
CHARACTER_ALIVE = "alive"
CHARACTER_DEAD = "dead"
CHARACTER_UNKNOWN = "unknown"

# Bet.prediction values
PREDICTION_DIES = "dies"
PREDICTION_SURVIVES = "survives"
PREDICTIONS = frozenset({PREDICTION_DIES, PREDICTION_SURVIVES})

# Bet.status values
BET_PENDING = "pending"
BET_WON = "won"
BET_LOST = "lost"
BET_REFUNDED = "refunded"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Registered player."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Show(Base):
    """A tracked series with its own virtual currency and roster."""

    __tablename__ = "shows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    currency_name: Mapped[str] = mapped_column(String(50), nullable=False, default="Coins")
    currency_symbol: Mapped[str] = mapped_column(String(10), nullable=False, default="\U0001fa99")
    initial_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("1000"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    show_id: Mapped[int] = mapped_column(Integer, ForeignKey("shows.id", ondelete="CASCADE"), nullable=False)
    season_number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Episode(Base):
    __tablename__ = "episodes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    air_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_betting_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Character(Base):
    __tablename__ = "characters"
    __table_args__ = (Index("ix_characters_show_status", "show_id", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    show_id: Mapped[int] = mapped_column(Integer, ForeignKey("shows.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    actor: Mapped[str | None] = mapped_column(String(200), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=CHARACTER_ALIVE)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Ledgers
# ---------------------------------------------------------------------------


class Membership(Base):
    """A user's enrollment and currency balance within one show."""

    __tablename__ = "memberships"
    __table_args__ = (UniqueConstraint("user_id", "show_id", name="uq_memberships_user_show"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    show_id: Mapped[int] = mapped_column(Integer, ForeignKey("shows.id", ondelete="CASCADE"), nullable=False)
    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Bet(Base):
    """A wager on whether a character dies in an episode."""

    __tablename__ = "bets"
    __table_args__ = (
        Index("ix_bets_user_episode", "user_id", "episode_id"),
        Index("ix_bets_episode_status", "episode_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    character_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("characters.id", ondelete="RESTRICT"), nullable=False
    )
    episode_id: Mapped[int] = mapped_column(Integer, ForeignKey("episodes.id", ondelete="RESTRICT"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    prediction: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=BET_PENDING)
    placed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
