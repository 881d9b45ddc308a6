"""Shared test fixtures.

Every test that touches storage gets a fresh in-memory SQLite database built
from the ORM metadata. Redis is never initialized, so the cache and the rate
limiter run their fail-open paths.
"""

from __future__ import annotations

import os

os.environ["WTD_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["WTD_CACHE_ENABLED"] = "false"
os.environ["WTD_JWT_ALGORITHM"] = "HS256"
os.environ["WTD_JWT_SECRET_KEY"] = "test-only-hs256-secret-0123456789abcdef"
os.environ["WTD_LOG_FORMAT"] = "console"
os.environ["WTD_LOG_LEVEL"] = "WARNING"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from wtd.auth.jwt import create_access_token, reset_keys  # noqa: E402
from wtd.auth.password import hash_password  # noqa: E402
from wtd.config import get_settings  # noqa: E402
from wtd.database import close_db, create_schema, get_session, init_db  # noqa: E402
from wtd.db.models import Character, Episode, Membership, Season, Show, User  # noqa: E402
from wtd.main import create_app  # noqa: E402

PLAYER_PASSWORD = "correct-horse-battery"
_PLAYER_HASH = hash_password(PLAYER_PASSWORD)


@dataclass
class Catalog:
    """IDs of the rows created by the ``catalog`` fixture."""

    show_id: int
    season_id: int
    open_episode_id: int
    closed_episode_id: int
    alive_id: int
    other_alive_id: int
    dead_id: int
    other_show_id: int
    other_show_character_id: int


@dataclass
class Player:
    user_id: int
    username: str
    headers: dict[str, str]


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema on a new in-memory engine."""
    get_settings.cache_clear()
    reset_keys()
    await init_db(get_settings().database_url)
    await create_schema()
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for setup and assertions."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client bound to the test database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def catalog(db_session: AsyncSession) -> Catalog:
    """One show with a season, an open and a closed episode, and a small cast.

    A second show with its own character exists to exercise cross-show rules.
    """
    show = Show(
        name="Game of Thrones",
        description="Noble families fight for the Iron Throne.",
        currency_name="Dragons",
        currency_symbol="D",
        initial_balance=Decimal("1000"),
        is_active=True,
    )
    other = Show(name="Breaking Bad", description="Chemistry.", initial_balance=Decimal("500"), is_active=True)
    retired = Show(name="Cancelled Show", description="Off the air.", is_active=False)
    db_session.add_all([show, other, retired])
    await db_session.flush()

    season = Season(show_id=show.id, season_number=1, name="Season 1")
    db_session.add(season)
    await db_session.flush()

    # Inserted out of order to check episode-number ordering
    closed_episode = Episode(season_id=season.id, episode_number=2, title="The Kingsroad", is_betting_open=False)
    open_episode = Episode(season_id=season.id, episode_number=1, title="Winter Is Coming", is_betting_open=True)
    db_session.add_all([closed_episode, open_episode])

    jon = Character(show_id=show.id, name="Jon Snow", actor="Kit Harington", status="alive")
    arya = Character(show_id=show.id, name="Arya Stark", actor="Maisie Williams", status="alive")
    ned = Character(show_id=show.id, name="Ned Stark", actor="Sean Bean", status="dead", is_active=False)
    walt = Character(show_id=other.id, name="Walter White", actor="Bryan Cranston", status="alive")
    db_session.add_all([jon, arya, ned, walt])
    await db_session.commit()

    return Catalog(
        show_id=show.id,
        season_id=season.id,
        open_episode_id=open_episode.id,
        closed_episode_id=closed_episode.id,
        alive_id=jon.id,
        other_alive_id=arya.id,
        dead_id=ned.id,
        other_show_id=other.id,
        other_show_character_id=walt.id,
    )


@pytest_asyncio.fixture
async def make_player(
    db_session: AsyncSession, catalog: Catalog
) -> Callable[..., Awaitable[Player]]:
    """Factory: a user with a bearer token, optionally joined to the catalog show."""

    async def _make(username: str, balance: Decimal | None = Decimal("1000")) -> Player:
        user = User(username=username, email=f"{username}@example.com", password_hash=_PLAYER_HASH)
        db_session.add(user)
        await db_session.flush()
        if balance is not None:
            db_session.add(Membership(user_id=user.id, show_id=catalog.show_id, balance=balance))
        await db_session.commit()
        token = create_access_token(user.id, username)
        return Player(user_id=user.id, username=username, headers={"Authorization": f"Bearer {token}"})

    return _make


@pytest_asyncio.fixture
async def alice(make_player: Callable[..., Awaitable[Player]]) -> Player:
    """Member of the catalog show with 1000 in the bank."""
    return await make_player("alice")


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, alice: Player) -> AsyncClient:
    """Client authenticated as ``alice``."""
    client.headers.update(alice.headers)
    return client
