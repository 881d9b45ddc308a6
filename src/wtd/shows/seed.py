"""Development seed data — three shows, a Game of Thrones season, two players.

Idempotent: does nothing once any show exists.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wtd.auth.password import hash_password
from wtd.db.models import Character, Episode, Membership, Season, Show, User

logger = logging.getLogger(__name__)

SHOW_SEED_DATA: list[dict] = [
    {
        "name": "Game of Thrones",
        "description": (
            "Nine noble families fight for control over the lands of Westeros, "
            "while an ancient enemy returns after being dormant for millennia."
        ),
        "image_url": "https://image.tmdb.org/t/p/w500/1XS1oqL89opfnbLl8WnZY1O1uJx.jpg",
        "currency_name": "Dragons",
        "currency_symbol": "\U0001f409",
    },
    {
        "name": "The Walking Dead",
        "description": (
            "Sheriff Deputy Rick Grimes wakes up from a coma to learn the world is in ruins "
            "and must lead a group of survivors to stay alive."
        ),
        "image_url": "https://image.tmdb.org/t/p/w500/xf9wuDcqlUPWABZNeDKPbZUjWx0.jpg",
        "currency_name": "Bullets",
        "currency_symbol": "\U0001f52b",
    },
    {
        "name": "Breaking Bad",
        "description": (
            "A high school chemistry teacher diagnosed with cancer turns to producing and "
            "selling methamphetamine in order to secure his family's future."
        ),
        "image_url": "https://image.tmdb.org/t/p/w500/3xnWaLQjelJDDF7LT1WBo6f4BRe.jpg",
        "currency_name": "Blue Crystals",
        "currency_symbol": "\U0001f48e",
    },
]

# (number, title, betting open, air date)
GOT_S1_EPISODES: list[tuple[int, str, bool, datetime]] = [
    (1, "Winter Is Coming", True, datetime(2011, 4, 17, tzinfo=timezone.utc)),
    (2, "The Kingsroad", False, datetime(2011, 4, 24, tzinfo=timezone.utc)),
    (3, "Lord Snow", False, datetime(2011, 5, 1, tzinfo=timezone.utc)),
    (4, "Cripples, Bastards, and Broken Things", False, datetime(2011, 5, 8, tzinfo=timezone.utc)),
    (5, "The Wolf and the Lion", False, datetime(2011, 5, 15, tzinfo=timezone.utc)),
]

# (name, actor, status)
GOT_CHARACTERS: list[tuple[str, str, str]] = [
    ("Jon Snow", "Kit Harington", "alive"),
    ("Daenerys Targaryen", "Emilia Clarke", "alive"),
    ("Tyrion Lannister", "Peter Dinklage", "alive"),
    ("Arya Stark", "Maisie Williams", "alive"),
    ("Ned Stark", "Sean Bean", "dead"),
    ("Cersei Lannister", "Lena Headey", "alive"),
]

# (username, starting Game of Thrones balance)
SEED_PLAYERS: list[tuple[str, Decimal]] = [
    ("testuser1", Decimal("5000")),
    ("testuser2", Decimal("4500")),
]
SEED_PASSWORD = "password123"


async def seed_catalog(db: AsyncSession) -> bool:
    """Insert the seed catalog and players. Returns False if data already exists."""
    existing = await db.execute(select(Show.id).limit(1))
    if existing.first() is not None:
        return False

    shows = [Show(**data, is_active=True) for data in SHOW_SEED_DATA]
    db.add_all(shows)
    await db.flush()
    got = shows[0]

    season = Season(show_id=got.id, season_number=1, name="Season 1", is_active=True)
    db.add(season)
    await db.flush()

    db.add_all(
        Episode(
            season_id=season.id,
            episode_number=number,
            title=title,
            is_betting_open=is_open,
            air_date=air_date,
        )
        for number, title, is_open, air_date in GOT_S1_EPISODES
    )
    db.add_all(
        Character(show_id=got.id, name=name, actor=actor, status=status, is_active=status == "alive")
        for name, actor, status in GOT_CHARACTERS
    )

    password_hash = hash_password(SEED_PASSWORD)
    players = [
        User(username=username, email=f"{username}@example.com", password_hash=password_hash)
        for username, _ in SEED_PLAYERS
    ]
    db.add_all(players)
    await db.flush()

    db.add_all(
        Membership(user_id=user.id, show_id=got.id, balance=balance)
        for user, (_, balance) in zip(players, SEED_PLAYERS)
    )
    await db.commit()
    logger.info("Seeded %d shows, %d episodes, %d characters", len(shows), len(GOT_S1_EPISODES), len(GOT_CHARACTERS))
    return True
