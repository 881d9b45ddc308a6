"""Development seed data."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select

from wtd.auth.service import authenticate_user
from wtd.db.models import Character, Episode, Show, User
from wtd.memberships.service import get_balance
from wtd.shows.seed import GOT_CHARACTERS, GOT_S1_EPISODES, SEED_PASSWORD, SHOW_SEED_DATA, seed_catalog


async def _count(db, model) -> int:
    return (await db.execute(select(func.count(model.id)))).scalar_one()


class TestSeedCatalog:
    async def test_seeds_empty_database(self, db_session):
        assert await seed_catalog(db_session) is True

        assert await _count(db_session, Show) == len(SHOW_SEED_DATA)
        assert await _count(db_session, Episode) == len(GOT_S1_EPISODES)
        assert await _count(db_session, Character) == len(GOT_CHARACTERS)

        open_titles = (
            await db_session.execute(select(Episode.title).where(Episode.is_betting_open.is_(True)))
        ).scalars().all()
        assert open_titles == ["Winter Is Coming"]

    async def test_is_idempotent(self, db_session):
        await seed_catalog(db_session)
        assert await seed_catalog(db_session) is False
        assert await _count(db_session, Show) == len(SHOW_SEED_DATA)
        assert await _count(db_session, User) == 2

    async def test_players_can_log_in_with_balances(self, db_session):
        await seed_catalog(db_session)
        got_id = (await db_session.execute(select(Show.id).where(Show.name == "Game of Thrones"))).scalar_one()

        user = await authenticate_user(db_session, "testuser1", SEED_PASSWORD)

        assert await get_balance(db_session, user.id, got_id) == Decimal("5000")
