"""arq settlement jobs."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from wtd.bets.service import place_bet
from wtd.bets.settlement import SettlementError
from wtd.bets.worker import SettlementWorkerSettings, refund_episode_job, resolve_outcome_job
from wtd.config import get_settings
from wtd.memberships.service import get_balance


@pytest.fixture
def ctx(database, monkeypatch):
    monkeypatch.setattr(get_settings(), "cache_enabled", True)
    return {"redis": AsyncMock()}


class TestResolveOutcomeJob:
    async def test_settles_and_invalidates_character_cache(self, ctx, db_session, catalog, alice):
        await place_bet(db_session, alice.user_id, catalog.alive_id, catalog.open_episode_id, 300, "dies")
        await db_session.commit()

        resolved = await resolve_outcome_job(ctx, catalog.open_episode_id, catalog.alive_id, True)

        assert resolved == 1
        assert await get_balance(db_session, alice.user_id, catalog.show_id) == Decimal("1300")
        ctx["redis"].delete.assert_awaited_once_with(
            f"wtd:character:show:{catalog.show_id}", f"wtd:show:{catalog.show_id}"
        )


class TestRefundEpisodeJob:
    async def test_refunds_and_invalidates_episode_cache(self, ctx, db_session, catalog, alice):
        await place_bet(db_session, alice.user_id, catalog.alive_id, catalog.open_episode_id, 300, "dies")
        await db_session.commit()

        refunded = await refund_episode_job(ctx, catalog.open_episode_id)

        assert refunded == 1
        assert await get_balance(db_session, alice.user_id, catalog.show_id) == Decimal("1000")
        ctx["redis"].delete.assert_awaited_once_with(
            f"wtd:episode:{catalog.open_episode_id}",
            f"wtd:season:{catalog.season_id}:episodes",
            f"wtd:show:{catalog.show_id}",
        )

    async def test_unknown_episode_propagates(self, ctx):
        with pytest.raises(SettlementError):
            await refund_episode_job(ctx, 9999)
        ctx["redis"].delete.assert_not_called()


def test_worker_settings_register_jobs():
    assert resolve_outcome_job in SettlementWorkerSettings.functions
    assert refund_episode_job in SettlementWorkerSettings.functions
