"""Joining shows and per-show leaderboards."""

from decimal import Decimal

from httpx import AsyncClient

from wtd.memberships.service import get_balance


class TestJoin:
    async def test_join_grants_initial_balance(self, client: AsyncClient, make_player, catalog, db_session):
        player = await make_player("bran", balance=None)

        response = await client.post(f"/api/shows/{catalog.show_id}/join", headers=player.headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Successfully joined show", "balance": 1000.0}
        assert await get_balance(db_session, player.user_id, catalog.show_id) == Decimal("1000")

    async def test_second_join_rejected_balance_unchanged(self, client: AsyncClient, make_player, catalog, db_session):
        player = await make_player("bran", balance=Decimal("250"))

        response = await client.post(f"/api/shows/{catalog.show_id}/join", headers=player.headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Unable to join show. You may already be a member."
        assert await get_balance(db_session, player.user_id, catalog.show_id) == Decimal("250")

    async def test_join_unknown_show_rejected(self, client: AsyncClient, make_player, catalog):
        player = await make_player("bran", balance=None)
        response = await client.post("/api/shows/9999/join", headers=player.headers)
        assert response.status_code == 400

    async def test_join_other_show_uses_its_initial_balance(self, client: AsyncClient, alice, catalog):
        response = await client.post(f"/api/shows/{catalog.other_show_id}/join", headers=alice.headers)
        assert response.status_code == 200
        assert response.json()["balance"] == 500.0

    async def test_join_requires_auth(self, client: AsyncClient, catalog):
        response = await client.post(f"/api/shows/{catalog.show_id}/join")
        assert response.status_code == 401


class TestLeaderboard:
    async def test_sorted_by_balance_with_ranks(self, client: AsyncClient, make_player, catalog):
        await make_player("low", balance=Decimal("100"))
        await make_player("high", balance=Decimal("5000"))
        await make_player("mid", balance=Decimal("1200"))

        response = await client.get(f"/api/shows/{catalog.show_id}/leaderboard")

        assert response.status_code == 200
        data = response.json()
        assert [e["username"] for e in data] == ["high", "mid", "low"]
        assert [e["rank"] for e in data] == [1, 2, 3]
        assert data[0]["balance"] == 5000.0
        assert "userId" in data[0]

    async def test_ties_keep_join_order(self, client: AsyncClient, make_player, catalog):
        await make_player("first", balance=Decimal("700"))
        await make_player("second", balance=Decimal("700"))

        response = await client.get(f"/api/shows/{catalog.show_id}/leaderboard")

        assert [e["username"] for e in response.json()] == ["first", "second"]

    async def test_limit_truncates(self, client: AsyncClient, make_player, catalog):
        for i in range(5):
            await make_player(f"p{i}", balance=Decimal(100 * (i + 1)))

        response = await client.get(f"/api/shows/{catalog.show_id}/leaderboard", params={"limit": 2})

        data = response.json()
        assert len(data) == 2
        assert [e["username"] for e in data] == ["p4", "p3"]

    async def test_limit_out_of_range(self, client: AsyncClient, catalog):
        response = await client.get(f"/api/shows/{catalog.show_id}/leaderboard", params={"limit": 0})
        assert response.status_code == 422
        response = await client.get(f"/api/shows/{catalog.show_id}/leaderboard", params={"limit": 101})
        assert response.status_code == 422

    async def test_only_members_of_the_show(self, client: AsyncClient, make_player, catalog):
        await make_player("member", balance=Decimal("100"))
        await make_player("outsider", balance=None)

        response = await client.get(f"/api/shows/{catalog.show_id}/leaderboard")

        assert [e["username"] for e in response.json()] == ["member"]
