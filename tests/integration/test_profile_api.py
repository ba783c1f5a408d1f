"""Integration tests for /api/v1/profile: stats, history and achievements."""

import pytest
from httpx import AsyncClient


async def _win(client: AsyncClient, mode: str = "1v1") -> None:
    response = await client.post("/api/v1/battles/complete", json={"mode": mode, "result": "win"})
    assert response.status_code == 200, response.text


async def _lose(client: AsyncClient, mode: str = "1v1") -> None:
    response = await client.post("/api/v1/battles/complete", json={"mode": mode, "result": "loss"})
    assert response.status_code == 200, response.text


class TestProfileStats:
    @pytest.mark.asyncio
    async def test_zeroed_on_first_access(self, authed_client: AsyncClient) -> None:
        response = await authed_client.get("/api/v1/profile/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["total_battles"] == 0
        assert data["total_wins"] == 0
        assert data["highest_level"] == 1
        assert data["win_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_win_rate(self, authed_client: AsyncClient) -> None:
        await _win(authed_client)
        await _lose(authed_client, "5v5")
        await _lose(authed_client)
        data = (await authed_client.get("/api/v1/profile/stats")).json()
        assert data["total_battles"] == 3
        assert data["total_wins"] == 1
        assert data["win_rate"] == 33.33
        assert data["total_coins_earned"] == 70


class TestProfileHistory:
    @pytest.mark.asyncio
    async def test_newest_first(self, authed_client: AsyncClient) -> None:
        await _win(authed_client)
        await _lose(authed_client, "5v5")
        data = (await authed_client.get("/api/v1/profile/history")).json()
        assert data["count"] == 2
        assert [b["result"] for b in data["battles"]] == ["loss", "win"]

    @pytest.mark.asyncio
    async def test_limit_and_mode(self, authed_client: AsyncClient) -> None:
        for _ in range(3):
            await _win(authed_client)
        await _win(authed_client, "5v5")

        limited = (await authed_client.get("/api/v1/profile/history", params={"limit": 2})).json()
        assert limited["count"] == 2

        five = (await authed_client.get("/api/v1/profile/history", params={"mode": "5v5"})).json()
        assert [b["mode"] for b in five["battles"]] == ["5v5"]

    @pytest.mark.asyncio
    async def test_limit_above_cap_is_accepted(self, authed_client: AsyncClient) -> None:
        response = await authed_client.get("/api/v1/profile/history", params={"limit": 1000})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_params(self, authed_client: AsyncClient) -> None:
        assert (await authed_client.get("/api/v1/profile/history", params={"limit": 0})).status_code == 422
        assert (await authed_client.get("/api/v1/profile/history", params={"mode": "2v2"})).status_code == 422


class TestProfileAchievements:
    @pytest.mark.asyncio
    async def test_catalog_with_unlock_state(self, authed_client: AsyncClient) -> None:
        data = (await authed_client.get("/api/v1/profile/achievements")).json()
        assert (data["total"], data["unlocked"], data["locked"]) == (8, 0, 8)

        await _win(authed_client)
        data = (await authed_client.get("/api/v1/profile/achievements")).json()
        assert (data["unlocked"], data["locked"]) == (1, 7)
        first = next(a for a in data["achievements"] if a["name"] == "First Victory")
        assert first["unlocked"] is True
        assert first["unlocked_at"] is not None
        assert first["requirement_type"] == "total_wins"

    @pytest.mark.asyncio
    async def test_manual_check_is_idempotent(self, authed_client: AsyncClient) -> None:
        response = await authed_client.post("/api/v1/profile/achievements/check")
        assert response.status_code == 200
        assert response.json() == {"newly_unlocked": [], "count": 0}

        await _win(authed_client)
        again = (await authed_client.post("/api/v1/profile/achievements/check")).json()
        assert again["count"] == 0
