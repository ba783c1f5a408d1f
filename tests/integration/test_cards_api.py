"""Integration tests for /api/v1/cards."""

import pytest
from httpx import AsyncClient


async def _deck_ids(client: AsyncClient) -> list[int]:
    response = await client.get("/api/v1/cards/deck")
    assert response.status_code == 200
    return [c["id"] for c in response.json()["cards"]]


class TestListCards:
    @pytest.mark.asyncio
    async def test_starter_collection(self, authed_client: AsyncClient) -> None:
        response = await authed_client.get("/api/v1/cards")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 5
        card = data["cards"][0]
        assert card["level"] == 1
        assert card["xp_to_next_level"] == 100
        assert card["current_stats"]["stamina"] == card["current_stats"]["speed"] * 2
        assert card["base_stats"]["hp"] == card["current_stats"]["hp"]
        assert card["moves"][0]["name"] == "tackle"

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/cards")
        assert response.status_code in (401, 403)


class TestGetCard:
    @pytest.mark.asyncio
    async def test_own_card(self, authed_client: AsyncClient) -> None:
        card_id = (await _deck_ids(authed_client))[0]
        response = await authed_client.get(f"/api/v1/cards/{card_id}")
        assert response.status_code == 200
        assert response.json()["deck_position"] == 1

    @pytest.mark.asyncio
    async def test_other_users_card_forbidden(self, authed_client: AsyncClient, register_user) -> None:
        gary = await register_user(authed_client, "gary", "gary@p.com")
        gary_cards = await authed_client.get(
            "/api/v1/cards", headers={"Authorization": f"Bearer {gary['access_token']}"}
        )
        foreign_id = gary_cards.json()["cards"][0]["id"]

        response = await authed_client.get(f"/api/v1/cards/{foreign_id}")
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"
        assert response.json()["detail"] == "You don't own this card"

    @pytest.mark.asyncio
    async def test_missing_card(self, authed_client: AsyncClient) -> None:
        response = await authed_client.get("/api/v1/cards/999999")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestUpdateDeck:
    @pytest.mark.asyncio
    async def test_reorder(self, authed_client: AsyncClient) -> None:
        ids = await _deck_ids(authed_client)
        reordered = list(reversed(ids))
        response = await authed_client.put("/api/v1/cards/deck", json={"card_ids": reordered})
        assert response.status_code == 200
        cards = response.json()["cards"]
        assert [c["id"] for c in cards] == reordered
        assert [c["deck_position"] for c in cards] == [1, 2, 3, 4, 5]
        assert await _deck_ids(authed_client) == reordered

    @pytest.mark.asyncio
    async def test_wrong_size_keeps_deck(self, authed_client: AsyncClient) -> None:
        ids = await _deck_ids(authed_client)
        response = await authed_client.put("/api/v1/cards/deck", json={"card_ids": ids[:4]})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DECK"
        assert await _deck_ids(authed_client) == ids

    @pytest.mark.asyncio
    async def test_duplicate_ids_rejected(self, authed_client: AsyncClient) -> None:
        ids = await _deck_ids(authed_client)
        response = await authed_client.put("/api/v1/cards/deck", json={"card_ids": ids[:4] + ids[:1]})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DECK"

    @pytest.mark.asyncio
    async def test_foreign_card_keeps_deck(self, authed_client: AsyncClient, register_user) -> None:
        ids = await _deck_ids(authed_client)
        gary = await register_user(authed_client, "gary", "gary@p.com")
        gary_deck = await authed_client.get(
            "/api/v1/cards/deck", headers={"Authorization": f"Bearer {gary['access_token']}"}
        )
        foreign_id = gary_deck.json()["cards"][0]["id"]

        response = await authed_client.put("/api/v1/cards/deck", json={"card_ids": ids[:4] + [foreign_id]})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DECK"
        assert await _deck_ids(authed_client) == ids
