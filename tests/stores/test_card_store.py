"""Tests for card persistence: inventory, deck slots, xp writes and aggregates."""

import pytest
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.cards import store
from poketactix.db.models import PlayerCard, User
from poketactix.errors import ForbiddenError, InvalidDeckError, NotFoundError, StoreError
from poketactix.users.store import create_user


class TestCreateCard:
    @pytest.mark.asyncio
    async def test_create_defaults(self, db_session: AsyncSession, user: User):
        card = PlayerCard(
            user_id=user.id,
            pokemon_name="eevee",
            base_hp=82,
            base_attack=55,
            base_defense=50,
            base_speed=55,
            types=["normal"],
            moves=[],
        )
        await store.create_card(db_session, card)
        assert card.id is not None
        assert (card.level, card.xp, card.in_deck, card.deck_position) == (1, 0, False, None)

    @pytest.mark.asyncio
    async def test_in_deck_requires_position(self, db_session: AsyncSession, user: User):
        card = PlayerCard(
            user_id=user.id,
            pokemon_name="eevee",
            base_hp=1,
            base_attack=1,
            base_defense=1,
            base_speed=1,
            in_deck=True,
        )
        with pytest.raises(InvalidDeckError):
            await store.create_card(db_session, card)

    @pytest.mark.asyncio
    async def test_position_requires_in_deck(self, db_session: AsyncSession, user: User):
        card = PlayerCard(
            user_id=user.id,
            pokemon_name="eevee",
            base_hp=1,
            base_attack=1,
            base_defense=1,
            base_speed=1,
            deck_position=3,
        )
        with pytest.raises(InvalidDeckError):
            await store.create_card(db_session, card)

    @pytest.mark.asyncio
    async def test_json_columns_round_trip(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id, types=["fire", "flying"])
        loaded = await store.get_card(db_session, card.id)
        assert loaded.types == ["fire", "flying"]
        assert loaded.moves[0]["name"] == "thunderbolt"


class TestQueries:
    @pytest.mark.asyncio
    async def test_get_missing_card(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await store.get_card(db_session, 12345)

    @pytest.mark.asyncio
    async def test_user_cards_newest_first(self, db_session: AsyncSession, user: User, make_card):
        first = await make_card(user.id, pokemon_name="bulbasaur")
        second = await make_card(user.id, pokemon_name="charmander")
        cards = await store.get_user_cards(db_session, user.id)
        assert [c.id for c in cards] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_user_cards_only_own(self, db_session: AsyncSession, user: User, make_card):
        other = await create_user(db_session, "gary", "gary@p.com", "hash")
        await make_card(other.id)
        assert await store.get_user_cards(db_session, user.id) == []

    @pytest.mark.asyncio
    async def test_deck_in_position_order(self, db_session: AsyncSession, user: User, make_card):
        for position in (3, 1, 2):
            await make_card(user.id, pokemon_name=f"p{position}", in_deck=True, deck_position=position)
        await make_card(user.id, pokemon_name="bench")
        deck = await store.get_user_deck(db_session, user.id)
        assert [c.deck_position for c in deck] == [1, 2, 3]
        assert [c.pokemon_name for c in deck] == ["p1", "p2", "p3"]


class TestUpdateCard:
    @pytest.mark.asyncio
    async def test_update_fields(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id)
        card.sprite = "https://img.test/new.png"
        await store.update_card(db_session, card)
        loaded = await store.get_card(db_session, card.id)
        assert loaded.sprite == "https://img.test/new.png"

    @pytest.mark.asyncio
    async def test_owner_change_forbidden(self, db_session: AsyncSession, user: User, make_card):
        other = await create_user(db_session, "gary", "gary@p.com", "hash")
        card = await make_card(user.id)
        card.user_id = other.id
        with pytest.raises(ForbiddenError):
            await store.update_card(db_session, card)

    @pytest.mark.asyncio
    async def test_delete_card(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id)
        card_id = card.id
        await store.delete_card(db_session, card_id)
        with pytest.raises(NotFoundError):
            await store.get_card(db_session, card_id)
        with pytest.raises(NotFoundError):
            await store.delete_card(db_session, card_id)


class TestUpdateDeck:
    @pytest.mark.asyncio
    async def test_assigns_positions_in_order(self, db_session: AsyncSession, user: User, make_card):
        cards = [await make_card(user.id, pokemon_name=f"p{i}") for i in range(6)]
        chosen = [cards[5].id, cards[0].id, cards[3].id, cards[2].id, cards[1].id]
        await store.update_deck(db_session, user.id, chosen)
        deck = await store.get_user_deck(db_session, user.id)
        assert [c.id for c in deck] == chosen
        assert [c.deck_position for c in deck] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_replaces_previous_deck(self, db_session: AsyncSession, user: User, make_card):
        old = [await make_card(user.id, in_deck=True, deck_position=i) for i in range(1, 6)]
        new = [await make_card(user.id) for _ in range(5)]
        await store.update_deck(db_session, user.id, [c.id for c in new])

        benched = await store.get_card(db_session, old[0].id)
        assert (benched.in_deck, benched.deck_position) == (False, None)
        deck = await store.get_user_deck(db_session, user.id)
        assert {c.id for c in deck} == {c.id for c in new}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 4, 6])
    async def test_wrong_size(self, db_session: AsyncSession, user: User, make_card, count):
        cards = [await make_card(user.id) for _ in range(count)]
        with pytest.raises(InvalidDeckError):
            await store.update_deck(db_session, user.id, [c.id for c in cards])

    @pytest.mark.asyncio
    async def test_duplicates_rejected(self, db_session: AsyncSession, user: User, make_card):
        cards = [await make_card(user.id) for _ in range(4)]
        ids = [c.id for c in cards] + [cards[0].id]
        with pytest.raises(InvalidDeckError, match="duplicate"):
            await store.update_deck(db_session, user.id, ids)

    @pytest.mark.asyncio
    async def test_foreign_card_rejected(self, db_session: AsyncSession, user: User, make_card):
        other = await create_user(db_session, "gary", "gary@p.com", "hash")
        mine = [await make_card(user.id) for _ in range(4)]
        theirs = await make_card(other.id)
        with pytest.raises(InvalidDeckError, match="does not own"):
            await store.update_deck(db_session, user.id, [c.id for c in mine] + [theirs.id])


class TestAddXP:
    @pytest.mark.asyncio
    async def test_level_up_and_carry(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id, level=1, xp=99)
        old_level, updated = await store.add_xp(db_session, card.id, 1)
        assert old_level == 1
        assert (updated.level, updated.xp) == (2, 0)

        old_level, updated = await store.add_xp(db_session, card.id, 300)
        assert old_level == 2
        assert (updated.level, updated.xp) == (3, 100)

    @pytest.mark.asyncio
    async def test_capped_at_max_level(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id, level=49, xp=4899)
        _, updated = await store.add_xp(db_session, card.id, 10000)
        assert (updated.level, updated.xp) == (50, 0)

    @pytest.mark.asyncio
    async def test_version_bumps_on_each_write(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id)
        start = card.version
        await store.add_xp(db_session, card.id, 10)
        _, updated = await store.add_xp(db_session, card.id, 10)
        assert updated.version == start + 2
        assert updated.xp == 20

    @pytest.mark.asyncio
    async def test_unknown_card(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await store.add_xp(db_session, 999, 10)

    @pytest.mark.asyncio
    async def test_gives_up_when_version_keeps_moving(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id)
        card_id = card.id

        def concurrent_writer(state):
            # Another writer bumps the version between our read and our write.
            if state.is_update:
                state.session.connection().execute(
                    text("UPDATE player_cards SET version = version + 1 WHERE id = :id"), {"id": card_id}
                )

        event.listen(db_session.sync_session, "do_orm_execute", concurrent_writer)
        with pytest.raises(StoreError, match="conflicting writes"):
            await store.add_xp(db_session, card_id, 10)

    @pytest.mark.asyncio
    async def test_retries_after_single_conflict(self, db_session: AsyncSession, user: User, make_card):
        card = await make_card(user.id)
        card_id = card.id
        conflicts = []

        def concurrent_writer(state):
            if state.is_update and not conflicts:
                conflicts.append(card_id)
                state.session.connection().execute(
                    text("UPDATE player_cards SET xp = xp + 5, version = version + 1 WHERE id = :id"), {"id": card_id}
                )

        event.listen(db_session.sync_session, "do_orm_execute", concurrent_writer)
        _, updated = await store.add_xp(db_session, card_id, 10)
        assert conflicts == [card_id]
        assert updated.xp == 15


class TestAggregates:
    @pytest.mark.asyncio
    async def test_highest_level_defaults_to_one(self, db_session: AsyncSession, user: User):
        assert await store.get_highest_level(db_session, user.id) == 1

    @pytest.mark.asyncio
    async def test_highest_level(self, db_session: AsyncSession, user: User, make_card):
        await make_card(user.id, level=4)
        await make_card(user.id, level=12)
        assert await store.get_highest_level(db_session, user.id) == 12

    @pytest.mark.asyncio
    async def test_rarity_counts(self, db_session: AsyncSession, user: User, make_card):
        await make_card(user.id, pokemon_name="mewtwo", is_legendary=True)
        await make_card(user.id, pokemon_name="articuno", is_legendary=True)
        await make_card(user.id, pokemon_name="mew", is_mythical=True)
        await make_card(user.id)
        assert await store.count_legendary(db_session, user.id) == 2
        assert await store.count_mythical(db_session, user.id) == 1
