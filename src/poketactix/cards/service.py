"""Card business logic: starter decks, ownership checks, deck swaps and xp accrual."""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from poketactix.cards import store
from poketactix.cards.leveling import CardStats, current_stats
from poketactix.catalog.service import MAX_SPECIES_ID, BaseCatalog, CatalogError, Species
from poketactix.db.models import PlayerCard
from poketactix.errors import ForbiddenError, InvalidDeckError, StarterGenerationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

STARTER_ATTEMPT_BUDGET = 10 * store.DECK_SIZE


@dataclass(frozen=True)
class XPGain:
    """Outcome of one xp accrual on a card."""

    card_id: int
    pokemon_name: str
    xp_gained: int
    old_level: int
    new_level: int
    xp: int
    old_stats: CardStats
    new_stats: CardStats

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


def card_stats(card: PlayerCard, level: int | None = None) -> CardStats:
    """Effective stats of ``card`` at its own level, or at ``level`` if given."""
    return current_stats(
        card.base_hp,
        card.base_attack,
        card.base_defense,
        card.base_speed,
        card.level if level is None else level,
    )


def card_from_species(user_id: int, species: Species, deck_position: int | None = None) -> PlayerCard:
    """Build a level-1 card for ``user_id`` from a catalog entry."""
    return PlayerCard(
        user_id=user_id,
        pokemon_name=species.name,
        level=1,
        xp=0,
        base_hp=species.hp,
        base_attack=species.attack,
        base_defense=species.defense,
        base_speed=species.speed,
        types=list(species.types),
        moves=[m.as_dict() for m in species.moves],
        sprite=species.sprite,
        is_legendary=species.is_legendary,
        is_mythical=species.is_mythical,
        in_deck=deck_position is not None,
        deck_position=deck_position,
    )


# ---------------------------------------------------------------------------
# Starter deck
# ---------------------------------------------------------------------------


async def generate_starter_deck(
    db: AsyncSession,
    catalog: BaseCatalog,
    user_id: int,
    rng: random.Random | None = None,
) -> list[PlayerCard]:
    """
    Create five distinct, non-legendary, non-mythical level-1 cards in deck slots 1..5.

    Species ids are drawn uniformly from 1..898. Fetch failures, repeated
    names and rare species are skipped. Nothing is written unless all five
    are found within the attempt budget.

    Raises:
        InvalidDeckError: If the user already has a deck.
        StarterGenerationError: If the budget runs out first.
    """
    rng = rng or random.Random()
    if await store.get_user_deck(db, user_id):
        msg = "user already has a deck"
        raise InvalidDeckError(msg, user_id=user_id)

    chosen: list[Species] = []
    names: set[str] = set()
    for _ in range(STARTER_ATTEMPT_BUDGET):
        if len(chosen) == store.DECK_SIZE:
            break
        species_id = rng.randint(1, MAX_SPECIES_ID)
        try:
            species = await catalog.fetch_species(species_id)
        except CatalogError as e:
            logger.info("starter_species_skipped", species_id=species_id, reason=str(e))
            continue
        if species.name in names or species.is_rare:
            continue
        names.add(species.name)
        chosen.append(species)

    if len(chosen) < store.DECK_SIZE:
        raise StarterGenerationError(len(chosen), store.DECK_SIZE)

    cards = [card_from_species(user_id, s, deck_position=i) for i, s in enumerate(chosen, start=1)]
    await store.create_cards(db, cards)
    logger.info("starter_deck_generated", user_id=user_id, pokemon=[c.pokemon_name for c in cards])
    return cards


# ---------------------------------------------------------------------------
# Ownership-checked reads
# ---------------------------------------------------------------------------


async def get_card_for_user(db: AsyncSession, user_id: int, card_id: int) -> PlayerCard:
    """Fetch a card, refusing access when the caller is not the owner."""
    card = await store.get_card(db, card_id)
    if card.user_id != user_id:
        msg = "You don't own this card"
        raise ForbiddenError(msg, card_id=card_id)
    return card


# ---------------------------------------------------------------------------
# Deck replacement
# ---------------------------------------------------------------------------


async def update_deck(db: AsyncSession, user_id: int, card_ids: Sequence[int]) -> list[PlayerCard]:
    """Atomically replace the deck and return it in slot order.

    On failure the transaction is rolled back and the previous deck stays intact.
    """
    try:
        await store.update_deck(db, user_id, list(card_ids))
    except InvalidDeckError:
        await db.rollback()
        raise
    deck = await store.get_user_deck(db, user_id)
    logger.info("deck_updated", user_id=user_id, card_ids=list(card_ids))
    return deck


# ---------------------------------------------------------------------------
# XP
# ---------------------------------------------------------------------------


async def add_xp(db: AsyncSession, card_id: int, amount: int) -> XPGain:
    """Grant xp to a card and report level and stat changes."""
    old_level, card = await store.add_xp(db, card_id, amount)
    gain = XPGain(
        card_id=card.id,
        pokemon_name=card.pokemon_name,
        xp_gained=amount,
        old_level=old_level,
        new_level=card.level,
        xp=card.xp,
        old_stats=card_stats(card, old_level),
        new_stats=card_stats(card),
    )
    if gain.leveled_up:
        logger.info(
            "card_leveled_up",
            card_id=card.id,
            pokemon=card.pokemon_name,
            old_level=old_level,
            new_level=card.level,
        )
    return gain
