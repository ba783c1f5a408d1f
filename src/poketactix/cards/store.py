"""
Card persistence: inventory, deck membership and xp writes.

Store functions flush but never commit; the caller owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, func, inspect, select, update

from poketactix.cards.leveling import apply_xp
from poketactix.db.models import PlayerCard
from poketactix.errors import (
    ForbiddenError,
    InvalidDeckError,
    NotFoundError,
    StoreError,
    store_errors,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DECK_SIZE = 5
MAX_XP_WRITE_ATTEMPTS = 5


def _check_deck_fields(card: PlayerCard) -> None:
    if card.in_deck:
        if card.deck_position is None or not 1 <= card.deck_position <= DECK_SIZE:
            msg = f"in-deck card needs a position between 1 and {DECK_SIZE}"
            raise InvalidDeckError(msg)
    elif card.deck_position is not None:
        msg = "card outside the deck cannot hold a deck position"
        raise InvalidDeckError(msg)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@store_errors("create_card")
async def create_card(db: AsyncSession, card: PlayerCard) -> PlayerCard:
    """Insert a card. ``in_deck`` and ``deck_position`` must agree."""
    _check_deck_fields(card)
    db.add(card)
    await db.flush()
    return card


@store_errors("create_cards")
async def create_cards(db: AsyncSession, cards: Sequence[PlayerCard]) -> list[PlayerCard]:
    """Insert several cards in one flush."""
    for card in cards:
        _check_deck_fields(card)
    db.add_all(cards)
    await db.flush()
    return list(cards)


@store_errors("get_card")
async def get_card(db: AsyncSession, card_id: int) -> PlayerCard:
    """Fetch a card by ID. Raises NotFoundError if absent."""
    result = await db.execute(
        select(PlayerCard)
        .where(PlayerCard.id == card_id)
        .execution_options(populate_existing=True)
    )
    card = result.scalar_one_or_none()
    if card is None:
        raise NotFoundError("card", card_id)
    return card


@store_errors("get_user_cards")
async def get_user_cards(db: AsyncSession, user_id: int) -> list[PlayerCard]:
    """All cards owned by a user, newest first."""
    result = await db.execute(
        select(PlayerCard)
        .where(PlayerCard.user_id == user_id)
        .order_by(PlayerCard.created_at.desc(), PlayerCard.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


@store_errors("get_user_deck")
async def get_user_deck(db: AsyncSession, user_id: int) -> list[PlayerCard]:
    """In-deck cards ordered by deck position."""
    result = await db.execute(
        select(PlayerCard)
        .where(PlayerCard.user_id == user_id, PlayerCard.in_deck.is_(True))
        .order_by(PlayerCard.deck_position.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


@store_errors("update_card")
async def update_card(db: AsyncSession, card: PlayerCard) -> PlayerCard:
    """Persist in-memory changes to a card. The owner is immutable."""
    if inspect(card).attrs.user_id.history.deleted:
        msg = "card owner cannot change"
        raise ForbiddenError(msg, card_id=card.id)
    _check_deck_fields(card)
    await db.flush()
    return card


@store_errors("delete_card")
async def delete_card(db: AsyncSession, card_id: int) -> None:
    result = await db.execute(delete(PlayerCard).where(PlayerCard.id == card_id))
    if result.rowcount == 0:
        raise NotFoundError("card", card_id)


# ---------------------------------------------------------------------------
# Deck
# ---------------------------------------------------------------------------


@store_errors("update_deck")
async def update_deck(db: AsyncSession, user_id: int, card_ids: Sequence[int]) -> None:
    """
    Replace the user's deck with ``card_ids`` in order (position 1..5).

    Validation runs before any write. Each assignment must touch exactly one
    row owned by ``user_id``; otherwise InvalidDeckError is raised and the
    caller must roll back the transaction.
    """
    if len(card_ids) != DECK_SIZE:
        msg = f"deck must contain exactly {DECK_SIZE} cards, got {len(card_ids)}"
        raise InvalidDeckError(msg)
    if len(set(card_ids)) != len(card_ids):
        msg = "deck contains duplicate cards"
        raise InvalidDeckError(msg)

    owned = await db.scalar(
        select(func.count())
        .select_from(PlayerCard)
        .where(PlayerCard.user_id == user_id, PlayerCard.id.in_(card_ids))
    )
    if owned != DECK_SIZE:
        msg = "deck references cards the user does not own"
        raise InvalidDeckError(msg, owned=owned)

    await db.execute(
        update(PlayerCard)
        .where(PlayerCard.user_id == user_id, PlayerCard.in_deck.is_(True))
        .values(in_deck=False, deck_position=None)
        .execution_options(synchronize_session=False)
    )
    for position, card_id in enumerate(card_ids, start=1):
        result = await db.execute(
            update(PlayerCard)
            .where(PlayerCard.id == card_id, PlayerCard.user_id == user_id)
            .values(in_deck=True, deck_position=position)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            msg = f"card {card_id} could not be placed in the deck"
            raise InvalidDeckError(msg)


# ---------------------------------------------------------------------------
# XP
# ---------------------------------------------------------------------------


@store_errors("add_xp")
async def add_xp(db: AsyncSession, card_id: int, amount: int) -> tuple[int, PlayerCard]:
    """
    Add xp to a card and apply level-ups.

    Compare-and-set on ``version``: a concurrent writer makes the UPDATE miss,
    and the read-compute-write cycle is retried against the fresh row.

    Returns:
        Tuple of (level before the write, refreshed card).
    """
    for attempt in range(1, MAX_XP_WRITE_ATTEMPTS + 1):
        result = await db.execute(
            select(PlayerCard)
            .where(PlayerCard.id == card_id)
            .execution_options(populate_existing=True)
        )
        card = result.scalar_one_or_none()
        if card is None:
            raise NotFoundError("card", card_id)

        old_level = card.level
        level, xp = apply_xp(card.level, card.xp, amount)
        written = await db.execute(
            update(PlayerCard)
            .where(PlayerCard.id == card_id, PlayerCard.version == card.version)
            .values(level=level, xp=xp, version=PlayerCard.version + 1)
            .execution_options(synchronize_session=False)
        )
        if written.rowcount == 1:
            await db.refresh(card)
            return old_level, card

        logger.warning("card_xp_write_conflict", card_id=card_id, attempt=attempt)

    msg = f"add_xp gave up on card {card_id} after {MAX_XP_WRITE_ATTEMPTS} conflicting writes"
    raise StoreError(msg, operation="add_xp")


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@store_errors("get_highest_level")
async def get_highest_level(db: AsyncSession, user_id: int) -> int:
    """Highest card level the user owns (1 when they own no cards)."""
    level = await db.scalar(
        select(func.coalesce(func.max(PlayerCard.level), 1)).where(PlayerCard.user_id == user_id)
    )
    return int(level)


@store_errors("count_legendary")
async def count_legendary(db: AsyncSession, user_id: int) -> int:
    count = await db.scalar(
        select(func.count())
        .select_from(PlayerCard)
        .where(PlayerCard.user_id == user_id, PlayerCard.is_legendary.is_(True))
    )
    return int(count or 0)


@store_errors("count_mythical")
async def count_mythical(db: AsyncSession, user_id: int) -> int:
    count = await db.scalar(
        select(func.count())
        .select_from(PlayerCard)
        .where(PlayerCard.user_id == user_id, PlayerCard.is_mythical.is_(True))
    )
    return int(count or 0)
