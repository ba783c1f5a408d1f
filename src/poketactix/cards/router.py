"""Card collection and deck router: all /api/v1/cards/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.auth.dependencies import get_current_user
from poketactix.cards import service, store
from poketactix.cards.leveling import xp_to_next_level
from poketactix.cards.schemas import (
    CardListResponse,
    CardResponse,
    DeckResponse,
    DeckUpdateRequest,
    MoveResponse,
    StatBlock,
)
from poketactix.db.models import PlayerCard, User
from poketactix.dependencies import get_db

router = APIRouter(prefix="/api/v1/cards", tags=["Cards"])


def card_response(card: PlayerCard) -> CardResponse:
    """Build a CardResponse from a PlayerCard model."""
    stats = service.card_stats(card)
    return CardResponse(
        id=card.id,
        pokemon_name=card.pokemon_name,
        level=card.level,
        xp=card.xp,
        xp_to_next_level=xp_to_next_level(card.level, card.xp),
        base_stats=StatBlock(
            hp=card.base_hp,
            attack=card.base_attack,
            defense=card.base_defense,
            speed=card.base_speed,
        ),
        current_stats=StatBlock(**stats.as_dict()),
        types=list(card.types or []),
        moves=[MoveResponse(**m) for m in card.moves or []],
        sprite=card.sprite,
        is_legendary=card.is_legendary,
        is_mythical=card.is_mythical,
        in_deck=card.in_deck,
        deck_position=card.deck_position,
        created_at=card.created_at,
    )


@router.get("", response_model=CardListResponse)
async def list_cards(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CardListResponse:
    """All cards the user owns, newest first."""
    cards = await store.get_user_cards(db, user.id)
    return CardListResponse(cards=[card_response(c) for c in cards], count=len(cards))


@router.get("/deck", response_model=DeckResponse)
async def get_deck(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DeckResponse:
    """The active deck in slot order (empty or five cards)."""
    deck = await store.get_user_deck(db, user.id)
    return DeckResponse(cards=[card_response(c) for c in deck])


@router.put("/deck", response_model=DeckResponse)
async def replace_deck(
    body: DeckUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DeckResponse:
    """Replace the deck with five owned cards, in the given order."""
    deck = await service.update_deck(db, user.id, body.card_ids)
    await db.commit()
    return DeckResponse(cards=[card_response(c) for c in deck])


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CardResponse:
    """One card; 403 if it belongs to another user."""
    card = await service.get_card_for_user(db, user.id, card_id)
    return card_response(card)
