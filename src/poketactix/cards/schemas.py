"""Request/response schemas for card endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class MoveResponse(BaseModel):
    name: str
    power: int
    stamina_cost: int
    type: str


class StatBlock(BaseModel):
    hp: int
    attack: int
    defense: int
    speed: int
    stamina: int | None = None


class CardResponse(BaseModel):
    """A card with its base stats and the stats it has at its current level."""

    id: int
    pokemon_name: str
    level: int
    xp: int
    xp_to_next_level: int
    base_stats: StatBlock
    current_stats: StatBlock
    types: list[str]
    moves: list[MoveResponse]
    sprite: str
    is_legendary: bool
    is_mythical: bool
    in_deck: bool
    deck_position: int | None
    created_at: datetime


class CardListResponse(BaseModel):
    cards: list[CardResponse]
    count: int


class DeckResponse(BaseModel):
    cards: list[CardResponse]


class DeckUpdateRequest(BaseModel):
    """Exactly five owned, distinct card ids in slot order (checked by the service)."""

    card_ids: list[int]
