"""Request/response schemas for battle completion."""

from __future__ import annotations

from pydantic import BaseModel, Field

from poketactix.achievements.schemas import AchievementResponse
from poketactix.battles.store import BattleMode, BattleResult
from poketactix.cards.schemas import StatBlock
from poketactix.stats.schemas import BattleHistoryEntry, StatsResponse


class BattleCompleteRequest(BaseModel):
    """A finished battle. Rewards are computed server-side from mode and result."""

    mode: BattleMode
    result: BattleResult
    duration: int = Field(0, ge=0)
    card_ids: list[int] = Field(default_factory=list)


class XPGainResponse(BaseModel):
    card_id: int
    pokemon_name: str
    xp_gained: int
    old_level: int
    new_level: int
    leveled_up: bool
    xp: int
    old_stats: StatBlock
    new_stats: StatBlock


class BattleCompleteResponse(BaseModel):
    battle: BattleHistoryEntry
    coins_earned: int
    coins_balance: int
    xp_gains: list[XPGainResponse]
    stats: StatsResponse
    new_achievements: list[AchievementResponse]
