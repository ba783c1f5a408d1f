"""Response schemas for profile statistics and battle history."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class StatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_battles_1v1: int
    wins_1v1: int
    losses_1v1: int
    total_battles_5v5: int
    wins_5v5: int
    losses_5v5: int
    total_coins_earned: int
    highest_level: int
    total_battles: int
    total_wins: int
    win_rate: float = 0.0


class BattleHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    mode: str
    result: str
    coins_earned: int
    duration: int
    created_at: datetime


class BattleHistoryResponse(BaseModel):
    battles: list[BattleHistoryEntry]
    count: int
