"""Response schemas for achievement endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    icon: str
    requirement_type: str
    requirement_value: int


class AchievementStatusResponse(AchievementResponse):
    unlocked: bool
    unlocked_at: datetime | None = None


class AchievementsResponse(BaseModel):
    achievements: list[AchievementStatusResponse]
    total: int
    unlocked: int
    locked: int


class AchievementCheckResponse(BaseModel):
    newly_unlocked: list[AchievementResponse]
    count: int
