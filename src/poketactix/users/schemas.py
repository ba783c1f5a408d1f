"""Response schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from poketactix.stats.schemas import StatsResponse


class UserResponse(BaseModel):
    """Public view of the authenticated user's account."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    coins: int
    created_at: datetime


class CurrentUserResponse(BaseModel):
    user: UserResponse
    stats: StatsResponse
