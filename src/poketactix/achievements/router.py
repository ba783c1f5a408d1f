"""Achievement endpoints: /api/v1/profile/achievements."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.achievements.schemas import (
    AchievementCheckResponse,
    AchievementResponse,
    AchievementsResponse,
    AchievementStatusResponse,
)
from poketactix.achievements.service import check_and_unlock, get_achievements
from poketactix.auth.dependencies import get_current_user
from poketactix.db.models import User
from poketactix.dependencies import get_db

router = APIRouter(prefix="/api/v1/profile", tags=["Achievements"])


@router.get("/achievements", response_model=AchievementsResponse)
async def list_achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AchievementsResponse:
    """The full catalog with the caller's unlock state."""
    statuses = await get_achievements(db, user.id)
    items = [
        AchievementStatusResponse(
            **AchievementResponse.model_validate(s.achievement).model_dump(),
            unlocked=s.unlocked,
            unlocked_at=s.unlocked_at,
        )
        for s in statuses
    ]
    unlocked = sum(1 for s in statuses if s.unlocked)
    return AchievementsResponse(
        achievements=items,
        total=len(items),
        unlocked=unlocked,
        locked=len(items) - unlocked,
    )


@router.post("/achievements/check", response_model=AchievementCheckResponse)
async def check_achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AchievementCheckResponse:
    """Evaluate every locked achievement now and unlock those that are met."""
    newly = await check_and_unlock(db, user.id)
    await db.commit()
    return AchievementCheckResponse(
        newly_unlocked=[AchievementResponse.model_validate(a) for a in newly],
        count=len(newly),
    )
