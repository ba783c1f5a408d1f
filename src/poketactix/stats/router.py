"""Profile statistics and battle history: /api/v1/profile/{stats,history}."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.auth.dependencies import get_current_user
from poketactix.battles.store import BattleMode, get_user_history
from poketactix.config import get_settings
from poketactix.db.models import PlayerStats, User
from poketactix.dependencies import get_db
from poketactix.stats.schemas import BattleHistoryEntry, BattleHistoryResponse, StatsResponse
from poketactix.stats.store import get_or_create_stats

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])


def stats_response(stats: PlayerStats) -> StatsResponse:
    """Build a StatsResponse, adding the overall win rate as a percentage."""
    total = stats.total_battles
    return StatsResponse(
        total_battles_1v1=stats.total_battles_1v1,
        wins_1v1=stats.wins_1v1,
        losses_1v1=stats.losses_1v1,
        total_battles_5v5=stats.total_battles_5v5,
        wins_5v5=stats.wins_5v5,
        losses_5v5=stats.losses_5v5,
        total_coins_earned=stats.total_coins_earned,
        highest_level=stats.highest_level,
        total_battles=total,
        total_wins=stats.total_wins,
        win_rate=round(stats.total_wins / total * 100, 2) if total else 0.0,
    )


@router.get("/stats", response_model=StatsResponse)
async def get_profile_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> StatsResponse:
    """Aggregate battle counters, created on first access."""
    stats = await get_or_create_stats(db, user.id)
    await db.commit()
    return stats_response(stats)


@router.get("/history", response_model=BattleHistoryResponse)
async def get_profile_history(
    limit: int | None = Query(None, ge=1),
    mode: BattleMode | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BattleHistoryResponse:
    """Most recent battles first; ``limit`` defaults to 20 and is capped at 100."""
    settings = get_settings()
    limit = min(limit or settings.history_default_limit, settings.history_max_limit)
    battles = await get_user_history(db, user.id, limit=limit, mode=mode)
    return BattleHistoryResponse(
        battles=[BattleHistoryEntry.model_validate(b) for b in battles],
        count=len(battles),
    )
