"""Achievement engine: catalog reads, unlocks and rule evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import and_, select

from poketactix.achievements.rules import AchievementRule, PlayerProgress
from poketactix.cards import store as card_store
from poketactix.db.base import insert_for
from poketactix.db.models import Achievement, UserAchievement
from poketactix.errors import store_errors
from poketactix.stats import store as stats_store
from poketactix.users import store as user_store

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass(frozen=True)
class AchievementStatus:
    achievement: Achievement
    unlocked: bool
    unlocked_at: datetime | None = None


@store_errors("get_achievements")
async def get_achievements(db: AsyncSession, user_id: int) -> list[AchievementStatus]:
    """Every catalog entry with the user's unlock state, ordered by id."""
    result = await db.execute(
        select(Achievement, UserAchievement.unlocked_at)
        .outerjoin(
            UserAchievement,
            and_(
                UserAchievement.achievement_id == Achievement.id,
                UserAchievement.user_id == user_id,
            ),
        )
        .order_by(Achievement.id)
    )
    return [
        AchievementStatus(achievement=achievement, unlocked=unlocked_at is not None, unlocked_at=unlocked_at)
        for achievement, unlocked_at in result.all()
    ]


@store_errors("unlock_achievement")
async def unlock_achievement(db: AsyncSession, user_id: int, achievement_id: int) -> bool:
    """Record an unlock. Returns False if the user already had it."""
    stmt = (
        insert_for(db, UserAchievement)
        .values(user_id=user_id, achievement_id=achievement_id)
        .on_conflict_do_nothing(index_elements=["user_id", "achievement_id"])
        .returning(UserAchievement.achievement_id)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


async def load_progress(db: AsyncSession, user_id: int) -> PlayerProgress:
    """Gather stats, card aggregates and coin balance for rule evaluation."""
    user = await user_store.get_user_by_id(db, user_id)
    stats = await stats_store.get_or_create_stats(db, user_id)
    card_level = await card_store.get_highest_level(db, user_id)
    return PlayerProgress(
        total_wins=stats.total_wins,
        legendary_owned=await card_store.count_legendary(db, user_id),
        mythical_owned=await card_store.count_mythical(db, user_id),
        # The stats value never drops, even if the levelled card is gone.
        highest_level=max(card_level, stats.highest_level),
        coins=user.coins,
    )


async def check_and_unlock(db: AsyncSession, user_id: int) -> list[Achievement]:
    """
    Unlock every not-yet-unlocked achievement the user now satisfies.

    Returns the newly unlocked achievements; a repeat call with unchanged
    progress returns an empty list.
    """
    progress = await load_progress(db, user_id)
    statuses = await get_achievements(db, user_id)

    unlocked: list[Achievement] = []
    for status in statuses:
        if status.unlocked:
            continue
        achievement = status.achievement
        rule = AchievementRule.parse(achievement.requirement_type, achievement.requirement_value)
        if rule is None:
            logger.warning(
                "unknown_requirement_type",
                achievement_id=achievement.id,
                requirement_type=achievement.requirement_type,
            )
            continue
        if not rule.satisfied_by(progress):
            continue
        if await unlock_achievement(db, user_id, achievement.id):
            unlocked.append(achievement)
            logger.info("achievement_unlocked", user_id=user_id, achievement=achievement.name)

    return unlocked
