"""Per-user aggregate statistics with atomic counter updates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from poketactix.battles.store import BattleMode, BattleResult
from poketactix.db.base import insert_for
from poketactix.db.models import PlayerStats
from poketactix.errors import NotFoundError, store_errors

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def _select_stats(db: AsyncSession, user_id: int) -> PlayerStats | None:
    result = await db.execute(
        select(PlayerStats)
        .where(PlayerStats.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


@store_errors("get_or_create_stats")
async def get_or_create_stats(db: AsyncSession, user_id: int) -> PlayerStats:
    """
    Return the user's stats row, inserting a zeroed one on first access.

    Safe under concurrent first access: the insert is ON CONFLICT DO NOTHING,
    and the loser of the race reads the winner's row.

    Raises:
        NotFoundError: If the user does not exist.
    """
    stmt = (
        insert_for(db, PlayerStats)
        .values(user_id=user_id)
        .on_conflict_do_nothing(index_elements=[PlayerStats.user_id])
        .returning(PlayerStats)
    )
    try:
        result = await db.execute(stmt)
    except IntegrityError as e:
        raise NotFoundError("user", user_id) from e
    stats = result.scalar_one_or_none()
    if stats is None:
        stats = await _select_stats(db, user_id)
    if stats is None:
        raise NotFoundError("player_stats", user_id)
    return stats


@store_errors("get_stats")
async def get_stats(db: AsyncSession, user_id: int) -> PlayerStats:
    stats = await _select_stats(db, user_id)
    if stats is None:
        raise NotFoundError("player_stats", user_id)
    return stats


@store_errors("record_battle")
async def record_battle(
    db: AsyncSession,
    user_id: int,
    mode: BattleMode,
    result: BattleResult,
    coins_earned: int,
) -> PlayerStats:
    """
    Count one battle for ``mode`` and add ``coins_earned`` to the lifetime total.

    All counters move in a single ``SET col = col + n`` statement so
    concurrent calls for the same user never lose increments. Draws only
    bump the battle count.
    """
    mode = BattleMode(mode)
    result = BattleResult(result)
    await get_or_create_stats(db, user_id)

    suffix = mode.value
    battles_col = getattr(PlayerStats, f"total_battles_{suffix}")
    values: dict[str, Any] = {
        f"total_battles_{suffix}": battles_col + 1,
        "total_coins_earned": PlayerStats.total_coins_earned + coins_earned,
    }
    if result is BattleResult.WIN:
        values[f"wins_{suffix}"] = getattr(PlayerStats, f"wins_{suffix}") + 1
    elif result is BattleResult.LOSS:
        values[f"losses_{suffix}"] = getattr(PlayerStats, f"losses_{suffix}") + 1

    await db.execute(
        update(PlayerStats)
        .where(PlayerStats.user_id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    logger.info("battle_recorded", user_id=user_id, mode=suffix, result=result.value, coins=coins_earned)
    return await get_stats(db, user_id)


@store_errors("update_highest_level")
async def update_highest_level(db: AsyncSession, user_id: int, level: int) -> bool:
    """Raise ``highest_level`` to ``level`` if it is higher. Returns True if it moved."""
    await get_or_create_stats(db, user_id)
    result = await db.execute(
        update(PlayerStats)
        .where(PlayerStats.user_id == user_id, PlayerStats.highest_level < level)
        .values(highest_level=level)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


@store_errors("update_stats")
async def update_stats(db: AsyncSession, stats: PlayerStats) -> PlayerStats:
    """Flush in-memory changes to a stats row."""
    await db.flush()
    return stats


@store_errors("delete_stats")
async def delete_stats(db: AsyncSession, user_id: int) -> None:
    result = await db.execute(delete(PlayerStats).where(PlayerStats.user_id == user_id))
    if result.rowcount == 0:
        raise NotFoundError("player_stats", user_id)
