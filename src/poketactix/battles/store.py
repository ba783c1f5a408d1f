"""Append-only battle history."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from poketactix.db.models import BattleHistory
from poketactix.errors import NotFoundError, store_errors

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class BattleMode(str, Enum):
    ONE_V_ONE = "1v1"
    FIVE_V_FIVE = "5v5"


class BattleResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


@store_errors("create_battle")
async def create_battle(
    db: AsyncSession,
    user_id: int,
    mode: BattleMode,
    result: BattleResult,
    coins_earned: int,
    duration: int = 0,
) -> BattleHistory:
    battle = BattleHistory(
        user_id=user_id,
        mode=BattleMode(mode).value,
        result=BattleResult(result).value,
        coins_earned=coins_earned,
        duration=duration,
    )
    db.add(battle)
    await db.flush()
    return battle


@store_errors("get_battle")
async def get_battle(db: AsyncSession, battle_id: int) -> BattleHistory:
    result = await db.execute(select(BattleHistory).where(BattleHistory.id == battle_id))
    battle = result.scalar_one_or_none()
    if battle is None:
        raise NotFoundError("battle", battle_id)
    return battle


@store_errors("get_user_history")
async def get_user_history(
    db: AsyncSession,
    user_id: int,
    limit: int = 20,
    mode: BattleMode | None = None,
) -> list[BattleHistory]:
    """Most recent battles first, optionally restricted to one mode."""
    query = select(BattleHistory).where(BattleHistory.user_id == user_id)
    if mode is not None:
        query = query.where(BattleHistory.mode == BattleMode(mode).value)
    query = query.order_by(BattleHistory.created_at.desc(), BattleHistory.id.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


@store_errors("delete_battle")
async def delete_battle(db: AsyncSession, battle_id: int) -> None:
    """Administrative removal; history is otherwise never modified."""
    result = await db.execute(delete(BattleHistory).where(BattleHistory.id == battle_id))
    if result.rowcount == 0:
        raise NotFoundError("battle", battle_id)
