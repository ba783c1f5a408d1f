"""
Battle outcome orchestration.

Turns a finished battle into history, stats counters, coins, card xp and
achievement unlocks, all inside the caller's transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from poketactix.achievements.service import check_and_unlock
from poketactix.battles import store as battle_store
from poketactix.battles.store import BattleMode, BattleResult
from poketactix.cards import service as card_service
from poketactix.errors import InvalidBattleError
from poketactix.progression.rewards import MAX_PARTICIPANTS
from poketactix.stats import store as stats_store
from poketactix.users import store as user_store

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from poketactix.cards.service import XPGain
    from poketactix.db.models import Achievement, BattleHistory, PlayerStats

logger = structlog.get_logger()


@dataclass
class BattleOutcome:
    battle: BattleHistory
    stats: PlayerStats
    coins: int
    xp_gains: list[XPGain] = field(default_factory=list)
    new_achievements: list[Achievement] = field(default_factory=list)


async def record_battle_outcome(
    db: AsyncSession,
    user_id: int,
    mode: BattleMode,
    result: BattleResult,
    coins_earned: int,
    participating_card_ids: Sequence[int],
    xp_per_card: int,
    duration: int = 0,
) -> BattleOutcome:
    """
    Apply a completed battle to the player's progression.

    Order: history row, stats counters, coin balance, xp per participating
    card (raising ``highest_level`` when a card passes it), then achievement
    evaluation. Duplicate card ids count once.

    Raises:
        InvalidBattleError: Negative rewards or too many participants for the mode.
        ForbiddenError: A participating card belongs to someone else.
        NotFoundError: Unknown user or card.
    """
    mode = BattleMode(mode)
    result = BattleResult(result)
    if coins_earned < 0 or xp_per_card < 0:
        msg = "battle rewards cannot be negative"
        raise InvalidBattleError(msg)

    card_ids = list(dict.fromkeys(participating_card_ids))
    if len(card_ids) > MAX_PARTICIPANTS[mode]:
        msg = f"{mode.value} battles allow at most {MAX_PARTICIPANTS[mode]} participating cards"
        raise InvalidBattleError(msg, participants=len(card_ids))

    await user_store.get_user_by_id(db, user_id)
    for card_id in card_ids:
        await card_service.get_card_for_user(db, user_id, card_id)

    battle = await battle_store.create_battle(db, user_id, mode, result, coins_earned, duration)
    stats = await stats_store.record_battle(db, user_id, mode, result, coins_earned)
    coins = await user_store.add_coins(db, user_id, coins_earned)

    gains = [await card_service.add_xp(db, card_id, xp_per_card) for card_id in card_ids]
    top_level = max((g.new_level for g in gains), default=0)
    if top_level > stats.highest_level:
        await stats_store.update_highest_level(db, user_id, top_level)
        stats = await stats_store.get_stats(db, user_id)

    unlocked = await check_and_unlock(db, user_id)

    logger.info(
        "battle_outcome_recorded",
        user_id=user_id,
        battle_id=battle.id,
        mode=mode.value,
        result=result.value,
        coins_earned=coins_earned,
        cards=len(card_ids),
        achievements_unlocked=[a.name for a in unlocked],
    )
    return BattleOutcome(battle=battle, stats=stats, coins=coins, xp_gains=gains, new_achievements=unlocked)
