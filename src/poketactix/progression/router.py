"""Battle completion endpoint: POST /api/v1/battles/complete."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from poketactix.achievements.schemas import AchievementResponse
from poketactix.auth.dependencies import get_current_user
from poketactix.cards.schemas import StatBlock
from poketactix.db.models import User
from poketactix.dependencies import get_db
from poketactix.progression.rewards import battle_rewards
from poketactix.progression.schemas import BattleCompleteRequest, BattleCompleteResponse, XPGainResponse
from poketactix.progression.service import record_battle_outcome
from poketactix.stats.router import stats_response
from poketactix.stats.schemas import BattleHistoryEntry

router = APIRouter(prefix="/api/v1/battles", tags=["Battles"])


@router.post("/complete", response_model=BattleCompleteResponse)
async def complete_battle(
    body: BattleCompleteRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BattleCompleteResponse:
    """Pay out a finished battle and apply it to the player's progression."""
    reward = battle_rewards(body.mode, body.result)
    outcome = await record_battle_outcome(
        db,
        user.id,
        body.mode,
        body.result,
        coins_earned=reward.coins,
        participating_card_ids=body.card_ids,
        xp_per_card=reward.xp_per_card,
        duration=body.duration,
    )
    await db.commit()

    return BattleCompleteResponse(
        battle=BattleHistoryEntry.model_validate(outcome.battle),
        coins_earned=reward.coins,
        coins_balance=outcome.coins,
        xp_gains=[
            XPGainResponse(
                card_id=g.card_id,
                pokemon_name=g.pokemon_name,
                xp_gained=g.xp_gained,
                old_level=g.old_level,
                new_level=g.new_level,
                leveled_up=g.leveled_up,
                xp=g.xp,
                old_stats=StatBlock(**g.old_stats.as_dict()),
                new_stats=StatBlock(**g.new_stats.as_dict()),
            )
            for g in outcome.xp_gains
        ],
        stats=stats_response(outcome.stats),
        new_achievements=[AchievementResponse.model_validate(a) for a in outcome.new_achievements],
    )
