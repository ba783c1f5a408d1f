"""Coin and xp payouts per battle mode and result."""

from __future__ import annotations

from typing import NamedTuple

from poketactix.battles.store import BattleMode, BattleResult


class BattleReward(NamedTuple):
    coins: int
    xp_per_card: int


WIN_REWARDS: dict[BattleMode, BattleReward] = {
    BattleMode.ONE_V_ONE: BattleReward(coins=50, xp_per_card=20),
    BattleMode.FIVE_V_FIVE: BattleReward(coins=150, xp_per_card=15),
}
CONSOLATION_REWARD = BattleReward(coins=10, xp_per_card=5)

# Cards that can take part in one battle of each mode.
MAX_PARTICIPANTS: dict[BattleMode, int] = {
    BattleMode.ONE_V_ONE: 1,
    BattleMode.FIVE_V_FIVE: 5,
}


def battle_rewards(mode: BattleMode, result: BattleResult) -> BattleReward:
    """Losses and draws earn the same consolation reward in both modes."""
    if BattleResult(result) is BattleResult.WIN:
        return WIN_REWARDS[BattleMode(mode)]
    return CONSOLATION_REWARD
