"""Tests for the battle payout table."""

from poketactix.battles.store import BattleMode, BattleResult
from poketactix.progression.rewards import (
    CONSOLATION_REWARD,
    MAX_PARTICIPANTS,
    BattleReward,
    battle_rewards,
)


class TestBattleRewards:
    def test_1v1_win(self):
        assert battle_rewards(BattleMode.ONE_V_ONE, BattleResult.WIN) == BattleReward(50, 20)

    def test_5v5_win(self):
        assert battle_rewards(BattleMode.FIVE_V_FIVE, BattleResult.WIN) == BattleReward(150, 15)

    def test_loss_and_draw_get_consolation(self):
        for mode in BattleMode:
            assert battle_rewards(mode, BattleResult.LOSS) == CONSOLATION_REWARD
            assert battle_rewards(mode, BattleResult.DRAW) == CONSOLATION_REWARD

    def test_accepts_raw_strings(self):
        assert battle_rewards("5v5", "win").coins == 150

    def test_participant_limits(self):
        assert MAX_PARTICIPANTS[BattleMode.ONE_V_ONE] == 1
        assert MAX_PARTICIPANTS[BattleMode.FIVE_V_FIVE] == 5
