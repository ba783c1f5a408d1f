"""Tests for achievement requirement evaluation."""

from poketactix.achievements.rules import (
    AchievementRule,
    PlayerProgress,
    RequirementType,
    is_satisfied,
)
from poketactix.achievements.seed import ACHIEVEMENT_SEED_DATA


class TestAchievementRule:
    def test_parse_known_type(self):
        rule = AchievementRule.parse("total_wins", 10)
        assert rule == AchievementRule(RequirementType.TOTAL_WINS, 10)

    def test_parse_unknown_type_returns_none(self):
        assert AchievementRule.parse("pokedex_complete", 1) is None

    def test_threshold_is_inclusive(self):
        rule = AchievementRule(RequirementType.TOTAL_WINS, 10)
        assert rule.satisfied_by(PlayerProgress(total_wins=10))
        assert not rule.satisfied_by(PlayerProgress(total_wins=9))

    def test_each_type_measures_its_field(self):
        progress = PlayerProgress(
            total_wins=3,
            legendary_owned=1,
            mythical_owned=2,
            highest_level=17,
            coins=4200,
        )
        measured = {t: AchievementRule(t, 0).measure(progress) for t in RequirementType}
        assert measured == {
            RequirementType.TOTAL_WINS: 3,
            RequirementType.LEGENDARY_OWNED: 1,
            RequirementType.MYTHICAL_OWNED: 2,
            RequirementType.MAX_LEVEL: 17,
            RequirementType.COINS_TOTAL: 4200,
        }


class TestIsSatisfied:
    def test_max_level(self):
        assert is_satisfied("max_level", 50, PlayerProgress(highest_level=50))
        assert not is_satisfied("max_level", 50, PlayerProgress(highest_level=49))

    def test_unknown_type_fails_closed(self):
        assert not is_satisfied("mystery", 0, PlayerProgress(total_wins=999))


class TestSeedData:
    def test_every_seeded_type_is_known(self):
        for entry in ACHIEVEMENT_SEED_DATA:
            assert AchievementRule.parse(entry["requirement_type"], entry["requirement_value"]) is not None

    def test_names_are_unique(self):
        names = [e["name"] for e in ACHIEVEMENT_SEED_DATA]
        assert len(names) == len(set(names)) == 8
