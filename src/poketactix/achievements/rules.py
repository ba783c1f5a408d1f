"""Achievement requirement rules.

A rule is a closed requirement type plus an integer threshold. Catalog rows
whose ``requirement_type`` is not one of the known types parse to ``None`` and
are never satisfied.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class RequirementType(str, Enum):
    TOTAL_WINS = "total_wins"
    LEGENDARY_OWNED = "legendary_owned"
    MYTHICAL_OWNED = "mythical_owned"
    MAX_LEVEL = "max_level"
    COINS_TOTAL = "coins_total"


@dataclass(frozen=True)
class PlayerProgress:
    """Snapshot of everything an achievement can be measured against."""

    total_wins: int = 0
    legendary_owned: int = 0
    mythical_owned: int = 0
    highest_level: int = 1
    coins: int = 0


_MEASURES: dict[RequirementType, Callable[[PlayerProgress], int]] = {
    RequirementType.TOTAL_WINS: lambda p: p.total_wins,
    RequirementType.LEGENDARY_OWNED: lambda p: p.legendary_owned,
    RequirementType.MYTHICAL_OWNED: lambda p: p.mythical_owned,
    RequirementType.MAX_LEVEL: lambda p: p.highest_level,
    RequirementType.COINS_TOTAL: lambda p: p.coins,
}


@dataclass(frozen=True)
class AchievementRule:
    requirement: RequirementType
    threshold: int

    @classmethod
    def parse(cls, requirement_type: str, requirement_value: int) -> AchievementRule | None:
        try:
            requirement = RequirementType(requirement_type)
        except ValueError:
            return None
        return cls(requirement=requirement, threshold=requirement_value)

    def measure(self, progress: PlayerProgress) -> int:
        return _MEASURES[self.requirement](progress)

    def satisfied_by(self, progress: PlayerProgress) -> bool:
        return self.measure(progress) >= self.threshold


def is_satisfied(requirement_type: str, requirement_value: int, progress: PlayerProgress) -> bool:
    """Evaluate a raw catalog requirement; unknown types fail closed."""
    rule = AchievementRule.parse(requirement_type, requirement_value)
    return rule is not None and rule.satisfied_by(progress)
