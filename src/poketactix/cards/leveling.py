"""Card level curve and per-level stat growth.

Advancing from level L to L+1 costs ``100 * L`` xp. Level 50 is terminal: any
xp that would carry past it is discarded and xp stays at 0.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

MAX_LEVEL = 50
XP_PER_LEVEL = 100

# Multiplicative growth per level above 1.
HP_GROWTH = 0.03
ATTACK_GROWTH = 0.02
DEFENSE_GROWTH = 0.02
SPEED_GROWTH = 0.01


def xp_required(level: int) -> int:
    """XP needed to advance from ``level`` to ``level + 1``."""
    return XP_PER_LEVEL * level


def apply_xp(level: int, xp: int, amount: int) -> tuple[int, int]:
    """Add ``amount`` xp to a card at ``(level, xp)`` and return the new ``(level, xp)``."""
    if amount < 0:
        msg = "xp amount must be non-negative"
        raise ValueError(msg)

    xp += amount
    while level < MAX_LEVEL and xp >= xp_required(level):
        xp -= xp_required(level)
        level += 1

    if level >= MAX_LEVEL:
        return MAX_LEVEL, 0
    return level, xp


def xp_to_next_level(level: int, xp: int) -> int:
    """Remaining xp until the next level (0 at max level)."""
    if level >= MAX_LEVEL:
        return 0
    return xp_required(level) - xp


@dataclass(frozen=True)
class CardStats:
    hp: int
    attack: int
    defense: int
    speed: int
    stamina: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def current_stats(base_hp: int, base_attack: int, base_defense: int, base_speed: int, level: int) -> CardStats:
    """Effective stats at ``level``, truncated to integers. Stamina is twice speed."""
    steps = max(level, 1) - 1
    speed = int(base_speed * (1 + SPEED_GROWTH * steps))
    return CardStats(
        hp=int(base_hp * (1 + HP_GROWTH * steps)),
        attack=int(base_attack * (1 + ATTACK_GROWTH * steps)),
        defense=int(base_defense * (1 + DEFENSE_GROWTH * steps)),
        speed=speed,
        stamina=speed * 2,
    )
