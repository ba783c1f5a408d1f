"""ORM models for the progression schema.

All per-user tables reference ``users.id`` with ON DELETE CASCADE, so deleting
a user removes their cards, stats, battle history and achievement unlocks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from poketactix.db.base import Base, BigIntPK, JSONColumn


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Account identity and coin wallet."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("coins >= 0", name="users_coins_non_negative"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


class PlayerCard(Base):
    """A Pokemon instance owned by a user, with its own level, xp and deck slot."""

    __tablename__ = "player_cards"
    __table_args__ = (
        CheckConstraint("level BETWEEN 1 AND 50", name="player_cards_level_range"),
        CheckConstraint("xp >= 0", name="player_cards_xp_non_negative"),
        CheckConstraint(
            "(in_deck AND deck_position BETWEEN 1 AND 5) OR (NOT in_deck AND deck_position IS NULL)",
            name="player_cards_deck_position_coherent",
        ),
        Index("ix_player_cards_user_id", "user_id"),
        Index("uq_player_cards_user_deck_position", "user_id", "deck_position", unique=True),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    pokemon_name: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    base_hp: Mapped[int] = mapped_column(Integer, nullable=False)
    base_attack: Mapped[int] = mapped_column(Integer, nullable=False)
    base_defense: Mapped[int] = mapped_column(Integer, nullable=False)
    base_speed: Mapped[int] = mapped_column(Integer, nullable=False)
    types: Mapped[list[str]] = mapped_column(JSONColumn, nullable=False, default=list)
    moves: Mapped[list[dict[str, Any]]] = mapped_column(JSONColumn, nullable=False, default=list)
    sprite: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    is_legendary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    is_mythical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    in_deck: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    deck_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Bumped on every xp write; guards AddXP against lost updates.
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Stats & history
# ---------------------------------------------------------------------------


class PlayerStats(Base):
    """Aggregate per-user counters. One row per user, created lazily."""

    __tablename__ = "player_stats"
    __table_args__ = (
        CheckConstraint("wins_1v1 + losses_1v1 <= total_battles_1v1", name="player_stats_1v1_outcomes"),
        CheckConstraint("wins_5v5 + losses_5v5 <= total_battles_5v5", name="player_stats_5v5_outcomes"),
    )

    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    total_battles_1v1: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    wins_1v1: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    losses_1v1: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_battles_5v5: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    wins_5v5: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    losses_5v5: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_coins_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    highest_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    @property
    def total_wins(self) -> int:
        return self.wins_1v1 + self.wins_5v5

    @property
    def total_battles(self) -> int:
        return self.total_battles_1v1 + self.total_battles_5v5


class BattleHistory(Base):
    """Append-only record of a completed battle."""

    __tablename__ = "battle_history"
    __table_args__ = (
        CheckConstraint("mode IN ('1v1', '5v5')", name="battle_history_mode"),
        CheckConstraint("result IN ('win', 'loss', 'draw')", name="battle_history_result"),
        Index("ix_battle_history_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    mode: Mapped[str] = mapped_column(String(8), nullable=False)
    result: Mapped[str] = mapped_column(String(8), nullable=False)
    coins_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class Achievement(Base):
    """Shared achievement catalog entry, seeded on startup."""

    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(String(16), nullable=False, default="", server_default="")
    requirement_type: Mapped[str] = mapped_column(String(32), nullable=False)
    requirement_value: Mapped[int] = mapped_column(Integer, nullable=False)


class UserAchievement(Base):
    """Insert-once unlock fact. The composite key prevents duplicates."""

    __tablename__ = "user_achievements"

    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    achievement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("achievements.id", ondelete="CASCADE"), primary_key=True
    )
    unlocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
