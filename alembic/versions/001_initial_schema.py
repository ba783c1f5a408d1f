"""Initial progression schema.

Creates users, player_cards, player_stats, battle_history, achievements and
user_achievements.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

BIGINT = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _user_fk() -> sa.Column:
    return sa.Column("user_id", BIGINT, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", BIGINT, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("coins", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("coins >= 0", name="users_coins_non_negative"),
    )

    # --- Player cards ---
    op.create_table(
        "player_cards",
        sa.Column("id", BIGINT, primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("pokemon_name", sa.String(100), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("base_hp", sa.Integer(), nullable=False),
        sa.Column("base_attack", sa.Integer(), nullable=False),
        sa.Column("base_defense", sa.Integer(), nullable=False),
        sa.Column("base_speed", sa.Integer(), nullable=False),
        sa.Column("types", JSON, nullable=False),
        sa.Column("moves", JSON, nullable=False),
        sa.Column("sprite", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_legendary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_mythical", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("in_deck", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deck_position", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("level BETWEEN 1 AND 50", name="player_cards_level_range"),
        sa.CheckConstraint("xp >= 0", name="player_cards_xp_non_negative"),
        sa.CheckConstraint(
            "(in_deck AND deck_position BETWEEN 1 AND 5) OR (NOT in_deck AND deck_position IS NULL)",
            name="player_cards_deck_position_coherent",
        ),
    )
    op.create_index("ix_player_cards_user_id", "player_cards", ["user_id"])
    op.create_index(
        "uq_player_cards_user_deck_position", "player_cards", ["user_id", "deck_position"], unique=True
    )

    # --- Player stats ---
    op.create_table(
        "player_stats",
        sa.Column("user_id", BIGINT, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        *(
            sa.Column(name, sa.Integer(), nullable=False, server_default="0")
            for name in (
                "total_battles_1v1",
                "wins_1v1",
                "losses_1v1",
                "total_battles_5v5",
                "wins_5v5",
                "losses_5v5",
                "total_coins_earned",
            )
        ),
        sa.Column("highest_level", sa.Integer(), nullable=False, server_default="1"),
        _timestamp("updated_at"),
        sa.CheckConstraint("wins_1v1 + losses_1v1 <= total_battles_1v1", name="player_stats_1v1_outcomes"),
        sa.CheckConstraint("wins_5v5 + losses_5v5 <= total_battles_5v5", name="player_stats_5v5_outcomes"),
    )

    # --- Battle history ---
    op.create_table(
        "battle_history",
        sa.Column("id", BIGINT, primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("mode", sa.String(8), nullable=False),
        sa.Column("result", sa.String(8), nullable=False),
        sa.Column("coins_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
        sa.CheckConstraint("mode IN ('1v1', '5v5')", name="battle_history_mode"),
        sa.CheckConstraint("result IN ('win', 'loss', 'draw')", name="battle_history_result"),
    )
    op.create_index("ix_battle_history_user_created", "battle_history", ["user_id", "created_at"])

    # --- Achievements ---
    op.create_table(
        "achievements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(16), nullable=False, server_default=""),
        sa.Column("requirement_type", sa.String(32), nullable=False),
        sa.Column("requirement_value", sa.Integer(), nullable=False),
    )
    op.create_table(
        "user_achievements",
        sa.Column("user_id", BIGINT, sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "achievement_id",
            sa.Integer(),
            sa.ForeignKey("achievements.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        _timestamp("unlocked_at"),
    )


def downgrade() -> None:
    op.drop_table("user_achievements")
    op.drop_table("achievements")
    op.drop_index("ix_battle_history_user_created", table_name="battle_history")
    op.drop_table("battle_history")
    op.drop_table("player_stats")
    op.drop_index("uq_player_cards_user_deck_position", table_name="player_cards")
    op.drop_index("ix_player_cards_user_id", table_name="player_cards")
    op.drop_table("player_cards")
    op.drop_table("users")
