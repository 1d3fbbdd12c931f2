"""Baseline schema — plans, presets, participants, id_counters.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-09-02

Databases created by ``init_database`` already have these tables; they are
stamped at this revision by ``raidctl upgrade`` instead of running it.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "plans",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("event_id", sa.Text, nullable=False, unique=True),
        sa.Column("guild_id", sa.Text, nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("strategy", sa.Text),
        sa.Column("groups", sa.Text, nullable=False),
        sa.Column("created", sa.Text, nullable=False),
        sa.Column("modified", sa.Text, nullable=False),
    )
    op.create_index("ix_plans_guild", "plans", ["guild_id"])

    op.create_table(
        "presets",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("guild_id", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("groups", sa.Text, nullable=False),
        sa.Column("created", sa.Text, nullable=False),
        sa.Column("modified", sa.Text, nullable=False),
    )
    op.create_index("ix_presets_guild", "presets", ["guild_id"])

    op.create_table(
        "participants",
        sa.Column("event_id", sa.Text, nullable=False),
        sa.Column("id", sa.Text, nullable=False),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("username", sa.Text, nullable=False),
        sa.Column("role", sa.Text),
        sa.Column("spec", sa.Text),
        sa.Column("ordinal", sa.Integer, nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("event_id", "id"),
    )
    op.create_index("ix_participants_event", "participants", ["event_id"])

    op.create_table(
        "id_counters",
        sa.Column("type_prefix", sa.Text, primary_key=True),
        sa.Column("next_value", sa.Integer, nullable=False, server_default="1"),
    )
    op.bulk_insert(
        sa.table("id_counters", sa.column("type_prefix", sa.Text), sa.column("next_value")),
        [
            {"type_prefix": "PLAN-", "next_value": 1},
            {"type_prefix": "PRESET-", "next_value": 1},
        ],
    )


def downgrade() -> None:
    op.drop_table("id_counters")
    op.drop_index("ix_participants_event", table_name="participants")
    op.drop_table("participants")
    op.drop_index("ix_presets_guild", table_name="presets")
    op.drop_table("presets")
    op.drop_index("ix_plans_guild", table_name="plans")
    op.drop_table("plans")
