"""SQLAlchemy Core table definitions for the raidctl database.

Groups are stored as one JSON document per plan or preset: the caller
always writes the complete topology, so there is no per-slot table.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
)

metadata = MetaData()

plans = Table(
    "plans",
    metadata,
    Column("id", Text, primary_key=True),  # PLAN-NNNN
    Column("event_id", Text, nullable=False, unique=True),
    Column("guild_id", Text, nullable=False),
    Column("title", Text, nullable=False),
    Column("strategy", Text),
    Column("groups", Text, nullable=False),  # JSON array of groups
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

presets = Table(
    "presets",
    metadata,
    Column("id", Text, primary_key=True),  # PRESET-NNNN
    Column("guild_id", Text, nullable=False),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("groups", Text, nullable=False),  # JSON array, bindings stripped
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

# Read-only mirror of an event's signup list, imported from the events side.
participants = Table(
    "participants",
    metadata,
    Column("event_id", Text, nullable=False),
    Column("id", Text, nullable=False),
    Column("user_id", Text, nullable=False),
    Column("username", Text, nullable=False),
    Column("role", Text),
    Column("spec", Text),
    Column("ordinal", Integer, nullable=False, default=0, server_default="0"),
    PrimaryKeyConstraint("event_id", "id"),
)

id_counters = Table(
    "id_counters",
    metadata,
    Column("type_prefix", Text, primary_key=True),
    Column("next_value", Integer, nullable=False, default=1, server_default="1"),
)

Index("ix_plans_guild", plans.c.guild_id)
Index("ix_presets_guild", presets.c.guild_id)
Index("ix_participants_event", participants.c.event_id)
