"""SQLite database engine, schema, and ID counters via SQLAlchemy Core."""

from raidctl.infrastructure.database.counters import next_sequential_id
from raidctl.infrastructure.database.engine import create_db_engine, init_database
from raidctl.infrastructure.database.schema import (
    id_counters,
    metadata,
    participants,
    plans,
    presets,
)

__all__ = [
    "create_db_engine",
    "id_counters",
    "init_database",
    "metadata",
    "next_sequential_id",
    "participants",
    "plans",
    "presets",
]
