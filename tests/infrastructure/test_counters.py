"""Tests for sequential ID counters."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.engine import Engine

from raidctl.domain.ids import validate_id
from raidctl.infrastructure.database.counters import next_sequential_id
from raidctl.infrastructure.database.schema import id_counters


class TestNextSequentialId:
    def test_starts_at_one(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            assert next_sequential_id(conn, "PLAN-") == "PLAN-0001"
            assert next_sequential_id(conn, "PLAN-") == "PLAN-0002"
            assert next_sequential_id(conn, "PRESET-") == "PRESET-0001"

    def test_ids_match_patterns(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            assert validate_id(next_sequential_id(conn, "PLAN-"), "plan")
            assert validate_id(next_sequential_id(conn, "PRESET-"), "preset")

    def test_grows_past_four_digits(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            conn.execute(
                id_counters.update()
                .where(id_counters.c.type_prefix == "PLAN-")
                .values(next_value=10000)
            )
            assert next_sequential_id(conn, "PLAN-") == "PLAN-10000"

    def test_rollback_releases_the_number(self, db_engine: Engine) -> None:
        with pytest.raises(RuntimeError), db_engine.begin() as conn:
            next_sequential_id(conn, "PRESET-")
            raise RuntimeError("abort")
        with db_engine.connect() as conn:
            value = conn.execute(
                select(id_counters.c.next_value).where(id_counters.c.type_prefix == "PRESET-")
            ).scalar_one()
        assert value == 1

    def test_unknown_prefix(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn, pytest.raises(ValueError, match="Unknown sequential"):
            next_sequential_id(conn, "EVT-")
