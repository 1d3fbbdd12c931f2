"""Tests for the Store repository and database initialization."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import func, inspect, insert, select

from raidctl.infrastructure.database.engine import init_database
from raidctl.infrastructure.database.schema import id_counters, participants
from raidctl.infrastructure.store import Store


class TestInitDatabase:
    def test_creates_file_and_tables(self, tmp_path: Path) -> None:
        db = tmp_path / "nested" / "raid.db"
        engine = init_database(db)
        try:
            assert db.is_file()
            tables = set(inspect(engine).get_table_names())
            assert tables == {"plans", "presets", "participants", "id_counters"}
        finally:
            engine.dispose()

    def test_idempotent(self, tmp_path: Path) -> None:
        db = tmp_path / "raid.db"
        init_database(db).dispose()
        engine = init_database(db)
        try:
            with engine.connect() as conn:
                count = conn.execute(select(func.count()).select_from(id_counters)).scalar()
            assert count == 2
        finally:
            engine.dispose()


class TestStore:
    def test_paths(self, store: Store, tmp_path: Path) -> None:
        assert store.root == tmp_path
        assert store.db_path == tmp_path / ".raidctl" / "raidctl.db"
        assert store.db_path.is_file()

    def test_transaction_rolls_back(self, store: Store) -> None:
        row = {
            "event_id": "EVT-1",
            "id": "u1",
            "ordinal": 0,
            "user_id": "discord-1",
            "username": "player1",
            "role": "tank",
        }
        with pytest.raises(RuntimeError), store.transaction() as conn:
            conn.execute(insert(participants).values(**row))
            raise RuntimeError("abort")
        with store.read() as conn:
            assert conn.execute(select(participants)).first() is None

    def test_transaction_commits(self, store: Store) -> None:
        with store.transaction() as conn:
            conn.execute(
                insert(participants).values(
                    event_id="EVT-1",
                    id="u1",
                    ordinal=0,
                    user_id="discord-1",
                    username="player1",
                    role="tank",
                )
            )
        with store.read() as conn:
            assert conn.execute(select(participants.c.username)).scalar_one() == "player1"
