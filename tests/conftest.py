"""Shared pytest fixtures and test helpers for raidctl tests."""

from __future__ import annotations

import itertools
from collections.abc import Collection, Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from raidctl.config.settings import RaidSettings
from raidctl.domain.roster import Group, Participant, Plan, Position
from raidctl.domain.topology import IdFactory
from raidctl.infrastructure.database.engine import init_database
from raidctl.infrastructure.store import Store


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / ".raidctl" / "raidctl.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> RaidSettings:
    monkeypatch.delenv("RAIDCTL_CONFIG", raising=False)
    return RaidSettings.from_cli(root=tmp_path)


@pytest.fixture
def store(settings: RaidSettings) -> Iterator[Store]:
    """Store over a fresh database in the temp workspace."""
    s = Store(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated workspace.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.delenv("RAIDCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def counter_ids() -> IdFactory:
    """Deterministic ID factory: ``grp_000000000001``, ``pos_000000000002``..."""
    counter = itertools.count(1)

    def new_id(prefix: str, taken: Collection[str]) -> str:
        while True:
            candidate = f"{prefix}{next(counter):012x}"
            if candidate not in taken:
                return candidate

    return new_id


def make_participants(
    count: int, *, roles: tuple[str, ...] = ("tank", "healer", "dps")
) -> list[Participant]:
    return [
        Participant(
            id=f"u{i}",
            user_id=f"discord-{i}",
            username=f"player{i}",
            role=roles[(i - 1) % len(roles)],
        )
        for i in range(1, count + 1)
    ]


def make_plan(*layout: int, bindings: dict[tuple[int, int], str] | None = None) -> Plan:
    """Build a plan with readable IDs: groups ``G1..Gn``, positions ``G1P1``...

    ``make_plan(2, 3)`` has two groups with 2 and 3 slots. *bindings* maps
    ``(group_number, slot_number)`` to a participant ID.
    """
    bindings = bindings or {}
    groups = []
    for g, slots in enumerate(layout, start=1):
        positions = tuple(
            Position(id=f"G{g}P{p}", participant_id=bindings.get((g, p)))
            for p in range(1, slots + 1)
        )
        groups.append(Group(id=f"G{g}", name=f"Group {g}", positions=positions))
    return Plan(
        id="PLAN-0001",
        event_id="EVT-1",
        guild_id="guild-1",
        title="Raid Plan",
        groups=tuple(groups),
    )


def slot_of(plan: Plan, group_id: str, position_id: str) -> str | None:
    for group in plan.groups:
        if group.id == group_id:
            for pos in group.positions:
                if pos.id == position_id:
                    return pos.participant_id
    raise AssertionError(f"no slot {group_id}/{position_id}")


def create_plan(store: Store, event_id: str = "EVT-1", **kwargs: Any) -> Plan:
    """Create a plan via PlanService, asserting success."""
    from raidctl.services.plans import PlanService, plan_from_result

    kwargs.setdefault("guild_id", "guild-1")
    kwargs.setdefault("title", "Raid Plan")
    result = PlanService(store).create_plan(event_id, **kwargs)
    assert result.ok, result.error
    return plan_from_result(result)


def import_roster(store: Store, event_id: str = "EVT-1", count: int = 6) -> list[Participant]:
    """Import *count* generated signups for *event_id*, asserting success."""
    from raidctl.services.roster import RosterService

    signups = make_participants(count)
    result = RosterService(store).import_participants(event_id, signups)
    assert result.ok, result.error
    return signups
