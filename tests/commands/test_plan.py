"""Tests for the ``raidctl plan`` command group."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from raidctl.cli import cli
from raidctl.services.result import ServiceResult

SIGNUPS = [
    {"id": "u1", "userId": "d-1", "username": "Thrall", "role": "tank"},
    {"id": "u2", "userId": "d-2", "username": "Jaina", "role": "dps"},
    {"id": "u3", "userId": "d-3", "username": "Anduin", "role": "healer"},
]


def _json(cli_runner: CliRunner, *args: str) -> dict[str, Any]:
    result = cli_runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def _seat(data: dict[str, Any], group: int, slot: int) -> str | None:
    return data["data"]["plan"]["groups"][group - 1]["positions"][slot - 1].get("participantId")


@pytest.fixture
def event(_isolated_workspace: None, cli_runner: CliRunner, tmp_path: Path) -> str:
    """EVT-1 with a 2x2 plan and three signups."""
    signups = tmp_path / "signups.json"
    signups.write_text(json.dumps(SIGNUPS), encoding="utf-8")
    assert cli_runner.invoke(cli, ["roster", "import", "EVT-1", str(signups)]).exit_code == 0
    created = cli_runner.invoke(cli, ["plan", "create", "EVT-1", "--groups", "2", "--slots", "2"])
    assert created.exit_code == 0, created.output
    return "EVT-1"


@pytest.mark.usefixtures("_isolated_workspace")
class TestLifecycle:
    def test_create_default_topology(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "plan", "create", "EVT-9", "--title", "Tuesday Raid")
        plan = data["data"]["plan"]
        assert plan["id"] == "PLAN-0001"
        assert plan["title"] == "Tuesday Raid"
        assert plan["guildId"] == "my-guild"
        assert [len(g["positions"]) for g in plan["groups"]] == [5] * 5

    def test_create_twice_fails(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "create", event])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_show(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "show", event])
        assert result.exit_code == 0
        assert "Raid Plan: EVT-1" in result.output
        assert "Unassigned (3)" in result.output

    def test_show_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["plan", "show", "EVT-404"])
        assert result.exit_code == 1
        assert "No plan for event" in result.output

    def test_roster_read_failure_exits(
        self, cli_runner: CliRunner, event: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from raidctl.services._helpers import persistence_failure
        from raidctl.services.roster import RosterService

        def _locked(self: RosterService, event_id: str) -> ServiceResult:
            return persistence_failure("list_participants", Exception("database is locked"))

        monkeypatch.setattr(RosterService, "list_participants", _locked)
        result = cli_runner.invoke(cli, ["plan", "show", event])
        assert result.exit_code == 1
        assert "database is locked" in result.output

    def test_show_create(self, cli_runner: CliRunner) -> None:
        data = _json(cli_runner, "plan", "show", "EVT-2", "--create")
        assert data["op"] == "open_plan"
        assert data["data"]["created"] is True
        again = _json(cli_runner, "plan", "show", "EVT-2", "--create")
        assert again["data"]["created"] is False

    def test_list_and_delete(self, cli_runner: CliRunner, event: str) -> None:
        listed = cli_runner.invoke(cli, ["-q", "plan", "list"])
        assert listed.output.strip() == "PLAN-0001"
        assert cli_runner.invoke(cli, ["plan", "delete", event]).exit_code == 0
        assert cli_runner.invoke(cli, ["plan", "show", event]).exit_code == 1

    def test_export_to_file(self, cli_runner: CliRunner, event: str, tmp_path: Path) -> None:
        out = tmp_path / "plan.json"
        result = cli_runner.invoke(cli, ["plan", "export", event, "--output", str(out)])
        assert result.exit_code == 0
        doc = json.loads(out.read_text(encoding="utf-8"))
        assert doc["eventId"] == "EVT-1"
        assert len(doc["groups"]) == 2


@pytest.mark.usefixtures("_isolated_workspace")
class TestAssignment:
    def test_assign_persists(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "assign", event, "u1", "1", "2")
        assert data["op"] == "assign"
        assert _seat(data, 1, 2) == "u1"
        assert [p["id"] for p in data["data"]["unassigned"]] == ["u2", "u3"]
        assert _seat(_json(cli_runner, "plan", "show", event), 1, 2) == "u1"

    def test_move_vacates_previous_slot(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "assign", event, "u1", "1", "1"])
        data = _json(cli_runner, "plan", "assign", event, "u1", "2", "2")
        assert _seat(data, 1, 1) is None
        assert _seat(data, 2, 2) == "u1"

    def test_displace_reports_returned(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "assign", event, "u1", "1", "1"])
        result = cli_runner.invoke(cli, ["plan", "assign", event, "u2", "1", "1"])
        assert result.exit_code == 0
        assert "returned to pool: Thrall" in result.output

    def test_unknown_slot(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "assign", event, "u1", "1", "9"])
        assert result.exit_code == 1
        assert "ERROR" in result.output

    def test_unknown_participant_is_rejected(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "assign", event, "ghost", "1", "1"])
        assert result.exit_code == 1
        assert "No signup found with ID: ghost" in result.output
        assert _seat(_json(cli_runner, "plan", "show", event), 1, 1) is None

    def test_unassign(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "assign", event, "u3", "2", "1"])
        data = _json(cli_runner, "plan", "unassign", event, "2", "1")
        assert _seat(data, 2, 1) is None
        assert "u3" in [p["id"] for p in data["data"]["unassigned"]]

    def test_unassigned_search(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "unassigned", event, "--search", "heal")
        assert [p["id"] for p in data["data"]["items"]] == ["u3"]


@pytest.mark.usefixtures("_isolated_workspace")
class TestStructure:
    def test_add_and_remove_group(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "add-group", event, "--name", "Bench", "--slots", "3")
        groups = data["data"]["plan"]["groups"]
        assert groups[-1]["name"] == "Bench"
        assert len(groups[-1]["positions"]) == 3
        data = _json(cli_runner, "plan", "remove-group", event, "3")
        assert len(data["data"]["plan"]["groups"]) == 2

    def test_remove_group_returns_members(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "assign", event, "u2", "1", "1"])
        data = _json(cli_runner, "plan", "remove-group", event, "1")
        assert data["data"]["displaced"] == ["u2"]
        assert len(data["data"]["unassigned"]) == 3

    def test_rename_and_label(self, cli_runner: CliRunner, event: str) -> None:
        _json(cli_runner, "plan", "rename-group", event, "1", "Tanks")
        data = _json(cli_runner, "plan", "label-slot", event, "1", "1", "Main tank")
        group = data["data"]["plan"]["groups"][0]
        assert group["name"] == "Tanks"
        assert group["positions"][0]["label"] == "Main tank"

    def test_add_slot_and_move_slot(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "add-slot", event, "1", "--label", "Off-tank")
        assert data["data"]["plan"]["groups"][0]["positions"][2]["label"] == "Off-tank"
        data = _json(cli_runner, "plan", "move-slot", event, "1", "3", "1")
        assert data["data"]["plan"]["groups"][0]["positions"][0]["label"] == "Off-tank"

    def test_move_group(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "rename-group", event, "2", "Second"])
        data = _json(cli_runner, "plan", "move-group", event, "2", "1")
        assert data["data"]["plan"]["groups"][0]["name"] == "Second"

    def test_move_group_out_of_range(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "move-group", event, "1", "7"])
        assert result.exit_code == 1


@pytest.mark.usefixtures("_isolated_workspace")
class TestPlanText:
    def test_title(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "title", event, "Heroic Night")
        assert data["data"]["plan"]["title"] == "Heroic Night"

    def test_strategy_set_and_clear(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "strategy", event, "Stack on the boss")
        assert data["data"]["plan"]["strategy"] == "Stack on the boss"
        data = _json(cli_runner, "plan", "strategy", event, "--clear")
        assert "strategy" not in data["data"]["plan"]

    def test_strategy_too_long(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "strategy", event, "x" * 2001])
        assert result.exit_code == 1

    def test_strategy_requires_input(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "strategy", event])
        assert result.exit_code == 1
        assert "No strategy given" in result.output


@pytest.mark.usefixtures("_isolated_workspace")
class TestGestures:
    def test_tap_select_then_place(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "tap", event, "@u2", "2/1")
        assert _seat(data, 2, 1) == "u2"
        assert data["data"]["engine_calls"] == 1
        assert data["data"]["selection"] is None

    def test_tap_leaves_selection(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "tap", event, "@u2")
        assert data["data"]["engine_calls"] == 0
        assert data["data"]["selection"] == "u2"

    def test_tap_on_group_is_reported(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "tap", event, "@u2", "1")
        assert data["data"]["engine_calls"] == 0
        assert data["data"]["selection"] == "u2"
        assert "Ignored tap on group 1: tap a slot as GROUP/SLOT" in data["warnings"]

    def test_tap_clear(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "tap", event, "@u2", "clear", "1/1")
        assert data["data"]["engine_calls"] == 0
        assert _seat(data, 1, 1) is None

    def test_drag_chip(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "drag", event, "@u1", "1/2")
        assert _seat(data, 1, 2) == "u1"
        assert data["data"]["engine_calls"] == 1

    def test_drag_released_over_nothing(self, cli_runner: CliRunner, event: str) -> None:
        data = _json(cli_runner, "plan", "drag", event, "@u1")
        assert data["data"]["engine_calls"] == 0

    def test_drag_group(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "rename-group", event, "2", "Second"])
        data = _json(cli_runner, "plan", "drag", event, "2", "1")
        assert data["data"]["plan"]["groups"][0]["name"] == "Second"

    def test_tap_and_drag_agree(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "assign", event, "u1", "1", "1"])
        tapped = _json(cli_runner, "plan", "tap", event, "@u1", "2/2")
        cli_runner.invoke(cli, ["plan", "assign", event, "u1", "1", "1"])
        dragged = _json(cli_runner, "plan", "drag", event, "@u1", "2/2")
        assert tapped["data"]["plan"] == dragged["data"]["plan"]

    def test_forced_mode_ignores_taps(
        self, cli_runner: CliRunner, event: str, tmp_path: Path
    ) -> None:
        (tmp_path / "raidctl.toml").write_text(
            '[interaction]\nforce_mode = "continuous"\n', encoding="utf-8"
        )
        data = _json(cli_runner, "plan", "tap", event, "@u2", "1/1")
        assert data["data"]["engine_calls"] == 0
        assert any("forced to continuous" in w for w in data["warnings"])


@pytest.mark.usefixtures("_isolated_workspace")
class TestPresetsOnPlans:
    def test_apply_preset(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["plan", "add-group", event, "--name", "Bench"])
        cli_runner.invoke(cli, ["plan", "assign", event, "u1", "1", "1"])
        saved = cli_runner.invoke(cli, ["-q", "preset", "save", event, "Three groups"])
        assert saved.output.strip() == "PRESET-0001"
        cli_runner.invoke(cli, ["plan", "create", "EVT-2"])
        data = _json(cli_runner, "plan", "apply-preset", "EVT-2", "PRESET-0001")
        groups = data["data"]["plan"]["groups"]
        assert [g["name"] for g in groups][-1] == "Bench"
        assert all("participantId" not in p for g in groups for p in g["positions"])

    def test_create_from_preset(self, cli_runner: CliRunner, event: str) -> None:
        cli_runner.invoke(cli, ["preset", "save", event, "Small"])
        data = _json(cli_runner, "plan", "create", "EVT-3", "--preset", "PRESET-0001")
        assert len(data["data"]["plan"]["groups"]) == 2

    def test_apply_unknown_preset(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["plan", "apply-preset", event, "PRESET-0404"])
        assert result.exit_code == 1


@pytest.mark.usefixtures("_isolated_workspace")
class TestSync:
    def test_sync_flag(self, cli_runner: CliRunner, event: str) -> None:
        result = cli_runner.invoke(cli, ["--sync", "plan", "assign", event, "u1", "1", "1"])
        assert result.exit_code == 0
        assert _seat(_json(cli_runner, "plan", "show", event), 1, 1) == "u1"

    def test_autosave_disabled_still_saves(
        self, cli_runner: CliRunner, event: str, tmp_path: Path
    ) -> None:
        (tmp_path / "raidctl.toml").write_text("[autosave]\nenabled = false\n", encoding="utf-8")
        assert cli_runner.invoke(cli, ["plan", "assign", event, "u3", "2", "2"]).exit_code == 0
        assert _seat(_json(cli_runner, "plan", "show", event), 2, 2) == "u3"
