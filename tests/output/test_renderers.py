"""Tests for Rich renderers and output-mode selection."""

from __future__ import annotations

import json

from raidctl.output.console import style_for_role
from raidctl.output.formatters import OutputSettings, format_result
from raidctl.output.renderers import render_quiet, render_result
from raidctl.services.result import ServiceError, ServiceResult
from tests.conftest import make_participants, make_plan


def _plan_result(op: str = "load_plan", **extra: object) -> ServiceResult:
    plan = make_plan(2, 1, bindings={(1, 1): "u1"})
    plan = plan.model_copy(update={"strategy": "Stack on the tank."})
    names = {p.id: {"username": p.username, "role": p.role} for p in make_participants(3)}
    data = {
        "plan": plan.to_document(),
        "participants": names,
        "unassigned": [
            p.model_dump(mode="json", by_alias=True) for p in make_participants(3)[1:]
        ],
        **extra,
    }
    return ServiceResult(ok=True, op=op, data=data)


class TestRenderPlan:
    def test_groups_strategy_and_pool(self) -> None:
        out = render_result(_plan_result())
        assert "OK" in out
        assert "PLAN-0001" in out
        assert "1. Group 1" in out
        assert "2. Group 2" in out
        assert "player1" in out
        assert "empty" in out
        assert "Stack on the tank." in out
        assert "Unassigned (2)" in out
        assert "player3" in out

    def test_displaced_named(self) -> None:
        out = render_result(_plan_result("assign", displaced=["u2"]))
        assert "returned to pool: player2" in out

    def test_verbose_shows_ids(self) -> None:
        out = render_result(_plan_result(), verbose=True)
        assert "G1P1" in out
        assert "EVT-1" in out

    def test_engine_ops_use_plan_renderer(self) -> None:
        out = render_result(_plan_result("reorder_groups"))
        assert "1. Group 1" in out


class TestRenderOther:
    def test_error(self) -> None:
        result = ServiceResult(
            ok=False,
            op="assign",
            error=ServiceError(code="NOT_FOUND", message="No such slot", detail={"id": "x"}),
        )
        assert "ERROR" in render_result(result)
        assert "No such slot" in render_result(result)
        assert "detail" not in render_result(result)
        assert "id: x" in render_result(result, verbose=True)

    def test_preset_list(self) -> None:
        result = ServiceResult(
            ok=True,
            op="list_presets",
            data={
                "count": 1,
                "items": [
                    {"id": "PRESET-0001", "name": "Ten-man", "group_count": 2, "slot_count": 10}
                ],
            },
        )
        out = render_result(result)
        assert "PRESET-0001" in out
        assert "Ten-man" in out
        assert "1 presets" in out

    def test_generic_fallback(self) -> None:
        result = ServiceResult(ok=True, op="delete_plan", data={"id": "PLAN-0002"})
        out = render_result(result)
        assert "delete_plan" in out
        assert "PLAN-0002" in out


class TestRenderQuiet:
    def test_list_ids(self) -> None:
        result = ServiceResult(
            ok=True, op="list_plans", data={"items": [{"id": "PLAN-0001"}, {"id": "PLAN-0002"}]}
        )
        assert render_quiet(result) == "PLAN-0001\nPLAN-0002"

    def test_plan_id(self) -> None:
        assert render_quiet(_plan_result()) == "PLAN-0001"

    def test_bare_ok(self) -> None:
        assert render_quiet(ServiceResult(ok=True, op="upgrade")) == "OK: upgrade"

    def test_error(self) -> None:
        result = ServiceResult(
            ok=False, op="get_preset", error=ServiceError(code="NOT_FOUND", message="gone")
        )
        assert render_quiet(result) == "ERROR: get_preset: gone"


class TestFormatResult:
    def test_json_mode(self) -> None:
        out = format_result(_plan_result(), settings=OutputSettings(json_output=True))
        payload = json.loads(out)
        assert payload["ok"] is True
        assert payload["data"]["plan"]["groups"][0]["positions"][0]["participantId"] == "u1"

    def test_quiet_mode(self) -> None:
        assert format_result(_plan_result(), settings=OutputSettings(quiet=True)) == "PLAN-0001"

    def test_default_is_rich(self) -> None:
        assert "1. Group 1" in format_result(_plan_result())


def test_role_styles() -> None:
    assert style_for_role("Tank") == "raid.role.tank"
    assert style_for_role("heal") == "raid.role.healer"
    assert style_for_role(None) == ""
    assert style_for_role("bard") == ""
