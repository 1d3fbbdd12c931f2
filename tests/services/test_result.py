"""Tests for ServiceResult and the engine-result bridge."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from raidctl.domain import engine
from raidctl.services.result import ServiceError, ServiceResult, from_engine
from tests.conftest import make_plan


class TestServiceResult:
    def test_defaults(self) -> None:
        result = ServiceResult(ok=True, op="x")
        assert result.data == {}
        assert result.warnings == []
        assert result.error is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="x")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        result = ServiceResult(
            ok=False, op="save_plan", error=ServiceError(code="NOT_FOUND", message="gone")
        )
        assert ServiceResult.model_validate_json(result.model_dump_json()) == result


class TestFromEngine:
    def test_success_carries_plan_and_displaced(self) -> None:
        plan = make_plan(1, bindings={(1, 1): "u1"})
        result = from_engine(engine.assign(plan, "u2", "G1", "G1P1"))
        assert result.ok
        assert result.op == "assign"
        assert result.data["plan"]["groups"][0]["positions"][0]["participantId"] == "u2"
        assert result.data["displaced"] == ["u1"]

    def test_no_displaced_key_when_empty(self) -> None:
        result = from_engine(engine.assign(make_plan(1), "u1", "G1", "G1P1"))
        assert "displaced" not in result.data

    def test_failure(self) -> None:
        result = from_engine(engine.reorder_groups(make_plan(1), 0, 4), warnings=["w"])
        assert not result.ok
        assert result.data == {}
        assert result.warnings == ["w"]
        assert result.error is not None
        assert result.error.code == "INDEX_OUT_OF_RANGE"
        assert result.error.detail["size"] == 1
