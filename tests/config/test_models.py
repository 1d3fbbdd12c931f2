"""Tests for config section models and their baked-in defaults."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from raidctl.config.models import EngineConfig, InteractionConfig, RaidConfig


class TestDefaults:
    def test_empty_config_is_valid(self) -> None:
        cfg = RaidConfig()
        assert cfg.workspace.name == "my-guild"
        assert cfg.engine.conflict_policy == "displace"
        assert (cfg.engine.default_groups, cfg.engine.default_slots) == (5, 5)
        assert cfg.engine.max_strategy_length == 2000
        assert cfg.interaction.force_mode == ""
        assert cfg.autosave.enabled is True

    def test_sparse_sections(self) -> None:
        cfg = RaidConfig.model_validate({"engine": {"conflict_policy": "swap"}})
        assert cfg.engine.conflict_policy == "swap"
        assert cfg.engine.default_slots == 5


class TestValidation:
    def test_unknown_policy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(conflict_policy="merge")  # type: ignore[arg-type]

    def test_negative_topology_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(default_groups=-1)

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InteractionConfig(force_mode="hover")  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        cfg = EngineConfig()
        with pytest.raises(ValidationError):
            cfg.default_groups = 2  # type: ignore[misc]
