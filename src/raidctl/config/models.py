"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, raidctl.toml only contains overrides.
A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# --- raidctl.toml sections ---


class WorkspaceConfig(BaseModel):
    """[workspace] section."""

    model_config = {"frozen": True}

    name: str = "my-guild"


class EngineConfig(BaseModel):
    """[engine] section."""

    model_config = {"frozen": True}

    conflict_policy: Literal["displace", "swap"] = "displace"
    default_groups: int = Field(default=5, ge=0)
    default_slots: int = Field(default=5, ge=0)
    max_strategy_length: int = Field(default=2000, gt=0)


class InteractionConfig(BaseModel):
    """[interaction] section."""

    model_config = {"frozen": True}

    force_mode: Literal["", "continuous", "discrete"] = ""
    selection_timeout: float = Field(default=0.0, ge=0.0)


class AutosaveConfig(BaseModel):
    """[autosave] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    debounce_seconds: float = Field(default=1.0, ge=0.0)


class RaidConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    autosave: AutosaveConfig = Field(default_factory=AutosaveConfig)
