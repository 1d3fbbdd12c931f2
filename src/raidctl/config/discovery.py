"""Config file discovery and loading.

Walk-up finder locates raidctl.toml, similar to how git finds .git/.
Supports RAIDCTL_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from raidctl.config.models import RaidConfig

CONFIG_FILENAME = "raidctl.toml"
CONFIG_ENV_VAR = "RAIDCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for raidctl.toml.

    Returns the path to the config file, or None if not found.
    Checks RAIDCTL_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def load_config(path: Path | None = None, cwd: Path | None = None) -> RaidConfig:
    """Load and validate config from a TOML file.

    Returns default RaidConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return RaidConfig()

    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return RaidConfig.model_validate(data)
