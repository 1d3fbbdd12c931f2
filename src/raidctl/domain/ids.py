"""ID patterns, validation, and generation contracts.

Two ID strategies:
- Random (groups, positions): prefix + 12 hex chars, generated client-side.
- Sequential (plans, presets): Atomic counter from DB, minimum 4 digits.

INVARIANT: IDs are permanent. A group or position ID is never reassigned
to a different entity, so stale references fail closed.

Plans keep no record of removed groups or positions. Generation therefore
checks candidates against the IDs still in use, and a removed ID can only
come back through a collision in the 48-bit random part.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Collection

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    "group": re.compile(r"^grp_[0-9a-f]{12}$"),
    "position": re.compile(r"^pos_[0-9a-f]{12}$"),
    "plan": re.compile(r"^PLAN-\d{4,}$"),
    "preset": re.compile(r"^PRESET-\d{4,}$"),
}

TYPE_PREFIXES: dict[str, str] = {
    "group": "grp_",
    "position": "pos_",
    "plan": "PLAN-",
    "preset": "PRESET-",
}

GROUP_PREFIX = TYPE_PREFIXES["group"]
POSITION_PREFIX = TYPE_PREFIXES["position"]


def generate_entity_id(prefix: str, taken: Collection[str] = ()) -> str:
    """Generate a fresh random ID, retrying until it misses *taken*."""
    while True:
        candidate = f"{prefix}{uuid.uuid4().hex[:12]}"
        if candidate not in taken:
            return candidate


def validate_id(entity_id: str, entity_type: str) -> bool:
    """Check whether *entity_id* matches the expected pattern for *entity_type*."""
    pattern = ID_PATTERNS.get(entity_type)
    if pattern is None:
        return False
    return pattern.match(entity_id) is not None
