"""EngineResult and EngineError — typed outcomes of roster transformations.

INVARIANT: Engine operations never raise for expected conditions.
A failed result carries the input Plan unchanged, so the caller can
keep rendering it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from raidctl.domain.roster import Plan


class ErrorCode(StrEnum):
    """Error taxonomy shared by the engine and the service layer."""

    NOT_FOUND = "NOT_FOUND"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


class EngineError(BaseModel):
    """Structured error payload within an EngineResult."""

    model_config = {"frozen": True}

    code: ErrorCode
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class EngineResult(BaseModel):
    """Return type of every assignment-engine operation.

    Attributes:
        ok: Whether the transformation succeeded.
        op: Name of the operation (e.g. ``"assign"``).
        plan: The new Plan on success, the untouched input Plan on failure.
        displaced: Participants returned to the unassigned pool by this call.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    plan: Plan
    displaced: tuple[str, ...] = ()
    error: EngineError | None = None
