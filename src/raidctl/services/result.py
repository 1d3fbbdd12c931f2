"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All service-layer methods return ServiceResult.
The CLI and any editing session consume this type; engine outcomes are
converted with :func:`from_engine` at the boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from raidctl.domain.outcomes import EngineResult


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"save_plan"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None


def from_engine(result: EngineResult, *, warnings: list[str] | None = None) -> ServiceResult:
    """Wrap an engine outcome so it can flow through the CLI emitter."""
    data: dict[str, Any] = {"plan": result.plan.to_document()}
    if result.displaced:
        data["displaced"] = list(result.displaced)
    error = None
    if result.error is not None:
        error = ServiceError(
            code=result.error.code.value,
            message=result.error.message,
            detail=result.error.detail,
        )
    return ServiceResult(
        ok=result.ok,
        op=result.op,
        data=data if result.ok else {},
        warnings=warnings or [],
        error=error,
    )
