"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime

from raidctl.domain.outcomes import ErrorCode
from raidctl.services.result import ServiceError, ServiceResult


def now_iso() -> str:
    """Current UTC time as standard ISO 8601."""
    return datetime.now(UTC).isoformat()


def not_found(op: str, message: str, **detail: str) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=ErrorCode.NOT_FOUND.value, message=message, detail=detail),
    )


def persistence_failure(op: str, exc: Exception) -> ServiceResult:
    """Report a storage error without letting it escape the service layer."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code=ErrorCode.PERSISTENCE_FAILURE.value,
            message=f"Storage error during {op}: {exc}",
            detail={"exception": type(exc).__name__},
        ),
    )
