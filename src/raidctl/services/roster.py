"""RosterService — the event signup list as seen by the composition tool.

Participants belong to the external events component. This service keeps
a read-only mirror per event so the unassigned pool can be derived
locally; importing replaces the whole list for that event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError

from raidctl.domain.outcomes import ErrorCode
from raidctl.domain.roster import Participant, load_participants
from raidctl.infrastructure.database.schema import participants
from raidctl.services._helpers import persistence_failure
from raidctl.services.base import BaseService
from raidctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable


def participants_from_result(result: ServiceResult) -> list[Participant]:
    """Rebuild the typed signups carried by a successful ``list_participants``."""
    return [Participant.model_validate(item) for item in result.data["items"]]


class RosterService(BaseService):
    """Read/replace the participant list of an event."""

    def import_participants(
        self, event_id: str, signups: Iterable[Participant]
    ) -> ServiceResult:
        """Replace the stored signup list for *event_id*.

        Duplicate participant IDs keep their first occurrence.
        """
        op = "import_participants"
        warnings: list[str] = []
        seen: set[str] = set()
        rows = []
        for ordinal, p in enumerate(signups):
            if p.id in seen:
                warnings.append(f"Duplicate participant skipped: {p.id}")
                continue
            seen.add(p.id)
            rows.append(
                {
                    "event_id": event_id,
                    "id": p.id,
                    "user_id": p.user_id,
                    "username": p.username,
                    "role": p.role,
                    "spec": p.spec,
                    "ordinal": ordinal,
                }
            )
        try:
            with self._store.transaction() as conn:
                conn.execute(delete(participants).where(participants.c.event_id == event_id))
                if rows:
                    conn.execute(insert(participants), rows)
        except SQLAlchemyError as exc:
            return persistence_failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"event_id": event_id, "count": len(rows)},
            warnings=warnings,
        )

    def list_participants(self, event_id: str) -> ServiceResult:
        """The stored signup list for *event_id*, in import order."""
        op = "list_participants"
        try:
            with self._store.read() as conn:
                rows = conn.execute(
                    select(participants)
                    .where(participants.c.event_id == event_id)
                    .order_by(participants.c.ordinal)
                ).fetchall()
        except SQLAlchemyError as exc:
            return persistence_failure(op, exc)
        items = [
            Participant(
                id=r.id, user_id=r.user_id, username=r.username, role=r.role, spec=r.spec
            ).model_dump(mode="json", by_alias=True, exclude_none=True)
            for r in rows
        ]
        return ServiceResult(
            ok=True, op=op, data={"event_id": event_id, "count": len(items), "items": items}
        )

    def import_json(self, event_id: str, raw: str | bytes) -> ServiceResult:
        """Parse a JSON signup array and import it for *event_id*."""
        try:
            signups = load_participants(raw)
        except ValidationError as exc:
            return ServiceResult(
                ok=False,
                op="import_participants",
                error=ServiceError(
                    code=ErrorCode.VALIDATION_FAILED.value,
                    message=f"Invalid participant list: {exc.error_count()} error(s)",
                    detail={"errors": [e["msg"] for e in exc.errors()]},
                ),
            )
        return self.import_participants(event_id, signups)
