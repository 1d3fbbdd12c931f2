"""PlanService — load, create, replace, and delete raid plans.

One plan exists per event. ``save_plan`` has full-replace semantics: the
caller always sends the complete title and topology with bindings, there
is no partial patch.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from raidctl.domain.outcomes import ErrorCode
from raidctl.domain.roster import Group, Plan, dump_groups, load_groups
from raidctl.domain.topology import default_groups, regenerate_groups
from raidctl.infrastructure.database.counters import next_sequential_id
from raidctl.infrastructure.database.schema import plans
from raidctl.services._helpers import not_found, now_iso, persistence_failure
from raidctl.services.base import BaseService
from raidctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Connection, Row

logger = logging.getLogger(__name__)


def _row_to_plan(row: Row[Any]) -> Plan:
    return Plan(
        id=row.id,
        event_id=row.event_id,
        guild_id=row.guild_id,
        title=row.title,
        strategy=row.strategy,
        groups=load_groups(row.groups),
    )


def plan_from_result(result: ServiceResult) -> Plan:
    """Rebuild the Plan carried by a successful plan operation."""
    return Plan.model_validate(result.data["plan"])


class PlanService(BaseService):
    """Persistence gateway for plans."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load_plan(self, event_id: str) -> ServiceResult:
        """Fetch the plan for *event_id*, or ``NOT_FOUND``."""
        op = "load_plan"
        try:
            with self._store.read() as conn:
                row = conn.execute(select(plans).where(plans.c.event_id == event_id)).first()
            if row is None:
                return not_found(op, f"No plan for event: {event_id}", event_id=event_id)
            plan = _row_to_plan(row)
        except (SQLAlchemyError, ValidationError) as exc:
            logger.warning("Failed to load plan for event %s: %s", event_id, exc)
            return persistence_failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"plan": plan.to_document()})

    def get_plan(self, plan_id: str) -> ServiceResult:
        op = "get_plan"
        try:
            with self._store.read() as conn:
                row = conn.execute(select(plans).where(plans.c.id == plan_id)).first()
            if row is None:
                return not_found(op, f"No plan found with ID: {plan_id}", plan_id=plan_id)
            plan = _row_to_plan(row)
        except (SQLAlchemyError, ValidationError) as exc:
            return persistence_failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"plan": plan.to_document()})

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_plan(
        self,
        event_id: str,
        guild_id: str,
        title: str,
        groups: Iterable[Group] | None = None,
        *,
        strategy: str | None = None,
    ) -> ServiceResult:
        """Create the plan for an event.

        When *groups* is None the plan is seeded with the configured default
        topology (5 groups of 5 slots unless overridden).
        """
        op = "create_plan"
        engine_cfg = self._store.settings.engine
        topology = (
            tuple(groups)
            if groups is not None
            else default_groups(engine_cfg.default_groups, engine_cfg.default_slots)
        )
        now = now_iso()
        try:
            with self._store.transaction() as conn:
                if self._plan_id_for_event(conn, event_id) is not None:
                    return ServiceResult(
                        ok=False,
                        op=op,
                        error=ServiceError(
                            code=ErrorCode.ALREADY_EXISTS.value,
                            message=f"A plan already exists for event: {event_id}",
                            detail={"event_id": event_id},
                        ),
                    )
                plan_id = next_sequential_id(conn, "PLAN-")
                conn.execute(
                    insert(plans).values(
                        id=plan_id,
                        event_id=event_id,
                        guild_id=guild_id,
                        title=title,
                        strategy=strategy,
                        groups=dump_groups(topology),
                        created=now,
                        modified=now,
                    )
                )
        except SQLAlchemyError as exc:
            logger.warning("Failed to create plan for event %s: %s", event_id, exc)
            return persistence_failure(op, exc)

        plan = Plan(
            id=plan_id,
            event_id=event_id,
            guild_id=guild_id,
            title=title,
            strategy=strategy,
            groups=topology,
        )
        logger.info("Created plan %s for event %s", plan_id, event_id)
        return ServiceResult(ok=True, op=op, data={"plan": plan.to_document(), "created": True})

    def open_plan(
        self,
        event_id: str,
        guild_id: str,
        *,
        title: str | None = None,
        preset_id: str | None = None,
    ) -> ServiceResult:
        """Load the event's plan, creating it on first open.

        A new plan is seeded from *preset_id* when given (with fresh IDs),
        otherwise from the default topology. ``data["created"]`` tells the
        caller which path was taken.
        """
        op = "open_plan"
        loaded = self.load_plan(event_id)
        if loaded.ok:
            return ServiceResult(ok=True, op=op, data={**loaded.data, "created": False})
        if loaded.error is not None and loaded.error.code != ErrorCode.NOT_FOUND:
            return loaded

        groups: tuple[Group, ...] | None = None
        if preset_id is not None:
            from raidctl.services.presets import PresetService, preset_from_result

            preset_result = PresetService(self._store).get_preset(preset_id)
            if not preset_result.ok:
                return preset_result
            groups = regenerate_groups(preset_from_result(preset_result).groups)

        created = self.create_plan(
            event_id, guild_id, title or f"Raid Plan: {event_id}", groups=groups
        )
        return created.model_copy(update={"op": op})

    def save_plan(
        self,
        plan_id: str,
        title: str,
        groups: Iterable[Group],
        strategy: str | None = None,
    ) -> ServiceResult:
        """Replace a plan's title, strategy, and groups wholesale."""
        op = "save_plan"
        try:
            with self._store.transaction() as conn:
                updated = conn.execute(
                    update(plans)
                    .where(plans.c.id == plan_id)
                    .values(
                        title=title,
                        strategy=strategy,
                        groups=dump_groups(groups),
                        modified=now_iso(),
                    )
                )
                if updated.rowcount == 0:
                    return not_found(op, f"No plan found with ID: {plan_id}", plan_id=plan_id)
        except SQLAlchemyError as exc:
            logger.warning("Failed to save plan %s: %s", plan_id, exc)
            return persistence_failure(op, exc)
        logger.debug("Saved plan %s", plan_id)
        return ServiceResult(ok=True, op=op, data={"id": plan_id})

    def save(self, plan: Plan) -> ServiceResult:
        """Convenience wrapper: persist the full current state of *plan*."""
        return self.save_plan(plan.id, plan.title, plan.groups, plan.strategy)

    def delete_plan(self, plan_id: str) -> ServiceResult:
        """Delete a plan (used when its parent event is deleted)."""
        op = "delete_plan"
        try:
            with self._store.transaction() as conn:
                deleted = conn.execute(delete(plans).where(plans.c.id == plan_id))
                if deleted.rowcount == 0:
                    return not_found(op, f"No plan found with ID: {plan_id}", plan_id=plan_id)
        except SQLAlchemyError as exc:
            return persistence_failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"id": plan_id})

    def list_plans(self, guild_id: str) -> ServiceResult:
        """Summaries of every plan in a guild, newest first."""
        op = "list_plans"
        try:
            with self._store.read() as conn:
                rows = conn.execute(
                    select(plans.c.id, plans.c.event_id, plans.c.title, plans.c.modified)
                    .where(plans.c.guild_id == guild_id)
                    .order_by(plans.c.modified.desc())
                ).fetchall()
        except SQLAlchemyError as exc:
            return persistence_failure(op, exc)
        items = [
            {"id": r.id, "event_id": r.event_id, "title": r.title, "modified": r.modified}
            for r in rows
        ]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _plan_id_for_event(conn: Connection, event_id: str) -> str | None:
        return conn.execute(
            select(plans.c.id).where(plans.c.event_id == event_id)
        ).scalar_one_or_none()

