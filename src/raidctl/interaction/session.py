"""EditingSession — the single owner of the in-memory Plan.

Every mutation, whatever gesture produced it, goes through one of the
methods here. Each call computes against the latest Plan and, on success,
replaces it before the next call runs, so edits apply in issue order.

INVARIANT: A failed engine call leaves ``session.plan`` untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Protocol

from raidctl.domain import engine
from raidctl.domain.engine import MAX_STRATEGY_LENGTH, ConflictPolicy
from raidctl.domain.ids import generate_entity_id
from raidctl.domain.roster import participants_by_id
from raidctl.domain.unassigned import filter_participants, unassigned

if TYPE_CHECKING:
    from raidctl.domain.outcomes import EngineResult
    from raidctl.domain.roster import Group, Participant, Plan
    from raidctl.domain.topology import IdFactory

logger = logging.getLogger(__name__)


class PlanSink(Protocol):
    """Anything that accepts plans to persist (see ``AutosaveScheduler``)."""

    def schedule(self, plan: Plan) -> None: ...

    def subscribe(self, callback: Callable[[Any], None]) -> None: ...


class EditingSession:
    """Holds the current Plan and the event's signups for one editor.

    Parameters:
        plan: The loaded Plan.
        participants: Full signup list for the plan's event. Only these IDs
            (or ones already seated) can be assigned.
        policy: Conflict policy for ``assign``.
        autosave: Optional sink; every successful change is scheduled on it.
        max_strategy_length: Character cap for the strategy text.
    """

    def __init__(
        self,
        plan: Plan,
        participants: Iterable[Participant] = (),
        *,
        policy: ConflictPolicy = ConflictPolicy.DISPLACE,
        autosave: PlanSink | None = None,
        max_strategy_length: int = MAX_STRATEGY_LENGTH,
        new_id: IdFactory = generate_entity_id,
    ) -> None:
        self._plan = plan
        self._participants = tuple(participants)
        self._roster_ids = frozenset(p.id for p in self._participants)
        self._policy = policy
        self._autosave = autosave
        self._max_strategy_length = max_strategy_length
        self._new_id = new_id
        self.notices: list[str] = []
        if autosave is not None:
            autosave.subscribe(self._on_save_failed)

    @property
    def plan(self) -> Plan:
        return self._plan

    @property
    def participants(self) -> tuple[Participant, ...]:
        return self._participants

    @property
    def policy(self) -> ConflictPolicy:
        return self._policy

    @property
    def autosave(self) -> PlanSink | None:
        return self._autosave

    def unassigned(self, search: str | None = None) -> list[Participant]:
        """The current pool, optionally narrowed by a name/role search term."""
        return filter_participants(unassigned(self._plan, self._participants), search)

    def lookup(self) -> dict[str, Participant]:
        """Signups keyed by participant ID."""
        return participants_by_id(self._participants)

    def pop_notices(self) -> list[str]:
        """Return and clear the pending user-facing notices."""
        notices, self.notices = self.notices, []
        return notices

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def assign(self, participant_id: str, group_id: str, position_id: str) -> EngineResult:
        return self._commit(
            engine.assign(
                self._plan,
                participant_id,
                group_id,
                position_id,
                policy=self._policy,
                roster=self._roster_ids,
            )
        )

    def unassign(self, group_id: str, position_id: str) -> EngineResult:
        return self._commit(engine.unassign(self._plan, group_id, position_id))

    def reorder_groups(self, from_index: int, to_index: int) -> EngineResult:
        return self._commit(engine.reorder_groups(self._plan, from_index, to_index))

    def reorder_positions(self, group_id: str, from_index: int, to_index: int) -> EngineResult:
        return self._commit(engine.reorder_positions(self._plan, group_id, from_index, to_index))

    def add_group(self, name: str | None = None, *, slots: int = 1) -> EngineResult:
        return self._commit(engine.add_group(self._plan, name, slots=slots, new_id=self._new_id))

    def remove_group(self, group_id: str) -> EngineResult:
        return self._commit(engine.remove_group(self._plan, group_id))

    def rename_group(self, group_id: str, name: str) -> EngineResult:
        return self._commit(engine.rename_group(self._plan, group_id, name))

    def add_position(self, group_id: str, label: str | None = None) -> EngineResult:
        return self._commit(
            engine.add_position(self._plan, group_id, label, new_id=self._new_id)
        )

    def remove_position(self, group_id: str, position_id: str) -> EngineResult:
        return self._commit(engine.remove_position(self._plan, group_id, position_id))

    def relabel_position(self, group_id: str, position_id: str, label: str | None) -> EngineResult:
        return self._commit(engine.relabel_position(self._plan, group_id, position_id, label))

    def retitle(self, title: str) -> EngineResult:
        return self._commit(engine.retitle(self._plan, title))

    def set_strategy(self, text: str | None) -> EngineResult:
        return self._commit(
            engine.set_strategy(self._plan, text, max_length=self._max_strategy_length)
        )

    def apply_topology(self, groups: Iterable[Group]) -> EngineResult:
        return self._commit(engine.apply_topology(self._plan, groups, new_id=self._new_id))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _commit(self, result: EngineResult) -> EngineResult:
        if not result.ok:
            assert result.error is not None
            logger.debug("Dropped %s: %s", result.op, result.error.message)
            return result
        if result.plan is self._plan:
            return result
        self._plan = result.plan
        if self._autosave is not None:
            self._autosave.schedule(result.plan)
        return result

    def _on_save_failed(self, result: Any) -> None:
        error = getattr(result, "error", None)
        message = error.message if error is not None else "unknown error"
        self.notices.append(f"Failed to save plan {self._plan.id}: {message}")
