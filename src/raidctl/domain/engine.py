"""Assignment engine: the state transitions of a raid plan.

Every operation takes a Plan and returns an :class:`EngineResult` holding a
new Plan. Nothing is mutated and nothing is raised for "not found" or bad
indices; those come back as failed results carrying the input Plan.

INVARIANT: After any successful call a participant occupies at most one
position. ``assign`` vacates the previous slot in the same transformation
that fills the target.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from enum import StrEnum
from typing import Any, TypeVar

from raidctl.domain.ids import GROUP_PREFIX, POSITION_PREFIX, generate_entity_id
from raidctl.domain.outcomes import EngineError, EngineResult, ErrorCode
from raidctl.domain.roster import (
    Group,
    Plan,
    Position,
    SlotRef,
    bound_in_group,
    entity_ids,
    find_position,
    group_index,
    locate_all,
    with_groups,
    with_positions,
    write_slots,
)
from raidctl.domain.topology import IdFactory, group_name, regenerate_groups

MAX_STRATEGY_LENGTH = 2000


class ConflictPolicy(StrEnum):
    """What happens to the occupant of a target slot during ``assign``.

    DISPLACE: the occupant returns to the unassigned pool.
    SWAP: the occupant moves into the assigned participant's former slot;
        falls back to DISPLACE when the participant came from the pool.
    """

    DISPLACE = "displace"
    SWAP = "swap"


# ---------------------------------------------------------------------------
# Result helpers
# ---------------------------------------------------------------------------


def _ok(op: str, plan: Plan, displaced: Iterable[str] = ()) -> EngineResult:
    return EngineResult(ok=True, op=op, plan=plan, displaced=tuple(displaced))


def _fail(op: str, plan: Plan, code: ErrorCode, message: str, **detail: Any) -> EngineResult:
    return EngineResult(
        ok=False,
        op=op,
        plan=plan,
        error=EngineError(code=code, message=message, detail=detail),
    )


def _group_not_found(op: str, plan: Plan, group_id: str) -> EngineResult:
    return _fail(
        op, plan, ErrorCode.NOT_FOUND, f"No group found with ID: {group_id}", group_id=group_id
    )


def _position_not_found(op: str, plan: Plan, group_id: str, position_id: str) -> EngineResult:
    return _fail(
        op,
        plan,
        ErrorCode.NOT_FOUND,
        f"No position {position_id} in group {group_id}",
        group_id=group_id,
        position_id=position_id,
    )


T = TypeVar("T")


def _move_item(items: Sequence[T], from_index: int, to_index: int) -> list[T] | None:
    """List-splice move. Returns None when either index is out of range."""
    size = len(items)
    if not (0 <= from_index < size and 0 <= to_index < size):
        return None
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def _replace_group(plan: Plan, idx: int, group: Group) -> Plan:
    groups = list(plan.groups)
    groups[idx] = group
    return with_groups(plan, groups)


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------


def assign(
    plan: Plan,
    participant_id: str,
    group_id: str,
    position_id: str,
    *,
    policy: ConflictPolicy = ConflictPolicy.DISPLACE,
    roster: Collection[str] | None = None,
) -> EngineResult:
    """Place *participant_id* into a slot, vacating wherever they were.

    Assigning a participant to the slot they already hold succeeds and
    returns the same Plan. When *roster* is given, an ID that is neither
    on it nor already seated is rejected with NOT_FOUND.
    """
    op = "assign"
    target = find_position(plan, group_id, position_id)
    if target is None:
        return _position_not_found(op, plan, group_id, position_id)
    if (
        roster is not None
        and participant_id not in roster
        and participant_id not in plan.assigned_ids()
    ):
        return _fail(
            op,
            plan,
            ErrorCode.NOT_FOUND,
            f"No signup found with ID: {participant_id}",
            participant_id=participant_id,
        )

    target_ref = SlotRef(group_id, position_id)
    sources = [ref for ref in locate_all(plan, participant_id) if ref != target_ref]
    if not sources and target.participant_id == participant_id:
        return _ok(op, plan)

    writes: dict[SlotRef, str | None] = {ref: None for ref in sources}
    displaced: list[str] = []
    occupant = target.participant_id
    if occupant is not None and occupant != participant_id:
        if policy is ConflictPolicy.SWAP and sources:
            writes[sources[0]] = occupant
        else:
            displaced.append(occupant)
    writes[target_ref] = participant_id
    return _ok(op, write_slots(plan, writes), displaced)


def unassign(plan: Plan, group_id: str, position_id: str) -> EngineResult:
    """Clear a slot. Clearing an empty slot succeeds and changes nothing."""
    op = "unassign"
    target = find_position(plan, group_id, position_id)
    if target is None:
        return _position_not_found(op, plan, group_id, position_id)
    if target.participant_id is None:
        return _ok(op, plan)
    new_plan = write_slots(plan, {SlotRef(group_id, position_id): None})
    return _ok(op, new_plan, [target.participant_id])


# ---------------------------------------------------------------------------
# Reordering
# ---------------------------------------------------------------------------


def reorder_groups(plan: Plan, from_index: int, to_index: int) -> EngineResult:
    op = "reorder_groups"
    moved = _move_item(plan.groups, from_index, to_index)
    if moved is None:
        return _fail(
            op,
            plan,
            ErrorCode.INDEX_OUT_OF_RANGE,
            f"Cannot move group {from_index} -> {to_index} (have {len(plan.groups)})",
            from_index=from_index,
            to_index=to_index,
            size=len(plan.groups),
        )
    if from_index == to_index:
        return _ok(op, plan)
    return _ok(op, with_groups(plan, moved))


def reorder_positions(plan: Plan, group_id: str, from_index: int, to_index: int) -> EngineResult:
    op = "reorder_positions"
    idx = group_index(plan, group_id)
    if idx is None:
        return _group_not_found(op, plan, group_id)
    group = plan.groups[idx]
    moved = _move_item(group.positions, from_index, to_index)
    if moved is None:
        return _fail(
            op,
            plan,
            ErrorCode.INDEX_OUT_OF_RANGE,
            f"Cannot move position {from_index} -> {to_index} (have {len(group.positions)})",
            group_id=group_id,
            from_index=from_index,
            to_index=to_index,
            size=len(group.positions),
        )
    if from_index == to_index:
        return _ok(op, plan)
    return _ok(op, _replace_group(plan, idx, with_positions(group, moved)))


# ---------------------------------------------------------------------------
# Structural edits
# ---------------------------------------------------------------------------


def add_group(
    plan: Plan,
    name: str | None = None,
    *,
    slots: int = 1,
    new_id: IdFactory = generate_entity_id,
) -> EngineResult:
    """Append a group with *slots* empty positions.

    The default name is ``Group N`` where N is the new group count.
    """
    op = "add_group"
    if slots < 0:
        return _fail(op, plan, ErrorCode.VALIDATION_FAILED, "Slot count cannot be negative")
    label = (name or "").strip() or group_name(len(plan.groups) + 1)
    taken = set(entity_ids(plan))
    group_id = new_id(GROUP_PREFIX, taken)
    taken.add(group_id)
    positions: list[Position] = []
    for _ in range(slots):
        pos_id = new_id(POSITION_PREFIX, taken)
        taken.add(pos_id)
        positions.append(Position(id=pos_id))
    group = Group(id=group_id, name=label, positions=tuple(positions))
    return _ok(op, with_groups(plan, [*plan.groups, group]))


def remove_group(plan: Plan, group_id: str) -> EngineResult:
    """Drop a group. Anyone seated in it returns to the unassigned pool."""
    op = "remove_group"
    idx = group_index(plan, group_id)
    if idx is None:
        return _group_not_found(op, plan, group_id)
    displaced = bound_in_group(plan.groups[idx])
    groups = [g for i, g in enumerate(plan.groups) if i != idx]
    return _ok(op, with_groups(plan, groups), displaced)


def rename_group(plan: Plan, group_id: str, name: str) -> EngineResult:
    op = "rename_group"
    idx = group_index(plan, group_id)
    if idx is None:
        return _group_not_found(op, plan, group_id)
    clean = name.strip()
    if not clean:
        return _fail(op, plan, ErrorCode.VALIDATION_FAILED, "Group name cannot be empty")
    group = plan.groups[idx]
    if group.name == clean:
        return _ok(op, plan)
    return _ok(op, _replace_group(plan, idx, group.model_copy(update={"name": clean})))


def add_position(
    plan: Plan,
    group_id: str,
    label: str | None = None,
    *,
    new_id: IdFactory = generate_entity_id,
) -> EngineResult:
    """Append an empty slot to the end of a group."""
    op = "add_position"
    idx = group_index(plan, group_id)
    if idx is None:
        return _group_not_found(op, plan, group_id)
    group = plan.groups[idx]
    pos = Position(
        id=new_id(POSITION_PREFIX, entity_ids(plan)),
        label=(label or "").strip() or None,
    )
    return _ok(op, _replace_group(plan, idx, with_positions(group, [*group.positions, pos])))


def remove_position(plan: Plan, group_id: str, position_id: str) -> EngineResult:
    """Drop a slot. Its occupant, if any, returns to the unassigned pool."""
    op = "remove_position"
    target = find_position(plan, group_id, position_id)
    if target is None:
        return _position_not_found(op, plan, group_id, position_id)
    idx = group_index(plan, group_id)
    assert idx is not None
    group = plan.groups[idx]
    remaining = [p for p in group.positions if p.id != position_id]
    displaced = [target.participant_id] if target.participant_id is not None else []
    return _ok(op, _replace_group(plan, idx, with_positions(group, remaining)), displaced)


def relabel_position(
    plan: Plan, group_id: str, position_id: str, label: str | None
) -> EngineResult:
    """Set a slot caption. A blank label clears it."""
    op = "relabel_position"
    target = find_position(plan, group_id, position_id)
    if target is None:
        return _position_not_found(op, plan, group_id, position_id)
    clean = (label or "").strip() or None
    if target.label == clean:
        return _ok(op, plan)
    idx = group_index(plan, group_id)
    assert idx is not None
    group = plan.groups[idx]
    positions = [
        p.model_copy(update={"label": clean}) if p.id == position_id else p for p in group.positions
    ]
    return _ok(op, _replace_group(plan, idx, with_positions(group, positions)))


# ---------------------------------------------------------------------------
# Plan-level edits
# ---------------------------------------------------------------------------


def retitle(plan: Plan, title: str) -> EngineResult:
    op = "retitle"
    clean = title.strip()
    if not clean:
        return _fail(op, plan, ErrorCode.VALIDATION_FAILED, "Title cannot be empty")
    if clean == plan.title:
        return _ok(op, plan)
    return _ok(op, plan.model_copy(update={"title": clean}))


def set_strategy(
    plan: Plan,
    text: str | None,
    *,
    max_length: int = MAX_STRATEGY_LENGTH,
) -> EngineResult:
    """Set or clear the free-text strategy description."""
    op = "set_strategy"
    clean = (text or "").strip() or None
    if clean is not None and len(clean) > max_length:
        return _fail(
            op,
            plan,
            ErrorCode.VALIDATION_FAILED,
            f"Strategy is {len(clean)} characters; the limit is {max_length}",
            length=len(clean),
            max_length=max_length,
        )
    if clean == plan.strategy:
        return _ok(op, plan)
    return _ok(op, plan.model_copy(update={"strategy": clean}))


def apply_topology(
    plan: Plan,
    groups: Iterable[Group],
    *,
    new_id: IdFactory = generate_entity_id,
) -> EngineResult:
    """Replace the plan's groups with a preset topology.

    The incoming groups get fresh IDs and no bindings; everyone who was
    seated returns to the unassigned pool.
    """
    op = "apply_topology"
    fresh = regenerate_groups(groups, taken=entity_ids(plan), new_id=new_id)
    displaced = [pid for group in plan.groups for pid in bound_in_group(group)]
    return _ok(op, with_groups(plan, fresh), displaced)
