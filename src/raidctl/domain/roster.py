"""Roster model: participants, positions, groups, plans, and presets.

All types are frozen. Transformations build new values with
``model_copy(update=...)`` and never mutate an input.

Field names are snake_case in Python and camelCase on the wire
(``participantId``, ``eventId``) so stored documents keep the dashboard's
interchange shape.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class Participant(BaseModel):
    """One signup for an event. Read-only reference data."""

    model_config = _MODEL_CONFIG

    id: str
    user_id: str
    username: str
    role: str | None = None
    spec: str | None = None


class Position(BaseModel):
    """A single assignable slot inside a group."""

    model_config = _MODEL_CONFIG

    id: str
    label: str | None = None
    participant_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.participant_id is None


class Group(BaseModel):
    """A named, ordered collection of positions."""

    model_config = _MODEL_CONFIG

    id: str
    name: str
    positions: tuple[Position, ...] = ()


class Plan(BaseModel):
    """The full composition for one event.

    Attributes:
        id: Sequential plan ID (``PLAN-0001``).
        event_id: The event this plan belongs to (one plan per event).
        guild_id: Owning Discord guild.
        title: Display title.
        strategy: Optional free-text tactics shown beside the groups.
        groups: Ordered groups; order is user-controlled.
    """

    model_config = _MODEL_CONFIG

    id: str
    event_id: str
    guild_id: str
    title: str
    strategy: str | None = None
    groups: tuple[Group, ...] = ()

    def assigned_ids(self) -> frozenset[str]:
        """Every participant ID currently bound to a position."""
        return frozenset(
            pos.participant_id
            for group in self.groups
            for pos in group.positions
            if pos.participant_id is not None
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON document shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Preset(BaseModel):
    """A reusable group/slot topology with no participant bindings."""

    model_config = _MODEL_CONFIG

    id: str
    guild_id: str
    name: str
    description: str | None = None
    groups: tuple[Group, ...] = ()
    created: str | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class SlotRef:
    """Address of one position within a plan."""

    group_id: str
    position_id: str


# ---------------------------------------------------------------------------
# JSON codec for group lists (stored as a single JSON column)
# ---------------------------------------------------------------------------

_GROUPS_ADAPTER: TypeAdapter[tuple[Group, ...]] = TypeAdapter(tuple[Group, ...])
_PARTICIPANTS_ADAPTER: TypeAdapter[list[Participant]] = TypeAdapter(list[Participant])


def dump_groups(groups: Iterable[Group]) -> str:
    """Serialize groups to a camelCase JSON array."""
    return _GROUPS_ADAPTER.dump_json(tuple(groups), by_alias=True, exclude_none=True).decode()


def load_groups(raw: str | bytes | list[Any]) -> tuple[Group, ...]:
    """Parse groups from JSON text or an already-decoded list."""
    if isinstance(raw, list):
        return _GROUPS_ADAPTER.validate_python(raw)
    return _GROUPS_ADAPTER.validate_json(raw)


def load_participants(raw: str | bytes | list[Any]) -> list[Participant]:
    """Parse a signup list from JSON text or an already-decoded list."""
    if isinstance(raw, list):
        return _PARTICIPANTS_ADAPTER.validate_python(raw)
    return _PARTICIPANTS_ADAPTER.validate_json(raw)


# ---------------------------------------------------------------------------
# Lookups: None means "not found" and callers decide how to report it
# ---------------------------------------------------------------------------


def iter_slots(plan: Plan) -> Iterator[tuple[Group, Position]]:
    """Yield every (group, position) pair in display order."""
    for group in plan.groups:
        for pos in group.positions:
            yield group, pos


def group_index(plan: Plan, group_id: str) -> int | None:
    for idx, group in enumerate(plan.groups):
        if group.id == group_id:
            return idx
    return None


def find_group(plan: Plan, group_id: str) -> Group | None:
    idx = group_index(plan, group_id)
    return None if idx is None else plan.groups[idx]


def find_position(plan: Plan, group_id: str, position_id: str) -> Position | None:
    group = find_group(plan, group_id)
    if group is None:
        return None
    for pos in group.positions:
        if pos.id == position_id:
            return pos
    return None


def locate_participant(plan: Plan, participant_id: str) -> SlotRef | None:
    """Return the slot holding *participant_id*, or None if unassigned."""
    for group, pos in iter_slots(plan):
        if pos.participant_id == participant_id:
            return SlotRef(group.id, pos.id)
    return None


def locate_all(plan: Plan, participant_id: str) -> list[SlotRef]:
    """Every slot holding *participant_id* (more than one only in corrupt data)."""
    return [
        SlotRef(group.id, pos.id)
        for group, pos in iter_slots(plan)
        if pos.participant_id == participant_id
    ]


def entity_ids(plan: Plan) -> frozenset[str]:
    """All group and position IDs in use (for collision-free generation)."""
    ids: set[str] = set()
    for group in plan.groups:
        ids.add(group.id)
        ids.update(pos.id for pos in group.positions)
    return frozenset(ids)


# ---------------------------------------------------------------------------
# Structural rebuild helpers
# ---------------------------------------------------------------------------


def with_groups(plan: Plan, groups: Iterable[Group]) -> Plan:
    return plan.model_copy(update={"groups": tuple(groups)})


def with_positions(group: Group, positions: Iterable[Position]) -> Group:
    return group.model_copy(update={"positions": tuple(positions)})


def write_slots(plan: Plan, writes: Mapping[SlotRef, str | None]) -> Plan:
    """Apply participant bindings to several slots in one new Plan.

    Groups without a write keep their identity (same object).
    """
    if not writes:
        return plan
    touched = {ref.group_id for ref in writes}
    groups: list[Group] = []
    for group in plan.groups:
        if group.id not in touched:
            groups.append(group)
            continue
        positions = []
        for pos in group.positions:
            ref = SlotRef(group.id, pos.id)
            if ref in writes:
                pos = pos.model_copy(update={"participant_id": writes[ref]})
            positions.append(pos)
        groups.append(with_positions(group, positions))
    return with_groups(plan, groups)


def bound_in_group(group: Group) -> tuple[str, ...]:
    """Participant IDs bound anywhere in *group*, in slot order."""
    return tuple(pos.participant_id for pos in group.positions if pos.participant_id is not None)


def participants_by_id(participants: Iterable[Participant]) -> dict[str, Participant]:
    return {p.id: p for p in participants}

