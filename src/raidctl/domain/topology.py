"""Group/slot topologies: the default seed and preset conversions.

A topology is the group and position structure of a plan with no
participant bindings. Presets store topologies; loading one into a plan
regenerates every ID so two plans never share entity IDs.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable

from raidctl.domain.ids import GROUP_PREFIX, POSITION_PREFIX, generate_entity_id
from raidctl.domain.roster import Group, Position

IdFactory = Callable[[str, Collection[str]], str]

DEFAULT_GROUP_COUNT = 5
DEFAULT_SLOT_COUNT = 5


def group_name(number: int) -> str:
    """Default display name for the *number*-th group (1-based)."""
    return f"Group {number}"


def default_groups(
    group_count: int = DEFAULT_GROUP_COUNT,
    slot_count: int = DEFAULT_SLOT_COUNT,
    *,
    new_id: IdFactory = generate_entity_id,
) -> tuple[Group, ...]:
    """Build the seed topology for a fresh plan: *group_count* x *slot_count*."""
    taken: set[str] = set()
    groups: list[Group] = []
    for i in range(group_count):
        group_id = new_id(GROUP_PREFIX, taken)
        taken.add(group_id)
        positions: list[Position] = []
        for _ in range(slot_count):
            pos_id = new_id(POSITION_PREFIX, taken)
            taken.add(pos_id)
            positions.append(Position(id=pos_id))
        groups.append(Group(id=group_id, name=group_name(i + 1), positions=tuple(positions)))
    return tuple(groups)


def strip_bindings(groups: Iterable[Group]) -> tuple[Group, ...]:
    """Clear every participant binding, keeping IDs, names, and labels."""
    return tuple(
        group.model_copy(
            update={
                "positions": tuple(
                    pos.model_copy(update={"participant_id": None}) for pos in group.positions
                )
            }
        )
        for group in groups
    )


def regenerate_groups(
    groups: Iterable[Group],
    *,
    taken: Collection[str] = (),
    new_id: IdFactory = generate_entity_id,
) -> tuple[Group, ...]:
    """Copy a topology with fresh IDs and no bindings.

    Names and labels are preserved. *taken* lists IDs that must not be
    produced (for example the IDs of the plan being replaced).
    """
    used = set(taken)
    result: list[Group] = []
    for group in groups:
        group_id = new_id(GROUP_PREFIX, used)
        used.add(group_id)
        positions: list[Position] = []
        for pos in group.positions:
            pos_id = new_id(POSITION_PREFIX, used)
            used.add(pos_id)
            positions.append(Position(id=pos_id, label=pos.label))
        result.append(Group(id=group_id, name=group.name, positions=tuple(positions)))
    return tuple(result)


def slot_count(groups: Iterable[Group]) -> int:
    return sum(len(g.positions) for g in groups)
