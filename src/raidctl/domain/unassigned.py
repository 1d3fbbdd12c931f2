"""Unassigned-pool derivation.

The pool is never stored. It is recomputed from the plan and the event's
signup list whenever it is needed, so the two cannot drift apart.
"""

from __future__ import annotations

from collections.abc import Iterable

from raidctl.domain.roster import Participant, Plan


def unassigned(plan: Plan, participants: Iterable[Participant]) -> list[Participant]:
    """Participants bound to no position in *plan*, in signup order.

    Linear in positions + participants: the assigned set is built once.
    """
    assigned = plan.assigned_ids()
    return [p for p in participants if p.id not in assigned]


def assigned(plan: Plan, participants: Iterable[Participant]) -> list[Participant]:
    """Participants bound to some position in *plan*, in signup order."""
    bound = plan.assigned_ids()
    return [p for p in participants if p.id in bound]


def filter_participants(participants: Iterable[Participant], term: str | None) -> list[Participant]:
    """Case-insensitive match on username or role. Empty *term* keeps everything."""
    items = list(participants)
    if not term:
        return items
    needle = term.lower()
    return [
        p
        for p in items
        if needle in p.username.lower() or (p.role is not None and needle in p.role.lower())
    ]
