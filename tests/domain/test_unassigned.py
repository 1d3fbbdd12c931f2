"""Tests for the derived unassigned pool."""

from __future__ import annotations

from raidctl.domain.roster import Participant
from raidctl.domain.unassigned import assigned, filter_participants, unassigned
from tests.conftest import make_participants, make_plan


class TestUnassigned:
    def test_all_free_on_empty_plan(self) -> None:
        everyone = make_participants(3)
        assert unassigned(make_plan(2, 2), everyone) == everyone

    def test_partition(self) -> None:
        everyone = make_participants(4)
        plan = make_plan(2, 1, bindings={(1, 2): "u3", (2, 1): "u1"})
        free = unassigned(plan, everyone)
        seated = assigned(plan, everyone)
        assert [p.id for p in free] == ["u2", "u4"]
        assert [p.id for p in seated] == ["u1", "u3"]

    def test_unknown_binding_is_ignored(self) -> None:
        everyone = make_participants(1)
        plan = make_plan(1, bindings={(1, 1): "ghost"})
        assert unassigned(plan, everyone) == everyone
        assert assigned(plan, everyone) == []


class TestFilterParticipants:
    def test_empty_term_keeps_all(self) -> None:
        everyone = make_participants(3)
        assert filter_participants(everyone, None) == everyone
        assert filter_participants(everyone, "") == everyone

    def test_matches_username_or_role(self) -> None:
        everyone = [
            Participant(id="a", user_id="1", username="Thrall", role="Tank"),
            Participant(id="b", user_id="2", username="Jaina", role="dps"),
            Participant(id="c", user_id="3", username="Anduin"),
        ]
        assert [p.id for p in filter_participants(everyone, "tank")] == ["a"]
        assert [p.id for p in filter_participants(everyone, "JAI")] == ["b"]
        assert [p.id for p in filter_participants(everyone, "an")] == ["a", "c"]
