"""Drag and tap controllers, plus the facade the View talks to.

Both modalities only work out *who* is being moved and *where* to. The
assignment itself is always one ``EditingSession.assign`` call, so a drag
and a tap sequence naming the same participant and slot yield the same
Plan.

Discrete (tap) states::

    Idle --tap(chip)--------------> SourceSelected
    SourceSelected --tap(same)----> Idle            (no engine call)
    SourceSelected --tap(other)---> SourceSelected  (re-select, no call)
    SourceSelected --tap(slot)----> Idle            (one assign)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from raidctl.domain.roster import group_index
from raidctl.interaction.modes import InteractionMode, resolve_mode

if TYPE_CHECKING:
    from raidctl.domain.outcomes import EngineError, EngineResult
    from raidctl.domain.roster import Plan
    from raidctl.interaction.session import EditingSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Gesture subjects and targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChipRef:
    """A participant chip, either in the pool or sitting in a slot."""

    participant_id: str
    group_id: str | None = None
    position_id: str | None = None


@dataclass(frozen=True)
class PositionRef:
    group_id: str
    position_id: str


@dataclass(frozen=True)
class GroupRef:
    group_id: str


# ---------------------------------------------------------------------------
# Tap-mode states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class SourceSelected:
    participant_id: str
    origin_group_id: str | None = None
    origin_position_id: str | None = None
    selected_at: float = field(default=0.0, compare=False)


TapState = Idle | SourceSelected


@dataclass(frozen=True)
class GestureOutcome:
    """What the View re-renders from after any gesture.

    Attributes:
        plan: The session's Plan after the gesture (unchanged on error).
        engine_called: Whether the gesture reached the engine.
        error: The engine error, if the call failed.
        selection: The tap-mode selection still held, if any.
    """

    plan: Plan
    engine_called: bool = False
    error: EngineError | None = None
    selection: SourceSelected | None = None


def _outcome(
    session: EditingSession,
    result: EngineResult | None = None,
    selection: SourceSelected | None = None,
) -> GestureOutcome:
    return GestureOutcome(
        plan=session.plan,
        engine_called=result is not None,
        error=result.error if result is not None else None,
        selection=selection,
    )


# ---------------------------------------------------------------------------
# Continuous mode
# ---------------------------------------------------------------------------


class DragController:
    """Pointer drags: chips onto slots, groups onto groups."""

    def __init__(self, session: EditingSession) -> None:
        self._session = session
        self._dragging: ChipRef | GroupRef | None = None

    @property
    def dragging(self) -> ChipRef | GroupRef | None:
        return self._dragging

    def on_drag_start(self, subject: ChipRef | GroupRef) -> GestureOutcome:
        self._dragging = subject
        return _outcome(self._session)

    def on_drag_end(self, target: PositionRef | GroupRef | None) -> GestureOutcome:
        """Finish the drag. Dropping over nothing makes no engine call."""
        subject, self._dragging = self._dragging, None
        if subject is None or target is None:
            return _outcome(self._session)

        if isinstance(subject, ChipRef) and isinstance(target, PositionRef):
            result = self._session.assign(
                subject.participant_id, target.group_id, target.position_id
            )
            return _outcome(self._session, result)

        if isinstance(subject, GroupRef) and isinstance(target, GroupRef):
            plan = self._session.plan
            from_index = group_index(plan, subject.group_id)
            to_index = group_index(plan, target.group_id)
            if from_index is None or to_index is None or from_index == to_index:
                return _outcome(self._session)
            return _outcome(self._session, self._session.reorder_groups(from_index, to_index))

        logger.debug("Ignored drop of %r onto %r", subject, target)
        return _outcome(self._session)

    def on_drag_cancel(self) -> GestureOutcome:
        self._dragging = None
        return _outcome(self._session)


# ---------------------------------------------------------------------------
# Discrete mode
# ---------------------------------------------------------------------------


class TapController:
    """Tap a chip to select it, then tap a slot to place it.

    A positive *selection_timeout* expires a selection that has been held
    that many seconds; ``0`` keeps selections until cleared.
    """

    def __init__(
        self,
        session: EditingSession,
        *,
        selection_timeout: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session
        self._timeout = selection_timeout
        self._clock = clock
        self._state: TapState = Idle()

    @property
    def state(self) -> TapState:
        state = self._state
        if (
            isinstance(state, SourceSelected)
            and self._timeout > 0
            and self._clock() - state.selected_at >= self._timeout
        ):
            logger.debug("Selection of %s expired", state.participant_id)
            self._state = Idle()
        return self._state

    @property
    def selection(self) -> SourceSelected | None:
        state = self.state
        return state if isinstance(state, SourceSelected) else None

    def on_tap(self, target: ChipRef | PositionRef) -> GestureOutcome:
        state = self.state
        if isinstance(target, ChipRef):
            if isinstance(state, SourceSelected) and state.participant_id == target.participant_id:
                self._state = Idle()
                return _outcome(self._session)
            selected = SourceSelected(
                participant_id=target.participant_id,
                origin_group_id=target.group_id,
                origin_position_id=target.position_id,
                selected_at=self._clock(),
            )
            self._state = selected
            return _outcome(self._session, selection=selected)

        if isinstance(state, Idle):
            return _outcome(self._session)
        self._state = Idle()
        result = self._session.assign(state.participant_id, target.group_id, target.position_id)
        return _outcome(self._session, result)

    def clear(self) -> GestureOutcome:
        self._state = Idle()
        return _outcome(self._session)


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


class InteractionController:
    """Single entry point for the View.

    Owns the active mode and both controllers. Gestures belonging to the
    inactive modality are ignored and reported with ``engine_called=False``.
    """

    def __init__(
        self,
        session: EditingSession,
        *,
        mode: InteractionMode = InteractionMode.CONTINUOUS,
        selection_timeout: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session
        self._mode = mode
        self._drag = DragController(session)
        self._tap = TapController(session, selection_timeout=selection_timeout, clock=clock)

    @classmethod
    def for_device(
        cls,
        session: EditingSession,
        *,
        touch_capable: bool,
        force_mode: str | None = None,
        selection_timeout: float = 0.0,
    ) -> InteractionController:
        mode = resolve_mode(touch_capable=touch_capable, force=force_mode)
        return cls(session, mode=mode, selection_timeout=selection_timeout)

    @property
    def session(self) -> EditingSession:
        return self._session

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    @property
    def selection(self) -> SourceSelected | None:
        return self._tap.selection

    def set_mode(self, mode: InteractionMode | str) -> None:
        """Switch modality. Any half-finished gesture is dropped."""
        self._mode = InteractionMode(mode)
        self._drag.on_drag_cancel()
        self._tap.clear()

    def on_drag_start(self, subject: ChipRef | GroupRef) -> GestureOutcome:
        if self._mode is not InteractionMode.CONTINUOUS:
            return _outcome(self._session)
        return self._drag.on_drag_start(subject)

    def on_drag_end(self, target: PositionRef | GroupRef | None) -> GestureOutcome:
        if self._mode is not InteractionMode.CONTINUOUS:
            return _outcome(self._session)
        return self._drag.on_drag_end(target)

    def on_drag_cancel(self) -> GestureOutcome:
        return self._drag.on_drag_cancel()

    def on_tap(self, target: ChipRef | PositionRef) -> GestureOutcome:
        if self._mode is not InteractionMode.DISCRETE:
            return _outcome(self._session)
        return self._tap.on_tap(target)

    def clear_selection(self) -> GestureOutcome:
        self._drag.on_drag_cancel()
        return self._tap.clear()
