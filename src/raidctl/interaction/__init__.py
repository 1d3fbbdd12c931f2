"""Interaction layer — turns raw drag and tap gestures into engine calls.

Depends on the domain layer only. Persistence is reached through the
autosave object handed to :class:`EditingSession`.
"""

from raidctl.interaction.gestures import (
    ChipRef,
    GestureOutcome,
    GroupRef,
    Idle,
    InteractionController,
    PositionRef,
    SourceSelected,
)
from raidctl.interaction.modes import InteractionMode, resolve_mode
from raidctl.interaction.session import EditingSession

__all__ = [
    "ChipRef",
    "EditingSession",
    "GestureOutcome",
    "GroupRef",
    "Idle",
    "InteractionController",
    "InteractionMode",
    "PositionRef",
    "SourceSelected",
    "resolve_mode",
]
