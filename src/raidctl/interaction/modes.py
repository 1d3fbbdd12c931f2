"""Input modality selection."""

from __future__ import annotations

from enum import StrEnum


class InteractionMode(StrEnum):
    """How the user picks a source and a target.

    CONTINUOUS: pointer drag from a chip onto a slot.
    DISCRETE: tap a chip, then tap a slot.
    """

    CONTINUOUS = "continuous"
    DISCRETE = "discrete"


def resolve_mode(*, touch_capable: bool, force: str | None = None) -> InteractionMode:
    """Pick the modality for a device.

    An explicit *force* value wins over detected capability. An empty
    string counts as "not forced" so the config default can be ``""``.
    """
    if force:
        return InteractionMode(force)
    return InteractionMode.DISCRETE if touch_capable else InteractionMode.CONTINUOUS
