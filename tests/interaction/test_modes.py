"""Tests for modality resolution."""

from __future__ import annotations

import pytest

from raidctl.interaction.modes import InteractionMode, resolve_mode


class TestResolveMode:
    def test_touch_defaults_to_discrete(self) -> None:
        assert resolve_mode(touch_capable=True) is InteractionMode.DISCRETE

    def test_pointer_defaults_to_continuous(self) -> None:
        assert resolve_mode(touch_capable=False) is InteractionMode.CONTINUOUS

    @pytest.mark.parametrize("touch", [True, False])
    def test_override_wins(self, touch: bool) -> None:
        assert resolve_mode(touch_capable=touch, force="discrete") is InteractionMode.DISCRETE
        assert resolve_mode(touch_capable=touch, force="continuous") is InteractionMode.CONTINUOUS

    def test_empty_override_means_detect(self) -> None:
        assert resolve_mode(touch_capable=True, force="") is InteractionMode.DISCRETE

    def test_unknown_override(self) -> None:
        with pytest.raises(ValueError):
            resolve_mode(touch_capable=True, force="hover")
