#!/usr/bin/env python3
"""
Boundary Level State Machine Tests

Zoom-driven level switching, the "force desa" override, opt-in
hysteresis, degradation when a collection failed to load, and the
hover/selection lifetime across transitions.
"""

import pytest

from peta_usaha.boundaries.level_machine import (
    BoundaryLevelMachine,
    degrade_to_available,
    level_for_zoom,
)
from peta_usaha.config_types import BoundaryZoomConfig
from peta_usaha.errors import ConfigError
from peta_usaha.models.data_models import BoundaryLevel, LevelTransition

COARSE = BoundaryLevel.COARSE
MEDIUM = BoundaryLevel.MEDIUM
FINE = BoundaryLevel.FINE


@pytest.fixture
def machine():
    return BoundaryLevelMachine(BoundaryZoomConfig())


class TestLevelForZoom:
    """Pure zoom → level rule with the default 13/15 thresholds."""

    @pytest.mark.parametrize(
        "zoom,expected",
        [(8, COARSE), (12, COARSE), (13, MEDIUM), (14, MEDIUM), (15, FINE), (18, FINE)],
    )
    def test_thresholds(self, zoom, expected):
        assert level_for_zoom(zoom, BoundaryZoomConfig()) is expected

    def test_force_medium_below_threshold(self):
        assert level_for_zoom(10, BoundaryZoomConfig(), force_medium=True) is MEDIUM

    def test_force_medium_does_not_block_fine(self):
        assert level_for_zoom(15, BoundaryZoomConfig(), force_medium=True) is FINE

    def test_hysteresis_keeps_medium_above_exit_zoom(self):
        config = BoundaryZoomConfig(exit_medium_zoom=11, hysteresis=True)
        assert level_for_zoom(12, config, current=MEDIUM) is MEDIUM
        assert level_for_zoom(12, config, current=COARSE) is COARSE
        assert level_for_zoom(11, config, current=MEDIUM) is COARSE

    def test_exit_zoom_ignored_without_hysteresis(self):
        config = BoundaryZoomConfig(exit_medium_zoom=11)
        assert level_for_zoom(12, config, current=MEDIUM) is COARSE

    def test_misordered_thresholds_rejected(self):
        with pytest.raises(ConfigError):
            BoundaryZoomConfig(medium_zoom=15, fine_zoom=13)
        with pytest.raises(ConfigError):
            BoundaryZoomConfig(exit_medium_zoom=13, medium_zoom=13)


class TestBoundaryLevelMachine:
    """Stateful transitions and their side effects."""

    def test_zoom_sequence(self, machine):
        levels = []
        changes = 0
        for zoom in [10, 12, 13, 14, 15, 14, 12]:
            if machine.on_zoom(zoom) is not None:
                changes += 1
            levels.append(machine.level)

        assert levels == [COARSE, COARSE, MEDIUM, MEDIUM, FINE, MEDIUM, COARSE]
        assert changes == 4

    def test_transition_reports_both_levels(self, machine):
        assert machine.on_zoom(13) == LevelTransition(previous=COARSE, current=MEDIUM)

    def test_same_zoom_twice_is_one_transition(self, machine):
        assert machine.on_zoom(15) is not None
        assert machine.on_zoom(15) is None

    def test_level_change_clears_hover_and_selection(self, machine, feature_factory):
        machine.on_zoom(13)
        desa = feature_factory(MEDIUM, 1, (98.6, 3.5, 98.7, 3.6), nmdesa="BABURA")
        assert machine.select(desa)
        assert machine.hover(desa)

        machine.on_zoom(14)
        assert machine.state.selected == desa

        machine.on_zoom(15)
        assert machine.state.selected is None
        assert machine.state.hovered is None

    def test_hover_wins_over_selection_for_display(self, machine, feature_factory):
        a = feature_factory(COARSE, 1, (98.6, 3.5, 98.7, 3.6), nmkec="MEDAN BARU")
        b = feature_factory(COARSE, 2, (98.7, 3.5, 98.8, 3.6), nmkec="MEDAN KOTA")
        machine.select(a)
        machine.hover(b)
        assert machine.state.display == b
        machine.hover(None)
        assert machine.state.display == a

    def test_feature_of_inactive_level_ignored(self, machine, feature_factory):
        sls = feature_factory(FINE, 1, (98.6, 3.5, 98.7, 3.6), nmsls="SLS 001")
        assert not machine.select(sls)
        assert machine.state.selected is None

    def test_force_medium_toggle_reevaluates(self, machine):
        machine.on_zoom(11)
        transition = machine.set_force_medium(True)
        assert transition == LevelTransition(previous=COARSE, current=MEDIUM)
        assert machine.set_force_medium(True) is None
        assert machine.set_force_medium(False) == LevelTransition(previous=MEDIUM, current=COARSE)

    def test_force_medium_before_any_zoom(self):
        machine = BoundaryLevelMachine()
        assert machine.set_force_medium(True) is None
        assert machine.state.force_medium
        assert machine.on_zoom(9) is not None
        assert machine.level is MEDIUM

    def test_initial_zoom_sets_level(self):
        assert BoundaryLevelMachine(initial_zoom=14).level is MEDIUM


class TestDegradation:
    """Levels without data are never entered."""

    def test_degrade_to_nearest_coarser(self):
        assert degrade_to_available(FINE, [COARSE, MEDIUM]) is MEDIUM
        assert degrade_to_available(FINE, [COARSE]) is COARSE
        assert degrade_to_available(MEDIUM, [COARSE, FINE]) is COARSE

    def test_coarse_is_last_resort(self):
        assert degrade_to_available(FINE, []) is COARSE

    def test_machine_skips_missing_fine_level(self):
        machine = BoundaryLevelMachine(available_levels=[COARSE, MEDIUM])
        machine.on_zoom(16)
        assert machine.level is MEDIUM
        assert machine.on_zoom(17) is None
