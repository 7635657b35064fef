#!/usr/bin/env python3
"""
Boundary Level State Machine

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Decide which boundary resolution (kecamatan / desa / SLS)
is active from the map zoom, an optional "force desa" override, and which
collections actually loaded.

Transition rule (evaluated on every zoom/pan event):

    force_medium:  FINE if z >= fine_zoom else MEDIUM
    otherwise:     FINE if z >= fine_zoom
                   MEDIUM if medium_zoom <= z < fine_zoom
                   COARSE if z < medium_zoom

With hysteresis enabled, a machine already at MEDIUM or FINE stays at
MEDIUM while exit_medium_zoom < z < medium_zoom.

A level whose collection failed to load is never entered; the machine
degrades to the nearest coarser level that has data.

Invariants:
- A transition that changes the level clears hover and selection.
- Same-level events are no-ops (selection survives repeated zoom events).

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import dataclasses
import logging
from typing import Iterable, Optional

from peta_usaha.config_types import BoundaryZoomConfig
from peta_usaha.models.data_models import (
    BoundaryFeature,
    BoundaryLevel,
    BoundaryLevelState,
    LevelTransition,
)

logger = logging.getLogger(__name__)


def level_for_zoom(
    zoom: int,
    config: BoundaryZoomConfig,
    force_medium: bool = False,
    current: Optional[BoundaryLevel] = None,
) -> BoundaryLevel:
    """
    Target level for a zoom, ignoring data availability.

    Args:
        zoom: Current integer zoom
        config: Zoom thresholds
        force_medium: Keep at least the desa level
        current: Current level (only consulted when hysteresis is on)

    Returns:
        BoundaryLevel
    """
    if zoom >= config.fine_zoom:
        return BoundaryLevel.FINE
    if force_medium or zoom >= config.medium_zoom:
        return BoundaryLevel.MEDIUM
    if (
        config.hysteresis
        and current in (BoundaryLevel.MEDIUM, BoundaryLevel.FINE)
        and zoom > config.exit_medium_zoom
    ):
        return BoundaryLevel.MEDIUM
    return BoundaryLevel.COARSE


def degrade_to_available(
    level: BoundaryLevel, available: Iterable[BoundaryLevel]
) -> BoundaryLevel:
    """Nearest level at or below `level` that has data (COARSE as last resort)."""
    available = set(available)
    for candidate in sorted(BoundaryLevel, key=lambda l: l.rank, reverse=True):
        if candidate.rank <= level.rank and candidate in available:
            return candidate
    return BoundaryLevel.COARSE


class BoundaryLevelMachine:
    """
    Stateful owner of the BoundaryLevelState snapshot.

    Usage:
        machine = BoundaryLevelMachine(app_config.boundary_zoom, datasets.available_levels)
        transition = machine.on_zoom(14)
        if transition:
            visibility.on_level_changed(transition, bounds)
    """

    def __init__(
        self,
        config: Optional[BoundaryZoomConfig] = None,
        available_levels: Iterable[BoundaryLevel] = tuple(BoundaryLevel),
        initial_zoom: Optional[int] = None,
    ) -> None:
        self.config = config or BoundaryZoomConfig()
        self.available_levels = frozenset(available_levels)
        self.state = BoundaryLevelState()
        self.last_zoom = initial_zoom
        if initial_zoom is not None:
            self._evaluate(initial_zoom)

    @property
    def level(self) -> BoundaryLevel:
        return self.state.level

    def on_zoom(self, zoom: int) -> Optional[LevelTransition]:
        """
        Feed a zoom/pan event.

        Returns:
            LevelTransition when the level changed, else None
        """
        self.last_zoom = zoom
        return self._evaluate(zoom)

    def set_force_medium(self, enabled: bool) -> Optional[LevelTransition]:
        """Toggle the desa override and re-evaluate at the last zoom."""
        if enabled == self.state.force_medium:
            return None
        self.state = dataclasses.replace(self.state, force_medium=enabled)
        if self.last_zoom is None:
            return None
        return self._evaluate(self.last_zoom)

    def hover(self, feature: Optional[BoundaryFeature]) -> bool:
        """Set (or clear with None) the hovered feature. Returns True on change."""
        if feature is not None and feature.level is not self.state.level:
            logger.debug(
                f"Ignoring hover on {feature.level.value} feature while "
                f"{self.state.level.value} is active"
            )
            return False
        if feature == self.state.hovered:
            return False
        self.state = dataclasses.replace(self.state, hovered=feature)
        return True

    def select(self, feature: Optional[BoundaryFeature]) -> bool:
        """Set (or clear with None) the selected feature. Returns True on change."""
        if feature is not None and feature.level is not self.state.level:
            logger.debug(
                f"Ignoring selection of {feature.level.value} feature while "
                f"{self.state.level.value} is active"
            )
            return False
        if feature == self.state.selected:
            return False
        self.state = dataclasses.replace(self.state, selected=feature)
        return True

    def _evaluate(self, zoom: int) -> Optional[LevelTransition]:
        target = level_for_zoom(
            zoom, self.config, self.state.force_medium, current=self.state.level
        )
        target = degrade_to_available(target, self.available_levels)
        previous = self.state.level
        if target is previous:
            return None

        self.state = dataclasses.replace(
            self.state, level=target, hovered=None, selected=None
        )
        logger.debug(f"Boundary level {previous.value} → {target.value} at zoom {zoom}")
        return LevelTransition(previous=previous, current=target)
