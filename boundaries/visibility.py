#!/usr/bin/env python3
"""
Viewport Visibility Engine - Bounding-Box Culling

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: For the desa and SLS collections, which are too large to
render city-wide, keep only the features whose bounding box intersects the
current viewport. Rendered feature count then follows viewport size, not
dataset size.

Key Features:
1. compute_visible(): pure, order-preserving, numpy-vectorized bbox test
2. Per-feature failure isolation (bad geometry is excluded, not fatal)
3. Debounced recomputation on pan/zoom (200 ms after the last event)
4. Per-level visible cache, cleared when the level is left

Navigation Guide:
- compute_visible: Core culling function
- VisibilityEngine: Cache + debounce owner

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from peta_usaha.config_types import VisibilityConfig
from peta_usaha.errors import GeometryError
from peta_usaha.models.data_models import (
    BoundaryFeature,
    BoundaryLevel,
    Datasets,
    LevelTransition,
)
from peta_usaha.viewport.geometry_utils import Bounds
from peta_usaha.viewport.timers import Clock, Debouncer

logger = logging.getLogger(__name__)

CULLED_LEVELS: Tuple[BoundaryLevel, ...] = tuple(
    level for level in BoundaryLevel if level.is_culled
)


# ═══════════════════════════════════════════════════════════════════════════
# 📐 CULLING
# ═══════════════════════════════════════════════════════════════════════════


def _bounds_array(
    features: Sequence[BoundaryFeature],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stack feature bounds into an (n, 4) array.

    Returns:
        (bounds, valid) where invalid rows (unparseable geometry) are NaN
        and valid is a boolean mask.
    """
    bounds = np.full((len(features), 4), np.nan, dtype=float)
    valid = np.zeros(len(features), dtype=bool)
    for i, feature in enumerate(features):
        try:
            bounds[i] = feature.bounds
        except GeometryError as e:
            logger.debug(
                f"Skipping {feature.level.value} feature {feature.feature_id}: {e}"
            )
            continue
        valid[i] = True
    return bounds, valid


def compute_visible(
    features: Optional[Sequence[BoundaryFeature]],
    viewport: Optional[Bounds],
) -> Tuple[BoundaryFeature, ...]:
    """
    Features whose bounding box intersects the viewport box.

    Pure and order-preserving. Touching edges count as intersecting.

    Args:
        features: Level collection (None when not loaded)
        viewport: Current visible bounds (None when unknown)

    Returns:
        Subsequence of features; empty when the collection or the
        viewport is unavailable.
    """
    if not features or viewport is None:
        return ()

    bounds, valid = _bounds_array(features)
    min_lon, min_lat, max_lon, max_lat = viewport
    # NaN comparisons are False, so invalid rows drop out on their own
    mask = (
        valid
        & (bounds[:, 0] <= max_lon)
        & (bounds[:, 2] >= min_lon)
        & (bounds[:, 1] <= max_lat)
        & (bounds[:, 3] >= min_lat)
    )
    return tuple(features[i] for i in np.flatnonzero(mask))


# ═══════════════════════════════════════════════════════════════════════════
# 👁️ VISIBILITY ENGINE
# ═══════════════════════════════════════════════════════════════════════════


class VisibilityEngine:
    """
    Owns the visible-feature cache of each culled level.

    - on_level_changed(): clear the level being left, recompute immediately
      for a culled level being entered
    - on_viewport_changed(): debounced recomputation for the active level
    - close(): disarm the debounce timer
    """

    def __init__(
        self,
        datasets: Datasets,
        clock: Clock,
        config: Optional[VisibilityConfig] = None,
        on_update: Optional[Callable[[BoundaryLevel], None]] = None,
    ) -> None:
        self.datasets = datasets
        self.config = config or VisibilityConfig()
        self._on_update = on_update
        self._active: BoundaryLevel = BoundaryLevel.COARSE
        self._viewport: Optional[Bounds] = None
        self._visible: Dict[BoundaryLevel, Tuple[BoundaryFeature, ...]] = {}
        self._debouncer = Debouncer(clock, self.config.debounce_s, self._recompute)
        self.recompute_count = 0

    @property
    def active_level(self) -> BoundaryLevel:
        return self._active

    @property
    def pending(self) -> bool:
        """True while a debounced recomputation is scheduled."""
        return self._debouncer.armed

    def visible(self, level: Optional[BoundaryLevel] = None) -> Tuple[BoundaryFeature, ...]:
        """Cached visible features of a culled level (the active one by default)."""
        level = level or self._active
        return self._visible.get(level, ())

    def on_level_changed(
        self, transition: LevelTransition, viewport: Optional[Bounds]
    ) -> None:
        if viewport is not None:
            self._viewport = viewport
        self._active = transition.current
        if transition.previous in CULLED_LEVELS:
            self._visible.pop(transition.previous, None)
        if transition.current in CULLED_LEVELS:
            self._debouncer.cancel()
            self._recompute()
        else:
            self._debouncer.cancel()

    def on_viewport_changed(self, viewport: Bounds) -> None:
        self._viewport = viewport
        if self._active in CULLED_LEVELS:
            self._debouncer.schedule()

    def set_active_level(
        self, level: BoundaryLevel, viewport: Optional[Bounds] = None
    ) -> None:
        """Set the active level without a transition (session start)."""
        if viewport is not None:
            self._viewport = viewport
        self._active = level
        if level in CULLED_LEVELS:
            self._recompute()

    def close(self) -> None:
        self._debouncer.close()
        self._visible.clear()

    def _recompute(self) -> None:
        level = self._active
        if level not in CULLED_LEVELS:
            return
        visible = compute_visible(self.datasets.features_for(level), self._viewport)
        self._visible[level] = visible
        self.recompute_count += 1
        logger.debug(f"{len(visible)} {level.value} features visible")
        if self._on_update is not None:
            self._on_update(level)
