#!/usr/bin/env python3
"""
Map View Synchronizer

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Derive the map center/zoom from the filtered records (or
from an explicit "go to record" action) and issue view commands only
when they differ from the last one, so a derived view feeding back into
viewport-dependent computations cannot start a jitter loop.

Key Functions:
1. zoom_for_span(): breakpoint table (<0.01 → 15, <0.05 → 13, >0.2 → 10, else 12)
2. view_for(): midpoint of min/max lat/lon + zoom from the larger span
3. fit_bounds(): same table, capped at a max zoom (boundary focus)
4. google_maps_link(): "locate externally" deep link
5. MapViewSynchronizer: idempotent sync() / fly_to(), forget() on user moves

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from typing import Iterable, Optional, Tuple
from urllib.parse import quote

from peta_usaha.config_types import ViewSyncConfig
from peta_usaha.models.data_models import BusinessRecord, MapView
from peta_usaha.viewport.geometry_utils import Bounds, bounds_to_center, points_bounds

logger = logging.getLogger(__name__)

GOOGLE_MAPS_URL = "https://www.google.com/maps?q={lat},{lon}&z={zoom}&t=m&hl=id&label={label}"


# ═══════════════════════════════════════════════════════════════════════════
# 📏 ZOOM SELECTION
# ═══════════════════════════════════════════════════════════════════════════


def zoom_for_span(span: float, config: Optional[ViewSyncConfig] = None) -> int:
    """
    Zoom level for a lat/lon spread.

    Args:
        span: Larger of latitude and longitude span, in degrees
        config: Breakpoint table (defaults: <0.01 → 15, <0.05 → 13, >0.2 → 10, else 12)

    Returns:
        Integer zoom
    """
    config = config or ViewSyncConfig()
    for below, zoom in config.span_breakpoints:
        if span < below:
            return zoom
    if span > config.wide_span:
        return config.wide_span_zoom
    return config.fallback_zoom


def view_for(
    records: Iterable[BusinessRecord], config: Optional[ViewSyncConfig] = None
) -> Optional[MapView]:
    """
    View framing a set of records.

    Center is the midpoint of the min/max latitude and longitude; zoom
    comes from the larger span.

    Returns:
        MapView, or None for no records (the view is left unchanged)
    """
    bounds = points_bounds(r.coordinates for r in records)
    if bounds is None:
        return None
    span = max(bounds.lat_span, bounds.lon_span)
    return MapView(center=bounds_to_center(bounds), zoom=zoom_for_span(span, config))


def fit_bounds(
    bounds: Bounds, max_zoom: int, config: Optional[ViewSyncConfig] = None
) -> MapView:
    """View framing a bounding box, never closer than max_zoom."""
    span = max(bounds.lat_span, bounds.lon_span)
    return MapView(
        center=bounds_to_center(bounds), zoom=min(zoom_for_span(span, config), max_zoom)
    )


def google_maps_link(record: BusinessRecord, zoom: int = 16) -> str:
    """Deep link opening the record's location and name in Google Maps."""
    return GOOGLE_MAPS_URL.format(
        lat=record.latitude,
        lon=record.longitude,
        zoom=zoom,
        label=quote(record.name, safe=""),
    )


# ═══════════════════════════════════════════════════════════════════════════
# 🎯 SYNCHRONIZER
# ═══════════════════════════════════════════════════════════════════════════


class MapViewSynchronizer:
    """
    Issues view commands, suppressing repeats.

    sync() and fly_to() return a MapView only when the target differs from
    the last command issued; otherwise None (no new animated transition).
    Once the user moves the map away from that view, forget() lets the
    same target be issued again.
    """

    def __init__(self, config: Optional[ViewSyncConfig] = None) -> None:
        self.config = config or ViewSyncConfig()
        self.last_command: Optional[MapView] = None

    def sync(self, records: Iterable[BusinessRecord]) -> Optional[MapView]:
        """View command for the filtered records, or None."""
        return self._issue(view_for(records, self.config))

    def fly_to(self, record: BusinessRecord) -> Optional[MapView]:
        """Close-up view command on one record, or None if already there."""
        return self._issue(MapView(center=record.coordinates, zoom=self.config.fly_to_zoom))

    def fit(self, bounds: Bounds, max_zoom: int) -> Optional[MapView]:
        """View command framing a boundary, or None if unchanged."""
        return self._issue(fit_bounds(bounds, max_zoom, self.config))

    def matches(self, center: Tuple[float, float], zoom: int) -> bool:
        """True if the map is still where the last command put it."""
        return self.last_command == MapView(center=tuple(center), zoom=zoom)

    def forget(self) -> None:
        """Drop the last command; the next target is always issued."""
        if self.last_command is not None:
            logger.debug("View moved by user, forgetting last command")
        self.last_command = None

    def _issue(self, target: Optional[MapView]) -> Optional[MapView]:
        if target is None or target == self.last_command:
            return None
        self.last_command = target
        logger.debug(f"View → center={target.center} zoom={target.zoom}")
        return target
