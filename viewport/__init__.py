"""Viewport geometry, timers and map view synchronization.

view_sync is imported directly (peta_usaha.viewport.view_sync) because it
depends on the data models, which themselves depend on geometry_utils.
"""

from .geometry_utils import (
    Bounds,
    bounds_to_center,
    geometry_bounds,
    points_bounds,
    viewport_bounds_for,
)
from .timers import AsyncioClock, Clock, Debouncer, VirtualClock

__all__ = [
    "Bounds",
    "bounds_to_center",
    "geometry_bounds",
    "points_bounds",
    "viewport_bounds_for",
    "AsyncioClock",
    "Clock",
    "Debouncer",
    "VirtualClock",
]
