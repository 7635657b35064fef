"""Boundary level state machine, viewport culling and boundary helpers."""

from .boundary_info import BoundaryInfo, boundary_info, city_outline, find_boundary
from .level_machine import BoundaryLevelMachine, degrade_to_available, level_for_zoom
from .visibility import CULLED_LEVELS, VisibilityEngine, compute_visible

__all__ = [
    "BoundaryInfo",
    "boundary_info",
    "city_outline",
    "find_boundary",
    "BoundaryLevelMachine",
    "degrade_to_available",
    "level_for_zoom",
    "CULLED_LEVELS",
    "VisibilityEngine",
    "compute_visible",
]
