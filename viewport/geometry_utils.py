#!/usr/bin/env python3
"""
Geometry Utility Functions

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Pure bounding-box computations for viewport culling and
map view synchronization. All coordinates are WGS84 (lon, lat).

Key Functions:
1. Bounds type with closed-interval intersection
2. Geometry bounds via Shapely (raises GeometryError on bad input)
3. Bounds center calculation
4. Viewport bounds estimation from center/zoom (Web Mercator)

Dependencies:
- shapely

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import math
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Tuple

from shapely.errors import ShapelyError
from shapely.geometry import shape

from peta_usaha.errors import GeometryError

# Leaflet/OSM tile size in pixels
TILE_SIZE = 256

# Web Mercator latitude limit
MAX_MERCATOR_LAT = 85.0511287798


# ===========================================================================
# BOUNDS TYPE
# ===========================================================================


class Bounds(NamedTuple):
    """Axis-aligned WGS84 bounding box, same order as shapely .bounds."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def intersects(self, other: "Bounds") -> bool:
        """Closed-interval overlap test (touching edges intersect)."""
        return (
            self.min_lon <= other.max_lon
            and other.min_lon <= self.max_lon
            and self.min_lat <= other.max_lat
            and other.min_lat <= self.max_lat
        )

    @property
    def lat_span(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lon_span(self) -> float:
        return self.max_lon - self.min_lon


# ===========================================================================
# GEOMETRY BOUNDS
# ===========================================================================


def geometry_bounds(geometry: Optional[Mapping[str, Any]]) -> Bounds:
    """
    Bounding box of a GeoJSON geometry mapping.

    Args:
        geometry: GeoJSON geometry dict (Polygon, MultiPolygon, ...)

    Returns:
        Bounds of the geometry

    Raises:
        GeometryError: If geometry is missing, empty or cannot be parsed
    """
    if not geometry:
        raise GeometryError("geometry is missing")
    try:
        geom = shape(geometry)
    except (ShapelyError, KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
        raise GeometryError(f"cannot parse geometry: {e}") from e

    if geom.is_empty:
        raise GeometryError("geometry is empty")

    minx, miny, maxx, maxy = geom.bounds
    if any(math.isnan(v) for v in (minx, miny, maxx, maxy)):
        raise GeometryError("geometry has no finite bounds")
    return Bounds(float(minx), float(miny), float(maxx), float(maxy))


def points_bounds(points: Iterable[Tuple[float, float]]) -> Optional[Bounds]:
    """
    Bounding box of (lat, lon) points, None for no points.

    Args:
        points: Iterable of (lat, lon) pairs

    Returns:
        Bounds or None
    """
    lats = []
    lons = []
    for lat, lon in points:
        lats.append(lat)
        lons.append(lon)
    if not lats:
        return None
    return Bounds(min(lons), min(lats), max(lons), max(lats))


# ===========================================================================
# COORDINATE UTILITIES
# ===========================================================================


def bounds_to_center(bounds: Bounds) -> Tuple[float, float]:
    """
    Calculate center point from bounds.

    Args:
        bounds: (min_lon, min_lat, max_lon, max_lat)

    Returns:
        Tuple of (center_lat, center_lon), map order
    """
    center_lon = (bounds.min_lon + bounds.max_lon) / 2
    center_lat = (bounds.min_lat + bounds.max_lat) / 2
    return (center_lat, center_lon)



def _lat_to_mercator_y(lat: float) -> float:
    lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, lat))
    return math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))


def _mercator_y_to_lat(y: float) -> float:
    return math.degrees(2 * math.atan(math.exp(y)) - math.pi / 2)


def viewport_bounds_for(
    center: Tuple[float, float],
    zoom: int,
    width_px: int,
    height_px: int,
) -> Bounds:
    """
    Estimate the visible box for a map of the given pixel size.

    Used for programmatic view changes before the map reports its real
    bounds. Assumes Web Mercator with 256px tiles.

    Args:
        center: (lat, lon)
        zoom: Integer zoom level
        width_px: Map width in pixels
        height_px: Map height in pixels

    Returns:
        Estimated Bounds
    """
    lat, lon = center
    world_px = TILE_SIZE * (2 ** zoom)

    half_lon = (width_px / 2) * 360.0 / world_px
    half_y = (height_px / 2) * (2 * math.pi) / world_px

    center_y = _lat_to_mercator_y(lat)
    return Bounds(
        lon - half_lon,
        _mercator_y_to_lat(center_y - half_y),
        lon + half_lon,
        _mercator_y_to_lat(center_y + half_y),
    )
