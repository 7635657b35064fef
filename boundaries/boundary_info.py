"""
Boundary helpers for the info overlay, filter-driven focus and the city
outline.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from shapely.errors import ShapelyError
from shapely.geometry import mapping, shape
from shapely.ops import unary_union

from peta_usaha.models.data_models import BoundaryFeature, BoundaryLevel

logger = logging.getLogger(__name__)

# Placeholder name some desa features carry instead of a real village name
DESA_PLACEHOLDER_NAME = "Desa.Medan"

_VILLAGE_KEYS = ("nmdesa", "nama_kelurahan", "kelurahan", "nmkel", "nama_kel", "keldesa")


@dataclass(frozen=True)
class BoundaryInfo:
    """Overlay text: title, level label and a breadcrumb line."""

    title: str = ""
    type_label: str = ""
    extra: str = ""


def boundary_info(feature: Optional[BoundaryFeature]) -> BoundaryInfo:
    """
    Overlay text for the hovered/selected boundary.

    Args:
        feature: Feature to describe (None gives empty text)

    Returns:
        BoundaryInfo with a level-specific title and breadcrumb
    """
    if feature is None:
        return BoundaryInfo()
    p = feature.properties
    gid = p.get("gid", "")

    if feature.level is BoundaryLevel.COARSE:
        title = p.get("nmkec") or p.get("nmkab") or p.get("nmprov") or f"Kecamatan {gid}"
        return BoundaryInfo(title=str(title), type_label=feature.level.label)

    if feature.level is BoundaryLevel.MEDIUM:
        nmdesa = p.get("nmdesa")
        if nmdesa and nmdesa != DESA_PLACEHOLDER_NAME:
            title = nmdesa
        else:
            title = p.get("nmkec") or p.get("nmkab") or f"Desa {gid}"
        extra = f"Kec: {p['nmkec']}" if p.get("nmkec") else ""
        return BoundaryInfo(title=str(title), type_label=feature.level.label, extra=extra)

    title = feature.name or p.get("blok_sensus") or f"SLS {gid}"
    parts = []
    village = next((p[k] for k in _VILLAGE_KEYS if p.get(k)), "")
    if village:
        parts.append(f"Desa: {village}")
    if p.get("nmkec"):
        parts.append(f"Kec: {p['nmkec']}")
    return BoundaryInfo(
        title=str(title), type_label=feature.level.label, extra=" • ".join(parts)
    )


def find_boundary(
    features: Optional[Iterable[BoundaryFeature]], name: str
) -> Optional[BoundaryFeature]:
    """First feature whose display name equals name, None if absent."""
    if not features:
        return None
    for feature in features:
        if feature.name == name:
            return feature
    return None


def city_outline(
    features: Optional[Iterable[BoundaryFeature]], name: str = "Kota Medan"
) -> Optional[Dict[str, Any]]:
    """
    Merge all kecamatan polygons into one outline feature.

    Features with unparseable geometry are skipped.

    Returns:
        GeoJSON Feature, or None when there is nothing to merge
    """
    if not features:
        return None

    geoms = []
    for feature in features:
        if not feature.geometry:
            continue
        try:
            geom = shape(feature.geometry)
        except (ShapelyError, KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
            logger.debug(f"Skipping outline part {feature.feature_id}: {e}")
            continue
        if geom.geom_type in ("Polygon", "MultiPolygon") and not geom.is_empty:
            geoms.append(geom)

    if not geoms:
        return None

    merged = unary_union(geoms)
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": mapping(merged),
    }
