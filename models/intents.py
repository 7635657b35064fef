"""
Intents: the closed set of messages the session accepts.

Map events (zoom, pan, hover, click) and user actions (filter changes,
search, record selection) are normalized into these frozen messages and
fed to ExplorerSession.dispatch(). The presentation layer never mutates
engine state directly.
"""

from dataclasses import dataclass
from typing import Optional, Union

from peta_usaha.models.data_models import (
    BoundaryFeature,
    BoundaryLevel,
    BusinessRecord,
    FilterField,
    SortKey,
)
from peta_usaha.viewport.geometry_utils import Bounds


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ MAP INTENTS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ZoomChanged:
    """Map finished zooming (zoomend)."""

    zoom: int
    bounds: Optional[Bounds] = None
    center: Optional[tuple] = None


@dataclass(frozen=True)
class PanChanged:
    """Map finished moving (moveend)."""

    bounds: Bounds
    center: Optional[tuple] = None


@dataclass(frozen=True)
class FeatureHovered:
    """Pointer entered a boundary polygon (feature) or left it (None)."""

    feature: Optional[BoundaryFeature]


@dataclass(frozen=True)
class FeatureSelected:
    """A boundary polygon was clicked."""

    feature: BoundaryFeature


@dataclass(frozen=True)
class ForceMediumToggled:
    """User toggled "always show desa boundaries"."""

    enabled: bool


# ═══════════════════════════════════════════════════════════════════════════
# 🔎 FILTER INTENTS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FilterChanged:
    """A filter control changed. field may be a FilterField or its UI key."""

    field: Union[FilterField, str]
    value: str


@dataclass(frozen=True)
class SearchChanged:
    text: str


@dataclass(frozen=True)
class SortChanged:
    """Header click on a sortable column."""

    key: SortKey


@dataclass(frozen=True)
class FiltersReset:
    pass


@dataclass(frozen=True)
class RecordSelected:
    """Navigate to a business: fly to the record and drill filters down to it."""

    record: BusinessRecord


@dataclass(frozen=True)
class BoundaryFocused:
    """Kecamatan or kelurahan picked in the filter panel: fit the map to it."""

    level: BoundaryLevel
    name: str


Intent = Union[
    ZoomChanged,
    PanChanged,
    FeatureHovered,
    FeatureSelected,
    ForceMediumToggled,
    FilterChanged,
    SearchChanged,
    SortChanged,
    FiltersReset,
    RecordSelected,
    BoundaryFocused,
]
