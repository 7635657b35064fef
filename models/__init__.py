"""Data models package for typed business, boundary and session state."""

from .data_models import (
    ALL,
    AreaUnit,
    BoundaryFeature,
    BoundaryLevel,
    BoundaryLevelState,
    BusinessRecord,
    Datasets,
    FilterField,
    FilterState,
    LevelTransition,
    MapView,
    SortDirection,
    SortKey,
    SortSpec,
    ViewportState,
)

from .intents import (
    BoundaryFocused,
    FeatureHovered,
    FeatureSelected,
    FilterChanged,
    FiltersReset,
    ForceMediumToggled,
    Intent,
    PanChanged,
    RecordSelected,
    SearchChanged,
    SortChanged,
    ZoomChanged,
)

__all__ = [
    # Records and boundaries
    "ALL",
    "BusinessRecord",
    "BoundaryFeature",
    "BoundaryLevel",
    "Datasets",
    # Filter state
    "AreaUnit",
    "FilterField",
    "FilterState",
    "SortDirection",
    "SortKey",
    "SortSpec",
    # View and level snapshots
    "BoundaryLevelState",
    "LevelTransition",
    "MapView",
    "ViewportState",
    # Intents
    "BoundaryFocused",
    "FeatureHovered",
    "FeatureSelected",
    "FilterChanged",
    "FiltersReset",
    "ForceMediumToggled",
    "Intent",
    "PanChanged",
    "RecordSelected",
    "SearchChanged",
    "SortChanged",
    "ZoomChanged",
]
