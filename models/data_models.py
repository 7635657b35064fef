"""
Typed data models for the business map explorer.

Architectural Overview:
=======================
This module contains the immutable dataclasses shared by every engine:
business records, boundary features, filter state and the view/level
snapshots the session broadcasts. Everything here is frozen so a snapshot
handed to a listener can never change underneath it.

Key Interactions:
-----------------
- Input: data_loader builds BusinessRecord / BoundaryFeature from GeoJSON
- Output: session snapshots carry FilterState, ViewportState, BoundaryLevelState
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

MODIFICATION POINT: Add new filter fields to FilterField AND to the chain in
filters/filter_engine.py
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, Dict, Mapping, Optional, Tuple

from peta_usaha.viewport.geometry_utils import Bounds, geometry_bounds

# Wildcard filter value
ALL = "all"


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class BoundaryLevel(Enum):
    """Administrative resolution of a boundary overlay.

    Values are the collection names used by the loader and in logs.
    """

    COARSE = "kecamatan"
    MEDIUM = "desa"
    FINE = "sls"

    @property
    def rank(self) -> int:
        """0 for COARSE, 1 for MEDIUM, 2 for FINE."""
        return _LEVEL_RANK[self]

    @property
    def label(self) -> str:
        """Display label used by the boundary info overlay."""
        return _LEVEL_LABEL[self]

    @property
    def is_culled(self) -> bool:
        """Whether the level is too large to render without viewport culling."""
        return self is not BoundaryLevel.COARSE


_LEVEL_RANK = {BoundaryLevel.COARSE: 0, BoundaryLevel.MEDIUM: 1, BoundaryLevel.FINE: 2}
_LEVEL_LABEL = {
    BoundaryLevel.COARSE: "Kecamatan",
    BoundaryLevel.MEDIUM: "Desa",
    BoundaryLevel.FINE: "SLS",
}


class FilterField(Enum):
    """Selectable filter fields. Values are the keys used by the UI."""

    MAP_TYPE = "jenis_peta"
    CATEGORY = "kbli_kategori"
    DATA_SOURCE = "sumber_data"
    DISTRICT = "kecamatan"
    SUB_DISTRICT = "kelurahan_desa"
    AREA_UNIT = "area_unit"
    AREA_VALUE = "area_value"

    @classmethod
    def from_string(cls, s: str) -> Optional["FilterField"]:
        """Look a field up by value or member name, None if unknown."""
        for member in cls:
            if s == member.value or s == member.name:
                return member
        return None


class AreaUnit(Enum):
    """Which smallest-unit identifier the area_value filter compares against."""

    SLS = "sls"
    CENSUS_BLOCK = "blok_sensus"

    @classmethod
    def from_string(cls, s: str) -> "AreaUnit":
        """Convert string to AreaUnit, with fallback to SLS."""
        for member in cls:
            if member.value == s:
                return member
        return cls.SLS


class SortKey(Enum):
    """Sortable record columns."""

    NAME = "nama_usaha"
    MAP_TYPE = "jenis_peta"
    CATEGORY = "kbli_kategori"
    DISTRICT = "kecamatan"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


# ═══════════════════════════════════════════════════════════════════════════
# 🏢 BUSINESS RECORD SECTION
# ═══════════════════════════════════════════════════════════════════════════


def _text(value: Any) -> str:
    """Normalize a GeoJSON property to a string ("" for missing)."""
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class BusinessRecord:
    """One geolocated business, immutable after load.

    Attributes:
        id: Unique record id
        name: Business name (nama_usaha)
        address: Street address (alamat)
        map_type: "prelist" or "listing" (jenis_peta)
        category: KBLI category (kbli_kategori)
        category_code: KBLI code (kbli_kode)
        region: Kabupaten/kota
        district: Kecamatan
        sub_district: Kelurahan/desa
        sls: Smallest local unit id
        census_block: Blok sensus id
        latitude: WGS84 latitude
        longitude: WGS84 longitude
        data_source: Sumber data tag
        phone: Optional telephone number
    """

    id: str
    name: str
    address: str
    map_type: str
    category: str
    category_code: str
    region: str
    district: str
    sub_district: str
    sls: str
    census_block: str
    latitude: float
    longitude: float
    data_source: str
    phone: Optional[str] = None

    @property
    def coordinates(self) -> Tuple[float, float]:
        """(lat, lon) pair as used by the map."""
        return (self.latitude, self.longitude)

    def area_value(self, unit: AreaUnit) -> str:
        """Smallest-unit identifier for the given area unit."""
        return self.sls if unit is AreaUnit.SLS else self.census_block

    @classmethod
    def from_feature(cls, feature: Mapping[str, Any], index: int = 0) -> "BusinessRecord":
        """Create a record from a GeoJSON point feature.

        GeoJSON stores [lon, lat]; the record keeps latitude and longitude
        as named fields.

        Args:
            feature: GeoJSON Feature with Point geometry
            index: Position in the collection, used when the feature has no id

        Raises:
            ValueError: If the geometry is missing or not a coordinate pair
        """
        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates")
        if not coords or len(coords) < 2:
            raise ValueError(f"feature {index} has no point coordinates")

        phone = props.get("telepon")
        return cls(
            id=_text(props.get("id", index)),
            name=_text(props.get("nama_usaha")),
            address=_text(props.get("alamat")),
            map_type=_text(props.get("jenis_peta")),
            category=_text(props.get("kbli_kategori")),
            category_code=_text(props.get("kbli_kode")),
            region=_text(props.get("kabupaten_kota")),
            district=_text(props.get("kecamatan")),
            sub_district=_text(props.get("kelurahan_desa")),
            sls=_text(props.get("sls")),
            census_block=_text(props.get("blok_sensus")),
            latitude=float(coords[1]),
            longitude=float(coords[0]),
            data_source=_text(props.get("sumber_data")),
            phone=_text(phone) if phone else None,
        )

    def as_dict(self) -> Dict[str, Any]:
        """Flat dict using the source property names."""
        return {
            "id": self.id,
            "nama_usaha": self.name,
            "alamat": self.address,
            "jenis_peta": self.map_type,
            "kbli_kategori": self.category,
            "kbli_kode": self.category_code,
            "kabupaten_kota": self.region,
            "kecamatan": self.district,
            "kelurahan_desa": self.sub_district,
            "sls": self.sls,
            "blok_sensus": self.census_block,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "sumber_data": self.data_source,
            "telepon": self.phone,
        }


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ BOUNDARY FEATURE SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BoundaryFeature:
    """A named administrative polygon at one boundary level.

    Identity (equality and hashing) is (level, feature_id, name); the raw
    properties and geometry are carried along but not compared.

    Attributes:
        level: Resolution the feature belongs to
        feature_id: Stable identifier (gid, or collection position)
        name: Display name at this level (may be empty for SLS)
        district_name: Kecamatan name for breadcrumbs
        sub_district_name: Kelurahan/desa name for breadcrumbs
        region_name: Kabupaten/kota name for breadcrumbs
        properties: Raw GeoJSON properties
        geometry: Raw GeoJSON geometry mapping
    """

    level: BoundaryLevel
    feature_id: str
    name: str
    district_name: str = ""
    sub_district_name: str = ""
    region_name: str = ""
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)
    geometry: Optional[Mapping[str, Any]] = field(default=None, compare=False, repr=False)

    @cached_property
    def bounds(self) -> Bounds:
        """Bounding box of the geometry.

        Raises:
            GeometryError: If the geometry is missing, empty or malformed
        """
        return geometry_bounds(self.geometry)

    @classmethod
    def from_feature(
        cls, level: BoundaryLevel, feature: Mapping[str, Any], index: int = 0
    ) -> "BoundaryFeature":
        """Create a boundary feature from a GeoJSON polygon feature.

        Name resolution per level:
        - COARSE: nmkec
        - MEDIUM: nmdesa
        - FINE: first of nmsls / nm_sls / sls / nama / name

        Raises:
            ValueError: If the feature or its properties is not an object
        """
        if not isinstance(feature, Mapping):
            raise ValueError(f"{level.value} feature {index} is not an object")
        raw_props = feature.get("properties") or {}
        if not isinstance(raw_props, Mapping):
            raise ValueError(f"{level.value} feature {index} has non-object properties")
        props = dict(raw_props)
        gid = props.get("gid")
        feature_id = _text(gid) if gid is not None else str(index)

        if level is BoundaryLevel.COARSE:
            name = _text(props.get("nmkec"))
        elif level is BoundaryLevel.MEDIUM:
            name = _text(props.get("nmdesa"))
        else:
            name = ""
            for key in ("nmsls", "nm_sls", "sls", "nama", "name"):
                if props.get(key):
                    name = _text(props[key])
                    break

        return cls(
            level=level,
            feature_id=feature_id,
            name=name,
            district_name=_text(props.get("nmkec")),
            sub_district_name=_text(props.get("nmdesa")),
            region_name=_text(props.get("nmkab")),
            properties=props,
            geometry=feature.get("geometry"),
        )


# ═══════════════════════════════════════════════════════════════════════════
# 🔎 FILTER STATE SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FilterState:
    """Current filter selection. Every field but area_unit is ALL or a value.

    area_unit is a mode selector; its default (SLS) is its wildcard.
    """

    map_type: str = ALL
    category: str = ALL
    data_source: str = ALL
    district: str = ALL
    sub_district: str = ALL
    area_unit: AreaUnit = AreaUnit.SLS
    area_value: str = ALL

    def get(self, filter_field: FilterField) -> Any:
        """Value of a filter field."""
        return getattr(self, _STATE_ATTR[filter_field])

    def is_wildcard(self, filter_field: FilterField) -> bool:
        """True when the field places no constraint on records."""
        if filter_field is FilterField.AREA_UNIT:
            return self.area_unit is AreaUnit.SLS
        return self.get(filter_field) == ALL

    def as_dict(self) -> Dict[str, str]:
        """UI-keyed dict, e.g. {"jenis_peta": "prelist", ...}."""
        return {
            f.value: (self.area_unit.value if f is FilterField.AREA_UNIT else self.get(f))
            for f in FilterField
        }


_STATE_ATTR: Dict[FilterField, str] = {
    FilterField.MAP_TYPE: "map_type",
    FilterField.CATEGORY: "category",
    FilterField.DATA_SOURCE: "data_source",
    FilterField.DISTRICT: "district",
    FilterField.SUB_DISTRICT: "sub_district",
    FilterField.AREA_UNIT: "area_unit",
    FilterField.AREA_VALUE: "area_value",
}


def state_attr(filter_field: FilterField) -> str:
    """FilterState attribute name for a field."""
    return _STATE_ATTR[filter_field]


@dataclass(frozen=True)
class SortSpec:
    """Sort column and direction. key=None keeps input order."""

    key: Optional[SortKey] = None
    direction: SortDirection = SortDirection.ASC

    def toggled(self, key: SortKey) -> "SortSpec":
        """Header-click behavior: same key flips direction, new key sorts ascending."""
        if key is self.key:
            flipped = (
                SortDirection.DESC
                if self.direction is SortDirection.ASC
                else SortDirection.ASC
            )
            return SortSpec(key=key, direction=flipped)
        return SortSpec(key=key, direction=SortDirection.ASC)


# ═══════════════════════════════════════════════════════════════════════════
# 🎯 VIEW AND LEVEL SNAPSHOTS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class MapView:
    """A map view command: center (lat, lon) and integer zoom."""

    center: Tuple[float, float]
    zoom: int


@dataclass(frozen=True)
class ViewportState:
    """Current map center, zoom and visible bounding box (None until known)."""

    center: Tuple[float, float]
    zoom: int
    bounds: Optional[Bounds] = None


@dataclass(frozen=True)
class BoundaryLevelState:
    """Active boundary level plus hover/selection for the info overlay."""

    level: BoundaryLevel = BoundaryLevel.COARSE
    force_medium: bool = False
    hovered: Optional[BoundaryFeature] = None
    selected: Optional[BoundaryFeature] = None

    @property
    def display(self) -> Optional[BoundaryFeature]:
        """Hovered feature if any, else the selected one."""
        return self.hovered if self.hovered is not None else self.selected


@dataclass(frozen=True)
class LevelTransition:
    """A boundary level change."""

    previous: BoundaryLevel
    current: BoundaryLevel


# ═══════════════════════════════════════════════════════════════════════════
# 📦 DATASETS SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Datasets:
    """The four loaded collections. A collection that failed to load is None.

    Attributes:
        businesses: Business records
        coarse: Kecamatan boundaries
        medium: Desa boundaries
        fine: SLS boundaries
        errors: Collection name -> failure message
    """

    businesses: Optional[Tuple[BusinessRecord, ...]] = None
    coarse: Optional[Tuple[BoundaryFeature, ...]] = None
    medium: Optional[Tuple[BoundaryFeature, ...]] = None
    fine: Optional[Tuple[BoundaryFeature, ...]] = None
    errors: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def records(self) -> Tuple[BusinessRecord, ...]:
        """Business records, empty when the collection is unavailable."""
        return self.businesses or ()

    def features_for(self, level: BoundaryLevel) -> Optional[Tuple[BoundaryFeature, ...]]:
        """Boundary collection for a level, None when it failed to load."""
        if level is BoundaryLevel.COARSE:
            return self.coarse
        if level is BoundaryLevel.MEDIUM:
            return self.medium
        return self.fine

    @property
    def available_levels(self) -> Tuple[BoundaryLevel, ...]:
        """Levels whose boundary collection loaded."""
        return tuple(
            level for level in BoundaryLevel if self.features_for(level) is not None
        )
