"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Define all configuration dataclasses for the map explorer.
Wraps the CONFIG dictionary in typed, validated, frozen config objects.

Usage:
    from peta_usaha.config import CONFIG
    from peta_usaha.config_types import AppConfig

    # Create once at application startup
    app_config = AppConfig.from_dict(CONFIG)

    machine = BoundaryLevelMachine(app_config.boundary_zoom)

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. DATA PATHS CONFIGURATION
# ═════ 2. FILTER CONFIGURATION
# ═════ 3. BOUNDARY ZOOM CONFIGURATION
# ═════ 4. VISIBILITY CONFIGURATION
# ═════ 5. VIEW SYNC CONFIGURATION
# ═════ 6. EXPORT CONFIGURATION
# ═════ 7. APP CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

from peta_usaha.errors import ConfigError


# ═══════════════════════════════════════════════════════════════════════════════
# 📁 1. DATA PATHS CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class DataPathsConfig:
    """
    Sources of the four feature collections.

    Attributes:
        businesses: Path or URL of the business point collection.
        kecamatan: Path or URL of the district (coarse) boundaries.
        desa: Path or URL of the sub-district (medium) boundaries.
        sls: Path or URL of the smallest-unit (fine) boundaries.
        request_timeout_s: Timeout for http(s) sources.
    """

    businesses: str = "geojson/businesses-medan.geojson"
    kecamatan: str = "geojson/final_kec_202411275.geojson"
    desa: str = "geojson/final_desa_202411275.geojson"
    sls: str = "geojson/final_sls_202411275.geojson"
    request_timeout_s: float = 30.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DataPathsConfig":
        """Create DataPathsConfig from CONFIG['data_paths'] dictionary."""
        return cls(
            businesses=d.get("businesses", "geojson/businesses-medan.geojson"),
            kecamatan=d.get("kecamatan", "geojson/final_kec_202411275.geojson"),
            desa=d.get("desa", "geojson/final_desa_202411275.geojson"),
            sls=d.get("sls", "geojson/final_sls_202411275.geojson"),
            request_timeout_s=d.get("request_timeout_s", 30.0),
        )

    def sources(self) -> Dict[str, str]:
        """Collection name -> source, in load order."""
        return {
            "businesses": self.businesses,
            "kecamatan": self.kecamatan,
            "desa": self.desa,
            "sls": self.sls,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# 🔎 2. FILTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FilterConfig:
    """
    Hierarchical filter rules.

    Attributes:
        data_source_map_type: The one map type whose records carry a
            selectable data source.
        strict: Raise FilterMisuseError on misuse instead of logging.
    """

    data_source_map_type: str = "prelist"
    strict: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FilterConfig":
        """Create FilterConfig from CONFIG['filters'] dictionary."""
        return cls(
            data_source_map_type=d.get("data_source_map_type", "prelist"),
            strict=d.get("strict", True),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🗺️ 3. BOUNDARY ZOOM CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BoundaryZoomConfig:
    """
    Zoom thresholds for boundary level switching.

    Attributes:
        medium_zoom: Zoom at which desa boundaries replace kecamatan.
        fine_zoom: Zoom at which SLS boundaries replace desa.
        exit_medium_zoom: Lower exit threshold for desa (hysteresis only).
        hysteresis: Keep desa level while exit_medium_zoom < z < medium_zoom.
    """

    medium_zoom: int = 13
    fine_zoom: int = 15
    exit_medium_zoom: int = 12
    hysteresis: bool = False

    def __post_init__(self) -> None:
        """Validate threshold ordering."""
        if not self.exit_medium_zoom < self.medium_zoom < self.fine_zoom:
            raise ConfigError(
                "zoom thresholds must satisfy exit_medium_zoom < medium_zoom < fine_zoom, "
                f"got {self.exit_medium_zoom} / {self.medium_zoom} / {self.fine_zoom}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BoundaryZoomConfig":
        """Create BoundaryZoomConfig from CONFIG['boundary_zoom'] dictionary."""
        return cls(
            medium_zoom=d.get("medium_zoom", 13),
            fine_zoom=d.get("fine_zoom", 15),
            exit_medium_zoom=d.get("exit_medium_zoom", 12),
            hysteresis=d.get("hysteresis", False),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 👁️ 4. VISIBILITY CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class VisibilityConfig:
    """Viewport culling settings."""

    debounce_s: float = 0.2

    def __post_init__(self) -> None:
        if self.debounce_s < 0:
            raise ConfigError(f"debounce_s must be >= 0, got {self.debounce_s}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VisibilityConfig":
        """Create VisibilityConfig from CONFIG['visibility'] dictionary."""
        return cls(debounce_s=d.get("debounce_s", 0.2))


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 5. VIEW SYNC CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ViewSyncConfig:
    """
    Map view synchronization settings.

    Attributes:
        default_center: Initial (lat, lon).
        default_zoom: Initial zoom.
        span_breakpoints: ((span_below, zoom), ...) checked in order.
        wide_span: Spans strictly above this use wide_span_zoom.
        wide_span_zoom: Zoom for wide spreads.
        fallback_zoom: Zoom when no other rule matches.
        fly_to_zoom: Zoom used when flying to one record.
        district_fit_max_zoom: Max zoom when fitting a kecamatan.
        sub_district_fit_max_zoom: Max zoom when fitting a kelurahan/desa.
        viewport_width_px: Assumed map width for bounds estimation.
        viewport_height_px: Assumed map height for bounds estimation.
        external_map_zoom: Zoom encoded in the Google Maps deep link.
    """

    default_center: Tuple[float, float] = (3.5952, 98.6722)
    default_zoom: int = 12
    span_breakpoints: Tuple[Tuple[float, int], ...] = ((0.01, 15), (0.05, 13))
    wide_span: float = 0.2
    wide_span_zoom: int = 10
    fallback_zoom: int = 12
    fly_to_zoom: int = 16
    district_fit_max_zoom: int = 13
    sub_district_fit_max_zoom: int = 16
    viewport_width_px: int = 1024
    viewport_height_px: int = 768
    external_map_zoom: int = 16

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ViewSyncConfig":
        """Create ViewSyncConfig from CONFIG['view_sync'] dictionary."""
        return cls(
            default_center=tuple(d.get("default_center", (3.5952, 98.6722))),
            default_zoom=d.get("default_zoom", 12),
            span_breakpoints=tuple(
                (float(span), int(zoom))
                for span, zoom in d.get("span_breakpoints", ((0.01, 15), (0.05, 13)))
            ),
            wide_span=d.get("wide_span", 0.2),
            wide_span_zoom=d.get("wide_span_zoom", 10),
            fallback_zoom=d.get("fallback_zoom", 12),
            fly_to_zoom=d.get("fly_to_zoom", 16),
            district_fit_max_zoom=d.get("district_fit_max_zoom", 13),
            sub_district_fit_max_zoom=d.get("sub_district_fit_max_zoom", 16),
            viewport_width_px=d.get("viewport_width_px", 1024),
            viewport_height_px=d.get("viewport_height_px", 768),
            external_map_zoom=d.get("external_map_zoom", 16),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📤 6. EXPORT CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ExportConfig:
    """
    Export output settings.

    Attributes:
        output_dir: Directory for exported files.
        log_dir: Directory for log files.
        csv_prefix: File name prefix; the export date is appended.
        write_geojson: Also write the filtered records as GeoJSON.
        filters: (UI key, value) pairs applied in order before exporting.
        search: Free-text search applied before exporting.
    """

    output_dir: str = "Output"
    log_dir: str = "logs"
    csv_prefix: str = "data-usaha-medan"
    write_geojson: bool = True
    filters: Tuple[Tuple[str, str], ...] = ()
    search: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExportConfig":
        """Create ExportConfig from CONFIG['export'] dictionary."""
        return cls(
            output_dir=d.get("output_dir", "Output"),
            log_dir=d.get("log_dir", "logs"),
            csv_prefix=d.get("csv_prefix", "data-usaha-medan"),
            write_geojson=d.get("write_geojson", True),
            filters=tuple((str(k), str(v)) for k, v in d.get("filters", {}).items()),
            search=d.get("search", ""),
        )

    def output_dir_path(self, base: Optional[Path] = None) -> Path:
        """Output directory, resolved against base when relative."""
        path = Path(self.output_dir)
        return path if path.is_absolute() or base is None else base / path

    def log_dir_path(self, base: Optional[Path] = None) -> Path:
        """Log directory, resolved against base when relative."""
        path = Path(self.log_dir)
        return path if path.is_absolute() or base is None else base / path


# ═══════════════════════════════════════════════════════════════════════════════
# 🏛️ 7. APP CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """
    Master configuration object for the map explorer.

    Create it once at startup using AppConfig.from_dict(CONFIG) and pass it
    to the session and the loader.

    Example:
        from peta_usaha.config import CONFIG
        from peta_usaha.config_types import AppConfig

        app_config = AppConfig.from_dict(CONFIG)
    """

    data_paths: DataPathsConfig = field(default_factory=DataPathsConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    boundary_zoom: BoundaryZoomConfig = field(default_factory=BoundaryZoomConfig)
    visibility: VisibilityConfig = field(default_factory=VisibilityConfig)
    view_sync: ViewSyncConfig = field(default_factory=ViewSyncConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "AppConfig":
        """
        Create AppConfig from the CONFIG dictionary.

        Args:
            config_dict: The CONFIG dictionary from config.py.

        Returns:
            AppConfig instance with all settings populated.
        """
        return cls(
            data_paths=DataPathsConfig.from_dict(config_dict.get("data_paths", {})),
            filters=FilterConfig.from_dict(config_dict.get("filters", {})),
            boundary_zoom=BoundaryZoomConfig.from_dict(
                config_dict.get("boundary_zoom", {})
            ),
            visibility=VisibilityConfig.from_dict(config_dict.get("visibility", {})),
            view_sync=ViewSyncConfig.from_dict(config_dict.get("view_sync", {})),
            export=ExportConfig.from_dict(config_dict.get("export", {})),
        )
