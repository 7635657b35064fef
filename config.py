#!/usr/bin/env python3
"""
Peta Usaha - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for the business map explorer.
Single source of truth for dataset locations, filter rules, boundary zoom
thresholds, viewport culling and map view synchronization.

Configuration Sections (ordered by how often they get tuned):
1. boundary_zoom: Zoom thresholds for kecamatan/desa/SLS switching
2. visibility: Viewport culling debounce
3. view_sync: Auto-zoom breakpoints and fly-to zoom
4. filters: Hierarchical filter rules and strict mode
5. data_paths: GeoJSON collection sources (bottom - rarely changed)
6. export: Output locations (bottom)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
from typing import Dict, Any, TypeVar, Callable, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "PETA_MEDIUM_ZOOM")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("PETA_DEBOUNCE_S", 0.2, float)
        0.2  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# PETA_MEDIUM_ZOOM        - int, zoom at which desa boundaries appear (default: 13)
# PETA_FINE_ZOOM          - int, zoom at which SLS boundaries appear (default: 15)
# PETA_EXIT_MEDIUM_ZOOM   - int, desa exit zoom used by hysteresis (default: 12)
# PETA_HYSTERESIS         - "true"/"false", keep desa level between exit and enter zoom
# PETA_DEBOUNCE_S         - float, viewport culling debounce in seconds (default: 0.2)
# PETA_STRICT_FILTERS     - "true"/"false", raise on filter misuse (default: true)
# PETA_DATA_DIR           - directory holding the four GeoJSON files
# PETA_OUTPUT_DIR         - export directory
# PETA_FILTER_<KEY>       - filter value applied before export, KEY is the
#                           upper-cased UI key (e.g. PETA_FILTER_KECAMATAN)
# PETA_SEARCH             - free-text search applied before export
#
# Example usage:
#   export PETA_STRICT_FILTERS=false
#   export PETA_DATA_DIR=/srv/peta/geojson
#   python -m peta_usaha.main
# ═══════════════════════════════════════════════════════════════════════════

_DATA_DIR = _env_or_default("PETA_DATA_DIR", "geojson")

# UI filter keys in cascade order (upstream first)
_FILTER_KEYS = (
    "jenis_peta",
    "kbli_kategori",
    "sumber_data",
    "kecamatan",
    "kelurahan_desa",
    "area_unit",
    "area_value",
)


def _env_filters() -> Dict[str, str]:
    """Collect PETA_FILTER_<KEY> overrides, upstream keys first."""
    filters = {}
    for key in _FILTER_KEYS:
        val = os.getenv(f"PETA_FILTER_{key.upper()}")
        if val:
            filters[key] = val
    return filters

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 🗺️ BOUNDARY LEVEL SWITCHING
    # ═══════════════════════════════════════════════════════════════════════
    # kecamatan (coarse) below medium_zoom, desa (medium) from medium_zoom,
    # SLS (fine) from fine_zoom. Must satisfy exit_medium < medium < fine.
    "boundary_zoom": {
        "medium_zoom": _env_or_default("PETA_MEDIUM_ZOOM", 13, int),
        "fine_zoom": _env_or_default("PETA_FINE_ZOOM", 15, int),
        # Only consulted when hysteresis is enabled
        "exit_medium_zoom": _env_or_default("PETA_EXIT_MEDIUM_ZOOM", 12, int),
        "hysteresis": _env_bool("PETA_HYSTERESIS", False),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 👁️ VIEWPORT CULLING
    # ═══════════════════════════════════════════════════════════════════════
    # desa and SLS collections are too large to render city-wide; only
    # features whose bbox intersects the viewport are kept.
    "visibility": {
        "debounce_s": _env_or_default("PETA_DEBOUNCE_S", 0.2, float),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🎯 MAP VIEW SYNCHRONIZATION
    # ═══════════════════════════════════════════════════════════════════════
    "view_sync": {
        # Initial map view (Kota Medan)
        "default_center": [3.5952, 98.6722],
        "default_zoom": 12,
        # (span_below, zoom) pairs checked in order, then wide_span rule
        "span_breakpoints": [[0.01, 15], [0.05, 13]],
        "wide_span": 0.2,
        "wide_span_zoom": 10,
        "fallback_zoom": 12,
        # Zoom used when flying to a single business
        "fly_to_zoom": 16,
        # Max zoom when fitting a selected boundary
        "district_fit_max_zoom": 13,
        "sub_district_fit_max_zoom": 16,
        # Viewport size used to estimate bounds for programmatic views
        "viewport_width_px": 1024,
        "viewport_height_px": 768,
        "external_map_zoom": 16,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🔎 FILTERS
    # ═══════════════════════════════════════════════════════════════════════
    "filters": {
        # Only this map type carries a data source (sumber_data) selection
        "data_source_map_type": "prelist",
        # Raise FilterMisuseError instead of logging and ignoring
        "strict": _env_bool("PETA_STRICT_FILTERS", True),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📁 DATA SOURCES (Rarely changed - at bottom)
    # ═══════════════════════════════════════════════════════════════════════
    # Local paths or http(s) URLs
    "data_paths": {
        "businesses": f"{_DATA_DIR}/businesses-medan.geojson",
        "kecamatan": f"{_DATA_DIR}/final_kec_202411275.geojson",
        "desa": f"{_DATA_DIR}/final_desa_202411275.geojson",
        "sls": f"{_DATA_DIR}/final_sls_202411275.geojson",
        "request_timeout_s": 30.0,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📤 EXPORT (at bottom)
    # ═══════════════════════════════════════════════════════════════════════
    "export": {
        "output_dir": _env_or_default("PETA_OUTPUT_DIR", "Output"),
        "log_dir": "logs",
        "csv_prefix": "data-usaha-medan",
        "write_geojson": True,
        # Filter selection and search applied before exporting
        "filters": _env_filters(),
        "search": _env_or_default("PETA_SEARCH", ""),
    },
}
