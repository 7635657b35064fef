"""
Peta Usaha Export Module - CSV and GeoJSON exports of filtered records.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Write the currently filtered business records to disk in
the fixed table layout used by the "Export Tabel" page.

Export Formats:
- CSV: 14-column table (No, Nama Usaha, ... , Sumber Data), one row per
  record in display order
- GeoJSON: Point features in EPSG:4326 for GIS software

Key Entry Points:
- records_to_dataframe(): Table as a pandas DataFrame
- export_records_to_csv(): CSV export
- export_records_to_geojson(): GeoJSON export
- default_csv_filename(): data-usaha-medan-YYYY-MM-DD.csv

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

import geopandas as gpd
import pandas as pd
from shapely.geometry import Point

from peta_usaha.models.data_models import BusinessRecord

logger = logging.getLogger(__name__)

CRS_WGS84 = "EPSG:4326"

EXPORT_COLUMNS: List[str] = [
    "No",
    "Nama Usaha",
    "Alamat",
    "Jenis Peta",
    "Kategori KBLI",
    "Kode KBLI",
    "Kabupaten/Kota",
    "Kecamatan",
    "Kelurahan/Desa",
    "SLS",
    "Blok Sensus",
    "Latitude",
    "Longitude",
    "Sumber Data",
]


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════


def default_csv_filename(prefix: str = "data-usaha-medan", on: Optional[date] = None) -> str:
    """
    Generate the export filename for a given day.

    Args:
        prefix: File name prefix
        on: Export date (today if None)

    Returns:
        Filename string (e.g., "data-usaha-medan-2024-11-27.csv")
    """
    on = on or date.today()
    return f"{prefix}-{on.isoformat()}.csv"


def records_to_dataframe(records: Iterable[BusinessRecord]) -> pd.DataFrame:
    """
    Build the export table.

    "No" is the 1-based position in the given order, so the table matches
    what the user sees after search, filters and sort.
    """
    rows = [
        {
            "No": i,
            "Nama Usaha": r.name,
            "Alamat": r.address,
            "Jenis Peta": r.map_type,
            "Kategori KBLI": r.category,
            "Kode KBLI": r.category_code,
            "Kabupaten/Kota": r.region,
            "Kecamatan": r.district,
            "Kelurahan/Desa": r.sub_district,
            "SLS": r.sls,
            "Blok Sensus": r.census_block,
            "Latitude": r.latitude,
            "Longitude": r.longitude,
            "Sumber Data": r.data_source,
        }
        for i, r in enumerate(records, start=1)
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


# ═══════════════════════════════════════════════════════════════════════════
# 📤 CSV EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def export_records_to_csv(
    records: Iterable[BusinessRecord],
    csv_path: Path,
    log: logging.Logger = None,
) -> Path:
    """
    Export records to CSV. An empty selection writes the header row only.

    Files are overwritten if they already exist.

    Args:
        records: Records in display order
        csv_path: Output file (parent directories are created)
        log: Logger instance (optional)

    Returns:
        Path of the written file
    """
    if log is None:
        log = logger

    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    df = records_to_dataframe(records)
    df.to_csv(csv_path, index=False, encoding="utf-8")

    log.info(f"📤 Exported {len(df)} records to: {csv_path}")
    return csv_path


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ GEOJSON EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def records_to_geodataframe(records: Iterable[BusinessRecord]) -> gpd.GeoDataFrame:
    """Records as a point GeoDataFrame (EPSG:4326), source property names as columns."""
    records = list(records)
    if not records:
        return gpd.GeoDataFrame(geometry=[], crs=CRS_WGS84)
    props = pd.DataFrame([r.as_dict() for r in records])
    geometry = [Point(r.longitude, r.latitude) for r in records]
    return gpd.GeoDataFrame(props, geometry=geometry, crs=CRS_WGS84)


def export_records_to_geojson(
    records: Iterable[BusinessRecord],
    geojson_path: Path,
    log: logging.Logger = None,
) -> Path:
    """
    Export records as a GeoJSON FeatureCollection of points.

    Args:
        records: Records to export
        geojson_path: Output file (parent directories are created)
        log: Logger instance (optional)

    Returns:
        Path of the written file
    """
    if log is None:
        log = logger

    geojson_path = Path(geojson_path)
    geojson_path.parent.mkdir(parents=True, exist_ok=True)

    gdf = records_to_geodataframe(records)
    with open(geojson_path, "w", encoding="utf-8") as f:
        f.write(gdf.to_json(drop_id=True))

    log.info(f"📤 Exported {len(gdf)} record points to: {geojson_path}")
    return geojson_path
