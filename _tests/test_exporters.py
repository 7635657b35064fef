#!/usr/bin/env python3
"""
Export Tests

CSV table layout, header-only export, file naming and the GeoJSON point
export.
"""

import json
from datetime import date

import pandas as pd
import pytest

from peta_usaha.exporters import (
    EXPORT_COLUMNS,
    default_csv_filename,
    export_records_to_csv,
    export_records_to_geojson,
    records_to_dataframe,
)


class TestCsvExport:
    def test_column_order(self, records):
        df = records_to_dataframe(records)
        assert list(df.columns) == EXPORT_COLUMNS
        assert len(EXPORT_COLUMNS) == 14

    def test_numbering_follows_display_order(self, records):
        reordered = list(reversed(records))
        df = records_to_dataframe(reordered)

        assert df["No"].tolist() == [1, 2, 3, 4, 5]
        assert df["Nama Usaha"].tolist() == [r.name for r in reordered]

    def test_written_file_round_trips(self, records, tmp_path):
        path = export_records_to_csv(records, tmp_path / "out" / "export.csv")
        df = pd.read_csv(path, dtype=str)

        assert path.exists()
        assert list(df.columns) == EXPORT_COLUMNS
        assert df.loc[0, "Nama Usaha"] == records[0].name
        assert df.loc[0, "Kode KBLI"] == records[0].category_code
        assert float(df.loc[0, "Latitude"]) == pytest.approx(records[0].latitude)

    def test_empty_selection_writes_header_only(self, tmp_path):
        path = export_records_to_csv([], tmp_path / "empty.csv")
        lines = path.read_text(encoding="utf-8").splitlines()

        assert lines == [",".join(EXPORT_COLUMNS)]

    def test_default_filename(self):
        assert default_csv_filename(on=date(2024, 11, 27)) == "data-usaha-medan-2024-11-27.csv"
        assert default_csv_filename().startswith("data-usaha-medan-")


class TestGeoJsonExport:
    def test_points_in_lon_lat_order(self, records, tmp_path):
        path = export_records_to_geojson(records[:2], tmp_path / "points.geojson")
        with open(path, encoding="utf-8") as f:
            collection = json.load(f)

        assert collection["type"] == "FeatureCollection"
        assert len(collection["features"]) == 2
        first = collection["features"][0]
        assert first["geometry"]["coordinates"] == pytest.approx([98.66, 3.58])
        assert first["properties"]["nama_usaha"] == records[0].name

    def test_empty_export(self, tmp_path):
        path = export_records_to_geojson([], tmp_path / "empty.geojson")
        with open(path, encoding="utf-8") as f:
            assert json.load(f)["features"] == []
