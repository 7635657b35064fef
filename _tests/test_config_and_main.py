#!/usr/bin/env python3
"""
Configuration and Export Workflow Tests

CONFIG → AppConfig conversion, environment overrides, and the end-to-end
export run against GeoJSON files in a temporary directory.
"""

import json
import logging
from dataclasses import replace

import pandas as pd
import pytest

from peta_usaha import config as config_module
from peta_usaha.config import CONFIG
from peta_usaha.config_types import AppConfig, DataPathsConfig, ExportConfig
from peta_usaha.errors import FilterMisuseError
from peta_usaha.main import run_export, setup_logging


# ============================================================================
# CONFIGURATION
# ============================================================================


class TestAppConfig:
    def test_from_master_config(self):
        app_config = AppConfig.from_dict(CONFIG)

        assert app_config.boundary_zoom.medium_zoom < app_config.boundary_zoom.fine_zoom
        assert app_config.view_sync.fly_to_zoom == 16
        assert app_config.data_paths.sls.endswith(".geojson")

    def test_empty_dict_gives_defaults(self):
        assert AppConfig.from_dict({}) == AppConfig()

    def test_export_filters_keep_order(self):
        export = ExportConfig.from_dict(
            {"filters": {"jenis_peta": "prelist", "kecamatan": "MEDAN BARU"}}
        )
        assert export.filters == (("jenis_peta", "prelist"), ("kecamatan", "MEDAN BARU"))

    def test_relative_dirs_resolve_against_base(self, tmp_path):
        export = ExportConfig(output_dir="out")
        assert export.output_dir_path(tmp_path) == tmp_path / "out"
        assert ExportConfig(output_dir=str(tmp_path)).output_dir_path(tmp_path / "x") == tmp_path


class TestEnvironmentOverrides:
    def test_env_or_default(self, monkeypatch):
        monkeypatch.setenv("PETA_MEDIUM_ZOOM", "14")
        assert config_module._env_or_default("PETA_MEDIUM_ZOOM", 13, int) == 14
        monkeypatch.delenv("PETA_MEDIUM_ZOOM")
        assert config_module._env_or_default("PETA_MEDIUM_ZOOM", 13, int) == 13

    @pytest.mark.parametrize("raw,expected", [("true", True), ("YES", True), ("0", False)])
    def test_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("PETA_HYSTERESIS", raw)
        assert config_module._env_bool("PETA_HYSTERESIS", False) is expected

    def test_env_filters_in_cascade_order(self, monkeypatch):
        monkeypatch.setenv("PETA_FILTER_KECAMATAN", "MEDAN BARU")
        monkeypatch.setenv("PETA_FILTER_JENIS_PETA", "prelist")
        assert list(config_module._env_filters().items()) == [
            ("jenis_peta", "prelist"),
            ("kecamatan", "MEDAN BARU"),
        ]


# ============================================================================
# EXPORT WORKFLOW
# ============================================================================


def _write_collection(path, features):
    path.write_text(
        json.dumps({"type": "FeatureCollection", "features": features}), encoding="utf-8"
    )


def _point(name, lon, lat, map_type):
    return {
        "type": "Feature",
        "properties": {"nama_usaha": name, "jenis_peta": map_type, "kecamatan": "MEDAN BARU"},
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
    }


@pytest.fixture
def export_config(tmp_path):
    data = tmp_path / "geojson"
    data.mkdir()
    _write_collection(
        data / "businesses.geojson",
        [
            _point("Warung Makan Sari", 98.66, 3.58, "prelist"),
            _point("Warung Kopi", 98.67, 3.59, "listing"),
            _point("Toko Roti", 98.65, 3.57, "prelist"),
        ],
    )
    _write_collection(data / "kec.geojson", [])
    return replace(
        AppConfig(),
        data_paths=DataPathsConfig(
            businesses="geojson/businesses.geojson",
            kecamatan="geojson/kec.geojson",
            desa="geojson/missing-desa.geojson",
            sls="geojson/missing-sls.geojson",
        ),
        export=ExportConfig(
            output_dir="out",
            log_dir="logs",
            filters=(("jenis_peta", "prelist"),),
            search="warung",
        ),
    )


@pytest.fixture
def package_logger():
    yield
    logger = logging.getLogger("peta_usaha")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestRunExport:
    def test_filtered_export(self, export_config, tmp_path, package_logger):
        summary = run_export(export_config, tmp_path)

        assert summary["total_records"] == 3
        assert summary["exported_records"] == 1
        assert set(summary["failed_collections"]) == {"desa", "sls"}

        df = pd.read_csv(summary["csv_path"], dtype=str)
        assert df["Nama Usaha"].tolist() == ["Warung Makan Sari"]
        assert summary["csv_path"].startswith(str(tmp_path / "out" / "data-usaha-medan-"))
        assert summary["geojson_path"].endswith(".geojson")

    def test_run_log_written(self, export_config, tmp_path, package_logger):
        run_export(export_config, tmp_path)
        logs = list((tmp_path / "logs").glob("export_*/main.log"))

        assert len(logs) == 1
        assert "records exported" in logs[0].read_text(encoding="utf-8")

    def test_misuse_propagates(self, export_config, tmp_path, package_logger):
        bad = replace(
            export_config,
            export=replace(export_config.export, filters=(("kecamatan", "MEDAN BARU"),)),
        )
        with pytest.raises(FilterMisuseError):
            run_export(bad, tmp_path)


def test_setup_logging_creates_run_folder(tmp_path, package_logger):
    logger, folder = setup_logging(AppConfig(), tmp_path)

    assert folder.parent == tmp_path / "logs"
    assert folder.name.startswith("export_")
    assert logger.name == "peta_usaha"
    assert len(logger.handlers) == 2
