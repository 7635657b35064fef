#!/usr/bin/env python3
"""
Boundary Info Tests

Overlay text per level, name lookup for focus, and the merged city outline.
"""

from peta_usaha.boundaries.boundary_info import (
    BoundaryInfo,
    boundary_info,
    city_outline,
    find_boundary,
)
from peta_usaha.models.data_models import BoundaryFeature, BoundaryLevel

COARSE = BoundaryLevel.COARSE
MEDIUM = BoundaryLevel.MEDIUM
FINE = BoundaryLevel.FINE


class TestBoundaryInfo:
    def test_nothing_hovered(self):
        assert boundary_info(None) == BoundaryInfo()

    def test_kecamatan(self, feature_factory):
        info = boundary_info(feature_factory(COARSE, 1, (0, 0, 1, 1), nmkec="MEDAN BARU"))
        assert info == BoundaryInfo(title="MEDAN BARU", type_label="Kecamatan")

    def test_kecamatan_without_name(self, feature_factory):
        assert boundary_info(feature_factory(COARSE, 7, (0, 0, 1, 1))).title == "Kecamatan 7"

    def test_desa_with_breadcrumb(self, feature_factory):
        feature = feature_factory(MEDIUM, 1, (0, 0, 1, 1), nmdesa="BABURA", nmkec="MEDAN BARU")
        info = boundary_info(feature)

        assert info.title == "BABURA"
        assert info.type_label == "Desa"
        assert info.extra == "Kec: MEDAN BARU"

    def test_desa_placeholder_name_falls_back(self, feature_factory):
        feature = feature_factory(MEDIUM, 1, (0, 0, 1, 1), nmdesa="Desa.Medan", nmkec="MEDAN KOTA")
        assert boundary_info(feature).title == "MEDAN KOTA"

    def test_sls_breadcrumb(self, feature_factory):
        feature = feature_factory(
            FINE, 1, (0, 0, 1, 1), nmsls="SLS 001", nmdesa="BABURA", nmkec="MEDAN BARU"
        )
        info = boundary_info(feature)

        assert info.title == "SLS 001"
        assert info.extra == "Desa: BABURA • Kec: MEDAN BARU"

    def test_sls_without_name(self, feature_factory):
        assert boundary_info(feature_factory(FINE, 42, (0, 0, 1, 1))).title == "SLS 42"
        with_block = feature_factory(FINE, 43, (0, 0, 1, 1), blok_sensus="012B")
        assert boundary_info(with_block).title == "012B"


class TestFindBoundary:
    def test_by_display_name(self, medium_features):
        assert find_boundary(medium_features, "PASAR BARU") is medium_features[1]

    def test_missing(self, medium_features):
        assert find_boundary(medium_features, "TIDAK ADA") is None
        assert find_boundary(None, "BABURA") is None


class TestCityOutline:
    def test_adjacent_districts_merge(self, coarse_features):
        outline = city_outline(coarse_features)
        assert outline["geometry"]["type"] == "Polygon"
        assert outline["properties"] == {"name": "Kota Medan"}

    def test_broken_geometry_is_skipped(self, coarse_features):
        broken = BoundaryFeature(
            level=COARSE,
            feature_id="9",
            name="RUSAK",
            geometry={"type": "Hexagon", "coordinates": []},
        )
        outline = city_outline((broken,) + tuple(coarse_features))
        assert outline is not None

    def test_nothing_to_merge(self):
        assert city_outline(None) is None
        assert city_outline(()) is None
