"""Shared fixtures: a small Medan business collection and boundary squares."""

from typing import Any, Dict

import pytest

from peta_usaha.config_types import AppConfig
from peta_usaha.models.data_models import (
    BoundaryFeature,
    BoundaryLevel,
    BusinessRecord,
    Datasets,
)
from peta_usaha.viewport.timers import VirtualClock


# ============================================================================
# HELPERS
# ============================================================================


def make_record(**overrides: Any) -> BusinessRecord:
    """BusinessRecord with sensible defaults, overridable per field."""
    fields: Dict[str, Any] = dict(
        id="1",
        name="Warung Makan Sari",
        address="Jl. Sei Batang Hari No. 12",
        map_type="prelist",
        category="Penyediaan Akomodasi dan Makan Minum",
        category_code="56101",
        region="KOTA MEDAN",
        district="MEDAN BARU",
        sub_district="BABURA",
        sls="SLS 001",
        census_block="001B",
        latitude=3.5800,
        longitude=98.6600,
        data_source="SBR",
    )
    fields.update(overrides)
    return BusinessRecord(**fields)


def square_geometry(min_lon: float, min_lat: float, max_lon: float, max_lat: float) -> Dict[str, Any]:
    return {
        "type": "Polygon",
        "coordinates": [
            [
                [min_lon, min_lat],
                [max_lon, min_lat],
                [max_lon, max_lat],
                [min_lon, max_lat],
                [min_lon, min_lat],
            ]
        ],
    }


def square_feature(
    level: BoundaryLevel,
    gid: int,
    bbox: tuple,
    **props: Any,
) -> BoundaryFeature:
    """BoundaryFeature built through the GeoJSON path, like the loader does."""
    feature = {
        "type": "Feature",
        "properties": {"gid": gid, **props},
        "geometry": square_geometry(*bbox),
    }
    return BoundaryFeature.from_feature(level, feature, gid)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def feature_factory():
    return square_feature


@pytest.fixture
def records():
    """Five businesses, each in its own SLS."""
    return (
        make_record(),
        make_record(
            id="2",
            name="Toko Bangunan Jaya",
            address="Jl. Dr. Mansyur No. 45",
            map_type="listing",
            category="Perdagangan Besar dan Eceran",
            category_code="47521",
            sub_district="PADANG BULAN",
            sls="SLS 002",
            census_block="002A",
            latitude=3.5650,
            longitude=98.6550,
            data_source="",
        ),
        make_record(
            id="3",
            name="Bengkel Motor Agus",
            address="Jl. Gatot Subroto No. 7",
            category="Perdagangan Besar dan Eceran",
            category_code="45407",
            district="MEDAN PETISAH",
            sub_district="PETISAH TENGAH",
            sls="SLS 003",
            census_block="003C",
            latitude=3.5900,
            longitude=98.6700,
            data_source="Wilkerstat",
        ),
        make_record(
            id="4",
            name="Salon Cantik",
            address="Jl. Iskandar Muda No. 3",
            map_type="listing",
            category="Aktivitas Jasa Lainnya",
            category_code="96021",
            district="MEDAN PETISAH",
            sub_district="SEI SIKAMBING D",
            sls="SLS 004",
            census_block="004A",
            latitude=3.5950,
            longitude=98.6500,
            data_source="",
        ),
        make_record(
            id="5",
            name="Percetakan Medan",
            address="Jl. Pemuda No. 21",
            category="Industri Pengolahan",
            category_code="18112",
            district="MEDAN KOTA",
            sub_district="PASAR BARU",
            sls="SLS 005",
            census_block="005B",
            latitude=3.5700,
            longitude=98.6900,
            data_source="SBR",
        ),
    )


@pytest.fixture
def coarse_features():
    return (
        square_feature(
            BoundaryLevel.COARSE, 1, (98.60, 3.55, 98.66, 3.60), nmkec="MEDAN BARU", nmkab="KOTA MEDAN"
        ),
        square_feature(
            BoundaryLevel.COARSE, 2, (98.66, 3.55, 98.72, 3.60), nmkec="MEDAN PETISAH", nmkab="KOTA MEDAN"
        ),
    )


@pytest.fixture
def medium_features():
    return (
        square_feature(
            BoundaryLevel.MEDIUM, 10, (98.650, 3.575, 98.665, 3.585), nmdesa="BABURA", nmkec="MEDAN BARU"
        ),
        square_feature(
            BoundaryLevel.MEDIUM, 11, (98.700, 3.620, 98.720, 3.640), nmdesa="PASAR BARU", nmkec="MEDAN KOTA"
        ),
        square_feature(
            BoundaryLevel.MEDIUM, 12, (98.300, 3.300, 98.310, 3.310), nmdesa="JAUH", nmkec="MEDAN TUNTUNGAN"
        ),
    )


@pytest.fixture
def fine_features():
    return (
        square_feature(
            BoundaryLevel.FINE, 100, (98.658, 3.578, 98.662, 3.582), nmsls="SLS 001", nmdesa="BABURA", nmkec="MEDAN BARU"
        ),
        square_feature(
            BoundaryLevel.FINE, 101, (98.500, 3.400, 98.505, 3.405), nmsls="SLS 099", nmdesa="JAUH", nmkec="MEDAN TUNTUNGAN"
        ),
    )


@pytest.fixture
def datasets(records, coarse_features, medium_features, fine_features):
    return Datasets(
        businesses=records,
        coarse=coarse_features,
        medium=medium_features,
        fine=fine_features,
    )


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def app_config():
    """Defaults: thresholds 13/15, debounce 0.2s, strict filters."""
    return AppConfig()
