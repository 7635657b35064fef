"""
Peta Usaha

Interactive map/filter engine for the Kota Medan business census map:
cascading filters, zoom-driven boundary levels, viewport culling and map
view synchronization, with CSV/GeoJSON export of the filtered table.
"""

from peta_usaha.config import CONFIG
from peta_usaha.config_types import AppConfig
from peta_usaha.data_loader import load_datasets, load_datasets_sync
from peta_usaha.session import ExplorerSession, SessionSnapshot

__all__ = [
    "CONFIG",
    "AppConfig",
    "load_datasets",
    "load_datasets_sync",
    "ExplorerSession",
    "SessionSnapshot",
]
