#!/usr/bin/env python3
"""
Peta Usaha - Main Entry Point

Loads the four GeoJSON collections, applies the configured filter
selection and search through an ExplorerSession, and exports the matching
business records ("Export Tabel").

Usage:
    python -m peta_usaha.main

    With a filter selection:
    PETA_FILTER_JENIS_PETA=prelist PETA_FILTER_KECAMATAN="MEDAN BARU" \\
        python -m peta_usaha.main
"""

import asyncio
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from peta_usaha.config import CONFIG
from peta_usaha.config_types import AppConfig
from peta_usaha.data_loader import load_datasets
from peta_usaha.exporters import (
    default_csv_filename,
    export_records_to_csv,
    export_records_to_geojson,
)
from peta_usaha.models.intents import FilterChanged, SearchChanged
from peta_usaha.session import ExplorerSession

# ═══════════════════════════════════════════════════════════════════════════
# 🎯 MODULE-LEVEL CONFIG (Single Source of Truth)
# ═══════════════════════════════════════════════════════════════════════════
APP_CONFIG = AppConfig.from_dict(CONFIG)

# Relative data/output/log paths resolve against the current directory
WORKSPACE_ROOT = Path.cwd()


# ═══════════════════════════════════════════════════════════════════════════
# 📋 LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def setup_logging(
    app_config: AppConfig = APP_CONFIG, base_dir: Path = WORKSPACE_ROOT
) -> Tuple[logging.Logger, Path]:
    """Configure logging with file and console handlers.

    The handlers are attached to the "peta_usaha" package logger so every
    module logger (peta_usaha.session, peta_usaha.data_loader, ...) writes
    to the same run log.

    Returns:
        Tuple of (logger, run_log_folder), run folder named export_{MMDD}_{HHMM}
    """
    log_dir = app_config.export.log_dir_path(base_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Compact timestamp: MMDD_HHMM
    timestamp = datetime.now().strftime("%m%d_%H%M")
    run_log_folder = log_dir / f"export_{timestamp}"
    run_log_folder.mkdir(parents=True, exist_ok=True)

    log_path = run_log_folder / "main.log"

    logger = logging.getLogger("peta_usaha")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()

    # File handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger, run_log_folder


# ═══════════════════════════════════════════════════════════════════════════
# 📤 EXPORT WORKFLOW
# ═══════════════════════════════════════════════════════════════════════════


async def export_filtered_records(
    app_config: AppConfig,
    base_dir: Path,
    logger: logging.Logger,
) -> Dict[str, Any]:
    """
    Load datasets, apply the configured selection and export.

    Returns:
        Summary dict: record counts, output paths, failed collections
    """
    timings = {}
    start = time.perf_counter()
    datasets = await load_datasets(app_config.data_paths, base_dir)
    timings["load"] = time.perf_counter() - start

    if datasets.businesses is None:
        logger.error(
            f"❌ Business collection unavailable: {datasets.errors.get('businesses')}"
        )

    session = ExplorerSession(datasets, app_config)
    try:
        for key, value in app_config.export.filters:
            logger.info(f"   Filter {key} = {value}")
            session.dispatch(FilterChanged(key, value))
        if app_config.export.search:
            logger.info(f"   Search: {app_config.export.search!r}")
            session.dispatch(SearchChanged(app_config.export.search))

        snapshot = session.snapshot
        output_dir = app_config.export.output_dir_path(base_dir)
        csv_path = export_records_to_csv(
            snapshot.records,
            output_dir / default_csv_filename(app_config.export.csv_prefix),
            logger,
        )
        geojson_path = None
        if app_config.export.write_geojson:
            geojson_path = export_records_to_geojson(
                snapshot.records, csv_path.with_suffix(".geojson"), logger
            )
    finally:
        session.close()

    timings["total"] = time.perf_counter() - start
    logger.info(
        f"✅ {len(snapshot.records)}/{len(datasets.records)} records exported "
        f"in {timings['total']:.2f}s"
    )
    return {
        "total_records": len(datasets.records),
        "exported_records": len(snapshot.records),
        "csv_path": str(csv_path),
        "geojson_path": str(geojson_path) if geojson_path else None,
        "failed_collections": dict(datasets.errors),
        "timings": timings,
    }


def run_export(
    app_config: Optional[AppConfig] = None, base_dir: Optional[Path] = None
) -> Dict[str, Any]:
    """Run the export workflow (blocking)."""
    app_config = app_config or APP_CONFIG
    base_dir = base_dir or WORKSPACE_ROOT

    logger, run_log_folder = setup_logging(app_config, base_dir)
    logger.info("=" * 60)
    logger.info("🗺️ Peta Usaha - Export Tabel")
    logger.info("=" * 60)
    logger.info(f"   Log folder: {run_log_folder}")

    try:
        return asyncio.run(export_filtered_records(app_config, base_dir, logger))
    except Exception as e:
        logger.error(f"❌ Export failed: {e}")
        raise


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


if __name__ == "__main__":
    run_export()
