#!/usr/bin/env python3
"""
Peta Usaha - Dataset Loader

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Fetch the four GeoJSON feature collections (businesses,
kecamatan, desa, SLS) concurrently and turn them into typed, immutable
collections.

Key Features:
1. Sources may be local paths or http(s) URLs (aiohttp)
2. Concurrent fetch with asyncio.gather(return_exceptions=True)
3. Per-collection failure isolation: a failed collection is None and its
   error is recorded in Datasets.errors; the others load normally
4. Malformed business features are skipped and counted, not fatal

Navigation Guide:
- load_collection: Fetch + decode one FeatureCollection
- parse_businesses / parse_boundaries: Typed conversion
- DataLoader: Orchestrates the four collections
- load_datasets / load_datasets_sync: Convenience entry points

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout

from peta_usaha.config_types import DataPathsConfig
from peta_usaha.errors import DatasetLoadError
from peta_usaha.models.data_models import (
    BoundaryFeature,
    BoundaryLevel,
    BusinessRecord,
    Datasets,
)

# ═══════════════════════════════════════════════════════════════════════════
# 🔧 CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

BUSINESSES = "businesses"

# Collection name -> boundary level
BOUNDARY_COLLECTIONS: Dict[str, BoundaryLevel] = {
    "kecamatan": BoundaryLevel.COARSE,
    "desa": BoundaryLevel.MEDIUM,
    "sls": BoundaryLevel.FINE,
}

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


# ═══════════════════════════════════════════════════════════════════════════
# 📥 FETCH
# ═══════════════════════════════════════════════════════════════════════════


def _read_local(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


async def load_collection(
    name: str,
    source: str,
    session: Optional[ClientSession] = None,
    base_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Fetch and decode one GeoJSON FeatureCollection.

    Args:
        name: Logical collection name (for errors and logs)
        source: Local path or http(s) URL
        session: aiohttp session, required for URL sources
        base_dir: Directory relative paths are resolved against

    Returns:
        The decoded FeatureCollection dict

    Raises:
        DatasetLoadError: On I/O, HTTP or decoding failure, or when the
            document is not a FeatureCollection
    """
    try:
        if is_url(source):
            if session is None:
                raise DatasetLoadError(name, source, "no HTTP session available")
            async with session.get(source) as resp:
                resp.raise_for_status()
                data = json.loads(await resp.text())
        else:
            path = Path(source)
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            data = await asyncio.to_thread(_read_local, path)
    except (OSError, ClientError, asyncio.TimeoutError, ValueError) as e:
        raise DatasetLoadError(name, source, str(e) or type(e).__name__) from e

    if not isinstance(data, Mapping) or not isinstance(data.get("features"), list):
        raise DatasetLoadError(name, source, "not a GeoJSON FeatureCollection")
    return dict(data)


# ═══════════════════════════════════════════════════════════════════════════
# 🏗️ PARSING
# ═══════════════════════════════════════════════════════════════════════════


def parse_businesses(collection: Mapping[str, Any]) -> Tuple[BusinessRecord, ...]:
    """
    Convert a business FeatureCollection to records.

    Features without usable point coordinates are skipped; the skip count
    is logged once for the collection.
    """
    records: List[BusinessRecord] = []
    skipped = 0
    for i, feature in enumerate(collection.get("features", [])):
        try:
            records.append(BusinessRecord.from_feature(feature, i))
        except (ValueError, TypeError, AttributeError) as e:
            skipped += 1
            logger.debug(f"Skipping business feature {i}: {e}")
    if skipped:
        logger.warning(f"Skipped {skipped} malformed business features")
    return tuple(records)


def parse_boundaries(
    level: BoundaryLevel, collection: Mapping[str, Any]
) -> Tuple[BoundaryFeature, ...]:
    """Convert a boundary FeatureCollection to BoundaryFeature objects.

    Features that are not objects, or whose properties are not an object,
    are skipped and counted. Geometry is not validated here; malformed
    geometry surfaces lazily as a GeometryError and is excluded from culling.
    """
    features = []
    skipped = 0
    for i, feature in enumerate(collection.get("features", [])):
        try:
            features.append(BoundaryFeature.from_feature(level, feature, i))
        except (ValueError, TypeError, AttributeError) as e:
            skipped += 1
            logger.debug(f"Skipping {level.value} feature {i}: {e}")
    if skipped:
        logger.warning(f"Skipped {skipped} malformed {level.value} features")
    return tuple(features)


# ═══════════════════════════════════════════════════════════════════════════
# 📂 DATA LOADER
# ═══════════════════════════════════════════════════════════════════════════


class DataLoader:
    """
    Load the four collections for one session.

    Usage:
        loader = DataLoader(app_config.data_paths, base_dir=Path.cwd())
        datasets = await loader.load()
    """

    def __init__(
        self, paths: Optional[DataPathsConfig] = None, base_dir: Optional[Path] = None
    ) -> None:
        self.paths = paths or DataPathsConfig()
        self.base_dir = Path(base_dir) if base_dir is not None else None

    async def load(self) -> Datasets:
        """
        Fetch all collections concurrently.

        Returns:
            Datasets; collections that failed are None, with the reason in
            Datasets.errors
        """
        sources = self.paths.sources()
        names = list(sources)

        needs_http = any(is_url(s) for s in sources.values())
        session = (
            ClientSession(timeout=ClientTimeout(total=self.paths.request_timeout_s))
            if needs_http
            else None
        )
        try:
            results = await asyncio.gather(
                *(
                    load_collection(name, sources[name], session, self.base_dir)
                    for name in names
                ),
                return_exceptions=True,
            )
        finally:
            if session is not None:
                await session.close()

        loaded: Dict[str, Any] = {}
        errors: Dict[str, str] = {}
        for name, result in zip(names, results):
            if isinstance(result, DatasetLoadError):
                logger.warning(f"⚠️ {result}")
                errors[name] = result.reason
            elif isinstance(result, BaseException):
                raise result
            else:
                loaded[name] = result

        return self._build(loaded, errors)

    def _build(self, loaded: Dict[str, Any], errors: Dict[str, str]) -> Datasets:
        businesses = self._parse(BUSINESSES, loaded, errors, parse_businesses)

        boundaries: Dict[BoundaryLevel, Optional[Tuple[BoundaryFeature, ...]]] = {}
        for name, level in BOUNDARY_COLLECTIONS.items():
            boundaries[level] = self._parse(
                name, loaded, errors, lambda c, level=level: parse_boundaries(level, c)
            )

        datasets = Datasets(
            businesses=businesses,
            coarse=boundaries[BoundaryLevel.COARSE],
            medium=boundaries[BoundaryLevel.MEDIUM],
            fine=boundaries[BoundaryLevel.FINE],
            errors=errors,
        )
        logger.info(
            f"Loaded {len(datasets.records)} businesses, "
            + ", ".join(
                f"{len(boundaries[level]) if boundaries[level] is not None else 'no'} {name}"
                for name, level in BOUNDARY_COLLECTIONS.items()
            )
            + (f" ({len(errors)} failed)" if errors else "")
        )
        return datasets

    def _parse(
        self,
        name: str,
        loaded: Dict[str, Any],
        errors: Dict[str, str],
        parser: Callable[[Mapping[str, Any]], Tuple[Any, ...]],
    ) -> Optional[Tuple[Any, ...]]:
        """Parse one fetched collection; a failure marks only that collection unavailable."""
        if name not in loaded:
            return None
        try:
            return parser(loaded[name])
        except (ValueError, TypeError, AttributeError) as e:
            error = DatasetLoadError(name, self.paths.sources()[name], f"unparseable: {e}")
            logger.warning(f"⚠️ {error}")
            errors[name] = error.reason
            return None


async def load_datasets(
    paths: Optional[DataPathsConfig] = None, base_dir: Optional[Path] = None
) -> Datasets:
    """Load all four collections (see DataLoader.load)."""
    return await DataLoader(paths, base_dir).load()


def load_datasets_sync(
    paths: Optional[DataPathsConfig] = None, base_dir: Optional[Path] = None
) -> Datasets:
    """Blocking wrapper around load_datasets for scripts and the CLI."""
    return asyncio.run(load_datasets(paths, base_dir))
