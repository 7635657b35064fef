"""
Exception hierarchy for the Peta Usaha map/filter engine.

All engine errors derive from PetaUsahaError so callers embedding the
engine can catch a single base class.
"""


class PetaUsahaError(Exception):
    """Base class for all engine errors."""


class ConfigError(PetaUsahaError, ValueError):
    """Invalid configuration value (e.g. misordered zoom thresholds)."""


class DatasetLoadError(PetaUsahaError):
    """A feature collection could not be fetched or decoded.

    Attributes:
        collection: Logical collection name ("businesses", "kecamatan", ...)
        source: Path or URL the collection was loaded from
    """

    def __init__(self, collection: str, source: str, reason: str) -> None:
        super().__init__(f"Failed to load {collection} from {source}: {reason}")
        self.collection = collection
        self.source = source
        self.reason = reason


class GeometryError(PetaUsahaError, ValueError):
    """A boundary feature geometry is missing, empty or malformed."""


class FilterMisuseError(PetaUsahaError):
    """Programmer error: unknown filter field, or a disabled field was set."""
