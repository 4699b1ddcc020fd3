"""Domain port definitions for adapters."""

from __future__ import annotations

from .classification import (
    ArbitrationVerdict,
    DuplicateArbiter,
    RecordExtractor,
    RelevanceClassifier,
)
from .enrichment import GeoPoint, Geocoder
from .fetching import (
    PrimarySourceQuery,
    RevisionLookupError,
    RevisionTargetLookup,
    SecondarySourceFetcher,
)
from .persistence import SnapshotLoadError, SnapshotStore

__all__ = [
    "ArbitrationVerdict",
    "DuplicateArbiter",
    "GeoPoint",
    "Geocoder",
    "PrimarySourceQuery",
    "RecordExtractor",
    "RelevanceClassifier",
    "RevisionLookupError",
    "RevisionTargetLookup",
    "SecondarySourceFetcher",
    "SnapshotLoadError",
    "SnapshotStore",
]
