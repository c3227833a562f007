"""Data models for pyelevation."""

from pyelevation.models.position import PositionFix
from pyelevation.models.result import (
    ElevationResult,
    FailureKind,
    Resolution,
    ResolutionFailure,
    ResolutionStatus,
)
from pyelevation.models.sample import (
    CacheEntry,
    ElevationSample,
    ElevationSource,
    cache_key,
    is_plausible_elevation,
    is_valid_coordinate,
)

__all__ = [
    "CacheEntry",
    "ElevationResult",
    "ElevationSample",
    "ElevationSource",
    "FailureKind",
    "PositionFix",
    "Resolution",
    "ResolutionFailure",
    "ResolutionStatus",
    "cache_key",
    "is_plausible_elevation",
    "is_valid_coordinate",
]
