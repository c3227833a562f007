"""pyelevation - Async elevation resolution with a spatial cache."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyelevation")
except PackageNotFoundError:
    __version__ = "0+local"
from pyelevation.cache import SpatialCache
from pyelevation.cascade import ElevationResolver
from pyelevation.client import ElevationClient
from pyelevation.config import ElevationConfig
from pyelevation.exceptions import (
    ElevationConfigError,
    ElevationError,
    ElevationStoreError,
    ElevationTransportError,
    ElevationUnavailableError,
    LocationError,
    LocationNotSupportedError,
    LocationPermissionDeniedError,
    LocationTimeoutError,
    LocationUnavailableError,
)
from pyelevation.landmarks import (
    Landmark,
    find_closest_landmark,
    find_nearby_landmarks,
    format_comparison_message,
    load_landmarks,
)
from pyelevation.location import FixedLocationProvider, LocationProvider, UnsupportedLocationProvider
from pyelevation.models import (
    CacheEntry,
    ElevationResult,
    ElevationSample,
    ElevationSource,
    FailureKind,
    PositionFix,
    Resolution,
    ResolutionFailure,
    ResolutionStatus,
    cache_key,
)
from pyelevation.sources import (
    ChainedElevationSource,
    DeviceAltitudeSource,
    OpenMeteoElevationSource,
    UsgsElevationSource,
)
from pyelevation.storage import KeyValueStore, MemoryKeyValueStore, SqliteKeyValueStore

__all__ = [
    "__version__",
    "CacheEntry",
    "ChainedElevationSource",
    "DeviceAltitudeSource",
    "ElevationClient",
    "ElevationConfig",
    "ElevationConfigError",
    "ElevationError",
    "ElevationResolver",
    "ElevationResult",
    "ElevationSample",
    "ElevationSource",
    "ElevationStoreError",
    "ElevationTransportError",
    "ElevationUnavailableError",
    "FailureKind",
    "FixedLocationProvider",
    "KeyValueStore",
    "Landmark",
    "LocationError",
    "LocationNotSupportedError",
    "LocationPermissionDeniedError",
    "LocationProvider",
    "LocationTimeoutError",
    "LocationUnavailableError",
    "MemoryKeyValueStore",
    "OpenMeteoElevationSource",
    "PositionFix",
    "Resolution",
    "ResolutionFailure",
    "ResolutionStatus",
    "SpatialCache",
    "SqliteKeyValueStore",
    "UnsupportedLocationProvider",
    "UsgsElevationSource",
    "cache_key",
    "find_closest_landmark",
    "find_nearby_landmarks",
    "format_comparison_message",
    "load_landmarks",
]
