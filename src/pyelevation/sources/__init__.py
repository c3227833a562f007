"""Elevation sources consulted by the resolution cascade."""

from pyelevation.sources.device import DeviceAltitudeSource
from pyelevation.sources.network import (
    ChainedElevationSource,
    NetworkElevationSource,
    OpenMeteoElevationSource,
    UsgsElevationSource,
)

__all__ = [
    "ChainedElevationSource",
    "DeviceAltitudeSource",
    "NetworkElevationSource",
    "OpenMeteoElevationSource",
    "UsgsElevationSource",
]
