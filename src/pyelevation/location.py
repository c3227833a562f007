"""Location capability contract.

The host platform (browser bridge, mobile runtime, gpsd client, ...) is an
external collaborator.  It is consumed through :class:`LocationProvider`:
one awaited call per fix, with an explicit timeout, that either returns a
:class:`~pyelevation.models.position.PositionFix` or raises one of the
:class:`~pyelevation.exceptions.LocationError` subclasses.
"""

from __future__ import annotations

import time
from typing import Protocol

from pyelevation.exceptions import LocationNotSupportedError
from pyelevation.models.position import PositionFix


class LocationProvider(Protocol):
    """Structural interface for platform location access."""

    async def get_current_coordinates(
        self,
        *,
        high_accuracy: bool,
        timeout: float,
        maximum_age: float = 0,
    ) -> PositionFix:
        ...


class FixedLocationProvider:
    """Location provider reporting a fixed, externally known position.

    Useful on hosts without a positioning sensor where the coordinates
    come from configuration or the command line.  ``altitude`` is
    reported only on high-accuracy requests, mirroring sensors that only
    produce altitude from a satellite fix.
    """

    def __init__(
        self,
        latitude: float,
        longitude: float,
        *,
        altitude: float | None = None,
        altitude_accuracy: float | None = None,
    ) -> None:
        self._latitude = latitude
        self._longitude = longitude
        self._altitude = altitude
        self._altitude_accuracy = altitude_accuracy

    async def get_current_coordinates(
        self,
        *,
        high_accuracy: bool,
        timeout: float,
        maximum_age: float = 0,
    ) -> PositionFix:
        return PositionFix(
            latitude=self._latitude,
            longitude=self._longitude,
            altitude=self._altitude if high_accuracy else None,
            altitude_accuracy=self._altitude_accuracy if high_accuracy else None,
            timestamp=int(time.time() * 1000),
        )


class UnsupportedLocationProvider:
    """Provider for hosts with no location capability."""

    async def get_current_coordinates(
        self,
        *,
        high_accuracy: bool,
        timeout: float,
        maximum_age: float = 0,
    ) -> PositionFix:
        raise LocationNotSupportedError()
