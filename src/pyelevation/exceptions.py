"""Custom exception hierarchy for pyelevation."""

from __future__ import annotations

from pyelevation.models.result import FailureKind


class ElevationError(Exception):
    """Base exception for all pyelevation errors."""


class ElevationConfigError(ElevationError):
    """Invalid or missing configuration."""


class ElevationStoreError(ElevationError):
    """Persistent cache storage could not be read or written."""


class ElevationTransportError(ElevationError):
    """HTTP-level failure (network, non-200, invalid JSON, timeout)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class ElevationUnavailableError(ElevationError):
    """Every resolution source was exhausted without an acceptable sample."""

    kind: FailureKind = FailureKind.ELEVATION_UNAVAILABLE

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "Unable to determine elevation. Please check your internet connection and try again."
        )


class LocationError(ElevationError):
    """Position acquisition failed.

    Subclasses map one-to-one to the platform conditions a location
    capability can report.  ``kind`` is the matching
    :class:`~pyelevation.models.result.FailureKind`.
    """

    kind: FailureKind = FailureKind.POSITION_UNAVAILABLE
    default_message: str = "Failed to get location"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class LocationPermissionDeniedError(LocationError):
    """The user or platform refused access to location."""

    kind = FailureKind.PERMISSION_DENIED
    default_message = "Location permission denied. Please enable location access in your settings."


class LocationUnavailableError(LocationError):
    """The platform could not determine a position."""

    kind = FailureKind.POSITION_UNAVAILABLE
    default_message = "Location information unavailable. Please check your device settings."


class LocationTimeoutError(LocationError):
    """No position within the requested timeout."""

    kind = FailureKind.TIMEOUT
    default_message = "Location request timed out. Please try again."


class LocationNotSupportedError(LocationError):
    """The host has no location capability at all."""

    kind = FailureKind.NOT_SUPPORTED
    default_message = "Geolocation is not supported on this platform."


FAILURE_ERRORS: dict[FailureKind, type[ElevationError]] = {
    FailureKind.PERMISSION_DENIED: LocationPermissionDeniedError,
    FailureKind.POSITION_UNAVAILABLE: LocationUnavailableError,
    FailureKind.TIMEOUT: LocationTimeoutError,
    FailureKind.NOT_SUPPORTED: LocationNotSupportedError,
    FailureKind.ELEVATION_UNAVAILABLE: ElevationUnavailableError,
}
