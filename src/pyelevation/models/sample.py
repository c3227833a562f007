"""Elevation sample and cache entry models."""

from __future__ import annotations

import enum
import math
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyelevation._constants import (
    CACHE_KEY_DECIMALS,
    DEFAULT_DEVICE_ACCURACY_M,
    MAX_PLAUSIBLE_ELEVATION_M,
    MIN_PLAUSIBLE_ELEVATION_M,
)


class ElevationSource(enum.StrEnum):
    """Provenance of an elevation value."""

    DEVICE = "device"
    CACHE = "cache"
    NETWORK = "network"


def cache_key(latitude: float, longitude: float) -> str:
    """Fingerprint a coordinate onto the ~11 m cache grid.

    Coordinates are rounded to four decimals; ``-0.0`` is folded into
    ``0.0`` so both sides of the equator/meridian share one slot.
    """
    lat = round(float(latitude), CACHE_KEY_DECIMALS) + 0.0
    lon = round(float(longitude), CACHE_KEY_DECIMALS) + 0.0
    return f"{lat:.{CACHE_KEY_DECIMALS}f},{lon:.{CACHE_KEY_DECIMALS}f}"


def is_plausible_elevation(elevation: float) -> bool:
    return MIN_PLAUSIBLE_ELEVATION_M <= elevation <= MAX_PLAUSIBLE_ELEVATION_M


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


class ElevationSample(BaseModel):
    """A single elevation observation.

    Parameters
    ----------
    elevation : float
        Elevation in meters (may be negative).
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    accuracy : float
        Vertical accuracy in meters; smaller is better.
    source : ElevationSource
        Component that produced the sample.
    observed_at : int
        Acquisition time, epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    elevation: float
    latitude: float
    longitude: float
    accuracy: float = Field(default=DEFAULT_DEVICE_ACCURACY_M, ge=0)
    source: ElevationSource
    observed_at: int

    @field_validator("elevation", "latitude", "longitude", "accuracy")
    @classmethod
    def _reject_nan(cls, value: float) -> float:
        if math.isnan(value):
            raise ValueError("value must be a number")
        return value

    @property
    def is_plausible(self) -> bool:
        """Whether the sample may be surfaced or cached."""
        return is_plausible_elevation(self.elevation) and is_valid_coordinate(self.latitude, self.longitude)

    @property
    def key(self) -> str:
        return cache_key(self.latitude, self.longitude)

    @property
    def observed_datetime_utc(self) -> datetime:
        return datetime.fromtimestamp(self.observed_at / 1000, tz=UTC)

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.observed_at


class CacheEntry(BaseModel):
    """A persisted sample keyed by its coordinate fingerprint."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    sample: ElevationSample
    stored_at: int = Field(..., description="Insertion time, epoch milliseconds")

    @classmethod
    def from_sample(cls, sample: ElevationSample, stored_at: int) -> CacheEntry:
        return cls(key=sample.key, sample=sample, stored_at=stored_at)

    @property
    def observed_at(self) -> int:
        return self.sample.observed_at
