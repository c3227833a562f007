"""Caller-facing resolution outcomes."""

from __future__ import annotations

import enum
from typing import NoReturn

from pydantic import BaseModel, ConfigDict, Field

from pyelevation.models.sample import ElevationSample, ElevationSource


class FailureKind(enum.StrEnum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    NOT_SUPPORTED = "not_supported"
    ELEVATION_UNAVAILABLE = "elevation_unavailable"


class ResolutionStatus(enum.StrEnum):
    """States of the resolution cascade, in the order they are entered."""

    ACQUIRING_POSITION = "acquiring_position"
    TRYING_DEVICE = "trying_device"
    CHECKING_CACHE = "checking_cache"
    QUERYING_NETWORK = "querying_network"
    RESOLVED = "resolved"
    FAILED = "failed"


class ElevationResult(BaseModel):
    """A resolved elevation.

    ``source`` is where this resolution got its value.  For cache hits the
    accuracy and ``observed_at`` are those of the original observation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    elevation: float
    latitude: float
    longitude: float
    accuracy: float
    source: ElevationSource
    observed_at: int
    served_from_cache: bool = False

    @classmethod
    def from_sample(cls, sample: ElevationSample, *, source: ElevationSource | None = None) -> ElevationResult:
        resolved_source = sample.source if source is None else source
        return cls(
            elevation=sample.elevation,
            latitude=sample.latitude,
            longitude=sample.longitude,
            accuracy=sample.accuracy,
            source=resolved_source,
            observed_at=sample.observed_at,
            served_from_cache=resolved_source == ElevationSource.CACHE,
        )

    @property
    def ok(self) -> bool:
        return True


class ResolutionFailure(BaseModel):
    """Terminal failure of a resolution request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FailureKind
    message: str = Field(..., min_length=1)

    @property
    def ok(self) -> bool:
        return False

    def raise_error(self) -> NoReturn:
        """Raise the exception matching ``kind``."""
        from pyelevation.exceptions import FAILURE_ERRORS

        raise FAILURE_ERRORS[self.kind](self.message)


Resolution = ElevationResult | ResolutionFailure
