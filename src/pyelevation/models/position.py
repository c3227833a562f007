"""Position fix model returned by a location capability."""

from __future__ import annotations

import time
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pyelevation._normalize import safe_float, safe_int


def _now_ms() -> int:
    return int(time.time() * 1000)


class PositionFix(BaseModel):
    """One reading from the platform location sensor.

    ``altitude`` and ``altitude_accuracy`` are ``None`` when the
    platform did not report them (common for network/Wi-Fi fixes).

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    accuracy : float or None
        Horizontal accuracy in meters.
    altitude : float or None
        Altitude above sea level in meters.
    altitude_accuracy : float or None
        Vertical accuracy in meters.
    timestamp : int
        Fix time, epoch milliseconds.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lon", "lng"))
    accuracy: float | None = None
    altitude: float | None = Field(default=None, validation_alias=AliasChoices("altitude", "alt"))
    altitude_accuracy: float | None = Field(
        default=None,
        validation_alias=AliasChoices("altitude_accuracy", "altitudeAccuracy"),
    )
    timestamp: int = Field(default_factory=_now_ms)

    @field_validator("accuracy", "altitude", "altitude_accuracy", mode="before")
    @classmethod
    def _coerce_optional_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int:
        parsed = safe_int(value)
        return _now_ms() if parsed is None else parsed
