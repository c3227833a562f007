"""Landmark comparison for a resolved elevation.

Landmarks are supplied by the caller (a bundled JSON list, a database,
...); this module only ranks them against an elevation and words the
comparison.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from pyelevation.units import meters_to_feet

CLOSEST_TOLERANCE_M = 200.0
NEARBY_TOLERANCE_M = 500.0
NEARBY_COUNT = 3
SAME_HEIGHT_M = 10.0

DisplayUnit = Literal["meters", "feet"]


class Landmark(BaseModel):
    """A named place with a known elevation."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = Field(..., min_length=1)
    kind: str = Field(default="", validation_alias=AliasChoices("kind", "type"))
    elevation_meters: float
    icon_svg: str = ""


_LANDMARK_LIST = TypeAdapter(list[Landmark])


def load_landmarks(path: str | Path) -> list[Landmark]:
    """Read a JSON array of landmark objects."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return _LANDMARK_LIST.validate_python(raw)


def find_closest_landmark(
    elevation: float,
    landmarks: Iterable[Landmark],
    tolerance: float = CLOSEST_TOLERANCE_M,
) -> Landmark | None:
    """Return the landmark nearest in height, or ``None`` if none is within *tolerance*.

    On equal differences the first landmark in *landmarks* wins.
    """
    closest: Landmark | None = None
    min_diff = math.inf
    for landmark in landmarks:
        diff = abs(elevation - landmark.elevation_meters)
        if diff < min_diff:
            closest, min_diff = landmark, diff

    if closest is not None and min_diff <= tolerance:
        return closest
    return None


def find_nearby_landmarks(
    elevation: float,
    landmarks: Iterable[Landmark],
    count: int = NEARBY_COUNT,
    tolerance: float = NEARBY_TOLERANCE_M,
) -> list[Landmark]:
    """Up to *count* landmarks within *tolerance*, closest first."""
    ranked = [
        (abs(elevation - landmark.elevation_meters), landmark)
        for landmark in landmarks
        if abs(elevation - landmark.elevation_meters) <= tolerance
    ]
    ranked.sort(key=lambda pair: pair[0])
    return [landmark for _diff, landmark in ranked[: max(count, 0)]]


def landmarks_by_kind(landmarks: Iterable[Landmark], kind: str) -> list[Landmark]:
    return [landmark for landmark in landmarks if landmark.kind == kind]


def landmarks_in_range(landmarks: Iterable[Landmark], low: float, high: float) -> list[Landmark]:
    """Landmarks with ``low <= elevation_meters <= high``."""
    return [landmark for landmark in landmarks if low <= landmark.elevation_meters <= high]


def find_landmark_by_name(landmarks: Iterable[Landmark], name: str) -> Landmark | None:
    wanted = name.casefold()
    for landmark in landmarks:
        if landmark.name.casefold() == wanted:
            return landmark
    return None


def landmark_kinds(landmarks: Sequence[Landmark]) -> list[str]:
    return sorted({landmark.kind for landmark in landmarks})


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_comparison_message(elevation: float, landmark: Landmark, unit: DisplayUnit = "meters") -> str:
    """Describe *elevation* relative to *landmark*, e.g. ``You are 12m higher than ...``.

    Differences under 10 m read as "about the same height" in either unit.
    """
    diff = elevation - landmark.elevation_meters
    abs_diff = abs(diff)

    if abs_diff < SAME_HEIGHT_M:
        return f"You are at about the same height as {landmark.name}"

    if unit == "feet":
        display_diff = _round_half_up(meters_to_feet(abs_diff))
        unit_label = "ft"
    else:
        display_diff = _round_half_up(abs_diff)
        unit_label = "m"

    direction = "higher" if diff > 0 else "lower"
    return f"You are {display_diff}{unit_label} {direction} than {landmark.name}"
