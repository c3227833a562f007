"""Normalization helpers.

Centralizes defensive parsing of values coming from platform sensors and
remote elevation services.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def first_number(value: Any) -> float | None:
    """Return the first numeric element of a list payload.

    Elevation services answer multi-point queries with arrays even when a
    single point was requested.  A bare number is accepted as well.
    """
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]
    if isinstance(value, str):
        # Numbers only; quoted values are treated as malformed.
        return None
    return safe_float(value)
