"""Acceptance and freshness rules shared by the cache and the cascade.

This module contains no I/O; it only answers yes/no questions about
samples so the rules can be tested in isolation.
"""

from __future__ import annotations

import math

from pyelevation._constants import CACHE_VALIDITY_MS, DEVICE_ACCURACY_THRESHOLD_M
from pyelevation.models.sample import ElevationSample


def accept_device_sample(
    sample: ElevationSample | None,
    *,
    accuracy_threshold: float = DEVICE_ACCURACY_THRESHOLD_M,
) -> bool:
    """Device altitude is trusted only when strictly better than the threshold."""
    if sample is None:
        return False
    if not sample.is_plausible:
        return False
    return sample.accuracy < accuracy_threshold


def accept_network_sample(sample: ElevationSample | None) -> bool:
    return sample is not None and sample.is_plausible


def is_fresh(observed_at: int, now_ms: int, validity_ms: int = CACHE_VALIDITY_MS) -> bool:
    """Whether a sample observed at *observed_at* may still be served."""
    return (now_ms - observed_at) < validity_ms


def planar_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Euclidean distance in degree space.

    Not great-circle: longitude degrees are not scaled by latitude.  Good
    enough at the ~0.01 degree radius the cache searches.
    """
    return math.hypot(lat1 - lat2, lon1 - lon2)
