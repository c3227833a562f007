"""Spatial elevation cache.

Samples are stored one per ~11 m grid cell (coordinates rounded to four
decimals).  Lookups try the exact cell first and then fall back to the
nearest fresh sample within a small degree radius.

Two horizons apply:

* **validity** (7 days): how old a sample may be and still be served.
* **retention** (30 days): how old a sample may be before the sweep
  deletes it.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Callable

from pyelevation._constants import (
    CACHE_RETENTION_MS,
    CACHE_TOLERANCE_DEG,
    CACHE_VALIDITY_MS,
    SWEEP_PROBABILITY,
)
from pyelevation.models.sample import CacheEntry, ElevationSample, cache_key
from pyelevation.policy import is_fresh, planar_distance
from pyelevation.storage.base import KeyValueStore

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SpatialCache:
    """Geographically-indexed elevation cache over a :class:`KeyValueStore`.

    The store is owned by the caller (typically :class:`ElevationClient`);
    this class never opens or closes it.  Backend calls run in a worker
    thread so a slow disk or a sweep does not stall the event loop.

    Parameters
    ----------
    store : KeyValueStore
        Backend holding the entries.
    tolerance : float
        Nearest-match radius in degrees.
    validity_ms : int
        Maximum sample age served by :meth:`get`.
    retention_ms : int
        Default age beyond which :meth:`sweep` deletes samples.
    sweep_probability : float
        Chance that :meth:`put` triggers a sweep.
    clock : callable
        Returns the current time in epoch milliseconds.
    rng : callable
        Returns a float in ``[0, 1)``; drives the sweep trigger.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        tolerance: float = CACHE_TOLERANCE_DEG,
        validity_ms: int = CACHE_VALIDITY_MS,
        retention_ms: int = CACHE_RETENTION_MS,
        sweep_probability: float = SWEEP_PROBABILITY,
        clock: Callable[[], int] = _now_ms,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._store = store
        self._tolerance = tolerance
        self._validity_ms = validity_ms
        self._retention_ms = retention_ms
        self._sweep_probability = sweep_probability
        self._clock = clock
        self._rng = rng

    async def get(self, latitude: float, longitude: float) -> ElevationSample | None:
        """Return the best fresh sample for a coordinate, or ``None``."""
        now = self._clock()

        exact = await asyncio.to_thread(self._store.get, cache_key(latitude, longitude))
        if exact is not None and is_fresh(exact.observed_at, now, self._validity_ms):
            _logger.debug("Cache hit (exact): %s", exact.key)
            return exact.sample

        entries = await asyncio.to_thread(self._store.get_all)
        nearest = self._nearest(entries, latitude, longitude, now)
        if nearest is None:
            _logger.debug("Cache miss at %.5f,%.5f", latitude, longitude)
            return None

        _logger.debug("Cache hit (nearby): %s", nearest.key)
        return nearest.sample

    def _nearest(
        self,
        entries: list[CacheEntry],
        latitude: float,
        longitude: float,
        now: int,
    ) -> CacheEntry | None:
        best: CacheEntry | None = None
        best_rank: tuple[float, int] | None = None
        for entry in entries:
            if not is_fresh(entry.observed_at, now, self._validity_ms):
                continue
            sample = entry.sample
            distance = planar_distance(latitude, longitude, sample.latitude, sample.longitude)
            if distance > self._tolerance:
                continue
            # Closest first; on equal distance the youngest sample wins.
            rank = (distance, now - entry.observed_at)
            if best_rank is None or rank < best_rank:
                best, best_rank = entry, rank
        return best

    async def put(self, sample: ElevationSample) -> bool:
        """Store *sample* in its grid cell, replacing any previous entry.

        Implausible samples are logged and dropped; the return value tells
        whether the sample was written.
        """
        if not sample.is_plausible:
            _logger.warning(
                "Refusing to cache implausible sample: %.1f m at %.5f,%.5f",
                sample.elevation,
                sample.latitude,
                sample.longitude,
            )
            return False

        entry = CacheEntry.from_sample(sample, stored_at=self._clock())
        await asyncio.to_thread(self._store.put, entry)
        _logger.debug("Elevation cached: %s -> %.1f m (%s)", entry.key, sample.elevation, sample.source)

        if self._sweep_probability > 0 and self._rng() < self._sweep_probability:
            deleted = await self.sweep()
            if deleted > 0:
                _logger.info("Cleaned up %d old elevation records", deleted)
        return True

    async def sweep(self, retention_ms: int | None = None) -> int:
        """Delete samples older than the retention horizon; return the count."""
        horizon = self._retention_ms if retention_ms is None else retention_ms
        cutoff = self._clock() - horizon
        return await asyncio.to_thread(self._store.delete_older_than, cutoff)

    async def clear(self) -> int:
        """Remove every cached sample; return the count."""
        cleared = await asyncio.to_thread(self._store.clear)
        _logger.info("Cache cleared (%d entries)", cleared)
        return cleared
