"""Persistent key-value store contract for cache entries."""

from __future__ import annotations

from typing import Protocol

from pyelevation.models.sample import CacheEntry


class KeyValueStore(Protocol):
    """Durable storage for :class:`CacheEntry` records keyed by ``entry.key``.

    Implementations must be safe to call from worker threads; the spatial
    cache runs them off the event loop.
    """

    def put(self, entry: CacheEntry) -> None:
        """Insert or replace the entry stored under ``entry.key``."""
        ...

    def get(self, key: str) -> CacheEntry | None:
        ...

    def get_all(self) -> list[CacheEntry]:
        ...

    def delete(self, key: str) -> bool:
        ...

    def delete_older_than(self, cutoff_ms: int) -> int:
        """Delete entries observed strictly before *cutoff_ms*; return the count."""
        ...

    def clear(self) -> int:
        ...

    def close(self) -> None:
        ...
