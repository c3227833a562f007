"""In-process key-value store."""

from __future__ import annotations

from threading import Lock

from pyelevation.models.sample import CacheEntry


class MemoryKeyValueStore:
    """Dictionary-backed store; contents are lost when the process exits."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._items: dict[str, CacheEntry] = {}

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._items[entry.key] = entry

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._items.get(key)

    def get_all(self) -> list[CacheEntry]:
        with self._lock:
            return list(self._items.values())

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def delete_older_than(self, cutoff_ms: int) -> int:
        with self._lock:
            stale = [key for key, entry in self._items.items() if entry.observed_at < cutoff_ms]
            for key in stale:
                del self._items[key]
            return len(stale)

    def clear(self) -> int:
        with self._lock:
            cleared = len(self._items)
            self._items.clear()
            return cleared

    def close(self) -> None:
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
