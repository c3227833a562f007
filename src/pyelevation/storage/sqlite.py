"""SQLite-backed key-value store.

One row per cache key.  The sample itself is kept as JSON so the schema
does not change when the model grows; ``observed_at`` is duplicated into
an indexed column for cutoff deletes.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from threading import Lock

from pydantic import ValidationError

from pyelevation.exceptions import ElevationStoreError
from pyelevation.models.sample import CacheEntry

_logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS elevation_cache (
    key TEXT PRIMARY KEY,
    observed_at INTEGER NOT NULL,
    stored_at INTEGER NOT NULL,
    payload TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_elevation_cache_observed_at ON elevation_cache (observed_at);
"""


class SqliteKeyValueStore:
    """Durable store in a single SQLite file.

    The connection is opened once in the constructor and shared across
    threads under a lock; call :meth:`close` on shutdown.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._lock = Lock()
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(self._path, check_same_thread=False)
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise ElevationStoreError(f"Failed to open elevation cache at {self._path}: {exc}") from exc
        _logger.debug("Opened elevation cache at %s", self._path)

    @property
    def path(self) -> str:
        return self._path

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ElevationStoreError("Store is closed")
        return self._conn

    def _decode(self, key: str, payload: str) -> CacheEntry | None:
        try:
            return CacheEntry.model_validate_json(payload)
        except ValidationError:
            _logger.warning("Skipping unreadable cache row %s", key, exc_info=True)
            return None

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            conn = self._require_conn()
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO elevation_cache (key, observed_at, stored_at, payload) "
                        "VALUES (?, ?, ?, ?)",
                        (entry.key, entry.observed_at, entry.stored_at, entry.model_dump_json()),
                    )
            except sqlite3.Error as exc:
                raise ElevationStoreError(f"Failed to save elevation data: {exc}") from exc

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            conn = self._require_conn()
            try:
                row = conn.execute("SELECT payload FROM elevation_cache WHERE key = ?", (key,)).fetchone()
            except sqlite3.Error as exc:
                raise ElevationStoreError(f"Failed to get elevation data: {exc}") from exc
        if row is None:
            return None
        return self._decode(key, row[0])

    def get_all(self) -> list[CacheEntry]:
        with self._lock:
            conn = self._require_conn()
            try:
                rows = conn.execute("SELECT key, payload FROM elevation_cache").fetchall()
            except sqlite3.Error as exc:
                raise ElevationStoreError(f"Failed to get all elevations: {exc}") from exc
        entries: list[CacheEntry] = []
        for key, payload in rows:
            entry = self._decode(key, payload)
            if entry is not None:
                entries.append(entry)
        return entries

    def delete(self, key: str) -> bool:
        with self._lock:
            conn = self._require_conn()
            try:
                with conn:
                    cursor = conn.execute("DELETE FROM elevation_cache WHERE key = ?", (key,))
            except sqlite3.Error as exc:
                raise ElevationStoreError(f"Failed to delete elevation data: {exc}") from exc
            return cursor.rowcount > 0

    def delete_older_than(self, cutoff_ms: int) -> int:
        with self._lock:
            conn = self._require_conn()
            try:
                with conn:
                    cursor = conn.execute("DELETE FROM elevation_cache WHERE observed_at < ?", (cutoff_ms,))
            except sqlite3.Error as exc:
                raise ElevationStoreError(f"Failed to clean up old elevations: {exc}") from exc
            return cursor.rowcount

    def clear(self) -> int:
        with self._lock:
            conn = self._require_conn()
            try:
                with conn:
                    cursor = conn.execute("DELETE FROM elevation_cache")
            except sqlite3.Error as exc:
                raise ElevationStoreError(f"Failed to clear elevation cache: {exc}") from exc
            return cursor.rowcount

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                _logger.debug("Closed elevation cache at %s", self._path)
