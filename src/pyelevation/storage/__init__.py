"""Storage backends for the spatial cache."""

from pyelevation.storage.base import KeyValueStore
from pyelevation.storage.memory import MemoryKeyValueStore
from pyelevation.storage.sqlite import SqliteKeyValueStore

__all__ = ["KeyValueStore", "MemoryKeyValueStore", "SqliteKeyValueStore"]
