"""Persistent cache for the last known attribution payload."""

from asa_attribution.cache.payload_cache import PayloadCache
from asa_attribution.cache.store import FileStore, KeyValueStore, MemoryStore

__all__ = ["PayloadCache", "FileStore", "KeyValueStore", "MemoryStore"]
