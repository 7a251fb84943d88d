"""Caching layer for trailwake.

Every external fetch passes through a TTLCache. The cache is injected into
the forecast and dawn clients; there is no module-level cache.
"""

from trailwake.cache.store import DuckDBStore, KeyValueStore, MemoryStore
from trailwake.cache.ttl import TIMESTAMP_SUFFIX, TTLCache, fetch_with_cache

__all__ = [
    "DuckDBStore",
    "KeyValueStore",
    "MemoryStore",
    "TIMESTAMP_SUFFIX",
    "TTLCache",
    "fetch_with_cache",
]
