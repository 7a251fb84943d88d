"""Time-to-live cache over a key/value store.

Every payload is stored as JSON under its key, with the write time in epoch
milliseconds under the sibling key ``<key>:t``. Entries are checked and
removed lazily on read; nothing sweeps the store.
"""

import json
import logging
import math
import time
from typing import Any, Callable, Optional

from trailwake.cache.store import KeyValueStore, MemoryStore
from trailwake.errors import StorageUnavailableError
from trailwake.models import CacheEntry

logger = logging.getLogger(__name__)

TIMESTAMP_SUFFIX = ":t"


class TTLCache:
    """JSON cache with per-read maximum age.

    Store failures never propagate: reads degrade to a miss and writes to a
    no-op, so callers keep working without persistence.

    Example:
        >>> cache = TTLCache(MemoryStore())
        >>> cache.save("dawn_40.000_-74.000", {"epoch": 1700000000})
        True
        >>> cache.load("dawn_40.000_-74.000", max_age=60)
        {'epoch': 1700000000}
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize cache.

        Args:
            store: Backing store (defaults to an in-memory store)
            clock: Returns the current time in epoch seconds
        """
        self.store = store if store is not None else MemoryStore()
        self.clock = clock

    def _now_ms(self) -> float:
        return self.clock() * 1000

    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get_item(key)
        except StorageUnavailableError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    def _remove(self, key: str) -> None:
        try:
            self.store.remove_item(key)
            self.store.remove_item(key + TIMESTAMP_SUFFIX)
        except StorageUnavailableError as e:
            logger.warning(f"Cache delete failed for {key}: {e}")

    def save(self, key: str, data: Any) -> bool:
        """Store data with the current time.

        Returns:
            True if both the payload and its timestamp were written
        """
        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot serialize cache payload for {key}: {e}")
            return False

        try:
            self.store.set_item(key, payload)
            self.store.set_item(key + TIMESTAMP_SUFFIX, repr(self._now_ms()))
        except StorageUnavailableError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False
        return True

    def entry(self, key: str, max_age: float) -> Optional[CacheEntry]:
        """Return the cached entry if present and fresh.

        Corrupted timestamps or payloads and expired entries are deleted.

        Args:
            key: Cache key
            max_age: Maximum age in seconds
        """
        raw_timestamp = self._get(key + TIMESTAMP_SUFFIX)
        if raw_timestamp is None:
            return None

        try:
            stored_at = float(raw_timestamp)
        except ValueError:
            stored_at = math.nan
        if not math.isfinite(stored_at):
            logger.warning(f"Corrupted cache timestamp for {key}, discarding")
            self._remove(key)
            return None

        entry = CacheEntry(key=key, payload=None, stored_at=stored_at, ttl=max_age)
        if not entry.is_valid(self._now_ms()):
            logger.debug(f"Cache entry expired for {key}")
            self._remove(key)
            return None

        raw = self._get(key)
        if raw is None:
            logger.warning(f"Cache timestamp for {key} has no payload, discarding")
            self._remove(key)
            return None
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning(f"Corrupted cache payload for {key}, discarding")
            self._remove(key)
            return None

        return CacheEntry(key=key, payload=payload, stored_at=stored_at, ttl=max_age)

    def load(self, key: str, max_age: float) -> Any:
        """Return the cached payload, or None on miss/expiry/corruption.

        Args:
            key: Cache key
            max_age: Maximum age in seconds
        """
        entry = self.entry(key, max_age)
        return entry.payload if entry is not None else None


def fetch_with_cache(
    cache: TTLCache,
    key: str,
    fetcher: Callable[[], Any],
    max_age: float,
) -> Any:
    """Return a fresh cached value, or fetch, cache and return it.

    Errors raised by fetcher are logged and re-raised unchanged.

    Args:
        cache: Cache to read and write
        key: Cache key
        fetcher: Zero-argument callable returning a JSON-serializable value
        max_age: Maximum age in seconds
    """
    cached = cache.load(key, max_age)
    if cached is not None:
        logger.debug(f"Cache HIT for {key}")
        return cached

    logger.debug(f"Cache MISS for {key}")
    try:
        data = fetcher()
    except Exception as e:
        logger.warning(f"Fetch failed for {key}: {e}")
        raise

    cache.save(key, data)
    return data
