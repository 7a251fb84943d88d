"""Tests for the TTL cache."""

import json
from unittest.mock import Mock

import pytest

from trailwake.cache import MemoryStore, TIMESTAMP_SUFFIX, TTLCache, fetch_with_cache


class TestSaveLoad:
    """Round trip and expiry."""

    def test_round_trip(self, cache):
        """A saved payload loads back equal."""
        payload = {"epoch": 1700000000, "tz": "America/New_York", "values": [1.5, None]}
        assert cache.save("dawn_1", payload) is True
        assert cache.load("dawn_1", max_age=60) == payload

    def test_writes_timestamp_sibling_key(self, cache, memory_store, clock):
        """The write time in epoch ms is stored under <key>:t."""
        cache.save("k", [1, 2])
        assert json.loads(memory_store.get_item("k")) == [1, 2]
        assert float(memory_store.get_item("k" + TIMESTAMP_SUFFIX)) == clock.now * 1000

    def test_missing_key(self, cache):
        """Unknown keys load as None."""
        assert cache.load("nope", max_age=60) is None

    def test_valid_at_exact_ttl(self, cache, clock):
        """An entry exactly max_age old is still valid."""
        cache.save("k", 1)
        clock.advance(60)
        assert cache.load("k", max_age=60) == 1

    def test_expired_entry_is_removed(self, cache, memory_store, clock):
        """Reading an expired entry deletes both keys."""
        cache.save("k", {"a": 1})
        clock.advance(61)

        assert cache.load("k", max_age=60) is None
        assert memory_store.get_item("k") is None
        assert memory_store.get_item("k" + TIMESTAMP_SUFFIX) is None

    def test_max_age_is_per_read(self, cache, clock):
        """The same entry can be fresh for one reader and stale for another."""
        cache.save("k", 1)
        clock.advance(120)
        assert cache.load("k", max_age=300) == 1
        assert cache.load("k", max_age=60) is None

    def test_entry_metadata(self, cache, clock):
        """entry() exposes stored_at and ttl."""
        cache.save("k", "v")
        entry = cache.entry("k", max_age=900)
        assert entry.key == "k"
        assert entry.payload == "v"
        assert entry.stored_at == clock.now * 1000
        assert entry.ttl == 900


class TestCorruption:
    """Corrupted entries self-heal."""

    @pytest.mark.parametrize("raw", ["not-a-number", "nan", "inf"])
    def test_corrupt_timestamp(self, cache, memory_store, raw):
        """Unparsable or non-finite timestamps purge the entry."""
        memory_store.set_item("k", "1")
        memory_store.set_item("k" + TIMESTAMP_SUFFIX, raw)

        assert cache.load("k", max_age=60) is None
        assert memory_store.get_item("k") is None
        assert memory_store.get_item("k" + TIMESTAMP_SUFFIX) is None

    def test_corrupt_payload(self, cache, memory_store):
        """A payload that is not JSON purges the entry."""
        cache.save("k", 1)
        memory_store.set_item("k", "{broken")

        assert cache.load("k", max_age=60) is None
        assert len(memory_store) == 0

    def test_payload_without_timestamp_is_a_miss(self, cache, memory_store):
        """A payload with no timestamp is never served."""
        memory_store.set_item("k", "1")
        assert cache.load("k", max_age=60) is None

    def test_timestamp_without_payload_is_removed(self, cache, memory_store):
        """A fresh timestamp whose payload is gone is a miss and is purged."""
        cache.save("k", 1)
        memory_store.remove_item("k")

        assert cache.load("k", max_age=60) is None
        assert memory_store.get_item("k" + TIMESTAMP_SUFFIX) is None
        assert len(memory_store) == 0

    def test_unserializable_payload(self, cache, memory_store):
        """save() returns False and stores nothing for non-JSON values."""
        assert cache.save("k", {"when": object()}) is False
        assert len(memory_store) == 0


class TestDegradedStorage:
    """Store failures never escape the cache."""

    def test_quota_exceeded_write(self, clock):
        """A full store makes save() a no-op."""
        cache = TTLCache(MemoryStore(max_bytes=8), clock=clock)
        assert cache.save("key", "x" * 50) is False
        assert cache.load("key", max_age=60) is None

    def test_disabled_store(self, clock):
        """A disabled store behaves like an always-empty cache."""
        cache = TTLCache(MemoryStore(disabled=True), clock=clock)
        assert cache.save("k", 1) is False
        assert cache.load("k", max_age=60) is None

    def test_default_store_is_memory(self):
        """TTLCache() works without arguments."""
        cache = TTLCache()
        assert isinstance(cache.store, MemoryStore)
        assert cache.save("k", 1) is True
        assert cache.load("k", max_age=60) == 1


class TestFetchWithCache:
    """Tests for fetch_with_cache."""

    def test_miss_then_hit(self, cache):
        """The fetcher runs once; the second call is served from cache."""
        fetcher = Mock(return_value={"v": 1})

        assert fetch_with_cache(cache, "k", fetcher, 60) == {"v": 1}
        assert fetch_with_cache(cache, "k", fetcher, 60) == {"v": 1}
        fetcher.assert_called_once()

    def test_refetch_after_expiry(self, cache, clock):
        """An expired entry triggers a new fetch."""
        fetcher = Mock(side_effect=[{"v": 1}, {"v": 2}])

        fetch_with_cache(cache, "k", fetcher, 60)
        clock.advance(61)
        assert fetch_with_cache(cache, "k", fetcher, 60) == {"v": 2}
        assert fetcher.call_count == 2

    def test_fetch_error_propagates_and_caches_nothing(self, cache, memory_store):
        """Fetcher errors are re-raised unchanged."""
        fetcher = Mock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            fetch_with_cache(cache, "k", fetcher, 60)
        assert len(memory_store) == 0

    def test_works_without_storage(self, clock):
        """With storage disabled every call fetches but still succeeds."""
        cache = TTLCache(MemoryStore(disabled=True), clock=clock)
        fetcher = Mock(return_value=[1])

        assert fetch_with_cache(cache, "k", fetcher, 60) == [1]
        assert fetch_with_cache(cache, "k", fetcher, 60) == [1]
        assert fetcher.call_count == 2
