"""Tests for the in-memory TTL response cache."""

import threading
import time

import pytest

from hazardrisk.data.cache import TTLCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    c = TTLCache(cleanup_interval=3600, clock=clock)
    yield c
    c.close()


class TestTTLCache:
    def test_cache_miss(self, cache):
        assert cache.get("nonexistent") is None

    def test_set_and_get_returns_identical_bytes(self, cache):
        cache.set("key", b"\x00payload\xff", ttl_seconds=60)
        assert cache.get("key") == b"\x00payload\xff"

    def test_overwrite_replaces_value_and_expiry(self, cache, clock):
        cache.set("key", b"old", ttl_seconds=10)
        clock.now += 5
        cache.set("key", b"new", ttl_seconds=10)
        clock.now += 8
        assert cache.get("key") == b"new"

    def test_expired_entry_reads_as_missing_before_compaction(self, cache, clock):
        cache.set("key", b"value", ttl_seconds=10)
        clock.now += 10  # exactly at expiry
        assert cache.get("key") is None
        assert len(cache) == 1  # still stored until the next compaction

    def test_entry_valid_just_before_expiry(self, cache, clock):
        cache.set("key", b"value", ttl_seconds=10)
        clock.now += 9.999
        assert cache.get("key") == b"value"

    def test_purge_expired_keeps_fresh_entries(self, cache, clock):
        cache.set("short", b"a", ttl_seconds=5)
        cache.set("long", b"b", ttl_seconds=60)
        clock.now += 30

        dropped = cache.purge_expired()

        assert dropped == 1
        assert len(cache) == 1
        assert cache.get("long") == b"b"

    def test_close_is_idempotent(self, cache):
        cache.close()
        cache.close()
        assert cache.closed

    def test_get_and_set_still_work_after_close(self, cache):
        cache.close()
        cache.set("key", b"value", ttl_seconds=60)
        assert cache.get("key") == b"value"


class TestTTLCacheRealTime:
    def test_short_ttl_expires(self):
        cache = TTLCache()
        try:
            cache.set("key", b"value", ttl_seconds=0.05)
            time.sleep(0.06)
            assert cache.get("key") is None
        finally:
            cache.close()

    def test_background_compaction_reclaims_entries(self):
        cache = TTLCache(cleanup_interval=0.02)
        try:
            cache.set("key", b"value", ttl_seconds=0.01)
            deadline = time.monotonic() + 2.0
            while len(cache) and time.monotonic() < deadline:
                time.sleep(0.02)
            assert len(cache) == 0
        finally:
            cache.close()

    def test_concurrent_access_during_compaction(self):
        cache = TTLCache(cleanup_interval=0.001)
        errors: list[BaseException] = []

        def worker(n: int):
            try:
                for i in range(500):
                    key = f"{n}:{i % 20}"
                    cache.set(key, key.encode(), ttl_seconds=60)
                    value = cache.get(key)
                    assert value is None or value == key.encode()
            except BaseException as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        try:
            for t in threads:
                t.start()
            for t in threads:
                t.join()
        finally:
            cache.close()

        assert errors == []
        assert len(cache) == 8 * 20

    def test_close_stops_cleanup_thread(self):
        cache = TTLCache(cleanup_interval=0.01)
        cache.close()
        assert not cache._cleaner.is_alive()
