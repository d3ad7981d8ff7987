"""
Response Cache Tests.

============================================================
PURPOSE
============================================================
TTL semantics, resource-class policy and graceful degradation
of the response cache. Time is driven by MockClock.

============================================================
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from oneinch_sdk.cache import (
    CacheEntry,
    CacheStore,
    InMemoryCacheStore,
    ResourceClass,
    ResponseCache,
    TTLPolicy,
)


class BrokenStore(CacheStore):
    """Store whose every operation fails."""

    def get(self, key):
        raise ConnectionError("store down")

    def put(self, entry):
        raise ConnectionError("store down")

    def delete(self, key):
        raise ConnectionError("store down")

    def entries(self):
        raise ConnectionError("store down")

    def clear(self):
        raise ConnectionError("store down")


# ============================================================
# BASIC OPERATIONS
# ============================================================

class TestResponseCache:
    """Tests for get/put/invalidate."""

    def test_miss_when_absent(self, cache):
        """Test lookup of an unknown key."""
        assert cache.get("missing") is None

    def test_put_then_get(self, cache):
        """Test a stored value is returned."""
        cache.put("k", {"price": 1}, ttl=30)

        entry = cache.get("k")

        assert entry is not None
        assert entry.value == {"price": 1}
        assert entry.ttl == 30

    def test_put_replaces(self, cache):
        """Test put is an unconditional replace."""
        cache.put("k", 1, ttl=30)
        cache.put("k", 2, ttl=30)

        assert cache.get("k").value == 2

    def test_invalidate(self, cache):
        """Test invalidate removes the entry."""
        cache.put("k", 1, ttl=30)
        cache.invalidate("k")

        assert cache.get("k") is None

    def test_clear(self, cache):
        """Test clear removes everything."""
        cache.put("a", 1, ttl=30)
        cache.put("b", 2, ttl=30)
        cache.clear()

        assert cache.get("a") is None
        assert cache.get("b") is None

    def test_disabled_cache_always_misses(self, clock):
        """Test a disabled cache stores nothing."""
        cache = ResponseCache(clock=clock, enabled=False)
        cache.put("k", 1, ttl=30)

        assert cache.get("k") is None


# ============================================================
# TTL
# ============================================================

class TestTTL:
    """Tests for expiry boundaries."""

    def test_hit_just_before_expiry(self, cache, clock):
        """Test a lookup at stored_at + ttl - epsilon hits."""
        cache.put_for("p", 100, ResourceClass.PRICE)
        clock.advance(seconds=29.999)

        assert cache.get("p").value == 100

    def test_hit_exactly_at_expiry(self, cache, clock):
        """Test a lookup at exactly stored_at + ttl still hits."""
        cache.put("p", 100, ttl=30)
        clock.advance(seconds=30)

        assert cache.get("p") is not None

    def test_miss_just_after_expiry(self, cache, clock):
        """Test a lookup at stored_at + ttl + epsilon misses."""
        cache.put_for("p", 100, ResourceClass.PRICE)
        clock.advance(seconds=30.001)

        assert cache.get("p") is None

    def test_expired_entry_removed_on_read(self, cache, clock):
        """Test lazy expiry drops the entry."""
        cache.put("p", 100, ttl=1)
        clock.advance(seconds=2)
        cache.get("p")

        assert cache.get_stats().size == 0

    def test_resource_class_ttls(self, cache, clock):
        """Test token metadata outlives prices."""
        cache.put_for("price", 1, ResourceClass.PRICE)
        cache.put_for("token", 2, ResourceClass.TOKEN_METADATA)
        cache.put_for("portfolio", 3, ResourceClass.PORTFOLIO)

        clock.advance(minutes=4)

        assert cache.get("price") is None
        assert cache.get("token").value == 2
        assert cache.get("portfolio").value == 3

        clock.advance(minutes=2)

        assert cache.get("portfolio") is None
        assert cache.get("token").value == 2

    def test_sweep_expired(self, cache, clock):
        """Test sweep removes only expired entries."""
        cache.put("short", 1, ttl=10)
        cache.put("long", 2, ttl=100)
        clock.advance(seconds=50)

        removed = cache.sweep_expired()

        assert removed == 1
        assert cache.get("long").value == 2
        assert cache.get_stats().size == 1

    @pytest.mark.asyncio
    async def test_run_sweeper(self, cache, clock):
        """Test the background sweeper removes expired entries."""
        cache.put("short", 1, ttl=10)
        clock.advance(seconds=11)

        task = asyncio.create_task(cache.run_sweeper(0.01))
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert cache.get_stats().size == 0


# ============================================================
# POLICY & ENTRIES
# ============================================================

class TestTTLPolicy:
    """Tests for TTL selection."""

    def test_defaults(self):
        """Test the default TTL per resource class."""
        policy = TTLPolicy()

        assert policy.ttl_for(ResourceClass.PRICE) == 30
        assert policy.ttl_for(ResourceClass.TOKEN_METADATA) == 3600
        assert policy.ttl_for(ResourceClass.PORTFOLIO) == 300
        assert policy.ttl_for(None) == 60

    def test_overrides(self):
        """Test overriding one class keeps the others."""
        policy = TTLPolicy({ResourceClass.PRICE: 5})

        assert policy.ttl_for(ResourceClass.PRICE) == 5
        assert policy.ttl_for(ResourceClass.PORTFOLIO) == 300

    def test_with_overrides_by_name(self):
        """Test overriding by resource class value."""
        policy = TTLPolicy().with_overrides(portfolio=10)

        assert policy.ttl_for(ResourceClass.PORTFOLIO) == 10

    def test_entry_expiry(self):
        """Test CacheEntry expiry arithmetic."""
        entry = CacheEntry(key="k", value=1, stored_at=100.0, ttl=30.0)

        assert entry.expires_at == 130.0
        assert not entry.is_expired(130.0)
        assert entry.is_expired(130.5)
        assert entry.age_seconds(110.0) == 10.0


# ============================================================
# DEGRADATION & CONCURRENCY
# ============================================================

class TestDegradation:
    """Tests for store failures."""

    def test_broken_store_reads_miss(self, clock):
        """Test a failing store behaves as always-miss."""
        cache = ResponseCache(store=BrokenStore(), clock=clock)

        assert cache.get("k") is None

    def test_broken_store_writes_are_noops(self, clock):
        """Test a failing store never raises on write."""
        cache = ResponseCache(store=BrokenStore(), clock=clock)

        cache.put("k", 1, ttl=30)
        cache.invalidate("k")
        cache.clear()

        assert cache.sweep_expired() == 0
        assert cache.get_stats().errors >= 4

    def test_stats(self, cache):
        """Test hit/miss counters."""
        cache.put("k", 1, ttl=30)
        cache.get("k")
        cache.get("other")

        stats = cache.get_stats()

        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.writes == 1
        assert stats.hit_rate == 0.5

    def test_broken_store_construction(self, clock):
        """Test building a cache over a failing store does not touch it."""
        cache = ResponseCache(store=BrokenStore(), clock=clock)

        assert cache.get_stats().errors == 0
        assert cache.get_stats().size == 0

    def test_empty_custom_store_kept(self, clock):
        """Test an empty store is used rather than replaced."""
        store = InMemoryCacheStore()
        cache = ResponseCache(store=store, clock=clock)

        cache.put("k", 1, ttl=30)

        assert len(store) == 1
        assert store.get("k").value == 1

    def test_store_is_consulted(self, clock):
        """Test a custom store receives the entries."""
        store = MagicMock(spec=CacheStore)
        store.get.return_value = None
        cache = ResponseCache(store=store, clock=clock)

        cache.put("k", 1, ttl=30)

        stored = store.put.call_args[0][0]
        assert stored.key == "k"
        assert stored.stored_at == clock.timestamp()

    def test_replace_during_expiry_keeps_new_entry(self, clock):
        """Test discarding an expired entry does not drop a fresh replacement."""
        store = InMemoryCacheStore()
        old = CacheEntry(key="k", value=1, stored_at=0.0, ttl=1.0)
        new = CacheEntry(key="k", value=2, stored_at=clock.timestamp(), ttl=30.0)
        store.put(new)

        assert store.delete_if_same(old) is False
        assert store.get("k") is new


# ============================================================
# CLOCK
# ============================================================

class TestMockClock:
    """Tests for the test clock driving expiry."""

    def test_freeze_restores_time(self, clock):
        """Test freeze pins time and restores it on exit."""
        before = clock.timestamp()

        with clock.freeze(datetime(2030, 1, 1)):
            assert clock.now() == datetime(2030, 1, 1, tzinfo=timezone.utc)

        assert clock.timestamp() == before

    def test_set_time_naive_is_utc(self, clock):
        """Test naive datetimes are treated as UTC."""
        clock.set_time(datetime(2025, 6, 1, 12, 0))

        assert clock.now().tzinfo == timezone.utc
