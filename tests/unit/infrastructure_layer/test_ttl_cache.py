"""
Unit Tests for TTLCache

Tests expiry boundaries, explicit hit/miss results, copy isolation, cleanup
passes and statistics.
"""

import pytest

from maple_gateway.infrastructure.cache import CacheEntry, CacheLookup, TTLCache
from tests.test_fixtures import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(max_entries=3, default_ttl=60.0, clock=clock)


@pytest.mark.unit
class TestCacheEntry:
    """Test suite for CacheEntry expiry."""

    def test_entry_visible_up_to_and_including_ttl(self):
        entry = CacheEntry(value="v", stored_at=10.0, ttl=5.0)

        assert entry.is_expired(15.0) is False
        assert entry.is_expired(15.001) is True

    def test_miss_factory(self):
        assert CacheLookup.miss() == CacheLookup(hit=False, value=None)


@pytest.mark.unit
class TestTTLCache:
    """Test suite for TTLCache operations."""

    @pytest.mark.asyncio
    async def test_set_then_get(self, cache):
        await cache.set("ocid:hero", {"ocid": "abc"})

        assert await cache.get("ocid:hero") == {"ocid": "abc"}

    @pytest.mark.asyncio
    async def test_missing_key_is_miss(self, cache):
        result = await cache.lookup("nope")

        assert result.hit is False
        assert await cache.get("nope") is None

    @pytest.mark.asyncio
    async def test_cached_none_is_a_hit(self, cache):
        """Test that a stored None is distinguishable from a miss."""
        await cache.set("k", None)

        result = await cache.lookup("k")
        assert result.hit is True
        assert result.value is None

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, cache, clock):
        await cache.set("k", "v", ttl=10.0)

        clock.advance(10.0)
        assert (await cache.lookup("k")).hit is True

        clock.advance(0.5)
        assert (await cache.lookup("k")).hit is False
        assert cache.size() == 0

    @pytest.mark.asyncio
    async def test_default_ttl_used(self, cache, clock):
        await cache.set("k", "v")

        clock.advance(61.0)
        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_set_overwrites_and_resets_ttl(self, cache, clock):
        await cache.set("k", "old", ttl=10.0)
        clock.advance(8.0)
        await cache.set("k", "new", ttl=10.0)
        clock.advance(8.0)

        assert await cache.get("k") == "new"

    @pytest.mark.asyncio
    async def test_values_are_copied_in_and_out(self, cache):
        """Test that mutating stored or returned values never leaks into the cache."""
        original = {"items": [1, 2]}
        await cache.set("k", original)
        original["items"].append(3)

        returned = await cache.get("k")
        returned["items"].append(4)

        assert await cache.get("k") == {"items": [1, 2]}

    @pytest.mark.asyncio
    async def test_delete(self, cache):
        await cache.set("k", "v")

        assert await cache.delete("k") is True
        assert await cache.delete("k") is False
        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_invalidate_prefix(self, cache):
        await cache.set("api:character.basic:1", 1)
        await cache.set("api:character.basic:2", 2)
        await cache.set("api:guild.basic:1", 3)

        removed = await cache.invalidate_prefix("api:character.basic:")

        assert removed == 2
        assert cache.size() == 1
        assert await cache.get("api:guild.basic:1") == 3

    @pytest.mark.asyncio
    async def test_clear(self, cache):
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.clear()

        assert cache.size() == 0

    @pytest.mark.asyncio
    async def test_cleanup_runs_when_full(self, cache, clock):
        """Test that reaching max_entries purges expired entries before inserting."""
        await cache.set("a", 1, ttl=1.0)
        await cache.set("b", 2, ttl=1.0)
        await cache.set("c", 3, ttl=100.0)
        clock.advance(2.0)

        await cache.set("d", 4)

        assert cache.size() == 2
        assert await cache.get("c") == 3
        assert await cache.get("d") == 4
        assert cache.stats()["cleanups"] == 1

    @pytest.mark.asyncio
    async def test_insert_allowed_when_nothing_expired(self, cache):
        """Test that the cap is soft: a full cache with live entries still accepts writes."""
        for key in ("a", "b", "c", "d"):
            await cache.set(key, key)

        assert cache.size() == 4
        assert await cache.get("a") == "a"

    @pytest.mark.asyncio
    async def test_explicit_cleanup(self, cache, clock):
        await cache.set("a", 1, ttl=1.0)
        await cache.set("b", 2, ttl=10.0)
        clock.advance(5.0)

        assert await cache.cleanup() == 1
        assert cache.size() == 1

    @pytest.mark.asyncio
    async def test_stats(self, cache):
        await cache.set("a", 1)
        await cache.get("a")
        await cache.get("missing")

        stats = cache.stats()
        assert stats["size"] == 1
        assert stats["max_size"] == 3
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5
        assert stats["utilization_percent"] == 33.33

    def test_invalid_max_entries(self, clock):
        with pytest.raises(ValueError):
            TTLCache(max_entries=0, clock=clock)
