"""
Tests for the TTL cache.

Tests cover:
- set/get round trip and defaults
- Lazy expiry on read
- Re-set resets expiry
- remove/clear/keys/entries
- get_or_compute
- Stored values are isolated from callers
"""

import pytest

from neo_access.utils.cache import TTLCache

from ..conftest import FakeClock


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache("test", ttl_ms=1000, clock=clock)


# =============================================================================
# Freshness
# =============================================================================


class TestFreshness:
    def test_get_after_set_returns_value(self, cache: TTLCache) -> None:
        cache.set("height", 42)
        assert cache.get("height") == 42
        assert cache.has("height") is True

    def test_missing_key_returns_default(self, cache: TTLCache) -> None:
        assert cache.get("missing") is None
        assert cache.get("missing", "fallback") == "fallback"
        assert cache.has("missing") is False

    def test_value_expires_after_ttl(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("height", 42)
        clock.advance(0.5)
        assert cache.get("height") == 42

        clock.advance(0.5)
        assert cache.get("height") is None
        assert cache.has("height") is False

    def test_expired_entry_is_deleted_on_read(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("height", 42)
        clock.advance(2)
        assert cache.size == 1

        cache.get("height")

        assert cache.size == 0

    def test_reset_restarts_expiry(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("height", 1)
        clock.advance(0.8)
        cache.set("height", 2)
        clock.advance(0.8)

        assert cache.get("height") == 2

    def test_per_entry_ttl_override(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("short", "a", ttl_ms=100)
        cache.set("long", "b")
        clock.advance(0.5)

        assert cache.get("short") is None
        assert cache.get("long") == "b"

    def test_falsy_values_are_cached(self, cache: TTLCache) -> None:
        cache.set("zero", 0)
        assert cache.has("zero") is True
        assert cache.get("zero", "default") == 0

    def test_invalid_ttl_rejected(self, clock: FakeClock) -> None:
        with pytest.raises(ValueError):
            TTLCache("bad", ttl_ms=0, clock=clock)


# =============================================================================
# Maintenance
# =============================================================================


class TestMaintenance:
    def test_remove_deletes_unconditionally(self, cache: TTLCache) -> None:
        cache.set("a", 1)
        cache.remove("a")
        cache.remove("never-set")

        assert cache.has("a") is False

    def test_clear_empties_cache(self, cache: TTLCache) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()

        assert cache.size == 0
        assert cache.keys() == []

    def test_keys_and_entries_skip_stale(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("old", 1, ttl_ms=100)
        cache.set("new", 2)
        clock.advance(0.5)

        assert cache.keys() == ["new"]
        assert cache.entries() == [("new", 2)]


# =============================================================================
# Isolation
# =============================================================================


class TestIsolation:
    def test_mutating_stored_value_does_not_leak(self, cache: TTLCache) -> None:
        block = {"hash": "0xabc", "tx": []}
        cache.set("block", block)

        block["hash"] = "tampered"

        assert cache.get("block")["hash"] == "0xabc"

    def test_mutating_returned_value_does_not_leak(self, cache: TTLCache) -> None:
        cache.set("balance", {"balance": [{"amount": "1"}]})

        cache.get("balance")["balance"].clear()
        cache.entries()[0][1]["balance"].append({"amount": "2"})

        assert cache.get("balance") == {"balance": [{"amount": "1"}]}

    @pytest.mark.asyncio
    async def test_computed_value_is_not_shared(self, cache: TTLCache) -> None:
        async def factory():
            return {"height": 1}

        first = await cache.get_or_compute("info", factory)
        first["height"] = 99
        second = await cache.get_or_compute("info", factory)

        assert second == {"height": 1}


# =============================================================================
# get_or_compute
# =============================================================================


class TestGetOrCompute:
    @pytest.mark.asyncio
    async def test_computes_once_while_fresh(self, cache: TTLCache) -> None:
        calls = []

        async def factory() -> int:
            calls.append(1)
            return 7

        assert await cache.get_or_compute("k", factory) == 7
        assert await cache.get_or_compute("k", factory) == 7
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_recomputes_after_expiry(self, cache: TTLCache, clock: FakeClock) -> None:
        values = iter([1, 2])

        async def factory() -> int:
            return next(values)

        assert await cache.get_or_compute("k", factory) == 1
        clock.advance(1.5)
        assert await cache.get_or_compute("k", factory) == 2

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, cache: TTLCache) -> None:
        async def factory() -> int:
            raise RuntimeError("node down")

        with pytest.raises(RuntimeError):
            await cache.get_or_compute("k", factory)

        assert cache.has("k") is False
