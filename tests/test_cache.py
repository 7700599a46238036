"""Tests for result caches and single-flight."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from trustboard.cache import InMemoryResultCache, RedisResultCache, SingleFlight


class TestInMemoryResultCache:

    @pytest.mark.asyncio
    async def test_hit_before_expiry(self, clock):
        cache = InMemoryResultCache(clock=clock)
        await cache.set("leaderboard:overall", "[]", ttl=30)

        clock.advance(29.9)

        assert await cache.get("leaderboard:overall") == "[]"

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss_and_evicted(self, clock):
        cache = InMemoryResultCache(clock=clock)
        await cache.set("leaderboard:overall", "[]", ttl=30)

        clock.advance(30)

        assert await cache.get("leaderboard:overall") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, clock):
        cache = InMemoryResultCache(clock=clock)
        await cache.set("leaderboard:overall", "a", ttl=30)
        await cache.set("leaderboard:current", "b", ttl=5)

        clock.advance(10)

        assert await cache.get("leaderboard:overall") == "a"
        assert await cache.get("leaderboard:current") is None

    @pytest.mark.asyncio
    async def test_unknown_key(self):
        assert await InMemoryResultCache().get("missing") is None


class TestRedisResultCache:

    @pytest.mark.asyncio
    async def test_set_uses_millisecond_expiry(self):
        client = AsyncMock()
        cache = RedisResultCache(client)

        await cache.set("leaderboard:overall", "[]", ttl=30)

        client.set.assert_awaited_once_with("leaderboard:overall", "[]", px=30000)

    @pytest.mark.asyncio
    async def test_get_returns_stored_payload(self):
        client = AsyncMock()
        client.get.return_value = '[{"rank":1}]'

        assert await RedisResultCache(client).get("k") == '[{"rank":1}]'

    @pytest.mark.asyncio
    async def test_redis_errors_degrade_to_miss(self):
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("down")
        client.set.side_effect = RedisConnectionError("down")
        cache = RedisResultCache(client)

        assert await cache.get("k") is None
        await cache.set("k", "v", ttl=1)

    @pytest.mark.asyncio
    async def test_close_closes_client(self):
        client = AsyncMock()
        await RedisResultCache(client).close()
        client.aclose.assert_awaited_once()


class TestSingleFlight:

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_computation(self):
        flights = SingleFlight()
        release = asyncio.Event()
        runs = []

        async def compute():
            runs.append(1)
            await release.wait()
            return "payload"

        waiters = [asyncio.ensure_future(flights.do("k", compute)) for _ in range(5)]
        await asyncio.sleep(0)
        assert flights.in_flight("k")
        release.set()

        assert await asyncio.gather(*waiters) == ["payload"] * 5
        assert len(runs) == 1

    @pytest.mark.asyncio
    async def test_key_is_released_after_completion(self):
        flights = SingleFlight()
        runs = []

        async def compute():
            runs.append(1)
            return len(runs)

        assert await flights.do("k", compute) == 1
        await asyncio.sleep(0)
        assert not flights.in_flight("k")
        assert await flights.do("k", compute) == 2

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter(self):
        flights = SingleFlight()
        release = asyncio.Event()

        async def compute():
            await release.wait()
            raise RuntimeError("upstream failed")

        waiters = [asyncio.ensure_future(flights.do("k", compute)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()

        results = await asyncio.gather(*waiters, return_exceptions=True)
        assert all(isinstance(r, RuntimeError) for r in results)

    @pytest.mark.asyncio
    async def test_different_keys_run_separately(self):
        flights = SingleFlight()

        async def compute_a():
            return "a"

        async def compute_b():
            return "b"

        assert await asyncio.gather(
            flights.do("a", compute_a), flights.do("b", compute_b)
        ) == ["a", "b"]
