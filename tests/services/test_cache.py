"""Tests for the TTL caches."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from wallet_gate.services.cache import MemoryCache, RedisCache


class FakeMonotonic:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_memory_cache_returns_value_within_ttl() -> None:
    clock = FakeMonotonic()
    cache = MemoryCache(clock=clock)
    await cache.set("k", "1.5", 60)

    clock.now += 59.9
    assert await cache.get("k") == "1.5"


@pytest.mark.asyncio
async def test_memory_cache_never_serves_expired_value() -> None:
    clock = FakeMonotonic()
    cache = MemoryCache(clock=clock)
    await cache.set("k", "1.5", 60)

    clock.now += 60
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_memory_cache_overwrite_resets_expiry() -> None:
    clock = FakeMonotonic()
    cache = MemoryCache(clock=clock)
    await cache.set("k", "1", 60)
    clock.now += 50
    await cache.set("k", "2", 60)
    clock.now += 50
    assert await cache.get("k") == "2"


@pytest.mark.asyncio
async def test_redis_cache_sets_absolute_expiry() -> None:
    client = AsyncMock()
    cache = RedisCache(client)
    await cache.set("cg:price:coin:sol:usd", "150.0", 60)
    client.set.assert_awaited_once_with("cg:price:coin:sol:usd", "150.0", ex=60)


@pytest.mark.asyncio
async def test_redis_cache_decodes_bytes() -> None:
    client = AsyncMock()
    client.get.return_value = b"2.5"
    assert await RedisCache(client).get("k") == "2.5"


@pytest.mark.asyncio
async def test_redis_outage_degrades_to_miss() -> None:
    client = AsyncMock()
    client.get.side_effect = RedisConnectionError("down")
    client.set.side_effect = RedisConnectionError("down")
    cache = RedisCache(client)

    assert await cache.get("k") is None
    await cache.set("k", "1", 60)
