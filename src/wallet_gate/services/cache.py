"""Key-value stores with per-entry expiry used for short-lived caching."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from wallet_gate.core.settings import settings

logger = logging.getLogger(__name__)


class TTLCache(Protocol):
    """Minimal async cache contract: string values with an absolute expiry."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...


class RedisCache:
    """TTL cache backed by Redis `SET ... EX`."""

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisCache:
        return cls(redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
        except RedisError as exc:
            # A cache outage degrades to a miss; the caller fetches fresh data.
            logger.warning("Redis GET %s failed: %s", key, exc)
            return None
        if value is None:
            return None
        return value if isinstance(value, str) else value.decode()

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(key, value, ex=int(ttl_seconds))
        except RedisError as exc:
            logger.warning("Redis SET %s failed: %s", key, exc)

    async def close(self) -> None:
        await self._redis.aclose()


class MemoryCache:
    """In-process TTL cache.

    Entries are dropped on read once their expiry has passed, so a stale value is
    never returned.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                self._entries.pop(key, None)
                return None
            return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        async with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()


_price_cache: RedisCache | None = None


def get_price_cache() -> TTLCache:
    """Return the process-wide Redis price cache, creating it on first use."""
    global _price_cache
    if _price_cache is None:
        _price_cache = RedisCache.from_url(settings.redis_url)
    return _price_cache


async def close_price_cache() -> None:
    global _price_cache
    if _price_cache is not None:
        await _price_cache.close()
        _price_cache = None
