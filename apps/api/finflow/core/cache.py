from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

from redis.asyncio import Redis

logger = logging.getLogger(__name__)

CacheValue = dict | list | str


def cache_key(namespace: str, **params) -> str:
    """Build a stable key from request parameters, independent of argument order."""
    parts = [f"{name}={params[name]}" for name in sorted(params)]
    return ":".join([namespace, *parts])


class Cache(Protocol):
    async def get(self, key: str) -> CacheValue | None: ...

    async def set(self, key: str, value: CacheValue, ttl_seconds: int) -> None: ...

    async def remember(
        self,
        key: str,
        producer: Callable[[], Awaitable[CacheValue]],
        ttl_seconds: int = 300,
    ) -> CacheValue: ...


class _RememberMixin:
    async def remember(
        self,
        key: str,
        producer: Callable[[], Awaitable[CacheValue]],
        ttl_seconds: int = 300,
    ):
        cached = await self.get(key)
        if cached is not None:
            return cached
        fresh = await producer()
        await self.set(key, fresh, ttl_seconds)
        return fresh


class NullCache(_RememberMixin):
    """Never stores anything; every lookup misses."""

    async def get(self, key: str) -> CacheValue | None:
        return None

    async def set(self, key: str, value: CacheValue, ttl_seconds: int) -> None:
        return None


class MemoryTTLCache(_RememberMixin):
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._store: dict[str, tuple[float, str]] = {}
        self._clock = clock

    async def get(self, key: str) -> CacheValue | None:
        entry = self._store.get(key)
        if not entry:
            return None
        expires_at, value = entry
        if self._clock() > expires_at:
            self._store.pop(key, None)
            return None
        return json.loads(value)

    async def set(self, key: str, value: CacheValue, ttl_seconds: int) -> None:
        self._store[key] = (self._clock() + ttl_seconds, json.dumps(value))


class CacheClient(_RememberMixin):
    """Redis when reachable, in-process memory otherwise."""

    def __init__(self, redis_url: str | None = None) -> None:
        self._redis_url = redis_url
        self._memory = MemoryTTLCache()
        self._redis = None

    async def connect(self) -> None:
        if not self._redis_url:
            return
        try:
            client = Redis.from_url(self._redis_url, decode_responses=True)
            await client.ping()
            self._redis = client
        except Exception as exc:
            logger.warning("Redis unavailable at %s, using memory cache: %s", self._redis_url, exc)
            self._redis = None

    async def close(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def get(self, key: str):
        if self._redis:
            try:
                value = await self._redis.get(key)
                return json.loads(value) if value else None
            except Exception:
                logger.debug("Redis get failed for %s", key, exc_info=True)
        return await self._memory.get(key)

    async def set(self, key: str, value: CacheValue, ttl_seconds: int = 300) -> None:
        serialized = json.dumps(value)
        if self._redis:
            try:
                await self._redis.set(name=key, value=serialized, ex=ttl_seconds)
                return
            except Exception:
                logger.debug("Redis set failed for %s", key, exc_info=True)
        await self._memory.set(key, value, ttl_seconds)
