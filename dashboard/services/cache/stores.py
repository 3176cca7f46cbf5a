"""
Key-value store backends.

The commit cache and the tenant directory only need get / put / prefix delete
over JSON values. Two backends:
- MemoryKeyValueStore: in-process cachetools TLRUCache (per-entry TTL), used for
  local development and tests
- RedisKeyValueStore: hosted Redis via redis.asyncio, used when REDIS_URL is set

Values are stored JSON-encoded in both backends so callers never share
mutable objects with the store.
"""

import json
import logging
from typing import Any, Protocol

from cachetools import TLRUCache  # type: ignore[import-untyped]
from redis.asyncio import Redis

from dashboard.config import settings

logger = logging.getLogger(__name__)

# Entries stored without a TTL live this long in the memory store (30 days)
_NO_EXPIRY_SECONDS = 30 * 24 * 3600


class KeyValueStore(Protocol):
    """Minimal JSON key-value store interface."""

    async def get(self, key: str) -> Any | None: ...

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None: ...

    async def delete_prefix(self, prefix: str) -> int: ...


def _entry_ttu(_key: str, value: tuple[str, float], now: float) -> float:
    """Time-to-use for TLRUCache: each entry carries its own TTL."""
    return now + value[1]


class MemoryKeyValueStore:
    """In-process store backed by a cachetools TLRUCache."""

    def __init__(self, maxsize: int | None = None) -> None:
        self._cache: TLRUCache[str, tuple[str, float]] = TLRUCache(
            maxsize=maxsize or settings.memory_cache_maxsize,
            ttu=_entry_ttu,
        )

    async def get(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        return json.loads(entry[0])

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = float(ttl_seconds) if ttl_seconds else float(_NO_EXPIRY_SECONDS)
        self._cache[key] = (json.dumps(value), ttl)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in list(self._cache.keys()) if k.startswith(prefix)]
        for key in keys:
            self._cache.pop(key, None)
        return len(keys)

    def __len__(self) -> int:
        return len(self._cache)


class RedisKeyValueStore:
    """Hosted store backed by Redis."""

    def __init__(self, client: Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisKeyValueStore":
        return cls(Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Any | None:
        raw = await self._redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        await self._redis.set(key, json.dumps(value), ex=ttl_seconds or None)

    async def delete_prefix(self, prefix: str) -> int:
        deleted = 0
        async for key in self._redis.scan_iter(match=f"{prefix}*", count=500):
            deleted += await self._redis.delete(key)
        return deleted

    async def close(self) -> None:
        await self._redis.aclose()


_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    """
    Get or create the process-wide key-value store.

    Redis when REDIS_URL is configured, otherwise the in-memory store.
    """
    global _store
    if _store is None:
        if settings.redis_enabled:
            _store = RedisKeyValueStore.from_url(settings.redis_url)
            logger.info("Using Redis key-value store")
        else:
            _store = MemoryKeyValueStore()
            logger.info("Using in-memory key-value store")
    return _store


async def close_store() -> None:
    """Close the shared store. Call on app shutdown."""
    global _store
    if isinstance(_store, RedisKeyValueStore):
        await _store.close()
    _store = None
