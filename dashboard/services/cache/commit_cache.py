"""
TTL cache for shaped commit query payloads.

Each entry is an envelope {"data": payload, "expiresAt": epoch-ms} stored in a
KeyValueStore. The envelope's expiry is authoritative; the store TTL only
reclaims space. Caching is best-effort in both directions: a failing store
reads as a miss and a failing write is logged and skipped.

Cache durations:
- Default: 1 hour
- Payloads over 500 commits: 30 minutes (bounds how long large payloads are held)
"""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from dashboard.config import settings
from dashboard.services.cache.stores import KeyValueStore

logger = logging.getLogger(__name__)


def make_cache_key(tenant_id: str, endpoint: str, params: Mapping[str, Any] | None = None) -> str:
    """
    Build a tenant-scoped cache key from query parameters sorted by name.

    Usage:
        key = make_cache_key("octocat", "commits", {"groupBy": "week", "from": None})
        # "cache:octocat:commits:from=&groupBy=week"
    """
    param_string = "&".join(
        f"{name}={'' if value is None else value}" for name, value in sorted((params or {}).items())
    )
    return f"cache:{tenant_id}:{endpoint}:{param_string}"


def tenant_prefix(tenant_id: str) -> str:
    """Prefix shared by every cache key of a tenant."""
    return f"cache:{tenant_id}:"


def ttl_for(total_commits: int) -> int:
    """Pick the TTL for a payload by its commit count."""
    if total_commits > settings.cache_large_threshold:
        return settings.cache_large_ttl_seconds
    return settings.cache_ttl_seconds


class CommitCache:
    """Fail-open TTL envelope cache over a key-value store."""

    def __init__(self, store: KeyValueStore, clock: Callable[[], float] = time.time) -> None:
        self.store = store
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def get(self, key: str) -> Any | None:
        """Return the cached payload, or None on miss, expiry, or store error."""
        try:
            cached = await self.store.get(key)
        except Exception as e:
            logger.error(f"Error reading from cache ({key}): {e}")
            return None

        if not isinstance(cached, dict) or "data" not in cached:
            logger.debug(f"Cache MISS: {key}")
            return None
        expires_at = cached.get("expiresAt")
        if not isinstance(expires_at, (int, float)) or expires_at <= self._now_ms():
            logger.debug(f"Cache EXPIRED: {key}")
            return None

        logger.debug(f"Cache HIT: {key}")
        return cached["data"]

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a payload with an expiry; store errors are logged and swallowed."""
        ttl = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        envelope = {"data": value, "expiresAt": self._now_ms() + ttl * 1000}
        try:
            await self.store.put(key, envelope, ttl)
        except Exception as e:
            logger.error(f"Error writing to cache ({key}): {e}")

    async def invalidate_tenant(self, tenant_id: str) -> int:
        """
        Best-effort removal of every cached payload for a tenant.

        Returns:
            Number of entries removed (0 when the store cannot enumerate keys or fails)
        """
        try:
            removed = await self.store.delete_prefix(tenant_prefix(tenant_id))
        except Exception as e:
            logger.error(f"Error invalidating cache for {tenant_id}: {e}")
            return 0
        logger.info(f"Invalidated {removed} cache entries for {tenant_id}")
        return removed
