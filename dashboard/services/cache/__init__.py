"""
Cache package.

Usage: `from dashboard.services.cache import CommitCache, get_store`
"""

from dashboard.services.cache.commit_cache import (
    CommitCache,
    make_cache_key,
    tenant_prefix,
    ttl_for,
)
from dashboard.services.cache.stores import (
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    close_store,
    get_store,
)

__all__ = [
    "CommitCache",
    "make_cache_key",
    "tenant_prefix",
    "ttl_for",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "close_store",
    "get_store",
]
