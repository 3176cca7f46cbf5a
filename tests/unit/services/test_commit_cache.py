"""Unit tests for the commit payload cache and key-value stores."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from dashboard.services.cache.commit_cache import CommitCache, make_cache_key, tenant_prefix, ttl_for
from dashboard.services.cache.stores import MemoryKeyValueStore, RedisKeyValueStore


def _failing_store() -> MagicMock:
    store = MagicMock()
    store.get = AsyncMock(side_effect=ConnectionError("store down"))
    store.put = AsyncMock(side_effect=ConnectionError("store down"))
    store.delete_prefix = AsyncMock(side_effect=ConnectionError("store down"))
    return store


# ═══════════════════════════════════════════════════════════════════════════
# Keys and TTL
# ═══════════════════════════════════════════════════════════════════════════


class TestCacheKey:
    def test_params_are_sorted(self):
        a = make_cache_key("octocat", "commits", {"groupBy": "week", "from": "2025-01-01"})
        b = make_cache_key("octocat", "commits", {"from": "2025-01-01", "groupBy": "week"})

        assert a == b == "cache:octocat:commits:from=2025-01-01&groupBy=week"

    def test_missing_values_render_empty(self):
        assert make_cache_key("octocat", "weeks", {"to": None, "repo": "api"}) == (
            "cache:octocat:weeks:repo=api&to="
        )

    def test_tenants_never_share_keys(self):
        params = {"groupBy": "week"}

        assert make_cache_key("alice", "commits", params) != make_cache_key("bob", "commits", params)
        assert make_cache_key("alice", "commits", params).startswith(tenant_prefix("alice"))
        assert not make_cache_key("alice", "commits", params).startswith(tenant_prefix("bob"))

    def test_distinct_params_distinct_keys(self):
        assert make_cache_key("t", "commits", {"groupBy": "week"}) != make_cache_key(
            "t", "commits", {"groupBy": "month"}
        )

    @pytest.mark.parametrize(("total", "ttl"), [(0, 3600), (500, 3600), (501, 1800)])
    def test_ttl_for(self, total, ttl):
        assert ttl_for(total) == ttl


# ═══════════════════════════════════════════════════════════════════════════
# CommitCache
# ═══════════════════════════════════════════════════════════════════════════


@pytest.mark.anyio
class TestCommitCache:
    async def test_miss_then_hit(self, commit_cache: CommitCache):
        assert await commit_cache.get("cache:t:commits:") is None

        await commit_cache.set("cache:t:commits:", {"totalCommits": 3})

        assert await commit_cache.get("cache:t:commits:") == {"totalCommits": 3}

    async def test_entry_expires_at_ttl(self, commit_cache: CommitCache, clock):
        await commit_cache.set("k", {"v": 1}, ttl_seconds=1800)

        clock.advance(1799)
        assert await commit_cache.get("k") == {"v": 1}

        clock.advance(1)
        assert await commit_cache.get("k") is None

    async def test_default_ttl_is_one_hour(self, commit_cache: CommitCache, kv_store, clock):
        await commit_cache.set("k", {"v": 1})

        envelope = await kv_store.get("k")
        assert envelope["expiresAt"] == int(clock.now * 1000) + 3600 * 1000

    async def test_returned_payload_is_a_copy(self, commit_cache: CommitCache):
        payload = {"groups": []}
        await commit_cache.set("k", payload)
        payload["groups"].append("mutated")

        assert await commit_cache.get("k") == {"groups": []}

    async def test_malformed_envelope_is_a_miss(self, commit_cache: CommitCache, kv_store):
        await kv_store.put("k", ["not", "an", "envelope"])

        assert await commit_cache.get("k") is None

    @pytest.mark.parametrize("expires_at", ["soon", None, [1]])
    async def test_non_numeric_expiry_is_a_miss(self, commit_cache: CommitCache, kv_store, expires_at):
        await kv_store.put("k", {"data": {"x": 1}, "expiresAt": expires_at})

        assert await commit_cache.get("k") is None

    async def test_store_read_failure_is_a_miss(self):
        cache = CommitCache(_failing_store())

        assert await cache.get("k") is None

    async def test_store_write_failure_is_swallowed(self):
        cache = CommitCache(_failing_store())

        await cache.set("k", {"v": 1})

    async def test_invalidate_tenant(self, commit_cache: CommitCache, kv_store):
        await commit_cache.set(make_cache_key("alice", "commits", {"groupBy": "week"}), {"a": 1})
        await commit_cache.set(make_cache_key("alice", "weeks", {}), {"a": 2})
        await commit_cache.set(make_cache_key("bob", "commits", {"groupBy": "week"}), {"b": 1})
        await kv_store.put("user:alice:repos", ["api"])

        removed = await commit_cache.invalidate_tenant("alice")

        assert removed == 2
        assert await commit_cache.get(make_cache_key("bob", "commits", {"groupBy": "week"})) == {"b": 1}
        assert await kv_store.get("user:alice:repos") == ["api"]

    async def test_invalidate_failure_returns_zero(self):
        assert await CommitCache(_failing_store()).invalidate_tenant("alice") == 0


# ═══════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════


@pytest.mark.anyio
class TestMemoryKeyValueStore:
    async def test_put_get_delete_prefix(self):
        store = MemoryKeyValueStore(maxsize=8)
        await store.put("cache:a:1", {"x": 1}, 60)
        await store.put("cache:a:2", {"x": 2})
        await store.put("cache:b:1", {"x": 3}, 60)

        assert await store.get("cache:a:1") == {"x": 1}
        assert await store.delete_prefix("cache:a:") == 2
        assert await store.get("cache:a:2") is None
        assert len(store) == 1

    async def test_evicts_beyond_maxsize(self):
        store = MemoryKeyValueStore(maxsize=2)
        for i in range(3):
            await store.put(f"k{i}", i, 60)

        assert len(store) == 2


@pytest.mark.anyio
class TestRedisKeyValueStore:
    async def test_get_put_json(self):
        client = MagicMock()
        client.get = AsyncMock(return_value='{"data": 1}')
        client.set = AsyncMock()
        store = RedisKeyValueStore(client)

        assert await store.get("k") == {"data": 1}
        await store.put("k", {"data": 1}, 3600)

        client.set.assert_awaited_once_with("k", '{"data": 1}', ex=3600)

    async def test_missing_key(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)

        assert await RedisKeyValueStore(client).get("k") is None

    async def test_delete_prefix_scans(self):
        async def scan_iter(match, count):
            assert match == "cache:alice:*"
            for key in ("cache:alice:1", "cache:alice:2"):
                yield key

        client = MagicMock()
        client.scan_iter = scan_iter
        client.delete = AsyncMock(return_value=1)

        assert await RedisKeyValueStore(client).delete_prefix("cache:alice:") == 2
