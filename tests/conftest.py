"""Root conftest: test infrastructure for all backend tests.

Provides:
- anyio backend pinned to asyncio
- Settings reset so tests never read a developer's .env overrides
- In-memory key-value store and commit cache
"""

from __future__ import annotations

import pytest

from dashboard.config.settings import settings
from dashboard.services.cache import CommitCache, MemoryKeyValueStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def default_settings(monkeypatch: pytest.MonkeyPatch):
    """Pin the settings the tests depend on to their documented defaults."""
    monkeypatch.setattr(settings, "github_api_base", "https://api.github.com")
    monkeypatch.setattr(settings, "github_per_page", 100)
    monkeypatch.setattr(settings, "github_max_pages", 20)
    monkeypatch.setattr(settings, "cache_ttl_seconds", 3600)
    monkeypatch.setattr(settings, "cache_large_ttl_seconds", 1800)
    monkeypatch.setattr(settings, "cache_large_threshold", 500)
    monkeypatch.setattr(settings, "default_lookback_years", 2)
    monkeypatch.setattr(settings, "single_flight_enabled", False)
    monkeypatch.setattr(settings, "expose_repo_status", False)
    monkeypatch.setattr(settings, "webhook_secret", "")
    return settings


# ─────────────────────────────────────────────────────────────────────────────
# Cache
# ─────────────────────────────────────────────────────────────────────────────


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore(maxsize=256)


@pytest.fixture
def commit_cache(kv_store: MemoryKeyValueStore, clock: FakeClock) -> CommitCache:
    return CommitCache(kv_store, clock=clock)
