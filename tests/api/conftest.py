"""API test fixtures: a signed-in tenant and an HTTP client over the app.

The query service runs for real over the in-memory store; only the GitHub
read operations are replaced by FakeGitHub.
"""

from __future__ import annotations

import time
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from dashboard.services.commits import CommitQueryService
from dashboard.services.tenants import KVTenantDirectory
from tests.helpers.factories import SESSION_TOKEN, FakeGitHub, github_factory, make_commit

TENANT = "acme"


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub(
        commits={
            "acme/api": [
                make_commit(sha="a1", repo="api", message="Fix login bug", date="2025-01-06T10:00:00Z"),
                make_commit(sha="a2", repo="api", message="Add search", date="2025-02-04T10:00:00Z"),
            ],
            "acme/web": [
                make_commit(sha="w1", repo="web", message="Style header", date="2025-01-08T10:00:00Z"),
            ],
        }
    )


@pytest.fixture
async def tenant_directory(kv_store) -> KVTenantDirectory:
    """Tenant with a live session, a GitHub token and two selected repositories."""
    tenants = KVTenantDirectory(kv_store)
    await kv_store.put(
        f"session:{SESSION_TOKEN}",
        {"userId": TENANT, "expires": (time.time() + 3600) * 1000},
    )
    await kv_store.put(f"user:{TENANT}:token", {"token": "ghp_acme"})
    await tenants.save_repos(TENANT, ["api", {"name": "web", "fullName": "acme/web"}])
    return tenants


@pytest.fixture
def query_service(commit_cache, tenant_directory, fake_github) -> CommitQueryService:
    factory, _ = github_factory(fake_github)
    return CommitQueryService(
        cache=commit_cache,
        tenants=tenant_directory,
        github_factory=factory,
        today=lambda: date(2026, 10, 18),
    )


@pytest.fixture
async def anon_client(kv_store, query_service):
    """HTTP client without a session.

    Overrides: get_kv_store, get_commit_query_service
    """
    from dashboard.api.deps import get_commit_query_service, get_kv_store
    from dashboard.main import app

    app.dependency_overrides[get_kv_store] = lambda: kv_store
    app.dependency_overrides[get_commit_query_service] = lambda: query_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def api_client(anon_client):
    """HTTP client carrying the tenant's session cookie."""
    anon_client.cookies.set("eoyr_session", SESSION_TOKEN)
    yield anon_client
