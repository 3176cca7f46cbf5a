"""Unit tests for the concurrent multi-repository fetch and repo references."""

from __future__ import annotations

import asyncio
from datetime import date

import anyio
import httpx
import pytest

from dashboard.services.github.exceptions import GitHubAPIError, UpstreamPayloadError
from dashboard.services.github.fetcher import fetch_all_commits, normalize_repos
from dashboard.services.github.types import RepoRef
from tests.helpers.factories import FakeGitHub, make_commit


# ═══════════════════════════════════════════════════════════════════════════
# RepoRef
# ═══════════════════════════════════════════════════════════════════════════


class TestRepoRef:
    def test_bare_name_uses_default_owner(self):
        assert RepoRef.parse("api", "acme") == RepoRef("acme", "api")

    def test_full_name(self):
        ref = RepoRef.parse("other/web", "acme")
        assert ref == RepoRef("other", "web")
        assert ref.full_name == "other/web"

    def test_selector_record(self):
        record = {"name": "web", "fullName": "other/web", "displayName": "Website"}
        assert RepoRef.parse(record, "acme") == RepoRef("other", "web")

    def test_github_repo_payload_with_owner_object(self):
        record = {"name": "web", "owner": {"login": "other"}}
        assert RepoRef.parse(record, "acme") == RepoRef("other", "web")

    def test_name_only_record(self):
        assert RepoRef.parse({"name": "api"}, "acme") == RepoRef("acme", "api")

    @pytest.mark.parametrize("value", ["", "   ", "a/b/c", "/api", "acme/", {}, 42, None])
    def test_rejects_invalid_references(self, value):
        with pytest.raises(ValueError):
            RepoRef.parse(value, "acme")

    def test_normalize_repos_deduplicates(self):
        refs = normalize_repos(["api", "acme/api", {"fullName": "acme/web"}], "acme")
        assert refs == [RepoRef("acme", "api"), RepoRef("acme", "web")]


# ═══════════════════════════════════════════════════════════════════════════
# fetch_all_commits
# ═══════════════════════════════════════════════════════════════════════════


@pytest.mark.anyio
class TestFetchAllCommits:
    async def test_flattens_all_repositories(self):
        github = FakeGitHub(
            commits={
                "acme/api": [make_commit(sha="a1"), make_commit(sha="a2")],
                "acme/web": [make_commit(sha="w1", repo="web")],
            }
        )

        result = await fetch_all_commits(github, ["api", "web"], default_owner="acme")

        assert sorted(c.sha for c in result.commits) == ["a1", "a2", "w1"]
        assert result.statuses["acme/api"].commit_count == 2
        assert result.statuses["acme/web"].status == "ok"
        assert result.is_partial is False

    async def test_passes_window_to_every_repository(self):
        github = FakeGitHub()

        await fetch_all_commits(
            github,
            ["api", "web"],
            since=date(2025, 1, 1),
            until=date(2025, 1, 31),
            default_owner="acme",
        )

        assert sorted(github.calls) == [
            ("acme/api", date(2025, 1, 1), date(2025, 1, 31)),
            ("acme/web", date(2025, 1, 1), date(2025, 1, 31)),
        ]

    async def test_failed_repository_is_isolated(self):
        github = FakeGitHub(
            commits={
                "acme/a": [make_commit(sha="a1", repo="a")],
                "acme/c": [make_commit(sha="c1", repo="c")],
            },
            failures={"acme/b": GitHubAPIError("Repository or resource not found: acme/b", 404)},
        )

        result = await fetch_all_commits(github, ["a", "b", "c"], default_owner="acme")

        assert sorted(c.sha for c in result.commits) == ["a1", "c1"]
        assert result.failed_repos == ["acme/b"]
        assert result.statuses["acme/b"].status == "error"
        assert "not found" in result.statuses["acme/b"].reason
        assert result.is_partial is True

    async def test_transport_error_is_isolated(self):
        github = FakeGitHub(
            commits={"acme/a": [make_commit(sha="a1", repo="a")]},
            failures={"acme/b": httpx.ConnectError("connection refused")},
        )

        result = await fetch_all_commits(github, ["a", "b"], default_owner="acme")

        assert [c.sha for c in result.commits] == ["a1"]
        assert result.failed_repos == ["acme/b"]

    async def test_rate_limited_repository_is_reported(self):
        github = FakeGitHub(
            commits={"acme/a": [make_commit(sha="a1", repo="a")]},
            statuses={"acme/a": "rate_limited"},
        )

        result = await fetch_all_commits(github, ["a"], default_owner="acme")

        assert [c.sha for c in result.commits] == ["a1"]
        assert result.statuses["acme/a"].status == "rate_limited"
        assert result.statuses["acme/a"].reason == "rate limited"
        assert result.failed_repos == []
        assert result.is_partial is True

    async def test_malformed_payload_propagates(self):
        github = FakeGitHub(failures={"acme/a": UpstreamPayloadError("acme/a", "expected a list")})

        with pytest.raises(UpstreamPayloadError):
            await fetch_all_commits(github, ["a", "b"], default_owner="acme")

    async def test_all_failing_yields_empty(self):
        github = FakeGitHub(
            failures={
                "acme/a": GitHubAPIError("boom", 500),
                "acme/b": GitHubAPIError("boom", 500),
            }
        )

        result = await fetch_all_commits(github, ["a", "b"], default_owner="acme")

        assert result.commits == []
        assert sorted(result.failed_repos) == ["acme/a", "acme/b"]

    async def test_no_repositories(self):
        result = await fetch_all_commits(FakeGitHub(), [], default_owner="acme")

        assert result.commits == []
        assert result.statuses == {}

    async def test_fetches_run_concurrently(self):
        # Every fetch blocks on one gate; only concurrent fetches can all start
        gate = asyncio.Event()
        github = FakeGitHub(gate=gate)

        task = asyncio.ensure_future(
            fetch_all_commits(github, ["a", "b", "c"], default_owner="acme")
        )
        with anyio.fail_after(1):
            while len(github.calls) < 3:
                await asyncio.sleep(0)
        gate.set()
        result = await task

        assert len(result.statuses) == 3
