"""
Commit query service.

Single entry point the HTTP routes call. For the commits query:
cache lookup -> resolve repositories -> fetch all repositories concurrently ->
search filter -> sort -> bucket -> shape payload -> cache write.

The service raises typed CommitQueryError subclasses and never builds HTTP
responses; the routes map errors to status codes.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any

from dashboard.config import settings
from dashboard.services.cache.commit_cache import CommitCache, make_cache_key, ttl_for
from dashboard.services.commits.bucketing import (
    filter_commits,
    group_commits,
    sort_commits,
    summarize_weeks,
)
from dashboard.services.commits.exceptions import (
    InvalidQuery,
    NoCredential,
    NoRepositoriesConfigured,
)
from dashboard.services.commits.types import CommitQuery
from dashboard.services.github.fetcher import fetch_all_commits
from dashboard.services.github.read_operations import GitHubReadOperations
from dashboard.services.github.types import RepoRef
from dashboard.services.tenants import TenantDirectory

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(UTC).date()


def years_before(day: date, years: int) -> date:
    """Same calendar day `years` earlier (Feb 29 falls back to Feb 28)."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def parse_day(value: str | None, field: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidQuery(f"{field}: expected YYYY-MM-DD, got {value!r}") from e


class CommitQueryService:
    """
    Turns tenant queries into grouped commit payloads.

    One instance per process: the optional single-flight map lives here.
    """

    def __init__(
        self,
        cache: CommitCache,
        tenants: TenantDirectory,
        github_factory: Callable[[str], GitHubReadOperations] = GitHubReadOperations,
        today: Callable[[], date] = utc_today,
        single_flight: bool | None = None,
        expose_repo_status: bool | None = None,
    ) -> None:
        self.cache = cache
        self.tenants = tenants
        self._github_factory = github_factory
        self._today = today
        self.single_flight = (
            settings.single_flight_enabled if single_flight is None else single_flight
        )
        self.expose_repo_status = (
            settings.expose_repo_status if expose_repo_status is None else expose_repo_status
        )
        self._inflight: dict[str, asyncio.Task[dict[str, Any]]] = {}

    # ─────────────────────────────────────────────────────────────────────
    # Shared steps
    # ─────────────────────────────────────────────────────────────────────

    async def _resolve_repos(
        self, tenant_id: str, requested: list[str] | None = None
    ) -> tuple[list[RepoRef], str]:
        """Tenant's configured repositories, narrowed to `requested` (short or full names)."""
        org = self.tenants.get_organization(tenant_id)
        refs: list[RepoRef] = []
        for raw in await self.tenants.get_repos(tenant_id):
            try:
                ref = RepoRef.parse(raw, org)
            except ValueError as e:
                logger.warning(f"Skipping repository entry for {tenant_id}: {e}")
                continue
            if ref not in refs:
                refs.append(ref)

        if requested:
            wanted = set(requested)
            refs = [r for r in refs if r.name in wanted or r.full_name in wanted]
        return refs, org

    async def _github_for(self, tenant_id: str) -> GitHubReadOperations:
        token = await self.tenants.get_credential(tenant_id)
        if not token:
            raise NoCredential(tenant_id)
        return self._github_factory(token)

    async def _run_once(
        self, key: str, compute: Callable[[], Awaitable[dict[str, Any]]]
    ) -> dict[str, Any]:
        """Run `compute`, sharing one in-flight run per cache key when single-flight is on."""
        if not self.single_flight:
            return await compute()

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(compute())
            self._inflight[key] = task

            def _forget(done: asyncio.Task[dict[str, Any]]) -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]

            task.add_done_callback(_forget)
        else:
            logger.debug(f"Joining in-flight computation for {key}")
        # A cancelled waiter leaves the shared computation running for the others
        return await asyncio.shield(task)

    # ─────────────────────────────────────────────────────────────────────
    # Grouped commits
    # ─────────────────────────────────────────────────────────────────────

    async def query_commits(self, tenant_id: str, query: CommitQuery) -> dict[str, Any]:
        """
        Grouped commit history for a tenant.

        Returns:
            {"groups": [...], "totalCommits", "totalGroups",
             "dateRange": {"from", "to"}, "filters": {...}}

        Raises:
            NoRepositoriesConfigured: Tenant selected no repositories (or none match the filter)
            NoCredential: Tenant has no GitHub token
            InvalidQuery: Unparseable or inverted date bounds
        """
        key = make_cache_key(tenant_id, "commits", query.cache_params())
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        return await self._run_once(key, lambda: self._compute_commits(tenant_id, query, key))

    async def _compute_commits(
        self, tenant_id: str, query: CommitQuery, key: str
    ) -> dict[str, Any]:
        refs, org = await self._resolve_repos(tenant_id, query.repos)
        if not refs:
            raise NoRepositoriesConfigured(tenant_id)
        github = await self._github_for(tenant_id)

        today = self._today()
        since = parse_day(query.date_from, "from") or years_before(
            today, settings.default_lookback_years
        )
        until = parse_day(query.date_to, "to") or today
        if since > until:
            raise InvalidQuery(f"from ({since}) is after to ({until})")

        fetched = await fetch_all_commits(github, refs, since=since, until=until, default_owner=org)

        commits = filter_commits(fetched.commits, query.search)
        commits = sort_commits(commits, query.sort_by, query.sort_order)
        buckets = group_commits(commits, query.group_by, query.sort_order)

        payload: dict[str, Any] = {
            "groups": [b.to_dict() for b in buckets],
            "totalCommits": len(commits),
            "totalGroups": len(buckets),
            "dateRange": {"from": since.isoformat(), "to": until.isoformat()},
            "filters": {
                "groupBy": query.group_by,
                "repos": query.repos if query.repos else [r.full_name for r in refs],
                "sortBy": query.sort_by,
                "sortOrder": query.sort_order,
                "search": query.search,
            },
        }
        if self.expose_repo_status:
            payload["repoStatus"] = {
                name: status.to_dict() for name, status in fetched.statuses.items()
            }

        await self.cache.set(key, payload, ttl_for(len(commits)))
        return payload

    # ─────────────────────────────────────────────────────────────────────
    # Week overview and detail
    # ─────────────────────────────────────────────────────────────────────

    async def summarize_weeks(
        self,
        tenant_id: str,
        repo: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> dict[str, Any]:
        """Per-week commit counts and repositories, newest week first."""
        key = make_cache_key(tenant_id, "weeks", {"from": date_from, "to": date_to, "repo": repo})
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        requested = [r.strip() for r in repo.split(",") if r.strip()] if repo else None
        refs, org = await self._resolve_repos(tenant_id, requested)
        if not refs:
            raise NoRepositoriesConfigured(tenant_id)
        github = await self._github_for(tenant_id)

        fetched = await fetch_all_commits(
            github,
            refs,
            since=parse_day(date_from, "from"),
            until=parse_day(date_to, "to"),
            default_owner=org,
        )
        payload = {"weeks": summarize_weeks(fetched.commits)}
        await self.cache.set(key, payload, ttl_for(len(fetched.commits)))
        return payload

    async def get_week_detail(self, tenant_id: str, week_id: str) -> dict[str, Any]:
        """Commits of one Monday-to-Sunday week, grouped by repository."""
        start = parse_day(week_id, "weekId")
        if start is None or start.weekday() != 0:
            raise InvalidQuery(f"weekId must be a Monday date, got {week_id!r}")
        end = start + timedelta(days=6)

        key = make_cache_key(tenant_id, f"week-{week_id}")
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        refs, org = await self._resolve_repos(tenant_id)
        if not refs:
            raise NoRepositoriesConfigured(tenant_id)
        github = await self._github_for(tenant_id)

        fetched = await fetch_all_commits(github, refs, since=start, until=end, default_owner=org)

        by_repo: dict[str, list[dict[str, str]]] = {}
        for commit in fetched.commits:
            if not start <= commit.timestamp.date() <= end:
                continue
            by_repo.setdefault(commit.repo, []).append(
                {
                    "sha": commit.sha,
                    "message": commit.message,
                    "author": commit.author,
                    "date": commit.date,
                    "url": commit.url,
                }
            )

        payload = {
            "weekId": week_id,
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "repos": by_repo,
        }
        await self.cache.set(key, payload, ttl_for(sum(len(v) for v in by_repo.values())))
        return payload

    # ─────────────────────────────────────────────────────────────────────
    # Repositories and invalidation
    # ─────────────────────────────────────────────────────────────────────

    async def list_configured_repos(self, tenant_id: str) -> dict[str, Any]:
        """Repositories the tenant selected, normalized for display."""
        org = self.tenants.get_organization(tenant_id)
        repos = []
        for raw in await self.tenants.get_repos(tenant_id):
            try:
                ref = RepoRef.parse(raw, org)
            except ValueError as e:
                logger.warning(f"Skipping repository entry for {tenant_id}: {e}")
                continue
            display = raw.get("displayName") if isinstance(raw, Mapping) else None
            repos.append(
                {"name": ref.name, "fullName": ref.full_name, "displayName": display or ref.name}
            )
        return {"organization": org, "repos": repos}

    async def save_configured_repos(self, tenant_id: str, repos: list[Any]) -> dict[str, Any]:
        """
        Replace the tenant's repository selection.

        Every entry must parse as a repository reference; duplicates are
        dropped. Cached payloads were computed for the old selection, so the
        tenant's cache is invalidated.

        Raises:
            InvalidQuery: An entry is not a repository reference
        """
        org = self.tenants.get_organization(tenant_id)
        selection: list[dict[str, str]] = []
        seen: set[RepoRef] = set()
        for raw in repos:
            try:
                ref = RepoRef.parse(raw, org)
            except ValueError as e:
                raise InvalidQuery(str(e)) from e
            if ref in seen:
                continue
            seen.add(ref)
            display = raw.get("displayName") if isinstance(raw, Mapping) else None
            selection.append(
                {"name": ref.name, "fullName": ref.full_name, "displayName": display or ref.name}
            )

        await self.tenants.save_repos(tenant_id, selection)
        await self.cache.invalidate_tenant(tenant_id)
        logger.info(f"Saved {len(selection)} repositories for {tenant_id}")
        return {"success": True, "repos": selection}

    async def list_available_repos(self, tenant_id: str) -> dict[str, Any]:
        """Repositories the tenant's GitHub token can access, for selection."""
        github = await self._github_for(tenant_id)
        repos = await github.get_user_repos()
        return {"repos": [r.to_dict() for r in repos]}

    async def invalidate(self, tenant_id: str) -> int:
        """Best-effort drop of a tenant's cached payloads (push webhook)."""
        return await self.cache.invalidate_tenant(tenant_id)
