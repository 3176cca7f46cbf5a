"""
GitHub API read operations.

Provides the read-only calls the dashboard needs:
- Commit history for one repository (paginated, date-windowed)
- Repositories the authenticated user can select
"""

import logging
from datetime import date, timedelta
from typing import Any

from dashboard.config import settings
from dashboard.services.github.exceptions import UpstreamPayloadError
from dashboard.services.github.helpers import (
    RateLimitInfo,
    get_next_page_url,
    handle_error_response,
    is_rate_limited,
)
from dashboard.services.github.http_client import get_github_client
from dashboard.services.github.types import Commit, GitHubRepo, RepoCommits, RepoRef

logger = logging.getLogger(__name__)


def _day_start(day: date) -> str:
    return f"{day.isoformat()}T00:00:00Z"


class GitHubReadOperations:
    """
    Read-only operations for GitHub API.

    One instance per credential. Uses the shared HTTP client singleton so
    concurrent per-repository fetches reuse pooled connections.
    """

    def __init__(self, token: str):
        self.token = token
        self.base_url = settings.github_api_base.rstrip("/")
        self.per_page = settings.github_per_page
        self.max_pages = settings.github_max_pages
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.github_api_version,
        }

    def _normalize_commit(self, data: Any, repo: RepoRef) -> Commit:
        """Convert a list-commits item to a Commit, annotated with repo/org."""
        if not isinstance(data, dict):
            raise UpstreamPayloadError(repo.full_name, "commit entry is not an object")

        commit_node = data.get("commit")
        sha = data.get("sha")
        if not isinstance(commit_node, dict) or not sha:
            raise UpstreamPayloadError(repo.full_name, "commit entry missing sha or commit")

        author = commit_node.get("author") or {}
        authored_at = author.get("date")
        if not authored_at:
            raise UpstreamPayloadError(repo.full_name, f"commit {sha} has no author date")

        return Commit(
            sha=sha,
            message=commit_node.get("message") or "",
            author=author.get("name") or "",
            author_email=author.get("email") or "",
            date=authored_at,
            repo=repo.name,
            org=repo.owner,
            url=data.get("html_url") or "",
        )

    async def get_repo_commits(
        self,
        repo: RepoRef,
        since: date | None = None,
        until: date | None = None,
    ) -> RepoCommits:
        """
        Fetch all commits for a repository inside an optional date window.

        `until` is inclusive of the whole day, so the request bound is the
        start of the following day. Pagination follows the Link header and
        stops on a short page, a missing next link, or the page ceiling.

        A 403/429 stops pagination and returns what was collected so far
        with status "rate_limited" rather than raising.

        Args:
            repo: Repository to read
            since: First calendar day to include
            until: Last calendar day to include

        Returns:
            RepoCommits with commits in GitHub's order (newest first)

        Raises:
            GitHubAPIError: For any other non-200 response
            UpstreamPayloadError: If a page is not a list of commit objects
        """
        params: dict[str, str | int] | None = {"per_page": self.per_page}
        if since:
            params["since"] = _day_start(since)
        if until:
            params["until"] = _day_start(until + timedelta(days=1))

        client = get_github_client()
        url: str | None = f"{self.base_url}/repos/{repo.owner}/{repo.name}/commits"
        result = RepoCommits(repo=repo, commits=[])

        logger.debug(f"Fetching commits for {repo.full_name}, since={since}, until={until}")

        while url is not None and result.pages < self.max_pages:
            response = await client.get(url, headers=self._headers, params=params)
            # The next link already carries the query string
            params = None

            if is_rate_limited(response):
                rate_info = RateLimitInfo(response)
                logger.warning(
                    f"Rate limited for {repo.full_name} "
                    f"(status {response.status_code}, retry after "
                    f"{rate_info.retry_after or '60'}s, remaining: {rate_info.remaining}); "
                    f"keeping {len(result.commits)} commits"
                )
                result.status = "rate_limited"
                result.retry_after = rate_info.retry_after_seconds
                return result

            handle_error_response(response, repo.full_name)

            try:
                page = response.json()
            except ValueError as e:
                raise UpstreamPayloadError(repo.full_name, "response is not JSON") from e
            if not isinstance(page, list):
                raise UpstreamPayloadError(repo.full_name, "expected a list of commits")

            result.commits.extend(self._normalize_commit(item, repo) for item in page)
            result.pages += 1

            if len(page) < self.per_page:
                url = None
                break
            url = get_next_page_url(response.headers.get("Link"))

        result.truncated = url is not None
        if result.truncated:
            logger.info(
                f"Stopped {repo.full_name} at the {self.max_pages}-page ceiling "
                f"with {len(result.commits)} commits"
            )
        logger.info(
            f"Fetched {len(result.commits)} commits from {repo.full_name} ({result.pages} pages)"
        )
        return result

    async def get_user_repos(self) -> list[GitHubRepo]:
        """
        Fetch repositories the authenticated user can access, most recently updated first.

        Returns:
            List of GitHubRepo, at most repo_list_max_pages * per_page entries

        Raises:
            GitHubAPIError: For any non-200 response, with the rate-limit reset on 403/429
        """
        client = get_github_client()
        url: str | None = f"{self.base_url}/user/repos"
        params: dict[str, str | int] | None = {"per_page": self.per_page, "sort": "updated"}
        repos: list[GitHubRepo] = []
        pages = 0

        while url is not None and pages < settings.github_repo_list_max_pages:
            response = await client.get(url, headers=self._headers, params=params)
            params = None

            handle_error_response(response, "user repositories")

            data = response.json()
            repos.extend(
                GitHubRepo(
                    name=r["name"],
                    full_name=r["full_name"],
                    private=r.get("private", False),
                    description=r.get("description"),
                    updated_at=r.get("updated_at"),
                )
                for r in data
            )
            pages += 1

            if len(data) < self.per_page:
                break
            url = get_next_page_url(response.headers.get("Link"))

        return repos
