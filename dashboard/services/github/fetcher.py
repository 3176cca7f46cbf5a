"""
Concurrent commit fetching across repositories.

Every repository is fetched in parallel. A repository whose fetch fails with a
GitHub API or transport error contributes nothing and is logged; the others
still make it into the result. The outcome for each repository is kept in
MultiRepoFetchResult.statuses so callers can tell a quiet repository from a
failed one.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

import httpx

from dashboard.services.github.exceptions import GitHubAPIError
from dashboard.services.github.read_operations import GitHubReadOperations
from dashboard.services.github.types import (
    MultiRepoFetchResult,
    RepoCommits,
    RepoFetchStatus,
    RepoRef,
)

logger = logging.getLogger(__name__)

# Per-repo failures that degrade to an empty contribution
ISOLATED_ERRORS: tuple[type[BaseException], ...] = (GitHubAPIError, httpx.HTTPError)


def normalize_repos(
    repos: Iterable[RepoRef | str | Mapping[str, Any]],
    default_owner: str,
) -> list[RepoRef]:
    """Normalize mixed repository references, dropping exact duplicates."""
    seen: set[RepoRef] = set()
    refs: list[RepoRef] = []
    for value in repos:
        ref = RepoRef.parse(value, default_owner)
        if ref not in seen:
            seen.add(ref)
            refs.append(ref)
    return refs


async def fetch_all_commits(
    github: GitHubReadOperations,
    repos: Iterable[RepoRef | str | Mapping[str, Any]],
    since: date | None = None,
    until: date | None = None,
    default_owner: str = "",
) -> MultiRepoFetchResult:
    """
    Fetch commits from all repositories concurrently and flatten them.

    Args:
        github: Read operations bound to the tenant's credential
        repos: Repository references in any accepted shape
        since: First calendar day to include
        until: Last calendar day to include (inclusive)
        default_owner: Owner used for bare repository names

    Returns:
        MultiRepoFetchResult with commits in no particular order

    Raises:
        UpstreamPayloadError: Malformed GitHub payloads are not absorbed
    """
    refs = normalize_repos(repos, default_owner)

    results = await asyncio.gather(
        *[github.get_repo_commits(ref, since=since, until=until) for ref in refs],
        return_exceptions=True,
    )

    merged = MultiRepoFetchResult()
    for ref, result in zip(refs, results, strict=True):
        if isinstance(result, ISOLATED_ERRORS):
            logger.error(f"Error fetching commits from {ref.full_name}: {result}")
            merged.statuses[ref.full_name] = RepoFetchStatus(status="error", reason=str(result))
            continue
        if isinstance(result, BaseException):
            raise result

        repo_commits: RepoCommits = result
        merged.commits.extend(repo_commits.commits)
        merged.statuses[ref.full_name] = RepoFetchStatus(
            status=repo_commits.status,
            commit_count=len(repo_commits.commits),
            reason="rate limited" if repo_commits.status == "rate_limited" else None,
        )

    if merged.failed_repos:
        logger.warning(
            f"{len(merged.failed_repos)} of {len(refs)} repositories failed: "
            f"{', '.join(merged.failed_repos)}"
        )
    logger.info(f"Total commits fetched: {len(merged.commits)} from {len(refs)} repositories")
    return merged
