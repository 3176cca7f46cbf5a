"""
GitHub service package.

Usage: `from dashboard.services.github import GitHubReadOperations, fetch_all_commits`

Module structure:
- read_operations.py: Commit history and repository listing calls
- fetcher.py: Concurrent multi-repository commit fetch
- helpers.py: Rate limit, pagination and error utilities
- http_client.py: Shared AsyncClient lifecycle
- types.py: RepoRef, Commit and fetch result types
- exceptions.py: Custom exceptions
"""

from dashboard.services.github.exceptions import GitHubAPIError, UpstreamPayloadError
from dashboard.services.github.fetcher import fetch_all_commits, normalize_repos
from dashboard.services.github.helpers import RateLimitInfo, get_next_page_url
from dashboard.services.github.http_client import close_github_client
from dashboard.services.github.read_operations import GitHubReadOperations
from dashboard.services.github.types import (
    Commit,
    GitHubRepo,
    MultiRepoFetchResult,
    RepoCommits,
    RepoFetchStatus,
    RepoRef,
)

__all__ = [
    # Operations
    "GitHubReadOperations",
    "fetch_all_commits",
    "normalize_repos",
    # HTTP client lifecycle
    "close_github_client",
    # Utilities
    "RateLimitInfo",
    "get_next_page_url",
    # Exceptions
    "GitHubAPIError",
    "UpstreamPayloadError",
    # Types
    "Commit",
    "GitHubRepo",
    "MultiRepoFetchResult",
    "RepoCommits",
    "RepoFetchStatus",
    "RepoRef",
]
