"""
GitHub API helper utilities.

Provides rate limit detection, Link header pagination and error response
processing for GitHub API calls.
"""

import logging
import re

import httpx

from dashboard.services.github.exceptions import GitHubAPIError

logger = logging.getLogger(__name__)

# Status codes GitHub uses to signal "too many requests"
RATE_LIMIT_STATUS_CODES = frozenset({403, 429})

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get("X-RateLimit-Remaining")
        self.reset = response.headers.get("X-RateLimit-Reset")
        self.retry_after = response.headers.get("Retry-After")

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        return int(self.reset) if self.reset else None

    @property
    def retry_after_seconds(self) -> int | None:
        """Get Retry-After as seconds, or None if absent or not numeric."""
        if self.retry_after and self.retry_after.isdigit():
            return int(self.retry_after)
        return None

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining is not None and int(self.remaining) == 0


def is_rate_limited(response: httpx.Response) -> bool:
    """Check whether GitHub answered with a rate-limit status (403 or 429)."""
    return response.status_code in RATE_LIMIT_STATUS_CODES


def get_next_page_url(link_header: str | None) -> str | None:
    """
    Extract the rel="next" URL from a GitHub Link header.

    Args:
        link_header: Raw Link header, e.g.
            '<https://api.github.com/...&page=2>; rel="next", <...>; rel="last"'

    Returns:
        The next page URL, or None when there is no next page
    """
    if not link_header:
        return None

    for link in link_header.split(","):
        match = _NEXT_LINK_RE.search(link)
        if match:
            return match.group(1)
    return None


def handle_error_response(response: httpx.Response, repo_name: str) -> None:
    """
    Handle non-success responses from GitHub API.

    Rate-limit statuses are expected to be checked by the caller first; this
    raises for everything else that is not a 200.

    Args:
        response: The HTTP response from GitHub API
        repo_name: Repository name for error context (format: "owner/repo")

    Raises:
        GitHubAPIError: For authentication, authorization, or other API errors
    """
    rate_info = RateLimitInfo(response)

    if response.status_code == 200:
        return
    if response.status_code == 401:
        raise GitHubAPIError("Invalid or expired GitHub token", 401)
    if response.status_code == 404:
        raise GitHubAPIError(f"Repository or resource not found: {repo_name}", 404)
    if response.status_code in RATE_LIMIT_STATUS_CODES:
        raise GitHubAPIError(
            "GitHub API rate limit exceeded",
            response.status_code,
            rate_limit_reset=rate_info.reset_timestamp,
        )
    raise GitHubAPIError(
        f"GitHub API error: {response.status_code} - {response.text[:200]}",
        response.status_code,
    )
