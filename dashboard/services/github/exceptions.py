"""Exceptions for GitHub service."""


class GitHubAPIError(Exception):
    """Error from GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit_reset: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when rate limit resets
        super().__init__(message)


class UpstreamPayloadError(ValueError):
    """GitHub returned a body that does not have the shape of a commit listing.

    Not a per-repository API failure: the fetcher lets it propagate so that a
    broken payload is never mistaken for "this repository had no commits".
    """

    def __init__(self, repo_name: str, detail: str):
        self.repo_name = repo_name
        self.detail = detail
        super().__init__(f"Malformed commit payload from {repo_name}: {detail}")
