"""Exceptions raised by commit queries.

Only these (plus unexpected errors such as malformed GitHub payloads) leave the
query service; per-repository GitHub failures are absorbed by the fetcher.
The HTTP layer maps each one to a response code.
"""


class CommitQueryError(Exception):
    """Base class for fatal commit query failures."""

    def __init__(self, message: str, tenant_id: str | None = None):
        self.message = message
        self.tenant_id = tenant_id
        super().__init__(message)


class NoCredential(CommitQueryError):
    """Tenant has no usable GitHub credential; the user must re-authenticate."""

    def __init__(self, tenant_id: str):
        super().__init__("GitHub token not configured, please re-authenticate", tenant_id)


class NoRepositoriesConfigured(CommitQueryError):
    """Tenant has no repositories selected (distinct from a window with no commits)."""

    def __init__(self, tenant_id: str):
        super().__init__("No repositories selected", tenant_id)


class InvalidQuery(CommitQueryError):
    """Query parameters could not be interpreted."""
