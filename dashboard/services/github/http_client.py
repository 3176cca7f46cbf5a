"""
Process-wide HTTP client for the commit fan-out.

One commits query opens a request per selected repository, all at once, and
many tenants query concurrently. They all share this pooled client; the pool
size caps how many GitHub connections the process holds.
"""

import logging

import httpx

from dashboard.config import settings

logger = logging.getLogger(__name__)

# Pool sized for a tenant's repository fan-out plus a few concurrent tenants
_POOL_LIMITS = httpx.Limits(max_connections=20, max_keepalive_connections=10)
_TIMEOUT = httpx.Timeout(30.0, connect=5.0)

_client: httpx.AsyncClient | None = None


def get_github_client() -> httpx.AsyncClient:
    """
    Shared AsyncClient for GitHub calls, created on first use.

    Carries no credential: GitHubReadOperations sends each tenant's token as a
    per-request header. A client closed by shutdown is replaced on next use.
    """
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=_TIMEOUT,
            limits=_POOL_LIMITS,
            http2=True,
            headers={"User-Agent": settings.github_user_agent},
        )
        logger.debug(
            f"Opened GitHub client (max {_POOL_LIMITS.max_connections} connections, http2)"
        )
    return _client


async def close_github_client() -> None:
    """Close the shared client; called from the app lifespan on shutdown."""
    global _client
    if _client is None:
        return
    if not _client.is_closed:
        await _client.aclose()
        logger.debug("Closed GitHub client")
    _client = None
