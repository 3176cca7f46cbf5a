"""Tenant records kept in the key-value store.

Sessions and GitHub tokens are written by the OAuth flow; the query service
only reads them. Repository selections are written through the query service.

Layout:
    session:{token}       -> {"userId": ..., "expires": epoch-ms}
    user:{id}:token       -> {"token": ...}
    user:{id}:repos       -> ["name" | "owner/name" | {"name", "fullName", ...}, ...]
"""

import logging
import time
from typing import Any, Protocol

from dashboard.services.cache.stores import KeyValueStore

logger = logging.getLogger(__name__)


class TenantDirectory(Protocol):
    """What the query service needs to know about a tenant."""

    async def get_credential(self, tenant_id: str) -> str | None: ...

    async def get_repos(self, tenant_id: str) -> list[Any]: ...

    async def save_repos(self, tenant_id: str, repos: list[Any]) -> None: ...

    def get_organization(self, tenant_id: str) -> str: ...


class KVTenantDirectory:
    """Tenant directory backed by the shared key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def get_tenant_for_session(self, session_token: str) -> str | None:
        """Resolve a session token to a tenant id, or None if unknown or expired."""
        try:
            session = await self.store.get(f"session:{session_token}")
        except Exception as e:
            logger.error(f"Error reading session: {e}")
            return None
        if not session or session.get("expires", 0) < time.time() * 1000:
            return None
        return session.get("userId")

    async def get_credential(self, tenant_id: str) -> str | None:
        try:
            token_data = await self.store.get(f"user:{tenant_id}:token")
        except Exception as e:
            logger.error(f"Error reading user token for {tenant_id}: {e}")
            return None
        if not token_data:
            return None
        return token_data.get("token") or None

    async def get_repos(self, tenant_id: str) -> list[Any]:
        try:
            repos = await self.store.get(f"user:{tenant_id}:repos")
        except Exception as e:
            logger.error(f"Error reading user repos for {tenant_id}: {e}")
            return []
        return list(repos or [])

    async def save_repos(self, tenant_id: str, repos: list[Any]) -> None:
        await self.store.put(f"user:{tenant_id}:repos", repos)

    def get_organization(self, tenant_id: str) -> str:
        """Owner assumed for bare repository names: the user's own account."""
        return tenant_id
