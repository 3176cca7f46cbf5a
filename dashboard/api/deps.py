from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dashboard.config import settings
from dashboard.core.exceptions import NotAuthenticatedError
from dashboard.services.cache import CommitCache, KeyValueStore, get_store
from dashboard.services.commits import CommitQueryService
from dashboard.services.tenants import KVTenantDirectory

security = HTTPBearer(auto_error=False)

# Process-wide service; holds the single-flight map when enabled
_query_service: CommitQueryService | None = None


def get_kv_store() -> KeyValueStore:
    return get_store()


def get_tenant_directory(store: KeyValueStore = Depends(get_kv_store)) -> KVTenantDirectory:
    return KVTenantDirectory(store)


def get_commit_query_service() -> CommitQueryService:
    global _query_service
    if _query_service is None:
        store = get_store()
        _query_service = CommitQueryService(
            cache=CommitCache(store),
            tenants=KVTenantDirectory(store),
        )
    return _query_service


async def get_current_tenant(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    tenants: KVTenantDirectory = Depends(get_tenant_directory),
) -> str:
    """
    Resolve the session to a tenant id.

    The session token comes from the session cookie set by the OAuth flow, or
    from a bearer header for non-browser clients.
    """
    session_token = request.cookies.get(settings.session_cookie_name)
    if not session_token and credentials:
        session_token = credentials.credentials
    if not session_token:
        raise NotAuthenticatedError()

    tenant_id = await tenants.get_tenant_for_session(session_token)
    if not tenant_id:
        raise NotAuthenticatedError("Session expired")
    return tenant_id
