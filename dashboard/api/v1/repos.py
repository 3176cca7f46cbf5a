"""
Repository endpoints: the tenant's selection and the repositories GitHub offers.
"""

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from dashboard.api.deps import get_commit_query_service, get_current_tenant
from dashboard.core.exceptions import to_http_exception
from dashboard.services.commits import CommitQueryError, CommitQueryService
from dashboard.services.github import GitHubAPIError

router = APIRouter(tags=["repos"])
logger = logging.getLogger(__name__)


class RepoSelection(BaseModel):
    """Repository selection posted by the dashboard's repo picker."""

    repos: list[str | dict[str, Any]] = []


@router.get("/repos")
async def list_repos(
    tenant_id: str = Depends(get_current_tenant),
    service: CommitQueryService = Depends(get_commit_query_service),
) -> dict[str, Any]:
    """Repositories the tenant has selected for the dashboard."""
    return await service.list_configured_repos(tenant_id)


@router.get("/github/repos")
async def list_github_repos(
    tenant_id: str = Depends(get_current_tenant),
    service: CommitQueryService = Depends(get_commit_query_service),
) -> dict[str, Any]:
    """Repositories the tenant's GitHub token can access."""
    try:
        return await service.list_available_repos(tenant_id)
    except CommitQueryError as e:
        raise to_http_exception(e) from None
    except GitHubAPIError as e:
        detail = e.message
        if e.rate_limit_reset:
            reset_in = max(0, e.rate_limit_reset - int(time.time()))
            detail = f"{e.message}. Rate limit resets in {reset_in // 60} minutes."
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
        ) from None


@router.post("/user/repos")
async def save_user_repos(
    body: RepoSelection,
    tenant_id: str = Depends(get_current_tenant),
    service: CommitQueryService = Depends(get_commit_query_service),
) -> dict[str, Any]:
    """Replace the tenant's repository selection."""
    try:
        return await service.save_configured_repos(tenant_id, body.repos)
    except CommitQueryError as e:
        raise to_http_exception(e) from None
