"""
Commit dashboard endpoints: grouped commits, week overview and week detail.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from dashboard.api.deps import get_commit_query_service, get_current_tenant
from dashboard.core.exceptions import to_http_exception
from dashboard.services.commits import CommitQuery, CommitQueryError, CommitQueryService

router = APIRouter(tags=["commits"])
logger = logging.getLogger(__name__)


@router.get("/commits")
async def get_commits(
    group_by: str | None = Query(None, alias="groupBy", description="day, week, month or year"),
    repo: str | None = Query(None, description="Comma-separated repository names"),
    date_from: str | None = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    date_to: str | None = Query(None, alias="to", description="End date (YYYY-MM-DD), inclusive"),
    sort_by: str | None = Query(None, alias="sortBy", description="date, repo or author"),
    sort_order: str | None = Query(None, alias="sortOrder", description="asc or desc"),
    search: str | None = Query(None, description="Search commit messages, authors and repos"),
    tenant_id: str = Depends(get_current_tenant),
    service: CommitQueryService = Depends(get_commit_query_service),
) -> dict[str, Any]:
    """All commits in the window, grouped by day / week / month / year."""
    query = CommitQuery.from_params(
        repo=repo,
        date_from=date_from,
        date_to=date_to,
        group_by=group_by,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
    )
    try:
        return await service.query_commits(tenant_id, query)
    except CommitQueryError as e:
        raise to_http_exception(e) from None


@router.get("/weeks")
async def get_weeks(
    repo: str | None = Query(None, description="Comma-separated repository names"),
    date_from: str | None = Query(None, alias="from"),
    date_to: str | None = Query(None, alias="to"),
    tenant_id: str = Depends(get_current_tenant),
    service: CommitQueryService = Depends(get_commit_query_service),
) -> dict[str, Any]:
    """Week-by-week commit counts, newest first."""
    try:
        return await service.summarize_weeks(tenant_id, repo=repo, date_from=date_from, date_to=date_to)
    except CommitQueryError as e:
        raise to_http_exception(e) from None


@router.get("/weeks/{week_id}")
async def get_week_detail(
    week_id: str,
    tenant_id: str = Depends(get_current_tenant),
    service: CommitQueryService = Depends(get_commit_query_service),
) -> dict[str, Any]:
    """Commits for one week (Monday date), grouped by repository."""
    try:
        return await service.get_week_detail(tenant_id, week_id)
    except CommitQueryError as e:
        raise to_http_exception(e) from None
