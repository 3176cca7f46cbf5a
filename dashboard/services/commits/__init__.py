"""
Commit query package.

Usage: `from dashboard.services.commits import CommitQueryService, CommitQuery`

Module structure:
- orchestrator.py: CommitQueryService (cache -> fetch -> filter -> sort -> bucket)
- bucketing.py: Pure sorting, filtering and time bucketing
- types.py: CommitQuery and TimeBucket
- exceptions.py: Typed query failures
- constants.py: Granularities, sort options, month and weekday names
"""

from dashboard.services.commits.bucketing import (
    bucket_key,
    bucket_label,
    filter_commits,
    group_commits,
    sort_commits,
    summarize_weeks,
    week_start,
)
from dashboard.services.commits.exceptions import (
    CommitQueryError,
    InvalidQuery,
    NoCredential,
    NoRepositoriesConfigured,
)
from dashboard.services.commits.orchestrator import CommitQueryService
from dashboard.services.commits.types import CommitQuery, TimeBucket

__all__ = [
    "CommitQueryService",
    "CommitQuery",
    "TimeBucket",
    # Bucketing
    "bucket_key",
    "bucket_label",
    "filter_commits",
    "group_commits",
    "sort_commits",
    "summarize_weeks",
    "week_start",
    # Exceptions
    "CommitQueryError",
    "InvalidQuery",
    "NoCredential",
    "NoRepositoriesConfigured",
]
