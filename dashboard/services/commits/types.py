"""Data types for commit queries and grouped results."""

from dataclasses import dataclass, field
from typing import Any

from dashboard.services.commits.constants import (
    DEFAULT_GRANULARITY,
    DEFAULT_SORT_FIELD,
    DEFAULT_SORT_ORDER,
    GRANULARITIES,
    SORT_FIELDS,
    Granularity,
    SortField,
    SortOrder,
)
from dashboard.services.github.types import Commit


@dataclass
class TimeBucket:
    """Commits sharing one day / week / month / year key."""

    id: str
    granularity: Granularity
    label: str
    start_date: str  # Earliest commit date in the bucket (YYYY-MM-DD)
    end_date: str  # Latest commit date in the bucket (YYYY-MM-DD)
    commits: list[Commit] = field(default_factory=list)
    repos: list[str] = field(default_factory=list)

    @property
    def commit_count(self) -> int:
        return len(self.commits)

    @property
    def repo_count(self) -> int:
        return len(self.repos)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.granularity,
            "label": self.label,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "commitCount": self.commit_count,
            "repos": list(self.repos),
            "repoCount": self.repo_count,
            "commits": [c.to_dict() for c in self.commits],
        }


@dataclass
class CommitQuery:
    """Parameters of one commit query, as received from the caller.

    Dates stay strings until the orchestrator validates them so the cache key
    reflects exactly what was asked for.
    """

    repos: list[str] | None = None
    date_from: str | None = None
    date_to: str | None = None
    group_by: Granularity = DEFAULT_GRANULARITY
    sort_by: SortField = DEFAULT_SORT_FIELD
    sort_order: SortOrder = DEFAULT_SORT_ORDER
    search: str | None = None

    @classmethod
    def from_params(
        cls,
        repo: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        group_by: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
        search: str | None = None,
    ) -> "CommitQuery":
        """Build a query from raw request parameters.

        `repo` is a comma-separated list. Unknown groupBy / sortBy values fall
        back to week / date; any sortOrder other than "asc" means descending.
        """
        repos = [r.strip() for r in repo.split(",") if r.strip()] if repo else None
        return cls(
            repos=repos or None,
            date_from=date_from or None,
            date_to=date_to or None,
            group_by=group_by if group_by in GRANULARITIES else DEFAULT_GRANULARITY,  # type: ignore[arg-type]
            sort_by=sort_by if sort_by in SORT_FIELDS else DEFAULT_SORT_FIELD,  # type: ignore[arg-type]
            sort_order="asc" if sort_order == "asc" else "desc",
            search=search or None,
        )

    @property
    def repo_param(self) -> str | None:
        return ",".join(self.repos) if self.repos else None

    def cache_params(self) -> dict[str, str | None]:
        return {
            "from": self.date_from,
            "to": self.date_to,
            "repo": self.repo_param,
            "groupBy": self.group_by,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
            "search": self.search,
        }
