"""
Time bucketing for commit lists.

Pure functions: sort a flat commit list, partition it into day / week / month /
year buckets, and derive labels and per-bucket stats. All dates are read in
UTC from the commit's author date. Weeks always start on Monday.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from typing import Any

from dashboard.services.commits.constants import (
    MONTH_ABBREVIATIONS,
    MONTH_NAMES,
    WEEKDAY_NAMES,
    Granularity,
    SortField,
    SortOrder,
)
from dashboard.services.commits.types import TimeBucket
from dashboard.services.github.types import Commit


def week_start(day: date) -> date:
    """Monday of the week containing `day` (a Sunday maps to the Monday six days earlier)."""
    return day - timedelta(days=day.weekday())


def bucket_key(moment: datetime, granularity: Granularity) -> str:
    """
    Bucket identifier for a UTC timestamp.

    day   -> "2025-01-06"
    week  -> "2025-01-06" (the Monday)
    month -> "2025-01"
    year  -> "2025"
    """
    day = moment.date()
    if granularity == "day":
        return day.isoformat()
    if granularity == "week":
        return week_start(day).isoformat()
    if granularity == "month":
        return f"{day.year:04d}-{day.month:02d}"
    if granularity == "year":
        return f"{day.year:04d}"
    raise ValueError(f"Unknown granularity: {granularity}")


def bucket_label(key: str, granularity: Granularity) -> str:
    """
    Human-readable label for a bucket key.

    day   -> "Monday, January 6, 2025"
    week  -> "Week of Jan 6 - Jan 12, 2025"
    month -> "January 2025"
    year  -> "2025"
    """
    if granularity == "day":
        d = date.fromisoformat(key)
        return f"{WEEKDAY_NAMES[d.weekday()]}, {MONTH_NAMES[d.month - 1]} {d.day}, {d.year}"
    if granularity == "week":
        start = date.fromisoformat(key)
        end = start + timedelta(days=6)
        return (
            f"Week of {MONTH_ABBREVIATIONS[start.month - 1]} {start.day}"
            f" - {MONTH_ABBREVIATIONS[end.month - 1]} {end.day}, {end.year}"
        )
    if granularity == "month":
        year, month = key.split("-")
        return f"{MONTH_NAMES[int(month) - 1]} {year}"
    return key


def _sort_key(sort_by: SortField):
    if sort_by == "repo":
        return lambda c: c.repo
    if sort_by == "author":
        return lambda c: c.author
    return lambda c: c.timestamp


def sort_commits(commits: Iterable[Commit], sort_by: SortField, sort_order: SortOrder) -> list[Commit]:
    """Stable sort by date, repo or author; ties keep their input order in both directions."""
    return sorted(commits, key=_sort_key(sort_by), reverse=sort_order == "desc")


def filter_commits(commits: Iterable[Commit], search: str | None) -> list[Commit]:
    """Case-insensitive substring match over message, author name and repo name."""
    if not search:
        return list(commits)
    needle = search.lower()
    return [
        c
        for c in commits
        if needle in c.message.lower() or needle in c.author.lower() or needle in c.repo.lower()
    ]


def _partition(commits: Iterable[Commit], granularity: Granularity) -> dict[str, list[Commit]]:
    groups: dict[str, list[Commit]] = {}
    for commit in commits:
        groups.setdefault(bucket_key(commit.timestamp, granularity), []).append(commit)
    return groups


def group_commits(
    commits: Sequence[Commit],
    granularity: Granularity,
    sort_order: SortOrder = "desc",
) -> list[TimeBucket]:
    """
    Partition commits into time buckets.

    Commits keep their input order inside each bucket, so callers sort first.
    Buckets are emitted in key order, newest first when sort_order is "desc".
    Start and end dates come from the commits actually in the bucket, so a
    sparse week can span fewer than seven days.
    """
    groups = _partition(commits, granularity)
    keys = sorted(groups, reverse=sort_order == "desc")

    buckets: list[TimeBucket] = []
    for key in keys:
        members = groups[key]
        moments = [c.timestamp for c in members]
        buckets.append(
            TimeBucket(
                id=key,
                granularity=granularity,
                label=bucket_label(key, granularity),
                start_date=min(moments).date().isoformat(),
                end_date=max(moments).date().isoformat(),
                commits=list(members),
                repos=list(dict.fromkeys(c.repo for c in members)),
            )
        )
    return buckets


def summarize_weeks(commits: Iterable[Commit]) -> list[dict[str, Any]]:
    """
    Week overview without commit bodies, newest week first.

    Unlike group_commits, start and end are the Monday and Sunday of the week.
    """
    groups = _partition(commits, "week")
    weeks = []
    for key in sorted(groups, reverse=True):
        members = groups[key]
        start = date.fromisoformat(key)
        repos = list(dict.fromkeys(c.repo for c in members))
        weeks.append(
            {
                "weekId": key,
                "startDate": start.isoformat(),
                "endDate": (start + timedelta(days=6)).isoformat(),
                "commitCount": len(members),
                "repos": repos,
                "repoCount": len(repos),
            }
        )
    return weeks
