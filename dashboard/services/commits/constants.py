"""Constants for commit grouping and sorting."""

from typing import Literal

Granularity = Literal["day", "week", "month", "year"]
SortField = Literal["date", "repo", "author"]
SortOrder = Literal["asc", "desc"]

GRANULARITIES: tuple[str, ...] = ("day", "week", "month", "year")
SORT_FIELDS: tuple[str, ...] = ("date", "repo", "author")

DEFAULT_GRANULARITY: Granularity = "week"
DEFAULT_SORT_FIELD: SortField = "date"
DEFAULT_SORT_ORDER: SortOrder = "desc"

# English names, independent of the process locale
MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
MONTH_ABBREVIATIONS: tuple[str, ...] = tuple(name[:3] for name in MONTH_NAMES)
WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
