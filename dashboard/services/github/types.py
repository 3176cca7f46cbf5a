"""Data types for GitHub API responses."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

FetchStatus = Literal["ok", "rate_limited", "error"]


@dataclass(frozen=True)
class RepoRef:
    """Normalized repository identifier (owner + name)."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, value: "RepoRef | str | Mapping[str, Any]", default_owner: str) -> "RepoRef":
        """
        Normalize the shapes repository references arrive in.

        Accepts:
            - RepoRef (returned as-is)
            - "name" (owner falls back to default_owner)
            - "owner/name"
            - {"owner": ..., "name": ...}
            - {"name": ..., "fullName": "owner/name"} (shape stored by the repo selector)

        Raises:
            ValueError: If the value cannot be read as a repository reference
        """
        if isinstance(value, RepoRef):
            return value

        if isinstance(value, str):
            text = value.strip()
            if "/" in text:
                owner, _, name = text.partition("/")
                if owner and name and "/" not in name:
                    return cls(owner=owner, name=name)
                raise ValueError(f"Invalid repository reference: {value!r}")
            if not text:
                raise ValueError("Empty repository reference")
            return cls(owner=default_owner, name=text)

        if isinstance(value, Mapping):
            full_name = value.get("fullName") or value.get("full_name")
            if full_name:
                return cls.parse(str(full_name), default_owner)
            name = value.get("name")
            if name:
                name = str(name)
                if "/" in name:
                    return cls.parse(name, default_owner)
                owner = value.get("owner") or default_owner
                if isinstance(owner, Mapping):
                    # GitHub's own repo payload nests owner as an object
                    owner = owner.get("login") or default_owner
                return cls(owner=str(owner), name=name)

        raise ValueError(f"Invalid repository reference: {value!r}")


@dataclass
class Commit:
    """Normalized commit from GitHub's list-commits endpoint."""

    sha: str
    message: str
    author: str
    author_email: str
    date: str  # ISO 8601 author date, as reported by GitHub
    repo: str  # Short repository name
    org: str  # Owning user or organization
    url: str

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def message_first_line(self) -> str:
        return self.message.split("\n")[0]

    @property
    def timestamp(self) -> datetime:
        """Author date as an aware UTC datetime."""
        parsed = datetime.fromisoformat(self.date.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)

    def to_dict(self) -> dict[str, str]:
        """Wire shape consumed by the dashboard frontend."""
        return {
            "sha": self.sha,
            "shortSha": self.short_sha,
            "message": self.message,
            "messageFirstLine": self.message_first_line,
            "author": self.author,
            "authorEmail": self.author_email,
            "date": self.date,
            "repo": self.repo,
            "org": self.org,
            "url": self.url,
        }


@dataclass
class RepoCommits:
    """Commits fetched from one repository, plus how the fetch ended."""

    repo: RepoRef
    commits: list[Commit]
    status: FetchStatus = "ok"
    pages: int = 0
    # True when the page ceiling stopped pagination before GitHub ran out
    truncated: bool = False
    retry_after: int | None = None


@dataclass
class RepoFetchStatus:
    """Per-repository outcome of a multi-repo fetch."""

    status: FetchStatus
    commit_count: int = 0
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "commitCount": self.commit_count, "reason": self.reason}


@dataclass
class MultiRepoFetchResult:
    """Flattened commits across repositories with per-repo status."""

    commits: list[Commit] = field(default_factory=list)
    statuses: dict[str, RepoFetchStatus] = field(default_factory=dict)

    @property
    def failed_repos(self) -> list[str]:
        return [name for name, s in self.statuses.items() if s.status == "error"]

    @property
    def is_partial(self) -> bool:
        return any(s.status != "ok" for s in self.statuses.values())


@dataclass
class GitHubRepo:
    """Repository the authenticated user can select for tracking."""

    name: str
    full_name: str
    private: bool
    description: str | None
    updated_at: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fullName": self.full_name,
            "private": self.private,
            "description": self.description,
            "updatedAt": self.updated_at,
        }
