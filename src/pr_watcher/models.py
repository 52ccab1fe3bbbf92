"""
Data models for PR Watcher.

GitHub payloads are decoded into pydantic models; change records produced by
the poller are plain frozen dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class GitHubUser(BaseModel):
    """A GitHub user as embedded in API payloads."""

    model_config = ConfigDict(extra="ignore")

    login: str
    id: int | None = None
    avatar_url: str | None = None


class GitRef(BaseModel):
    """A git reference (branch head or base) of a pull request."""

    model_config = ConfigDict(extra="ignore")

    ref: str
    sha: str


class Repository(BaseModel):
    """Repository entry returned by the repository listing endpoint."""

    model_config = ConfigDict(extra="ignore")

    full_name: str
    name: str | None = None
    html_url: str | None = None
    archived: bool = False


class PullRequest(BaseModel):
    """An open pull request."""

    model_config = ConfigDict(extra="ignore")

    number: int
    title: str
    html_url: str = ""
    state: str = "open"
    body: str | None = None
    user: GitHubUser
    head: GitRef
    created_at: datetime | None = None
    updated_at: datetime

    @property
    def head_sha(self) -> str:
        return self.head.sha

    @property
    def author(self) -> str:
        return self.user.login


@dataclass(frozen=True)
class NewPR:
    """The PR was not present in the previous snapshot."""


@dataclass(frozen=True)
class NewCommits:
    """The PR head moved to a different commit."""

    old_sha: str
    new_sha: str


@dataclass(frozen=True)
class NewComments:
    """Comment count delta (assembled outside the poller)."""

    count: int


@dataclass(frozen=True)
class StatusChanged:
    """CI or merge state transition (assembled outside the poller)."""

    from_status: str | None
    to_status: str | None


ChangeType = NewPR | NewCommits | NewComments | StatusChanged


@dataclass(frozen=True)
class PRChange:
    """A change detected for a single pull request."""

    pull_request: PullRequest
    repository: str
    change_type: ChangeType


@dataclass(frozen=True)
class PRState:
    """Snapshot entry for a pull request."""

    head_sha: str
    updated_at: datetime

    @classmethod
    def from_pull_request(cls, pr: PullRequest) -> "PRState":
        return cls(head_sha=pr.head_sha, updated_at=pr.updated_at)


@dataclass
class PollCycleResult:
    """Summary of a single poll cycle."""

    started_at: datetime
    finished_at: datetime | None = None
    repositories_polled: list[str] = field(default_factory=list)
    failed_repositories: list[str] = field(default_factory=list)
    changes: list[PRChange] = field(default_factory=list)
    delivered: list[PRChange] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        """Get cycle duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return 0.0


def split_repository(full_name: str) -> tuple[str, str] | None:
    """Split ``owner/name``; anything without exactly two segments is rejected."""
    parts = full_name.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]
