"""
Pytest configuration and fixtures for PR Watcher tests.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from pr_watcher.config import Settings
from pr_watcher.exceptions import GitHubAPIError
from pr_watcher.models import PullRequest, Repository


def make_pr(
    number: int,
    sha: str = "abc123",
    author: str = "otheruser",
    title: str = "Test PR",
    repo: str = "owner/repo",
) -> PullRequest:
    """Build a PullRequest the way the API payload would decode."""
    return PullRequest.model_validate(
        {
            "id": number,
            "number": number,
            "title": title,
            "body": "Body",
            "state": "open",
            "html_url": f"https://github.com/{repo}/pull/{number}",
            "user": {"id": 1, "login": author, "avatar_url": None},
            "head": {"ref": "feature", "sha": sha},
            "base": {"ref": "main", "sha": "def456"},
            "created_at": "2026-01-01T00:00:00Z",
            "updated_at": "2026-01-01T00:00:00Z",
        }
    )


def make_repo(full_name: str, archived: bool = False) -> Repository:
    return Repository(full_name=full_name, archived=archived)


class FakeGitHub:
    """In-memory stand-in for the GitHub API, shared by all fake clients."""

    def __init__(self) -> None:
        self.repositories: dict[str, list[Repository]] = {}
        self.pulls: dict[str, list[PullRequest]] = {}
        self.failing_tokens: set[str] = set()
        self.failing_repos: set[str] = set()
        self.token_errors: dict[str, Exception] = {}
        self.repo_errors: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.gate: asyncio.Event | None = None
        self.list_repositories_calls: list[str] = []
        self.list_pulls_calls: list[tuple[str, str]] = []

    def client(self, token: str) -> "FakeClient":
        return FakeClient(self, token)


class FakeClient:
    def __init__(self, github: FakeGitHub, token: str) -> None:
        self.github = github
        self.token = token

    async def list_repositories(self) -> list[Repository]:
        self.github.list_repositories_calls.append(self.token)
        await asyncio.sleep(self.github.delays.get(self.token, 0))
        if self.token in self.github.token_errors:
            raise self.github.token_errors[self.token]
        if self.token in self.github.failing_tokens:
            raise GitHubAPIError("HTTP error: 401", status_code=401)
        return list(self.github.repositories.get(self.token, []))

    async def list_open_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        full_name = f"{owner}/{repo}"
        self.github.list_pulls_calls.append((full_name, self.token))
        if self.github.gate is not None:
            await self.github.gate.wait()
        if full_name in self.github.repo_errors:
            raise self.github.repo_errors[full_name]
        if full_name in self.github.failing_repos:
            raise GitHubAPIError("HTTP error: 500", status_code=500)
        return list(self.github.pulls.get(full_name, []))


class RecordingHandler:
    """Change handler that records every batch it receives."""

    def __init__(self) -> None:
        self.batches: list[list[Any]] = []

    def __call__(self, changes: list[Any]) -> None:
        self.batches.append(list(changes))


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build settings without touching the environment or a .env file."""

    def factory(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "github_token": "test-token",
            "github_username": "testuser",
            "repos": ["owner/repo"],
            "poll_interval_seconds": 3600,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()

