"""
Polling state tracker for PR Watcher.

This module keeps the last observed state of every open pull request per
repository and performs delta detection against freshly fetched data.
"""

import asyncio
from collections.abc import Iterable

import structlog

from ..models import NewCommits, NewPR, PRChange, PRState, PullRequest

logger = structlog.get_logger(__name__)


def detect_changes(
    repository: str,
    previous: dict[int, PRState],
    pull_requests: Iterable[PullRequest],
) -> list[PRChange]:
    """
    Compare fetched pull requests against a previous snapshot.

    Only new PRs and head SHA movements are detected here; comment and
    status changes are assembled by the consumer of the change feed.
    """
    changes: list[PRChange] = []
    for pr in pull_requests:
        prior = previous.get(pr.number)
        if prior is None:
            changes.append(PRChange(pr, repository, NewPR()))
        elif prior.head_sha != pr.head_sha:
            changes.append(
                PRChange(pr, repository, NewCommits(prior.head_sha, pr.head_sha))
            )
    return changes


class PollingStateTracker:
    """
    Tracks per-repository PR snapshots for delta detection.

    Snapshots live only in memory. Every read-diff-replace of a repository's
    snapshot happens under a single lock, so overlapping poll cycles cannot
    interleave their writes.
    """

    def __init__(self) -> None:
        self._pr_states: dict[str, dict[int, PRState]] = {}
        self._lock = asyncio.Lock()

    async def apply(
        self, repository: str, pull_requests: list[PullRequest]
    ) -> list[PRChange]:
        """
        Diff a fresh fetch against the stored snapshot and replace it.

        Args:
            repository: Full repository name (owner/name)
            pull_requests: Every open PR returned by a single fetch

        Returns:
            Changes relative to the previous snapshot
        """
        async with self._lock:
            previous = self._pr_states.get(repository, {})
            changes = detect_changes(repository, previous, pull_requests)
            self._pr_states[repository] = {
                pr.number: PRState.from_pull_request(pr) for pr in pull_requests
            }

        logger.debug(
            "Snapshot replaced",
            repository=repository,
            open_prs=len(pull_requests),
            previously_tracked=len(previous),
            changes=len(changes),
        )
        return changes

    def get_snapshot(self, repository: str) -> dict[int, PRState] | None:
        """Get a copy of the stored snapshot for a repository."""
        snapshot = self._pr_states.get(repository)
        return dict(snapshot) if snapshot is not None else None

    def tracked_repositories(self) -> list[str]:
        """Repositories with a stored snapshot."""
        return sorted(self._pr_states)

    def clear(self) -> None:
        """Drop every stored snapshot."""
        self._pr_states.clear()
