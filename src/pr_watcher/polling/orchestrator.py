"""
Polling orchestrator for PR Watcher.

This module runs a single poll cycle: select repositories, fetch their open
pull requests, diff against the stored snapshots and deliver the resulting
change batch.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from datetime import datetime

import structlog

from ..config import Settings
from ..github_client import GitHubClient
from ..models import PollCycleResult, PRChange, split_repository
from .credentials import CredentialResolver
from .discovery import ClientFactory, RepositoryDiscovery
from .selection import RepositorySelector
from .state_tracker import PollingStateTracker

logger = structlog.get_logger(__name__)

ChangeHandler = Callable[[list[PRChange]], Awaitable[None] | None]


class PollingOrchestrator:
    """
    Orchestrates poll cycles across the selected repositories.

    Repositories are fetched concurrently (bounded by
    ``max_concurrent_repositories``). A repository whose fetch fails keeps its
    previous snapshot and contributes no changes; the cycle carries on.
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory | None = None,
    ):
        """
        Initialize the polling orchestrator.

        Args:
            settings: Application settings
            client_factory: Builds a GitHub client for a token; defaults to
                ``GitHubClient`` configured from settings
        """
        self.settings = settings
        self.client_factory = client_factory or self._create_client

        self.credentials = CredentialResolver(settings.tokens, settings.github_token)
        self.discovery = RepositoryDiscovery(self.client_factory)
        self.selector = RepositorySelector(
            self.credentials,
            self.discovery,
            repos=settings.repos,
            excluded_repos=settings.excluded_repos,
        )
        self.state_tracker = PollingStateTracker()

    def _create_client(self, token: str) -> GitHubClient:
        return GitHubClient(
            token,
            api_url=self.settings.github_api_url,
            timeout=self.settings.request_timeout_seconds,
        )

    async def poll(self, handler: ChangeHandler | None = None) -> PollCycleResult:
        """
        Run one poll cycle.

        Args:
            handler: Receives the non-self-authored changes, once, only when
                there are any

        Returns:
            Summary of the cycle
        """
        result = PollCycleResult(started_at=datetime.now())
        logger.info("Polling cycle started", timestamp=result.started_at.isoformat())

        repositories = await self.selector.select()
        if not repositories:
            logger.warning("No repositories selected for polling")

        semaphore = asyncio.Semaphore(self.settings.max_concurrent_repositories)

        async def poll_with_limit(repo: str, token: str) -> list[PRChange] | None:
            async with semaphore:
                return await self._poll_repository(repo, token)

        outcomes = await asyncio.gather(
            *(poll_with_limit(repo, token) for repo, token in repositories)
        )

        for (repo, _), changes in zip(repositories, outcomes):
            if changes is None:
                result.failed_repositories.append(repo)
                continue
            result.repositories_polled.append(repo)
            result.changes.extend(changes)

        result.delivered = [
            change
            for change in result.changes
            if change.pull_request.author != self.settings.github_username
        ]

        if result.delivered and handler is not None:
            await self._deliver(handler, result.delivered)

        result.finished_at = datetime.now()
        logger.info(
            "Polling cycle completed",
            duration_seconds=result.duration_seconds,
            repositories_processed=len(result.repositories_polled),
            repositories_failed=len(result.failed_repositories),
            changes_detected=len(result.changes),
            changes_delivered=len(result.delivered),
        )
        return result

    async def _poll_repository(self, repo: str, token: str) -> list[PRChange] | None:
        """Fetch one repository and apply it to the snapshot; None on failure."""
        parts = split_repository(repo)
        if parts is None:
            return []
        owner, name = parts

        try:
            pull_requests = await self.client_factory(token).list_open_pull_requests(
                owner, name
            )
        except Exception as e:
            logger.error("Failed to poll repository", repository=repo, error=str(e))
            return None

        logger.debug(
            "Found PRs in repository", repository=repo, open_prs=len(pull_requests)
        )
        return await self.state_tracker.apply(repo, pull_requests)

    async def _deliver(self, handler: ChangeHandler, changes: list[PRChange]) -> None:
        """Invoke the change handler with a batch."""
        try:
            outcome = handler(changes)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error("Change handler failed", changes=len(changes), error=str(e))

    def clear_state(self) -> None:
        """Forget all snapshots and the discovery cache."""
        self.state_tracker.clear()
        self.selector.clear_cache()
