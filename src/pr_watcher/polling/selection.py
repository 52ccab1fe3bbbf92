"""
Repository selection for the polling system.

Chooses between the explicitly configured repository list and auto-discovered
repositories, then applies the exclusion list.
"""

import asyncio
from collections.abc import Iterable

import structlog

from ..models import split_repository
from .credentials import CredentialResolver
from .discovery import RepositoryDiscovery

logger = structlog.get_logger(__name__)


class RepositorySelector:
    """
    Selects the ``(repository, token)`` pairs to poll.

    An explicit repository list always wins and never touches discovery.
    Otherwise discovery runs once and its result is cached until
    ``clear_cache`` is called.
    """

    def __init__(
        self,
        credentials: CredentialResolver,
        discovery: RepositoryDiscovery,
        repos: Iterable[str] = (),
        excluded_repos: Iterable[str] = (),
    ):
        """
        Initialize the repository selector.

        Args:
            credentials: Owner -> token resolver
            discovery: Repository discovery used when no explicit list is set
            repos: Explicit repository list (``owner/name``)
            excluded_repos: Repositories never to poll
        """
        self.credentials = credentials
        self.discovery = discovery
        self.repos = list(repos)
        self.excluded_repos = set(excluded_repos)

        self._discovered: list[tuple[str, str]] | None = None
        self._discovery_lock = asyncio.Lock()

    @property
    def discovered(self) -> list[tuple[str, str]] | None:
        """The cached discovery result, if discovery has run."""
        return self._discovered

    async def select(self) -> list[tuple[str, str]]:
        """
        Get the repositories to poll with their tokens.

        Returns:
            ``(full_name, token)`` pairs, minus excluded repositories
        """
        if self.repos:
            selected = self._resolve_explicit()
        else:
            selected = await self._get_discovered()

        filtered = [
            (repo, token) for repo, token in selected if repo not in self.excluded_repos
        ]

        logger.debug(
            "Selected repositories for polling",
            explicit=bool(self.repos),
            selected=len(selected),
            excluded=len(selected) - len(filtered),
        )
        return filtered

    def clear_cache(self) -> None:
        """Forget discovered repositories so the next selection rediscovers."""
        self._discovered = None

    def _resolve_explicit(self) -> list[tuple[str, str]]:
        """Resolve tokens for the explicit repository list."""
        resolved = []
        for repo in self.repos:
            parts = split_repository(repo)
            if parts is None:
                continue
            token = self.credentials.resolve(parts[0])
            if not token:
                continue
            resolved.append((repo, token))
        return resolved

    async def _get_discovered(self) -> list[tuple[str, str]]:
        """Return cached discovery results, discovering on first use."""
        async with self._discovery_lock:
            if self._discovered is None:
                self._discovered = await self.discovery.discover(
                    self.credentials.discovery_tokens()
                )
            return list(self._discovered)
