"""
Repository discovery for the polling system.

When no explicit repository list is configured, every distinct token is asked
for the repositories it can access and the results are merged.
"""

import asyncio
from collections.abc import Callable, Iterable

import structlog

from ..github_client import GitHubClient
from ..models import split_repository

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[str], GitHubClient]


class RepositoryDiscovery:
    """
    Discovers accessible repositories across several tokens.

    One listing request is issued per distinct token, all concurrently. A
    failing token contributes nothing; the others are unaffected.
    """

    def __init__(self, client_factory: ClientFactory):
        """
        Initialize repository discovery.

        Args:
            client_factory: Builds a GitHub client for a token
        """
        self.client_factory = client_factory

    async def discover(self, tokens: Iterable[str]) -> list[tuple[str, str]]:
        """
        Discover repositories for a set of tokens.

        Args:
            tokens: Tokens to enumerate with; duplicates and empty values are ignored

        Returns:
            ``(full_name, token)`` pairs sorted by full name. A repository seen
            by several tokens keeps the token whose result was merged first.
        """
        distinct = list(dict.fromkeys(token for token in tokens if token))
        if not distinct:
            logger.warning("No tokens available for repository discovery")
            return []

        tasks = [
            asyncio.create_task(self._discover_for_token(token)) for token in distinct
        ]

        merged: list[tuple[str, str]] = []
        for next_done in asyncio.as_completed(tasks):
            merged.extend(await next_done)

        seen: set[str] = set()
        deduped: list[tuple[str, str]] = []
        for repo, token in merged:
            if repo in seen:
                continue
            seen.add(repo)
            deduped.append((repo, token))

        deduped.sort(key=lambda entry: entry[0])

        logger.info(
            "Repository discovery completed",
            tokens=len(distinct),
            repositories_found=len(merged),
            repositories_unique=len(deduped),
        )
        return deduped

    async def _discover_for_token(self, token: str) -> list[tuple[str, str]]:
        """List non-archived repositories visible to one token."""
        try:
            repositories = await self.client_factory(token).list_repositories()
        except Exception as e:
            logger.error("Error discovering repositories", error=str(e))
            return []

        results = []
        for repository in repositories:
            if repository.archived:
                continue
            if split_repository(repository.full_name) is None:
                logger.debug(
                    "Skipping malformed repository name",
                    repository=repository.full_name,
                )
                continue
            results.append((repository.full_name, token))
        return results
