"""
GitHub API client for PR Watcher.

This module provides a small asynchronous GitHub REST client that lists the
repositories visible to a token and the open pull requests of a repository,
following Link-header pagination.
"""

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from .exceptions import GitHubAPIError, ResponseDecodingError
from .models import PullRequest, Repository

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "pr-watcher"

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_link_header(header: str) -> str | None:
    """
    Extract the ``rel="next"`` URL from a Link header.

    Link header format: <url>; rel="next", <url>; rel="last"
    """
    for part in header.split(","):
        part = part.strip()
        if 'rel="next"' not in part:
            continue
        start = part.find("<")
        end = part.find(">")
        if start != -1 and end > start:
            return part[start + 1 : end]
    return None


class GitHubClient:
    """
    GitHub API client bound to a single token.

    Each request opens a short-lived ``httpx.AsyncClient``; a transport may be
    injected for testing.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the GitHub client.

        Args:
            token: Personal access token used for every request
            api_url: Base URL of the GitHub REST API
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": USER_AGENT,
        }

    async def list_repositories(self) -> list[Repository]:
        """
        List all repositories accessible to the authenticated user.

        Returns:
            Repositories owned by, shared with, or visible through an
            organization membership of the token's user
        """
        url = (
            f"{self.api_url}/user/repos?per_page=100"
            "&affiliation=owner,collaborator,organization_member&visibility=all"
        )
        return await self._fetch_all_pages(url, Repository)

    async def list_open_pull_requests(
        self, owner: str, repo: str
    ) -> list[PullRequest]:
        """
        List open pull requests for a repository.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Open pull requests
        """
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls?state=open&per_page=100"
        return await self._fetch_all_pages(url, PullRequest)

    async def _fetch_all_pages(
        self, url: str, model: type[ModelT]
    ) -> list[ModelT]:
        """Fetch all pages of a paginated endpoint."""
        adapter = TypeAdapter(list[model])  # type: ignore[valid-type]
        items: list[ModelT] = []
        next_url: str | None = url

        async with httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            while next_url:
                response = await client.get(next_url)
                self._check_response(response)

                try:
                    items.extend(adapter.validate_python(response.json()))
                except (ValueError, ValidationError) as e:
                    raise ResponseDecodingError(
                        f"Decoding error: {e}", context={"url": next_url}
                    ) from e

                link = response.headers.get("Link")
                next_url = parse_link_header(link) if link else None

        logger.debug("Fetched paginated resource", url=url, items=len(items))
        return items

    @staticmethod
    def _check_response(response: httpx.Response) -> None:
        """Raise GitHubAPIError for non-2xx responses."""
        if response.is_success:
            return

        message: Any = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("message")
        except ValueError:
            pass

        if message:
            raise GitHubAPIError(
                f"GitHub API error ({response.status_code}): {message}",
                status_code=response.status_code,
            )
        raise GitHubAPIError(
            f"HTTP error: {response.status_code}", status_code=response.status_code
        )
