"""
Tests for the GitHub REST client.
"""

import json

import httpx
import pytest

from pr_watcher.exceptions import GitHubAPIError, ResponseDecodingError
from pr_watcher.github_client import GitHubClient, parse_link_header

PR_PAYLOAD = {
    "id": 1,
    "number": 42,
    "title": "New PR",
    "body": "Body",
    "state": "open",
    "html_url": "https://github.com/owner/repo/pull/42",
    "user": {"id": 1, "login": "otheruser", "avatar_url": None},
    "head": {"ref": "feature", "sha": "abc123"},
    "base": {"ref": "main", "sha": "def456"},
    "created_at": "2026-01-01T00:00:00Z",
    "updated_at": "2026-01-02T03:04:05Z",
}


def make_client(handler) -> GitHubClient:
    return GitHubClient("test-token", transport=httpx.MockTransport(handler))


class TestParseLinkHeader:
    def test_next_link(self):
        header = (
            '<https://api.github.com/user/repos?page=2>; rel="next", '
            '<https://api.github.com/user/repos?page=5>; rel="last"'
        )
        assert parse_link_header(header) == "https://api.github.com/user/repos?page=2"

    def test_no_next_link(self):
        header = '<https://api.github.com/user/repos?page=1>; rel="prev"'
        assert parse_link_header(header) is None

    def test_empty_header(self):
        assert parse_link_header("") is None


class TestListOpenPullRequests:
    @pytest.mark.asyncio
    async def test_decodes_pull_requests(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[PR_PAYLOAD])

        prs = await make_client(handler).list_open_pull_requests("owner", "repo")

        assert len(prs) == 1
        assert prs[0].number == 42
        assert prs[0].head_sha == "abc123"
        assert prs[0].author == "otheruser"
        assert prs[0].updated_at.year == 2026

        request = requests[0]
        assert request.url.path == "/repos/owner/repo/pulls"
        assert request.url.params["state"] == "open"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"

    @pytest.mark.asyncio
    async def test_follows_pagination(self):
        second = dict(PR_PAYLOAD, number=43)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[second])
            return httpx.Response(
                200,
                json=[PR_PAYLOAD],
                headers={
                    "Link": '<https://api.github.com/repos/owner/repo/pulls'
                    '?state=open&per_page=100&page=2>; rel="next"'
                },
            )

        prs = await make_client(handler).list_open_pull_requests("owner", "repo")

        assert [pr.number for pr in prs] == [42, 43]

    @pytest.mark.asyncio
    async def test_api_error_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        with pytest.raises(GitHubAPIError, match="Not Found") as exc_info:
            await make_client(handler).list_open_pull_requests("owner", "repo")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_http_error_without_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        with pytest.raises(GitHubAPIError, match="HTTP error: 502"):
            await make_client(handler).list_open_pull_requests("owner", "repo")

    @pytest.mark.asyncio
    async def test_malformed_body_is_decoding_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(ResponseDecodingError):
            await make_client(handler).list_open_pull_requests("owner", "repo")

    @pytest.mark.asyncio
    async def test_schema_mismatch_is_decoding_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=json.dumps([{"number": "x"}]).encode())

        with pytest.raises(ResponseDecodingError):
            await make_client(handler).list_open_pull_requests("owner", "repo")


class TestListRepositories:
    @pytest.mark.asyncio
    async def test_lists_repositories(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json=[
                    {"full_name": "acme/a", "name": "a", "archived": False},
                    {"full_name": "acme/old", "name": "old", "archived": True},
                    {"full_name": "acme/b", "name": "b"},
                ],
            )

        repos = await make_client(handler).list_repositories()

        assert [(r.full_name, r.archived) for r in repos] == [
            ("acme/a", False),
            ("acme/old", True),
            ("acme/b", False),
        ]
        assert requests[0].url.path == "/user/repos"
        assert "organization_member" in requests[0].url.params["affiliation"]

    @pytest.mark.asyncio
    async def test_custom_api_url(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[])

        client = GitHubClient(
            "t",
            api_url="https://ghe.example.com/api/v3/",
            transport=httpx.MockTransport(handler),
        )
        await client.list_repositories()

        assert requests[0].url.host == "ghe.example.com"
        assert requests[0].url.path == "/api/v3/user/repos"
