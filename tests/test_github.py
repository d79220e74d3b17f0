"""
Tests for the GitHub fetcher, using httpx.MockTransport.
"""

import asyncio
import base64

import httpx
import pytest
from conftest import NOW, PYPROJECT

from repoinsights.analyzers.github import GitHubFetcher, RepositoryNotFoundError
from repoinsights.config import AnalysisOptions
from repoinsights.models.schemas import RepoRef

REF = RepoRef(owner="octo", repo="demo")
RATE_HEADERS = {"X-RateLimit-Remaining": "4321", "X-RateLimit-Limit": "5000", "X-RateLimit-Reset": "1717243200"}

ROUTES = {
    "/repos/octo/demo": {
        "name": "demo",
        "full_name": "octo/demo",
        "description": "Demo project",
        "stargazers_count": 1500,
        "forks_count": 42,
        "watchers_count": 1500,
        "subscribers_count": 12,
        "open_issues_count": 7,
        "license": {"key": "mit", "name": "MIT License"},
        "created_at": "2020-01-01T00:00:00Z",
        "pushed_at": "2024-05-30T08:00:00Z",
        "default_branch": "develop",
        "has_issues": True,
    },
    "/repos/octo/demo/languages": {"Python": 9000, "Shell": 1000},
    "/repos/octo/demo/contents": [
        {"name": "pyproject.toml", "type": "file"},
        {"name": "README.md", "type": "file"},
        {"name": "src", "type": "dir"},
        {"name": ".github", "type": "dir"},
    ],
    "/repos/octo/demo/contents/pyproject.toml": {
        "encoding": "base64",
        "content": base64.encodebytes(PYPROJECT.encode()).decode(),
    },
    "/repos/octo/demo/git/trees/develop": {
        "truncated": False,
        "tree": [
            {"path": "README.md", "type": "blob"},
            {"path": "src", "type": "tree"},
            {"path": "src/app.py", "type": "blob"},
            {"path": "tests/test_app.py", "type": "blob"},
        ],
    },
    "/repos/octo/demo/contributors": [
        {"login": "alice", "contributions": 90, "avatar_url": "https://a", "html_url": "https://github.com/alice"},
        {"login": "bob", "contributions": 10},
    ],
    "/repos/octo/demo/commits": [
        {"sha": "a1", "author": {"login": "alice"}, "commit": {"author": {"name": "Alice", "date": "2024-05-30T10:00:00Z"}}},
        {"sha": "b2", "author": None, "commit": {"author": {"name": "Bob B", "date": "2024-05-29T10:00:00Z"}}},
    ],
    "/repos/octo/demo/issues": [
        {"number": 1, "state": "closed", "created_at": "2024-05-01T00:00:00Z", "updated_at": "2024-05-03T00:00:00Z", "comments": 2},
        {"number": 2, "state": "open", "created_at": "2024-05-20T00:00:00Z", "updated_at": "2024-05-21T00:00:00Z", "comments": 0, "pull_request": {"url": "x"}},
    ],
    "/repos/octo/demo/releases": [
        {"name": "1.1", "tag_name": "v1.1", "created_at": "2024-05-10T00:00:00Z", "published_at": "2024-05-10T01:00:00Z"},
        {"name": "1.0", "tag_name": "v1.0", "created_at": "2024-01-10T00:00:00Z", "published_at": None},
    ],
    "/rate_limit": {"resources": {"core": {"limit": 5000, "remaining": 4999, "reset": 1717243200}}},
}


def _run_fetch(routes: dict, coro_factory, requested: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requested is not None:
            requested.append(request.url.path)
        if request.url.path not in routes:
            return httpx.Response(404, json={"message": "Not Found"})
        body = routes[request.url.path]
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body, headers=RATE_HEADERS)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = GitHubFetcher(token="test-token", client=client)
            return fetcher, await coro_factory(fetcher)

    return asyncio.run(run())


class TestFetchSnapshot:
    """Test building a snapshot from API responses."""

    def test_full_snapshot(self):
        _, snapshot = _run_fetch(ROUTES, lambda f: f.fetch_snapshot(REF, AnalysisOptions(), now=NOW))

        info = snapshot.info
        assert info.stars == 1500
        assert info.forks == 42
        assert info.watchers == 1500
        assert info.license == "MIT License"
        assert info.default_branch == "develop"
        assert info.pushed_at.isoformat() == "2024-05-30T08:00:00+00:00"

        assert snapshot.languages == {"Python": 9000, "Shell": 1000}
        assert snapshot.root_entries == ["pyproject.toml", "README.md", "src", ".github"]
        assert "fastapi" in snapshot.manifests["pyproject.toml"]
        assert snapshot.file_paths == ["README.md", "src/app.py", "tests/test_app.py"]
        assert snapshot.fetched_at == NOW

    def test_records_are_parsed(self):
        _, snapshot = _run_fetch(ROUTES, lambda f: f.fetch_snapshot(REF, now=NOW))

        assert [c.login for c in snapshot.contributors] == ["alice", "bob"]
        assert snapshot.contributors[0].profile_url == "https://github.com/alice"

        assert [c.identity for c in snapshot.commits] == ["alice", "Bob B"]

        issue, pr = snapshot.issues
        assert not issue.is_pull_request and issue.comments == 2
        assert pr.is_pull_request and pr.state == "open"

        assert [r.tag_name for r in snapshot.releases] == ["v1.1", "v1.0"]
        assert snapshot.releases[1].published_at is None

    def test_disabled_extractors_skip_requests(self):
        """Test only info, languages, root listing and manifests are fetched."""
        requested: list[str] = []
        options = AnalysisOptions(
            include_code_quality=False,
            include_contributor_insights=False,
            include_activity_trends=False,
        )
        _, snapshot = _run_fetch(ROUTES, lambda f: f.fetch_snapshot(REF, options, now=NOW), requested)

        assert sorted(requested) == [
            "/repos/octo/demo",
            "/repos/octo/demo/contents",
            "/repos/octo/demo/contents/pyproject.toml",
            "/repos/octo/demo/languages",
        ]
        assert snapshot.commits == [] and snapshot.file_paths == [] and snapshot.releases == []

    def test_commits_fetched_for_contributors_only(self):
        requested: list[str] = []
        options = AnalysisOptions(include_code_quality=False, include_activity_trends=False)
        _run_fetch(ROUTES, lambda f: f.fetch_snapshot(REF, options, now=NOW), requested)
        assert "/repos/octo/demo/commits" in requested
        assert "/repos/octo/demo/issues" not in requested

    def test_missing_repository(self):
        with pytest.raises(RepositoryNotFoundError, match="octo/demo"):
            _run_fetch({}, lambda f: f.fetch_snapshot(REF, now=NOW))

    def test_server_error_propagates(self):
        routes = dict(ROUTES)
        routes["/repos/octo/demo/languages"] = httpx.Response(500)
        with pytest.raises(httpx.HTTPStatusError):
            _run_fetch(routes, lambda f: f.fetch_snapshot(REF, now=NOW))

    def test_empty_repository(self):
        """Test 409 listings of an empty repository yield empty collections."""
        routes = {path: body for path, body in ROUTES.items() if path == "/repos/octo/demo"}
        routes["/repos/octo/demo/commits"] = httpx.Response(409, json={"message": "Git Repository is empty."})
        _, snapshot = _run_fetch(routes, lambda f: f.fetch_snapshot(REF, now=NOW))
        assert snapshot.commits == []
        assert snapshot.root_entries == []
        assert snapshot.manifests == {}

    def test_undecodable_manifest_is_skipped(self):
        routes = dict(ROUTES)
        routes["/repos/octo/demo/contents/pyproject.toml"] = {"content": base64.b64encode(b"\xff\xfe\x00").decode()}
        _, snapshot = _run_fetch(routes, lambda f: f.fetch_snapshot(REF, now=NOW))
        assert snapshot.manifests == {}


class TestRateLimit:
    """Test rate limit tracking."""

    def test_headers_update_tracked_limits(self):
        fetcher, _ = _run_fetch(ROUTES, lambda f: f.fetch_repo_info(REF))
        assert fetcher.rate_limit_remaining == 4321
        assert fetcher.rate_limit_reset is not None

    def test_fetch_rate_limit(self):
        _, rate = _run_fetch({"/rate_limit": ROUTES["/rate_limit"]}, lambda f: f.fetch_rate_limit())
        assert rate["remaining"] == 4999
        assert rate["limit"] == 5000
        assert rate["reset"].year == 2024

    def test_token_sent_as_bearer(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json=ROUTES["/repos/octo/demo"])

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await GitHubFetcher(token="abc", client=client).fetch_repo_info(REF)

        asyncio.run(run())
        assert seen == ["Bearer abc"]


class TestPagination:
    """Test paginated listings."""

    def test_follows_pages_until_short_page(self):
        commit = {"sha": "c", "author": {"login": "alice"}, "commit": {"author": {"date": "2024-05-30T10:00:00Z"}}}
        pages = {"1": [commit] * 100, "2": [commit] * 3}
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            return httpx.Response(200, json=pages.get(request.url.params["page"], []))

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                fetcher = GitHubFetcher(client=client)
                return await fetcher._fetch_commits("octo", "demo", NOW)

        commits = asyncio.run(run())
        assert len(commits) == 103
        assert [params["page"] for params in seen] == ["1", "2"]
        assert all(params["per_page"] == "100" for params in seen)
        assert seen[0]["since"] == NOW.isoformat()
