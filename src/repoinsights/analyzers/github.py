"""GitHub data fetcher producing repository snapshots."""

import base64
import binascii
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import httpx

from repoinsights.analyzers.markers import MANIFEST_FILES
from repoinsights.config import AnalysisOptions
from repoinsights.models.schemas import (
    CommitRecord,
    ContributorRecord,
    IssueRecord,
    ReleaseRecord,
    RepoRef,
    RepositoryInfo,
    RepositorySnapshot,
)

logger = logging.getLogger(__name__)

# 409 is returned for listings of an empty repository
EMPTY_STATUS_CODES = (404, 409)


class RepositoryNotFoundError(Exception):
    """Raised when a repository does not exist or is not accessible."""

    def __init__(self, repo_ref: RepoRef) -> None:
        self.repo_ref = repo_ref
        super().__init__(
            f"Repository {repo_ref.full_name} not accessible (may be private, deleted, or renamed)"
        )


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubFetcher:
    """Fetches repository data from the GitHub REST API.

    Requires a GitHub personal access token for higher rate limits.
    Set GITHUB_TOKEN environment variable or pass token to constructor.
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            token: GitHub personal access token. If not provided, uses GITHUB_TOKEN env var.
            client: Optional httpx client. If not provided, a new client is created per request.
        """
        self._token = token or os.environ.get("GITHUB_TOKEN")
        self._client = client

        # Rate limit tracking
        self.rate_limit_remaining: int = 5000
        self.rate_limit_total: int = 5000
        self.rate_limit_reset: datetime | None = None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a throwaway one closed on exit."""
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=30.0) as client:
            yield client

    def _record_rate_limit(self, remaining, limit, reset) -> None:
        """Store quota values from headers or a /rate_limit body. None leaves a value as is."""
        if remaining is not None:
            self.rate_limit_remaining = int(remaining)
        if limit is not None:
            self.rate_limit_total = int(limit)
        if reset:
            self.rate_limit_reset = datetime.fromtimestamp(int(reset), tz=timezone.utc)

    async def _get_json(
        self, client: httpx.AsyncClient, path: str, params: dict | None = None
    ) -> dict | list | None:
        """GET one API path. None for an empty or missing resource, raises on other errors."""
        response = await client.get(f"{self.BASE_URL}{path}", params=params, headers=self._headers())
        self._record_rate_limit(
            response.headers.get("X-RateLimit-Remaining"),
            response.headers.get("X-RateLimit-Limit"),
            response.headers.get("X-RateLimit-Reset"),
        )
        if response.status_code in EMPTY_STATUS_CODES:
            return None
        response.raise_for_status()
        return response.json()

    async def _fetch(self, path: str, params: dict | None = None) -> dict | list | None:
        async with self._session() as client:
            return await self._get_json(client, path, params)

    async def _fetch_all_pages(
        self,
        path: str,
        params: dict | None = None,
        max_pages: int = 10,
        per_page: int = 100,
    ) -> list:
        """Collect a paginated listing, stopping at a short page or ``max_pages``."""
        items: list = []
        async with self._session() as client:
            for page in range(1, max_pages + 1):
                batch = await self._get_json(
                    client, path, {**(params or {}), "per_page": per_page, "page": page}
                )
                if not batch:
                    break
                items.extend(batch)
                if len(batch) < per_page:
                    break
        return items

    async def fetch_rate_limit(self) -> dict:
        """Fetch the core REST rate limit and update the tracked values.

        Returns:
            Dict with ``remaining``, ``limit`` and ``reset`` (datetime or None).
        """
        data = await self._fetch("/rate_limit") or {}
        core = data.get("resources", {}).get("core") or data.get("rate") or {}
        self._record_rate_limit(core.get("remaining"), core.get("limit"), core.get("reset"))

        return {
            "remaining": self.rate_limit_remaining,
            "limit": self.rate_limit_total,
            "reset": self.rate_limit_reset,
        }

    async def fetch_snapshot(
        self,
        repo_ref: RepoRef,
        options: AnalysisOptions | None = None,
        now: datetime | None = None,
    ) -> RepositorySnapshot:
        """Fetch the raw data the enabled extractors need.

        Args:
            repo_ref: Reference to the repository.
            options: Analysis options. Collections for disabled extractors
                are left empty.
            now: End of the analysis window. Defaults to the current time.

        Returns:
            RepositorySnapshot for the repository.

        Raises:
            RepositoryNotFoundError: If the repository returns 404.
            httpx.HTTPStatusError: On any other failed request.
        """
        options = options or AnalysisOptions()
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=options.analyze_days)
        owner, repo = repo_ref.owner, repo_ref.repo

        info = await self.fetch_repo_info(repo_ref)
        logger.debug(f"Fetched repository info for {repo_ref.full_name}")

        languages = await self._fetch(f"/repos/{owner}/{repo}/languages") or {}
        root_entries = await self._fetch_root_entries(owner, repo)
        manifests = await self._fetch_manifests(owner, repo, root_entries)

        file_paths: list[str] = []
        if options.include_code_quality:
            file_paths = await self._fetch_file_paths(owner, repo, info.default_branch)

        contributors: list[ContributorRecord] = []
        if options.include_contributor_insights:
            contributors = await self._fetch_contributors(owner, repo)

        commits: list[CommitRecord] = []
        if options.include_contributor_insights or options.include_activity_trends:
            commits = await self._fetch_commits(owner, repo, since)

        issues: list[IssueRecord] = []
        releases: list[ReleaseRecord] = []
        if options.include_activity_trends:
            issues = await self._fetch_issues(owner, repo, since)
            releases = await self._fetch_releases(owner, repo)

        return RepositorySnapshot(
            repo_ref=repo_ref,
            info=info,
            commits=commits,
            issues=issues,
            releases=releases,
            contributors=contributors,
            file_paths=file_paths,
            languages=languages,
            root_entries=root_entries,
            manifests=manifests,
            fetched_at=now,
        )

    async def fetch_repo_info(self, repo_ref: RepoRef) -> RepositoryInfo:
        """Fetch basic repository information.

        Raises:
            RepositoryNotFoundError: If the repository returns 404.
        """
        data = await self._fetch(f"/repos/{repo_ref.owner}/{repo_ref.repo}")
        if data is None:
            raise RepositoryNotFoundError(repo_ref)

        license_info = data.get("license") or {}

        return RepositoryInfo(
            name=data.get("name", repo_ref.repo),
            full_name=data.get("full_name", repo_ref.full_name),
            description=data.get("description"),
            stars=data.get("stargazers_count", 0),
            forks=data.get("forks_count", 0),
            # GitHub reports watchers_count equal to stargazers_count
            watchers=data.get("watchers_count", 0),
            open_issues=data.get("open_issues_count", 0),
            license=license_info.get("name"),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
            pushed_at=_parse_timestamp(data.get("pushed_at")),
            size=data.get("size", 0),
            default_branch=data.get("default_branch") or "main",
            is_private=data.get("private", False),
            is_fork=data.get("fork", False),
            has_wiki=data.get("has_wiki", False),
            has_pages=data.get("has_pages", False),
            has_issues=data.get("has_issues", True),
            has_projects=data.get("has_projects", False),
            has_downloads=data.get("has_downloads", False),
        )

    async def _fetch_root_entries(self, owner: str, repo: str) -> list[str]:
        root = await self._fetch(f"/repos/{owner}/{repo}/contents")
        if not root or not isinstance(root, list):
            return []
        return [item["name"] for item in root if item.get("name")]

    async def _fetch_manifests(
        self, owner: str, repo: str, root_entries: list[str]
    ) -> dict[str, str]:
        """Fetch dependency manifests present at the repository root."""
        manifests = {}
        for name in root_entries:
            if name.lower() not in MANIFEST_FILES:
                continue

            content = await self.fetch_file_content(owner, repo, name)
            if content is not None:
                manifests[name] = content

        return manifests

    async def fetch_file_content(self, owner: str, repo: str, path: str) -> str | None:
        """Fetch and decode a file from the contents API.

        Returns None if the file is missing or not UTF-8 text.
        """
        data = await self._fetch(f"/repos/{owner}/{repo}/contents/{path}")
        if not data or not isinstance(data, dict):
            return None

        # File content is base64 encoded
        content = data.get("content", "")
        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            logger.debug(f"Could not decode {owner}/{repo}/{path}: {e}")
            return None

    async def _fetch_file_paths(self, owner: str, repo: str, branch: str) -> list[str]:
        """Fetch every blob path on the default branch."""
        tree = await self._fetch(
            f"/repos/{owner}/{repo}/git/trees/{branch}",
            params={"recursive": "1"},
        )
        if not tree or not isinstance(tree, dict):
            return []

        if tree.get("truncated"):
            logger.warning(f"File tree for {owner}/{repo} is truncated; file signals are partial")

        return [
            item["path"]
            for item in tree.get("tree", [])
            if item.get("type") == "blob" and item.get("path")
        ]

    async def _fetch_contributors(self, owner: str, repo: str) -> list[ContributorRecord]:
        contributors = await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/contributors",
            max_pages=5,
        )
        return [
            ContributorRecord(
                login=c.get("login") or c.get("name") or "anonymous",
                contributions=c.get("contributions", 0),
                avatar_url=c.get("avatar_url"),
                profile_url=c.get("html_url"),
            )
            for c in contributors
        ]

    async def _fetch_commits(
        self, owner: str, repo: str, since: datetime
    ) -> list[CommitRecord]:
        commits = await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/commits",
            params={"since": since.isoformat()},
        )

        records = []
        for commit in commits:
            git_author = (commit.get("commit") or {}).get("author") or {}
            authored_at = _parse_timestamp(git_author.get("date"))
            if authored_at is None:
                continue

            records.append(
                CommitRecord(
                    sha=commit.get("sha", ""),
                    author_login=(commit.get("author") or {}).get("login"),
                    author_name=git_author.get("name"),
                    authored_at=authored_at,
                )
            )
        return records

    async def _fetch_issues(self, owner: str, repo: str, since: datetime) -> list[IssueRecord]:
        """Fetch issues and pull requests updated since ``since``."""
        issues = await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/issues",
            params={"state": "all", "since": since.isoformat()},
        )
        return [
            IssueRecord(
                number=issue.get("number", 0),
                state=issue.get("state", "open"),
                created_at=_parse_timestamp(issue["created_at"]),
                updated_at=_parse_timestamp(issue.get("updated_at") or issue["created_at"]),
                comments=issue.get("comments", 0),
                is_pull_request="pull_request" in issue,
            )
            for issue in issues
        ]

    async def _fetch_releases(self, owner: str, repo: str) -> list[ReleaseRecord]:
        """Fetch releases, newest first."""
        releases = await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/releases",
            max_pages=5,
        )
        return [
            ReleaseRecord(
                name=release.get("name"),
                tag_name=release.get("tag_name", ""),
                created_at=_parse_timestamp(release.get("created_at")),
                published_at=_parse_timestamp(release.get("published_at")),
            )
            for release in releases
        ]
