"""End-to-end analysis pipeline for GitHub repositories."""

import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx

from repoinsights.analyzers.activity import analyze_activity
from repoinsights.analyzers.code_quality import analyze_code_quality
from repoinsights.analyzers.contributors import analyze_contributors
from repoinsights.analyzers.github import GitHubFetcher
from repoinsights.analyzers.scorer import HealthScorer
from repoinsights.analyzers.tech_stack import analyze_tech_stack
from repoinsights.config import AnalysisOptions
from repoinsights.models.schemas import (
    FailedAnalysis,
    RepositoryInsights,
    RepositorySnapshot,
)
from repoinsights.repo_url import parse_github_url

logger = logging.getLogger(__name__)

LOW_RATE_LIMIT_THRESHOLD = 50

AnalysisResult = RepositoryInsights | FailedAnalysis


def generate_insights(
    snapshot: RepositorySnapshot,
    options: AnalysisOptions | None = None,
    now: datetime | None = None,
) -> RepositoryInsights:
    """Run the extractors and the health scorer over a fetched snapshot.

    Tech stack is always extracted. The other extractors run only when
    enabled in ``options``; a skipped extractor leaves its block as None
    and the scorer falls back for that category.
    """
    options = options or AnalysisOptions()
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=options.analyze_days)

    tech_stack = analyze_tech_stack(
        snapshot.languages, snapshot.root_entries, snapshot.manifests
    )

    code_quality = None
    if options.include_code_quality:
        code_quality = analyze_code_quality(snapshot.file_paths)

    contributors = None
    if options.include_contributor_insights:
        contributors = analyze_contributors(
            snapshot.contributors, snapshot.commits, since=since, now=now
        )

    activity = None
    if options.include_activity_trends:
        activity = analyze_activity(
            snapshot.commits,
            snapshot.issues,
            snapshot.releases,
            analyze_days=options.analyze_days,
            now=now,
        )

    health = HealthScorer().calculate(
        snapshot.info,
        tech_stack=tech_stack,
        code_quality=code_quality,
        contributors=contributors,
        activity=activity,
        now=now,
    )

    return RepositoryInsights(
        url=snapshot.repo_ref.url,
        owner=snapshot.repo_ref.owner,
        repo=snapshot.repo_ref.repo,
        analyzed_at=now,
        basic_info=snapshot.info,
        tech_stack=tech_stack,
        code_quality=code_quality,
        contributors=contributors,
        activity_trends=activity,
        health_score=health.health_score,
        health_breakdown=health.breakdown,
    )


class AnalysisPipeline:
    """Orchestrates repository analysis.

    Pipeline stages:
    1. Parse the repository URL
    2. Fetch a snapshot from GitHub (only what enabled extractors need)
    3. Extract signals and calculate the health score
    4. Save results
    """

    def __init__(
        self,
        options: AnalysisOptions | None = None,
        github_token: str | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            options: Analysis options. Defaults to all extractors, 90 days.
            github_token: GitHub personal access token.
        """
        self.options = options or AnalysisOptions()
        self._github_token = github_token
        self.github = GitHubFetcher(token=github_token)
        self._http_client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AnalysisPipeline":
        """Set up shared HTTP client."""
        self._http_client = httpx.AsyncClient(timeout=60.0)
        self.github = GitHubFetcher(token=self._github_token, client=self._http_client)
        return self

    async def __aexit__(self, *args) -> None:
        """Clean up HTTP client."""
        if self._http_client:
            await self._http_client.aclose()

    async def check_rate_limit(self) -> dict:
        """Log the remaining GitHub quota, warning when it is low.

        Returns:
            Rate limit info from GitHubFetcher.fetch_rate_limit.
        """
        rate = await self.github.fetch_rate_limit()
        logger.info(f"GitHub API rate limit: {rate['remaining']}/{rate['limit']} requests remaining")
        if rate["remaining"] < LOW_RATE_LIMIT_THRESHOLD:
            logger.warning(
                "Low GitHub API rate limit. Consider providing a GitHub token for higher limits."
            )
        return rate

    async def analyze_repository(self, url: str) -> RepositoryInsights:
        """Run full analysis on a single repository.

        Raises:
            InvalidRepositoryURL: If ``url`` is not a GitHub repository URL.
            RepositoryNotFoundError: If the repository is not accessible.
        """
        repo_ref = parse_github_url(url)
        now = datetime.now(timezone.utc)

        snapshot = await self.github.fetch_snapshot(repo_ref, self.options, now=now)
        return generate_insights(snapshot, self.options, now=now)

    async def analyze_repositories(
        self,
        urls: list[str],
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> list[AnalysisResult]:
        """Analyze repositories one after another.

        A failure is recorded as a FailedAnalysis and the batch continues.

        Args:
            urls: Repository URLs.
            progress_callback: Optional callback(current, total, url).

        Returns:
            One result per URL, in input order.
        """
        total = len(urls)
        results: list[AnalysisResult] = []

        for i, url in enumerate(urls):
            if progress_callback:
                progress_callback(i + 1, total, url)

            logger.info(f"Analyzing {url}")
            try:
                insights = await self.analyze_repository(url)
            except Exception as e:
                # Log but continue with other repositories
                logger.error(f"Error analyzing {url}: {e}")
                results.append(FailedAnalysis(url=url, error=str(e)))
                continue

            logger.info(f"Analyzed {insights.owner}/{insights.repo}: health score {insights.health_score}/100")
            results.append(insights)

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Successfully analyzed {succeeded}/{total} repositories")
        return results


def save_results(results: list[AnalysisResult], path: Path) -> Path:
    """Write results to ``path`` as a JSON list.

    Returns:
        Path to saved file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [result.model_dump(mode="json") for result in results]
    path.write_text(json.dumps(data, indent=2, default=str))
    return path
