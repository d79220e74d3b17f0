"""Signal extractors, scoring and the GitHub-backed analysis pipeline."""

from repoinsights.analyzers.github import GitHubFetcher, RepositoryNotFoundError
from repoinsights.analyzers.pipeline import AnalysisPipeline, generate_insights
from repoinsights.analyzers.scorer import HealthScorer

__all__ = [
    "AnalysisPipeline",
    "GitHubFetcher",
    "HealthScorer",
    "RepositoryNotFoundError",
    "generate_insights",
]
