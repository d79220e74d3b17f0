"""Data models and schemas."""

from repoinsights.models.schemas import (
    ActivityMetrics,
    CodeQualityMetrics,
    ContributorMetrics,
    FailedAnalysis,
    HealthScore,
    RepoRef,
    RepositoryInsights,
    RepositorySnapshot,
    TechStackMetrics,
)

__all__ = [
    "ActivityMetrics",
    "CodeQualityMetrics",
    "ContributorMetrics",
    "FailedAnalysis",
    "HealthScore",
    "RepoRef",
    "RepositoryInsights",
    "RepositorySnapshot",
    "TechStackMetrics",
]
