"""Shared fixtures and model builders for the test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from repoinsights.models.schemas import (
    ActivityMetrics,
    AnalysisPeriod,
    CodeQualityMetrics,
    CodeStandards,
    CommitActivity,
    CommitRecord,
    ContributorDiversity,
    ContributorMetrics,
    ContributorRecord,
    CoverageSignals,
    DocumentationSignals,
    FileStructure,
    IssueActivity,
    IssueRecord,
    PullRequestActivity,
    RecentContributorActivity,
    ReleaseActivity,
    ReleaseRecord,
    RepoRef,
    RepositoryInfo,
    RepositorySnapshot,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

PYPROJECT = """
[project]
name = "demo"
dependencies = ["fastapi>=0.110", "httpx[http2]>=0.27"]

[project.optional-dependencies]
test = ["pytest>=8"]
"""


def ago(days: float = 0, hours: float = 0) -> datetime:
    return NOW - timedelta(days=days, hours=hours)


def make_commit(days_ago: float, login: str | None = "alice", name: str | None = None) -> CommitRecord:
    return CommitRecord(author_login=login, author_name=name, authored_at=ago(days_ago))


def make_issue(
    state: str = "open",
    created_days_ago: float = 5,
    updated_days_ago: float = 1,
    comments: int = 0,
    is_pull_request: bool = False,
) -> IssueRecord:
    return IssueRecord(
        state=state,
        created_at=ago(created_days_ago),
        updated_at=ago(updated_days_ago),
        comments=comments,
        is_pull_request=is_pull_request,
    )


def make_release(days_ago: float | None, tag: str = "v1.0.0", created_days_ago: float | None = None) -> ReleaseRecord:
    return ReleaseRecord(
        name=tag,
        tag_name=tag,
        published_at=ago(days_ago) if days_ago is not None else None,
        created_at=ago(created_days_ago) if created_days_ago is not None else None,
    )


def make_info(**overrides) -> RepositoryInfo:
    fields = {
        "name": "repo",
        "full_name": "owner/repo",
        "stars": 0,
        "forks": 0,
        "open_issues": 0,
        "has_issues": True,
        "pushed_at": ago(1),
    }
    fields.update(overrides)
    return RepositoryInfo(**fields)


def make_activity(score: int = 0, close_rate: float = 0.0, merge_rate: float = 0.0) -> ActivityMetrics:
    return ActivityMetrics(
        period=AnalysisPeriod(days=90, start=ago(90), end=NOW),
        commits=CommitActivity(),
        issues=IssueActivity(close_rate=close_rate),
        pull_requests=PullRequestActivity(merge_rate=merge_rate),
        releases=ReleaseActivity(),
        activity_score=score,
    )


def make_code_quality(score: int) -> CodeQualityMetrics:
    return CodeQualityMetrics(
        score=score,
        documentation=DocumentationSignals(),
        testing=CoverageSignals(),
        code_standards=CodeStandards(),
        file_structure=FileStructure(),
    )


def make_contributor_metrics(total: int, healthy: bool, active: int) -> ContributorMetrics:
    return ContributorMetrics(
        total_contributors=total,
        recent_activity=RecentContributorActivity(
            contributors_in_period=active,
            active_contributors=active,
        ),
        diversity=ContributorDiversity(
            contributor_concentration=50.0 if healthy else 90.0,
            is_healthy_distribution=healthy,
        ),
    )


@pytest.fixture
def snapshot() -> RepositorySnapshot:
    """A small but complete Python repository snapshot."""
    return RepositorySnapshot(
        repo_ref=RepoRef(owner="owner", repo="repo"),
        info=make_info(
            stars=1200,
            forks=120,
            open_issues=12,
            license="MIT License",
            pushed_at=ago(2),
        ),
        commits=[
            make_commit(1),
            make_commit(2),
            make_commit(3),
            make_commit(5, login="bob"),
        ],
        issues=[
            make_issue("closed", comments=1),
            make_issue("closed"),
            make_issue("open"),
            make_issue("closed", is_pull_request=True),
        ],
        releases=[make_release(10, "v1.1.0"), make_release(120, "v1.0.0")],
        contributors=[
            ContributorRecord(login="alice", contributions=40),
            ContributorRecord(login="bob", contributions=10),
        ],
        file_paths=[
            "README.md",
            "LICENSE",
            "pyproject.toml",
            "src/app.py",
            "tests/test_app.py",
            ".github/workflows/ci.yml",
        ],
        languages={"Python": 900, "Shell": 100},
        root_entries=["README.md", "LICENSE", "pyproject.toml", "src", "tests", ".github"],
        manifests={"pyproject.toml": PYPROJECT},
        fetched_at=NOW,
    )
