"""Pydantic models for repository snapshots, signals and reports."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Base for models that are immutable once constructed."""

    model_config = ConfigDict(frozen=True)


class RepoRef(FrozenModel):
    """Reference to a GitHub repository."""

    owner: str
    repo: str

    @property
    def url(self) -> str:
        """Get the full repository URL."""
        return f"https://github.com/{self.owner}/{self.repo}"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


# --- Raw snapshot models ---


class RepositoryInfo(FrozenModel):
    """Basic GitHub repository attributes."""

    name: str
    full_name: str
    description: str | None = None
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    license: str | None = None  # License name, None when the repo has none
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    size: int = 0
    default_branch: str = "main"
    is_private: bool = False
    is_fork: bool = False
    has_wiki: bool = False
    has_pages: bool = False
    has_issues: bool = True
    has_projects: bool = False
    has_downloads: bool = False


class CommitRecord(FrozenModel):
    """A single commit on the default branch."""

    sha: str = ""
    author_login: str | None = None
    author_name: str | None = None
    authored_at: datetime

    @property
    def identity(self) -> str:
        """Platform login when known, else the raw git author name."""
        return self.author_login or self.author_name or "unknown"


class IssueRecord(FrozenModel):
    """An issue or pull request from the unified issues listing."""

    number: int = 0
    state: str = "open"  # open, closed
    created_at: datetime
    updated_at: datetime
    comments: int = 0
    is_pull_request: bool = False


class ReleaseRecord(FrozenModel):
    """A published (or draft) release."""

    name: str | None = None
    tag_name: str = ""
    created_at: datetime | None = None
    published_at: datetime | None = None

    @property
    def timestamp(self) -> datetime | None:
        """Publication time, falling back to creation time for drafts."""
        return self.published_at or self.created_at


class ContributorRecord(FrozenModel):
    """A contributor with their lifetime contribution count."""

    login: str
    contributions: int = 0
    avatar_url: str | None = None
    profile_url: str | None = None


class RepositorySnapshot(FrozenModel):
    """Point-in-time raw data for one repository.

    Collections the caller did not fetch are left empty.
    """

    repo_ref: RepoRef
    info: RepositoryInfo
    commits: list[CommitRecord] = Field(default_factory=list)
    issues: list[IssueRecord] = Field(default_factory=list)
    releases: list[ReleaseRecord] = Field(default_factory=list)  # Newest first
    contributors: list[ContributorRecord] = Field(default_factory=list)
    file_paths: list[str] = Field(default_factory=list)
    languages: dict[str, int] = Field(default_factory=dict)
    root_entries: list[str] = Field(default_factory=list)
    manifests: dict[str, str] = Field(default_factory=dict)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# --- Tech stack ---


class LanguageShare(FrozenModel):
    """Share of repository bytes held by one language."""

    name: str
    bytes: int
    percentage: float = Field(ge=0, le=100)


class DependencySummary(FrozenModel):
    """Dependencies declared in a manifest file."""

    manifest: str
    production: list[str] = Field(default_factory=list)
    development: list[str] = Field(default_factory=list)
    total_count: int = 0


class TechStackMetrics(FrozenModel):
    """Language and tooling footprint."""

    languages: list[str] = Field(default_factory=list)
    primary_language: str = "Unknown"
    language_breakdown: list[LanguageShare] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    build_tools: list[str] = Field(default_factory=list)
    package_managers: list[str] = Field(default_factory=list)
    cicd_tools: list[str] = Field(default_factory=list)
    dependencies: DependencySummary | None = None


# --- Code quality ---


class DocumentationSignals(FrozenModel):
    """Presence of documentation files."""

    has_readme: bool = False
    has_license: bool = False
    has_contributing: bool = False
    has_changelog: bool = False
    has_code_of_conduct: bool = False
    has_docs_folder: bool = False
    estimated_documented_files: int = 0
    documentation_score: int = Field(ge=0, le=100, default=0)


class CoverageSignals(FrozenModel):
    """Test file footprint."""

    test_file_count: int = 0
    total_file_count: int = 0
    estimated_coverage_percentage: float = Field(ge=0, le=100, default=0.0)
    has_testing_framework: bool = False
    testing_score: int = Field(ge=0, le=100, default=0)


class CodeStandards(FrozenModel):
    """Presence of linter, formatter and type checker configuration."""

    has_linting: bool = False
    has_formatting: bool = False
    has_type_checking: bool = False


class FileStructure(FrozenModel):
    """Conventional top-level directory layout."""

    top_level_directories: list[str] = Field(default_factory=list)
    total_files: int = 0
    has_src_folder: bool = False
    has_lib_folder: bool = False
    has_test_folder: bool = False
    has_docs_folder: bool = False
    has_examples_folder: bool = False
    has_config_folder: bool = False
    is_well_structured: bool = False


class CodeQualityMetrics(FrozenModel):
    """Code quality signals inferred from the file listing."""

    score: int = Field(ge=0, le=100)
    documentation: DocumentationSignals
    testing: CoverageSignals
    code_standards: CodeStandards
    file_structure: FileStructure


# --- Contributors ---


class TopContributor(FrozenModel):
    """Lifetime contributor entry."""

    login: str
    contributions: int
    avatar_url: str | None = None
    profile_url: str | None = None


class AuthorActivity(FrozenModel):
    """Commits by one author inside the analysis window."""

    login: str
    commits: int
    first_commit: datetime
    last_commit: datetime


class RecentContributorActivity(FrozenModel):
    contributors_in_period: int = 0
    active_contributors: int = 0
    casual_contributors: int = 0
    top_recent_contributors: list[AuthorActivity] = Field(default_factory=list)


class ContributorDiversity(FrozenModel):
    contributor_concentration: float = Field(ge=0, le=100, default=0.0)
    is_healthy_distribution: bool = False


class ContributorEngagement(FrozenModel):
    average_commits_per_contributor: float = 0.0
    has_active_core: bool = False


class ContributorMetrics(FrozenModel):
    """Contributor distribution and engagement."""

    total_contributors: int = 0
    top_contributors: list[TopContributor] = Field(default_factory=list)
    recent_activity: RecentContributorActivity = Field(
        default_factory=RecentContributorActivity
    )
    diversity: ContributorDiversity = Field(default_factory=ContributorDiversity)
    engagement: ContributorEngagement = Field(default_factory=ContributorEngagement)


# --- Activity ---


class CommitTrend(str, Enum):
    """Direction of daily commit counts across the window."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient-data"


class AnalysisPeriod(FrozenModel):
    days: int
    start: datetime
    end: datetime


class CommitActivity(FrozenModel):
    total: int = 0
    average_per_day: float = 0.0
    trend: CommitTrend = CommitTrend.INSUFFICIENT_DATA
    commits_by_day: dict[str, int] | None = None  # Suppressed above 30 days


class IssueActivity(FrozenModel):
    total: int = 0
    open: int = 0
    closed: int = 0
    close_rate: float = Field(ge=0, le=100, default=0.0)
    average_response_time_hours: float | None = None


class PullRequestActivity(FrozenModel):
    total: int = 0
    open: int = 0
    closed: int = 0
    # closed / total, merged and closed-unmerged are not distinguished
    merge_rate: float = Field(ge=0, le=100, default=0.0)


class LatestRelease(FrozenModel):
    name: str | None = None
    tag_name: str
    published_at: datetime | None = None


class ReleaseActivity(FrozenModel):
    total: int = 0
    recent_count: int = 0
    latest_release: LatestRelease | None = None
    average_cadence_days: float | None = None


class ActivityMetrics(FrozenModel):
    """Commit, issue, PR and release activity within the window."""

    period: AnalysisPeriod
    commits: CommitActivity
    issues: IssueActivity
    pull_requests: PullRequestActivity
    releases: ReleaseActivity
    activity_score: int = Field(ge=0, le=100)


# --- Scoring ---


class CategoryScore(FrozenModel):
    """Achieved points for one category alongside its maximum."""

    score: int = Field(ge=0)
    max_score: int


class HealthScoreBreakdown(FrozenModel):
    popularity: CategoryScore
    activity: CategoryScore
    maintenance: CategoryScore
    community: CategoryScore
    quality: CategoryScore


class HealthScore(FrozenModel):
    """Composite health score and its per-category breakdown."""

    health_score: int = Field(ge=0, le=100)
    breakdown: HealthScoreBreakdown


# --- Final report ---


class RepositoryInsights(FrozenModel):
    """Complete analysis of one repository."""

    url: str
    owner: str
    repo: str
    analyzed_at: datetime
    basic_info: RepositoryInfo
    tech_stack: TechStackMetrics
    code_quality: CodeQualityMetrics | None = None
    contributors: ContributorMetrics | None = None
    activity_trends: ActivityMetrics | None = None
    health_score: int = Field(ge=0, le=100)
    health_breakdown: HealthScoreBreakdown
    success: bool = True


class FailedAnalysis(FrozenModel):
    """Result entry for a repository whose analysis raised."""

    url: str
    error: str
    success: bool = False
