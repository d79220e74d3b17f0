"""Health score aggregation from repository attributes and extractor outputs."""

from datetime import datetime, timezone

from repoinsights.analyzers.common import clamp, round_half_up
from repoinsights.models.schemas import (
    ActivityMetrics,
    CategoryScore,
    CodeQualityMetrics,
    ContributorMetrics,
    HealthScore,
    HealthScoreBreakdown,
    RepositoryInfo,
    TechStackMetrics,
)

# (threshold, points), checked in order
STAR_POINTS = ((10_000, 20), (5_000, 18), (1_000, 15), (500, 12), (100, 9), (50, 6), (10, 3))
FORK_POINTS = ((1_000, 20), (500, 15), (100, 10), (50, 5))
CONTRIBUTOR_COUNT_POINTS = ((50, 8), (20, 6), (10, 4), (5, 2))
ACTIVE_CONTRIBUTOR_POINTS = ((5, 6), (3, 4), (1, 2))

# (max days since push, points); anything older scores PUSH_FLOOR_POINTS
PUSH_RECENCY_POINTS = ((7, 25), (30, 20), (90, 15), (180, 10))
PUSH_FLOOR_POINTS = 5

HEALTHY_DISTRIBUTION_POINTS = 6
MAINTENANCE_STEP = 5
OPEN_ISSUES_LIMIT = 50
RATE_THRESHOLD = 60
QUALITY_FALLBACK_STEP = 5


def _ladder(value: float, ladder: tuple[tuple[float, int], ...]) -> int:
    for threshold, points in ladder:
        if value >= threshold:
            return points
    return 0


def score_popularity(info: RepositoryInfo) -> int:
    return _ladder(info.stars, STAR_POINTS)


def score_activity(
    info: RepositoryInfo, activity: ActivityMetrics | None, now: datetime
) -> int:
    """Activity points, from activity metrics or the last push date."""
    if activity is not None:
        return activity_from_metrics(activity)
    return activity_from_push_date(info.pushed_at, now)


def activity_from_metrics(activity: ActivityMetrics) -> int:
    return round_half_up(activity.activity_score * 25 / 100)


def activity_from_push_date(pushed_at: datetime | None, now: datetime) -> int:
    """Push recency ladder. Never 0; an unknown push date gets the floor."""
    if pushed_at is None:
        return PUSH_FLOOR_POINTS

    days_since_push = (now - pushed_at).days
    for max_days, points in PUSH_RECENCY_POINTS:
        if days_since_push <= max_days:
            return points
    return PUSH_FLOOR_POINTS


def score_maintenance(info: RepositoryInfo, activity: ActivityMetrics | None) -> int:
    """Issue tracking and backlog points, plus rate points when activity is known."""
    score = 0
    if info.has_issues:
        score += MAINTENANCE_STEP
    if info.open_issues < OPEN_ISSUES_LIMIT:
        score += MAINTENANCE_STEP

    if activity is not None:
        if activity.issues.close_rate > RATE_THRESHOLD:
            score += MAINTENANCE_STEP
        if activity.pull_requests.merge_rate > RATE_THRESHOLD:
            score += MAINTENANCE_STEP

    return score


def score_community(info: RepositoryInfo, contributors: ContributorMetrics | None) -> int:
    if contributors is not None:
        return community_from_contributors(contributors)
    return community_from_forks(info)


def community_from_contributors(contributors: ContributorMetrics) -> int:
    score = _ladder(contributors.total_contributors, CONTRIBUTOR_COUNT_POINTS)
    if contributors.diversity.is_healthy_distribution:
        score += HEALTHY_DISTRIBUTION_POINTS
    score += _ladder(contributors.recent_activity.active_contributors, ACTIVE_CONTRIBUTOR_POINTS)
    return score


def community_from_forks(info: RepositoryInfo) -> int:
    return _ladder(info.forks, FORK_POINTS)


def score_quality(
    info: RepositoryInfo,
    tech_stack: TechStackMetrics | None,
    code_quality: CodeQualityMetrics | None,
) -> int:
    if code_quality is not None:
        return quality_from_metrics(code_quality)
    return quality_from_basics(info, tech_stack)


def quality_from_metrics(code_quality: CodeQualityMetrics) -> int:
    return round_half_up(code_quality.score * 15 / 100)


def quality_from_basics(info: RepositoryInfo, tech_stack: TechStackMetrics | None) -> int:
    """License, CI and build tooling presence, 5 points each."""
    score = 0
    if info.license:
        score += QUALITY_FALLBACK_STEP
    if tech_stack is not None and tech_stack.cicd_tools:
        score += QUALITY_FALLBACK_STEP
    if tech_stack is not None and tech_stack.build_tools:
        score += QUALITY_FALLBACK_STEP
    return score


class HealthScorer:
    """Combines category scores into a 0-100 health score.

    Category maximums (total 100):
    - Popularity: 20
    - Activity: 25
    - Maintenance: 20
    - Community: 20
    - Quality: 15

    Activity, community and quality fall back to basic repository attributes
    when the matching extractor output is None.
    """

    MAX_SCORES = {
        "popularity": 20,
        "activity": 25,
        "maintenance": 20,
        "community": 20,
        "quality": 15,
    }

    def calculate(
        self,
        info: RepositoryInfo,
        tech_stack: TechStackMetrics | None = None,
        code_quality: CodeQualityMetrics | None = None,
        contributors: ContributorMetrics | None = None,
        activity: ActivityMetrics | None = None,
        now: datetime | None = None,
    ) -> HealthScore:
        """Calculate the health score.

        Args:
            info: Basic repository attributes.
            tech_stack: Tech stack metrics, used by the quality fallback.
            code_quality: Code quality metrics, or None when not analyzed.
            contributors: Contributor metrics, or None when not analyzed.
            activity: Activity metrics, or None when not analyzed.
            now: Reference time for push recency. Defaults to the current time.

        Returns:
            HealthScore with the total and per-category breakdown.
        """
        now = now or datetime.now(timezone.utc)

        raw = {
            "popularity": score_popularity(info),
            "activity": score_activity(info, activity, now),
            "maintenance": score_maintenance(info, activity),
            "community": score_community(info, contributors),
            "quality": score_quality(info, tech_stack, code_quality),
        }
        categories = {
            name: CategoryScore(
                score=clamp(value, self.MAX_SCORES[name]),
                max_score=self.MAX_SCORES[name],
            )
            for name, value in raw.items()
        }

        total = sum(category.score for category in categories.values())

        return HealthScore(
            health_score=clamp(total, 100),
            breakdown=HealthScoreBreakdown(**categories),
        )
