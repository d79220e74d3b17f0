"""Commit, issue, pull request and release activity within a trailing window."""

from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from repoinsights.analyzers.common import percentage, safe_average
from repoinsights.models.schemas import (
    ActivityMetrics,
    AnalysisPeriod,
    CommitActivity,
    CommitRecord,
    CommitTrend,
    IssueActivity,
    IssueRecord,
    LatestRelease,
    PullRequestActivity,
    ReleaseActivity,
    ReleaseRecord,
)

MIN_TREND_DAYS = 7
TREND_CHANGE_PERCENT = 20
MAX_DAILY_MAP_DAYS = 30
CADENCE_RELEASES = 5

# (threshold, points), checked in order
COMMIT_RATE_POINTS = ((5, 40), (2, 30), (1, 20), (0.5, 10))
CLOSE_RATE_POINTS = ((80, 30), (60, 20), (40, 10))
MERGE_RATE_POINTS = ((80, 20), (60, 15), (40, 10))
RECENT_RELEASE_POINTS = 10


def analyze_activity(
    commits: Iterable[CommitRecord],
    issues: Iterable[IssueRecord],
    releases: Iterable[ReleaseRecord],
    analyze_days: int,
    now: datetime,
) -> ActivityMetrics:
    """Measure repository activity over the ``analyze_days`` before ``now``.

    Commits are windowed by author date, issues and pull requests by last
    update, and releases by publication date (creation date for drafts).
    The release total and cadence use the full release list.

    Raises:
        ValueError: If ``analyze_days`` is smaller than 1.
    """
    if analyze_days < 1:
        raise ValueError(f"analyze_days must be at least 1, got {analyze_days}")

    since = now - timedelta(days=analyze_days)

    def in_window(moment: datetime | None) -> bool:
        return moment is not None and since <= moment <= now

    window_commits = [c for c in commits if in_window(c.authored_at)]
    window_issues = [i for i in issues if in_window(i.updated_at)]
    all_releases = list(releases)

    commit_activity = analyze_commits(window_commits, analyze_days)
    issue_activity = analyze_issues([i for i in window_issues if not i.is_pull_request])
    pr_activity = analyze_pull_requests([i for i in window_issues if i.is_pull_request])

    recent = [r for r in all_releases if in_window(r.timestamp)]
    release_activity = analyze_releases(all_releases, len(recent))

    return ActivityMetrics(
        period=AnalysisPeriod(days=analyze_days, start=since, end=now),
        commits=commit_activity,
        issues=issue_activity,
        pull_requests=pr_activity,
        releases=release_activity,
        activity_score=calculate_activity_score(
            commits_per_day=len(window_commits) / analyze_days,
            close_rate=issue_activity.close_rate,
            merge_rate=pr_activity.merge_rate,
            has_recent_release=bool(recent),
        ),
    )


def analyze_commits(commits: list[CommitRecord], analyze_days: int) -> CommitActivity:
    by_day = commits_by_day(commits)
    return CommitActivity(
        total=len(commits),
        average_per_day=round(len(commits) / analyze_days, 2),
        trend=calculate_trend(by_day),
        commits_by_day=by_day if len(by_day) <= MAX_DAILY_MAP_DAYS else None,
    )


def commits_by_day(commits: list[CommitRecord]) -> dict[str, int]:
    """Commit counts keyed by UTC calendar date, in date order."""
    counts = Counter(
        commit.authored_at.astimezone(timezone.utc).date().isoformat() for commit in commits
    )
    return dict(sorted(counts.items()))


def calculate_trend(by_day: dict[str, int]) -> CommitTrend:
    """Compare average daily commits in the later half of active days to the earlier half."""
    days = sorted(by_day)
    if len(days) < MIN_TREND_DAYS:
        return CommitTrend.INSUFFICIENT_DATA

    midpoint = len(days) // 2
    earlier = [by_day[day] for day in days[:midpoint]]
    later = [by_day[day] for day in days[midpoint:]]

    earlier_avg = sum(earlier) / len(earlier)
    later_avg = sum(later) / len(later)
    # Every listed day has at least one commit, so earlier_avg > 0
    change = (later_avg - earlier_avg) / earlier_avg * 100

    if change > TREND_CHANGE_PERCENT:
        return CommitTrend.INCREASING
    if change < -TREND_CHANGE_PERCENT:
        return CommitTrend.DECREASING
    return CommitTrend.STABLE


def analyze_issues(issues: list[IssueRecord]) -> IssueActivity:
    closed = sum(1 for issue in issues if issue.state == "closed")
    # Hours from creation to last update, for issues that got a comment
    response_hours = [
        (issue.updated_at - issue.created_at).total_seconds() / 3600
        for issue in issues
        if issue.comments > 0
    ]

    return IssueActivity(
        total=len(issues),
        open=sum(1 for issue in issues if issue.state == "open"),
        closed=closed,
        close_rate=percentage(closed, len(issues)),
        average_response_time_hours=safe_average(response_hours),
    )


def analyze_pull_requests(pull_requests: list[IssueRecord]) -> PullRequestActivity:
    closed = sum(1 for pr in pull_requests if pr.state == "closed")
    return PullRequestActivity(
        total=len(pull_requests),
        open=sum(1 for pr in pull_requests if pr.state == "open"),
        closed=closed,
        merge_rate=percentage(closed, len(pull_requests)),
    )


def analyze_releases(releases: list[ReleaseRecord], recent_count: int) -> ReleaseActivity:
    dated = sorted(
        (r for r in releases if r.timestamp is not None),
        key=lambda r: r.timestamp,
        reverse=True,
    )
    latest = dated[0] if dated else (releases[0] if releases else None)

    return ReleaseActivity(
        total=len(releases),
        recent_count=recent_count,
        latest_release=(
            LatestRelease(
                name=latest.name,
                tag_name=latest.tag_name,
                published_at=latest.published_at,
            )
            if latest is not None
            else None
        ),
        average_cadence_days=(
            calculate_cadence(dated[:CADENCE_RELEASES]) if len(releases) >= 2 else None
        ),
    )


def calculate_cadence(releases: list[ReleaseRecord]) -> float | None:
    """Average gap in days between consecutive releases, newest first."""
    gaps = [
        (newer.timestamp - older.timestamp).total_seconds() / 86400
        for newer, older in zip(releases, releases[1:])
    ]
    return safe_average(gaps)


def _points(value: float, ladder: tuple[tuple[float, int], ...]) -> int:
    for threshold, points in ladder:
        if value >= threshold:
            return points
    return 0


def calculate_activity_score(
    commits_per_day: float,
    close_rate: float,
    merge_rate: float,
    has_recent_release: bool,
) -> int:
    score = (
        _points(commits_per_day, COMMIT_RATE_POINTS)
        + _points(close_rate, CLOSE_RATE_POINTS)
        + _points(merge_rate, MERGE_RATE_POINTS)
    )
    if has_recent_release:
        score += RECENT_RELEASE_POINTS
    return score
