"""Contributor distribution and engagement.

Two separate views are combined here: the lifetime contributor list (used for
the top-10 and concentration) and the commits inside the analysis window
(used for per-author activity and engagement).
"""

from collections.abc import Iterable
from datetime import datetime

from repoinsights.analyzers.common import percentage
from repoinsights.models.schemas import (
    AuthorActivity,
    CommitRecord,
    ContributorDiversity,
    ContributorEngagement,
    ContributorMetrics,
    ContributorRecord,
    RecentContributorActivity,
    TopContributor,
)

TOP_CONTRIBUTORS_LIMIT = 10
TOP_RECENT_LIMIT = 5
ACTIVE_COMMIT_THRESHOLD = 3
ACTIVE_CORE_SIZE = 3
HEALTHY_CONCENTRATION_LIMIT = 70


def analyze_contributors(
    contributors: Iterable[ContributorRecord],
    commits: Iterable[CommitRecord],
    since: datetime | None = None,
    now: datetime | None = None,
) -> ContributorMetrics:
    """Summarize who contributes and how concentrated the work is.

    Args:
        contributors: Lifetime contributor list with contribution counts.
        commits: Commits to aggregate per author.
        since: Window start. Commits authored before it are ignored.
        now: Window end. Commits authored after it are ignored.

    Returns:
        ContributorMetrics for the lifetime list and the windowed commits.
    """
    lifetime = list(contributors)
    windowed = [
        c
        for c in commits
        if (since is None or c.authored_at >= since) and (now is None or c.authored_at <= now)
    ]

    top = sorted(lifetime, key=lambda c: c.contributions, reverse=True)[:TOP_CONTRIBUTORS_LIMIT]
    authors = aggregate_authors(windowed)

    active = sum(1 for author in authors if author.commits >= ACTIVE_COMMIT_THRESHOLD)
    concentration = calculate_concentration(lifetime, top)

    return ContributorMetrics(
        total_contributors=len(lifetime),
        top_contributors=[
            TopContributor(
                login=c.login,
                contributions=c.contributions,
                avatar_url=c.avatar_url,
                profile_url=c.profile_url,
            )
            for c in top
        ],
        recent_activity=RecentContributorActivity(
            contributors_in_period=len(authors),
            active_contributors=active,
            casual_contributors=len(authors) - active,
            top_recent_contributors=authors[:TOP_RECENT_LIMIT],
        ),
        diversity=ContributorDiversity(
            contributor_concentration=concentration,
            is_healthy_distribution=concentration < HEALTHY_CONCENTRATION_LIMIT,
        ),
        engagement=ContributorEngagement(
            average_commits_per_contributor=(
                round(len(windowed) / len(authors), 2) if authors else 0.0
            ),
            has_active_core=active >= ACTIVE_CORE_SIZE,
        ),
    )


def aggregate_authors(commits: list[CommitRecord]) -> list[AuthorActivity]:
    """Per-author commit counts and first/last timestamps, most commits first.

    Authors are keyed by ``CommitRecord.identity``. A login and a raw git
    name belonging to the same person are counted separately.
    """
    stats: dict[str, dict] = {}
    for commit in commits:
        entry = stats.get(commit.identity)
        if entry is None:
            stats[commit.identity] = {
                "commits": 1,
                "first_commit": commit.authored_at,
                "last_commit": commit.authored_at,
            }
            continue
        entry["commits"] += 1
        entry["first_commit"] = min(entry["first_commit"], commit.authored_at)
        entry["last_commit"] = max(entry["last_commit"], commit.authored_at)

    authors = [AuthorActivity(login=login, **entry) for login, entry in stats.items()]
    return sorted(authors, key=lambda a: a.commits, reverse=True)


def calculate_concentration(
    contributors: list[ContributorRecord], top: list[ContributorRecord]
) -> float:
    """Share of lifetime contributions held by ``top``, 0 when there are none."""
    total = sum(c.contributions for c in contributors)
    return percentage(sum(c.contributions for c in top), total)
