"""GitHub repository URL parsing."""

import re

from repoinsights.models.schemas import RepoRef

# https://github.com/owner/repo
# http://www.github.com/owner/repo/tree/main
# github.com/owner/repo
# git@github.com:owner/repo.git
GITHUB_PATTERNS = [
    re.compile(r"^(?:https?://)?(?:www\.)?github\.com/([^/\s]+)/([^/\s]+)"),
    re.compile(r"^git@github\.com:([^/\s]+)/([^/\s]+)"),
]


class InvalidRepositoryURL(ValueError):
    """Raised when a string is not a recognizable GitHub repository URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(
            f"Invalid GitHub URL format: {url}. Expected format: https://github.com/owner/repo"
        )


def parse_github_url(url: str) -> RepoRef:
    """Parse a GitHub repository URL into a RepoRef.

    Args:
        url: Repository URL in HTTPS, HTTP, bare host or SSH form. A trailing
            slash and a ``.git`` suffix are ignored.

    Returns:
        RepoRef for the repository.

    Raises:
        InvalidRepositoryURL: If the URL does not name a GitHub repository.
    """
    cleaned = url.strip().rstrip("/")
    cleaned = cleaned.removesuffix(".git")

    for pattern in GITHUB_PATTERNS:
        match = pattern.match(cleaned)
        if match:
            return RepoRef(owner=match.group(1), repo=match.group(2))

    raise InvalidRepositoryURL(url)
