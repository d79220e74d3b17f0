"""Analysis options and the JSON input document."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ANALYZE_DAYS = 90


class AnalysisOptions(BaseModel):
    """Which extractors run and how long the activity window is.

    A disabled extractor is not invoked; the health score then uses the
    fallback formula for its category.
    """

    model_config = ConfigDict(frozen=True)

    include_code_quality: bool = True
    include_contributor_insights: bool = True
    include_activity_trends: bool = True
    analyze_days: int = Field(default=DEFAULT_ANALYZE_DAYS, ge=1)


class AnalysisInput(BaseModel):
    """Batch input document, as accepted by ``--input``.

    Example::

        {
            "repositoryUrls": ["https://github.com/pallets/flask"],
            "includeCodeQuality": true,
            "analyzeDays": 30
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    repository_urls: list[str] = Field(default_factory=list, alias="repositoryUrls")
    github_token: str | None = Field(default=None, alias="githubToken")
    include_code_quality: bool = Field(default=True, alias="includeCodeQuality")
    include_contributor_insights: bool = Field(default=True, alias="includeContributorInsights")
    include_activity_trends: bool = Field(default=True, alias="includeActivityTrends")
    analyze_days: int = Field(default=DEFAULT_ANALYZE_DAYS, ge=1, alias="analyzeDays")

    def to_options(self) -> AnalysisOptions:
        return AnalysisOptions(
            include_code_quality=self.include_code_quality,
            include_contributor_insights=self.include_contributor_insights,
            include_activity_trends=self.include_activity_trends,
            analyze_days=self.analyze_days,
        )


def load_input_file(path: Path) -> AnalysisInput:
    """Read an AnalysisInput from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the document has invalid values.
    """
    data = json.loads(path.read_text())
    return AnalysisInput.model_validate(data)


def resolve_token(token: str | None = None) -> str | None:
    """Explicit token, else the GITHUB_TOKEN environment variable."""
    return token or os.environ.get("GITHUB_TOKEN")
