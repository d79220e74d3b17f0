"""
Tests for the tech stack extractor.
"""

import json

import pytest

from repoinsights.analyzers.markers import BUILD_TOOL_MARKERS, FRAMEWORK_MARKERS
from repoinsights.analyzers.tech_stack import (
    UNKNOWN_LANGUAGE,
    ManifestParseError,
    analyze_tech_stack,
    detect_labels,
    parse_manifest,
    summarize_dependencies,
)

PACKAGE_JSON = json.dumps(
    {
        "name": "web",
        "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"},
        "devDependencies": {"jest": "^29.0.0"},
    }
)


class TestLanguageBreakdown:
    """Test language shares and the primary language."""

    def test_sorted_by_bytes_with_two_decimal_percentages(self):
        """Test languages are ordered by byte count and shares are rounded."""
        result = analyze_tech_stack({"Shell": 100, "Python": 200}, [])
        assert result.languages == ["Python", "Shell"]
        assert result.primary_language == "Python"
        assert [s.percentage for s in result.language_breakdown] == [66.67, 33.33]

    def test_empty_languages_use_unknown_sentinel(self):
        """Test a repository without language data."""
        result = analyze_tech_stack({}, [])
        assert result.languages == []
        assert result.primary_language == UNKNOWN_LANGUAGE
        assert result.language_breakdown == []

    def test_zero_total_bytes_does_not_divide_by_zero(self):
        """Test languages that report zero bytes."""
        result = analyze_tech_stack({"Python": 0}, [])
        assert result.primary_language == "Python"
        assert result.language_breakdown[0].percentage == 0.0


class TestMarkerDetection:
    """Test detection of frameworks and tooling from root entries."""

    def test_tooling_detected_case_insensitively(self):
        """Test root entry names are matched regardless of case."""
        result = analyze_tech_stack(
            {"TypeScript": 10},
            ["package.json", "yarn.lock", ".github", "Makefile", "tsconfig.json"],
        )
        assert result.package_managers == ["Yarn"]
        assert result.cicd_tools == ["GitHub Actions"]
        assert result.build_tools == ["TypeScript", "Make"]

    def test_labels_are_deduplicated(self):
        """Test several markers for one label yield it once."""
        labels = detect_labels(["next.config.js", "next.config.mjs"], FRAMEWORK_MARKERS)
        assert labels == ["Next.js"]

    def test_one_marker_can_yield_several_labels(self):
        """Test a shared marker maps to every framework that uses it."""
        assert detect_labels(["wsgi.py"], FRAMEWORK_MARKERS) == ["Django", "Flask"]

    def test_order_independent(self):
        """Test output order follows the table, not the listing."""
        forward = detect_labels(["pom.xml", "makefile"], BUILD_TOOL_MARKERS)
        backward = detect_labels(["makefile", "pom.xml"], BUILD_TOOL_MARKERS)
        assert forward == backward == ["Make", "Maven"]

    def test_package_json_alone_is_not_a_framework(self):
        """Test a bare package.json does not imply any framework."""
        result = analyze_tech_stack({}, ["package.json"])
        assert result.frameworks == []


class TestDependencies:
    """Test manifest parsing and the dependency summary."""

    def test_package_json_counts(self):
        """Test production and development dependencies from package.json."""
        result = analyze_tech_stack({}, ["package.json"], {"package.json": PACKAGE_JSON})
        deps = result.dependencies
        assert deps is not None
        assert deps.manifest == "package.json"
        assert deps.production == ["react", "react-dom"]
        assert deps.development == ["jest"]
        assert deps.total_count == 3

    def test_frameworks_detected_from_dependencies(self):
        """Test declared dependencies add frameworks."""
        result = analyze_tech_stack({}, ["package.json"], {"package.json": PACKAGE_JSON})
        assert result.frameworks == ["React"]

    def test_malformed_manifest_is_not_fatal(self):
        """Test a broken manifest only drops the dependency summary."""
        result = analyze_tech_stack(
            {"JavaScript": 100},
            ["package.json", "package-lock.json", ".travis.yml"],
            {"package.json": "{not json"},
        )
        assert result.dependencies is None
        assert result.primary_language == "JavaScript"
        assert result.package_managers == ["npm"]
        assert result.cicd_tools == ["Travis CI"]

    def test_pyproject_dependencies(self):
        """Test PEP 621 dependencies, extras and dependency groups."""
        content = """
[project]
dependencies = ["fastapi>=0.110", "httpx[http2]"]

[project.optional-dependencies]
test = ["pytest"]

[dependency-groups]
dev = ["ruff", {include-group = "test"}]
"""
        deps = parse_manifest("pyproject.toml", content)
        assert deps.production == ["fastapi", "httpx"]
        assert deps.development == ["pytest", "ruff"]
        assert deps.total_count == 4

    def test_poetry_dependencies(self):
        """Test Poetry tables, excluding the python constraint."""
        content = """
[tool.poetry.dependencies]
python = "^3.11"
django = "^5.0"

[tool.poetry.group.dev.dependencies]
pytest = "^8.0"
"""
        deps = parse_manifest("pyproject.toml", content)
        assert deps.production == ["django"]
        assert deps.development == ["pytest"]

    def test_first_parsable_manifest_wins(self):
        """Test a malformed package.json falls through to pyproject.toml."""
        deps = summarize_dependencies(
            {
                "package.json": "[1, 2",
                "pyproject.toml": '[project]\ndependencies = ["flask"]\n',
            }
        )
        assert deps is not None
        assert deps.manifest == "pyproject.toml"
        assert deps.production == ["flask"]

    def test_no_manifest_means_no_summary(self):
        """Test dependencies are None without manifests."""
        assert summarize_dependencies({}) is None

    def test_unexpected_structure_raises_parse_error(self):
        """Test valid JSON with the wrong shape is a parse error."""
        with pytest.raises(ManifestParseError):
            parse_manifest("package.json", '{"dependencies": "react"}')

    def test_unsupported_manifest_raises(self):
        """Test manifests without a parser are rejected."""
        with pytest.raises(ManifestParseError, match="unsupported"):
            parse_manifest("Cargo.toml", "[package]")
