"""Technology footprint from language byte counts and root entries."""

import json
import re
import tomllib
from collections.abc import Iterable, Mapping

from repoinsights.analyzers.common import percentage
from repoinsights.analyzers.markers import (
    BUILD_TOOL_MARKERS,
    CICD_MARKERS,
    DEPENDENCY_FRAMEWORKS,
    FRAMEWORK_MARKERS,
    MANIFEST_FILES,
    PACKAGE_MANAGER_MARKERS,
    MarkerTable,
)
from repoinsights.models.schemas import DependencySummary, LanguageShare, TechStackMetrics

UNKNOWN_LANGUAGE = "Unknown"

# PEP 508 requirement name prefix
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


class ManifestParseError(ValueError):
    """Raised when a manifest is present but cannot be interpreted."""

    def __init__(self, manifest: str, reason: str) -> None:
        self.manifest = manifest
        self.reason = reason
        super().__init__(f"Could not parse {manifest}: {reason}")


def analyze_tech_stack(
    languages: Mapping[str, int],
    root_entries: Iterable[str],
    manifests: Mapping[str, str] | None = None,
) -> TechStackMetrics:
    """Derive the language and tooling footprint of a repository.

    Args:
        languages: Bytes of code per language.
        root_entries: Names of files and directories at the repository root.
        manifests: Manifest file contents keyed by root path.

    Returns:
        TechStackMetrics. ``dependencies`` is None when no manifest parses.
    """
    breakdown = language_breakdown(languages)
    names = [name.lower() for name in root_entries]

    dependencies = summarize_dependencies(manifests or {})

    frameworks = detect_labels(names, FRAMEWORK_MARKERS)
    if dependencies is not None:
        declared = [dep.lower() for dep in dependencies.production + dependencies.development]
        for label in detect_labels(declared, DEPENDENCY_FRAMEWORKS):
            if label not in frameworks:
                frameworks.append(label)

    return TechStackMetrics(
        languages=[share.name for share in breakdown],
        primary_language=breakdown[0].name if breakdown else UNKNOWN_LANGUAGE,
        language_breakdown=breakdown,
        frameworks=frameworks,
        build_tools=detect_labels(names, BUILD_TOOL_MARKERS),
        package_managers=detect_labels(names, PACKAGE_MANAGER_MARKERS),
        cicd_tools=detect_labels(names, CICD_MARKERS),
        dependencies=dependencies,
    )


def language_breakdown(languages: Mapping[str, int]) -> list[LanguageShare]:
    """Per-language share of total bytes, largest first."""
    total_bytes = sum(languages.values())
    ordered = sorted(languages.items(), key=lambda item: item[1], reverse=True)
    return [
        LanguageShare(name=name, bytes=byte_count, percentage=percentage(byte_count, total_bytes))
        for name, byte_count in ordered
    ]


def detect_labels(names: Iterable[str], table: MarkerTable) -> list[str]:
    """Labels whose marker appears in ``names``, deduplicated in table order."""
    present = {name.lower() for name in names}
    labels: list[str] = []
    for marker, label in table:
        if marker in present and label not in labels:
            labels.append(label)
    return labels


def summarize_dependencies(manifests: Mapping[str, str]) -> DependencySummary | None:
    """Summarize the first manifest that parses, or None."""
    by_name = {path.lower(): content for path, content in manifests.items()}
    for manifest in MANIFEST_FILES:
        content = by_name.get(manifest)
        if content is None:
            continue
        try:
            return parse_manifest(manifest, content)
        except ManifestParseError:
            continue
    return None


def parse_manifest(manifest: str, content: str) -> DependencySummary:
    """Parse a supported manifest into production and development names.

    Raises:
        ManifestParseError: If the content is malformed or the manifest
            type is not supported.
    """
    parsers = {
        "package.json": _parse_package_json,
        "pyproject.toml": _parse_pyproject,
    }
    parser = parsers.get(manifest)
    if parser is None:
        raise ManifestParseError(manifest, "unsupported manifest")

    try:
        production, development = parser(content)
    except (AttributeError, TypeError) as e:
        # Valid syntax but unexpected table or value shapes
        raise ManifestParseError(manifest, f"unexpected structure: {e}") from e

    return DependencySummary(
        manifest=manifest,
        production=production,
        development=development,
        total_count=len(production) + len(development),
    )


def _parse_package_json(content: str) -> tuple[list[str], list[str]]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError("package.json", str(e)) from e

    if not isinstance(data, dict):
        raise ManifestParseError("package.json", "top level is not an object")

    sections = []
    for key in ("dependencies", "devDependencies"):
        section = data.get(key) or {}
        if not isinstance(section, dict):
            raise ManifestParseError("package.json", f"'{key}' is not an object")
        sections.append(list(section.keys()))

    return sections[0], sections[1]


def _parse_pyproject(content: str) -> tuple[list[str], list[str]]:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError("pyproject.toml", str(e)) from e

    project = data.get("project", {})
    production = _requirement_names(project.get("dependencies", []))

    development: list[str] = []
    for extra in project.get("optional-dependencies", {}).values():
        development.extend(_requirement_names(extra))
    for group in data.get("dependency-groups", {}).values():
        # Groups may contain {"include-group": ...} tables
        development.extend(_requirement_names(item for item in group if isinstance(item, str)))

    poetry = data.get("tool", {}).get("poetry", {})
    production.extend(name for name in poetry.get("dependencies", {}) if name != "python")
    development.extend(poetry.get("dev-dependencies", {}))
    for group in poetry.get("group", {}).values():
        development.extend(group.get("dependencies", {}))

    return _unique(production), _unique(development)


def _requirement_names(requirements: Iterable[str]) -> list[str]:
    names = []
    for requirement in requirements:
        if not isinstance(requirement, str):
            raise ManifestParseError("pyproject.toml", f"invalid requirement {requirement!r}")
        match = _REQUIREMENT_NAME.match(requirement)
        if match:
            names.append(match.group(1))
    return names


def _unique(names: list[str]) -> list[str]:
    return list(dict.fromkeys(names))
