"""Code quality signals inferred from the repository file listing.

No source is parsed. Documentation, testing and code-standard signals come
from file names and paths only.
"""

from collections.abc import Iterable

from repoinsights.analyzers.common import clamp, percentage, round_half_up
from repoinsights.analyzers.markers import (
    CODE_OF_CONDUCT_PATTERNS,
    FORMATTER_CONFIGS,
    LINTER_CONFIGS,
    README_EXTENSIONS,
    SOURCE_FILE_EXTENSIONS,
    STRUCTURE_DIRECTORIES,
    TEST_FILE_SUFFIXES,
    TEST_PATH_PATTERNS,
    TEST_RUNNER_CONFIGS,
    TYPE_CHECKER_CONFIGS,
    WELL_STRUCTURED_THRESHOLD,
)
from repoinsights.models.schemas import (
    CodeQualityMetrics,
    CodeStandards,
    CoverageSignals,
    DocumentationSignals,
    FileStructure,
)

# Documentation points (max 100)
DOCUMENTATION_POINTS = {
    "has_readme": 30,
    "has_license": 20,
    "has_contributing": 15,
    "has_docs_folder": 20,
    "has_changelog": 10,
    "has_code_of_conduct": 5,
}

# Code standard points, added unscaled to the composite (max 40)
STANDARDS_POINTS = {
    "has_linting": 15,
    "has_formatting": 10,
    "has_type_checking": 15,
}

# Points per unit of test-file ratio (coverage% * 0.8)
COVERAGE_WEIGHT = 80
COVERAGE_MAX_POINTS = 80
TEST_RUNNER_POINTS = 20

# Composite weights, in percent
DOCUMENTATION_WEIGHT = 30
TESTING_WEIGHT = 30


def analyze_code_quality(file_paths: Iterable[str]) -> CodeQualityMetrics:
    """Compute documentation, testing and standards signals.

    Args:
        file_paths: Every blob path in the repository tree, relative to root.

    Returns:
        CodeQualityMetrics with the 0-100 composite score.
    """
    paths = list(file_paths)
    lowered = [path.lower() for path in paths]

    documentation = analyze_documentation(lowered)
    testing = analyze_testing(lowered)
    standards = analyze_code_standards(lowered)

    return CodeQualityMetrics(
        score=calculate_code_quality_score(documentation, testing, standards),
        documentation=documentation,
        testing=testing,
        code_standards=standards,
        file_structure=analyze_structure(paths),
    )


def analyze_documentation(paths: list[str]) -> DocumentationSignals:
    """Detect documentation files. ``paths`` must be lowercased."""
    readme_names = {f"readme.{ext}" for ext in README_EXTENSIONS}

    signals = {
        "has_readme": any(path in readme_names for path in paths),
        "has_license": any(path.startswith("license") for path in paths),
        "has_contributing": any("contributing" in path for path in paths),
        "has_changelog": any(path.startswith("changelog") for path in paths),
        "has_code_of_conduct": any(
            pattern in path for path in paths for pattern in CODE_OF_CONDUCT_PATTERNS
        ),
        "has_docs_folder": any(path.startswith("docs/") for path in paths),
    }
    score = sum(DOCUMENTATION_POINTS[name] for name, present in signals.items() if present)

    return DocumentationSignals(
        **signals,
        estimated_documented_files=sum(
            1 for path in paths if path.endswith(SOURCE_FILE_EXTENSIONS)
        ),
        documentation_score=clamp(score, 100),
    )


def is_test_file(path: str) -> bool:
    """Whether a lowercased path looks like a test file."""
    return any(pattern in path for pattern in TEST_PATH_PATTERNS) or path.endswith(
        TEST_FILE_SUFFIXES
    )


def analyze_testing(paths: list[str]) -> CoverageSignals:
    """Estimate test footprint. ``paths`` must be lowercased."""
    test_files = sum(1 for path in paths if is_test_file(path))
    total_files = len(paths)
    has_framework = any(
        config in path for path in paths for config in TEST_RUNNER_CONFIGS
    )

    return CoverageSignals(
        test_file_count=test_files,
        total_file_count=total_files,
        estimated_coverage_percentage=percentage(test_files, total_files),
        has_testing_framework=has_framework,
        testing_score=calculate_testing_score(test_files, total_files, has_framework),
    )


def calculate_testing_score(test_files: int, total_files: int, has_framework: bool) -> int:
    """Coverage term (up to 80) plus the test-runner bonus, 0 for empty trees."""
    if total_files == 0:
        return 0

    # coverage% * 0.8, kept as a single division
    score = min(test_files * COVERAGE_WEIGHT / total_files, COVERAGE_MAX_POINTS)
    if has_framework:
        score += TEST_RUNNER_POINTS

    return clamp(round_half_up(score), 100)


def analyze_code_standards(paths: list[str]) -> CodeStandards:
    def any_config(configs: tuple[str, ...]) -> bool:
        return any(config in path for path in paths for config in configs)

    return CodeStandards(
        has_linting=any_config(LINTER_CONFIGS),
        has_formatting=any_config(FORMATTER_CONFIGS),
        has_type_checking=any_config(TYPE_CHECKER_CONFIGS),
    )


def analyze_structure(paths: list[str]) -> FileStructure:
    """Collect top-level directories and conventional layout flags.

    Directory names keep their original case; only paths with at least one
    separator contribute a directory.
    """
    directories: list[str] = []
    for path in paths:
        parts = path.split("/")
        if len(parts) > 1 and parts[0] not in directories:
            directories.append(parts[0])

    present = {name.lower() for name in directories}
    flags = {
        flag: any(name in present for name in names)
        for flag, names in STRUCTURE_DIRECTORIES.items()
    }

    return FileStructure(
        top_level_directories=directories,
        total_files=len(paths),
        **flags,
        is_well_structured=sum(flags.values()) >= WELL_STRUCTURED_THRESHOLD,
    )


def calculate_code_quality_score(
    documentation: DocumentationSignals,
    testing: CoverageSignals,
    standards: CodeStandards,
) -> int:
    """Composite: 30% documentation, 30% testing, flat code-standard points."""
    score = (
        documentation.documentation_score * DOCUMENTATION_WEIGHT
        + testing.testing_score * TESTING_WEIGHT
    ) / 100
    for name, points in STANDARDS_POINTS.items():
        if getattr(standards, name):
            score += points

    return clamp(round_half_up(score), 100)
