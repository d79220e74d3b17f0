"""Static marker tables used by the signal extractors.

Markers are lowercase; callers lowercase names before matching. Root-entry
tables are (marker, label) pairs so one marker may yield several labels and
several markers may share a label.
"""

MarkerTable = tuple[tuple[str, str], ...]

# package.json maps to no framework here; React, Express and the other
# JavaScript and Python frameworks come from DEPENDENCY_FRAMEWORKS.
FRAMEWORK_MARKERS: MarkerTable = (
    ("next.config.js", "Next.js"),
    ("next.config.mjs", "Next.js"),
    ("next.config.ts", "Next.js"),
    ("vue.config.js", "Vue"),
    ("vite.config.js", "Vue"),
    ("angular.json", "Angular"),
    ("svelte.config.js", "Svelte"),
    ("manage.py", "Django"),
    ("wsgi.py", "Django"),
    ("app.py", "Flask"),
    ("wsgi.py", "Flask"),
    ("main.py", "FastAPI"),
    ("rakefile", "Ruby on Rails"),
    ("gemfile", "Ruby on Rails"),
    ("config.ru", "Ruby on Rails"),
    ("pom.xml", "Spring Boot"),
    ("build.gradle", "Spring Boot"),
    ("artisan", "Laravel"),
    ("composer.json", "Laravel"),
    ("web.config", "ASP.NET"),
    ("appsettings.json", "ASP.NET"),
    ("program.cs", ".NET Core"),
    ("startup.cs", ".NET Core"),
)

# Manifest dependency name -> framework
DEPENDENCY_FRAMEWORKS: MarkerTable = (
    ("react", "React"),
    ("next", "Next.js"),
    ("vue", "Vue"),
    ("nuxt", "Nuxt"),
    ("@angular/core", "Angular"),
    ("svelte", "Svelte"),
    ("express", "Express"),
    ("fastify", "Fastify"),
    ("@nestjs/core", "NestJS"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("fastapi", "FastAPI"),
    ("starlette", "Starlette"),
)

BUILD_TOOL_MARKERS: MarkerTable = (
    ("webpack.config.js", "Webpack"),
    ("vite.config.js", "Vite"),
    ("vite.config.ts", "Vite"),
    ("rollup.config.js", "Rollup"),
    ("gulpfile.js", "Gulp"),
    ("gruntfile.js", "Grunt"),
    ("tsconfig.json", "TypeScript"),
    ("babel.config.js", "Babel"),
    (".babelrc", "Babel"),
    ("makefile", "Make"),
    ("cmakelists.txt", "CMake"),
    ("build.gradle", "Gradle"),
    ("build.gradle.kts", "Gradle"),
    ("pom.xml", "Maven"),
)

PACKAGE_MANAGER_MARKERS: MarkerTable = (
    ("package-lock.json", "npm"),
    ("yarn.lock", "Yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("bun.lockb", "Bun"),
    ("requirements.txt", "pip"),
    ("pipfile", "Pipenv"),
    ("poetry.lock", "Poetry"),
    ("uv.lock", "uv"),
    ("gemfile.lock", "Bundler"),
    ("composer.lock", "Composer"),
    ("go.mod", "Go Modules"),
    ("cargo.toml", "Cargo"),
)

CICD_MARKERS: MarkerTable = (
    (".github", "GitHub Actions"),
    (".gitlab-ci.yml", "GitLab CI"),
    (".travis.yml", "Travis CI"),
    (".circleci", "CircleCI"),
    ("jenkinsfile", "Jenkins"),
    (".drone.yml", "Drone CI"),
    ("azure-pipelines.yml", "Azure Pipelines"),
)

# Manifests parsed for dependency counts, in lookup order
MANIFEST_FILES: tuple[str, ...] = ("package.json", "pyproject.toml")


# --- File path patterns (substring matches on lowercased paths) ---

README_EXTENSIONS: tuple[str, ...] = ("md", "txt", "rst")

CODE_OF_CONDUCT_PATTERNS: tuple[str, ...] = ("code_of_conduct", "code-of-conduct")

SOURCE_FILE_EXTENSIONS: tuple[str, ...] = (".ts", ".js", ".py", ".java")

TEST_PATH_PATTERNS: tuple[str, ...] = ("test", "spec", "__tests__")

TEST_FILE_SUFFIXES: tuple[str, ...] = (
    ".test.ts",
    ".test.js",
    ".spec.ts",
    ".spec.js",
    "_test.py",
    "_test.go",
    "_spec.rb",
)

TEST_RUNNER_CONFIGS: tuple[str, ...] = (
    "jest.config",
    "vitest.config",
    "pytest.ini",
    "conftest.py",
    "phpunit.xml",
    "karma.conf",
    ".mocharc",
    "playwright.config",
    "cypress.config",
)

LINTER_CONFIGS: tuple[str, ...] = (
    ".eslintrc",
    "eslint.config",
    ".pylintrc",
    ".flake8",
    "ruff.toml",
    ".rubocop.yml",
    "tslint.json",
    ".golangci.yml",
)

FORMATTER_CONFIGS: tuple[str, ...] = (
    ".prettierrc",
    ".editorconfig",
    ".black",
    ".clang-format",
    "rustfmt.toml",
)

TYPE_CHECKER_CONFIGS: tuple[str, ...] = (
    "tsconfig.json",
    "mypy.ini",
    "pyrightconfig.json",
    "pyproject.toml",
)

# Structure flag -> accepted top-level directory names
STRUCTURE_DIRECTORIES: dict[str, tuple[str, ...]] = {
    "has_src_folder": ("src",),
    "has_lib_folder": ("lib",),
    "has_test_folder": ("test", "tests", "__tests__"),
    "has_docs_folder": ("docs", "documentation"),
    "has_examples_folder": ("examples", "sample"),
    "has_config_folder": ("config", "configs"),
}

WELL_STRUCTURED_THRESHOLD = 3
