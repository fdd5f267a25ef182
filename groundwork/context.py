"""Project context for groundwork.

Contains:
- Languages: Source languages detected in a project
- ProjectContext: Immutable snapshot of facts about the host project
- detect_project_type: Derive project-type flags from a package.json and marker files
- build_project_context: Build a ProjectContext for a directory on disk
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# Config files that mean the project already has its own ESLint setup
ESLINT_CONFIG_FILES = [
    "eslint.config.js",
    "eslint.config.mjs",
    "eslint.config.cjs",
    "eslint.config.ts",
]

# Legacy (eslintrc) configs that need @eslint/eslintrc to be extended
LEGACY_ESLINT_CONFIG_FILES = [
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.cjs",
    ".eslintrc.json",
    ".eslintrc.yml",
    ".eslintrc.yaml",
]

# Formatter configs other than the one groundwork generates
FORMATTER_CONFIG_FILES = [
    "biome.json",
    "biome.jsonc",
    "dprint.json",
    ".prettierrc.js",
    ".prettierrc.cjs",
    ".prettierrc.mjs",
    ".prettierrc.yaml",
    ".prettierrc.yml",
    "prettier.config.js",
    "prettier.config.mjs",
]

# Linters that replace ESLint as the primary `lint` script
LINTER_CONFIG_FILES = ["biome.json", "biome.jsonc", ".oxlintrc.json"]

PYTHON_MARKERS = ["pyproject.toml", "setup.py", "requirements.txt"]


class Languages(BaseModel):
    """Source languages detected in the project."""

    model_config = ConfigDict(frozen=True)

    javascript: bool = False
    python: bool = False
    golang: bool = False


class ProjectContext(BaseModel):
    """Snapshot of the host project, built once per invocation."""

    model_config = ConfigDict(frozen=True)

    cwd: Path
    project_type: dict[str, bool] = Field(default_factory=dict)
    development_deps: dict[str, str] = Field(default_factory=dict)
    production_deps: dict[str, str] = Field(default_factory=dict)
    is_git_repo: bool = False
    languages: Languages = Field(default_factory=Languages)

    def flag(self, name: str) -> bool:
        """Return a project-type flag, False when unknown."""
        return bool(self.project_type.get(name, False))

    def declared_dependencies(self) -> set[str]:
        """Names of every production and development dependency."""
        return set(self.production_deps) | set(self.development_deps)


def _read_package_json(cwd: Path) -> dict[str, Any]:
    path = cwd / "package.json"
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _has_shell_scripts(cwd: Path) -> bool:
    for folder in (cwd, cwd / "scripts"):
        if folder.is_dir() and any(folder.glob("*.sh")):
            return True
    return False


def detect_project_type(package_json: dict[str, Any], cwd: Path) -> dict[str, bool]:
    """Detect frameworks and existing tooling for a project.

    Args:
        package_json: Parsed package.json (empty dict if absent).
        cwd: Project root, used to look for config files.

    Returns:
        Mapping of project-type flag names to booleans.
    """
    deps = package_json.get("dependencies") or {}
    dev_deps = package_json.get("devDependencies") or {}
    all_deps = {**deps, **dev_deps}

    def any_exists(names: list[str]) -> bool:
        return any((cwd / name).exists() for name in names)

    # A plain .prettierrc is the managed file groundwork writes itself, so it does
    # not count; the "prettier" key in package.json does
    existing_formatter = any_exists(FORMATTER_CONFIG_FILES) or "prettier" in package_json
    legacy_eslint = any_exists(LEGACY_ESLINT_CONFIG_FILES)

    return {
        "typescript": "typescript" in all_deps or "typescript-eslint" in all_deps,
        # Next.js implies React
        "react": "react" in all_deps or "next" in deps,
        "nextjs": "next" in deps,
        "astro": "astro" in all_deps,
        "tailwind": "tailwindcss" in all_deps,
        "shell": _has_shell_scripts(cwd),
        "existingEslintConfig": any_exists(ESLINT_CONFIG_FILES) or legacy_eslint,
        "legacyEslint": legacy_eslint,
        "existingFormatter": existing_formatter,
        "standard": not existing_formatter,
        "existingLinter": any_exists(LINTER_CONFIG_FILES),
        "publishableLibrary": (
            not package_json.get("private", False)
            and ("exports" in package_json or "main" in package_json)
        ),
    }


def build_project_context(cwd: Path) -> ProjectContext:
    """Create a ProjectContext for a project directory.

    Args:
        cwd: Project root directory.

    Returns:
        ProjectContext describing the project.
    """
    cwd = Path(cwd)
    package_json = _read_package_json(cwd)

    languages = Languages(
        javascript=(cwd / "package.json").exists(),
        python=any((cwd / name).exists() for name in PYTHON_MARKERS),
        golang=(cwd / "go.mod").exists(),
    )

    return ProjectContext(
        cwd=cwd,
        project_type=detect_project_type(package_json, cwd),
        development_deps=dict(package_json.get("devDependencies") or {}),
        production_deps=dict(package_json.get("dependencies") or {}),
        is_git_repo=(cwd / ".git").exists(),
        languages=languages,
    )
