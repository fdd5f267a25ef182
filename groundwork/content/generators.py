"""Content generators for files whose body depends on the project.

Each generator takes a ProjectContext and returns the file content.

Contains:
- prettier_plugins: Prettier plugins required by the project's frameworks
- GENERATORS: Registry of generator name to function
"""

import json

import yaml

from groundwork.content.constants import PRETTIER_DEFAULTS
from groundwork.context import ProjectContext


def _dump_json(data: dict) -> str:
    return json.dumps(data, indent=2) + "\n"


def prettier_plugins(context: ProjectContext) -> list[str]:
    """Get Prettier plugins for the project. Tailwind must stay last for class sorting."""
    plugins = []
    if context.flag("astro"):
        plugins.append("prettier-plugin-astro")
    if context.flag("shell"):
        plugins.append("prettier-plugin-sh")
    if context.flag("tailwind"):
        plugins.append("prettier-plugin-tailwindcss")
    return plugins


def groundwork_prettierrc(context: ProjectContext) -> str:
    """Prettier config used by the agent hooks, with framework plugins."""
    config = dict(PRETTIER_DEFAULTS)
    plugins = prettier_plugins(context)
    if plugins:
        config["plugins"] = plugins
    return _dump_json(config)


def project_prettierrc(context: ProjectContext) -> str:
    """Project-level Prettier config. Plugins live in .groundwork/.prettierrc."""
    return _dump_json(PRETTIER_DEFAULTS)


def project_eslint_config(context: ProjectContext) -> str:
    """Project-level flat ESLint config."""
    lines = ['import groundwork from "eslint-plugin-groundwork";', ""]
    if context.flag("standard"):
        lines[0:0] = ['import prettier from "eslint-config-prettier";']
    lines.append("export default [")
    lines.append("  ...groundwork.configs.recommended,")
    if context.flag("typescript"):
        lines.append("  ...groundwork.configs.typescript,")
    if context.flag("react"):
        lines.append("  ...groundwork.configs.react,")
    if context.flag("standard"):
        lines.append("  prettier,")
    lines.append("];")
    return "\n".join(lines) + "\n"


def groundwork_eslint_config(context: ProjectContext) -> str:
    """Stricter ESLint config for the agent hooks, extending the project's own config."""
    base = "../eslint.config.mjs"
    lines = [
        f'import projectConfig from "{base}";',
        'import groundwork from "eslint-plugin-groundwork";',
        "",
        "export default [",
        "  ...projectConfig,",
        "  ...groundwork.configs.strict,",
        "];",
    ]
    if context.flag("legacyEslint"):
        lines[0] = 'import { FlatCompat } from "@eslint/eslintrc";'
        lines[4] = "  ...new FlatCompat().extends(\"./.eslintrc\"),"
    return "\n".join(lines) + "\n"


def tsconfig(context: ProjectContext) -> str:
    """Minimal tsconfig.json so type-aware ESLint rules can run."""
    return _dump_json(
        {
            "compilerOptions": {
                "target": "ES2022",
                "module": "NodeNext",
                "moduleResolution": "NodeNext",
                "strict": True,
                "esModuleInterop": True,
                "skipLibCheck": True,
                "noEmit": True,
            },
            "include": ["**/*.ts", "**/*.tsx"],
            "exclude": ["node_modules", "dist", "build"],
        }
    )


def knip_config(context: ProjectContext) -> str:
    """knip.json for dead code detection, ignoring groundwork's own files."""
    return _dump_json(
        {
            "ignore": [".groundwork/**"],
            "ignoreDependencies": ["eslint-plugin-groundwork"],
        }
    )


def depcruise_config(context: ProjectContext) -> str:
    """Project dependency-cruiser config extending the rules groundwork keeps."""
    return (
        'const groundwork = require("./.groundwork/depcruise-config.cjs");\n'
        "\n"
        "module.exports = {\n"
        "  ...groundwork,\n"
        "  forbidden: [\n"
        "    ...groundwork.forbidden,\n"
        "    // Project rules go here\n"
        "  ],\n"
        "};\n"
    )


def ruff_config(context: ProjectContext) -> str:
    """ruff.toml for Python projects."""
    return (
        "line-length = 100\n"
        "\n"
        "[lint]\n"
        'select = ["E", "F", "I", "B", "UP", "SIM"]\n'
        "\n"
        "[format]\n"
        'quote-style = "double"\n'
    )


def mypy_config(context: ProjectContext) -> str:
    """mypy.ini for Python projects: usable defaults, not strict mode."""
    return (
        "[mypy]\n"
        "ignore_missing_imports = True\n"
        "show_error_codes = True\n"
        "pretty = True\n"
    )


def golangci_config(context: ProjectContext) -> str:
    """.golangci.yml for Go projects."""
    config = {
        "version": "2",
        "linters": {
            "default": "standard",
            "enable": ["gocritic", "revive", "errorlint", "gosec"],
        },
        "formatters": {"enable": ["gofumpt", "goimports"]},
    }
    return yaml.dump(config, default_flow_style=False, sort_keys=False)


GENERATORS = {
    "groundwork-prettierrc": groundwork_prettierrc,
    "groundwork-eslint-config": groundwork_eslint_config,
    "prettierrc": project_prettierrc,
    "eslint-config": project_eslint_config,
    "tsconfig": tsconfig,
    "knip-config": knip_config,
    "depcruise-config": depcruise_config,
    "ruff-config": ruff_config,
    "mypy-config": mypy_config,
    "golangci-config": golangci_config,
}
