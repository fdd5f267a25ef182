"""The schema groundwork ships with.

Adding a new file? Add it here and setup, upgrade and reset pick it up.

Contains:
- build_schema: Build and validate the bundled schema against a content store
- check_content_refs: Verify every file entry resolves in a content store
"""

from typing import Optional

from groundwork import __version__
from groundwork.content.constants import (
    AGENTS_MD_END,
    AGENTS_MD_LINK,
    AGENTS_MD_START,
    CURSOR_HOOKS,
    MCP_SERVERS,
    SETTINGS_HOOKS,
)
from groundwork.content.store import ContentStore
from groundwork.exceptions import SchemaError
from groundwork.schema.models import (
    JsonKeyRule,
    JsonMergeDef,
    ManagedFileDef,
    MergePolicy,
    OwnedFileDef,
    PackageCatalog,
    Schema,
    TextPatchDef,
)


OWNED_DIRS = (
    ".groundwork",
    ".groundwork/guides",
    ".groundwork/templates",
    ".groundwork/hooks",
    ".cursor",
    ".cursor/rules",
    ".cursor/commands",
)

SHARED_DIRS = (
    ".claude",
    ".claude/skills",
    ".claude/commands",
    ".groundwork-project",
)

PRESERVED_DIRS = (
    ".groundwork/learnings",
    ".groundwork-project/tickets",
    ".groundwork-project/tickets/completed",
)

DEPRECATED_PATHS = (
    # Shell hooks replaced with TypeScript hooks
    ".groundwork/hooks/session-verify-agents.sh",
    ".groundwork/hooks/post-tool-lint.sh",
    ".groundwork/hooks/stop-quality.sh",
    # Shell helper library no longer needed
    ".groundwork/lib",
    # Merged into planning-guide.md
    ".groundwork/guides/development-workflow.md",
    # Tickets moved to .groundwork-project/tickets/
    ".groundwork/tickets",
)


def _template(name: str, *when: str) -> OwnedFileDef:
    return OwnedFileDef(content=f"template:{name}", when=when)


OWNED_FILES = {
    ".groundwork/GROUNDWORK.md": _template("GROUNDWORK.md"),
    ".groundwork/guides/planning-guide.md": _template("guides/planning-guide.md"),
    ".groundwork/guides/testing-guide.md": _template("guides/testing-guide.md"),
    ".groundwork/guides/code-philosophy.md": _template("guides/code-philosophy.md"),
    ".groundwork/templates/ticket-template.md": _template("doc-templates/ticket-template.md"),
    ".groundwork/templates/design-doc-template.md": _template("doc-templates/design-doc-template.md"),
    ".groundwork/hooks/session-verify-agents.ts": _template("hooks/session-verify-agents.ts"),
    ".groundwork/hooks/post-tool-lint.ts": _template("hooks/post-tool-lint.ts"),
    ".groundwork/hooks/stop-quality.ts": _template("hooks/stop-quality.ts"),
    # Stricter configs used by the hooks; they extend the project's own configs
    ".groundwork/eslint.config.mjs": OwnedFileDef(
        content="generated:groundwork-eslint-config", when=("javascript",)
    ),
    ".groundwork/.prettierrc": OwnedFileDef(
        content="generated:groundwork-prettierrc", when=("javascript", "standard")
    ),
    # Architecture rules for /audit; the project config at the root extends them
    ".groundwork/depcruise-config.cjs": _template("depcruise/depcruise-config.cjs", "javascript"),
    # Claude skills and commands
    ".claude/skills/groundwork-debugging/SKILL.md": _template("skills/debugging/SKILL.md"),
    ".claude/commands/lint.md": _template("commands/lint.md"),
    ".claude/commands/audit.md": _template("commands/audit.md"),
    # Cursor rules and commands
    ".cursor/rules/groundwork-core.mdc": _template("cursor/groundwork-core.mdc"),
    ".cursor/commands/lint.md": _template("commands/lint.md"),
    ".cursor/commands/audit.md": _template("commands/audit.md"),
}

MANAGED_FILES = {
    # Created only when the project has no ESLint config of its own
    "eslint.config.mjs": ManagedFileDef(
        content="generated:eslint-config", when=("javascript", "!existingEslintConfig")
    ),
    ".prettierrc": ManagedFileDef(content="generated:prettierrc", when=("javascript", "standard")),
    # Lets type-aware ESLint rules run in TypeScript projects without a tsconfig
    "tsconfig.json": ManagedFileDef(content="generated:tsconfig", when=("javascript", "typescript")),
    "knip.json": ManagedFileDef(content="generated:knip-config", when=("javascript",)),
    ".dependency-cruiser.cjs": ManagedFileDef(content="generated:depcruise-config", when=("javascript",)),
    "ruff.toml": ManagedFileDef(content="generated:ruff-config", when=("python",)),
    "mypy.ini": ManagedFileDef(content="generated:mypy-config", when=("python",)),
    ".golangci.yml": ManagedFileDef(content="generated:golangci-config", when=("golang",)),
}


# MCP servers for Claude (.mcp.json) and Cursor (.cursor/mcp.json)
MCP_JSON_MERGE = JsonMergeDef(
    remove_file_if_empty=True,
    rules=tuple(
        JsonKeyRule(path=("mcpServers", name), value=server, policy=MergePolicy.OVERWRITE)
        for name, server in MCP_SERVERS.items()
    ),
)


def _script(name: str, command: str, *when: str, retain: bool = False) -> JsonKeyRule:
    return JsonKeyRule(path=("scripts", name), value=command, when=when, retain=retain)


JSON_MERGES = {
    "package.json": JsonMergeDef(
        # Python-only projects have no package.json; never create one
        create_if_missing=False,
        rules=(
            # lint and format are useful without groundwork, so a plain uninstall keeps them
            _script("lint", "eslint .", "!existingLinter", retain=True),
            _script("lint:eslint", "eslint .", "existingLinter"),
            _script("format", "prettier --write .", "standard", retain=True),
            _script("format:check", "prettier --check .", "standard"),
            _script("knip", "knip"),
            _script("publint", "publint", "publishableLibrary"),
            _script("lint:sh", "shellcheck **/*.sh", "shell"),
        ),
    ),
    ".claude/settings.json": JsonMergeDef(
        rules=tuple(
            JsonKeyRule(
                path=("hooks", event),
                value=entries,
                policy=MergePolicy.APPEND,
                identity="hooks.0.command",
            )
            for event, entries in SETTINGS_HOOKS.items()
        ),
    ),
    ".mcp.json": MCP_JSON_MERGE,
    ".cursor/mcp.json": MCP_JSON_MERGE,
    ".cursor/hooks.json": JsonMergeDef(
        remove_file_if_empty=True,
        rules=(
            # Required by Cursor
            JsonKeyRule(path=("version",), value=1),
            *(
                JsonKeyRule(
                    path=("hooks", event),
                    value=entries,
                    policy=MergePolicy.APPEND,
                    identity="command",
                )
                for event, entries in CURSOR_HOOKS.items()
            ),
        ),
    ),
    # Keep Biome away from groundwork's own files; only if the project uses Biome
    "biome.json": JsonMergeDef(
        create_if_missing=False,
        rules=(
            JsonKeyRule(
                path=("files", "includes"),
                value=["!.groundwork", "!eslint.config.mjs"],
                policy=MergePolicy.APPEND,
            ),
        ),
    ),
}

TEXT_PATCHES = {
    "AGENTS.md": TextPatchDef(
        content=AGENTS_MD_LINK,
        start_marker=AGENTS_MD_START,
        end_marker=AGENTS_MD_END,
        create_if_missing=True,
    ),
    # Only patched if it exists; AGENTS.md is the primary instructions file
    "CLAUDE.md": TextPatchDef(
        content=AGENTS_MD_LINK,
        start_marker=AGENTS_MD_START,
        end_marker=AGENTS_MD_END,
        create_if_missing=False,
    ),
}

PACKAGES = PackageCatalog(
    base=("eslint", "eslint-plugin-groundwork", "dependency-cruiser", "knip"),
    conditional={
        # "standard" = no formatter of the project's own
        "standard": ("prettier", "eslint-config-prettier"),
        "astro": ("prettier-plugin-astro",),
        "tailwind": ("prettier-plugin-tailwindcss",),
        "shell": ("shellcheck",),
        "publishableLibrary": ("publint",),
        "legacyEslint": ("@eslint/eslintrc",),
    },
    deprecated=(
        # Bundled in eslint-plugin-groundwork now
        "@eslint/js",
        "eslint-plugin-sonarjs",
        "eslint-plugin-unicorn",
        "eslint-plugin-import-x",
    ),
)


def check_content_refs(schema: Schema, store: ContentStore) -> None:
    """Verify every owned and managed file resolves in the store.

    Raises:
        SchemaError: Listing every entry whose content is missing.
    """
    missing = [
        f"{path} -> {ref}" for path, ref in schema.content_refs() if not store.has(ref)
    ]
    if missing:
        raise SchemaError("Schema references missing content:\n  " + "\n  ".join(missing))


def build_schema(store: ContentStore, version: Optional[str] = None) -> Schema:
    """Build the bundled schema and check it against a content store.

    Args:
        store: Content store the schema's file entries are rendered from.
        version: Tool version recorded in installed projects (defaults to the package version).

    Returns:
        The validated Schema.

    Raises:
        SchemaError: If the schema is inconsistent or references missing content.
    """
    schema = Schema(
        version=version or __version__,
        owned_dirs=OWNED_DIRS,
        shared_dirs=SHARED_DIRS,
        preserved_dirs=PRESERVED_DIRS,
        deprecated_paths=DEPRECATED_PATHS,
        owned_files=OWNED_FILES,
        managed_files=MANAGED_FILES,
        json_merges=JSON_MERGES,
        text_patches=TEXT_PATCHES,
        packages=PACKAGES,
    )
    check_content_refs(schema, store)
    return schema
