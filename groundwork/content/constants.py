"""Inline content used by the bundled schema.

Contains:
- AGENTS_MD_START / AGENTS_MD_END / AGENTS_MD_LINK: Block prepended to agent instruction files
- PRETTIER_DEFAULTS: Formatting defaults for generated Prettier configs
- SETTINGS_HOOKS: Claude Code hook registrations merged into .claude/settings.json
- CURSOR_HOOKS: Cursor hook registrations merged into .cursor/hooks.json
- MCP_SERVERS: MCP servers merged into .mcp.json
"""

AGENTS_MD_START = "<!-- groundwork:begin -->"
AGENTS_MD_END = "<!-- groundwork:end -->"

AGENTS_MD_LINK = """**ALWAYS READ FIRST:** `.groundwork/GROUNDWORK.md`

GROUNDWORK.md describes the development workflow, conventions and quality gates
for this project. Read it before starting any task."""


PRETTIER_DEFAULTS = {
    "semi": True,
    "singleQuote": True,
    "tabWidth": 2,
    "trailingComma": "all",
    "printWidth": 100,
    "endOfLine": "lf",
    "useTabs": False,
    "bracketSpacing": True,
    "arrowParens": "avoid",
}


def _hook_command(script: str) -> str:
    return f'bun "$CLAUDE_PROJECT_DIR"/.groundwork/hooks/{script}'


SETTINGS_HOOKS = {
    "SessionStart": [
        {"hooks": [{"type": "command", "command": _hook_command("session-verify-agents.ts")}]},
    ],
    "PostToolUse": [
        {
            "matcher": "Write|Edit|MultiEdit",
            "hooks": [{"type": "command", "command": _hook_command("post-tool-lint.ts")}],
        },
    ],
    "Stop": [
        {"hooks": [{"type": "command", "command": _hook_command("stop-quality.ts")}]},
    ],
}

CURSOR_HOOKS = {
    "afterFileEdit": [{"command": "bun .groundwork/hooks/post-tool-lint.ts"}],
    "stop": [{"command": "bun .groundwork/hooks/stop-quality.ts"}],
}

MCP_SERVERS = {
    "context7": {
        "command": "npx",
        "args": ["-y", "@upstash/context7-mcp@latest"],
    },
    "playwright": {
        "command": "npx",
        "args": ["@playwright/mcp@latest"],
    },
}
