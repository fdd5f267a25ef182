"""Tests for groundwork.reconcile planning and the mode laws."""

import errno
import json
from importlib.resources import files

import pytest

from groundwork.content.generators import GENERATORS
from groundwork.content.store import ContentStore
from groundwork.fs.memory import MemoryFilesystem
from groundwork.merge.text_patch import render_block
from groundwork.reconcile import ReconcileMode, compute_plan
from groundwork.state import parse_state


ESLINT_CONFIG = "eslint.config.mjs"
STATE = ".groundwork/state.yaml"


def as_json(data):
    return json.dumps(data, indent=2) + "\n"


def store_with_eslint(text):
    """Bundled store whose project ESLint config renders as the given text."""
    generators = {**GENERATORS, "eslint-config": lambda context: text}
    return ContentStore(files("groundwork") / "templates", generators)


def write_paths(plan):
    return [action.path for action in plan.actions if action.type in ("write", "mkdir")]


class UnreadableFilesystem(MemoryFilesystem):
    """Memory filesystem where one path cannot be read."""

    def __init__(self, unreadable, files=None):
        super().__init__(files)
        self.unreadable = unreadable

    def read_file(self, path):
        if path == self.unreadable:
            raise PermissionError(errno.EACCES, "Permission denied", path)
        return super().read_file(path)


class TestScenarios:
    """End-to-end scenarios on an in-memory project."""

    def test_fresh_install(self, run, schema, make_context):
        """Test a fresh install with an empty manifest and no project flags."""
        fs = MemoryFilesystem({"package.json": "{}\n"})

        result = run("install", make_context(), fs)

        assert result.ok
        assert result.plan.packages_to_install == list(schema.packages.base)
        assert result.plan.packages_to_remove == []
        assert fs.read_text("AGENTS.md") == render_block(schema.text_patches["AGENTS.md"]) + "\n"
        assert fs.exists(".groundwork/GROUNDWORK.md")
        assert fs.exists(ESLINT_CONFIG)
        assert json.loads(fs.read_text("package.json"))["scripts"] == {
            "lint": "eslint .",
            "knip": "knip",
        }

    def test_install_twice_writes_nothing(self, run, make_context):
        """Test that a second install has no write or mkdir actions."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)

        second = run("install", make_context(), fs)

        assert write_paths(second.plan) == []
        assert second.plan.actions == []
        assert second.plan.created == []
        assert second.plan.updated == []
        assert second.plan.removed == []

    def test_upgrade_leaves_hand_edited_managed_file(self, run, make_context):
        """Test that upgrade skips a managed file the user edited."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.write_text(ESLINT_CONFIG, "export default [];\n")

        result = run("upgrade", make_context(), fs)

        assert fs.read_text(ESLINT_CONFIG) == "export default [];\n"
        assert ESLINT_CONFIG not in result.plan.updated
        assert ESLINT_CONFIG in result.plan.skipped
        assert f"{ESLINT_CONFIG} was modified by hand; left untouched" in result.plan.warnings

    def test_uninstall_keeps_user_script(self, run, make_context):
        """Test that uninstall removes merged scripts and keeps the user's."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        manifest = json.loads(fs.read_text("package.json"))
        manifest["scripts"]["test"] = "vitest"
        fs.write_text("package.json", as_json(manifest))

        run("uninstall", make_context(), fs)

        scripts = json.loads(fs.read_text("package.json"))["scripts"]
        assert "knip" not in scripts
        assert scripts["test"] == "vitest"

    def test_uninstall_keeps_completed_tickets(self, run, make_context):
        """Test that records in a preserved dir survive uninstall."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        record = ".groundwork-project/tickets/completed/001-setup.md"
        fs.write_text(record, "# Done\n")

        run("uninstall", make_context(), fs)

        assert fs.read_text(record) == "# Done\n"
        assert fs.is_dir(".groundwork-project")
        assert not fs.exists(".groundwork")


class TestModeLaws:
    """Tests for idempotence, round trip and conditional correctness."""

    @pytest.mark.parametrize("mode", ["install", "upgrade"])
    def test_second_run_is_empty(self, run, make_context, mode):
        """Test that install or upgrade right after install changes nothing."""
        context = make_context(flags={"standard": True, "tailwind": True, "typescript": True})
        fs = MemoryFilesystem({"package.json": "{}\n", "CLAUDE.md": "# Claude\n"})
        run("install", context, fs)

        second = run(mode, context, fs)

        assert second.plan.actions == []

    @pytest.mark.parametrize("mode", ["uninstall", "uninstall-full"])
    def test_round_trip_restores_merge_and_patch_targets(self, run, make_context, mode):
        """Test that install then uninstall restores every touched file byte for byte."""
        context = make_context(
            flags={
                "existingLinter": True,
                "existingFormatter": True,
                "existingEslintConfig": True,
                "standard": False,
            }
        )
        original = {
            "package.json": as_json({"name": "demo", "scripts": {"test": "vitest"}}),
            "AGENTS.md": "# Agents\n\nBe nice.\n",
            "CLAUDE.md": "\n# Claude\n",
            ".claude/settings.json": as_json({"permissions": {"allow": ["Bash"]}}),
            "biome.json": as_json({"files": {"includes": ["src/**"]}}),
        }
        fs = MemoryFilesystem(original)

        installed = run("install", context, fs)
        assert installed.ok
        assert fs.read_text("biome.json") != original["biome.json"]

        removed = run(mode, context, fs)

        assert removed.ok
        snapshot = fs.snapshot()
        assert {path: snapshot.get(path) for path in original} == {
            path: text.encode("utf-8") for path, text in original.items()
        }
        # Only a plain uninstall leaves managed configs behind
        left = set(snapshot) - set(original)
        assert left == (set() if mode == "uninstall-full" else {"knip.json", ".dependency-cruiser.cjs"})

    @pytest.mark.parametrize(
        "manifest",
        [
            '{"name":"demo"}\n',
            '{\n  "name": "demo",\n  "keywords": ["a", "b"]\n}\n',
            '{\n  "name": "d\\u00e9mo"\n}\n',
            '{\r\n  "name": "demo"\r\n}\r\n',
            '{"name": "demo", "scripts": {"test": "vitest"}}',
        ],
        ids=["compact", "inline-array", "unicode-escape", "crlf", "one-line-no-newline"],
    )
    def test_round_trip_keeps_manifest_formatting(self, run, make_context, manifest):
        """Test that uninstall puts back a manifest's exact bytes whatever its layout."""
        context = make_context(
            flags={"existingLinter": True, "existingEslintConfig": True}
        )
        fs = MemoryFilesystem({"package.json": manifest})

        run("install", context, fs)
        assert "lint:eslint" in json.loads(fs.read_text("package.json"))["scripts"]

        removed = run("uninstall", context, fs)

        assert removed.ok
        assert fs.read_text("package.json") == manifest

    def test_round_trip_without_state_keeps_layout(self, run, make_context):
        """Test that unmerging with no install record still keeps the file's layout."""
        context = make_context(flags={"existingLinter": True, "existingEslintConfig": True})
        fs = MemoryFilesystem({"package.json": '{"name":"demo"}\r\n'})
        run("install", context, fs)
        fs.remove(STATE)

        run("uninstall", context, fs)

        assert fs.read_text("package.json") == '{"name":"demo"}\r\n'

    def test_round_trip_deletes_created_files(self, run, make_context):
        """Test that files the install created are deleted, not left empty."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(flags={"existingEslintConfig": True}), fs)
        assert fs.exists(".mcp.json")

        run("uninstall", make_context(flags={"existingEslintConfig": True}), fs)

        assert not fs.exists("AGENTS.md")
        assert not fs.exists(".mcp.json")
        assert not fs.exists(".cursor")
        assert not fs.exists(".claude/settings.json")
        assert not fs.exists(STATE)

    def test_toggling_tailwind_changes_only_its_package(self, schema, store, make_context):
        """Test that one flag changes exactly the package set it gates."""
        fs = MemoryFilesystem({"package.json": "{}\n"})

        without = compute_plan(schema, ReconcileMode.INSTALL, make_context(), fs, store)
        with_flag = compute_plan(
            schema, ReconcileMode.INSTALL, make_context(flags={"tailwind": True}), fs, store
        )

        added = set(with_flag.packages_to_install) - set(without.packages_to_install)
        assert added == {"prettier-plugin-tailwindcss"}
        assert set(without.packages_to_install) <= set(with_flag.packages_to_install)
        assert with_flag.created == without.created

    def test_toggling_standard_changes_formatter_entries(self, schema, store, make_context):
        """Test that the standard flag gates Prettier packages, configs and scripts."""
        fs = MemoryFilesystem({"package.json": "{}\n"})

        without = compute_plan(schema, ReconcileMode.INSTALL, make_context(), fs, store)
        with_flag = compute_plan(
            schema, ReconcileMode.INSTALL, make_context(flags={"standard": True}), fs, store
        )

        added = set(with_flag.packages_to_install) - set(without.packages_to_install)
        assert added == {"prettier", "eslint-config-prettier"}
        assert set(with_flag.created) - set(without.created) == {".groundwork/.prettierrc", ".prettierrc"}
        assert set(without.created) <= set(with_flag.created)

    def test_formatter_scripts_follow_standard(self, run, make_context):
        """Test that format scripts are merged only for standard projects."""
        fs = MemoryFilesystem({"package.json": "{}\n"})

        run("install", make_context(flags={"standard": True}), fs)

        scripts = json.loads(fs.read_text("package.json"))["scripts"]
        assert scripts["format"] == "prettier --write ."
        assert scripts["format:check"] == "prettier --check ."


class TestInstall:
    """Tests for install mode."""

    def test_creates_only_missing_dirs(self, schema, store, make_context):
        """Test that mkdir is planned for missing directories only."""
        fs = MemoryFilesystem()
        fs.mkdir(".claude/skills")

        plan = compute_plan(schema, ReconcileMode.INSTALL, make_context(), fs, store)

        mkdirs = [action.path for action in plan.actions if action.type == "mkdir"]
        assert ".claude" not in mkdirs
        assert ".claude/skills" not in mkdirs
        assert ".groundwork" in mkdirs
        assert mkdirs.index(".groundwork") < mkdirs.index(".groundwork/guides")

    def test_never_overwrites_existing_managed_file(self, run, make_context):
        """Test that install keeps a managed file the project already has."""
        fs = MemoryFilesystem({"package.json": "{}\n", ESLINT_CONFIG: "export default [];\n"})

        result = run("install", make_context(), fs)

        assert fs.read_text(ESLINT_CONFIG) == "export default [];\n"
        assert ESLINT_CONFIG not in result.plan.updated
        assert ESLINT_CONFIG not in parse_state(fs.read_text(STATE)).managed

    def test_restores_edited_owned_file(self, run, make_context):
        """Test that owned files are rewritten when their content differs."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.write_text(".groundwork/GROUNDWORK.md", "edited\n")

        result = run("install", make_context(), fs)

        assert result.plan.updated == [".groundwork/GROUNDWORK.md"]
        assert fs.read_text(".groundwork/GROUNDWORK.md") != "edited\n"

    @pytest.mark.parametrize("edit", ["\n\n   \n", " ", "\r\n"])
    def test_restores_whitespace_only_edit(self, run, make_context, edit):
        """Test that an owned file differing only in trailing whitespace is rewritten."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        rendered = fs.read_text(".groundwork/GROUNDWORK.md")
        fs.write_text(".groundwork/GROUNDWORK.md", rendered + edit)

        result = run("upgrade", make_context(), fs)

        assert result.plan.updated == [".groundwork/GROUNDWORK.md"]
        assert fs.read_text(".groundwork/GROUNDWORK.md") == rendered

    def test_does_not_create_package_json(self, run, make_context):
        """Test that a project without package.json does not get one."""
        fs = MemoryFilesystem({"pyproject.toml": "[project]\n"})

        run("install", make_context(javascript=False, python=True), fs)

        assert not fs.exists("package.json")
        assert fs.exists("ruff.toml")
        assert not fs.exists(ESLINT_CONFIG)

    def test_typescript_project_gets_tsconfig(self, run, make_context):
        """Test that tsconfig.json is created for TypeScript projects only."""
        plain = MemoryFilesystem({"package.json": "{}\n"})
        typed = MemoryFilesystem({"package.json": "{}\n"})

        run("install", make_context(), plain)
        run("install", make_context(flags={"typescript": True}), typed)

        assert not plain.exists("tsconfig.json")
        assert json.loads(typed.read_text("tsconfig.json"))["compilerOptions"]["strict"] is True

    def test_javascript_project_gets_audit_configs(self, run, make_context):
        """Test that knip and dependency-cruiser configs are set up together."""
        fs = MemoryFilesystem({"package.json": "{}\n"})

        run("install", make_context(), fs)

        assert json.loads(fs.read_text("knip.json"))["ignore"] == [".groundwork/**"]
        assert "./.groundwork/depcruise-config.cjs" in fs.read_text(".dependency-cruiser.cjs")
        assert "no-circular" in fs.read_text(".groundwork/depcruise-config.cjs")
        assert not fs.exists("mypy.ini")

    def test_python_project_gets_mypy_config(self, run, make_context):
        """Test the Python managed files and the absence of JavaScript ones."""
        fs = MemoryFilesystem({"pyproject.toml": "[project]\n"})

        run("install", make_context(javascript=False, python=True), fs)

        assert fs.read_text("mypy.ini").startswith("[mypy]\n")
        assert fs.exists("ruff.toml")
        assert not fs.exists("knip.json")
        assert not fs.exists(".groundwork/depcruise-config.cjs")

    def test_cursor_mcp_servers(self, run, make_context):
        """Test that Cursor's MCP config gets the same servers, next to the user's."""
        user_server = {"command": "my-server"}
        fs = MemoryFilesystem({".cursor/mcp.json": as_json({"mcpServers": {"mine": user_server}})})

        run("install", make_context(), fs)

        servers = json.loads(fs.read_text(".cursor/mcp.json"))["mcpServers"]
        assert servers["mine"] == user_server
        assert set(json.loads(fs.read_text(".mcp.json"))["mcpServers"]) < set(servers)

    def test_claude_md_patched_only_if_present(self, run, make_context):
        """Test that CLAUDE.md is patched when it exists and never created."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        assert not fs.exists("CLAUDE.md")

        fs.write_text("CLAUDE.md", "# Claude\n")
        result = run("install", make_context(), fs)

        assert result.plan.updated == ["CLAUDE.md"]
        assert fs.read_text("CLAUDE.md").endswith("\n\n# Claude\n")

    def test_skips_invalid_json(self, run, make_context):
        """Test that an unparsable merge target is left alone with a warning."""
        fs = MemoryFilesystem({"package.json": "{}\n", ".claude/settings.json": "{not json"})

        result = run("install", make_context(), fs)

        assert result.ok
        assert fs.read_text(".claude/settings.json") == "{not json"
        assert ".claude/settings.json" in result.plan.skipped
        assert any("not a valid JSON object" in warning for warning in result.plan.warnings)

    def test_records_state(self, run, make_context):
        """Test that install records fingerprints, provenance and created patches."""
        fs = MemoryFilesystem({"package.json": "{}\n"})

        run("install", make_context(), fs)

        state = parse_state(fs.read_text(STATE))
        assert state.version == "1.0.0"
        assert ESLINT_CONFIG in state.managed
        assert state.json_["package.json"].added == ["/scripts", "/scripts/lint", "/scripts/knip"]
        assert state.json_[".mcp.json"].created is True
        assert state.patched_created == ["AGENTS.md"]

    def test_state_not_listed_in_summaries(self, run, make_context):
        """Test that the state file is an action but not a summary entry."""
        fs = MemoryFilesystem({"package.json": "{}\n"})

        result = run("install", make_context(), fs)

        assert STATE in [action.path for action in result.plan.actions]
        assert STATE not in result.plan.created

    def test_dry_run_does_not_write(self, run, make_context):
        """Test that a dry run computes the plan and leaves the project alone."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        before = fs.snapshot()

        result = run("install", make_context(), fs, dry_run=True)

        assert result.dry_run
        assert result.execution is None
        assert result.plan.actions
        assert result.plan.applied is False
        assert fs.snapshot() == before
        assert not fs.exists(".groundwork")

    def test_unreadable_file_fails_plan(self, run, make_context):
        """Test that a read failure yields a failed result with no plan."""
        fs = UnreadableFilesystem("package.json", {"package.json": "{}\n"})

        result = run("install", make_context(), fs)

        assert not result.ok
        assert result.plan is None
        assert "Cannot read package.json: Permission denied" in result.error
        assert not fs.exists(".groundwork")

    def test_corrupt_state_is_ignored(self, run, make_context):
        """Test that an unreadable state file is treated as no state."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.write_text(STATE, "- not\n- a mapping\n")

        result = run("install", make_context(), fs)

        assert result.ok
        assert parse_state(fs.read_text(STATE)).version == "1.0.0"


class TestUpgrade:
    """Tests for upgrade mode."""

    def test_rewrites_unedited_managed_file(self, run, schema, make_context):
        """Test that a template change reaches files the user never touched."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs, with_store=store_with_eslint("// v1\n"))

        result = run("upgrade", make_context(), fs, with_store=store_with_eslint("// v2\n"))

        assert fs.read_text(ESLINT_CONFIG) == "// v2\n"
        assert result.plan.updated == [ESLINT_CONFIG]

    def test_keeps_edited_managed_file_across_template_change(self, run, make_context):
        """Test that a hand edit wins over a new template."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs, with_store=store_with_eslint("// v1\n"))
        fs.write_text(ESLINT_CONFIG, "// mine\n")

        result = run("upgrade", make_context(), fs, with_store=store_with_eslint("// v2\n"))

        assert fs.read_text(ESLINT_CONFIG) == "// mine\n"
        assert result.plan.skipped == [ESLINT_CONFIG]

    def test_unrecorded_managed_file_is_not_overwritten(self, run, make_context):
        """Test that a managed file with no fingerprint is treated as the user's."""
        fs = MemoryFilesystem({"package.json": "{}\n", ESLINT_CONFIG: "// mine\n"})

        result = run("upgrade", make_context(), fs)

        assert fs.read_text(ESLINT_CONFIG) == "// mine\n"
        assert ESLINT_CONFIG in result.plan.skipped

    def test_removes_deprecated_paths(self, run, make_context):
        """Test that files from earlier versions are removed on upgrade."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.write_text(".groundwork/hooks/stop-quality.sh", "#!/bin/sh\n")
        fs.write_text(".groundwork/lib/common.sh", "#!/bin/sh\n")

        result = run("upgrade", make_context(), fs)

        assert not fs.exists(".groundwork/hooks/stop-quality.sh")
        assert not fs.exists(".groundwork/lib")
        assert fs.exists(".groundwork/hooks/stop-quality.ts")
        assert result.plan.removed == [".groundwork/hooks/stop-quality.sh", ".groundwork/lib"]

    def test_proposes_removing_deprecated_packages(self, run, make_context):
        """Test that deprecated packages the project declares are removed."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        context = make_context(dev_deps={"eslint-plugin-sonarjs": "^1.0.0", "vitest": "^2.0.0"})

        result = run("upgrade", context, fs, dry_run=True)

        assert result.plan.packages_to_remove == ["eslint-plugin-sonarjs"]


class TestUninstall:
    """Tests for uninstall and uninstall-full."""

    def test_plain_uninstall_keeps_managed_files_and_lint_script(self, run, make_context):
        """Test that plain uninstall leaves independently useful output."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)

        result = run("uninstall", make_context(), fs)

        assert fs.exists(ESLINT_CONFIG)
        assert json.loads(fs.read_text("package.json")) == {"scripts": {"lint": "eslint ."}}
        assert result.plan.packages_to_remove == []
        assert not fs.exists(".groundwork")

    def test_full_uninstall_removes_everything(self, run, make_context):
        """Test that uninstall-full removes managed files, retained keys and packages."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        context = make_context(dev_deps={"eslint": "^9.0.0", "knip": "^5.0.0", "vitest": "^2.0.0"})

        result = run("uninstall-full", context, fs)

        assert not fs.exists(ESLINT_CONFIG)
        assert json.loads(fs.read_text("package.json")) == {}
        assert result.plan.packages_to_remove == ["eslint", "knip"]

    def test_keeps_learnings(self, run, make_context):
        """Test that a preserved dir with user files keeps its owned parent."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.write_text(".groundwork/learnings/flaky-tests.md", "# Notes\n")

        run("uninstall", make_context(), fs)

        assert fs.read_text(".groundwork/learnings/flaky-tests.md") == "# Notes\n"
        assert fs.is_dir(".groundwork")
        assert not fs.exists(".groundwork/GROUNDWORK.md")
        assert not fs.exists(".groundwork/guides")

    def test_keeps_user_files_in_owned_dir(self, run, make_context):
        """Test that an owned dir holding a user file is not removed."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.write_text(".cursor/rules/team.mdc", "rule\n")

        run("uninstall", make_context(), fs)

        assert fs.read_text(".cursor/rules/team.mdc") == "rule\n"
        assert not fs.exists(".cursor/rules/groundwork-core.mdc")

    def test_shared_dirs_are_kept(self, run, make_context):
        """Test that shared dirs stay after uninstall, even when empty."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)

        run("uninstall", make_context(), fs)

        assert fs.is_dir(".claude/skills")
        assert not fs.exists(".claude/skills/groundwork-debugging")

    def test_removes_deprecated_leftovers(self, run, make_context):
        """Test that uninstall also cleans paths from earlier versions."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.write_text(".groundwork/tickets/001.md", "# Old\n")

        run("uninstall", make_context(), fs)

        assert not fs.exists(".groundwork")

    def test_without_state_removes_by_shape(self, run, make_context):
        """Test uninstall of a project whose state file was deleted."""
        fs = MemoryFilesystem({"package.json": "{}\n"})
        run("install", make_context(), fs)
        fs.remove(STATE)

        result = run("uninstall", make_context(), fs)

        assert result.ok
        assert not fs.exists("AGENTS.md")
        assert not fs.exists(".mcp.json")
        assert json.loads(fs.read_text("package.json")) == {"scripts": {"lint": "eslint ."}}

    def test_uninstall_of_clean_project_is_empty(self, run, make_context):
        """Test that uninstalling from a project without groundwork does nothing."""
        fs = MemoryFilesystem({"package.json": as_json({"name": "demo"})})

        result = run("uninstall", make_context(), fs)

        assert result.plan.actions == []
