"""Shared utility functions for CLI commands."""

import difflib
import logging
from pathlib import Path
from typing import Optional

import typer
from packaging.version import InvalidVersion, Version

from groundwork import global_config
from groundwork.cli import output
from groundwork.content.store import ContentStore
from groundwork.context import build_project_context
from groundwork.exceptions import ConfigError, SchemaError
from groundwork.fs.local import LocalFilesystem
from groundwork.packages.manager import (
    build_command,
    detect_package_manager,
    install_packages,
    remove_packages,
)
from groundwork.reconcile import ReconcileMode, ReconcileResult, reconcile
from groundwork.schema.builtin import build_schema
from groundwork.schema.models import Schema
from groundwork.state import InstallState, parse_state


logger = logging.getLogger(__name__)


def resolve_project_dir(directory: Path) -> Path:
    """Resolve and validate the project directory option."""
    project_dir = directory.expanduser().resolve()
    if not project_dir.is_dir():
        output.error(f"Not a directory: {project_dir}")
        raise typer.Exit(1)
    return project_dir


def load_schema() -> tuple[Schema, ContentStore]:
    """Build the bundled schema, exiting on integrity errors."""
    store = ContentStore.default()
    try:
        return build_schema(store), store
    except SchemaError as e:
        output.error(str(e))
        raise typer.Exit(1)


def load_config() -> dict:
    """Load the user configuration, exiting if it cannot be read."""
    try:
        return global_config.get_effective_config()
    except ConfigError as e:
        output.error(str(e))
        raise typer.Exit(1)


def read_install_state(project_dir: Path, schema: Schema) -> Optional[InstallState]:
    """Read the install state of a project, None if not installed."""
    state_file = project_dir / schema.state_path
    if not state_file.is_file():
        return None
    return parse_state(state_file.read_text(encoding="utf-8"))


def is_newer(installed: str, current: str) -> bool:
    """Return True if the installed version is newer than the running CLI.

    An installed version that does not parse (a hand-edited state file) is
    never newer.
    """
    try:
        return Version(installed) > Version(current)
    except InvalidVersion:
        logger.debug("Cannot compare versions %r and %r", installed, current)
        return False


def run_mode(
    project_dir: Path,
    mode: ReconcileMode,
    dry_run: bool,
    with_packages: bool = True,
) -> ReconcileResult:
    """Reconcile a project for one mode and report the outcome.

    Args:
        project_dir: Project root.
        mode: The reconcile mode.
        dry_run: Only show what would change.
        with_packages: Run the package manager for the plan's packages.

    Returns:
        The ReconcileResult.

    Raises:
        typer.Exit: With code 1 if the plan could not be computed or applied.
    """
    schema, store = load_schema()
    config = load_config()
    context = build_project_context(project_dir)
    filesystem = LocalFilesystem(project_dir)

    result = reconcile(schema, mode, context, filesystem, store, dry_run=dry_run)

    if result.plan is None:
        output.error(f"Could not compute plan: {result.error}")
        raise typer.Exit(1)

    output.print_plan_summary(result.plan, dry_run=dry_run)

    if result.execution is not None and not result.execution.ok:
        output.print_failure(result.execution)
        raise typer.Exit(1)

    if not dry_run and with_packages:
        run_package_changes(project_dir, result, config)

    return result


def run_package_changes(project_dir: Path, result: ReconcileResult, config: dict) -> None:
    """Install and remove the plan's packages. Failures are warnings."""
    plan = result.plan
    if plan is None or not (plan.packages_to_install or plan.packages_to_remove):
        return

    if not (project_dir / "package.json").exists():
        logger.debug("No package.json in %s; skipping packages", project_dir)
        return

    manager = detect_package_manager(project_dir, config.get("package_manager"))

    if not config.get("install_packages", True):
        output.warning("Package changes are disabled (install_packages: false). Run manually:")
        if plan.packages_to_install:
            output.info(" ".join(build_command(manager, plan.packages_to_install)))
        if plan.packages_to_remove:
            output.info(" ".join(build_command(manager, plan.packages_to_remove, remove=True)))
        return

    if plan.packages_to_install:
        typer.echo(f"\nInstalling packages with {manager}...")
        installed = install_packages(project_dir, plan.packages_to_install, manager=manager)
        if installed.ok:
            output.success(f"Installed {len(plan.packages_to_install)} package(s)")
        else:
            output.warning(f"Package install failed: {installed.message}")
            output.info(f"Run manually: {installed.command}")

    if plan.packages_to_remove:
        typer.echo(f"\nRemoving packages with {manager}...")
        removed = remove_packages(project_dir, plan.packages_to_remove, manager=manager)
        if removed.ok:
            output.success(f"Removed {len(plan.packages_to_remove)} package(s)")
        else:
            output.warning(f"Package removal failed: {removed.message}")
            output.info(f"Run manually: {removed.command}")


def file_diff(path: str, before: Optional[str], after: Optional[str]) -> str:
    """Unified diff of a file's content before and after a change.

    Args:
        path: Project-relative path.
        before: Content before (None if the file does not exist yet).
        after: Content after (None if the file is removed).

    Returns:
        Diff text, empty if nothing changes.
    """
    before_lines = (before or "").splitlines(keepends=True)
    after_lines = (after or "").splitlines(keepends=True)

    # Add newlines if missing for proper diff output
    if before_lines and not before_lines[-1].endswith("\n"):
        before_lines[-1] += "\n"
    if after_lines and not after_lines[-1].endswith("\n"):
        after_lines[-1] += "\n"

    diff = difflib.unified_diff(
        before_lines,
        after_lines,
        fromfile=f"a/{path}" if before is not None else "/dev/null",
        tofile=f"b/{path}" if after is not None else "/dev/null",
    )
    return "".join(diff)


DIRECTORY_OPTION = typer.Option(
    Path("."),
    "--directory",
    "-C",
    help="Project directory (defaults to the current directory)",
)

DRY_RUN_OPTION = typer.Option(
    False,
    "--dry-run",
    "-n",
    help="Show what would change without writing anything",
)

NO_PACKAGES_OPTION = typer.Option(
    False,
    "--no-packages",
    help="Do not run the package manager",
)


def report_outcome(result: ReconcileResult, done: str) -> None:
    """Print the closing line for a mode command."""
    typer.echo()
    if result.dry_run:
        output.info("Dry run: nothing was written.")
    elif result.plan is not None and result.plan.actions:
        output.success(done)
    else:
        output.success("Nothing to do, already up to date")
