"""CLI command that removes groundwork from a project."""

from pathlib import Path

import typer

from groundwork.cli.utils import (
    DIRECTORY_OPTION,
    DRY_RUN_OPTION,
    report_outcome,
    resolve_project_dir,
    run_mode,
)
from groundwork.reconcile import ReconcileMode


def reset_command(
    directory: Path = DIRECTORY_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    full: bool = typer.Option(
        False,
        "--full",
        help="Also remove generated tool configs, retained scripts and packages",
    ),
) -> None:
    """Remove groundwork from a project.

    Generated tool configs (eslint.config.mjs, .prettierrc, ...) and the
    lint/format scripts stay unless --full is given. User data under
    preserved directories always stays.
    """
    project_dir = resolve_project_dir(directory)
    mode = ReconcileMode.UNINSTALL_FULL if full else ReconcileMode.UNINSTALL

    typer.echo(f"Removing groundwork from {project_dir}")
    result = run_mode(project_dir, mode, dry_run, with_packages=full)
    report_outcome(result, "groundwork removed")
