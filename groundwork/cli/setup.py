"""CLI command that sets groundwork up in a project."""

from pathlib import Path

import typer

from groundwork.cli.utils import (
    DIRECTORY_OPTION,
    DRY_RUN_OPTION,
    NO_PACKAGES_OPTION,
    report_outcome,
    resolve_project_dir,
    run_mode,
)
from groundwork.reconcile import ReconcileMode


def setup_command(
    directory: Path = DIRECTORY_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    no_packages: bool = NO_PACKAGES_OPTION,
) -> None:
    """Set up groundwork in a project."""
    project_dir = resolve_project_dir(directory)
    typer.echo(f"Setting up groundwork in {project_dir}")

    result = run_mode(project_dir, ReconcileMode.INSTALL, dry_run, with_packages=not no_packages)
    report_outcome(result, "groundwork is set up")
