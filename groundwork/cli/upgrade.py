"""CLI command that upgrades groundwork files in a project."""

from pathlib import Path

import typer

from groundwork.cli import output
from groundwork.cli.utils import (
    DIRECTORY_OPTION,
    DRY_RUN_OPTION,
    NO_PACKAGES_OPTION,
    is_newer,
    load_schema,
    read_install_state,
    report_outcome,
    resolve_project_dir,
    run_mode,
)
from groundwork.reconcile import ReconcileMode


def upgrade_command(
    directory: Path = DIRECTORY_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    no_packages: bool = NO_PACKAGES_OPTION,
) -> None:
    """Upgrade groundwork files in a project to this version.

    Hand-edited config files are left untouched and listed as such.
    """
    project_dir = resolve_project_dir(directory)
    schema, _ = load_schema()

    state = read_install_state(project_dir, schema)
    if state is None:
        output.warning("groundwork is not set up in this project; installing it.")
    elif state.version and is_newer(state.version, schema.version):
        output.error(
            f"This project was set up with groundwork {state.version}, "
            f"newer than this CLI ({schema.version}). Upgrade groundwork first."
        )
        raise typer.Exit(1)

    typer.echo(f"Upgrading groundwork in {project_dir}")
    result = run_mode(project_dir, ReconcileMode.UPGRADE, dry_run, with_packages=not no_packages)
    report_outcome(result, f"groundwork upgraded to {schema.version}")
