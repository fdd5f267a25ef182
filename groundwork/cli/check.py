"""CLI commands that inspect a project without changing it."""

import sys
from pathlib import Path

import typer

from groundwork.cli import output
from groundwork.cli.utils import (
    DIRECTORY_OPTION,
    file_diff,
    is_newer,
    load_schema,
    read_install_state,
    resolve_project_dir,
)
from groundwork.context import build_project_context
from groundwork.fs.local import LocalFilesystem
from groundwork.reconcile import ReconcileMode, reconcile, render_action


def check_command(directory: Path = DIRECTORY_OPTION) -> None:
    """Report the installed version and whether an upgrade would change anything."""
    project_dir = resolve_project_dir(directory)
    schema, store = load_schema()

    typer.echo(f"groundwork {schema.version}")

    state = read_install_state(project_dir, schema)
    if state is None:
        output.warning("groundwork is not set up in this project. Run 'groundwork setup'.")
        return

    output.info(f"Installed version: {state.version or 'unknown'}")
    if state.version and is_newer(state.version, schema.version):
        output.warning("The project was set up with a newer groundwork than this one.")

    context = build_project_context(project_dir)
    result = reconcile(
        schema, ReconcileMode.UPGRADE, context, LocalFilesystem(project_dir), store, dry_run=True
    )
    if result.plan is None:
        output.error(f"Could not compute plan: {result.error}")
        raise typer.Exit(1)

    plan = result.plan
    if plan.actions:
        output.warning(f"{len(plan.actions)} pending change(s). Run 'groundwork upgrade'.")
        output.print_plan_summary(plan, dry_run=True)
        return

    output.success("Project is up to date")
    if plan.packages_to_install:
        output.warning(f"Missing packages: {', '.join(plan.packages_to_install)}")


def diff_command(
    directory: Path = DIRECTORY_OPTION,
    mode: str = typer.Option(
        "upgrade",
        "--mode",
        "-m",
        help="Mode to preview (install, upgrade, uninstall, uninstall-full)",
    ),
) -> None:
    """Show the file changes a mode would make, as a unified diff."""
    try:
        reconcile_mode = ReconcileMode(mode.lower())
    except ValueError:
        output.error(f"Invalid mode: {mode}")
        typer.echo("Valid modes: install, upgrade, uninstall, uninstall-full")
        raise typer.Exit(1)

    project_dir = resolve_project_dir(directory)
    schema, store = load_schema()
    filesystem = LocalFilesystem(project_dir)
    context = build_project_context(project_dir)

    result = reconcile(schema, reconcile_mode, context, filesystem, store, dry_run=True)
    if result.plan is None:
        output.error(f"Could not compute plan: {result.error}")
        raise typer.Exit(1)

    if not result.plan.actions:
        output.success("No changes")
        return

    color = sys.stdout.isatty()
    for action in result.plan.actions:
        if action.type == "mkdir":
            typer.echo(f"mkdir {action.path}/")
            continue
        if action.type == "rm" and filesystem.is_dir(action.path):
            typer.echo(f"rm -r {action.path}/" if action.recursive else f"rmdir {action.path}/")
            continue

        data = filesystem.read_file(action.path)
        before = data.decode("utf-8") if data is not None else None
        after = None if action.type == "rm" else render_action(action, before)

        text = file_diff(action.path, before, after)
        if text:
            typer.echo(output.colorize_diff(text) if color else text, nl=False)
