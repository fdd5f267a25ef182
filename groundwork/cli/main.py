"""Main callback: global options shared by every command."""

import logging

import typer

from groundwork import __version__


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"groundwork {__version__}")
        raise typer.Exit()


def main_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show the groundwork version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log planning and execution details",
    ),
) -> None:
    """Install, upgrade and remove linting, formatting and agent workflow config."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    # Without a subcommand, show help
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
