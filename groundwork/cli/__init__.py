"""CLI entry point for groundwork.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from groundwork.cli.config import config_app
from groundwork.cli.setup import setup_command
from groundwork.cli.upgrade import upgrade_command
from groundwork.cli.reset import reset_command
from groundwork.cli.check import check_command, diff_command
from groundwork.cli.main import main_command

# Main application
app = typer.Typer(
    name="groundwork",
    help="groundwork: linting, formatting and agent workflow config for any project",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("setup")(setup_command)
app.command("upgrade")(upgrade_command)
app.command("reset")(reset_command)
app.command("diff")(diff_command)
app.command("check")(check_command)

# Global options (--version, --verbose)
app.callback(invoke_without_command=True)(main_command)
