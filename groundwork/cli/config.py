"""CLI commands for global configuration management."""

import typer

from groundwork import global_config
from groundwork.cli import output
from groundwork.exceptions import ConfigError

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage global groundwork configuration in ~/.groundwork/",
    add_completion=False,
)


@config_app.command("show")
def config_show() -> None:
    """Show current global configuration."""
    try:
        config = global_config.get_effective_config()
    except ConfigError as e:
        output.error(f"Error reading configuration: {e}")
        raise typer.Exit(1)

    typer.echo(f"groundwork configuration ({global_config.get_config_file_path()}):")
    if not global_config.is_configured():
        typer.echo("  (no config file, showing defaults)")
    typer.echo()
    typer.echo(f"  Package manager: {config['package_manager']}")
    typer.echo(f"  Install packages: {str(config['install_packages']).lower()}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Config key (package_manager, install_packages)"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set a configuration value."""
    try:
        parsed = global_config.set_config_value(key, value)
    except ConfigError as e:
        output.error(str(e))
        raise typer.Exit(1)

    shown = str(parsed).lower() if isinstance(parsed, bool) else parsed
    output.success(f"{key} set to {shown}")


@config_app.command("path")
def config_path() -> None:
    """Print the path of the config file."""
    typer.echo(str(global_config.get_config_file_path()))
