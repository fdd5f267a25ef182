"""Console output helpers for CLI commands.

Library modules never print; commands report through these helpers.
"""

from typing import Iterable

import typer

from groundwork.reconcile.models import ExecutionResult, Plan


def success(message: str) -> None:
    typer.echo(f"✓ {message}")


def warning(message: str) -> None:
    typer.echo(f"⚠ {message}")


def error(message: str) -> None:
    typer.echo(f"✗ {message}", err=True)


def info(message: str) -> None:
    typer.echo(f"  {message}")


def header(title: str) -> None:
    typer.echo()
    typer.echo(title)


def bullets(items: Iterable[str], marker: str = "-") -> None:
    for item in items:
        typer.echo(f"  {marker} {item}")


def print_plan_summary(plan: Plan, dry_run: bool = False) -> None:
    """Print what a plan creates, updates, removes and skips."""
    sections = [
        ("create", plan.created, "+"),
        ("update", plan.updated, "~"),
        ("remove", plan.removed, "-"),
    ]
    for action, paths, marker in sections:
        if not paths:
            continue
        header(f"Would {action}:" if dry_run else f"{action.capitalize()}d:")
        bullets(paths, marker)

    if plan.skipped:
        header("Left untouched:")
        bullets(plan.skipped, "!")

    if plan.packages_to_install:
        header("Would install packages:" if dry_run else "Packages to install:")
        bullets(plan.packages_to_install, "+")

    if plan.packages_to_remove:
        header("Would remove packages:" if dry_run else "Packages to remove:")
        bullets(plan.packages_to_remove, "-")

    if plan.warnings:
        typer.echo()
        for message in plan.warnings:
            warning(message)


def print_failure(execution: ExecutionResult) -> None:
    """Print the action that stopped execution and what was applied before it."""
    failure = execution.failure
    if failure is None:
        return
    error(f"{failure.action_type} {failure.path} failed: {failure.message}")
    typer.echo(f"  {execution.completed} action(s) were applied before the failure.", err=True)
    typer.echo("  Fix the problem and run the command again to finish.", err=True)


def colorize_diff(text: str) -> str:
    """Add ANSI color codes to diff lines like git diff.

    - Red for removed lines (-)
    - Green for added lines (+)
    - Cyan for hunk headers (@@)
    - Bold for file header lines
    """
    red = "\033[31m"
    green = "\033[32m"
    cyan = "\033[36m"
    bold = "\033[1m"
    reset = "\033[0m"

    colorized = []
    for line in text.split("\n"):
        if line.startswith("@@"):
            colorized.append(f"{cyan}{line}{reset}")
        elif line.startswith("---") or line.startswith("+++"):
            colorized.append(f"{bold}{line}{reset}")
        elif line.startswith("-"):
            colorized.append(f"{red}{line}{reset}")
        elif line.startswith("+"):
            colorized.append(f"{green}{line}{reset}")
        else:
            colorized.append(line)
    return "\n".join(colorized)
