"""Package manager runner.

Installs and removes dev dependencies with whichever package manager the
project uses. Failures never raise: they come back as a result carrying the
command the user can run by hand.

Contains:
- PackageOperationResult: Outcome of an install or remove
- detect_package_manager: Pick npm, pnpm, yarn or bun from lock files
- build_command: Command line for an install or remove
- install_packages / remove_packages: Run the package manager
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


PACKAGE_MANAGERS = ["npm", "pnpm", "yarn", "bun"]

# Checked in order; the first lock file found wins
LOCK_FILES = [
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("package-lock.json", "npm"),
]

_INSTALL_ARGS = {
    "npm": ["install", "--save-dev"],
    "pnpm": ["add", "--save-dev"],
    "yarn": ["add", "--dev"],
    "bun": ["add", "--dev"],
}

_REMOVE_ARGS = {
    "npm": ["uninstall"],
    "pnpm": ["remove"],
    "yarn": ["remove"],
    "bun": ["remove"],
}


@dataclass
class PackageOperationResult:
    """Outcome of a package install or removal."""

    ok: bool
    command: str  # The command that was (or would be) run
    message: str = ""


def detect_package_manager(cwd: Path, preference: Optional[str] = None) -> str:
    """Detect the package manager for a project.

    Args:
        cwd: Project root.
        preference: Configured manager; "auto" or None detects from lock files.

    Returns:
        One of PACKAGE_MANAGERS. npm when nothing else is found.
    """
    if preference and preference != "auto":
        return preference

    for lock_file, manager in LOCK_FILES:
        if (Path(cwd) / lock_file).exists():
            return manager
    return "npm"


def build_command(manager: str, packages: list[str], remove: bool = False) -> list[str]:
    """Build the command line for installing or removing dev dependencies."""
    args = _REMOVE_ARGS[manager] if remove else _INSTALL_ARGS[manager]
    return [manager, *args, *packages]


def _run(cwd: Path, command: list[str]) -> PackageOperationResult:
    printable = " ".join(command)
    try:
        subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or "").strip().splitlines()
        message = detail[-1] if detail else f"exited with status {e.returncode}"
        return PackageOperationResult(ok=False, command=printable, message=message)
    except FileNotFoundError:
        return PackageOperationResult(
            ok=False, command=printable, message=f"{command[0]} is not installed or not in PATH"
        )
    return PackageOperationResult(ok=True, command=printable)


def install_packages(
    cwd: Path, packages: list[str], manager: Optional[str] = None
) -> PackageOperationResult:
    """Install packages as dev dependencies.

    Args:
        cwd: Project root.
        packages: Package names.
        manager: Package manager to use (detected when None).

    Returns:
        PackageOperationResult. ok is True when there was nothing to install.
    """
    manager = manager or detect_package_manager(cwd)
    command = build_command(manager, packages)
    if not packages:
        return PackageOperationResult(ok=True, command=" ".join(command))
    return _run(cwd, command)


def remove_packages(
    cwd: Path, packages: list[str], manager: Optional[str] = None
) -> PackageOperationResult:
    """Remove packages from the project.

    Args:
        cwd: Project root.
        packages: Package names.
        manager: Package manager to use (detected when None).

    Returns:
        PackageOperationResult. ok is True when there was nothing to remove.
    """
    manager = manager or detect_package_manager(cwd)
    command = build_command(manager, packages, remove=True)
    if not packages:
        return PackageOperationResult(ok=True, command=" ".join(command))
    return _run(cwd, command)
