"""Package manager integration."""

from groundwork.packages.manager import (
    PACKAGE_MANAGERS,
    PackageOperationResult,
    build_command,
    detect_package_manager,
    install_packages,
    remove_packages,
)

__all__ = [
    "PACKAGE_MANAGERS",
    "PackageOperationResult",
    "build_command",
    "detect_package_manager",
    "install_packages",
    "remove_packages",
]
