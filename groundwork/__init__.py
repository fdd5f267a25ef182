"""Project configuration reconciler: install, upgrade and remove tooling config."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("groundwork")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
