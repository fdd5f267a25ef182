"""Filesystem interfaces used by the reconciler.

Contains:
- FilesystemReader: Read-only queries used while computing a plan
- FilesystemExecutor: Mutations used while applying a plan
- Filesystem: Both of the above, as implemented by LocalFilesystem and MemoryFilesystem
- join_path / parent_path / path_depth: Helpers for project-relative POSIX paths

All paths are project-relative POSIX strings such as ".groundwork/guides".
"""

from typing import Optional, Protocol


class FilesystemReader(Protocol):
    """Read-only view of a project directory."""

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def read_file(self, path: str) -> Optional[bytes]: ...

    def list_dir(self, path: str) -> list[str]: ...

    def is_dir_empty(self, path: str) -> bool: ...


class FilesystemExecutor(Protocol):
    """Mutating operations on a project directory."""

    def mkdir(self, path: str) -> None: ...

    def write_file(self, path: str, content: bytes) -> None: ...

    def remove(self, path: str, recursive: bool = False) -> None: ...


class Filesystem(FilesystemReader, FilesystemExecutor, Protocol):
    """A reader that can also apply changes."""


def join_path(parent: str, name: str) -> str:
    """Join a project-relative directory and an entry name."""
    return f"{parent}/{name}" if parent else name


def parent_path(path: str) -> str:
    """Return the parent of a project-relative path ("" for top-level entries)."""
    head, _, _ = path.rpartition("/")
    return head


def path_depth(path: str) -> int:
    """Return the number of components in a project-relative path."""
    return path.count("/") + 1 if path else 0
