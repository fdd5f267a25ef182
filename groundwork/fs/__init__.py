"""Filesystem access for groundwork.

This package provides:
- base: FilesystemReader, FilesystemExecutor, Filesystem protocols and path helpers
- local: LocalFilesystem, backed by a project directory on disk
- memory: MemoryFilesystem, an in-memory substitute
"""

from groundwork.fs.base import (
    Filesystem,
    FilesystemExecutor,
    FilesystemReader,
    join_path,
    parent_path,
    path_depth,
)
from groundwork.fs.local import LocalFilesystem
from groundwork.fs.memory import MemoryFilesystem


__all__ = [
    "Filesystem",
    "FilesystemExecutor",
    "FilesystemReader",
    "LocalFilesystem",
    "MemoryFilesystem",
    "join_path",
    "parent_path",
    "path_depth",
]
