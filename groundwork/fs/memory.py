"""In-memory filesystem for previews and tests."""

import errno
from typing import Optional

from groundwork.fs.base import parent_path


class MemoryFilesystem:
    """Reader and executor holding a project tree in memory.

    Directories are tracked explicitly; writing a file creates its parents.
    """

    def __init__(self, files: Optional[dict[str, str]] = None):
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = set()
        for path, text in (files or {}).items():
            self.write_text(path, text)

    # Convenience helpers

    def write_text(self, path: str, text: str) -> None:
        self.write_file(path, text.encode("utf-8"))

    def read_text(self, path: str) -> Optional[str]:
        data = self.files.get(path)
        return data.decode("utf-8") if data is not None else None

    def snapshot(self) -> dict[str, bytes]:
        """Return a copy of all file contents keyed by path."""
        return dict(self.files)

    def _add_parents(self, path: str) -> None:
        parent = parent_path(path)
        while parent:
            self.dirs.add(parent)
            parent = parent_path(parent)

    # FilesystemReader

    def exists(self, path: str) -> bool:
        return path in self.files or path in self.dirs

    def is_dir(self, path: str) -> bool:
        return path in self.dirs

    def read_file(self, path: str) -> Optional[bytes]:
        if path in self.dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        return self.files.get(path)

    def list_dir(self, path: str) -> list[str]:
        if path not in self.dirs:
            return []
        prefix = f"{path}/"
        names = set()
        for entry in list(self.files) + list(self.dirs):
            if entry.startswith(prefix):
                names.add(entry[len(prefix):].split("/", 1)[0])
        return sorted(names)

    def is_dir_empty(self, path: str) -> bool:
        return not self.list_dir(path)

    # FilesystemExecutor

    def mkdir(self, path: str) -> None:
        if path in self.files:
            raise FileExistsError(errno.EEXIST, "File exists", path)
        self.dirs.add(path)
        self._add_parents(path)

    def write_file(self, path: str, content: bytes) -> None:
        if path in self.dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        self._add_parents(path)
        self.files[path] = content

    def remove(self, path: str, recursive: bool = False) -> None:
        if path in self.files:
            del self.files[path]
            return
        if path not in self.dirs:
            return
        children = self.list_dir(path)
        if children and not recursive:
            raise OSError(errno.ENOTEMPTY, "Directory not empty", path)
        prefix = f"{path}/"
        self.files = {p: c for p, c in self.files.items() if not p.startswith(prefix)}
        self.dirs = {d for d in self.dirs if d != path and not d.startswith(prefix)}
