"""Filesystem implementation backed by a real project directory."""

import shutil
from pathlib import Path
from typing import Optional


class LocalFilesystem:
    """Reader and executor rooted at a project directory on disk."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / path if path else self.root

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def is_dir(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def read_file(self, path: str) -> Optional[bytes]:
        """Read a file, returning None if it does not exist.

        Raises:
            OSError: If the path exists but cannot be read (e.g., it is a directory).
        """
        target = self._resolve(path)
        if not target.exists():
            return None
        return target.read_bytes()

    def list_dir(self, path: str) -> list[str]:
        target = self._resolve(path)
        if not target.is_dir():
            return []
        return sorted(entry.name for entry in target.iterdir())

    def is_dir_empty(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.is_dir():
            return True
        return next(target.iterdir(), None) is None

    def mkdir(self, path: str) -> None:
        self._resolve(path).mkdir(parents=True, exist_ok=True)

    def write_file(self, path: str, content: bytes) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    def remove(self, path: str, recursive: bool = False) -> None:
        """Remove a file or directory. Missing paths are ignored.

        Non-recursive removal of a directory only succeeds when it is empty.
        """
        target = self._resolve(path)
        if target.is_dir() and not target.is_symlink():
            if recursive:
                shutil.rmtree(target)
            else:
                target.rmdir()
        else:
            target.unlink(missing_ok=True)
