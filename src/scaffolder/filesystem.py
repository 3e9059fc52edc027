"""File-system access for the scaffolder.

``FileSystem`` is the narrow interface the engine needs (read, write, exists,
mkdir) so that generators can run against a real project directory or an
in-memory tree. ``FileMaterializer`` builds the create-only-if-absent write
semantics on top of it.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from src.errors import FileConflict
from src.scaffolder.paths import creation_path_segments


class FileSystem(Protocol):
    """Minimal file-system interface. Paths are ``/``-separated and relative."""

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, content: str) -> None: ...

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def mkdir(self, path: str) -> None: ...


class LocalFileSystem:
    """``FileSystem`` backed by the real disk, rooted at a project directory."""

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        return self.root / path

    def read_text(self, path: str) -> str:
        return self.resolve(path).read_text(encoding="utf-8")

    def write_text(self, path: str, content: str) -> None:
        self.resolve(path).write_text(content, encoding="utf-8")

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def is_dir(self, path: str) -> bool:
        return self.resolve(path).is_dir()

    def mkdir(self, path: str) -> None:
        self.resolve(path).mkdir(parents=True, exist_ok=True)


class FileMaterializer:
    """Creates directories and files, refusing to overwrite unless forced.

    Side effects are restricted to the target path and its ancestors.
    """

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs

    # -- Directories -------------------------------------------------------

    def ensure_directory(self, path: str) -> None:
        """Create ``path`` and any missing ancestors. No-op if it exists."""
        if not self.fs.is_dir(path):
            self.fs.mkdir(path)

    def create_directories_from_creation_path(
        self, creation_path: str | None, folder: str
    ) -> None:
        """Create each nested creation-path segment below ``folder``."""
        for directory in creation_path_segments(folder, creation_path):
            self.ensure_directory(directory)

    # -- Files -------------------------------------------------------------

    def has_file(self, path: str) -> bool:
        return self.fs.exists(path)

    def load_asset(self, path: str) -> str:
        """Return the file's text, or ``""`` when it does not exist."""
        if not self.fs.exists(path):
            return ""
        return self.fs.read_text(path)

    def assert_absent(self, path: str, force: bool = False) -> None:
        """Raise ``FileConflict`` if ``path`` exists and ``force`` is false."""
        if self.fs.exists(path) and not force:
            raise FileConflict(path)

    def write_file(
        self,
        path: str,
        content: str,
        on_success: Callable[[], None] | None = None,
    ) -> bool:
        """Write ``content`` to ``path``, overwriting any existing file.

        Returns ``True`` only if the file exists after the write, in which
        case ``on_success`` is called.
        """
        parent = path.rsplit("/", 1)[0] if "/" in path else ""
        if parent:
            self.ensure_directory(parent)
        self.fs.write_text(path, content)
        if not self.fs.exists(path):
            return False
        if on_success is not None:
            on_success()
        return True
