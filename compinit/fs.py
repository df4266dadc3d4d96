"""Filesystem abstraction used by the init pipeline.

Every component receives a :class:`Filesystem` rather than touching ``os``
directly so that tests (and dry runs) can substitute :class:`MemoryFilesystem`.
Errors are raised verbatim (``FileNotFoundError``, ``IsADirectoryError`` ...);
nothing here retries.
"""

from __future__ import annotations

import os
import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Set, Tuple

WalkEntry = Tuple[str, List[str], List[str]]


@dataclass(frozen=True)
class FileInfo:
    """Subset of ``stat`` results the pipeline relies on."""

    name: str
    size: int
    is_dir: bool


class Filesystem(ABC):
    """Contract for filesystem access."""

    @abstractmethod
    def getwd(self) -> str:
        """Return the absolute current working directory."""

    @abstractmethod
    def stat(self, path: str) -> FileInfo:
        """Return metadata for ``path`` or raise ``FileNotFoundError``."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a single file (never recursive)."""

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        """Return the raw contents of ``path``."""

    @abstractmethod
    def write_file(self, path: str, data: bytes) -> None:
        """Create or truncate ``path`` with ``data``; parent must exist."""

    @abstractmethod
    def list_dir(self, path: str) -> List[str]:
        """Return the sorted entry names of directory ``path``."""

    @abstractmethod
    def mkdir_all(self, path: str) -> None:
        """Create ``path`` and any missing parents."""

    def is_empty(self, path: str) -> bool:
        return not self.list_dir(path)

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
        except FileNotFoundError:
            return False
        return True

    def abspath(self, path: str) -> str:
        """Resolve ``path`` against :meth:`getwd` when it is relative."""
        expanded = os.path.expanduser(path)
        if os.path.isabs(expanded):
            return os.path.normpath(expanded)
        return os.path.normpath(os.path.join(self.getwd(), expanded))

    def walk(self, root: str) -> Iterator[WalkEntry]:
        """Top-down walk; callers may prune the yielded ``dirnames`` in place."""
        root = self.abspath(root)
        dirnames: List[str] = []
        filenames: List[str] = []
        for name in self.list_dir(root):
            if self.stat(os.path.join(root, name)).is_dir:
                dirnames.append(name)
            else:
                filenames.append(name)
        yield root, dirnames, filenames
        for name in dirnames:
            yield from self.walk(os.path.join(root, name))


class DefaultFilesystem(Filesystem):
    """Filesystem backed by the operating system."""

    def getwd(self) -> str:
        return os.getcwd()

    def stat(self, path: str) -> FileInfo:
        target = Path(self.abspath(path))
        result = target.stat()
        return FileInfo(name=target.name, size=result.st_size, is_dir=target.is_dir())

    def remove(self, path: str) -> None:
        os.remove(self.abspath(path))

    def read_file(self, path: str) -> bytes:
        return Path(self.abspath(path)).read_bytes()

    def write_file(self, path: str, data: bytes) -> None:
        Path(self.abspath(path)).write_bytes(data)

    def list_dir(self, path: str) -> List[str]:
        return sorted(os.listdir(self.abspath(path)))

    def mkdir_all(self, path: str) -> None:
        os.makedirs(self.abspath(path), exist_ok=True)


class MemoryFilesystem(Filesystem):
    """In-memory filesystem with POSIX path semantics."""

    def __init__(self, cwd: str = "/", files: Dict[str, bytes | str] | None = None) -> None:
        self._cwd = posixpath.normpath(cwd)
        self._files: Dict[str, bytes] = {}
        self._dirs: Set[str] = {"/"}
        self.mkdir_all(self._cwd)
        for path, content in (files or {}).items():
            absolute = self.abspath(path)
            self.mkdir_all(posixpath.dirname(absolute))
            data = content.encode("utf-8") if isinstance(content, str) else content
            self.write_file(absolute, data)

    def abspath(self, path: str) -> str:
        if posixpath.isabs(path):
            return posixpath.normpath(path)
        return posixpath.normpath(posixpath.join(self._cwd, path))

    def getwd(self) -> str:
        return self._cwd

    def chdir(self, path: str) -> None:
        target = self.abspath(path)
        if target not in self._dirs:
            raise FileNotFoundError(path)
        self._cwd = target

    def stat(self, path: str) -> FileInfo:
        target = self.abspath(path)
        name = posixpath.basename(target)
        if target in self._files:
            return FileInfo(name=name, size=len(self._files[target]), is_dir=False)
        if target in self._dirs:
            return FileInfo(name=name, size=0, is_dir=True)
        raise FileNotFoundError(path)

    def remove(self, path: str) -> None:
        target = self.abspath(path)
        if target in self._dirs:
            raise IsADirectoryError(path)
        if target not in self._files:
            raise FileNotFoundError(path)
        del self._files[target]

    def read_file(self, path: str) -> bytes:
        target = self.abspath(path)
        if target in self._dirs:
            raise IsADirectoryError(path)
        try:
            return self._files[target]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write_file(self, path: str, data: bytes) -> None:
        target = self.abspath(path)
        if target in self._dirs:
            raise IsADirectoryError(path)
        if posixpath.dirname(target) not in self._dirs:
            raise FileNotFoundError(path)
        self._files[target] = bytes(data)

    def list_dir(self, path: str) -> List[str]:
        target = self.abspath(path)
        if target in self._files:
            raise NotADirectoryError(path)
        if target not in self._dirs:
            raise FileNotFoundError(path)
        names = {
            posixpath.basename(entry)
            for entry in (*self._files, *self._dirs)
            if entry != target and posixpath.dirname(entry) == target
        }
        return sorted(names)

    def mkdir_all(self, path: str) -> None:
        target = self.abspath(path)
        if target in self._files:
            raise FileExistsError(path)
        while target not in self._dirs:
            self._dirs.add(target)
            target = posixpath.dirname(target)

    def snapshot(self) -> Dict[str, bytes]:
        """Return a copy of every file, keyed by absolute path."""
        return dict(self._files)


__all__ = ["DefaultFilesystem", "FileInfo", "Filesystem", "MemoryFilesystem"]
