"""Directory scanning for language detection."""

from __future__ import annotations

import os
from typing import Iterator, List

from ..fs import Filesystem
from ..models import FileMeta, SourceTree

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".vscode",
    ".odo",
    "target",
    "build",
    "dist",
    "vendor",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_LANGUAGE_BY_SUFFIX = {
    ".py": "Python",
    ".pyi": "Python",
    ".js": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".jsx": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".java": "Java",
    ".kt": "Kotlin",
    ".kts": "Kotlin",
    ".go": "Go",
    ".rs": "Rust",
    ".rb": "Ruby",
    ".php": "PHP",
    ".cs": "C#",
    ".fs": "F#",
    ".vb": "Visual Basic .NET",
    ".c": "C",
    ".h": "C",
    ".cpp": "C++",
    ".hpp": "C++",
    ".cc": "C++",
    ".swift": "Swift",
    ".scala": "Scala",
    ".groovy": "Groovy",
}

_MAX_FILES = 10_000


def _iter_files(fs: Filesystem, root: str) -> Iterator[str]:
    for dirpath, dirnames, filenames in fs.walk(root):
        dirnames[:] = [name for name in dirnames if name not in _EXCLUDED_DIRS]
        for filename in filenames:
            if filename in _EXCLUDED_FILES:
                continue
            yield os.path.join(dirpath, filename)


def detect_language(path: str) -> str | None:
    _, suffix = os.path.splitext(path)
    return _LANGUAGE_BY_SUFFIX.get(suffix.lower())


class SourceScanner:
    """Walks the context directory to produce a :class:`SourceTree`."""

    def __init__(self, max_files: int = _MAX_FILES) -> None:
        self.max_files = max_files

    def scan(self, fs: Filesystem, root: str) -> SourceTree:
        root_path = fs.abspath(root)
        files: List[FileMeta] = []
        for path in _iter_files(fs, root_path):
            rel_path = os.path.relpath(path, root_path).replace(os.sep, "/")
            files.append(FileMeta(path=rel_path, language=detect_language(path)))
            if len(files) >= self.max_files:
                break
        return SourceTree(root=root_path, files=files)


__all__ = ["SourceScanner", "detect_language"]
