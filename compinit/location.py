"""Read-only checks over the context directory."""

from __future__ import annotations

import os

from .fs import Filesystem

DEVFILE_NAME = "devfile.yaml"


def devfile_path(directory: str) -> str:
    """Return where the manifest lives (or will be staged) inside ``directory``."""
    return os.path.join(directory, DEVFILE_NAME)


def contains_devfile(fs: Filesystem, directory: str) -> bool:
    """Return True when ``directory`` already holds a regular ``devfile.yaml``."""
    try:
        info = fs.stat(devfile_path(directory))
    except FileNotFoundError:
        return False
    return not info.is_dir


def dir_is_empty(fs: Filesystem, directory: str) -> bool:
    """Return True when ``directory`` has no entries at all."""
    return fs.is_empty(directory)


__all__ = ["DEVFILE_NAME", "contains_devfile", "devfile_path", "dir_is_empty"]
