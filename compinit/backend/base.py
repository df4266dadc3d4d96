"""Contract shared by the flags, detection and interactive backends."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Mapping, Optional, Tuple

from ..context import RunContext
from ..devfile import Devfile, StarterProject
from ..fs import Filesystem
from ..location import devfile_path
from ..logging import get_logger
from ..registry import RegistryClient, RegistryEntry

logger = get_logger("backend")


class InitBackend(ABC):
    """Strategy for obtaining and personalising a devfile."""

    name = "backend"

    def __init__(self, fs: Filesystem, registry: RegistryClient) -> None:
        self.fs = fs
        self.registry = registry

    @abstractmethod
    def handles(self, flags: Mapping[str, str], context_dir: str) -> bool:
        """Return True when this backend serves an invocation with ``flags``."""

    @abstractmethod
    def select_and_personalize_devfile(
        self,
        flags: Mapping[str, str],
        context_dir: str,
        ctx: RunContext,
    ) -> Tuple[Devfile, str]:
        """Acquire a devfile and stage it at ``<context_dir>/devfile.yaml``."""

    @abstractmethod
    def select_starter_project(
        self,
        devfile: Devfile,
        flags: Mapping[str, str],
        fs: Filesystem,
        context_dir: str,
        ctx: RunContext,
    ) -> Optional[StarterProject]:
        """Return the starter project to download, or None."""

    @abstractmethod
    def personalize_name(self, devfile: Devfile, flags: Mapping[str, str], ctx: RunContext) -> str:
        """Return the component name; never writes to disk."""

    def stage_devfile(self, content: bytes, context_dir: str) -> Tuple[Devfile, str]:
        """Validate ``content`` then write it verbatim into the context directory."""
        path = devfile_path(context_dir)
        devfile = Devfile.parse(content, path=path, fs=self.fs)
        self.fs.write_file(path, content)
        logger.debug("Staged devfile at %s", path)
        return devfile, path

    def download_registry_devfile(
        self,
        entry: RegistryEntry,
        context_dir: str,
        ctx: RunContext,
    ) -> Tuple[Devfile, str]:
        content = self.registry.download_devfile(entry, ctx=ctx)
        return self.stage_devfile(content, context_dir)


def directory_name(devfile: Devfile) -> str:
    return os.path.basename(os.path.dirname(devfile.path))


__all__ = ["InitBackend", "directory_name"]
