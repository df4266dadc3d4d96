"""Backend driven entirely by command-line flags."""

from __future__ import annotations

import os
from typing import Mapping, Optional, Tuple

from .base import InitBackend, directory_name
from ..context import RunContext
from ..devfile import Devfile, StarterProject
from ..errors import FetchFailed, FlagDependency, StarterNotFound
from ..flags import FLAG_DEVFILE, FLAG_DEVFILE_PATH, FLAG_DEVFILE_REGISTRY, FLAG_NAME, FLAG_STARTER
from ..fs import Filesystem
from ..logging import get_logger
from ..naming import default_name, validate_name
from ..net import Fetcher, HttpFetcher, is_url
from ..registry import RegistryClient

logger = get_logger("backend.flags")


class FlagsBackend(InitBackend):
    """Resolves the devfile from ``--devfile-path`` or ``--devfile`` [``--devfile-registry``]."""

    name = "flags"

    def __init__(self, fs: Filesystem, registry: RegistryClient, fetcher: Fetcher | None = None) -> None:
        super().__init__(fs, registry)
        self._fetcher = fetcher or HttpFetcher()

    def handles(self, flags: Mapping[str, str], context_dir: str) -> bool:
        return bool(flags)

    def select_and_personalize_devfile(
        self,
        flags: Mapping[str, str],
        context_dir: str,
        ctx: RunContext,
    ) -> Tuple[Devfile, str]:
        if FLAG_DEVFILE_PATH in flags:
            content = self._read_devfile_path(flags[FLAG_DEVFILE_PATH], context_dir, ctx)
            return self.stage_devfile(content, context_dir)

        if FLAG_DEVFILE in flags:
            entry = self.registry.find_entry(
                flags[FLAG_DEVFILE],
                flags.get(FLAG_DEVFILE_REGISTRY),
                ctx=ctx,
            )
            return self.download_registry_devfile(entry, context_dir, ctx)

        raise FlagDependency(
            f"no devfile source given: use --{FLAG_DEVFILE} or --{FLAG_DEVFILE_PATH}"
        )

    def select_starter_project(
        self,
        devfile: Devfile,
        flags: Mapping[str, str],
        fs: Filesystem,
        context_dir: str,
        ctx: RunContext,
    ) -> Optional[StarterProject]:
        requested = flags.get(FLAG_STARTER)
        if not requested:
            return None
        starter = devfile.starter_project(requested)
        if starter is None:
            available = ", ".join(s.name for s in devfile.starter_projects) or "none"
            raise StarterNotFound(
                f"starter project {requested!r} not found in devfile (available: {available})"
            )
        return starter

    def personalize_name(self, devfile: Devfile, flags: Mapping[str, str], ctx: RunContext) -> str:
        if FLAG_NAME in flags:
            return validate_name(flags[FLAG_NAME])
        return default_name([devfile.metadata.name, directory_name(devfile)])

    def _read_devfile_path(self, location: str, context_dir: str, ctx: RunContext) -> bytes:
        if is_url(location):
            logger.info("Fetching devfile from %s", location)
            return self._fetcher(location, ctx=ctx)

        path = os.path.expanduser(location)
        if not os.path.isabs(path):
            path = os.path.join(context_dir, path)
        logger.info("Reading devfile from %s", path)
        try:
            return self.fs.read_file(path)
        except OSError as exc:
            raise FetchFailed(f"unable to read devfile at {location}: {exc}") from exc


__all__ = ["FlagsBackend"]
