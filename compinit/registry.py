"""Client for devfile registries (``GET <url>/index``, ``GET <url>/devfiles/<name>``)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from .config import Preferences, RegistryConfig
from .context import RunContext
from .errors import DevfileNotFound, FetchFailed, RegistryNotFound
from .logging import get_logger
from .net import Fetcher, HttpFetcher

logger = get_logger("registry")


@dataclass(frozen=True)
class RegistryEntry:
    """A devfile stack or sample listed in a registry index."""

    name: str
    registry: str
    display_name: str = ""
    description: str = ""
    language: str = ""
    project_type: str = ""
    type: str = "stack"
    tags: Tuple[str, ...] = field(default_factory=tuple)
    starter_projects: Tuple[str, ...] = field(default_factory=tuple)


class RegistryClient:
    """Lists registry indexes and downloads devfiles, caching indexes per run."""

    def __init__(self, preferences: Preferences, fetcher: Fetcher | None = None) -> None:
        self._preferences = preferences
        self._fetcher = fetcher or HttpFetcher(timeout=preferences.request_timeout)
        self._index_cache: Dict[str, List[RegistryEntry]] = {}

    def registries(self) -> List[RegistryConfig]:
        return list(self._preferences.registries)

    def get_registry(self, name: str) -> RegistryConfig:
        registry = self._preferences.registry(name)
        if registry is None:
            known = ", ".join(r.name for r in self._preferences.registries) or "none"
            raise RegistryNotFound(f"registry {name!r} not found (configured registries: {known})")
        return registry

    def list_entries(
        self,
        registry: str | None = None,
        *,
        ctx: RunContext | None = None,
    ) -> List[RegistryEntry]:
        """Return index entries of ``registry`` or of every configured registry, in order."""
        targets = [self.get_registry(registry)] if registry else self.registries()
        entries: List[RegistryEntry] = []
        for target in targets:
            entries.extend(self._index(target, ctx))
        return entries

    def find_entry(
        self,
        name: str,
        registry: str | None = None,
        *,
        ctx: RunContext | None = None,
    ) -> RegistryEntry:
        """Resolve ``name`` in ``registry`` or in the first configured registry listing it."""
        for entry in self.list_entries(registry, ctx=ctx):
            if entry.name == name:
                return entry
        scope = f"registry {registry!r}" if registry else "any configured registry"
        raise DevfileNotFound(f"devfile {name!r} not found in {scope}")

    def download_devfile(self, entry: RegistryEntry, *, ctx: RunContext | None = None) -> bytes:
        registry = self.get_registry(entry.registry)
        url = f"{registry.url}/devfiles/{quote(entry.name)}"
        logger.info("Downloading devfile %s from registry %s", entry.name, registry.name)
        return self._fetcher(url, ctx=ctx)

    def _index(self, registry: RegistryConfig, ctx: RunContext | None) -> List[RegistryEntry]:
        cached = self._index_cache.get(registry.name)
        if cached is not None:
            return cached
        url = f"{registry.url}/index"
        raw = self._fetcher(url, ctx=ctx)
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FetchFailed(f"registry {registry.name!r} returned an invalid index: {exc}") from exc
        if not isinstance(payload, list):
            raise FetchFailed(f"registry {registry.name!r} returned an invalid index: expected a list")

        entries = [
            entry
            for entry in (_entry_from_dict(item, registry.name) for item in payload)
            if entry is not None
        ]
        logger.debug("Registry %s lists %d entries", registry.name, len(entries))
        self._index_cache[registry.name] = entries
        return entries


def _entry_from_dict(item: object, registry: str) -> Optional[RegistryEntry]:
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    if not isinstance(name, str) or not name:
        return None
    return RegistryEntry(
        name=name,
        registry=registry,
        display_name=_str(item.get("displayName")),
        description=_str(item.get("description")),
        language=_str(item.get("language")),
        project_type=_str(item.get("projectType")),
        type=_str(item.get("type")) or "stack",
        tags=_str_tuple(item.get("tags")),
        starter_projects=_str_tuple(item.get("starterProjects")),
    )


def _str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _str_tuple(value: object) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


__all__ = ["RegistryClient", "RegistryEntry"]
