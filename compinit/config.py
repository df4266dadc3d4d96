"""Preference loading for compinit (~/.compinit/preference.yaml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

DEFAULT_REGISTRY_NAME = "DefaultDevfileRegistry"
DEFAULT_REGISTRY_URL = "https://registry.devfile.io"
DEFAULT_REQUEST_TIMEOUT = 60.0

ENV_CONFIG_PATH = "COMPINIT_CONFIG"
ENV_REGISTRY_URL = "COMPINIT_REGISTRY_URL"


class ConfigError(RuntimeError):
    """Raised when the preference file cannot be parsed."""


@dataclass
class RegistryConfig:
    """A named devfile registry."""

    name: str
    url: str


@dataclass
class Preferences:
    """Settings read from the preference file."""

    path: Optional[Path] = None
    registries: List[RegistryConfig] = field(default_factory=list)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def registry(self, name: str) -> Optional[RegistryConfig]:
        for registry in self.registries:
            if registry.name == name:
                return registry
        return None


def default_config_path() -> Path:
    override = os.environ.get(ENV_CONFIG_PATH)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".compinit" / "preference.yaml"


def load_config(config_path: Path | None = None) -> Preferences:
    """Load preferences from disk, falling back to defaults when the file is missing."""
    config_file = (config_path or default_config_path()).expanduser()

    if not config_file.exists():
        return Preferences(path=config_file, registries=_default_registries())

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    registries = _parse_registries(data.get("registries"), config_file)
    if not registries:
        registries = _default_registries()

    timeout = _as_float(data.get("request_timeout"))
    if timeout is not None and timeout <= 0:
        raise ConfigError("request_timeout must be a positive number of seconds")

    return Preferences(
        path=config_file,
        registries=registries,
        request_timeout=timeout if timeout is not None else DEFAULT_REQUEST_TIMEOUT,
    )


def _default_registries() -> List[RegistryConfig]:
    url = os.environ.get(ENV_REGISTRY_URL) or DEFAULT_REGISTRY_URL
    return [RegistryConfig(name=DEFAULT_REGISTRY_NAME, url=url.rstrip("/"))]


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _parse_registries(value: Any, path: Path) -> List[RegistryConfig]:
    if value is None:
        return []
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise ConfigError(f"'registries' in {path.name} must be a list")

    registries: List[RegistryConfig] = []
    seen = set()
    for item in value:
        entry = _as_dict(item)
        name = _as_str(entry.get("name"))
        url = _as_str(entry.get("url"))
        if not name or not url:
            raise ConfigError(f"every registry in {path.name} needs a name and a url")
        if name in seen:
            raise ConfigError(f"registry {name!r} is defined more than once in {path.name}")
        seen.add(name)
        registries.append(RegistryConfig(name=name, url=url.rstrip("/")))
    return registries


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


__all__ = [
    "ConfigError",
    "DEFAULT_REGISTRY_NAME",
    "DEFAULT_REGISTRY_URL",
    "Preferences",
    "RegistryConfig",
    "load_config",
]
