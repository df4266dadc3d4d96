"""Devfile manifest model: parsing, structural validation and persistence."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ManifestInvalid
from .fs import Filesystem

COMMAND_GROUP_KINDS = ("build", "run", "test", "debug", "deploy")
DEPLOY_GROUP_KIND = "deploy"

_COMMAND_TYPES = ("exec", "apply", "composite")
_STARTER_TYPES = ("git", "zip")


@dataclass(frozen=True)
class DevfileMetadata:
    name: str
    language: str
    project_type: str
    display_name: str


@dataclass(frozen=True)
class StarterProject:
    """A starter project declared in ``starterProjects``."""

    name: str
    location: str
    kind: str
    revision: Optional[str] = None
    sub_dir: Optional[str] = None
    description: Optional[str] = None


class Devfile:
    """Parsed devfile bound to the path it is persisted at."""

    def __init__(self, data: Dict[str, Any], *, path: str, fs: Filesystem) -> None:
        self._data = data
        self.path = path
        self._fs = fs

    @classmethod
    def parse(cls, content: bytes | str, *, path: str, fs: Filesystem) -> "Devfile":
        """Parse and structurally validate ``content``; raise ``ManifestInvalid`` on failure."""
        if isinstance(content, bytes):
            try:
                content = content.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ManifestInvalid(f"devfile is not valid UTF-8: {exc}") from exc
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ManifestInvalid(f"failed to parse devfile: {exc}") from exc
        validate_devfile_data(data)
        return cls(data, path=path, fs=fs)

    @classmethod
    def load(cls, fs: Filesystem, path: str) -> "Devfile":
        return cls.parse(fs.read_file(path), path=path, fs=fs)

    @property
    def data(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    @property
    def schema_version(self) -> str:
        return str(self._data["schemaVersion"])

    @property
    def metadata(self) -> DevfileMetadata:
        raw = self._data.get("metadata") or {}
        return DevfileMetadata(
            name=_text(raw.get("name")),
            language=_text(raw.get("language")),
            project_type=_text(raw.get("projectType")),
            display_name=_text(raw.get("displayName")),
        )

    @property
    def starter_projects(self) -> List[StarterProject]:
        starters: List[StarterProject] = []
        for raw in self._data.get("starterProjects") or []:
            if "git" in raw:
                git = raw["git"] or {}
                remotes = git.get("remotes") or {}
                checkout = git.get("checkoutFrom") or {}
                remote_name = checkout.get("remote") or next(iter(remotes), None)
                location = _text(remotes.get(remote_name)) if remote_name else ""
                starters.append(
                    StarterProject(
                        name=str(raw["name"]),
                        location=location,
                        kind="git",
                        revision=_text(checkout.get("revision")) or None,
                        sub_dir=_text(raw.get("subDir")) or None,
                        description=_text(raw.get("description")) or None,
                    )
                )
            else:
                zip_source = raw["zip"] or {}
                starters.append(
                    StarterProject(
                        name=str(raw["name"]),
                        location=_text(zip_source.get("location")),
                        kind="zip",
                        sub_dir=_text(raw.get("subDir")) or None,
                        description=_text(raw.get("description")) or None,
                    )
                )
        return starters

    def starter_project(self, name: str) -> Optional[StarterProject]:
        for starter in self.starter_projects:
            if starter.name == name:
                return starter
        return None

    def commands(self, group_kind: str | None = None) -> List[Dict[str, Any]]:
        """Return commands, optionally restricted to those in ``group_kind``."""
        result: List[Dict[str, Any]] = []
        for command in self._data.get("commands") or []:
            if group_kind is None or _command_group_kind(command) == group_kind:
                result.append(copy.deepcopy(command))
        return result

    def component_type(self, fallback: str) -> str:
        """Project type, else language, else ``fallback``."""
        metadata = self.metadata
        return metadata.project_type or metadata.language or fallback

    def set_metadata_name(self, name: str) -> None:
        """Set ``metadata.name`` and write the devfile to disk."""
        metadata = self._data.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
            self._data["metadata"] = metadata
        metadata["name"] = name
        self.write()

    def to_yaml(self) -> str:
        return yaml.safe_dump(self._data, sort_keys=False, default_flow_style=False)

    def write(self) -> None:
        self._fs.write_file(self.path, self.to_yaml().encode("utf-8"))


def validate_devfile_data(data: Any) -> None:
    """Check the structure the pipeline depends on."""
    if not isinstance(data, dict):
        raise ManifestInvalid("devfile must contain a mapping at the root")

    schema_version = data.get("schemaVersion")
    if not isinstance(schema_version, str) or not schema_version.startswith("2."):
        raise ManifestInvalid(
            f"unsupported devfile schemaVersion {schema_version!r}: a 2.x version string is required"
        )

    metadata = data.get("metadata")
    if metadata is None:
        raise ManifestInvalid("devfile is missing the metadata section")
    if not isinstance(metadata, dict):
        raise ManifestInvalid("devfile metadata must be a mapping")

    components = _as_list(data, "components")
    names = set()
    for index, component in enumerate(components):
        if not isinstance(component, dict) or not _text(component.get("name")):
            raise ManifestInvalid(f"components[{index}] must be a mapping with a name")
        if component["name"] in names:
            raise ManifestInvalid(f"duplicate component name {component['name']!r}")
        names.add(component["name"])

    ids = set()
    for index, command in enumerate(_as_list(data, "commands")):
        if not isinstance(command, dict) or not _text(command.get("id")):
            raise ManifestInvalid(f"commands[{index}] must be a mapping with an id")
        types = [key for key in _COMMAND_TYPES if key in command]
        if len(types) != 1:
            raise ManifestInvalid(
                f"command {command['id']!r} must define exactly one of {', '.join(_COMMAND_TYPES)}"
            )
        if command["id"] in ids:
            raise ManifestInvalid(f"duplicate command id {command['id']!r}")
        ids.add(command["id"])
        kind = _command_group_kind(command)
        if kind is not None and kind not in COMMAND_GROUP_KINDS:
            raise ManifestInvalid(f"command {command['id']!r} has unknown group kind {kind!r}")

    starters = set()
    for index, starter in enumerate(_as_list(data, "starterProjects")):
        if not isinstance(starter, dict) or not _text(starter.get("name")):
            raise ManifestInvalid(f"starterProjects[{index}] must be a mapping with a name")
        types = [key for key in _STARTER_TYPES if key in starter]
        if len(types) != 1:
            raise ManifestInvalid(
                f"starter project {starter['name']!r} must define exactly one of git or zip"
            )
        source = starter[types[0]]
        if not isinstance(source, dict):
            raise ManifestInvalid(f"starter project {starter['name']!r} has an invalid {types[0]} source")
        if types[0] == "zip" and not _text(source.get("location")):
            raise ManifestInvalid(f"starter project {starter['name']!r} has no zip location")
        if types[0] == "git" and not isinstance(source.get("remotes"), dict):
            raise ManifestInvalid(f"starter project {starter['name']!r} has no git remotes")
        if starter["name"] in starters:
            raise ManifestInvalid(f"duplicate starter project {starter['name']!r}")
        starters.add(starter["name"])


def _as_list(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestInvalid(f"devfile {key} must be a list")
    return value


def _command_group_kind(command: Mapping[str, Any]) -> Optional[str]:
    for key in _COMMAND_TYPES:
        body = command.get(key)
        if isinstance(body, dict):
            group = body.get("group")
            if isinstance(group, dict) and group.get("kind"):
                return str(group["kind"])
    return None


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


__all__ = [
    "COMMAND_GROUP_KINDS",
    "DEPLOY_GROUP_KIND",
    "Devfile",
    "DevfileMetadata",
    "StarterProject",
    "validate_devfile_data",
]
