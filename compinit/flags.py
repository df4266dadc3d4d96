"""Canonical flag mapping for ``init`` and its validation rules."""

from __future__ import annotations

from typing import Dict, Mapping

from .errors import FlagConflict, FlagDependency, StarterDirNotEmpty, StarterWithoutDevfile
from .fs import Filesystem
from .location import dir_is_empty
from .naming import validate_name

FLAG_NAME = "name"
FLAG_DEVFILE = "devfile"
FLAG_DEVFILE_REGISTRY = "devfile-registry"
FLAG_STARTER = "starter"
FLAG_DEVFILE_PATH = "devfile-path"

KNOWN_FLAGS = (
    FLAG_NAME,
    FLAG_DEVFILE,
    FLAG_DEVFILE_REGISTRY,
    FLAG_STARTER,
    FLAG_DEVFILE_PATH,
)


def get_flags(raw: Mapping[str, object]) -> Dict[str, str]:
    """Keep only known flags with a non-empty value.

    Keys may use either dashes or underscores (``devfile_path`` as produced
    by argparse is accepted for ``devfile-path``).
    """
    flags: Dict[str, str] = {}
    for key, value in raw.items():
        canonical = key.replace("_", "-")
        if canonical not in KNOWN_FLAGS:
            continue
        if not isinstance(value, str):
            continue
        stripped = value.strip()
        if stripped:
            flags[canonical] = stripped
    return flags


def validate(flags: Mapping[str, str], fs: Filesystem, directory: str) -> None:
    """Reject invalid flag combinations before any network access."""
    if FLAG_DEVFILE in flags and FLAG_DEVFILE_PATH in flags:
        raise FlagConflict(
            f"only one of --{FLAG_DEVFILE} or --{FLAG_DEVFILE_PATH} parameter should be specified"
        )
    if FLAG_DEVFILE_REGISTRY in flags and FLAG_DEVFILE not in flags:
        raise FlagDependency(
            f"--{FLAG_DEVFILE_REGISTRY} parameter can only be used with --{FLAG_DEVFILE}"
        )
    if FLAG_STARTER in flags and FLAG_DEVFILE not in flags and FLAG_DEVFILE_PATH not in flags:
        raise StarterWithoutDevfile(
            f"--{FLAG_STARTER} parameter cannot be used without --{FLAG_DEVFILE} or --{FLAG_DEVFILE_PATH}"
        )
    if FLAG_NAME in flags and FLAG_DEVFILE not in flags and FLAG_DEVFILE_PATH not in flags:
        raise FlagDependency(
            f"--{FLAG_NAME} parameter can only be used with --{FLAG_DEVFILE} or --{FLAG_DEVFILE_PATH}"
        )
    if FLAG_NAME in flags:
        validate_name(flags[FLAG_NAME])
    if FLAG_STARTER in flags and not dir_is_empty(fs, directory):
        raise StarterDirNotEmpty(
            f"--{FLAG_STARTER} parameter cannot be used when the directory is not empty"
        )


__all__ = [
    "FLAG_DEVFILE",
    "FLAG_DEVFILE_PATH",
    "FLAG_DEVFILE_REGISTRY",
    "FLAG_NAME",
    "FLAG_STARTER",
    "KNOWN_FLAGS",
    "get_flags",
    "validate",
]
