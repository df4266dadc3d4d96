"""Component name rules."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from .errors import NameInvalid

MAX_NAME_LENGTH = 63
DEFAULT_NAME = "component"

_NAME_PATTERN = re.compile(r"^[a-z]([-a-z0-9]*[a-z0-9])?$")
_INVALID_RUN = re.compile(r"[^a-z0-9]+")


def validate_name(name: str) -> str:
    """Return ``name`` unchanged when it is a valid component name, else raise ``NameInvalid``."""
    if len(name) > MAX_NAME_LENGTH:
        raise NameInvalid(
            f"component name {name!r} is too long: {len(name)} characters (max {MAX_NAME_LENGTH})"
        )
    if not _NAME_PATTERN.match(name):
        raise NameInvalid(
            f"component name {name!r} is invalid: it must consist of lower case alphanumeric "
            "characters or '-', start with a letter and end with an alphanumeric character"
        )
    return name


def sanitize_name(candidate: str) -> Optional[str]:
    """Coerce ``candidate`` into a valid name, or return None when nothing usable remains."""
    lowered = _INVALID_RUN.sub("-", candidate.strip().lower())
    lowered = lowered.lstrip("-0123456789")
    lowered = lowered[:MAX_NAME_LENGTH].strip("-")
    if not lowered or not _NAME_PATTERN.match(lowered):
        return None
    return lowered


def default_name(candidates: Iterable[Optional[str]]) -> str:
    """Return the first candidate that sanitises into a valid name."""
    for candidate in candidates:
        if not candidate:
            continue
        sanitized = sanitize_name(candidate)
        if sanitized:
            return sanitized
    return DEFAULT_NAME


__all__ = ["DEFAULT_NAME", "MAX_NAME_LENGTH", "default_name", "sanitize_name", "validate_name"]
