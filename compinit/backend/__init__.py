"""Backends that acquire and personalise the devfile for ``init``."""

from __future__ import annotations

from typing import List, Mapping, Sequence

from .base import InitBackend
from .detection import DetectionBackend
from .flags import FlagsBackend
from .interactive import InteractiveBackend
from .prompt import Prompter
from ..fs import Filesystem
from ..net import Fetcher
from ..registry import RegistryClient


def default_backends(
    fs: Filesystem,
    registry: RegistryClient,
    prompter: Prompter,
    fetcher: Fetcher | None = None,
) -> List[InitBackend]:
    """Return the backends in selection order: flags, detection, interactive."""
    return [
        FlagsBackend(fs, registry, fetcher),
        DetectionBackend(fs, registry, prompter),
        InteractiveBackend(fs, registry, prompter),
    ]


def select_backend(
    backends: Sequence[InitBackend],
    flags: Mapping[str, str],
    context_dir: str,
) -> InitBackend:
    """Return the first backend handling ``flags`` in ``context_dir``."""
    for backend in backends:
        if backend.handles(flags, context_dir):
            return backend
    raise RuntimeError("no init backend handles this invocation")


__all__ = [
    "DetectionBackend",
    "FlagsBackend",
    "InitBackend",
    "InteractiveBackend",
    "Prompter",
    "default_backends",
    "select_backend",
]
