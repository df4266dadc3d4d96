"""Backend that picks a devfile from the sources already present in the directory."""

from __future__ import annotations

import os
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .base import InitBackend, directory_name
from .interactive import InteractiveBackend
from .prompt import Prompter
from ..analyzers import Analyzer, collect_signals
from ..context import RunContext
from ..devfile import Devfile, StarterProject
from ..errors import DetectionFailed
from ..flags import FLAG_NAME
from ..fs import Filesystem
from ..location import dir_is_empty
from ..logging import get_logger
from ..models import Signal
from ..naming import default_name, validate_name
from ..registry import RegistryClient, RegistryEntry

LANGUAGE_SCORE = 10
SECONDARY_LANGUAGE_SCORE = 2
PROJECT_TYPE_SCORE = 5
TAG_SCORE = 1

logger = get_logger("backend.detection")


class DetectedSources:
    """Languages, frameworks and project name derived from analyzer signals."""

    def __init__(self, signals: Sequence[Signal]) -> None:
        self.primary_language: Optional[str] = None
        self.languages: List[str] = []
        self.frameworks: List[str] = []
        self.project_name: Optional[str] = None
        for signal in signals:
            if signal.name == "language.primary":
                self.primary_language = signal.value
            elif signal.name == "language.all":
                self.languages = list(signal.metadata.get("languages", []))
            elif signal.name == "language.frameworks":
                for items in signal.metadata.get("frameworks", {}).values():
                    self.frameworks.extend(items)
            elif signal.name == "project.name" and self.project_name is None:
                self.project_name = signal.value

    def __bool__(self) -> bool:
        return self.primary_language is not None


def rank_entries(
    entries: Iterable[RegistryEntry],
    detected: DetectedSources,
) -> List[Tuple[int, RegistryEntry]]:
    """Score every stack entry; best first, ties ordered by entry name."""
    primary = _normalise(detected.primary_language or "")
    secondary = {_normalise(language) for language in detected.languages} - {primary}
    frameworks = {_normalise(item) for item in detected.frameworks}
    vocabulary: Set[str] = frameworks | secondary | ({primary} if primary else set())

    ranked: List[Tuple[int, RegistryEntry]] = []
    for entry in entries:
        if entry.type != "stack":
            continue
        score = 0
        language = _normalise(entry.language)
        if language and language == primary:
            score += LANGUAGE_SCORE
        elif language and language in secondary:
            score += SECONDARY_LANGUAGE_SCORE
        if entry.project_type and _normalise(entry.project_type) in frameworks:
            score += PROJECT_TYPE_SCORE
        score += TAG_SCORE * sum(1 for tag in entry.tags if _normalise(tag) in vocabulary)
        ranked.append((score, entry))
    ranked.sort(key=lambda item: (-item[0], item[1].name, item[1].registry))
    return ranked


class DetectionBackend(InitBackend):
    """Ranks registry devfiles against the directory's languages and frameworks."""

    name = "detection"

    def __init__(
        self,
        fs: Filesystem,
        registry: RegistryClient,
        prompter: Prompter,
        analyzers: Iterable[Analyzer] | None = None,
    ) -> None:
        super().__init__(fs, registry)
        self.prompter = prompter
        self._analyzers = list(analyzers) if analyzers is not None else None
        self._detected: Dict[str, DetectedSources] = {}

    def handles(self, flags: Mapping[str, str], context_dir: str) -> bool:
        return not flags and not dir_is_empty(self.fs, context_dir)

    def detect(self, context_dir: str) -> DetectedSources:
        cached = self._detected.get(context_dir)
        if cached is None:
            cached = DetectedSources(collect_signals(self.fs, context_dir, self._analyzers))
            self._detected[context_dir] = cached
        return cached

    def select_and_personalize_devfile(
        self,
        flags: Mapping[str, str],
        context_dir: str,
        ctx: RunContext,
    ) -> Tuple[Devfile, str]:
        detected = self.detect(context_dir)
        if not detected:
            raise DetectionFailed("could not detect the language of the sources in the current directory")

        ranked = rank_entries(self.registry.list_entries(ctx=ctx), detected)
        if not ranked or ranked[0][0] <= 0:
            raise DetectionFailed(
                f"no devfile in the configured registries matches the detected language "
                f"{detected.primary_language!r}"
            )
        score, entry = ranked[0]
        logger.info("Detected devfile %s (score %d) from registry %s", entry.name, score, entry.registry)

        self.prompter.echo("Based on the files in the current directory compinit detected")
        self.prompter.echo(f"Language: {entry.language or detected.primary_language}")
        self.prompter.echo(f"Project type: {entry.project_type or entry.name}")
        if not self.prompter.confirm("Is this correct?", default=True, ctx=ctx):
            entry = InteractiveBackend(self.fs, self.registry, self.prompter).choose_entry(ctx)

        return self.download_registry_devfile(entry, context_dir, ctx)

    def select_starter_project(
        self,
        devfile: Devfile,
        flags: Mapping[str, str],
        fs: Filesystem,
        context_dir: str,
        ctx: RunContext,
    ) -> Optional[StarterProject]:
        return None

    def personalize_name(self, devfile: Devfile, flags: Mapping[str, str], ctx: RunContext) -> str:
        if FLAG_NAME in flags:
            return validate_name(flags[FLAG_NAME])
        detected = self.detect(os.path.dirname(devfile.path))
        return default_name([detected.project_name, directory_name(devfile), devfile.metadata.name])


def _normalise(value: str) -> str:
    return re.sub(r"[^a-z0-9+#]", "", value.lower())


__all__ = ["DetectedSources", "DetectionBackend", "rank_entries"]
