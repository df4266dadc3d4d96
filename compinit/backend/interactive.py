"""Backend that asks the user for every choice."""

from __future__ import annotations

from typing import List, Mapping, Optional, Tuple

from .base import InitBackend, directory_name
from .prompt import Prompter
from ..context import RunContext
from ..devfile import Devfile, StarterProject
from ..errors import DevfileNotFound, NameInvalid
from ..fs import Filesystem
from ..location import dir_is_empty
from ..naming import default_name, validate_name
from ..registry import RegistryClient, RegistryEntry

NO_STARTER = "none - do not download a starter project"


class InteractiveBackend(InitBackend):
    """Prompts for registry, language, devfile, starter project and name."""

    name = "interactive"

    def __init__(self, fs: Filesystem, registry: RegistryClient, prompter: Prompter) -> None:
        super().__init__(fs, registry)
        self.prompter = prompter

    def handles(self, flags: Mapping[str, str], context_dir: str) -> bool:
        return not flags and dir_is_empty(self.fs, context_dir)

    def select_and_personalize_devfile(
        self,
        flags: Mapping[str, str],
        context_dir: str,
        ctx: RunContext,
    ) -> Tuple[Devfile, str]:
        entry = self.choose_entry(ctx)
        return self.download_registry_devfile(entry, context_dir, ctx)

    def choose_entry(self, ctx: RunContext) -> RegistryEntry:
        """Walk the user through registry, language and devfile menus."""
        registries = self.registry.registries()
        registry_name: Optional[str] = None
        if len(registries) > 1:
            index = self.prompter.choose(
                "Select a devfile registry",
                [f"{r.name} ({r.url})" for r in registries],
                ctx=ctx,
            )
            registry_name = registries[index].name

        entries = [e for e in self.registry.list_entries(registry_name, ctx=ctx) if e.type == "stack"]
        if not entries:
            raise DevfileNotFound("no devfile stacks available in the configured registries")

        languages = sorted({e.language or "Other" for e in entries}, key=str.lower)
        language = languages[self.prompter.choose("Select language", languages, ctx=ctx)]

        candidates: List[RegistryEntry] = sorted(
            (e for e in entries if (e.language or "Other") == language),
            key=lambda e: (e.name, e.registry),
        )
        labels = [_entry_label(e) for e in candidates]
        return candidates[self.prompter.choose("Select project type", labels, ctx=ctx)]

    def select_starter_project(
        self,
        devfile: Devfile,
        flags: Mapping[str, str],
        fs: Filesystem,
        context_dir: str,
        ctx: RunContext,
    ) -> Optional[StarterProject]:
        starters = devfile.starter_projects
        if not starters:
            return None
        labels = [_starter_label(s) for s in starters] + [NO_STARTER]
        index = self.prompter.choose("Which starter project do you want to use?", labels, ctx=ctx)
        if index == len(starters):
            return None
        return starters[index]

    def personalize_name(self, devfile: Devfile, flags: Mapping[str, str], ctx: RunContext) -> str:
        suggestion = default_name([devfile.metadata.name, directory_name(devfile)])
        while True:
            answer = self.prompter.ask("Enter component name", default=suggestion, ctx=ctx)
            try:
                return validate_name(answer)
            except NameInvalid as exc:
                self.prompter.echo(f"  {exc}")


def _entry_label(entry: RegistryEntry) -> str:
    label = entry.name
    if entry.display_name:
        label = f"{label} - {entry.display_name}"
    if entry.project_type:
        label = f"{label} [{entry.project_type}]"
    return label


def _starter_label(starter: StarterProject) -> str:
    if starter.description:
        return f"{starter.name} - {starter.description}"
    return starter.name


__all__ = ["InteractiveBackend", "NO_STARTER"]
