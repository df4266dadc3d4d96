from __future__ import annotations

from typing import Callable, Iterable, List

import pytest

from compinit.backend import Prompter
from compinit.config import Preferences, RegistryConfig
from compinit.fs import MemoryFilesystem
from compinit.orchestrator import Orchestrator
from compinit.registry import RegistryClient
from tests._fixtures.registry import REGISTRY_URL, WORKDIR, FakeRegistry, ScriptedInput, default_registry


@pytest.fixture
def memfs() -> MemoryFilesystem:
    """Empty in-memory context directory at ``/work/myapp``."""
    return MemoryFilesystem(cwd=WORKDIR)


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return default_registry()


@pytest.fixture
def preferences() -> Preferences:
    return Preferences(registries=[RegistryConfig(name="DefaultDevfileRegistry", url=REGISTRY_URL)])


@pytest.fixture
def registry_client(preferences: Preferences, fake_registry: FakeRegistry) -> RegistryClient:
    return RegistryClient(preferences, fake_registry)


@pytest.fixture
def output() -> List[str]:
    """Lines echoed to the user."""
    return []


@pytest.fixture
def make_prompter(output: List[str]) -> Callable[..., Prompter]:
    def _make(answers: Iterable[object] = ()) -> Prompter:
        return Prompter(input_func=ScriptedInput(answers), output=output.append)

    return _make


@pytest.fixture
def make_orchestrator(
    preferences: Preferences,
    fake_registry: FakeRegistry,
    output: List[str],
    make_prompter: Callable[..., Prompter],
) -> Callable[..., Orchestrator]:
    """Build an orchestrator over ``fs`` wired to the fake registry."""

    def _make(fs: MemoryFilesystem, answers: Iterable[object] = (), **kwargs) -> Orchestrator:
        return Orchestrator(
            fs=fs,
            preferences=preferences,
            fetcher=fake_registry,
            prompter=make_prompter(answers),
            echo=output.append,
            **kwargs,
        )

    return _make
