from __future__ import annotations

import pytest

from compinit.backend import InteractiveBackend
from compinit.backend.interactive import NO_STARTER
from compinit.config import Preferences, RegistryConfig
from compinit.context import RunContext
from compinit.devfile import Devfile
from compinit.errors import DevfileNotFound
from compinit.fs import MemoryFilesystem
from compinit.registry import RegistryClient
from tests._fixtures.registry import NODE_DEVFILE, REGISTRY_URL, WORKDIR, FakeRegistry


def test_handles_empty_directory_without_flags(memfs, registry_client, make_prompter) -> None:
    backend = InteractiveBackend(memfs, registry_client, make_prompter())

    assert backend.handles({}, WORKDIR) is True
    assert backend.handles({"name": "x"}, WORKDIR) is False
    memfs.write_file(f"{WORKDIR}/main.go", b"package main\n")
    assert backend.handles({}, WORKDIR) is False


def test_menus_select_language_then_devfile(memfs, registry_client, make_prompter, output) -> None:
    # Languages: Java, JavaScript, Python
    backend = InteractiveBackend(memfs, registry_client, make_prompter(["3", "1"]))

    devfile, path = backend.select_and_personalize_devfile({}, WORKDIR, RunContext())

    assert devfile.metadata.name == "python"
    assert memfs.exists(path)
    assert "? Select language" in output
    assert "    (3) Python" in output
    assert "    (1) python - Python [Python] *" in output
    # Samples are not offered.
    assert not any("nodejs-basic" in line for line in output)


def test_registry_menu_shown_for_several_registries(memfs, make_prompter, output) -> None:
    fetcher = FakeRegistry()
    fetcher.add_url(f"{REGISTRY_URL}/index", '[{"name": "nodejs", "language": "JavaScript"}]')
    fetcher.add_url("https://other.example.com/index", '[{"name": "go", "language": "Go"}]')
    preferences = Preferences(
        registries=[
            RegistryConfig("Default", REGISTRY_URL),
            RegistryConfig("Other", "https://other.example.com"),
        ]
    )
    backend = InteractiveBackend(memfs, RegistryClient(preferences, fetcher), make_prompter(["2", "", ""]))

    entry = backend.choose_entry(RunContext())

    assert (entry.registry, entry.name) == ("Other", "go")
    assert output[0] == "? Select a devfile registry"
    assert fetcher.requests == ["https://other.example.com/index"]


def test_no_stacks_available(memfs, make_prompter) -> None:
    fetcher = FakeRegistry()
    fetcher.add_url(f"{REGISTRY_URL}/index", '[{"name": "sample", "type": "sample"}]')
    client = RegistryClient(Preferences(registries=[RegistryConfig("Default", REGISTRY_URL)]), fetcher)
    backend = InteractiveBackend(memfs, client, make_prompter())

    with pytest.raises(DevfileNotFound):
        backend.choose_entry(RunContext())


def test_starter_menu(memfs, registry_client, make_prompter, output) -> None:
    devfile = Devfile.parse(NODE_DEVFILE, path=f"{WORKDIR}/devfile.yaml", fs=memfs)
    backend = InteractiveBackend(memfs, registry_client, make_prompter(["1", "2"]))
    ctx = RunContext()

    starter = backend.select_starter_project(devfile, {}, memfs, WORKDIR, ctx)
    assert starter is not None and starter.name == "nodejs-starter"
    assert backend.select_starter_project(devfile, {}, memfs, WORKDIR, ctx) is None
    assert f"    (2) {NO_STARTER}" in output


def test_starter_menu_skipped_without_starters(registry_client, make_prompter) -> None:
    fs = MemoryFilesystem(cwd=WORKDIR)
    devfile = Devfile.parse("schemaVersion: 2.2.0\nmetadata: {}\n", path=f"{WORKDIR}/devfile.yaml", fs=fs)
    backend = InteractiveBackend(fs, registry_client, make_prompter())

    assert backend.select_starter_project(devfile, {}, fs, WORKDIR, RunContext()) is None


def test_name_prompt_reprompts_on_invalid_name(memfs, registry_client, make_prompter, output) -> None:
    devfile = Devfile.parse(NODE_DEVFILE, path=f"{WORKDIR}/devfile.yaml", fs=memfs)
    backend = InteractiveBackend(memfs, registry_client, make_prompter(["Bad Name", "good-name"]))

    assert backend.personalize_name(devfile, {}, RunContext()) == "good-name"
    assert any("is invalid" in line for line in output)


def test_accepting_suggested_name_is_stable(memfs, registry_client, make_prompter) -> None:
    devfile = Devfile.parse(NODE_DEVFILE, path=f"{WORKDIR}/devfile.yaml", fs=memfs)
    backend = InteractiveBackend(memfs, registry_client, make_prompter(["", ""]))
    ctx = RunContext()

    first = backend.personalize_name(devfile, {}, ctx)

    assert first == "nodejs"
    assert backend.personalize_name(devfile, {}, ctx) == first
    assert memfs.snapshot() == {}
