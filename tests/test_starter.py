from __future__ import annotations

import io
import subprocess
import tarfile
from pathlib import Path

import pytest

from compinit.context import RunContext
from compinit.devfile import StarterProject
from compinit.errors import Cancelled, DownloadFailed, ExtractFailed
from compinit.fs import MemoryFilesystem
from compinit.starter import StarterDownloader
from tests._fixtures.registry import FakeRegistry, build_zip

ZIP_URL = "https://starters.example.com/app.zip"
WORK = "/work"


def _zip_starter(**kwargs) -> StarterProject:
    return StarterProject(name="app", location=ZIP_URL, kind="zip", **kwargs)


def _downloader(fs: MemoryFilesystem, payload: bytes, **kwargs) -> StarterDownloader:
    fetcher = FakeRegistry()
    fetcher.add_url(ZIP_URL, payload)
    return StarterDownloader(fs, fetcher, **kwargs)


def test_zip_starter_strips_shared_root_and_removes_staged_devfile() -> None:
    fs = MemoryFilesystem(cwd=WORK, files={"devfile.yaml": "schemaVersion: 2.2.0\n"})
    payload = build_zip({"README.md": "# app\n", "src/app.py": "print('hi')\n"}, root="app-main")

    written = _downloader(fs, payload).download(_zip_starter(), WORK)

    assert written == 2
    assert sorted(fs.snapshot()) == ["/work/README.md", "/work/src/app.py"]


def test_zip_without_shared_root_is_kept_as_is() -> None:
    fs = MemoryFilesystem(cwd=WORK)
    payload = build_zip({"README.md": "# app\n", "src/app.py": "print('hi')\n"})

    _downloader(fs, payload).download(_zip_starter(), WORK)

    assert sorted(fs.snapshot()) == ["/work/README.md", "/work/src/app.py"]


def test_sub_dir_selects_part_of_the_archive() -> None:
    fs = MemoryFilesystem(cwd=WORK)
    payload = build_zip(
        {"docs/index.md": "docs\n", "starters/node/package.json": "{}", "starters/node/lib/a.js": ""},
        root="repo-main",
    )

    _downloader(fs, payload).download(_zip_starter(sub_dir="starters/node/"), WORK)

    assert sorted(fs.snapshot()) == ["/work/lib/a.js", "/work/package.json"]


def test_tar_archives_are_supported() -> None:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        data = b"package main\n"
        info = tarfile.TarInfo("go-starter/main.go")
        info.size = len(data)
        archive.addfile(info, io.BytesIO(data))
    fs = MemoryFilesystem(cwd=WORK)

    _downloader(fs, buffer.getvalue()).download(_zip_starter(), WORK)

    assert fs.snapshot() == {"/work/main.go": b"package main\n"}


def test_entries_escaping_destination_are_rejected() -> None:
    fs = MemoryFilesystem(cwd=WORK)
    payload = build_zip({"../evil.sh": "rm -rf /\n", "ok.txt": "fine\n"})

    with pytest.raises(ExtractFailed) as excinfo:
        _downloader(fs, payload).download(_zip_starter(), WORK)

    assert excinfo.value.partial is False
    assert fs.snapshot() == {}


def test_garbage_payload_is_not_partial() -> None:
    fs = MemoryFilesystem(cwd=WORK)

    with pytest.raises(ExtractFailed) as excinfo:
        _downloader(fs, b"definitely not an archive").download(_zip_starter(), WORK)

    assert excinfo.value.partial is False


def test_fetch_failure_becomes_download_failed() -> None:
    fs = MemoryFilesystem(cwd=WORK)
    downloader = StarterDownloader(fs, FakeRegistry())

    with pytest.raises(DownloadFailed, match="HTTP 404"):
        downloader.download(_zip_starter(), WORK)


def test_missing_location_is_rejected_before_touching_files() -> None:
    fs = MemoryFilesystem(cwd=WORK, files={"devfile.yaml": "schemaVersion: 2.2.0\n"})
    starter = StarterProject(name="app", location="", kind="zip")

    with pytest.raises(DownloadFailed):
        StarterDownloader(fs, FakeRegistry()).download(starter, WORK)

    assert list(fs.snapshot()) == ["/work/devfile.yaml"]


def test_cancellation_after_first_file_is_partial() -> None:
    ctx = RunContext()

    class CancellingFilesystem(MemoryFilesystem):
        def write_file(self, path: str, data: bytes) -> None:
            super().write_file(path, data)
            ctx.cancel()

    fs = CancellingFilesystem(cwd=WORK)
    payload = build_zip({"a.txt": "a", "b.txt": "b"})

    with pytest.raises(ExtractFailed) as excinfo:
        _downloader(fs, payload).download(_zip_starter(), WORK, ctx)

    assert excinfo.value.partial is True
    assert list(fs.snapshot()) == ["/work/a.txt"]


def test_cancellation_before_download() -> None:
    fs = MemoryFilesystem(cwd=WORK)
    ctx = RunContext()
    ctx.cancel()

    with pytest.raises(Cancelled):
        _downloader(fs, build_zip({"a.txt": "a"})).download(_zip_starter(), WORK, ctx)


def test_git_starter_clones_and_copies() -> None:
    calls = []

    def fake_runner(args, cwd):
        calls.append(list(args))
        clone_dir = Path(args[-1])
        (clone_dir / ".git").mkdir(parents=True)
        (clone_dir / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
        (clone_dir / "app.py").write_text("print('hi')\n", encoding="utf-8")
        return ""

    fs = MemoryFilesystem(cwd=WORK)
    starter = StarterProject(
        name="flask-example",
        location="https://github.com/devfile-samples/python-ex.git",
        kind="git",
        revision="main",
    )

    written = StarterDownloader(fs, FakeRegistry(), runner=fake_runner).download(starter, WORK)

    assert written == 1
    assert fs.snapshot() == {"/work/app.py": b"print('hi')\n"}
    assert calls[0][:6] == [
        "git",
        "clone",
        "--depth",
        "1",
        "--branch",
        "main",
    ]
    assert calls[0][6] == "https://github.com/devfile-samples/python-ex.git"


def test_git_clone_failure_becomes_download_failed() -> None:
    def failing_runner(args, cwd):
        raise subprocess.CalledProcessError(128, args, stderr="fatal: repository not found\n")

    fs = MemoryFilesystem(cwd=WORK)
    starter = StarterProject(name="s", location="https://example.com/missing.git", kind="git")

    with pytest.raises(DownloadFailed, match="repository not found"):
        StarterDownloader(fs, FakeRegistry(), runner=failing_runner).download(starter, WORK)
