"""Starter project download and extraction.

Downloading a starter is destructive: the staged ``devfile.yaml`` is removed
first because the starter may ship its own devfile. Everything is written
through the :class:`~compinit.fs.Filesystem` so the caller can tell whether
any file reached the context directory (``ExtractFailed.partial``).
"""

from __future__ import annotations

import io
import os
import posixpath
import subprocess
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .context import RunContext
from .devfile import StarterProject
from .errors import Cancelled, DownloadFailed, ExtractFailed, FetchFailed, InitError
from .fs import Filesystem
from .location import devfile_path
from .logging import get_logger
from .net import Fetcher, HttpFetcher

# (relative path, reader) pairs; a reader runs only when its member is written.
Member = Tuple[str, Callable[[], bytes]]
CommandRunner = Callable[[Sequence[str], Optional[str]], str]

logger = get_logger("starter")


class StarterDownloader:
    """Fetches starter projects (zip/tar archives or git repositories) into a directory."""

    def __init__(
        self,
        fs: Filesystem,
        fetcher: Fetcher | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self._fs = fs
        self._fetcher = fetcher or HttpFetcher()
        self._runner = runner or self._default_runner

    def download(self, starter: StarterProject, context_dir: str, ctx: RunContext | None = None) -> int:
        """Replace the staged devfile with ``starter``'s content; return the number of files written."""
        if not starter.location:
            raise DownloadFailed(f"starter project {starter.name!r} has no location")

        staged = devfile_path(context_dir)
        if self._fs.exists(staged):
            self._fs.remove(staged)

        logger.info("Downloading starter project %s from %s", starter.name, starter.location)
        if starter.kind == "git":
            return self._download_git(starter, context_dir, ctx)
        return self._download_archive(starter, context_dir, ctx)

    def _download_archive(self, starter: StarterProject, context_dir: str, ctx: RunContext | None) -> int:
        try:
            payload = self._fetcher(starter.location, ctx=ctx)
        except FetchFailed as exc:
            raise DownloadFailed(str(exc)) from exc
        return self._write_members(_archive_members(payload), starter, context_dir, ctx, strip_root=True)

    def _download_git(self, starter: StarterProject, context_dir: str, ctx: RunContext | None) -> int:
        with tempfile.TemporaryDirectory(prefix="compinit-starter-") as tmp:
            clone_dir = os.path.join(tmp, "repo")
            args = ["git", "clone", "--depth", "1"]
            if starter.revision:
                args.extend(["--branch", starter.revision])
            args.extend([starter.location, clone_dir])
            if ctx is not None:
                ctx.raise_if_cancelled()
            try:
                self._runner(args, None)
            except (OSError, subprocess.CalledProcessError) as exc:
                raise DownloadFailed(f"failed to clone {starter.location}: {_describe(exc)}") from exc
            return self._write_members(_directory_members(Path(clone_dir)), starter, context_dir, ctx, strip_root=False)

    def _write_members(
        self,
        members: Iterator[Member],
        starter: StarterProject,
        context_dir: str,
        ctx: RunContext | None,
        *,
        strip_root: bool,
    ) -> int:
        written = 0
        try:
            for relative, read in _select_members(members, starter.sub_dir, strip_root=strip_root):
                if ctx is not None:
                    ctx.raise_if_cancelled()
                target = os.path.join(context_dir, *relative.split("/"))
                self._fs.mkdir_all(os.path.dirname(target))
                self._fs.write_file(target, read())
                written += 1
        except ExtractFailed as exc:
            if written and not exc.partial:
                raise ExtractFailed(str(exc), partial=True) from exc
            raise
        except (Cancelled, KeyboardInterrupt) as exc:
            if not written:
                raise
            raise ExtractFailed(
                f"extraction of starter project {starter.name!r} was cancelled", partial=True
            ) from exc
        except (InitError, OSError, EOFError, tarfile.TarError, zipfile.BadZipFile) as exc:
            raise ExtractFailed(
                f"failed to extract starter project {starter.name!r}: {_describe(exc)}",
                partial=written > 0,
            ) from exc
        logger.debug("Extracted %d files from starter project %s", written, starter.name)
        return written

    @staticmethod
    def _default_runner(args: Sequence[str], cwd: Optional[str]) -> str:
        completed = subprocess.run(
            list(args),
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
        return completed.stdout


def _archive_members(payload: bytes) -> Iterator[Member]:
    buffer = io.BytesIO(payload)
    if zipfile.is_zipfile(buffer):
        buffer.seek(0)
        archive = zipfile.ZipFile(buffer)
        for info in archive.infolist():
            if info.is_dir():
                continue
            yield info.filename, (lambda info=info: archive.read(info))
        return

    buffer.seek(0)
    try:
        tar = tarfile.open(fileobj=buffer, mode="r:*")
    except tarfile.TarError as exc:
        raise ExtractFailed(f"unsupported starter archive: {exc}") from exc
    for member in tar:
        if not member.isfile():
            continue
        yield member.name, (lambda member=member: _read_tar_member(tar, member))


def _read_tar_member(tar: tarfile.TarFile, member: tarfile.TarInfo) -> bytes:
    handle = tar.extractfile(member)
    if handle is None:
        raise ExtractFailed(f"cannot read {member.name} from starter archive")
    with handle:
        return handle.read()


def _directory_members(root: Path) -> Iterator[Member]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name != ".git")
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.is_symlink():
                continue
            yield path.relative_to(root).as_posix(), path.read_bytes


def _select_members(
    members: Iterator[Member],
    sub_dir: str | None,
    *,
    strip_root: bool,
) -> Iterator[Member]:
    """Normalise member paths, drop a shared top-level folder and apply ``sub_dir``."""
    pending: List[Member] = []
    root: Optional[str] = None
    shared = strip_root
    for name, read in members:
        relative = _safe_relative(name)
        pending.append((relative, read))
        head = relative.split("/", 1)[0]
        if "/" not in relative or (root is not None and head != root):
            shared = False
        root = head if root is None else root

    prefix = f"{root}/" if shared and root else ""
    wanted = _safe_relative(sub_dir).rstrip("/") + "/" if sub_dir else ""

    for relative, read in pending:
        relative = relative[len(prefix):]
        if wanted:
            if not relative.startswith(wanted):
                continue
            relative = relative[len(wanted):]
        if relative:
            yield relative, read


def _safe_relative(name: str) -> str:
    normalised = posixpath.normpath(name.replace("\\", "/")).lstrip("/")
    if normalised == ".." or normalised.startswith("../") or posixpath.isabs(name):
        raise ExtractFailed(f"starter archive entry {name!r} points outside the destination")
    return "" if normalised == "." else normalised


def _describe(exc: BaseException) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = exc.stderr.strip() if isinstance(exc.stderr, str) else ""
        return stderr or f"exit code {exc.returncode}"
    return str(exc) or exc.__class__.__name__


__all__ = ["StarterDownloader"]
