"""Pipeline orchestration for the ``init`` command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional

from .backend import InitBackend, Prompter, default_backends, select_backend
from .config import Preferences, load_config
from .context import NOT_AVAILABLE, RunContext
from .devfile import DEPLOY_GROUP_KIND, Devfile
from .errors import AlreadyInitialised, Cancelled, ExtractFailed, InitFailed
from .flags import get_flags, validate
from .fs import DefaultFilesystem, Filesystem
from .location import DEVFILE_NAME, contains_devfile, devfile_path, dir_is_empty
from .logging import get_logger
from .net import Fetcher, HttpFetcher
from .registry import RegistryClient
from .starter import StarterDownloader

EMPTY_DIR_GREETING = "The current directory is empty. compinit will help you start a new project."
EXISTING_SOURCES_GREETING = (
    "The current directory already contains source code. compinit will try to autodetect "
    "the language and project type in order to select the best suited devfile for your project."
)
STARTER_KEPT_NOTE = (
    "the command failed after downloading the starter project. By security, "
    "the directory is not cleaned up (user data may be present)"
)
DEVFILE_REMOVED_NOTE = (
    "the command failed, manifest removed: devfile.yaml has been deleted from the current directory"
)
DEPLOY_HINT = 'To deploy your component to a cluster use "compinit deploy".'


@dataclass
class InitResult:
    """Outcome of a successful ``init`` run."""

    name: str
    devfile_path: str
    message: str
    starter: Optional[str] = None


class Orchestrator:
    """Coordinates the init pipeline and enforces the rollback contract."""

    def __init__(
        self,
        fs: Filesystem | None = None,
        preferences: Preferences | None = None,
        registry: RegistryClient | None = None,
        fetcher: Fetcher | None = None,
        prompter: Prompter | None = None,
        downloader: StarterDownloader | None = None,
        backends: Optional[Iterable[InitBackend]] = None,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.fs = fs or DefaultFilesystem()
        self.preferences = preferences or load_config()
        self.fetcher = fetcher or HttpFetcher(timeout=self.preferences.request_timeout)
        self.registry = registry or RegistryClient(self.preferences, self.fetcher)
        self.echo = echo or print
        self.prompter = prompter or Prompter(output=self.echo)
        self.downloader = downloader or StarterDownloader(self.fs, self.fetcher)
        self.backends = (
            list(backends)
            if backends is not None
            else default_backends(self.fs, self.registry, self.prompter, self.fetcher)
        )
        self.logger = get_logger("orchestrator")

    def run_init(self, raw_flags: Mapping[str, object], ctx: RunContext | None = None) -> InitResult:
        """Initialise the current working directory as a component."""
        ctx = ctx or RunContext()

        context_dir = self.fs.getwd()
        flags = get_flags(raw_flags)
        interactive = not flags
        ctx.set_interactive(interactive)
        self.logger.debug("Starting init in %s with flags %s", context_dir, flags)

        # Precondition and validation failures leave the directory untouched.
        if contains_devfile(self.fs, context_dir):
            raise AlreadyInitialised("a devfile already exists in the current directory")
        validate(flags, self.fs, context_dir)

        starter_downloaded = False
        try:
            ctx.raise_if_cancelled()
            if interactive:
                if dir_is_empty(self.fs, context_dir):
                    self.echo(EMPTY_DIR_GREETING)
                else:
                    self.echo(EXISTING_SOURCES_GREETING)

            backend = select_backend(self.backends, flags, context_dir)
            self.logger.info("Using %s backend", backend.name)

            devfile, path = backend.select_and_personalize_devfile(flags, context_dir, ctx)
            starter = backend.select_starter_project(devfile, flags, self.fs, context_dir, ctx)

            # The name is only written at the end: the starter may bring its own devfile.
            name = backend.personalize_name(devfile, flags, ctx)

            if starter is not None:
                try:
                    self.downloader.download(starter, context_dir, ctx)
                except ExtractFailed as exc:
                    starter_downloaded = exc.partial
                    raise
                starter_downloaded = True

                if self.fs.exists(path):
                    self.logger.info("Starter project %s ships a devfile; using it", starter.name)
                    devfile = Devfile.load(self.fs, path)

            devfile.set_metadata_name(name)
        except KeyboardInterrupt as exc:
            cancelled = Cancelled("the command was interrupted")
            raise self._rollback(cancelled, context_dir, starter_downloaded) from exc
        except Exception as exc:
            raise self._rollback(exc, context_dir, starter_downloaded) from exc

        self._record_telemetry(ctx, devfile)
        message = self._exit_message(devfile)
        self.logger.info("Component %s initialised in %s", name, context_dir)
        return InitResult(
            name=name,
            devfile_path=path,
            message=message,
            starter=starter.name if starter is not None else None,
        )

    def _rollback(self, exc: BaseException, context_dir: str, starter_downloaded: bool) -> InitFailed:
        if starter_downloaded:
            self.logger.warning("Leaving %s untouched after starter download", context_dir)
            return InitFailed(exc, STARTER_KEPT_NOTE, starter_downloaded=True)

        target = devfile_path(context_dir)
        try:
            self.fs.remove(target)
        except FileNotFoundError:
            self.logger.debug("No %s to remove during rollback", DEVFILE_NAME)
        except OSError as remove_exc:
            self.logger.warning("Unable to remove %s: %s", target, remove_exc)
        return InitFailed(exc, DEVFILE_REMOVED_NOTE, starter_downloaded=False)

    @staticmethod
    def _record_telemetry(ctx: RunContext, devfile: Devfile) -> None:
        metadata = devfile.metadata
        ctx.set_component_type(devfile.component_type(NOT_AVAILABLE))
        ctx.set_language(metadata.language)
        ctx.set_project_type(metadata.project_type)
        ctx.set_devfile_name(metadata.name)

    @staticmethod
    def _exit_message(devfile: Devfile) -> str:
        lines = [
            f"Your new component {devfile.metadata.name!r} is ready in the current directory.",
            'To start editing your component, use "compinit dev" and open this folder in your favorite IDE.',
            "Changes will be directly reflected on the cluster.",
        ]
        if devfile.commands(DEPLOY_GROUP_KIND):
            lines.append(DEPLOY_HINT)
        return "\n".join(lines)


__all__ = ["InitResult", "Orchestrator"]
