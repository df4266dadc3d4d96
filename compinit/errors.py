"""Error taxonomy for the init pipeline."""

from __future__ import annotations

from typing import Optional


class InitError(RuntimeError):
    """Base class for every failure surfaced by ``compinit init``."""

    kind = "InitError"
    category = "runtime"


# Validation


class FlagConflict(InitError):
    kind = "FlagConflict"
    category = "validation"


class FlagDependency(InitError):
    kind = "FlagDependency"
    category = "validation"


class StarterWithoutDevfile(InitError):
    kind = "StarterWithoutDevfile"
    category = "validation"


class StarterDirNotEmpty(InitError):
    kind = "StarterDirNotEmpty"
    category = "validation"


class NameInvalid(InitError):
    kind = "NameInvalid"
    category = "validation"


# Precondition


class AlreadyInitialised(InitError):
    kind = "AlreadyInitialised"
    category = "precondition"


# Acquisition


class FetchFailed(InitError):
    kind = "FetchFailed"
    category = "acquisition"


class ManifestInvalid(InitError):
    kind = "ManifestInvalid"
    category = "acquisition"


class DetectionFailed(InitError):
    kind = "DetectionFailed"
    category = "acquisition"


class StarterNotFound(InitError):
    kind = "StarterNotFound"
    category = "acquisition"


class RegistryNotFound(InitError):
    kind = "RegistryNotFound"
    category = "acquisition"


class DevfileNotFound(InitError):
    kind = "DevfileNotFound"
    category = "acquisition"


# Extraction


class DownloadFailed(InitError):
    kind = "DownloadFailed"
    category = "extraction"


class ExtractFailed(InitError):
    """Raised when writing the starter project into the directory fails.

    ``partial`` is True as soon as one file of the starter project has been
    written, in which case the directory must not be cleaned up.
    """

    kind = "ExtractFailed"
    category = "extraction"

    def __init__(self, message: str, *, partial: bool = False) -> None:
        super().__init__(message)
        self.partial = partial


# User


class UserAborted(InitError):
    kind = "UserAborted"
    category = "user"


class Cancelled(InitError):
    kind = "Cancelled"
    category = "user"


class InitFailed(InitError):
    """The single error returned by a failed invocation, annotated with the cleanup outcome."""

    def __init__(
        self,
        cause: BaseException,
        cleanup: str,
        *,
        starter_downloaded: bool,
    ) -> None:
        super().__init__(f"{cause}\n{cleanup}")
        self.cause = cause
        self.cleanup = cleanup
        self.starter_downloaded = starter_downloaded

    @property
    def kind(self) -> str:  # type: ignore[override]
        return kind_of(self.cause)

    @property
    def category(self) -> str:  # type: ignore[override]
        if isinstance(self.cause, InitError):
            return self.cause.category
        return "runtime"


def kind_of(exc: Optional[BaseException]) -> str:
    """Return the taxonomy kind for ``exc`` (``RuntimeFailure`` for foreign errors)."""
    if isinstance(exc, InitError):
        return exc.kind
    return "RuntimeFailure"


__all__ = [
    "AlreadyInitialised",
    "Cancelled",
    "DetectionFailed",
    "DevfileNotFound",
    "DownloadFailed",
    "ExtractFailed",
    "FetchFailed",
    "FlagConflict",
    "FlagDependency",
    "InitError",
    "InitFailed",
    "ManifestInvalid",
    "NameInvalid",
    "RegistryNotFound",
    "StarterDirNotEmpty",
    "StarterNotFound",
    "StarterWithoutDevfile",
    "UserAborted",
    "kind_of",
]
