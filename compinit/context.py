"""Per-invocation run context: cooperative cancellation and telemetry facts."""

from __future__ import annotations

import threading
from typing import Dict, Mapping

from .errors import Cancelled

NOT_AVAILABLE = "Not available"

INTERACTIVE = "interactive"
COMPONENT_TYPE = "componentType"
LANGUAGE = "language"
PROJECT_TYPE = "projectType"
DEVFILE_NAME = "devfileName"


class RunContext:
    """Carries cancellation and the telemetry slots filled by the orchestrator."""

    def __init__(self) -> None:
        self._cancel_event = threading.Event()
        self._telemetry: Dict[str, object] = {}

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``Cancelled`` when cancellation has been requested."""
        if self._cancel_event.is_set():
            raise Cancelled("the command was cancelled")

    @property
    def telemetry(self) -> Mapping[str, object]:
        return dict(self._telemetry)

    def set_interactive(self, interactive: bool) -> None:
        self._set(INTERACTIVE, bool(interactive))

    def set_component_type(self, value: str) -> None:
        self._set(COMPONENT_TYPE, value)

    def set_language(self, value: str) -> None:
        self._set(LANGUAGE, value)

    def set_project_type(self, value: str) -> None:
        self._set(PROJECT_TYPE, value)

    def set_devfile_name(self, value: str) -> None:
        self._set(DEVFILE_NAME, value)

    def _set(self, key: str, value: object) -> None:
        if key in self._telemetry:
            raise RuntimeError(f"telemetry fact {key!r} already recorded for this run")
        self._telemetry[key] = value


__all__ = [
    "COMPONENT_TYPE",
    "DEVFILE_NAME",
    "INTERACTIVE",
    "LANGUAGE",
    "NOT_AVAILABLE",
    "PROJECT_TYPE",
    "RunContext",
]
