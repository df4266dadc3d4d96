from __future__ import annotations

import pytest

from compinit.context import NOT_AVAILABLE, RunContext
from compinit.errors import Cancelled, InitFailed, StarterNotFound, kind_of


def test_telemetry_facts_are_write_once() -> None:
    ctx = RunContext()
    ctx.set_interactive(True)
    ctx.set_component_type(NOT_AVAILABLE)

    with pytest.raises(RuntimeError):
        ctx.set_component_type("Node.js")

    assert ctx.telemetry == {"interactive": True, "componentType": "Not available"}


def test_telemetry_is_a_copy() -> None:
    ctx = RunContext()
    ctx.set_language("Go")

    snapshot = dict(ctx.telemetry)
    snapshot["language"] = "Rust"

    assert ctx.telemetry["language"] == "Go"


def test_cancellation() -> None:
    ctx = RunContext()
    ctx.raise_if_cancelled()

    ctx.cancel()

    assert ctx.cancelled is True
    with pytest.raises(Cancelled):
        ctx.raise_if_cancelled()


def test_init_failed_delegates_kind_to_cause() -> None:
    cause = StarterNotFound("starter project 'x' not found")
    error = InitFailed(cause, "manifest removed", starter_downloaded=False)

    assert error.kind == "StarterNotFound"
    assert error.category == "acquisition"
    assert str(error) == "starter project 'x' not found\nmanifest removed"


def test_kind_of_foreign_error() -> None:
    assert kind_of(ValueError("boom")) == "RuntimeFailure"
    error = InitFailed(ValueError("boom"), "kept", starter_downloaded=True)
    assert error.kind == "RuntimeFailure"
    assert error.category == "runtime"
