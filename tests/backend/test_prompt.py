from __future__ import annotations

import pytest

from compinit.backend import Prompter
from compinit.context import RunContext
from compinit.errors import Cancelled, UserAborted
from tests._fixtures.registry import ScriptedInput


def _prompter(answers, output):
    return Prompter(input_func=ScriptedInput(answers), output=output.append)


def test_ask_returns_default_on_empty_answer() -> None:
    output = []
    prompter = _prompter(["", "  custom  "], output)

    assert prompter.ask("Enter component name", default="nodejs") == "nodejs"
    assert prompter.ask("Enter component name", default="nodejs") == "custom"


def test_confirm_reprompts_until_yes_or_no() -> None:
    output = []
    prompter = _prompter(["maybe", "N"], output)

    assert prompter.confirm("Is this correct?") is False
    assert "  Please answer 'y' or 'n'." in output


def test_choose_lists_choices_and_validates_answer() -> None:
    output = []
    prompter = _prompter(["0", "abc", "3"], output)

    index = prompter.choose("Select language", ["Go", "Java", "Python"])

    assert index == 2
    assert output[:4] == ["? Select language", "    (1) Go *", "    (2) Java", "    (3) Python"]
    assert output.count("  Please enter a number between 1 and 3.") == 2


def test_choose_requires_choices() -> None:
    with pytest.raises(ValueError):
        _prompter([], []).choose("Select language", [])


@pytest.mark.parametrize("failure", [EOFError(), KeyboardInterrupt()])
def test_end_of_input_aborts(failure) -> None:
    prompter = _prompter([failure], [])

    with pytest.raises(UserAborted):
        prompter.ask("Enter component name")


def test_cancelled_context_stops_prompting() -> None:
    scripted = ScriptedInput(["y"])
    prompter = Prompter(input_func=scripted, output=lambda _: None)
    ctx = RunContext()
    ctx.cancel()

    with pytest.raises(Cancelled):
        prompter.confirm("Is this correct?", ctx=ctx)

    assert scripted.prompts == []
