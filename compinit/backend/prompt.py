"""Terminal prompts used by the interactive and detection backends."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..context import RunContext
from ..errors import UserAborted

InputFunc = Callable[[str], str]
OutputFunc = Callable[[str], None]


class Prompter:
    """Line-based prompts over ``input``; end of input or Ctrl-C aborts the command."""

    def __init__(self, input_func: InputFunc | None = None, output: OutputFunc | None = None) -> None:
        self._input = input_func or input
        self._output = output or print

    def echo(self, message: str) -> None:
        self._output(message)

    def ask(self, question: str, default: str = "", ctx: RunContext | None = None) -> str:
        """Prompt user with optional default."""
        if default:
            answer = self._read(f"? {question} ({default}): ", ctx).strip()
            return answer or default
        return self._read(f"? {question}: ", ctx).strip()

    def confirm(self, question: str, default: bool = True, ctx: RunContext | None = None) -> bool:
        """Yes/no prompt."""
        suffix = "(Y/n)" if default else "(y/N)"
        while True:
            answer = self._read(f"? {question} {suffix} ", ctx).strip().lower()
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            self._output("  Please answer 'y' or 'n'.")

    def choose(
        self,
        question: str,
        choices: Sequence[str],
        default: int = 0,
        ctx: RunContext | None = None,
    ) -> int:
        """Numbered choice prompt. Returns the selected index."""
        if not choices:
            raise ValueError("choose() needs at least one choice")
        self._output(f"? {question}")
        for index, choice in enumerate(choices):
            marker = " *" if index == default else ""
            self._output(f"    ({index + 1}) {choice}{marker}")
        while True:
            answer = self._read(f"  Choice [{default + 1}]: ", ctx).strip()
            if not answer:
                return default
            selected = _parse_choice(answer, len(choices))
            if selected is not None:
                return selected
            self._output(f"  Please enter a number between 1 and {len(choices)}.")

    def _read(self, prompt: str, ctx: RunContext | None) -> str:
        if ctx is not None:
            ctx.raise_if_cancelled()
        try:
            answer = self._input(prompt)
        except (EOFError, KeyboardInterrupt) as exc:
            raise UserAborted("interactive mode aborted by the user") from exc
        if ctx is not None:
            ctx.raise_if_cancelled()
        return answer


def _parse_choice(answer: str, count: int) -> Optional[int]:
    try:
        index = int(answer) - 1
    except ValueError:
        return None
    if 0 <= index < count:
        return index
    return None


__all__ = ["Prompter"]
