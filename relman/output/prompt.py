"""Line-oriented operator input.

PromptProtocol reads one line of operator input per question. Like
ConsoleProtocol, it has a terminal implementation (typer) and a scripted one
for tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["PromptProtocol", "ScriptedPrompter", "TyperPrompter"]


class PromptProtocol(Protocol):
    def ask(self, message: str) -> str | None:
        """Show message and read one line of input.

        Returns the line without its newline, or None when input is closed
        (EOF / Ctrl-D).
        """
        ...


class TyperPrompter:
    """Reads answers from the terminal via typer.prompt."""

    def ask(self, message: str) -> str | None:
        import typer

        try:
            value: str = typer.prompt(message, default="", show_default=False)
        except typer.Abort:
            return None
        return value


def _empty_answers() -> list[str | None]:
    return []


@dataclass
class ScriptedPrompter:
    """Prompter that replays canned answers and records the questions asked.

    Once the script is exhausted every further question gets None, the same
    as a closed stdin.
    """

    answers: list[str | None] = field(default_factory=_empty_answers)
    asked: list[str] = field(default_factory=list)

    def ask(self, message: str) -> str | None:
        self.asked.append(message)
        if not self.answers:
            return None
        return self.answers.pop(0)

    @property
    def remaining(self) -> int:
        return len(self.answers)
