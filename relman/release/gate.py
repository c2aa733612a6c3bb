"""Confirmation gates: blocking yes/no questions for the operator."""

from __future__ import annotations

from relman.core.result import Err, Ok, Result
from relman.output.console import ConsoleProtocol
from relman.output.prompt import PromptProtocol
from relman.release.errors import ReleaseCancelled


def is_affirmative(answer: str | None) -> bool:
    """Accept exactly "Y", or "yes" in any case. Trailing whitespace is ignored."""
    if answer is None:
        return False
    value = answer.rstrip()
    return value == "Y" or value.lower() == "yes"


def request_confirmation(
    question: str,
    *,
    prompter: PromptProtocol,
    console: ConsoleProtocol,
) -> Result[None, ReleaseCancelled]:
    answer = prompter.ask(f"{question} Y/n")
    if is_affirmative(answer):
        return Ok(None)
    cancelled = ReleaseCancelled(question=question)
    console.warning(cancelled.message)
    return Err(cancelled)
