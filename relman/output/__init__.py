"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .prompt import PromptProtocol, ScriptedPrompter, TyperPrompter

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "PromptProtocol",
    "RichConsole",
    "ScriptedPrompter",
    "Style",
    "TyperPrompter",
]
