"""Operating-system adapters: subprocesses and files."""

from .files import atomic_write_text, read_text_exact
from .process import (
    CommandRunner,
    ProcessError,
    SubprocessRunner,
    run,
    run_interactive,
    tokenize_command,
)

__all__ = [
    "CommandRunner",
    "ProcessError",
    "SubprocessRunner",
    "atomic_write_text",
    "read_text_exact",
    "run",
    "run_interactive",
    "tokenize_command",
]
