"""Result type for explicit error handling.

Release steps return a Result instead of raising, so the workflow driver can
tell a finished step from a fatal error or an operator cancellation without
try/except blocks around every call.

Usage:
    match read_version_line(path, prefix=prefix):
        case Ok(line):
            print(f"Current version: {line.version}")
        case Err(error):
            print(f"Error: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
