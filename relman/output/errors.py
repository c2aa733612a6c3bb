"""Error presentation utilities.

Centralized failure formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relman.core.config import ConfigError
from relman.core.errors import ErrorCode
from relman.output.console import Style
from relman.release.errors import ReleaseCancelled, ReleaseError, ReleaseFailure

if TYPE_CHECKING:
    from relman.output.console import ConsoleProtocol

__all__ = ["print_config_error", "print_release_failure", "release_failure_exit_code"]


def print_release_failure(failure: ReleaseFailure, console: ConsoleProtocol) -> None:
    """Print a release failure to the console."""
    match failure:
        case ReleaseCancelled(question=question):
            console.print(f"Cancelled at: {question}", Style.DIM)
        case ReleaseError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.path is not None:
        console.print(f"hint: fix or remove {error.path}", Style.DIM)


def release_failure_exit_code(failure: ReleaseFailure) -> int:
    """Get the process exit code for a release failure."""
    match failure:
        case ReleaseCancelled():
            return int(ErrorCode.CANCELLED)
        case ReleaseError(kind="invalid_version" | "tag_exists"):
            return int(ErrorCode.USER_ERROR)
        case ReleaseError(
            kind="wrong_branch"
            | "version_line_missing"
            | "version_line_ambiguous"
            | "version_line_malformed"
            | "not_snapshot"
        ):
            return int(ErrorCode.ENV_ERROR)
        case ReleaseError(kind="command_failed" | "unknown_step"):
            return int(ErrorCode.BUILD_ERROR)
        case ReleaseError(kind="io_failed"):
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.BUILD_ERROR)
