"""Failure types for the release workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

type ReleaseErrorKind = Literal[
    "wrong_branch",
    "version_line_missing",
    "version_line_ambiguous",
    "version_line_malformed",
    "not_snapshot",
    "invalid_version",
    "tag_exists",
    "command_failed",
    "io_failed",
    "unknown_step",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """A fatal failure: the run stops and nothing is rolled back."""

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class ReleaseCancelled:
    """The operator answered something other than yes at a confirmation gate."""

    question: str
    message: str = "Process aborted."


type ReleaseFailure = ReleaseError | ReleaseCancelled
