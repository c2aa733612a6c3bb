"""Release version rules."""

from __future__ import annotations

import string
from collections.abc import Iterable

from relman.core.result import Err, Ok, Result
from relman.release.errors import ReleaseError

__all__ = [
    "ensure_tag_available",
    "is_snapshot",
    "next_dev_version",
    "tag_for",
    "validate_new_version",
]


def tag_for(version: str) -> str:
    return f"v{version}"


def is_snapshot(version: str, *, snapshot_suffix: str) -> bool:
    return version.endswith(snapshot_suffix)


def validate_new_version(raw: str | None, *, snapshot_suffix: str) -> Result[str, ReleaseError]:
    """Check operator input for the version to release.

    Trailing whitespace (the newline) is dropped first. The first failing rule
    wins; there is no retry at the prompt.
    """
    value = (raw or "").rstrip()

    def invalid(message: str) -> Err[ReleaseError]:
        return Err(ReleaseError(kind="invalid_version", message=message))

    if not value:
        return invalid("No version entered.")
    if " " in value:
        return invalid("Versions can't contain spaces.")
    if value.startswith("v"):
        return invalid("Please, don't include v prefix.")
    if value[0] not in string.digits:
        return invalid("Should start with a digit.")
    if not all(c.isalpha() or c in string.digits or c in ".-" for c in value):
        return invalid("Only digits, letters, dots and dashes are allowed.")
    if snapshot_suffix in value:
        return invalid("Snapshots not allowed.")
    return Ok(value)


def ensure_tag_available(version: str, existing_tags: Iterable[str]) -> Result[str, ReleaseError]:
    """Fail if v<version> is already tagged. Returns the tag to create."""
    tag = tag_for(version)
    if tag in set(existing_tags):
        return Err(
            ReleaseError(
                kind="tag_exists",
                message="This version already exists!",
                hint=f"tag {tag} is already present",
            )
        )
    return Ok(tag)


def next_dev_version(raw: str | None, *, released: str, snapshot_suffix: str) -> str:
    """Pick the version the branch moves to after the release.

    A blank answer keeps working on the released version name; anything else
    is taken as the next target. Either way the snapshot suffix is appended.
    """
    name = (raw or "").strip()
    if not name:
        name = released
    return f"{name}{snapshot_suffix}"
