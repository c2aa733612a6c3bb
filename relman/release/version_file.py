"""Reading and rewriting the library version line.

The version file is a source file (ProjectVersions.kt by default) in which
exactly one line declares the library version:

        const val thisLibrary = "1.2.3-SNAPSHOT"

Only that line is ever touched; every other byte of the file, line endings
included, is preserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relman.core.result import Err, Ok, Result
from relman.platform.files import atomic_write_text, read_text_exact
from relman.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class VersionLine:
    """The matched version declaration.

    Attributes:
        index: Zero-based line number in the file
        text: Line content without its line ending
        version: The quoted version value
    """

    index: int
    text: str
    version: str


def _split_ending(line: str) -> tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body) :]


def find_version_line(content: str, *, prefix: str, path: Path) -> Result[VersionLine, ReleaseError]:
    matches = [
        (i, body)
        for i, body in enumerate(_split_ending(ln)[0] for ln in content.splitlines(keepends=True))
        if body.startswith(prefix)
    ]
    if not matches:
        return Err(
            ReleaseError(
                kind="version_line_missing",
                message="Library version line not found.",
                hint=f"expected a line starting with {prefix!r} in {path}",
            )
        )
    if len(matches) > 1:
        lines = ", ".join(str(i + 1) for i, _ in matches)
        return Err(
            ReleaseError(
                kind="version_line_ambiguous",
                message="Library version line is declared more than once.",
                hint=f"{path} lines {lines}",
            )
        )

    index, body = matches[0]
    rest = body[len(prefix) :]
    if len(rest) < 2 or not rest.endswith('"') or '"' in rest[:-1]:
        return Err(
            ReleaseError(
                kind="version_line_malformed",
                message="Library version line is not a quoted version.",
                hint=f"{path}:{index + 1}: {body.strip()}",
            )
        )
    return Ok(VersionLine(index=index, text=body, version=rest[:-1]))


def read_version_line(path: Path, *, prefix: str) -> Result[VersionLine, ReleaseError]:
    try:
        content = read_text_exact(path)
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to read {path}: {e}"))
    return find_version_line(content, prefix=prefix, path=path)


def render_version(content: str, *, line: VersionLine, prefix: str, version: str) -> str:
    """Return content with the version line replaced, everything else unchanged."""
    lines = content.splitlines(keepends=True)
    _, ending = _split_ending(lines[line.index])
    lines[line.index] = f'{prefix}{version}"{ending}'
    return "".join(lines)


def rewrite_version(path: Path, *, prefix: str, version: str) -> Result[VersionLine, ReleaseError]:
    """Set the version in the file.

    The file is re-read so edits the operator made meanwhile (they are asked to
    update docs between rewrites) are kept.

    Returns:
        Ok(VersionLine) describing the new line
    """
    try:
        content = read_text_exact(path)
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to read {path}: {e}"))

    found = find_version_line(content, prefix=prefix, path=path)
    if isinstance(found, Err):
        return found
    line = found.value

    updated = render_version(content, line=line, prefix=prefix, version=version)
    try:
        atomic_write_text(path, updated)
    except OSError as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to write {path}: {e}"))

    return Ok(VersionLine(index=line.index, text=f'{prefix}{version}"', version=version))
