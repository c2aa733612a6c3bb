"""Git repository abstraction.

Repository builds git command lines and hands them to a CommandRunner. Read
queries (branch, tags) run in capture mode. Anything that changes history or
talks to a remote streams to the terminal so the operator sees git's own
output (and can answer credential prompts).

Usage:
    repo = Repository(Path("."), runner=SubprocessRunner())

    match repo.current_branch():
        case Ok(branch):
            print(f"Branch: {branch}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import string
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from relman.core.result import Err, Ok, Result
from relman.platform.process import CommandRunner, ProcessError

__all__ = [
    "GitError",
    "Repository",
    "is_version_tag",
    "push_command",
    "push_tags_command",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command line that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def is_version_tag(tag: str) -> bool:
    """True for release tags: a "v" followed by a digit (v1.2.3, v2.0.0-rc1)."""
    return len(tag) > 1 and tag.startswith("v") and tag[1] in string.digits


def push_command(remote: str) -> str:
    return f"git push {remote}"


def push_tags_command(remote: str) -> str:
    return f"git push {remote} --tags"


class Repository:
    """Git operations used by the release workflow.

    Attributes:
        path: Working directory every git command runs in

    Args:
        echo: Called with each command line before it streams, so the
            operator can see what is about to touch the repository
    """

    def __init__(
        self,
        path: Path,
        *,
        runner: CommandRunner,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.path = path
        self._runner = runner
        self._echo = echo

    def current_branch(self) -> Result[str, GitError]:
        """Get the current branch name ("HEAD" when detached)."""
        command = "git rev-parse --abbrev-ref HEAD"
        result = self._runner.capture(command, cwd=self.path)
        match result:
            case Err(e):
                return Err(_git_error(command, e, fallback="cannot determine current branch"))
            case Ok(stdout):
                return Ok(stdout.rstrip())

    def version_tags(self) -> Result[list[str], GitError]:
        """List existing release tags, sorted as strings."""
        command = "git tag"
        result = self._runner.capture(command, cwd=self.path)
        match result:
            case Err(e):
                return Err(_git_error(command, e, fallback="cannot list tags"))
            case Ok(stdout):
                tags = [t for t in stdout.rstrip().splitlines() if is_version_tag(t)]
                return Ok(sorted(tags))

    def commit_all(self, message: str) -> Result[None, GitError]:
        """Commit every tracked change (git commit -am)."""
        return self._stream(f'git commit -am "{message}"')

    def tag_annotated(self, tag: str, message: str) -> Result[None, GitError]:
        return self._stream(f'git tag -a {tag} -m "{message}"')

    def push(self, remote: str) -> Result[None, GitError]:
        return self._stream(push_command(remote))

    def push_tags(self, remote: str) -> Result[None, GitError]:
        return self._stream(push_tags_command(remote))

    def checkout(self, branch: str) -> Result[None, GitError]:
        return self._stream(f"git checkout {branch}")

    def pull(self, remote: str) -> Result[None, GitError]:
        return self._stream(f"git pull {remote}")

    def merge(self, branch: str) -> Result[None, GitError]:
        return self._stream(f"git merge {branch}")

    def _stream(self, command: str) -> Result[None, GitError]:
        if self._echo is not None:
            self._echo(command)
        result = self._runner.stream(command, cwd=self.path)
        if isinstance(result, Err):
            return Err(_git_error(command, result.error, fallback=f"{command} failed"))
        return Ok(None)


def _git_error(command: str, error: ProcessError, *, fallback: str) -> GitError:
    detail = error.stderr.strip() or error.stdout.strip() or fallback
    return GitError(
        command=command,
        message=f"{detail} (exit {error.returncode})",
        returncode=error.returncode,
    )
