"""External command execution with Result-based error handling.

Commands are written as single command-line strings (the way an operator
would type them) and tokenized here. Two modes exist:

- capture: stdout/stderr are captured and stdout is returned on exit 0
- interactive: stdin/stdout/stderr are inherited so the operator sees the
  output live and can answer any prompt the subprocess shows

Usage:
    match run(tokenize_command('git commit -am "Prepare for release 1.3.0"'), cwd=root):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relman.core.result import Err, Ok, Result

__all__ = [
    "CommandRunner",
    "DEFAULT_TIMEOUT_SECONDS",
    "ProcessError",
    "SubprocessRunner",
    "run",
    "run_interactive",
    "tokenize_command",
]

DEFAULT_TIMEOUT_SECONDS = 60 * 60.0

_TOKEN_RE = re.compile(r'"([^"]*)"|(\S+)')


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The tokenized command that was executed.
        returncode: Exit code of the process, -1 if it never ran to completion.
        stdout: Standard output (empty in interactive mode).
        stderr: Standard error, or a description of the launch/timeout failure.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def tokenize_command(command: str) -> list[str]:
    """Split a command line into arguments.

    A double-quoted segment is a single argument and may contain spaces (the
    quotes are dropped). Everything else is split on whitespace.

        >>> tokenize_command('foo "bar baz" qux')
        ['foo', 'bar baz', 'qux']
    """
    tokens: list[str] = []
    for m in _TOKEN_RE.finditer(command):
        quoted = m.group(1)
        tokens.append(quoted if quoted is not None else m.group(2))
    return tokens


def run(
    cmd: list[str],
    cwd: Path,
    *,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
) -> Result[str, ProcessError]:
    """Execute a command, capturing its output.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_interactive(
    cmd: list[str],
    cwd: Path,
    *,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
) -> Result[None, ProcessError]:
    """Execute a command attached to the current terminal.

    Output streams straight to the operator and the subprocess can read from
    stdin. Nothing is captured.

    Returns:
        Ok(None) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), timeout=timeout, check=False)
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr=""))

    return Ok(None)


class CommandRunner(Protocol):
    """Capability to execute command lines.

    The release workflow only talks to this protocol, so tests can swap in a
    fake that records commands and returns canned output.
    """

    def capture(self, command: str, *, cwd: Path) -> Result[str, ProcessError]:
        """Run a command line and return its captured stdout."""
        ...

    def stream(self, command: str, *, cwd: Path) -> Result[None, ProcessError]:
        """Run a command line with the terminal attached."""
        ...


class SubprocessRunner:
    """CommandRunner backed by real subprocesses."""

    def __init__(self, *, timeout: float | None = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def capture(self, command: str, *, cwd: Path) -> Result[str, ProcessError]:
        return run(tokenize_command(command), cwd=cwd, timeout=self._timeout)

    def stream(self, command: str, *, cwd: Path) -> Result[None, ProcessError]:
        return run_interactive(tokenize_command(command), cwd=cwd, timeout=self._timeout)
