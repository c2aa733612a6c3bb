from __future__ import annotations

from pathlib import Path

import typer

from relman.cli.context import build_context
from relman.core.errors import ErrorCode
from relman.core.result import Err
from relman.output.errors import print_release_failure, release_failure_exit_code
from relman.platform.process import tokenize_command
from relman.release.version_file import read_version_line
from relman.release.workflow import ReleaseWorkflow

_REPO_OPTION = typer.Option(
    None,
    "--repo",
    help="Repository root (defaults to the current directory)",
)
_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="Path to relman.toml (defaults to <repo>/relman.toml)",
)


def release(
    repo: Path | None = _REPO_OPTION,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Release a new version, then prepare the next development version."""
    ctx = build_context(repo=repo, config_path=config)

    workflow = ReleaseWorkflow(
        repo_root=ctx.repo_root,
        config=ctx.config,
        runner=ctx.runner,
        console=ctx.console,
        prompter=ctx.prompter,
    )
    result = workflow.run()
    if isinstance(result, Err):
        print_release_failure(result.error, ctx.console)
        raise typer.Exit(code=release_failure_exit_code(result.error))


def current(
    repo: Path | None = _REPO_OPTION,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Print the version declared in the version file."""
    ctx = build_context(repo=repo, config_path=config)

    line = read_version_line(
        ctx.config.version_file_path(ctx.repo_root),
        prefix=ctx.config.version_line_prefix,
    )
    if isinstance(line, Err):
        print_release_failure(line.error, ctx.console)
        raise typer.Exit(code=release_failure_exit_code(line.error))
    typer.echo(line.value.version)


def tokenize(command: str = typer.Argument(..., help="Command line to split")) -> None:
    """Show how a command line is split into arguments (one per line)."""
    tokens = tokenize_command(command)
    if not tokens:
        typer.echo("error: empty command", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    for i, token in enumerate(tokens):
        typer.echo(f"{i}: {token}")
