from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relman.core.config import CONFIG_FILE_NAME, ReleaseConfig, load_config_or_default
from relman.core.errors import ErrorCode
from relman.core.result import Err
from relman.output.console import ConsoleProtocol, RichConsole
from relman.output.errors import print_config_error
from relman.output.prompt import PromptProtocol, TyperPrompter
from relman.platform.process import CommandRunner, SubprocessRunner


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: ReleaseConfig
    console: ConsoleProtocol
    prompter: PromptProtocol
    runner: CommandRunner


def build_context(*, repo: Path | None, config_path: Path | None) -> CLIContext:
    console = RichConsole()

    root = (repo or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        console.error(f"not a directory: {root}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_config_or_default(config_path or root / CONFIG_FILE_NAME)
    if isinstance(config_result, Err):
        print_config_error(config_result.error, console)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    config = config_result.value

    return CLIContext(
        repo_root=root,
        config=config,
        console=console,
        prompter=TyperPrompter(),
        runner=SubprocessRunner(timeout=float(config.command_timeout)),
    )
