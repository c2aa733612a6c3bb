"""Interactive release workflow.

Drives an operator through releasing the library and preparing the next
development iteration:

    precondition check -> read version -> ask new version -> tag check
    -> confirm -> docs -> commit & tag -> publish -> push / PR / merge
    -> branch sync -> next snapshot version -> final commit & push

Each step is a handler returning ``Result[StepOutcome, ReleaseFailure]``.
The first failure ends the run. Nothing is retried or rolled back, and
commits, tags or pushes already made stay in place. A rerun starts from the
first step.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from relman.core.config import ReleaseConfig
from relman.core.result import Err, Ok, Result
from relman.git.repository import GitError, Repository, push_command, push_tags_command
from relman.output.console import ConsoleProtocol, Style
from relman.output.prompt import PromptProtocol
from relman.platform.process import CommandRunner
from relman.release.errors import ReleaseError, ReleaseFailure
from relman.release.fsm import FINISH, StepHandler, StepOutcome, advance, run_state_machine
from relman.release.gate import request_confirmation
from relman.release.version import (
    ensure_tag_available,
    is_snapshot,
    next_dev_version,
    tag_for,
    validate_new_version,
)
from relman.release.version_file import read_version_line, rewrite_version

__all__ = ["STEPS", "ReleaseSession", "ReleaseWorkflow"]

STEPS: tuple[str, ...] = (
    "check_branch",
    "read_version",
    "ask_new_version",
    "check_tag",
    "confirm_version",
    "update_docs",
    "commit_and_tag",
    "publish",
    "push_release",
    "open_pull_request",
    "publish_packages",
    "push_tags",
    "merge_pull_request",
    "publish_release",
    "sync_branches",
    "prepare_next",
    "final_push",
)

_TITLES: dict[str, str] = {
    "check_branch": "Preconditions",
    "update_docs": "Documentation",
    "commit_and_tag": "Commit and tag",
    "publish": "Build and publish",
    "push_release": "Push and pull request",
    "sync_branches": "Branch sync",
    "prepare_next": "Next development version",
}

NEXT_DEV_COMMIT_MESSAGE = "Prepare next development version."


@dataclass(frozen=True, slots=True)
class ReleaseSession:
    """What the run has learned so far. Lives in memory only."""

    step: str = STEPS[0]
    current_version: str | None = None
    new_version: str | None = None
    next_version: str | None = None

    def require_new_version(self) -> str:
        if self.new_version is None:
            raise AssertionError(f"step {self.step} reached without a new version")
        return self.new_version


def _next_step(step: str) -> str:
    return STEPS[STEPS.index(step) + 1]


def _command_failed(error: GitError) -> ReleaseError:
    return ReleaseError(
        kind="command_failed",
        message=f"`{error.command}` failed: non zero exit value {error.returncode}",
        hint=error.message,
    )


class ReleaseWorkflow:
    """Release orchestrator bound to one repository checkout.

    Args:
        repo_root: Working directory for every command and the base for the
            version file path
        config: Branch names, version file location and publish command
        runner: Executes command lines
        console: Operator-facing output
        prompter: Operator input
    """

    def __init__(
        self,
        *,
        repo_root: Path,
        config: ReleaseConfig,
        runner: CommandRunner,
        console: ConsoleProtocol,
        prompter: PromptProtocol,
    ) -> None:
        self._root = repo_root
        self._config = config
        self._runner = runner
        self._console = console
        self._prompter = prompter
        self._repo = Repository(repo_root, runner=runner, echo=self._echo)
        self._version_file = config.version_file_path(repo_root)

    def run(self) -> Result[ReleaseSession, ReleaseFailure]:
        handlers: dict[str, StepHandler[ReleaseSession]] = {
            "check_branch": self._check_branch,
            "read_version": self._read_version,
            "ask_new_version": self._ask_new_version,
            "check_tag": self._check_tag,
            "confirm_version": self._confirm_version,
            "update_docs": self._update_docs,
            "commit_and_tag": self._commit_and_tag,
            "publish": self._publish,
            "push_release": self._push_release,
            "open_pull_request": self._manual(
                f"Create a pull request from the `{self._config.release_branch}` to the "
                f"`{self._config.stable_branch}` branch on {self._config.forge_name} "
                "for the new version, if not already done."
            ),
            "publish_packages": self._manual(
                f"Sign in on {self._config.registry_name} and publish the packages."
            ),
            "push_tags": self._push_tags,
            "merge_pull_request": self._manual(
                f"Merge the pull request for the new version on {self._config.forge_name}."
            ),
            "publish_release": self._manual(f"Publish release on {self._config.forge_name}."),
            "sync_branches": self._sync_branches,
            "prepare_next": self._prepare_next,
            "final_push": self._final_push,
        }

        initial = ReleaseSession()
        self._announce(initial)
        return run_state_machine(
            initial_state=initial,
            get_step=lambda s: s.step,
            handlers=handlers,
            on_advance=self._announce,
        )

    # -- helpers -----------------------------------------------------------

    def _announce(self, session: ReleaseSession) -> None:
        title = _TITLES.get(session.step)
        if title is not None:
            self._console.header(title)

    def _echo(self, command: str) -> None:
        self._console.print(f"$ {command}", Style.DIM)

    def _confirm(self, question: str) -> Result[None, ReleaseFailure]:
        return request_confirmation(question, prompter=self._prompter, console=self._console)

    def _git(self, result: Result[None, GitError]) -> Result[None, ReleaseFailure]:
        if isinstance(result, Err):
            return Err(_command_failed(result.error))
        return Ok(None)

    def _confirmed_git(
        self, question: str, *actions: Callable[[], Result[None, GitError]]
    ) -> Result[None, ReleaseFailure]:
        """Ask once, then run each git action in order, stopping at the first failure."""
        confirmed = self._confirm(question)
        if isinstance(confirmed, Err):
            return confirmed
        for action in actions:
            done = self._git(action())
            if isinstance(done, Err):
                return done
        return Ok(None)

    def _forward(self, session: ReleaseSession, **changes: str) -> Ok[StepOutcome[ReleaseSession]]:
        return Ok(advance(replace(session, step=_next_step(session.step), **changes)))

    def _manual(self, instruction: str) -> StepHandler[ReleaseSession]:
        """A step the operator performs outside this tool, then confirms."""

        def step(session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
            self._console.print(instruction)
            confirmed = self._confirm("Done?")
            if isinstance(confirmed, Err):
                return confirmed
            return self._forward(session)

        return step

    # -- steps -------------------------------------------------------------

    def _check_branch(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        branch = self._repo.current_branch()
        if isinstance(branch, Err):
            return Err(_command_failed(branch.error))

        expected = self._config.release_branch
        if branch.value != expected:
            return Err(
                ReleaseError(
                    kind="wrong_branch",
                    message=f"Please, checkout the `{expected}` branch first.",
                    hint=f"current branch: {branch.value}",
                )
            )
        return self._forward(session)

    def _read_version(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        line = read_version_line(self._version_file, prefix=self._config.version_line_prefix)
        if isinstance(line, Err):
            return line

        version = line.value.version
        suffix = self._config.snapshot_suffix
        if not is_snapshot(version, snapshot_suffix=suffix):
            return Err(
                ReleaseError(
                    kind="not_snapshot",
                    message=(
                        f"Version in {self._config.version_file} should be a `{suffix}` version."
                    ),
                    hint=f"found {version}",
                )
            )

        self._console.print(f"Current version: {version}")
        return self._forward(session, current_version=version)

    def _ask_new_version(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        self._console.print("Please enter the name of the new version you want to release:")
        answer = self._prompter.ask("New version")
        version = validate_new_version(answer, snapshot_suffix=self._config.snapshot_suffix)
        if isinstance(version, Err):
            return version
        return self._forward(session, new_version=version.value)

    def _check_tag(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        tags = self._repo.version_tags()
        if isinstance(tags, Err):
            return Err(_command_failed(tags.error))

        available = ensure_tag_available(session.require_new_version(), tags.value)
        if isinstance(available, Err):
            return available
        return self._forward(session)

    def _confirm_version(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        self._console.print(f'New version: "{session.require_new_version()}"')
        confirmed = self._confirm("Confirm?")
        if isinstance(confirmed, Err):
            return confirmed
        return self._forward(session)

    def _update_docs(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        version = session.require_new_version()
        written = rewrite_version(
            self._version_file,
            prefix=self._config.version_line_prefix,
            version=version,
        )
        if isinstance(written, Err):
            return written
        self._console.success(f"{self._config.version_file} now declares {version}")

        for doc in self._config.docs:
            self._console.print(f"Update the `{doc}` for the {version} release.")
            confirmed = self._confirm("Done?")
            if isinstance(confirmed, Err):
                return confirmed
        return self._forward(session)

    def _commit_and_tag(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        version = session.require_new_version()
        committed = self._git(self._repo.commit_all(f"Prepare for release {version}"))
        if isinstance(committed, Err):
            return committed
        tagged = self._git(self._repo.tag_annotated(tag_for(version), f"Version {version}"))
        if isinstance(tagged, Err):
            return tagged
        return self._forward(session)

    def _publish(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        command = self._config.publish_command
        self._console.print(f"Running `{command}`")
        result = self._runner.stream(command, cwd=self._root)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="command_failed",
                    message=f"`{command}` failed: non zero exit value {result.error.returncode}",
                    hint=result.error.stderr.strip() or None,
                )
            )
        self._console.print("Please check upload succeeded.")
        return self._forward(session)

    def _push_release(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        remote = self._config.remote
        self._console.print(f"Will now run {push_command(remote)}")
        confirmed = self._confirm("Continue?")
        if isinstance(confirmed, Err):
            return confirmed
        pushed = self._git(self._repo.push(remote))
        if isinstance(pushed, Err):
            return pushed
        return self._forward(session)

    def _push_tags(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        remote = self._config.remote
        self._console.print(f"Will now run {push_tags_command(remote)}")
        pushed = self._git(self._repo.push_tags(remote))
        if isinstance(pushed, Err):
            return pushed
        confirmed = self._confirm("Continue?")
        if isinstance(confirmed, Err):
            return confirmed
        return self._forward(session)

    def _sync_branches(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        stable = self._config.stable_branch
        release = self._config.release_branch
        remote = self._config.remote

        self._console.print(
            f"Will now checkout the `{stable}` branch, pull from {self._config.forge_name} "
            f"({remote}) to update the local `{stable}` branch."
        )
        synced = self._confirmed_git(
            "Continue?",
            lambda: self._repo.checkout(stable),
            lambda: self._repo.pull(remote),
        )
        if isinstance(synced, Err):
            return synced

        self._console.print(
            f"About to checkout the `{release}` branch "
            f"(and update it from `{stable}` for merge commits)."
        )
        merged = self._confirmed_git(
            "Continue?",
            lambda: self._repo.checkout(release),
            lambda: self._repo.merge(stable),
        )
        if isinstance(merged, Err):
            return merged
        return self._forward(session)

    def _prepare_next(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        released = session.require_new_version()
        suffix = self._config.snapshot_suffix
        default = f"{released}{suffix}"

        self._console.print("Let's update the library for next development version.")
        self._console.print(f"If you want to keep using {default}, enter an empty line.")
        self._console.print(
            "Otherwise, enter the name of the next target version "
            f"(`{suffix}` will be added automatically)"
        )
        answer = self._prompter.ask("Next version")
        next_version = next_dev_version(answer, released=released, snapshot_suffix=suffix)

        written = rewrite_version(
            self._version_file,
            prefix=self._config.version_line_prefix,
            version=next_version,
        )
        if isinstance(written, Err):
            return written
        self._console.print(
            f"{self._config.version_file} has been edited with next development version "
            f"({next_version})."
        )
        return self._forward(session, next_version=next_version)

    def _final_push(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseFailure]:
        commit = f'git commit -am "{NEXT_DEV_COMMIT_MESSAGE}"'
        confirmed = self._confirm(f"Will run {commit} Continue?")
        if isinstance(confirmed, Err):
            return confirmed
        committed = self._git(self._repo.commit_all(NEXT_DEV_COMMIT_MESSAGE))
        if isinstance(committed, Err):
            return committed

        push = push_command(self._config.remote)
        confirmed = self._confirm(f"Finally the last step: Running: `{push}`. Continue?")
        if isinstance(confirmed, Err):
            return confirmed
        pushed = self._git(self._repo.push(self._config.remote))
        if isinstance(pushed, Err):
            return pushed

        self._console.success("All Done! Let's brag about this new release!!")
        return Ok(FINISH)
