"""End-to-end tests for the release workflow against a fake git/gradle."""

from __future__ import annotations

from pathlib import Path

import pytest

from relman.core.config import ReleaseConfig
from relman.core.result import Err, Ok
from relman.output.console import MockConsole
from relman.output.prompt import ScriptedPrompter
from relman.release.errors import ReleaseCancelled, ReleaseError
from relman.release.workflow import STEPS, ReleaseWorkflow
from relman.test._fakes import FakeRunner

VERSIONS_KT = """\
object ProjectVersions {
    const val androidBuildTools = "28.0.3"
    const val thisLibrary = "1.2.3-SNAPSHOT"
}
"""

BRANCH_CMD = "git rev-parse --abbrev-ref HEAD"
TAG_CMD = "git tag"

# Answers for a run that goes all the way, in prompt order
HAPPY_ANSWERS: list[str | None] = [
    "1.3.0",  # new version
    "Y",  # Confirm?
    "yes",  # README done
    "YES",  # CHANGELOG done
    "Y",  # push origin
    "Y",  # pull request created
    "Y",  # packages published on the registry
    "Y",  # after pushing tags
    "Y",  # pull request merged
    "Y",  # release published
    "Y",  # checkout stable + pull
    "Y",  # checkout develop + merge
    "",  # next version: keep released name
    "Y",  # commit next version
    "Y",  # final push
]


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    versions = tmp_path / "buildSrc" / "src" / "main" / "kotlin" / "ProjectVersions.kt"
    versions.parent.mkdir(parents=True)
    versions.write_bytes(VERSIONS_KT.encode("utf-8"))
    return tmp_path


@pytest.fixture
def git(runner: FakeRunner) -> FakeRunner:
    runner.outputs[BRANCH_CMD] = "develop\n"
    runner.outputs[TAG_CMD] = "v1.0.0\nv1.2.2\nnightly\n"
    return runner


def _versions(root: Path) -> str:
    return ReleaseConfig().version_file_path(root).read_text(encoding="utf-8")


def _workflow(
    root: Path,
    runner: FakeRunner,
    console: MockConsole,
    prompter: ScriptedPrompter,
    config: ReleaseConfig | None = None,
) -> ReleaseWorkflow:
    return ReleaseWorkflow(
        repo_root=root,
        config=config or ReleaseConfig(),
        runner=runner,
        console=console,
        prompter=prompter,
    )


class TestHappyPath:
    def test_full_release(self, repo_root: Path, git: FakeRunner, console: MockConsole) -> None:
        at_release_commit: list[str] = []
        git.hooks['git commit -am "Prepare for release 1.3.0"'] = lambda: at_release_commit.append(
            _versions(repo_root)
        )
        prompter = ScriptedPrompter(answers=list(HAPPY_ANSWERS))

        result = _workflow(repo_root, git, console, prompter).run()

        assert isinstance(result, Ok)
        session = result.value
        assert session.step == STEPS[-1]
        assert session.current_version == "1.2.3-SNAPSHOT"
        assert session.new_version == "1.3.0"
        assert session.next_version == "1.3.0-SNAPSHOT"

        assert git.streamed == [
            'git commit -am "Prepare for release 1.3.0"',
            'git tag -a v1.3.0 -m "Version 1.3.0"',
            "./gradlew clean bintrayUpload",
            "git push origin",
            "git push origin --tags",
            "git checkout master",
            "git pull origin",
            "git checkout develop",
            "git merge master",
            'git commit -am "Prepare next development version."',
            "git push origin",
        ]
        assert {c.cwd for c in git.calls} == {repo_root}
        assert prompter.remaining == 0

        assert at_release_commit == [
            VERSIONS_KT.replace('"1.2.3-SNAPSHOT"', '"1.3.0"'),
        ]
        assert _versions(repo_root) == VERSIONS_KT.replace('"1.2.3-SNAPSHOT"', '"1.3.0-SNAPSHOT"')
        assert console.find("All Done!")

    def test_explicit_next_version(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        answers = list(HAPPY_ANSWERS)
        answers[12] = "1.4.0"

        result = _workflow(repo_root, git, console, ScriptedPrompter(answers=answers)).run()

        assert isinstance(result, Ok)
        assert result.value.next_version == "1.4.0-SNAPSHOT"
        assert 'const val thisLibrary = "1.4.0-SNAPSHOT"' in _versions(repo_root)

    def test_prompts_in_order(self, repo_root: Path, git: FakeRunner, console: MockConsole) -> None:
        prompter = ScriptedPrompter(answers=list(HAPPY_ANSWERS))

        _workflow(repo_root, git, console, prompter).run()

        assert prompter.asked == [
            "New version",
            "Confirm? Y/n",
            "Done? Y/n",
            "Done? Y/n",
            "Continue? Y/n",
            "Done? Y/n",
            "Done? Y/n",
            "Continue? Y/n",
            "Done? Y/n",
            "Done? Y/n",
            "Continue? Y/n",
            "Continue? Y/n",
            "Next version",
            'Will run git commit -am "Prepare next development version." Continue? Y/n',
            "Finally the last step: Running: `git push origin`. Continue? Y/n",
        ]

    def test_custom_config(self, tmp_path: Path, git: FakeRunner, console: MockConsole) -> None:
        config = ReleaseConfig(
            release_branch="dev",
            stable_branch="main",
            remote="upstream",
            version_file="versions.kt",
            publish_command="./gradlew publish",
            docs=(),
        )
        (tmp_path / "versions.kt").write_text(
            '    const val thisLibrary = "0.9.0-SNAPSHOT"\n', encoding="utf-8"
        )
        git.outputs[BRANCH_CMD] = "dev\n"
        answers = [a for i, a in enumerate(HAPPY_ANSWERS) if i not in (2, 3)]
        answers[0] = "1.0.0"

        result = _workflow(tmp_path, git, console, ScriptedPrompter(answers=answers), config).run()

        assert isinstance(result, Ok)
        assert "./gradlew publish" in git.streamed
        assert "git push upstream --tags" in git.streamed
        assert git.streamed[5:9] == [
            "git checkout main",
            "git pull upstream",
            "git checkout dev",
            "git merge main",
        ]


class TestPreconditions:
    def test_wrong_branch_aborts_before_any_prompt(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        git.outputs[BRANCH_CMD] = "feature/x\n"
        prompter = ScriptedPrompter(answers=list(HAPPY_ANSWERS))

        result = _workflow(repo_root, git, console, prompter).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert result.error.kind == "wrong_branch"
        assert result.error.message == "Please, checkout the `develop` branch first."
        assert prompter.asked == []
        assert git.commands == [BRANCH_CMD]
        assert _versions(repo_root) == VERSIONS_KT

    def test_branch_query_failure(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        git.failures[BRANCH_CMD] = 128

        result = _workflow(repo_root, git, console, ScriptedPrompter()).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert result.error.kind == "command_failed"
        assert "128" in result.error.message

    def test_non_snapshot_version_rejected(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        path = ReleaseConfig().version_file_path(repo_root)
        path.write_text(VERSIONS_KT.replace("1.2.3-SNAPSHOT", "1.2.3"), encoding="utf-8")
        prompter = ScriptedPrompter(answers=list(HAPPY_ANSWERS))

        result = _workflow(repo_root, git, console, prompter).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert result.error.kind == "not_snapshot"
        assert prompter.asked == []

    def test_missing_version_file(self, tmp_path: Path, git: FakeRunner, console: MockConsole) -> None:
        result = _workflow(tmp_path, git, console, ScriptedPrompter()).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert result.error.kind == "io_failed"


class TestInputValidation:
    def test_malformed_version_aborts_without_retry(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        prompter = ScriptedPrompter(answers=["v1.3.0", "1.3.0", "Y"])

        result = _workflow(repo_root, git, console, prompter).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert result.error.kind == "invalid_version"
        assert prompter.asked == ["New version"]
        assert TAG_CMD not in git.commands
        assert _versions(repo_root) == VERSIONS_KT

    def test_existing_tag_aborts(self, repo_root: Path, git: FakeRunner, console: MockConsole) -> None:
        prompter = ScriptedPrompter(answers=["1.2.2", "Y"])

        result = _workflow(repo_root, git, console, prompter).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert result.error.kind == "tag_exists"
        assert prompter.remaining == 1
        assert git.streamed == []


class TestCancellation:
    def test_declining_confirmation_leaves_everything_untouched(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        prompter = ScriptedPrompter(answers=["1.3.0", "n"])

        result = _workflow(repo_root, git, console, prompter).run()

        assert result == Err(ReleaseCancelled(question="Confirm?"))
        assert git.streamed == []
        assert _versions(repo_root) == VERSIONS_KT
        assert console.find("Process aborted.")

    def test_cancel_after_edit_does_not_roll_back(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        prompter = ScriptedPrompter(answers=["1.3.0", "Y", "no"])

        result = _workflow(repo_root, git, console, prompter).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseCancelled)
        assert 'const val thisLibrary = "1.3.0"' in _versions(repo_root)
        assert git.streamed == []

    def test_closed_stdin_cancels(self, repo_root: Path, git: FakeRunner, console: MockConsole) -> None:
        result = _workflow(repo_root, git, console, ScriptedPrompter(answers=["1.3.0"])).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseCancelled)


class TestCommandFailures:
    def test_publish_failure_stops_before_push(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        git.failures["./gradlew clean bintrayUpload"] = 1

        result = _workflow(repo_root, git, console, ScriptedPrompter(answers=list(HAPPY_ANSWERS))).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert result.error.kind == "command_failed"
        assert "non zero exit value 1" in result.error.message
        assert git.streamed[-1] == "./gradlew clean bintrayUpload"
        # commit and tag already happened and stay in place
        assert git.streamed[:2] == [
            'git commit -am "Prepare for release 1.3.0"',
            'git tag -a v1.3.0 -m "Version 1.3.0"',
        ]
        assert 'const val thisLibrary = "1.3.0"' in _versions(repo_root)

    def test_tag_failure_skips_publish(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        git.failures['git tag -a v1.3.0 -m "Version 1.3.0"'] = 128

        result = _workflow(repo_root, git, console, ScriptedPrompter(answers=list(HAPPY_ANSWERS))).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ReleaseError)
        assert "128" in result.error.message
        assert "./gradlew clean bintrayUpload" not in git.streamed

    def test_merge_conflict_stops_before_next_version(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        git.failures["git merge master"] = 1
        prompter = ScriptedPrompter(answers=list(HAPPY_ANSWERS))

        result = _workflow(repo_root, git, console, prompter).run()

        assert isinstance(result, Err)
        assert "Next version" not in prompter.asked
        assert 'const val thisLibrary = "1.3.0"' in _versions(repo_root)


class TestConsoleNarration:
    def test_reports_versions_and_echoes_commands(
        self, repo_root: Path, git: FakeRunner, console: MockConsole
    ) -> None:
        _workflow(repo_root, git, console, ScriptedPrompter(answers=list(HAPPY_ANSWERS))).run()

        assert console.find("Current version: 1.2.3-SNAPSHOT")
        assert console.find('New version: "1.3.0"')
        assert console.find("Running `./gradlew clean bintrayUpload`")
        assert console.find("$ git push origin --tags")
        assert console.find("If you want to keep using 1.3.0-SNAPSHOT, enter an empty line.")
