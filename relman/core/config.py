"""Typed release configuration.

Settings come from an optional ``relman.toml`` at the repository root:

    [release]
    release_branch = "develop"
    stable_branch = "master"
    version_file = "buildSrc/src/main/kotlin/ProjectVersions.kt"
    publish_command = "./gradlew clean bintrayUpload"

Every key is optional. Without a file, the defaults below are used.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_raw_str, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "relman.toml"

DEFAULT_RELEASE_BRANCH = "develop"
DEFAULT_STABLE_BRANCH = "master"
DEFAULT_REMOTE = "origin"
DEFAULT_VERSION_FILE = "buildSrc/src/main/kotlin/ProjectVersions.kt"
DEFAULT_VERSION_LINE_PREFIX = '    const val thisLibrary = "'
DEFAULT_SNAPSHOT_SUFFIX = "-SNAPSHOT"
DEFAULT_PUBLISH_COMMAND = "./gradlew clean bintrayUpload"
DEFAULT_REGISTRY_NAME = "Bintray"
DEFAULT_FORGE_NAME = "GitHub"
DEFAULT_DOCS: tuple[str, ...] = ("README.md", "CHANGELOG.md")

# Builds and uploads can be slow; one hour matches the publish step's worst case.
DEFAULT_COMMAND_TIMEOUT_SECONDS = 60 * 60


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Everything the release workflow needs to know about the project."""

    release_branch: str = DEFAULT_RELEASE_BRANCH
    stable_branch: str = DEFAULT_STABLE_BRANCH
    remote: str = DEFAULT_REMOTE
    version_file: str = DEFAULT_VERSION_FILE
    version_line_prefix: str = DEFAULT_VERSION_LINE_PREFIX
    snapshot_suffix: str = DEFAULT_SNAPSHOT_SUFFIX
    publish_command: str = DEFAULT_PUBLISH_COMMAND
    registry_name: str = DEFAULT_REGISTRY_NAME
    forge_name: str = DEFAULT_FORGE_NAME
    docs: tuple[str, ...] = field(default=DEFAULT_DOCS)
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT_SECONDS

    def version_file_path(self, repo_root: Path) -> Path:
        return repo_root / self.version_file

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a ReleaseConfig from parsed TOML.

        Raises:
            ValueError: If a key is present with an unusable value.
        """
        release: StrDict = get_table(data, "release") or {}

        docs = DEFAULT_DOCS
        if "docs" in release:
            parsed_docs = get_str_list(release, "docs")
            if parsed_docs is None:
                raise ValueError("release.docs must be a list of file names")
            docs = parsed_docs

        timeout = DEFAULT_COMMAND_TIMEOUT_SECONDS
        if "command_timeout" in release:
            parsed_timeout = get_int(release, "command_timeout")
            if parsed_timeout is None or parsed_timeout <= 0:
                raise ValueError("release.command_timeout must be a positive integer")
            timeout = parsed_timeout

        snapshot_suffix = get_str(release, "snapshot_suffix") or DEFAULT_SNAPSHOT_SUFFIX
        if not snapshot_suffix.startswith("-"):
            raise ValueError("release.snapshot_suffix must start with '-'")

        return cls(
            release_branch=get_str(release, "release_branch") or DEFAULT_RELEASE_BRANCH,
            stable_branch=get_str(release, "stable_branch") or DEFAULT_STABLE_BRANCH,
            remote=get_str(release, "remote") or DEFAULT_REMOTE,
            version_file=get_str(release, "version_file") or DEFAULT_VERSION_FILE,
            version_line_prefix=(
                get_raw_str(release, "version_line_prefix") or DEFAULT_VERSION_LINE_PREFIX
            ),
            snapshot_suffix=snapshot_suffix,
            publish_command=get_str(release, "publish_command") or DEFAULT_PUBLISH_COMMAND,
            registry_name=get_str(release, "registry_name") or DEFAULT_REGISTRY_NAME,
            forge_name=get_str(release, "forge_name") or DEFAULT_FORGE_NAME,
            docs=docs,
            command_timeout=timeout,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relman.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load config if the file exists, otherwise return the defaults.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
