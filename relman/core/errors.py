"""Process exit codes.

Every failure the release workflow can end with maps to one of these codes.
The values are part of the CLI contract and should remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (malformed version, version already tagged)
    - 2: Environment error (wrong branch, bad version file, bad config)
    - 3: Build error (an external command exited non-zero)
    - 5: I/O error (version file unreadable or unwritable)
    - 6: Cancelled by the operator at a confirmation prompt
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5
    CANCELLED = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
