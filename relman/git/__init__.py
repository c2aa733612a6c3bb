"""Git operations."""

from .repository import GitError, Repository, is_version_tag

__all__ = [
    "GitError",
    "Repository",
    "is_version_tag",
]
