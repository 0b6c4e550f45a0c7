"""Exceptions raised while copying history between repositories."""

from __future__ import annotations


class GitOperationError(RuntimeError):
    """A git invocation failed or returned output we cannot use."""


class ReplayError(GitOperationError):
    """Replaying a single source commit into the target failed."""

    def __init__(self, commit_id: str, reason: str):
        super().__init__(f"Failed to apply commit {commit_id}: {reason}")
        self.commit_id = commit_id
        self.reason = reason
