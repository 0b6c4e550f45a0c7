"""Git integration for reading and replaying repository history."""

from .history import GitRepo, git_date, initialize_repository
from .replay import replay_commit, scratch_patch

__all__ = [
    "GitRepo",
    "git_date",
    "initialize_repository",
    "replay_commit",
    "scratch_patch",
]
