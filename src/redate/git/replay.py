"""Replay one source commit into the target repository."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from git.exc import GitError

from ..config import DEFAULT_PATCH_NAME
from ..errors import GitOperationError, ReplayError
from .history import GitRepo

log = logging.getLogger(__name__)


def _discard(path: Path) -> None:
    if path.exists():
        path.unlink()


@contextmanager
def scratch_patch(path: Path) -> Iterator[Path]:
    """Yield ``path`` for a scratch file and remove it on every exit path.

    The file holds the patch while it is applied and then the commit
    message for the amend. A leftover file from an earlier step is removed
    before it can be applied by mistake.
    """

    _discard(path)
    try:
        yield path
    finally:
        _discard(path)


def replay_commit(
    source: GitRepo,
    target: GitRepo,
    commit_id: str,
    timestamp: datetime,
    patch_name: str = DEFAULT_PATCH_NAME,
) -> str:
    """Copy ``commit_id`` from ``source`` onto ``target`` dated ``timestamp``.

    Commits that change nothing cannot travel as a patch, so they are
    recreated with ``git commit --allow-empty`` under the source author.
    Either way the source message is restored byte for byte.

    Returns the SHA of the new commit in ``target``. Any failure is raised
    as :class:`ReplayError` naming ``commit_id``; commits already replayed
    stay in place.
    """

    try:
        record = source.read_commit(commit_id)
        empty = source.is_empty_commit(record)
        patch = b"" if empty else source.format_patch(commit_id)
    except (GitError, GitOperationError) as e:
        raise ReplayError(commit_id, f"could not export commit: {e}") from e
    if not empty and not patch.strip():
        raise ReplayError(commit_id, "git format-patch produced no patch")

    try:
        with scratch_patch(target.git_dir / patch_name) as scratch:
            if empty:
                scratch.write_bytes(record.message)
                target.commit_empty(record.author, scratch)
            else:
                scratch.write_bytes(patch)
                target.apply_patch(scratch)
                scratch.write_bytes(record.message)
            new_sha = target.amend_date(timestamp, scratch)
    except (GitError, OSError) as e:
        raise ReplayError(commit_id, str(e)) from e

    log.debug("Replayed %s as %s at %s", commit_id, new_sha, timestamp.isoformat())
    return new_sha
