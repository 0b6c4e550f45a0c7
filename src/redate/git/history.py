"""Git repository access for reading and rebuilding commit history."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List

from git import Repo
from git.exc import GitError, InvalidGitRepositoryError, NoSuchPathError

from ..errors import GitOperationError

log = logging.getLogger(__name__)

EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


def git_date(timestamp: datetime) -> str:
    """Format ``timestamp`` in git's internal ``@<seconds> <offset>`` form.

    Naive datetimes are interpreted as local time. Git stores whole seconds,
    so any fractional part is dropped.
    """

    aware = timestamp.astimezone()
    return f"@{int(aware.timestamp())} {aware.strftime('%z')}"


@dataclass(slots=True)
class CommitRecord:
    """Raw fields of a commit object as git stores them."""

    commit_id: str
    tree: str
    parents: List[str]
    author: str
    message: bytes


def parse_commit_object(commit_id: str, raw: bytes) -> CommitRecord:
    """Split the output of ``git cat-file commit`` into a :class:`CommitRecord`.

    The message is kept byte for byte, trailing whitespace included.
    """

    header, sep, message = raw.partition(b"\n\n")
    if not sep:
        raise GitOperationError(f"Malformed commit object {commit_id}")

    tree = ""
    parents: List[str] = []
    author = ""
    for line in header.split(b"\n"):
        key, _, value = line.partition(b" ")
        if key == b"tree":
            tree = value.decode("ascii")
        elif key == b"parent":
            parents.append(value.decode("ascii"))
        elif key == b"author":
            # strip the trailing "<seconds> <offset>"
            author = value.rsplit(b" ", 2)[0].decode("utf-8", errors="replace")
    if not tree or not author:
        raise GitOperationError(f"Malformed commit object {commit_id}")
    return CommitRecord(commit_id, tree, parents, author, message)


class GitRepo:
    """Wrapper around gitpython for the operations a replay needs."""

    def __init__(self, repo_path: Path):
        self.repo_path = Path(repo_path).resolve()
        try:
            self.repo = Repo(self.repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitOperationError(f"Not a valid git repository: {repo_path}") from e

    @property
    def git_dir(self) -> Path:
        return Path(self.repo.git_dir)

    def list_commits(self) -> List[str]:
        """Return every commit reachable from ``HEAD``, oldest first.

        Raises
        ------
        GitOperationError
            When the query fails or the repository has no commits.
        """
        try:
            if not self.repo.head.is_valid():
                raise GitOperationError(
                    f"Failed to get commits: no commits found in {self.repo_path}"
                )
            output = self.repo.git.rev_list("--reverse", "HEAD")
        except GitError as e:
            raise GitOperationError(f"Failed to get commits: {e}") from e

        commits = [line.strip() for line in output.splitlines() if line.strip()]
        if not commits:
            raise GitOperationError(
                f"Failed to get commits: no commits found in {self.repo_path}"
            )
        log.debug("Read %d commits from %s", len(commits), self.repo_path)
        return commits

    def read_commit(self, commit_id: str) -> CommitRecord:
        raw = self.repo.git.cat_file(
            "commit",
            commit_id,
            stdout_as_string=False,
            strip_newline_in_stdout=False,
        )
        return parse_commit_object(commit_id, raw)

    def is_empty_commit(self, record: CommitRecord) -> bool:
        """Whether ``record`` leaves its first parent's tree unchanged."""
        if not record.parents:
            return record.tree == EMPTY_TREE
        return self.read_commit(record.parents[0]).tree == record.tree

    def format_patch(self, commit_id: str) -> bytes:
        """Export a single commit, metadata included, as a mailbox patch."""
        log.debug("Exporting %s from %s", commit_id, self.repo_path)
        return self.repo.git.format_patch(
            "-1",
            "--stdout",
            "--binary",
            commit_id,
            stdout_as_string=False,
            strip_newline_in_stdout=False,
        )

    def apply_patch(self, patch_file: Path) -> str:
        """Apply ``patch_file`` with ``git am`` and return the new HEAD SHA."""
        log.debug("Applying %s to %s", patch_file, self.repo_path)
        try:
            self.repo.git.am(str(patch_file))
        except GitError:
            self._abort_am()
            raise
        return self.repo.head.commit.hexsha

    def commit_empty(self, author: str, message_file: Path) -> str:
        """Record a commit that changes nothing, written by ``author``."""
        log.debug("Committing empty change by %s in %s", author, self.repo_path)
        self.repo.git.commit(
            "--allow-empty",
            "--allow-empty-message",
            "--no-verify",
            "--cleanup=verbatim",
            f"--author={author}",
            "-F",
            str(message_file),
        )
        return self.repo.head.commit.hexsha

    def amend_date(self, timestamp: datetime, message_file: Path) -> str:
        """Rewrite the dates of ``HEAD`` in place and restore its message.

        ``message_file`` holds the exact message to keep; it is used verbatim
        because ``git am`` rewrites subjects. Author identity and tree are
        left untouched.
        """
        date = git_date(timestamp)
        log.debug("Amending HEAD of %s to %s", self.repo_path, date)
        with self.repo.git.custom_environment(GIT_COMMITTER_DATE=date):
            self.repo.git.commit(
                "--amend",
                "--allow-empty",
                "--allow-empty-message",
                "--no-verify",
                "--cleanup=verbatim",
                f"--date={date}",
                "-F",
                str(message_file),
            )
        return self.repo.head.commit.hexsha

    def _abort_am(self) -> None:
        try:
            self.repo.git.am("--abort")
        except GitError as e:
            log.warning("Could not abort git am in %s: %s", self.repo_path, e)


def initialize_repository(target_path: Path) -> GitRepo:
    """Replace whatever lives at ``target_path`` with an empty repository.

    Parameters
    ----------
    target_path:
        Directory to (re)create. Existing files or directories at this path
        are removed recursively without confirmation.

    Returns
    -------
    The freshly initialized repository.
    """

    target = Path(target_path)
    if target.is_symlink() or target.is_file():
        target.unlink()
    elif target.exists():
        shutil.rmtree(target)
    target.mkdir(parents=True)

    try:
        Repo.init(target)
    except GitError as e:
        raise GitOperationError(f"Failed to initialize repository at {target}: {e}") from e
    log.debug("Initialized empty repository at %s", target)
    return GitRepo(target)
