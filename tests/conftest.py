"""Shared fixtures that build throwaway git repositories."""

from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List

import pytest
from git import Actor, Repo

AUTHOR = Actor("Ada Author", "ada@example.com")
COMMITTER = Actor("Cy Committer", "cy@example.com")

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


@pytest.fixture(autouse=True)
def isolated_git(tmp_path_factory, monkeypatch) -> None:
    """Keep user and system git configuration out of the tests."""

    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_COMMITTER_NAME", COMMITTER.name)
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", COMMITTER.email)


def add_commit(
    repo: Repo,
    message: str,
    files: Dict[str, str] | None = None,
    when: datetime = datetime(2020, 6, 1, 12),
) -> str:
    """Commit ``files`` (path to text) to ``repo``; no files gives an empty commit."""
    for filename, content in (files or {}).items():
        path = Path(repo.working_tree_dir) / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        repo.index.add([filename])
    commit = repo.index.commit(
        message,
        author=AUTHOR,
        committer=COMMITTER,
        author_date=when.isoformat(),
        commit_date=when.isoformat(),
    )
    return commit.hexsha


@pytest.fixture
def make_source(tmp_path) -> Callable[[int], Repo]:
    """Return a factory creating a source repository with ``n`` commits."""

    def factory(n: int, name: str = "source") -> Repo:
        repo = Repo.init(tmp_path / name)
        for i in range(n):
            filename = f"file{i}.txt" if i % 2 == 0 else "notes/log.md"
            add_commit(
                repo,
                f"Change number {i}\n\nBody line for change {i}.\n",
                {filename: f"revision {i}\n" * (i + 1)},
                datetime(2020, 6, 1 + i, 12, 0, 0),
            )
        return repo

    return factory


def history(repo: Repo) -> List:
    """Commits of ``repo`` oldest first."""
    return list(repo.iter_commits("HEAD", reverse=True))
