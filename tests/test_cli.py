from __future__ import annotations

import pytest
from git import Repo
from git.exc import GitCommandNotFound

from conftest import history, requires_git
from redate.cli import main
from redate.git.history import GitRepo


def _args(tmp_path, start="2023-01-01", end="2023-01-10"):
    return [str(tmp_path / "source"), str(tmp_path / "target"), start, end]


@requires_git
def test_main_replays_repository(tmp_path, make_source, capsys) -> None:
    make_source(3)

    status = main(_args(tmp_path) + ["--seed", "3"])

    out = capsys.readouterr().out
    assert status == 0
    assert "Processed commit 3/3" in out
    assert len(history(Repo(tmp_path / "target"))) == 3


@requires_git
def test_main_reports_failure_with_status_one(tmp_path, capsys) -> None:
    Repo.init(tmp_path / "source")

    status = main(_args(tmp_path))

    err = capsys.readouterr().err
    assert status == 1
    assert err.startswith("Error: ")
    assert "no commits found" in err


def test_main_rejects_malformed_date_without_side_effects(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(_args(tmp_path, start="not-a-date"))

    err = capsys.readouterr().err
    assert excinfo.value.code == 1
    assert "usage:" in err
    assert "YYYY-MM-DD" in err
    assert list(tmp_path.iterdir()) == []


def test_main_requires_all_arguments(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "source"), str(tmp_path / "target")])

    assert excinfo.value.code == 1
    assert "usage:" in capsys.readouterr().err


def test_main_rejects_inverted_range(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(_args(tmp_path, start="2023-01-10", end="2023-01-01"))

    assert excinfo.value.code == 1
    assert "End date must be after start date" in capsys.readouterr().err
    assert not (tmp_path / "target").exists()


def test_main_refuses_target_equal_to_source(tmp_path, capsys) -> None:
    source = tmp_path / "source"
    source.mkdir()
    (source / "keep.txt").write_text("keep", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main([str(source), str(source), "2023-01-01", "2023-01-10"])

    assert excinfo.value.code == 1
    assert "would overwrite the source" in capsys.readouterr().err
    assert (source / "keep.txt").exists()


@requires_git
def test_main_reports_missing_git_executable(tmp_path, make_source, capsys, monkeypatch) -> None:
    make_source(3)

    def no_git(self):
        raise GitCommandNotFound("git", "No such file or directory")

    monkeypatch.setattr(GitRepo, "list_commits", no_git)

    status = main(_args(tmp_path))

    assert status == 1
    assert capsys.readouterr().err.startswith("Error: ")
