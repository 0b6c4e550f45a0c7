"""Run configuration for a single history replay."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

DEFAULT_PATCH_NAME = "commit.patch"


@dataclass(slots=True)
class ReplayConfig:
    """Everything one replay run needs, built once by the CLI.

    Attributes
    ----------
    source_path:
        Repository whose history is copied. It is only ever read.
    target_path:
        Location of the new repository. Whatever exists there is deleted
        before the run starts.
    start:
        Lower bound of the timestamp window (local time when naive).
    end:
        Upper bound of the timestamp window. Must be after ``start``.
    seed:
        Optional seed for the random source. ``None`` gives a different set
        of timestamps on every run.
    patch_name:
        File name of the scratch patch written inside the target's git
        directory while a commit is being replayed.
    """

    source_path: Path
    target_path: Path
    start: datetime
    end: datetime
    seed: int | None = None
    patch_name: str = DEFAULT_PATCH_NAME

    def __post_init__(self) -> None:
        self.source_path = Path(self.source_path)
        self.target_path = Path(self.target_path)

        if self.end <= self.start:
            raise ValueError("End date must be after start date")

        source = self.resolved_source()
        target = self.resolved_target()
        if target == source or target in source.parents:
            raise ValueError(
                f"Target {target} would overwrite the source repository {source}"
            )

    def resolved_source(self) -> Path:
        return self.source_path.expanduser().resolve()

    def resolved_target(self) -> Path:
        return self.target_path.expanduser().resolve()

    def random_source(self) -> random.Random:
        return random.Random(self.seed)
