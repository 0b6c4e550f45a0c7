"""Sequence the steps of a replay run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from git.exc import GitError

from .config import ReplayConfig
from .errors import GitOperationError
from .git.history import GitRepo, initialize_repository
from .git.replay import replay_commit
from .temporal.dates import RandomSource, generate_dates

log = logging.getLogger(__name__)

Reporter = Callable[[str], None]


class RunState(Enum):
    INIT = "init"
    READ_HISTORY = "read_history"
    GENERATE_DATES = "generate_dates"
    REPLAY_ALL = "replay_all"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RunState.DONE, RunState.FAILED})


@dataclass(slots=True)
class ReplayOutcome:
    """Result of a run: where it stopped, how far it got, and why."""

    state: RunState = RunState.INIT
    replayed: int = 0
    total: int = 0
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.DONE


@dataclass(slots=True)
class _RunContext:
    config: ReplayConfig
    report: Reporter
    rng: RandomSource
    outcome: ReplayOutcome
    source: Optional[GitRepo] = None
    target: Optional[GitRepo] = None
    commits: List[str] = field(default_factory=list)
    dates: List[datetime] = field(default_factory=list)


def _step(state: RunState, ctx: _RunContext) -> RunState:
    """Do the work of ``state`` and return the state that follows it."""

    config = ctx.config
    if state is RunState.INIT:
        ctx.report("Initializing target repository...")
        ctx.target = initialize_repository(config.target_path)
        return RunState.READ_HISTORY

    if state is RunState.READ_HISTORY:
        ctx.report("Getting commit history...")
        ctx.source = GitRepo(config.source_path)
        ctx.commits = ctx.source.list_commits()
        ctx.outcome.total = len(ctx.commits)
        ctx.report(f"Found {len(ctx.commits)} commits")
        return RunState.GENERATE_DATES

    if state is RunState.GENERATE_DATES:
        ctx.report("Generating sequential dates...")
        ctx.dates = generate_dates(config.start, config.end, len(ctx.commits), ctx.rng)
        return RunState.REPLAY_ALL

    if state is RunState.REPLAY_ALL:
        ctx.report("Applying commits with sequential dates...")
        total = len(ctx.commits)
        for index, (commit_id, timestamp) in enumerate(zip(ctx.commits, ctx.dates), start=1):
            replay_commit(ctx.source, ctx.target, commit_id, timestamp, config.patch_name)
            ctx.outcome.replayed = index
            ctx.report(f"Processed commit {index}/{total}")
        return RunState.DONE

    raise ValueError(f"No transition out of {state.value}")


def run(
    config: ReplayConfig,
    report: Reporter = print,
    rng: RandomSource | None = None,
) -> ReplayOutcome:
    """Rebuild ``config.target_path`` from the source history with new dates.

    The first error from any step stops the run. It is stored on the
    returned outcome, whose state is then :attr:`RunState.FAILED`; the
    target is left as the failed step found it.
    """

    outcome = ReplayOutcome()
    ctx = _RunContext(
        config=config,
        report=report,
        rng=rng if rng is not None else config.random_source(),
        outcome=outcome,
    )

    state = RunState.INIT
    while state not in TERMINAL_STATES:
        log.debug("Entering %s", state.value)
        try:
            state = _step(state, ctx)
        except (GitOperationError, GitError, OSError, ValueError) as e:
            log.debug("Run failed during %s", state.value, exc_info=True)
            outcome.error = e
            state = RunState.FAILED
        outcome.state = state

    if outcome.succeeded:
        report("Complete! Repository copied with sequential dates.")
    return outcome
