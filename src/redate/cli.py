"""Copy a git history into a new repository with randomized commit dates."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, NoReturn

from .config import ReplayConfig
from .driver import run

DATE_FORMAT = "%Y-%m-%d"


class _UsageParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid date {value!r}, dates should be in ISO format (YYYY-MM-DD)"
        ) from None


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(prog="redate", description=__doc__)
    parser.add_argument("source", type=Path, help="Path to the source git repository")
    parser.add_argument(
        "target",
        type=Path,
        help="Path of the repository to create (existing contents are deleted)",
    )
    parser.add_argument("start_date", type=_parse_date, help="Start date (YYYY-MM-DD)")
    parser.add_argument("end_date", type=_parse_date, help="End date (YYYY-MM-DD)")
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed the random source to make the generated dates reproducible",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every git operation to stderr",
    )
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args.verbose)

    try:
        config = ReplayConfig(
            source_path=args.source,
            target_path=args.target,
            start=args.start_date,
            end=args.end_date,
            seed=args.seed,
        )
    except ValueError as e:
        parser.error(str(e))

    outcome = run(config)
    if not outcome.succeeded:
        print(f"Error: {outcome.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
