"""Random, ordered commit timestamps inside a date window."""

from __future__ import annotations

import random
from datetime import datetime
from typing import List, Protocol

# Generated times of day fall in [05:00, 23:00).
FIRST_HOUR = 5
HOUR_SPAN = 18


class RandomSource(Protocol):
    def random(self) -> float: ...


def _pick(rng: RandomSource, upper: int) -> int:
    return int(rng.random() * upper)


def generate_dates(
    start: datetime,
    end: datetime,
    count: int,
    rng: RandomSource | None = None,
) -> List[datetime]:
    """Return ``count`` ascending timestamps between ``start`` and ``end``.

    Each value is first interpolated uniformly across the window, then its
    time of day is replaced by a random daytime value while the calendar
    date is kept. The list is sorted only after every value is drawn, so
    duplicates are possible and preserved.

    Parameters
    ----------
    start:
        Beginning of the window.
    end:
        End of the window, strictly after ``start``.
    count:
        Number of timestamps to produce, at least 2.
    rng:
        Object with a ``random()`` method returning floats in ``[0, 1)``.
        A fresh ``random.Random`` is used when omitted.

    Returns
    -------
    List of ``count`` datetimes in non-decreasing order.
    """

    if not isinstance(start, datetime) or not isinstance(end, datetime):
        raise ValueError("Invalid date input")
    if isinstance(count, bool) or not isinstance(count, int) or count < 2:
        raise ValueError("Count must be an integer >= 2")
    if end <= start:
        raise ValueError("End date must be after start date")

    source = rng if rng is not None else random.Random()
    span = end - start

    dates: List[datetime] = []
    for _ in range(count):
        moment = start + span * source.random()
        dates.append(
            moment.replace(
                hour=FIRST_HOUR + _pick(source, HOUR_SPAN),
                minute=_pick(source, 60),
                second=_pick(source, 60),
                microsecond=_pick(source, 1000) * 1000,
            )
        )

    dates.sort()
    return dates
