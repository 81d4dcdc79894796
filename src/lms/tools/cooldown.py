"""Cooldown arithmetic for tool switches."""

from __future__ import annotations

import math
from datetime import datetime

from lms.clock import as_utc

SECONDS_PER_DAY = 86400


def elapsed_days(since: datetime, now: datetime) -> float:
    """Fractional days between two instants."""
    return (as_utc(now) - as_utc(since)).total_seconds() / SECONDS_PER_DAY


def remaining_days(since: datetime, now: datetime, cooldown_days: int) -> int:
    """Whole days left before the cooldown lapses (rounded up), 0 once elapsed."""
    diff = elapsed_days(since, now)
    if diff >= cooldown_days:
        return 0
    return math.ceil(cooldown_days - diff)


def cooldown_elapsed(since: datetime, now: datetime, cooldown_days: int) -> bool:
    return elapsed_days(since, now) >= cooldown_days
