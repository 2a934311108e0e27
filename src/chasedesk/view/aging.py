"""Attempt aging — days in research and SLA checks.

All functions take an optional `now` so a whole view can be computed
against a single instant.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

_SECONDS_PER_DAY = 86400.0


def elapsed_days(last_action_at: datetime, now: Optional[datetime] = None) -> float:
    now = now or datetime.now(timezone.utc)
    return (now - last_action_at).total_seconds() / _SECONDS_PER_DAY


def days_in_research(last_action_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole days since the last action (floor)."""
    return math.floor(elapsed_days(last_action_at, now))


def is_overdue(
    last_action_at: datetime,
    sla_days: int,
    now: Optional[datetime] = None,
) -> bool:
    return elapsed_days(last_action_at, now) > sla_days


def overdue_days(
    last_action_at: datetime,
    sla_days: int,
    now: Optional[datetime] = None,
) -> int:
    """Whole days past the SLA, never negative."""
    return max(0, math.floor(elapsed_days(last_action_at, now) - sla_days))
