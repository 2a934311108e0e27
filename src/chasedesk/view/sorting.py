"""Sort comparator for the derived view.

Comparison rules, applied in order:
- None sorts last ascending (first descending).
- str vs str: locale-style collation (accents and case folded, raw
  string as tie-break).
- numbers compare numerically.
- last_action_at compares by instant.
- the virtual field days_in_research is computed per row.
- anything else compares by str() collation.
Every result is negated for descending order.
"""

from __future__ import annotations

import enum
import functools
import unicodedata
from datetime import datetime, timezone
from typing import Any, Optional

from chasedesk.models.attempt import RetrievalAttempt
from chasedesk.models.view import DAYS_IN_RESEARCH, SortDirection, SortSpec
from chasedesk.view.aging import days_in_research


def collation_key(value: str) -> tuple[str, str]:
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), value


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compare_values(a: Any, b: Any) -> int:
    """Ascending comparison of two field values."""
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1

    if isinstance(a, enum.Enum):
        a = a.value
    if isinstance(b, enum.Enum):
        b = b.value

    if isinstance(a, str) and isinstance(b, str):
        return _cmp(collation_key(a), collation_key(b))
    if _is_number(a) and _is_number(b):
        return _cmp(a, b)
    if isinstance(a, datetime) and isinstance(b, datetime):
        return _cmp(a.timestamp(), b.timestamp())
    return _cmp(collation_key(str(a)), collation_key(str(b)))


def _field_value(attempt: RetrievalAttempt, field: str, now: datetime) -> Any:
    if field == DAYS_IN_RESEARCH:
        return days_in_research(attempt.last_action_at, now)
    return getattr(attempt, field)


def sort_attempts(
    attempts: list[RetrievalAttempt],
    spec: SortSpec,
    now: Optional[datetime] = None,
) -> list[RetrievalAttempt]:
    """Return a new list ordered by spec. The input is not mutated."""
    now = now or datetime.now(timezone.utc)
    sign = -1 if spec.direction == SortDirection.DESC else 1

    def compare(a: RetrievalAttempt, b: RetrievalAttempt) -> int:
        return sign * compare_values(
            _field_value(a, spec.field, now),
            _field_value(b, spec.field, now),
        )

    return sorted(attempts, key=functools.cmp_to_key(compare))


def toggle_direction(direction: SortDirection) -> SortDirection:
    if SortDirection(direction) == SortDirection.ASC:
        return SortDirection.DESC
    return SortDirection.ASC
