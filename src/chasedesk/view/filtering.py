r"""Filter evaluator — narrows the attempt collection to a FilterSpec.

Pure and stable: surviving attempts keep their relative order. All
clauses are ANDed.

Clauses:
- search: case-insensitive substring match on id. A term containing a
  space or comma is split on [,\s]+ and matches if ANY fragment does.
- retrieval_method, client_name, demand_id, provider_group,
  provider_name: a non-empty selection requires membership.
- research_agent: as above, except attempts with no agent always pass
  so unassigned work is never hidden.
- days_in_research: bucket bounds are inclusive on both ends.
"""

from __future__ import annotations

import enum
import re
from datetime import datetime, timezone
from typing import Any, Optional

from chasedesk.models.attempt import RetrievalAttempt
from chasedesk.models.view import DAYS_BUCKET_BOUNDS, DaysBucket, FilterSpec
from chasedesk.view.aging import days_in_research

_SEARCH_SPLIT = re.compile(r"[,\s]+")

_MEMBERSHIP_FIELDS = (
    "retrieval_method",
    "client_name",
    "demand_id",
    "provider_group",
    "provider_name",
)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def search_terms(search: str) -> list[str]:
    """Split a search string into lowercase id fragments."""
    term = search.strip().lower()
    if not term:
        return []
    if " " in term or "," in term:
        return [t for t in _SEARCH_SPLIT.split(term) if t]
    return [term]


def in_bucket(days: int, bucket: DaysBucket) -> bool:
    if bucket == DaysBucket.ALL:
        return True
    low, high = DAYS_BUCKET_BOUNDS[bucket]
    if low is not None and days < low:
        return False
    if high is not None and days > high:
        return False
    return True


def matches(
    attempt: RetrievalAttempt,
    spec: FilterSpec,
    now: Optional[datetime] = None,
    terms: Optional[list[str]] = None,
) -> bool:
    """Evaluate the full predicate for one attempt."""
    if terms is None:
        terms = search_terms(spec.search)
    if terms:
        attempt_id = attempt.id.lower()
        if not any(t in attempt_id for t in terms):
            return False

    for name in _MEMBERSHIP_FIELDS:
        selection = getattr(spec, name)
        if selection and _plain(getattr(attempt, name)) not in selection:
            return False

    if (
        spec.research_agent
        and attempt.research_agent
        and attempt.research_agent not in spec.research_agent
    ):
        return False

    if spec.days_in_research != DaysBucket.ALL:
        days = days_in_research(attempt.last_action_at, now)
        if not in_bucket(days, spec.days_in_research):
            return False

    return True


def filter_attempts(
    attempts: list[RetrievalAttempt],
    spec: FilterSpec,
    now: Optional[datetime] = None,
) -> list[RetrievalAttempt]:
    """Return the attempts passing every clause, in input order."""
    now = now or datetime.now(timezone.utc)
    terms = search_terms(spec.search)
    return [a for a in attempts if matches(a, spec, now, terms)]
