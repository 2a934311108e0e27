"""Derived view pipeline — filter, then sort.

The view is a projection of the attempt collection and never the source
of truth. Sorting only happens once the filtered set is fixed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from chasedesk.models.attempt import RetrievalAttempt
from chasedesk.models.view import FilterSpec, SortSpec
from chasedesk.view.filtering import filter_attempts
from chasedesk.view.sorting import sort_attempts


@dataclass(frozen=True)
class DerivedView:
    """The list a user sees, plus the counts shown beside it."""
    attempts: list[RetrievalAttempt] = field(default_factory=list)
    total_count: int = 0
    filtered_count: int = 0

    @property
    def count_label(self) -> str:
        if self.total_count == self.filtered_count:
            return f"{self.total_count} attempts"
        return f"{self.filtered_count} of {self.total_count} attempts"


def derive_view(
    attempts: list[RetrievalAttempt],
    filter_spec: Optional[FilterSpec] = None,
    sort_spec: Optional[SortSpec] = None,
    now: Optional[datetime] = None,
) -> DerivedView:
    """Filter then sort against a single `now`."""
    now = now or datetime.now(timezone.utc)
    filtered = filter_attempts(attempts, filter_spec or FilterSpec(), now)
    ordered = sort_attempts(filtered, sort_spec or SortSpec(), now)
    return DerivedView(
        attempts=ordered,
        total_count=len(attempts),
        filtered_count=len(ordered),
    )
