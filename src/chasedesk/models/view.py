"""Filter and sort specifications for the derived view."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import Iterable, Optional

from chasedesk.models.attempt import RetrievalAttempt


class DaysBucket(str, enum.Enum):
    """Days-in-research selector. Bounds are inclusive on both ends."""
    ALL = "all"
    D0_3 = "0-3"
    D4_7 = "4-7"
    D8_14 = "8-14"
    D15_30 = "15-30"
    D30_PLUS = "30+"


# bucket -> (min_days, max_days); None means unbounded on that side.
DAYS_BUCKET_BOUNDS: dict[DaysBucket, tuple[Optional[int], Optional[int]]] = {
    DaysBucket.D0_3: (None, 3),
    DaysBucket.D4_7: (4, 7),
    DaysBucket.D8_14: (8, 14),
    DaysBucket.D15_30: (15, 30),
    DaysBucket.D30_PLUS: (30, None),
}


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


DAYS_IN_RESEARCH = "days_in_research"

SORTABLE_FIELDS: frozenset[str] = frozenset(
    [f.name for f in fields(RetrievalAttempt)] + [DAYS_IN_RESEARCH]
)


def _selection(values: Iterable) -> frozenset[str]:
    # A lone string (or str-valued enum) is one selected value.
    if isinstance(values, str):
        values = (values,)
    return frozenset(
        v.value if isinstance(v, enum.Enum) else str(v) for v in values
    )


@dataclass(frozen=True)
class FilterSpec:
    """What the user narrowed the list down to.

    An empty selection set imposes no constraint on its field.
    """
    retrieval_method: frozenset[str] = field(default_factory=frozenset)
    client_name: frozenset[str] = field(default_factory=frozenset)
    demand_id: frozenset[str] = field(default_factory=frozenset)
    provider_group: frozenset[str] = field(default_factory=frozenset)
    provider_name: frozenset[str] = field(default_factory=frozenset)
    research_agent: frozenset[str] = field(default_factory=frozenset)
    search: str = ""
    days_in_research: DaysBucket = DaysBucket.ALL

    def __post_init__(self) -> None:
        for name in (
            "retrieval_method", "client_name", "demand_id",
            "provider_group", "provider_name", "research_agent",
        ):
            object.__setattr__(self, name, _selection(getattr(self, name)))
        object.__setattr__(
            self, "days_in_research", DaysBucket(self.days_in_research),
        )


@dataclass(frozen=True)
class SortSpec:
    """Sort key plus direction. Defaults to most recent action first."""
    field: str = "last_action_at"
    direction: SortDirection = SortDirection.DESC

    def __post_init__(self) -> None:
        if self.field not in SORTABLE_FIELDS:
            raise ValueError(f"Unknown sort field: {self.field}")
        object.__setattr__(self, "direction", SortDirection(self.direction))
