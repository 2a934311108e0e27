"""Tests for the sort comparator."""

from datetime import datetime, timedelta, timezone

import pytest

from chasedesk.models.attempt import RetrievalAttempt, RetrievalMethod, Status
from chasedesk.models.view import SortDirection, SortSpec
from chasedesk.view.sorting import (
    collation_key,
    compare_values,
    sort_attempts,
    toggle_direction,
)

NOW = datetime(2026, 2, 14, 12, 0, tzinfo=timezone.utc)


def _make_attempt(attempt_id: str, days_ago: float = 1.0, **overrides) -> RetrievalAttempt:
    fields = dict(
        id=attempt_id,
        retrieval_method=RetrievalMethod.OFFSITE,
        client_name="Aetna",
        demand_id="D10297",
        provider_name="Dr. Michael Brown",
        provider_npi="1234567890",
        provider_group="Coastal Family Medicine",
        start_address="987 Coastal Rd, Portland, OR",
        chase_address="654 Harbor St, Portland, OR",
        last_action_at=NOW - timedelta(days=days_ago),
    )
    fields.update(overrides)
    return RetrievalAttempt(**fields)


def _ids(attempts: list[RetrievalAttempt]) -> list[str]:
    return [a.id for a in attempts]


class TestCompareValues:
    def test_none_sorts_after_values(self) -> None:
        assert compare_values(None, "a") == 1
        assert compare_values("a", None) == -1
        assert compare_values(None, None) == 0

    def test_strings_collate_case_and_accent_insensitively(self) -> None:
        assert compare_values("apple", "Banana") < 0
        assert compare_values("Émile", "Frank") < 0
        assert compare_values("zeta", "Émile") > 0

    def test_numbers_compare_numerically(self) -> None:
        assert compare_values(9, 10) < 0
        assert compare_values(2.5, 2) > 0

    def test_datetimes_compare_by_instant(self) -> None:
        earlier = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        later_other_zone = datetime(2026, 1, 1, 8, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert compare_values(earlier, later_other_zone) < 0

    def test_mixed_types_fall_back_to_strings(self) -> None:
        assert compare_values(10, "9") < 0

    def test_enums_compare_by_value(self) -> None:
        assert compare_values(Status.BLOCKED_EXTERNAL, Status.RESEARCH) < 0

    def test_collation_key_tie_breaks_on_raw_string(self) -> None:
        assert collation_key("abc") != collation_key("ABC")
        assert collation_key("abc")[0] == collation_key("ABC")[0]


class TestSortAttempts:
    def test_default_is_most_recent_first(self) -> None:
        attempts = [
            _make_attempt("old", days_ago=9),
            _make_attempt("new", days_ago=0.5),
            _make_attempt("mid", days_ago=3),
        ]
        assert _ids(sort_attempts(attempts, SortSpec(), NOW)) == ["new", "mid", "old"]

    def test_string_field_ascending(self) -> None:
        attempts = [
            _make_attempt("1", provider_name="dr. zhou"),
            _make_attempt("2", provider_name="Dr. Adams"),
            _make_attempt("3", provider_name="Dr. Émile Roux"),
        ]
        spec = SortSpec(field="provider_name", direction="asc")
        assert _ids(sort_attempts(attempts, spec, NOW)) == ["2", "3", "1"]

    def test_nulls_last_ascending_first_descending(self) -> None:
        attempts = [
            _make_attempt("none"),
            _make_attempt("b", phone="555-000-0002"),
            _make_attempt("a", phone="555-000-0001"),
        ]
        asc = sort_attempts(attempts, SortSpec(field="phone", direction="asc"), NOW)
        desc = sort_attempts(attempts, SortSpec(field="phone", direction="desc"), NOW)
        assert _ids(asc) == ["a", "b", "none"]
        assert _ids(desc) == ["none", "b", "a"]

    def test_virtual_days_field(self) -> None:
        attempts = [
            _make_attempt("ten", days_ago=10.2),
            _make_attempt("two", days_ago=2.5),
            _make_attempt("twenty", days_ago=20),
        ]
        spec = SortSpec(field="days_in_research", direction=SortDirection.ASC)
        assert _ids(sort_attempts(attempts, spec, NOW)) == ["two", "ten", "twenty"]

    def test_version_sorts_numerically(self) -> None:
        attempts = [
            _make_attempt("v10", version=10),
            _make_attempt("v9", version=9),
        ]
        spec = SortSpec(field="version", direction="asc")
        assert _ids(sort_attempts(attempts, spec, NOW)) == ["v9", "v10"]

    def test_input_not_mutated(self) -> None:
        attempts = [_make_attempt("b", days_ago=2), _make_attempt("a", days_ago=1)]
        result = sort_attempts(attempts, SortSpec(field="id", direction="asc"), NOW)
        assert _ids(result) == ["a", "b"]
        assert _ids(attempts) == ["b", "a"]

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown sort field"):
            SortSpec(field="favourite_colour")


def test_toggle_direction() -> None:
    assert toggle_direction(SortDirection.ASC) == SortDirection.DESC
    assert toggle_direction("desc") == SortDirection.ASC
