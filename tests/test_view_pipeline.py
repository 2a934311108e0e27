"""Tests for the derived view pipeline and attempt aging."""

from datetime import datetime, timedelta, timezone

from chasedesk.models.attempt import RetrievalAttempt, RetrievalMethod
from chasedesk.models.view import FilterSpec, SortSpec
from chasedesk.view.aging import days_in_research, is_overdue, overdue_days
from chasedesk.view.pipeline import DerivedView, derive_view

NOW = datetime(2026, 2, 14, 12, 0, tzinfo=timezone.utc)


def _make_attempt(attempt_id: str, days_ago: float, **overrides) -> RetrievalAttempt:
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


class TestAging:
    def test_days_in_research_floors(self) -> None:
        assert days_in_research(NOW - timedelta(days=4.9), NOW) == 4
        assert days_in_research(NOW - timedelta(hours=23), NOW) == 0

    def test_overdue_after_sla(self) -> None:
        assert not is_overdue(NOW - timedelta(days=3), 3, NOW)
        assert is_overdue(NOW - timedelta(days=3, minutes=1), 3, NOW)

    def test_overdue_days_never_negative(self) -> None:
        assert overdue_days(NOW - timedelta(days=1), 3, NOW) == 0
        assert overdue_days(NOW - timedelta(days=5.5), 3, NOW) == 2


class TestDeriveView:
    def test_filter_then_sort(self) -> None:
        attempts = [
            _make_attempt("a-1", 1, client_name="Humana"),
            _make_attempt("a-2", 6),
            _make_attempt("a-3", 2),
            _make_attempt("a-4", 9),
        ]
        view = derive_view(
            attempts,
            FilterSpec(client_name={"Aetna"}),
            SortSpec(field="days_in_research", direction="desc"),
            NOW,
        )
        assert [a.id for a in view.attempts] == ["a-4", "a-2", "a-3"]
        assert view.total_count == 4
        assert view.filtered_count == 3

    def test_defaults_show_everything_newest_first(self) -> None:
        attempts = [_make_attempt("old", 5), _make_attempt("new", 1)]
        view = derive_view(attempts, now=NOW)
        assert [a.id for a in view.attempts] == ["new", "old"]
        assert view.count_label == "2 attempts"

    def test_count_label_when_narrowed(self) -> None:
        view = DerivedView(attempts=[], total_count=12, filtered_count=0)
        assert view.count_label == "0 of 12 attempts"

    def test_empty_collection(self) -> None:
        view = derive_view([], now=NOW)
        assert view.attempts == []
        assert view.count_label == "0 attempts"
