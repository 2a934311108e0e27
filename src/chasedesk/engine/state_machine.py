"""Attempt status state machine.

Transitions are data-driven: VALID_TRANSITIONS maps each status to the
set of statuses it may move to. New terminal states are added by adding
a row with an empty set, never by adding branches.

Outcome mapping (business rule, preserved as specified):
- ""                 -> research          (remain, contact fields edited)
- research_completed -> cancelled_failed  (new retrieval attempt dispatched)
- research_failed    -> blocked_external  (PNP 004)
"""

from __future__ import annotations

from typing import Optional

from chasedesk.errors import InvalidTransition
from chasedesk.models.attempt import Status
from chasedesk.models.forms import Outcome


VALID_TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.RESEARCH: frozenset({
        Status.RESEARCH,
        Status.RESEARCHED_SUCCESS,
        Status.RESEARCH_UNABLE_TO_LOCATE,
        Status.READY_FOR_OUTREACH,
        Status.REROUTE_TO_METHOD,
        Status.CANCELLED_FAILED,
        Status.BLOCKED_EXTERNAL,
    }),
    Status.RESEARCHED_SUCCESS: frozenset(),
    Status.RESEARCH_UNABLE_TO_LOCATE: frozenset(),
    Status.READY_FOR_OUTREACH: frozenset(),
    Status.REROUTE_TO_METHOD: frozenset(),
    Status.CANCELLED_FAILED: frozenset(),
    Status.BLOCKED_EXTERNAL: frozenset(),
}

OUTCOME_TO_STATUS: dict[Outcome, Status] = {
    Outcome.NONE: Status.RESEARCH,
    Outcome.RESEARCH_COMPLETED: Status.CANCELLED_FAILED,
    Outcome.RESEARCH_FAILED: Status.BLOCKED_EXTERNAL,
}

STATUS_DISPLAY_NAMES: dict[Status, str] = {
    Status.RESEARCH: "Research",
    Status.RESEARCHED_SUCCESS: "Researched Success",
    Status.RESEARCH_UNABLE_TO_LOCATE: "Unable to Locate",
    Status.READY_FOR_OUTREACH: "Ready for Outreach",
    Status.REROUTE_TO_METHOD: "Reroute to Method",
    Status.CANCELLED_FAILED: "Cancelled - Failed",
    Status.BLOCKED_EXTERNAL: "Blocked (External)",
}


def status_from_outcome(outcome: Outcome | str) -> Status:
    """Map an outcome decision to its target status."""
    return OUTCOME_TO_STATUS[Outcome(outcome)]


def is_valid_transition(from_status: Status, to_status: Status) -> bool:
    return Status(to_status) in VALID_TRANSITIONS.get(Status(from_status), frozenset())


def is_terminal(status: Status) -> bool:
    """A status is terminal when nothing is reachable from it."""
    return not VALID_TRANSITIONS[Status(status)]


def display_name(status: Status) -> str:
    return STATUS_DISPLAY_NAMES[Status(status)]


class AttemptStateMachine:
    """Validates status changes against the transition table.

    Validates only. The mutation planner applies the new status on the
    copy it builds, so a rejected transition never touches an attempt.
    """

    @staticmethod
    def target_for(outcome: Outcome | str) -> Status:
        return status_from_outcome(outcome)

    @staticmethod
    def check_transition(
        from_status: Status,
        to_status: Status,
        attempt_id: Optional[str] = None,
    ) -> None:
        """Raise InvalidTransition if the table rejects the pair."""
        if not is_valid_transition(from_status, to_status):
            raise InvalidTransition(
                attempt_id, Status(from_status).value, Status(to_status).value,
            )
