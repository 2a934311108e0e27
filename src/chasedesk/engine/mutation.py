"""Mutation planner — computes the next state of an attempt.

Pure computation: no side effects. Receives the current attempt and a
form, returns an AttemptUpdate holding a fully built replacement and the
audit entries it appends. The service layer commits the update against
the store with a compare-and-swap on expected_version.

Because the update is built on a copy, any failure here (validation,
rejected transition) leaves the stored attempt untouched.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime

from chasedesk.engine.audit import AuditSynthesizer
from chasedesk.engine.state_machine import AttemptStateMachine
from chasedesk.errors import ValidationFailed
from chasedesk.models.attempt import (
    EDITABLE_FIELDS,
    OPTIONAL_FIELDS,
    AuditEntry,
    AuditField,
    RetrievalAttempt,
    Status,
)
from chasedesk.models.forms import BulkEditData, EditFormData
from chasedesk.validation.validator import FormValidator


@dataclass(frozen=True)
class AttemptUpdate:
    """A planned, not yet committed, mutation of one attempt."""
    attempt_id: str
    expected_version: int
    updated: RetrievalAttempt
    entries: list[AuditEntry]

    @property
    def status_changed(self) -> bool:
        return any(e.field == AuditField.STATUS for e in self.entries)


def _stored_value(attr: str, value: str) -> str | None:
    if attr in OPTIONAL_FIELDS:
        return value or None
    return value


class MutationEngine:
    """Plans single and bulk edits.

    Usage:
        engine = MutationEngine(validator, synthesizer)
        update = engine.plan_single_edit(current, form, user, now)
        await store.compare_and_swap(update.updated, update.expected_version)
    """

    def __init__(
        self,
        validator: FormValidator,
        synthesizer: AuditSynthesizer,
    ) -> None:
        self._validator = validator
        self._synthesizer = synthesizer
        self._state_machine = AttemptStateMachine()

    def validate_single(self, form: EditFormData) -> None:
        errors = self._validator.validate_edit(form)
        if errors:
            raise ValidationFailed(errors)

    def validate_bulk(self, form: BulkEditData) -> None:
        errors = self._validator.validate_bulk(form)
        if errors:
            raise ValidationFailed(errors)

    def plan_single_edit(
        self,
        current: RetrievalAttempt,
        form: EditFormData,
        user: str,
        now: datetime,
    ) -> AttemptUpdate:
        """Plan a single-attempt edit.

        All five editable fields are written verbatim. Empty optional
        fields become None; old values are never retained.

        Raises:
            ValidationFailed: form input rejected.
            InvalidTransition: the outcome's status is unreachable.
        """
        self.validate_single(form)

        target = self._state_machine.target_for(form.outcome)
        self._state_machine.check_transition(current.status, target, current.id)

        proposed = form.field_values()
        entries = self._synthesizer.diff(
            current, proposed, form.outcome, form.reason, user, now,
        )
        changes = {
            attr: _stored_value(attr, proposed[attr])
            for _, attr in EDITABLE_FIELDS
        }
        return self._build(current, changes, target, entries, now)

    def plan_bulk_edit(
        self,
        current: RetrievalAttempt,
        form: BulkEditData,
        user: str,
        now: datetime,
    ) -> AttemptUpdate:
        """Plan one attempt's share of a bulk edit.

        Only filled-in fields are diffed and written; blank fields keep
        the attempt's existing value. The bulk reason is attached to
        every entry produced.

        Raises:
            ValidationFailed: form input rejected.
            InvalidTransition: the attempt cannot take this edit.
        """
        self.validate_bulk(form)

        # Terminal attempts reject even contact-only edits.
        target = self._state_machine.target_for(form.outcome)
        self._state_machine.check_transition(current.status, target, current.id)

        filled = form.filled_values()
        entries = self._synthesizer.diff(
            current, filled, form.outcome, form.reason, user, now,
            reason_on_fields=True,
        )
        changes = {attr: _stored_value(attr, value) for attr, value in filled.items()}
        return self._build(current, changes, target, entries, now)

    @staticmethod
    def _build(
        current: RetrievalAttempt,
        changes: dict[str, str | None],
        target: Status,
        entries: list[AuditEntry],
        now: datetime,
    ) -> AttemptUpdate:
        updated = dataclasses.replace(
            current,
            **changes,
            status=target,
            last_action_at=now,
            version=current.version + 1,
            audit=[*current.audit, *entries],
        )
        return AttemptUpdate(
            attempt_id=current.id,
            expected_version=current.version,
            updated=updated,
            entries=entries,
        )
