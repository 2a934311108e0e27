"""Audit synthesizer — diffs an attempt against proposed field values.

Pure computation: produces AuditEntry records, never stores them.

Rules:
- Editable fields are checked in fixed order: phone, fax, email,
  contactName, chaseAddress. Only fields present in the proposal are
  considered.
- Values compare by string equality with None and "" treated as the
  same empty value. Unchanged fields produce no entry.
- Empty optional values are recorded as None; chase_address records the
  literal string.
- A terminal outcome whose status differs from the current status adds
  exactly one status entry, always last.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable, Optional

from chasedesk.engine.state_machine import status_from_outcome
from chasedesk.models.attempt import (
    EDITABLE_FIELDS,
    OPTIONAL_FIELDS,
    AuditEntry,
    AuditField,
    RetrievalAttempt,
)
from chasedesk.models.forms import Outcome
from chasedesk.policy.resolver import PolicyResolver


def _new_audit_id() -> str:
    return f"audit_{uuid.uuid4().hex}"


def _effective(value: Optional[str]) -> str:
    return value or ""


class AuditSynthesizer:
    """Builds audit entries for a proposed mutation.

    Usage:
        synthesizer = AuditSynthesizer(resolver)
        entries = synthesizer.diff(
            attempt, form.field_values(), form.outcome, form.reason,
            user="agent_smith", timestamp=now,
        )
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._messages = resolver.outcome_messages()
        self._next_id = id_factory or _new_audit_id

    def outcome_message(self, outcome: Outcome | str, reason: str = "") -> str:
        """Human-readable reason recorded on a status entry."""
        outcome = Outcome(outcome)
        reason = (reason or "").strip()
        if outcome == Outcome.RESEARCH_COMPLETED:
            return self._messages["research_completed"]
        if outcome == Outcome.RESEARCH_FAILED:
            prefix = self._messages["research_failed"]
            return f"{prefix} - {reason}" if reason else prefix
        return reason or self._messages["fallback"]

    def diff(
        self,
        before: RetrievalAttempt,
        proposed: dict[str, str],
        outcome: Outcome | str,
        reason: str,
        user: str,
        timestamp: datetime,
        reason_on_fields: bool = False,
    ) -> list[AuditEntry]:
        """Return one entry per changed field, then the status entry.

        Args:
            before: Current stored attempt.
            proposed: New values keyed by attempt attribute. Attributes
                left out are not compared (bulk edit omits blank fields).
            reason_on_fields: Attach the raw reason to field entries too.
        """
        outcome = Outcome(outcome)
        field_reason = (reason or None) if reason_on_fields else None
        entries: list[AuditEntry] = []

        for audit_field, attr in EDITABLE_FIELDS:
            if attr not in proposed:
                continue
            old = getattr(before, attr)
            new = proposed[attr]
            if _effective(old) == _effective(new):
                continue
            if attr in OPTIONAL_FIELDS:
                from_value, to_value = old or None, new or None
            else:
                from_value, to_value = _effective(old), _effective(new)
            entries.append(AuditEntry(
                id=self._next_id(),
                attempt_id=before.id,
                field=audit_field,
                from_value=from_value,
                to_value=to_value,
                user=user,
                timestamp=timestamp,
                reason=field_reason,
            ))

        if outcome.is_terminal:
            target = status_from_outcome(outcome)
            if target != before.status:
                entries.append(AuditEntry(
                    id=self._next_id(),
                    attempt_id=before.id,
                    field=AuditField.STATUS,
                    from_value=before.status.value,
                    to_value=target.value,
                    user=user,
                    timestamp=timestamp,
                    reason=self.outcome_message(outcome, reason),
                ))

        return entries
