"""Retrieval desk service — unified facade for attempt mutations and views.

This is the primary interface for programmatic access to the desk.
It orchestrates all subsystems:
- Single and bulk edits (validate, plan, compare-and-swap commit)
- Audit trail (entries on each attempt, mirrored to the audit log)
- Derived views (filter then sort over the working set)
- Address suggestions (advisory only, never called on the mutation path)

All operations produce typed results. Every failure before the commit
leaves the store untouched: the update is computed fully on a copy,
then written only if every prior step succeeded. Retrying a failed
call is the caller's decision; nothing here retries or schedules work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from chasedesk.address.normalizer import AddressNormalizer, AddressValidationResult
from chasedesk.engine.audit import AuditSynthesizer
from chasedesk.engine.mutation import AttemptUpdate, MutationEngine
from chasedesk.errors import (
    DeskError,
    ErrorKind,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from chasedesk.models.attempt import AuditEntry, AuditField, RetrievalAttempt, Status
from chasedesk.models.forms import BulkEditData, EditFormData
from chasedesk.models.view import FilterSpec, SortSpec
from chasedesk.persistence.attempt_store import InMemoryAttemptStore
from chasedesk.persistence.audit_log import AuditLog
from chasedesk.policy.resolver import PolicyResolver
from chasedesk.validation.validator import FormValidator
from chasedesk.view.aging import is_overdue
from chasedesk.view.pipeline import DerivedView, derive_view

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation.

    On failure, error_kind classifies the error and field_errors carries
    per-field messages when the input was rejected.
    """
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    error_kind: Optional[ErrorKind] = None
    field_errors: dict[str, str] = field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        return self.error_kind == ErrorKind.TRANSIENT_FAILURE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RetrievalDeskService:
    """Attempt mutation and view facade.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        store = InMemoryAttemptStore(attempts)
        service = RetrievalDeskService(resolver, store)

        result = await service.apply_single_edit(
            attempt_id, EditFormData(phone="555-123-4567", chase_address=addr),
        )
        result = await service.apply_bulk_edit(
            ids, BulkEditData(phone="555-000-0000", reason="batch update"),
        )
        view = await service.view(FilterSpec(search="d102"), SortSpec())

    Audit log (optional):
        service = RetrievalDeskService(resolver, store, audit_log=AuditLog(path))
        # Committed entries are mirrored to the log after each write.
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        store: InMemoryAttemptStore,
        audit_log: Optional[AuditLog] = None,
        normalizer: Optional[AddressNormalizer] = None,
        synthesizer: Optional[AuditSynthesizer] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._audit_log = audit_log
        self._normalizer = normalizer or AddressNormalizer()
        self._engine = MutationEngine(
            FormValidator(resolver),
            synthesizer or AuditSynthesizer(resolver),
        )
        self._clock = clock
        self._default_user = resolver.default_user()

        # Set when an audit-log append fails after the store commit.
        # The attempts carry their entries; only the mirror is behind.
        self._audit_log_degraded: bool = False

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def apply_single_edit(
        self,
        attempt_id: str,
        form: EditFormData,
        user: Optional[str] = None,
    ) -> ServiceResult:
        """Edit one attempt's contact fields and optionally close it out.

        Steps: load, validate, check transition, synthesize audit,
        commit with version check. Failure at any step writes nothing.
        """
        user = user or self._default_user
        try:
            current = await self._store.get(attempt_id)
            update = self._engine.plan_single_edit(current, form, user, self._clock())
            await self._store.compare_and_swap(update.updated, update.expected_version)
        except DeskError as e:
            return self._failure(e, "single edit", attempt_id)
        except Exception:
            logger.exception("Single edit on %s failed unexpectedly", attempt_id)
            return ServiceResult(
                success=False,
                errors=[GENERIC_ERROR_MESSAGE],
                error_kind=ErrorKind.UNKNOWN,
            )

        logger.info(
            "Attempt %s updated to version %d (%d audit entries, status %s)",
            attempt_id, update.updated.version, len(update.entries),
            update.updated.status.value,
        )
        data: dict[str, Any] = {
            "attempt_id": attempt_id,
            "version": update.updated.version,
            "status": update.updated.status.value,
            "audit_entries": len(update.entries),
        }
        warning = self._mirror_audit([update])
        if warning:
            data["warning"] = warning
        return ServiceResult(success=True, data=data)

    async def apply_bulk_edit(
        self,
        attempt_ids: list[str],
        form: BulkEditData,
        user: Optional[str] = None,
    ) -> ServiceResult:
        """Apply the filled-in fields of a bulk form to every selected attempt.

        The batch succeeds or fails as a whole: every attempt is loaded
        and planned before anything is written, and the store checks
        every expected version before writing any.
        """
        user = user or self._default_user
        ids = list(dict.fromkeys(attempt_ids))
        try:
            if not ids:
                raise ValidationFailed({"ids": "Select at least one attempt"})
            self._engine.validate_bulk(form)

            now = self._clock()
            updates: list[AttemptUpdate] = []
            for attempt_id in ids:
                current = await self._store.get(attempt_id)
                updates.append(self._engine.plan_bulk_edit(current, form, user, now))

            await self._store.compare_and_swap_many(
                [(u.updated, u.expected_version) for u in updates]
            )
        except DeskError as e:
            return self._failure(e, "bulk edit", f"{len(ids)} attempt(s)")
        except Exception:
            logger.exception("Bulk edit of %d attempt(s) failed unexpectedly", len(ids))
            return ServiceResult(
                success=False,
                errors=[GENERIC_ERROR_MESSAGE],
                error_kind=ErrorKind.UNKNOWN,
            )

        entry_count = sum(len(u.entries) for u in updates)
        logger.info(
            "Bulk edit updated %d attempt(s) with %d audit entries",
            len(updates), entry_count,
        )
        data: dict[str, Any] = {
            "attempt_ids": ids,
            "updated": len(updates),
            "audit_entries": entry_count,
            "versions": {u.attempt_id: u.updated.version for u in updates},
        }
        warning = self._mirror_audit(updates)
        if warning:
            data["warning"] = warning
        return ServiceResult(success=True, data=data)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_attempt(self, attempt_id: str) -> Optional[RetrievalAttempt]:
        """Look up an attempt."""
        try:
            return await self._store.get(attempt_id)
        except NotFound:
            return None

    async def working_set(self) -> list[RetrievalAttempt]:
        """Attempts still in research, in store order."""
        return [a for a in await self._store.list_attempts() if a.is_in_research()]

    async def view(
        self,
        filter_spec: Optional[FilterSpec] = None,
        sort_spec: Optional[SortSpec] = None,
        now: Optional[datetime] = None,
    ) -> DerivedView:
        """Filtered, sorted projection of the working set."""
        return derive_view(
            await self.working_set(), filter_spec, sort_spec, now or self._clock(),
        )

    async def audit_trail(
        self,
        attempt_id: str,
        audit_field: Optional[AuditField] = None,
    ) -> list[AuditEntry]:
        """Audit entries of one attempt, oldest first, optionally for one field."""
        attempt = await self.get_attempt(attempt_id)
        if attempt is None:
            return []
        if audit_field is not None:
            return attempt.entries_for(AuditField(audit_field))
        return list(attempt.audit)

    async def suggest_addresses(self, address: str) -> AddressValidationResult:
        """Advisory address candidates. Never changes any attempt."""
        return await self._normalizer.normalize(address)

    async def status(self) -> dict[str, Any]:
        """Summary of the collection."""
        attempts = await self._store.list_attempts()
        now = self._clock()
        sla_days = self._resolver.sla_days()
        by_status: dict[str, int] = {}
        for a in attempts:
            by_status[a.status.value] = by_status.get(a.status.value, 0) + 1
        return {
            "total": len(attempts),
            "by_status": by_status,
            "in_research": by_status.get(Status.RESEARCH.value, 0),
            "overdue": sum(
                1 for a in attempts
                if a.is_in_research() and is_overdue(a.last_action_at, sla_days, now)
            ),
            "audit_log_entries": self._audit_log.count if self._audit_log else None,
            "audit_log_degraded": self._audit_log_degraded,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _failure(self, error: DeskError, operation: str, subject: str) -> ServiceResult:
        if isinstance(error, InvalidTransition):
            logger.error("Rejected %s on %s: %s", operation, subject, error)
        elif isinstance(error, ValidationFailed):
            logger.info("Rejected %s on %s: %s", operation, subject, error)
        else:
            logger.warning("%s on %s failed: %s", operation.capitalize(), subject, error)
        return ServiceResult(
            success=False,
            errors=[str(error)],
            error_kind=error.kind,
            field_errors=dict(getattr(error, "field_errors", {})),
        )

    def _mirror_audit(self, updates: list[AttemptUpdate]) -> Optional[str]:
        """Append committed entries to the audit log.

        MUST NOT roll back: the attempts are already committed with their
        entries. A failure here only leaves the mirror behind, so it is
        flagged and reported as a warning.
        """
        if self._audit_log is None:
            return None
        try:
            for update in updates:
                self._audit_log.extend(update.entries)
            return None
        except (ValueError, OSError) as e:
            self._audit_log_degraded = True
            logger.warning("Audit log mirror failed: %s", e)
            return f"Audit log degraded: {e}; attempts committed but the log is behind"
