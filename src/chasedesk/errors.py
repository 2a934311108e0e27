"""Error taxonomy for attempt mutations.

Engines raise these; the service facade converts them into
ServiceResult objects so callers always receive a typed outcome.

Recovery semantics by kind:
- VALIDATION_FAILED: user corrects input, nothing was written.
- NOT_FOUND: the referenced attempt vanished. Report, do not retry.
- INVALID_TRANSITION: business-rule violation. Never user-recoverable.
- TRANSIENT_FAILURE: backend unavailable or stale base version. Retry is
  appropriate, nothing was written.
- UNKNOWN: anything else, surfaced as a generic message.
"""

from __future__ import annotations

import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Classification of mutation failures surfaced to callers."""
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    TRANSIENT_FAILURE = "transient_failure"
    UNKNOWN = "unknown"


class DeskError(Exception):
    """Base class for every classified mutation failure."""
    kind: ErrorKind = ErrorKind.UNKNOWN

    @property
    def retryable(self) -> bool:
        return self.kind == ErrorKind.TRANSIENT_FAILURE


class ValidationFailed(DeskError):
    """Form input rejected before any mutation was attempted."""
    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, field_errors: dict[str, str]) -> None:
        self.field_errors = dict(field_errors)
        fields = ", ".join(sorted(self.field_errors))
        super().__init__(f"Validation failed: {fields}")


class NotFound(DeskError):
    """The referenced attempt does not exist in the store."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, attempt_id: str) -> None:
        self.attempt_id = attempt_id
        super().__init__(f"Attempt not found: {attempt_id}")


class InvalidTransition(DeskError):
    """The state machine rejected a status change."""
    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, attempt_id: Optional[str], from_status: str, to_status: str) -> None:
        self.attempt_id = attempt_id
        self.from_status = from_status
        self.to_status = to_status
        subject = f"Attempt {attempt_id}: " if attempt_id else ""
        super().__init__(
            f"{subject}invalid status transition {from_status} -> {to_status}"
        )


class TransientFailure(DeskError):
    """Backend unavailable. No state was changed; the caller may retry."""
    kind = ErrorKind.TRANSIENT_FAILURE


class StaleVersion(TransientFailure):
    """Write rejected because the stored version moved on."""

    def __init__(self, attempt_id: str, expected: int, actual: int) -> None:
        self.attempt_id = attempt_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Version conflict on {attempt_id}: expected {expected}, "
            f"found {actual}"
        )


class Unknown(DeskError):
    """Catch-all for unclassified failures."""
    kind = ErrorKind.UNKNOWN
