"""Data models — attempts, audit entries, form payloads, view specs."""

from chasedesk.models.attempt import (
    AuditEntry,
    AuditField,
    RetrievalAttempt,
    RetrievalMethod,
    Status,
)
from chasedesk.models.forms import BulkEditData, EditFormData, Outcome
from chasedesk.models.view import DaysBucket, FilterSpec, SortDirection, SortSpec

__all__ = [
    "AuditEntry",
    "AuditField",
    "RetrievalAttempt",
    "RetrievalMethod",
    "Status",
    "BulkEditData",
    "EditFormData",
    "Outcome",
    "DaysBucket",
    "FilterSpec",
    "SortDirection",
    "SortSpec",
]
