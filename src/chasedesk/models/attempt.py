"""Retrieval attempt and audit entry data models.

A retrieval attempt is a work item tracking an in-progress search for
contact/address information tied to an insurance claim. Attempts enter
the working set in RESEARCH and leave it through exactly one terminal
transition.

Invariants:
- version increases by exactly 1 on every successful mutation.
- audit is append-only, ordered by creation.
- last_action_at moves on every successful mutation, never on read.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


class RetrievalMethod(str, enum.Enum):
    """How the records will be retrieved once contact is established."""
    OFFSITE = "Offsite"
    HIH = "HIH"


class Status(str, enum.Enum):
    """Attempt lifecycle states.

    RESEARCH is the sole non-terminal state. Every other state is
    terminal: the transition table gives it no outbound edges.
    """
    RESEARCH = "research"
    RESEARCHED_SUCCESS = "researched_success"
    RESEARCH_UNABLE_TO_LOCATE = "research_unable_to_locate"
    READY_FOR_OUTREACH = "ready_for_outreach"
    REROUTE_TO_METHOD = "reroute_to_method"
    CANCELLED_FAILED = "cancelled_failed"
    BLOCKED_EXTERNAL = "blocked_external"


class AuditField(str, enum.Enum):
    """Fields an audit entry can describe."""
    PHONE = "phone"
    FAX = "fax"
    EMAIL = "email"
    CONTACT_NAME = "contactName"
    CHASE_ADDRESS = "chaseAddress"
    STATUS = "status"
    OUTCOME = "outcome"


# Editable scalar fields in diff order: audit field -> attempt attribute.
EDITABLE_FIELDS: tuple[tuple[AuditField, str], ...] = (
    (AuditField.PHONE, "phone"),
    (AuditField.FAX, "fax"),
    (AuditField.EMAIL, "email"),
    (AuditField.CONTACT_NAME, "contact_name"),
    (AuditField.CHASE_ADDRESS, "chase_address"),
)

# chase_address always holds a string; the others are None when absent.
OPTIONAL_FIELDS = frozenset({"phone", "fax", "email", "contact_name"})


@dataclass(frozen=True)
class AuditEntry:
    """An immutable record of one field change on an attempt.

    attempt_id is a back-reference only; entries never own their attempt.
    from_value/to_value serialise as "from"/"to".
    """
    id: str
    attempt_id: str
    field: AuditField
    from_value: Optional[str]
    to_value: Optional[str]
    user: str
    timestamp: datetime
    reason: Optional[str] = None


@dataclass
class RetrievalAttempt:
    """A unit of work tracking a contact/address retrieval for a claim.

    Mutations go through the service layer, which replaces the stored
    attempt wholesale. Callers should treat instances returned by the
    store as snapshots.
    """
    id: str
    retrieval_method: RetrievalMethod
    client_name: str
    demand_id: str
    provider_name: str
    provider_npi: str
    provider_group: str
    start_address: str
    chase_address: str
    last_action_at: datetime
    status: Status = Status.RESEARCH

    # Contact details discovered during research
    phone: Optional[str] = None
    fax: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None
    research_agent: Optional[str] = None

    # Optimistic concurrency
    version: int = 1

    audit: list[AuditEntry] = field(default_factory=list)

    def is_in_research(self) -> bool:
        return self.status == Status.RESEARCH

    def entries_for(self, audit_field: AuditField) -> list[AuditEntry]:
        """Return audit entries touching a single field, oldest first."""
        return [e for e in self.audit if e.field == audit_field]
