"""Form payloads consumed by the mutation engine.

String fields use "" for absent, matching what an edit form submits.
Single edits write all five fields verbatim; bulk edits only write the
fields the user filled in.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Outcome(str, enum.Enum):
    """User-chosen disposition that drives the status transition."""
    NONE = ""
    RESEARCH_COMPLETED = "research_completed"
    RESEARCH_FAILED = "research_failed"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.NONE


@dataclass(frozen=True)
class EditFormData:
    """Single-attempt edit. reason is required for terminal outcomes."""
    phone: str = ""
    fax: str = ""
    email: str = ""
    chase_address: str = ""
    contact_name: str = ""
    outcome: Outcome = Outcome.NONE
    reason: str = ""

    def __post_init__(self) -> None:
        # Accept raw literals from callers ("research_failed" etc.)
        object.__setattr__(self, "outcome", Outcome(self.outcome))

    def field_values(self) -> dict[str, str]:
        """Return the five editable values keyed by attempt attribute."""
        return {
            "phone": self.phone,
            "fax": self.fax,
            "email": self.email,
            "contact_name": self.contact_name,
            "chase_address": self.chase_address,
        }


@dataclass(frozen=True)
class BulkEditData(EditFormData):
    """Multi-attempt edit. Blank fields are left untouched on every
    attempt; reason is mandatory regardless of outcome."""

    def filled_values(self) -> dict[str, str]:
        """Return only the fields with non-blank values."""
        return {
            name: value for name, value in self.field_values().items()
            if value.strip()
        }
