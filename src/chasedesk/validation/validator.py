"""Form validation — field-level checks run before any mutation.

Returns a map of attempt attribute -> message. An empty map means the
input is valid. The mutation planner runs these checks itself rather
than trusting that the caller already did.

Rules:
- phone (optional): loose 10-digit or E.164-style number.
- email (optional): local@domain.tld shape.
- chase_address (optional): at least address_min_length characters.
- reason: required for terminal outcomes on single edits, always
  required on bulk edits.
"""

from __future__ import annotations

import re

from chasedesk.models.forms import BulkEditData, EditFormData, Outcome
from chasedesk.policy.resolver import PolicyResolver


_PHONE_STRIP = re.compile(r"[\s\-()]")
_PHONE_PATTERN = re.compile(
    r"^[+]?[1-9]\d{0,15}$|^[(]?\d{3}[)]?[\s-]?\d{3}[\s-]?\d{4}$"
)
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_OUTCOME_LABELS = {
    Outcome.RESEARCH_COMPLETED: "Research Completed",
    Outcome.RESEARCH_FAILED: "Research Failed",
}


def is_valid_phone(phone: str) -> bool:
    if not phone:
        return True
    return _PHONE_PATTERN.match(_PHONE_STRIP.sub("", phone)) is not None


def is_valid_email(email: str) -> bool:
    if not email:
        return True
    return _EMAIL_PATTERN.match(email) is not None


def format_phone(phone: str) -> str:
    """Render ten-digit numbers as XXX-XXX-XXXX; leave others untouched."""
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return phone


class FormValidator:
    """Validates edit forms against the desk policy."""

    def __init__(self, resolver: PolicyResolver) -> None:
        self._address_min_length = resolver.address_min_length()

    def is_valid_address(self, address: str) -> bool:
        if not address:
            return True
        return len(address.strip()) >= self._address_min_length

    def _check_formats(self, form: EditFormData, only_filled: bool) -> dict[str, str]:
        errors: dict[str, str] = {}

        def present(value: str) -> bool:
            return bool(value.strip()) if only_filled else bool(value)

        if present(form.phone) and not is_valid_phone(form.phone):
            errors["phone"] = "Invalid phone number format"
        if present(form.email) and not is_valid_email(form.email):
            errors["email"] = "Invalid email address format"
        if present(form.chase_address) and not self.is_valid_address(form.chase_address):
            errors["chase_address"] = (
                f"Address must be at least {self._address_min_length} characters"
            )
        return errors

    def validate_edit(self, form: EditFormData) -> dict[str, str]:
        """Validate a single-attempt edit form."""
        errors = self._check_formats(form, only_filled=False)
        if form.outcome.is_terminal and not (form.reason or "").strip():
            errors["reason"] = (
                f"Reason is required for {_OUTCOME_LABELS[form.outcome]}"
            )
        return errors

    def validate_bulk(self, form: BulkEditData) -> dict[str, str]:
        """Validate a bulk edit form. Blank fields are skipped."""
        errors = self._check_formats(form, only_filled=True)
        if not (form.reason or "").strip():
            errors["reason"] = "Reason is required for bulk edits"
        return errors
