"""Tests for form validation — field formats and reason requirements."""

from pathlib import Path

import pytest

from chasedesk.models.forms import BulkEditData, EditFormData
from chasedesk.policy.resolver import PolicyResolver
from chasedesk.validation.validator import (
    FormValidator,
    format_phone,
    is_valid_email,
    is_valid_phone,
)

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def validator() -> FormValidator:
    return FormValidator(PolicyResolver.from_config_dir(CONFIG_DIR))


class TestFieldFormats:
    @pytest.mark.parametrize("phone", [
        "555-123-4567",
        "(555) 123-4567",
        "555 123 4567",
        "+1 (555) 123-4567",
        "+442071838750",
        "",
    ])
    def test_valid_phones(self, phone: str) -> None:
        assert is_valid_phone(phone)

    @pytest.mark.parametrize("phone", ["abc", "555.123.4567", "555-CALL-NOW"])
    def test_invalid_phones(self, phone: str) -> None:
        assert not is_valid_phone(phone)

    @pytest.mark.parametrize("email", ["info@coastalfm.com", "a.b+c@x.co.uk", ""])
    def test_valid_emails(self, email: str) -> None:
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["not-an-email", "a@b", "two words@x.org"])
    def test_invalid_emails(self, email: str) -> None:
        assert not is_valid_email(email)

    def test_address_length_counts_stripped_text(self, validator: FormValidator) -> None:
        assert validator.is_valid_address("")
        assert validator.is_valid_address("12345")
        assert not validator.is_valid_address("abcd")
        assert not validator.is_valid_address("  abcd   ")

    def test_format_phone(self) -> None:
        assert format_phone("(555) 123 4567") == "555-123-4567"
        assert format_phone("+1 555 123 4567") == "+1 555 123 4567"
        assert format_phone("") == ""


class TestSingleEditValidation:
    def test_empty_form_is_valid(self, validator: FormValidator) -> None:
        assert validator.validate_edit(EditFormData()) == {}

    def test_reports_each_bad_field(self, validator: FormValidator) -> None:
        form = EditFormData(phone="abc", email="nope", chase_address="1 A")
        errors = validator.validate_edit(form)
        assert errors == {
            "phone": "Invalid phone number format",
            "email": "Invalid email address format",
            "chase_address": "Address must be at least 5 characters",
        }

    def test_terminal_outcome_requires_reason(self, validator: FormValidator) -> None:
        errors = validator.validate_edit(EditFormData(outcome="research_failed"))
        assert errors == {"reason": "Reason is required for Research Failed"}

        errors = validator.validate_edit(
            EditFormData(outcome="research_completed", reason="   "),
        )
        assert errors == {"reason": "Reason is required for Research Completed"}

    def test_reason_optional_without_outcome(self, validator: FormValidator) -> None:
        assert validator.validate_edit(EditFormData(phone="555-123-4567")) == {}

    def test_unknown_outcome_rejected_at_construction(self) -> None:
        with pytest.raises(ValueError):
            EditFormData(outcome="gave_up")


class TestBulkValidation:
    def test_reason_always_required(self, validator: FormValidator) -> None:
        errors = validator.validate_bulk(BulkEditData(phone="555-123-4567"))
        assert errors == {"reason": "Reason is required for bulk edits"}

    def test_blank_fields_skipped(self, validator: FormValidator) -> None:
        form = BulkEditData(phone="   ", chase_address=" ", reason="batch update")
        assert validator.validate_bulk(form) == {}

    def test_filled_fields_checked(self, validator: FormValidator) -> None:
        form = BulkEditData(email="bad", reason="batch update")
        assert validator.validate_bulk(form) == {
            "email": "Invalid email address format",
        }

    def test_filled_values_only_returns_non_blank(self) -> None:
        form = BulkEditData(phone="555-123-4567", fax="  ", reason="r")
        assert form.filled_values() == {"phone": "555-123-4567"}
