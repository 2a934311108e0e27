"""Advisory address suggestions."""

from chasedesk.address.normalizer import (
    AddressNormalizer,
    AddressSuggestion,
    AddressValidationResult,
)

__all__ = ["AddressNormalizer", "AddressSuggestion", "AddressValidationResult"]
