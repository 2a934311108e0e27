"""Address suggestions — advisory normalisation of free-text addresses.

The mutation path never calls this. A caller may consult suggestions
before deciding on the final chase_address it submits.

AddressNormalizer is a local heuristic provider. A production
deployment would put a geocoding/validation service behind the same
async normalize() call.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

MIN_ADDRESS_LENGTH = 5

STREET_TYPES: dict[str, str] = {
    "st": "Street",
    "street": "Street",
    "ave": "Avenue",
    "avenue": "Avenue",
    "rd": "Road",
    "road": "Road",
    "dr": "Drive",
    "drive": "Drive",
    "blvd": "Boulevard",
    "boulevard": "Boulevard",
    "ln": "Lane",
    "lane": "Lane",
    "ct": "Court",
    "court": "Court",
    "pl": "Place",
    "place": "Place",
    "way": "Way",
    "cir": "Circle",
    "circle": "Circle",
}

_STREET_ADDRESS = re.compile(
    r"(\d+)\s+(.*?)\s+(st|street|ave|avenue|rd|road|dr|drive|blvd|boulevard"
    r"|ln|lane|ct|court|pl|place|way|cir|circle)\s*,?\s*(.+)",
    re.IGNORECASE,
)
_CITY_STATE_ZIP = re.compile(r"^(.+?),?\s*([A-Z]{2})\s*(\d{5}(?:-\d{4})?)$", re.IGNORECASE)
_ZIP = re.compile(r"\d{5}(?:-\d{4})?")
_STATE = re.compile(r"\b[A-Z]{2}\b", re.IGNORECASE)

# Abbreviations expanded by the basic cleanup pass.
_ABBREVIATIONS = (
    (re.compile(r"\bSt\b", re.IGNORECASE), "Street"),
    (re.compile(r"\bAve\b", re.IGNORECASE), "Avenue"),
    (re.compile(r"\bRd\b", re.IGNORECASE), "Road"),
    (re.compile(r"\bDr\b", re.IGNORECASE), "Drive"),
    (re.compile(r"\bBlvd\b", re.IGNORECASE), "Boulevard"),
    (re.compile(r"\bLn\b", re.IGNORECASE), "Lane"),
    (re.compile(r"\bCt\b", re.IGNORECASE), "Court"),
    (re.compile(r"\bPl\b", re.IGNORECASE), "Place"),
)


@dataclass(frozen=True)
class AddressSuggestion:
    """One ranked candidate. confidence is in [0, 1]."""
    original: str
    normalized: str
    confidence: float
    components: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AddressValidationResult:
    is_valid: bool
    suggestions: list[AddressSuggestion] = field(default_factory=list)
    error: Optional[str] = None


def normalize_street_type(street_type: str) -> str:
    return STREET_TYPES.get(street_type.lower(), street_type)


def parse_city_state_zip(text: str) -> tuple[str, str, str]:
    """Split "City, ST 12345" into (city, state, zip), best effort."""
    match = _CITY_STATE_ZIP.match(text)
    if match:
        return match.group(1).strip(), match.group(2).upper(), match.group(3)

    parts = [p for p in re.split(r"[,\s]+", text) if p]
    zip_match = _ZIP.search(text)
    state_match = _STATE.search(text)
    return (
        parts[0] if parts else "",
        state_match.group(0).upper() if state_match else "",
        zip_match.group(0) if zip_match else "",
    )


def basic_cleanup(address: str) -> str:
    """Collapse whitespace, capitalise words, expand street abbreviations."""
    cleaned = re.sub(r"\s+", " ", address)
    cleaned = re.sub(r"\b\w", lambda m: m.group(0).upper(), cleaned)
    for pattern, replacement in _ABBREVIATIONS:
        cleaned = pattern.sub(replacement, cleaned)
    return cleaned.strip()


def is_normalization_required(address: str) -> bool:
    """Heuristic: does this address look like it needs cleaning up?"""
    if not address or len(address.strip()) < MIN_ADDRESS_LENGTH:
        return False
    has_abbreviation = re.search(
        r"\b(st|ave|rd|dr|blvd|ln|ct|pl)\b", address, re.IGNORECASE,
    ) is not None
    has_double_space = re.search(r"\s{2,}", address) is not None
    has_street_word = re.search(
        r"\b(street|avenue|road|drive|boulevard|lane|court|place)\b", address,
    ) is not None
    return has_abbreviation or has_double_space or not has_street_word


class AddressNormalizer:
    """Suggests normalised forms of a free-text address.

    Usage:
        normalizer = AddressNormalizer()
        result = await normalizer.normalize("123 main st, Portland, OR 97201")
        best = result.suggestions[0].normalized if result.suggestions else None
    """

    def __init__(self, latency_seconds: float = 0.0) -> None:
        self._latency = latency_seconds

    async def normalize(self, address: str) -> AddressValidationResult:
        if self._latency > 0:
            await asyncio.sleep(self._latency)

        if not address or len(address.strip()) < MIN_ADDRESS_LENGTH:
            return AddressValidationResult(
                is_valid=False, error="Address too short for validation",
            )

        text = address.strip()
        suggestions: list[AddressSuggestion] = []

        match = _STREET_ADDRESS.match(text)
        if match:
            number, street_name, street_type, rest = match.groups()
            city, state, zip_code = parse_city_state_zip(rest)
            suggestions.append(AddressSuggestion(
                original=text,
                normalized=(
                    f"{number} {street_name} {normalize_street_type(street_type)}, "
                    f"{city}, {state} {zip_code}"
                ),
                confidence=0.95,
                components={
                    "street_number": number,
                    "street_name": street_name.strip(),
                    "city": city,
                    "state": state,
                    "zip_code": zip_code,
                },
            ))
        else:
            cleaned = basic_cleanup(text)
            if cleaned != text:
                suggestions.append(AddressSuggestion(
                    original=text, normalized=cleaned, confidence=0.75,
                ))

        # Keeping the text as typed is always offered last.
        if suggestions:
            suggestions.append(AddressSuggestion(
                original=text, normalized=text, confidence=0.5,
            ))

        logger.debug("Address %r produced %d suggestion(s)", text, len(suggestions))
        return AddressValidationResult(
            is_valid=bool(suggestions), suggestions=suggestions,
        )
