"""Canonicalization of provider identifiers before comparison."""

from __future__ import annotations

import unicodedata

DEFAULT_MASK_CHARACTER = "*"


def normalize_name(value: str | None) -> str:
    """Lower-case, strip diacritics (NFD + combining marks) and trim."""

    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.strip()


def is_masked(value: str | None, mask_character: str = DEFAULT_MASK_CHARACTER) -> bool:
    """True when the value is an anonymization placeholder such as ``"*****"``."""

    if not value:
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    return all(char == mask_character for char in trimmed)


def normalize_email(value: str | None, mask_character: str = DEFAULT_MASK_CHARACTER) -> str | None:
    """Matching key for an email, or None when it must not take part in matching."""

    if not value or is_masked(value, mask_character):
        return None
    key = value.lower().strip()
    return key or None


def normalize_tax_id(value: str | None, mask_character: str = DEFAULT_MASK_CHARACTER) -> str | None:
    """Matching key for a tax identifier, or None when it must not take part in matching."""

    if not value or is_masked(value, mask_character):
        return None
    key = value.strip()
    return key or None
