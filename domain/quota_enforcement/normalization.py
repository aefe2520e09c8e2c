"""
Text normalisation for scope names and content keys.

Scope and content are compared case-insensitively by the event counters;
these helpers only clean up whitespace so that " news " and "news" count
as the same subverse.
"""

import re
from typing import Optional

_WHITESPACE_RUN = re.compile(r"\s{2,}")


def trim_safe(value: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace, passing ``None`` through."""
    if value is None:
        return None
    return value.strip()


def strip_whitespace(value: Optional[str]) -> Optional[str]:
    """Collapse runs of two or more whitespace characters into one space and trim."""
    if not value:
        return value
    return _WHITESPACE_RUN.sub(" ", value).strip()


def normalize_key(value: Optional[str]) -> Optional[str]:
    """
    Normalise a scope name.

    Returns:
        The cleaned key, or None when nothing but whitespace remains
    """
    cleaned = strip_whitespace(trim_safe(value))
    return cleaned or None


def normalize_content(value: Optional[str]) -> Optional[str]:
    """
    Normalise a content key such as a submitted URL.

    Only surrounding whitespace is removed; internal whitespace is part of
    the content and must match exactly.
    """
    cleaned = trim_safe(value)
    return cleaned or None


def fold_case(value: str) -> str:
    """Case-fold a key for storage and comparison."""
    return value.casefold()
