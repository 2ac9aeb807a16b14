"""Text helpers used to build indexable documents from records."""

from __future__ import annotations

import re
from typing import Any, Iterable, Sequence

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_WHITESPACE = re.compile(r"\s+")
_TERM = re.compile(r"\w+", re.UNICODE)


def normalize_search_text(text: str, *, limit: int = 4096) -> str:
    """Return sanitized text suitable for an index document payload.

    Args:
        text: Source text assembled from record attributes.
        limit: Maximum number of characters retained in the normalized output.

    Returns:
        str: Normalized text with control characters removed, whitespace collapsed,
        and length capped to ``limit`` characters when ``limit`` is positive.
    """

    sanitized = _CONTROL_CHARS.sub(" ", text)
    sanitized = _WHITESPACE.sub(" ", sanitized).strip()
    if limit > 0:
        return sanitized[:limit]
    return sanitized


def record_text(record: Any, attributes: Sequence[str] = (), *, limit: int = 4096) -> str:
    """Join the indexed attribute values of a record into document text.

    When ``attributes`` is empty every string-valued attribute is used, in the
    record's attribute order.
    """

    values = record.attributes
    names: Iterable[str] = attributes or [
        name for name, value in values.items() if isinstance(value, str)
    ]
    parts = [str(values[name]) for name in names if values.get(name) is not None]
    return normalize_search_text(" ".join(parts), limit=limit)


def terms(text: str) -> set[str]:
    """Return the lower-cased word terms of ``text``."""
    return {term.casefold() for term in _TERM.findall(text)}


__all__ = ["normalize_search_text", "record_text", "terms"]
