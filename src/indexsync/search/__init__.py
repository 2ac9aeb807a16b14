"""Indexing engine adapters for indexsync."""

from .lifecycle import drop_index, open_engine
from .memory import IndexedDocument, MemoryIndex, SearchHit
from .text import normalize_search_text, record_text, terms

__all__ = [
    "IndexedDocument",
    "MemoryIndex",
    "SearchHit",
    "drop_index",
    "normalize_search_text",
    "open_engine",
    "record_text",
    "terms",
]
