"""Interfaces of the collaborators the synchronization core consumes."""

from __future__ import annotations

from typing import Any, AbstractSet, Iterator, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class RecordStore(Protocol):
    """Storage layer holding the records that are indexed."""

    def snapshot_of(self, record: Any) -> Optional[Mapping[str, Any]]:
        """Return the attributes persisted before the latest save, if any."""
        ...

    def all_records_of(self, type_name: str) -> Iterator[Any]:
        """Lazily yield every record of a type.

        A record deleted during enumeration may be reported by raising
        ``RecordNotFound`` from ``next()``.
        """
        ...

    def primary_key_of(self, record: Any) -> Any:
        """Return the record's primary key value."""
        ...


@runtime_checkable
class IndexingEngine(Protocol):
    """Full-text engine storing one document per document identity."""

    def upsert(self, identity: str, record: Any, changed: AbstractSet[str]) -> None:
        """Add or replace the document for ``identity``.

        ``changed`` lists the attributes that triggered the write so engines
        can limit which fields they recompute.
        """
        ...

    def remove(self, identity: str) -> None:
        """Delete the document for ``identity``; absent documents are ignored."""
        ...


__all__ = ["IndexingEngine", "RecordStore"]
