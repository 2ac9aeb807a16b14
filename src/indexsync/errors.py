"""Exceptions raised by the index synchronization core."""

from __future__ import annotations


class IndexSyncError(Exception):
    """Base exception for index synchronization failures."""


class MalformedIdentity(IndexSyncError):
    """Raised when a document identity cannot be encoded or decoded."""


class UnknownRecordType(IndexSyncError):
    """Raised when a type name has no registered blueprint or record type."""


class RecordNotFound(IndexSyncError):
    """Raised when a record can no longer be loaded from the record store.

    Attributes:
        identity: Document identity of the missing record, when known.
    """

    def __init__(self, message: str, *, identity: str | None = None) -> None:
        super().__init__(message)
        self.identity = identity


class ResolverFailure(IndexSyncError):
    """Raised when a dependency rule's resolver fails during a cascade."""


class EngineError(IndexSyncError):
    """Base exception for indexing engine failures."""


class EngineUnavailable(EngineError):
    """Raised when the indexing engine cannot be reached or opened."""


class EngineWriteFailed(EngineError):
    """Raised when the indexing engine rejects an upsert or removal."""
