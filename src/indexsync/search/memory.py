"""In-memory indexing engine used for tests and local tooling."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import AbstractSet, Any, Dict, List, Optional

from indexsync.blueprints import BlueprintRegistry
from indexsync.errors import UnknownRecordType
from indexsync.identity import IdentityCodec, TypeRegistry

from .text import record_text, terms

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexedDocument:
    """A document stored by :class:`MemoryIndex`.

    Attributes:
        identity: Document identity of the source record.
        type_name: Type of the source record.
        text: Normalized document text.
        changed: Attributes that triggered the latest write.
        data: Snapshot of the record's attributes at write time.
    """

    identity: str
    type_name: str
    text: str
    changed: frozenset[str] = frozenset()
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SearchHit:
    """A document matched by a query, able to load the record behind it."""

    document: IndexedDocument
    types: Optional[TypeRegistry] = None

    @property
    def identity(self) -> str:
        return self.document.identity

    @property
    def type_name(self) -> str:
        return self.document.type_name

    @property
    def key(self) -> Any:
        """Return the record key, typed when the record type is registered."""
        if self.types is not None and self.type_name in self.types:
            return self.types.resolve(self.identity)[1]
        codec = self.types.codec if self.types is not None else IdentityCodec()
        return codec.decode(self.identity)[1]

    def indexed_object(self) -> Any:
        """Load the record this document was built from.

        Raises:
            UnknownRecordType: If no type registry or finder is available.
        """
        if self.types is None:
            raise UnknownRecordType("Search hits have no type registry to load records.")
        return self.types.load(self.identity)


class MemoryIndex:
    """Dict-backed engine keyed by document identity."""

    def __init__(
        self,
        blueprints: Optional[BlueprintRegistry] = None,
        *,
        types: Optional[TypeRegistry] = None,
        text_limit: int = 4096,
    ) -> None:
        """Initialize the index.

        Args:
            blueprints: Registry supplying indexed attributes per type.
            types: Registry used by search hits to load records.
            text_limit: Maximum characters kept per document.
        """
        self._blueprints = blueprints
        self._types = types
        self._text_limit = text_limit
        self._documents: Dict[str, IndexedDocument] = {}
        self._lock = threading.Lock()

    def upsert(self, identity: str, record: Any, changed: AbstractSet[str]) -> None:
        attributes: tuple[str, ...] = ()
        if self._blueprints is not None:
            blueprint = self._blueprints.get(record.type_name)
            if blueprint is not None:
                attributes = blueprint.indexed_attributes
        document = IndexedDocument(
            identity=identity,
            type_name=record.type_name,
            text=record_text(record, attributes, limit=self._text_limit),
            changed=frozenset(changed),
            data=dict(record.attributes),
        )
        with self._lock:
            self._documents[identity] = document
        LOGGER.debug("Stored %s in memory index", identity)

    def remove(self, identity: str) -> None:
        with self._lock:
            self._documents.pop(identity, None)

    def get(self, identity: str) -> Optional[IndexedDocument]:
        with self._lock:
            return self._documents.get(identity)

    def documents(self) -> List[IndexedDocument]:
        with self._lock:
            return list(self._documents.values())

    def count(self, type_name: Optional[str] = None) -> int:
        """Return the number of documents, optionally for one type only."""
        if type_name is None:
            return len(self)
        return sum(1 for doc in self.documents() if doc.type_name == type_name)

    def search(self, query: str, *, type_name: Optional[str] = None) -> List[SearchHit]:
        """Return documents containing every term of ``query``.

        Matching is a plain case-insensitive term containment check; results
        keep insertion order.
        """
        wanted = terms(query)
        hits: List[SearchHit] = []
        for document in self.documents():
            if type_name is not None and document.type_name != type_name:
                continue
            if wanted and wanted <= terms(document.text):
                hits.append(SearchHit(document=document, types=self._types))
        return hits

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._documents

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)


__all__ = ["IndexedDocument", "MemoryIndex", "SearchHit"]
