"""ChromaDB-backed indexing engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, Any, Dict, Optional

import chromadb

from indexsync.blueprints import BlueprintRegistry
from indexsync.errors import EngineUnavailable, EngineWriteFailed

from .text import record_text

LOGGER = logging.getLogger(__name__)

DEFAULT_COLLECTION = "records"


class ChromaIndex:
    """Store one Chroma document per document identity.

    Each document carries the record's type name, key text, and the
    comma-separated changed attributes of its latest write as metadata.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        collection: str = DEFAULT_COLLECTION,
        blueprints: Optional[BlueprintRegistry] = None,
        embedding_function: Any | None = None,
        separator: str = "-",
    ) -> None:
        """Initialize the adapter without touching the database.

        Args:
            path: Directory for a persistent client; ``None`` keeps the data
                in memory.
            collection: Name of the Chroma collection.
            blueprints: Registry supplying indexed attributes per type.
            embedding_function: Optional embedding function passed to Chroma.
            separator: Identity separator used to split keys into metadata.
        """
        self._path = Path(path).expanduser() if path is not None else None
        self._collection_name = collection
        self._blueprints = blueprints
        self._embedding_function = embedding_function
        self._separator = separator
        self._client: Any | None = None
        self._collection: Any | None = None

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def initialize(self) -> None:
        """Open the client and create the collection when missing.

        Raises:
            EngineUnavailable: If the client or collection cannot be opened.
        """
        if self._collection is not None:
            return
        try:
            if self._path is None:
                self._client = chromadb.EphemeralClient()
            else:
                self._path.mkdir(parents=True, exist_ok=True)
                self._client = chromadb.PersistentClient(path=str(self._path))
            kwargs: Dict[str, Any] = {"name": self._collection_name}
            if self._embedding_function is not None:
                kwargs["embedding_function"] = self._embedding_function
            self._collection = self._client.get_or_create_collection(**kwargs)
        except Exception as exc:
            raise EngineUnavailable(
                f"Cannot open Chroma collection {self._collection_name!r}: {exc}"
            ) from exc
        LOGGER.debug("Opened Chroma collection %s", self._collection_name)

    def upsert(self, identity: str, record: Any, changed: AbstractSet[str]) -> None:
        collection = self._require_collection()
        metadata = {
            "type_name": record.type_name,
            "key": identity.partition(self._separator)[2],
            "changed_attributes": ",".join(sorted(changed)),
        }
        try:
            collection.upsert(
                ids=[identity],
                documents=[record_text(record, self._indexed_attributes(record.type_name))],
                metadatas=[metadata],
            )
        except Exception as exc:
            raise EngineWriteFailed(f"Chroma rejected upsert of {identity}: {exc}") from exc

    def remove(self, identity: str) -> None:
        collection = self._require_collection()
        try:
            collection.delete(ids=[identity])
        except Exception as exc:
            raise EngineWriteFailed(f"Chroma rejected removal of {identity}: {exc}") from exc

    def count(self, type_name: Optional[str] = None) -> int:
        """Return the number of documents, optionally for one type only."""
        collection = self._require_collection()
        if type_name is None:
            return int(collection.count())
        result = collection.get(where={"type_name": type_name}, include=[])
        return len(result["ids"])

    def drop(self) -> None:
        """Delete the collection and forget the open handle."""
        self.initialize()
        assert self._client is not None
        try:
            self._client.delete_collection(name=self._collection_name)
        except Exception as exc:
            raise EngineWriteFailed(
                f"Cannot drop Chroma collection {self._collection_name!r}: {exc}"
            ) from exc
        LOGGER.info("Dropped Chroma collection %s", self._collection_name)
        self._collection = None

    def _require_collection(self) -> Any:
        if self._collection is None:
            self.initialize()
        return self._collection

    def _indexed_attributes(self, type_name: str) -> tuple[str, ...]:
        if self._blueprints is None:
            return ()
        blueprint = self._blueprints.get(type_name)
        return blueprint.indexed_attributes if blueprint is not None else ()


__all__ = ["ChromaIndex", "DEFAULT_COLLECTION"]
