"""Full reindexing of every record of a type."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from .blueprints import BlueprintRegistry
from .decision import Decision, Indexer
from .errors import IndexSyncError, RecordNotFound
from .ports import RecordStore

LOGGER = logging.getLogger(__name__)

MissingRecordPolicy = Literal["skip", "abort"]


@dataclass(slots=True)
class RebuildResult:
    """Counts gathered while rebuilding one type.

    Attributes:
        type_name: Record type that was rebuilt.
        indexed: Records upserted into the index.
        excluded: Records removed because their blueprint excludes them.
        skipped: Records that disappeared while the rebuild was running.
    """

    type_name: str
    indexed: int = 0
    excluded: int = 0
    skipped: int = 0

    def as_dict(self) -> dict[str, int | str]:
        return {
            "type": self.type_name,
            "indexed": self.indexed,
            "excluded": self.excluded,
            "skipped": self.skipped,
        }


class RebuildCoordinator:
    """Reindex all records of a type straight from the record store.

    The index is not cleared first; upserts replace existing documents by
    identity. Autoindex flags and change tracking are ignored, and dependency
    rules are not followed. Callers should not run a rebuild concurrently with
    other writers for the same type.
    """

    def __init__(
        self,
        blueprints: BlueprintRegistry,
        store: RecordStore,
        indexer: Indexer,
        *,
        on_missing: MissingRecordPolicy = "skip",
    ) -> None:
        """Initialize the coordinator.

        Args:
            blueprints: Registry providing per-type configuration.
            store: Record store enumerating the records of a type.
            indexer: Indexer applying the exclusion policy and writing.
            on_missing: ``"skip"`` to log and continue when a record
                disappears mid-rebuild, ``"abort"`` to re-raise.
        """
        if on_missing not in ("skip", "abort"):
            raise ValueError(f"Unsupported missing-record policy: {on_missing!r}")
        self._blueprints = blueprints
        self._store = store
        self._indexer = indexer
        self._on_missing = on_missing

    def rebuild(self, type_name: str) -> int:
        """Reindex every record of ``type_name``.

        Returns:
            int: Number of documents upserted.

        Raises:
            UnknownRecordType: If the type has no blueprint.
            RecordNotFound: If a record vanishes and the policy is ``"abort"``.
            EngineError: If the engine rejects a write.
        """
        return self.run(type_name).indexed

    def run(self, type_name: str) -> RebuildResult:
        """Reindex every record of ``type_name`` and return detailed counts.

        ``RecordNotFound`` raised by the store's iterator or while indexing a
        record falls under the missing-record policy. An iterator that ends
        after raising simply ends the rebuild.
        """
        self._blueprints.blueprint_for(type_name)
        result = RebuildResult(type_name=type_name)
        records = iter(self._store.all_records_of(type_name))
        sentinel = object()
        while True:
            record: Any = None
            try:
                record = next(records, sentinel)
                if record is sentinel:
                    break
                decision = self._indexer.reindex(record, frozenset(record.attributes))
            except RecordNotFound as exc:
                if self._on_missing == "abort":
                    raise
                result.skipped += 1
                LOGGER.warning(
                    "Skipping %s during rebuild: %s", self._describe(record, exc), exc
                )
                continue
            if decision is Decision.UPSERT:
                result.indexed += 1
            elif decision is Decision.REMOVE:
                result.excluded += 1
        LOGGER.info(
            "Rebuilt %s: %d indexed, %d excluded, %d skipped",
            type_name,
            result.indexed,
            result.excluded,
            result.skipped,
        )
        return result

    def _describe(self, record: object, exc: RecordNotFound) -> str:
        if exc.identity is not None:
            return exc.identity
        if record is None:
            return "record"
        try:
            return self._indexer.identity_for(record)
        except IndexSyncError:
            return repr(record)


__all__ = ["MissingRecordPolicy", "RebuildCoordinator", "RebuildResult"]
