"""Indexation policy: decide whether a record is upserted, removed, or skipped.

The :class:`Indexer` is the only component that talks to the indexing engine.
Commit hooks call :meth:`Indexer.index_changes` and :meth:`Indexer.remove`;
the rebuild coordinator calls :meth:`Indexer.reindex` directly.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import AbstractSet, Any, Optional

from .blueprints import Blueprint, BlueprintRegistry
from .dependencies import DependencyResolver
from .identity import IdentityCodec
from .ports import IndexingEngine, RecordStore

LOGGER = logging.getLogger(__name__)


class Decision(str, Enum):
    """Outcome of an indexation decision for a single record."""

    SKIP = "skip"
    UPSERT = "upsert"
    REMOVE = "remove"


class Indexer:
    """Apply blueprint policy to records and forward the result to the engine."""

    def __init__(
        self,
        blueprints: BlueprintRegistry,
        engine: IndexingEngine,
        store: RecordStore,
        *,
        codec: Optional[IdentityCodec] = None,
        resolver: Optional[DependencyResolver] = None,
    ) -> None:
        """Initialize the indexer.

        Args:
            blueprints: Registry providing per-type configuration.
            engine: Indexing engine receiving upserts and removals.
            store: Record store used to read primary keys.
            codec: Identity codec; defaults to the ``-`` separated codec.
            resolver: Dependency resolver; built from ``blueprints`` if omitted.
        """
        self._blueprints = blueprints
        self._engine = engine
        self._store = store
        self._codec = codec or IdentityCodec()
        self._resolver = resolver or DependencyResolver(blueprints)

    @property
    def engine(self) -> IndexingEngine:
        return self._engine

    def identity_for(self, record: Any) -> str:
        """Return the document identity of ``record``."""
        return self._codec.encode(record.type_name, self._store.primary_key_of(record))

    def index_changes(self, record: Any, changed: AbstractSet[str]) -> Decision:
        """Handle a create or update of ``record``.

        Skips types with autoindex off and saves that changed nothing. Otherwise
        the record is upserted or removed according to its exclusion predicate,
        and every dependent resolved for ``changed`` goes through the same
        upsert-or-remove step, tagged with the same changed attributes.

        Args:
            record: Record that was created or updated.
            changed: Attributes that changed in this save.

        Returns:
            Decision: What was done with ``record`` itself.

        Raises:
            ResolverFailure: If a dependency resolver fails.
            EngineError: If the engine rejects a write.
        """

        blueprint = self._blueprints.blueprint_for(record.type_name)
        if not blueprint.autoindex:
            return Decision.SKIP
        if not changed:
            LOGGER.debug("No changes on %s; skipping indexation", record.type_name)
            return Decision.SKIP

        changed = frozenset(changed)
        decision = self._apply(blueprint, record, changed)
        for dependent in self._resolver.resolve(record, changed):
            dependent_blueprint = self._blueprints.get(dependent.type_name)
            if dependent_blueprint is None:
                LOGGER.debug("Dependent type %s has no blueprint; skipping", dependent.type_name)
                continue
            self._apply(dependent_blueprint, dependent, changed)
        return decision

    def reindex(self, record: Any, changed: AbstractSet[str]) -> Decision:
        """Upsert ``record`` or remove it when its blueprint excludes it.

        No autoindex, change, or dependency handling happens here.
        """
        blueprint = self._blueprints.blueprint_for(record.type_name)
        return self._apply(blueprint, record, frozenset(changed))

    def remove(self, record: Any) -> Decision:
        """Remove the document of a destroyed record unconditionally."""
        identity = self.identity_for(record)
        LOGGER.debug("Removing %s from the index", identity)
        self._engine.remove(identity)
        return Decision.REMOVE

    def _apply(self, blueprint: Blueprint, record: Any, changed: frozenset[str]) -> Decision:
        identity = self.identity_for(record)
        if blueprint.excludes(record):
            LOGGER.debug("%s is excluded by its blueprint; removing", identity)
            self._engine.remove(identity)
            return Decision.REMOVE
        LOGGER.debug("Upserting %s (changed: %s)", identity, ", ".join(sorted(changed)))
        self._engine.upsert(identity, record, changed)
        return Decision.UPSERT


__all__ = ["Decision", "Indexer"]
