"""Commit hook registration for record types with autoindexing enabled."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Any, Callable, Dict, Iterator, Optional

from .blueprints import BlueprintRegistry
from .decision import Decision, Indexer
from .ports import RecordStore
from .tracking import changed_attributes

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommitHooks:
    """Hook handles attached to one record type.

    Attributes:
        type_name: Record type the hooks belong to.
        on_create_or_update: Called after a record is created or updated.
        on_destroy: Called after a record is destroyed.
    """

    type_name: str
    on_create_or_update: Callable[..., Decision]
    on_destroy: Callable[[Any], Decision]


class HookRegistry:
    """Attach and dispatch commit hooks per record type.

    Hooks are attached by :meth:`register` from the blueprints as they are at
    that moment. Blueprint changes take effect only after registering again.
    """

    def __init__(self, indexer: Indexer, store: RecordStore) -> None:
        self._indexer = indexer
        self._store = store
        self._hooks: Dict[str, CommitHooks] = {}

    def register(self, blueprints: BlueprintRegistry) -> list[str]:
        """Attach hooks for every blueprint with autoindexing enabled.

        Previously registered hooks are discarded.

        Returns:
            list[str]: Names of the types that received hooks.
        """
        hooks: Dict[str, CommitHooks] = {}
        for blueprint in blueprints:
            if not blueprint.autoindex:
                LOGGER.debug("Autoindex disabled for %s; no hooks attached", blueprint.type_name)
                continue
            hooks[blueprint.type_name] = CommitHooks(
                type_name=blueprint.type_name,
                on_create_or_update=self._create_or_update,
                on_destroy=self._indexer.remove,
            )
        self._hooks = hooks
        LOGGER.info("Registered commit hooks for %d type(s)", len(hooks))
        return list(hooks)

    def hooks_for(self, type_name: str) -> Optional[CommitHooks]:
        return self._hooks.get(type_name)

    def on_create_or_update(
        self,
        record: Any,
        changed: Optional[AbstractSet[str]] = None,
    ) -> Decision:
        """Dispatch a create/update of ``record`` to its type's hook."""
        hooks = self._hooks.get(record.type_name)
        if hooks is None:
            return Decision.SKIP
        return hooks.on_create_or_update(record, changed)

    def on_destroy(self, record: Any) -> Decision:
        """Dispatch a destroy of ``record`` to its type's hook."""
        hooks = self._hooks.get(record.type_name)
        if hooks is None:
            return Decision.SKIP
        return hooks.on_destroy(record)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._hooks

    def __iter__(self) -> Iterator[str]:
        return iter(self._hooks)

    def _create_or_update(
        self,
        record: Any,
        changed: Optional[AbstractSet[str]] = None,
    ) -> Decision:
        if changed is None:
            changed = changed_attributes(self._store.snapshot_of(record), record.attributes)
        return self._indexer.index_changes(record, changed)


__all__ = ["CommitHooks", "HookRegistry"]
