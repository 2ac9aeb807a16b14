"""Shared fixtures wiring the synchronization core to in-memory collaborators."""

from __future__ import annotations

from typing import Callable

import pytest

from indexsync.blueprints import BlueprintRegistry
from indexsync.decision import Indexer
from indexsync.hooks import HookRegistry
from indexsync.identity import TypeRegistry
from indexsync.records import MemoryRecordStore
from indexsync.search import MemoryIndex


@pytest.fixture
def types() -> TypeRegistry:
    registry = TypeRegistry()
    return registry


@pytest.fixture
def store(types: TypeRegistry) -> MemoryRecordStore:
    store = MemoryRecordStore(types, page_size=2)
    types.register("Person", key_type=int, finder=lambda key: store.find("Person", key))
    types.register("Company", key_type=int, finder=lambda key: store.find("Company", key))
    return store


@pytest.fixture
def blueprints() -> BlueprintRegistry:
    return BlueprintRegistry()


@pytest.fixture
def engine(blueprints: BlueprintRegistry, types: TypeRegistry) -> MemoryIndex:
    return MemoryIndex(blueprints, types=types)


@pytest.fixture
def indexer(blueprints: BlueprintRegistry, engine: MemoryIndex, store: MemoryRecordStore) -> Indexer:
    return Indexer(blueprints, engine, store)


@pytest.fixture
def hooks(indexer: Indexer, store: MemoryRecordStore) -> HookRegistry:
    return HookRegistry(indexer, store)


@pytest.fixture
def wire(
    blueprints: BlueprintRegistry,
    hooks: HookRegistry,
    store: MemoryRecordStore,
) -> Callable[[], HookRegistry]:
    """Return a callable registering hooks for the blueprints declared so far."""

    def _wire() -> HookRegistry:
        hooks.register(blueprints)
        store.attach(hooks)
        return hooks

    return _wire
