"""Runtime wiring tests."""

from __future__ import annotations

from indexsync.cli_support import build_runtime
from indexsync.config import IndexSyncConfig
from indexsync.decision import Decision
from indexsync.records import MemoryRecordStore, Record
from indexsync.search import MemoryIndex


def _config(**app: str) -> IndexSyncConfig:
    return IndexSyncConfig.model_validate(
        {
            "app": {
                "types": "tests.sample_app:register_types",
                "blueprints": "tests.sample_app:setup_blueprints",
                **app,
            },
            "rebuild": {"page_size": 7},
        }
    )


def test_store_factory_receives_config_and_type_registry() -> None:
    config = _config(store="tests.sample_app:build_store")

    runtime = build_runtime(config)

    assert isinstance(runtime.store, MemoryRecordStore)
    assert len(runtime.store) == 3
    assert runtime.store.primary_key_of(Record(type_name="Person", attributes={"id": 5})) == 5
    assert "Person" in runtime.types


def test_store_built_by_factory_gets_hooks_attached() -> None:
    runtime = build_runtime(_config(store="tests.sample_app:build_store"))

    runtime.store.save(Record(type_name="Person", attributes={"id": 9, "name": "Gruber"}))

    assert isinstance(runtime.engine, MemoryIndex)
    assert "Person-9" in runtime.engine
    assert "Person" in runtime.hooks
    assert "Team" not in runtime.hooks


def test_default_store_is_in_memory_and_registers_blueprinted_types() -> None:
    runtime = build_runtime(_config())

    assert isinstance(runtime.store, MemoryRecordStore)
    assert len(runtime.store) == 0
    assert "Team" in runtime.types
    decision = runtime.hooks.on_create_or_update(
        Record(type_name="Person", attributes={"id": 1, "name": "Kogler"}), {"name"}
    )
    assert decision is Decision.UPSERT
