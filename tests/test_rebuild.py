"""Rebuild coordinator tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from indexsync.blueprints import BlueprintRegistry, dependency
from indexsync.decision import Indexer
from indexsync.errors import RecordNotFound, UnknownRecordType
from indexsync.rebuild import RebuildCoordinator
from indexsync.records import MemoryRecordStore
from indexsync.search import MemoryIndex

from .factories import company, person


def _seed(store: MemoryRecordStore, *records: object) -> None:
    # No hooks are attached, so saving only persists.
    for record in records:
        store.save(record)


def test_rebuild_indexes_every_record_of_type(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
) -> None:
    blueprints.setup("Person", index=["name"])
    _seed(store, person(1, "Kogler"), person(2, "Meier"), person(3, "Huber"), company())
    coordinator = RebuildCoordinator(blueprints, store, indexer)

    count = coordinator.rebuild("Person")

    assert count == 3
    assert engine.count("Person") == 3
    assert engine.count("Company") == 0
    assert len(engine.search("Kogler")) == 1


def test_rebuild_restores_a_wiped_index(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
) -> None:
    blueprints.setup("Person", index=["name"])
    _seed(store, person(1, "Kogler"))
    coordinator = RebuildCoordinator(blueprints, store, indexer)
    coordinator.rebuild("Person")
    engine.clear()
    assert engine.search("Kogler") == []

    coordinator.rebuild("Person")

    assert len(engine.search("Kogler")) == 1


def test_rebuild_honours_exclusion_and_removes_stale_documents(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
) -> None:
    blueprints.setup("Person", index=["name"])
    _seed(store, person(1, "Kogler"), person(2, "Kogler"))
    coordinator = RebuildCoordinator(blueprints, store, indexer)
    coordinator.rebuild("Person")
    assert engine.count("Person") == 2

    blueprints.setup("Person", index=["name"], ignore_if=lambda record: record["name"] == "Kogler")
    result = coordinator.run("Person")

    assert result.indexed == 0
    assert result.excluded == 2
    assert engine.count("Person") == 0


def test_rebuild_ignores_autoindex_flag(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
) -> None:
    blueprints.setup("Person", autoindex=False)
    _seed(store, person())

    assert RebuildCoordinator(blueprints, store, indexer).rebuild("Person") == 1
    assert "Person-1" in engine


def test_rebuild_does_not_cascade(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
) -> None:
    resolver = MagicMock(return_value=[company()])
    blueprints.setup("Person")
    blueprints.setup(
        "Company", dependencies=[dependency("Person", when_changed=["name"], resolver=resolver)]
    )
    _seed(store, person())

    RebuildCoordinator(blueprints, store, indexer).rebuild("Person")

    resolver.assert_not_called()
    assert engine.count("Company") == 0


def test_rebuild_tags_documents_with_all_attributes(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
) -> None:
    blueprints.setup("Person")
    _seed(store, person(1, "Kogler", email="k@example.com"))

    RebuildCoordinator(blueprints, store, indexer).rebuild("Person")

    assert engine.get("Person-1").changed == {"id", "name", "email"}


def _vanishing(record: object) -> bool:
    if record["id"] == 2:
        raise RecordNotFound("Person 2 was deleted during the rebuild")
    return False


def test_records_vanishing_mid_rebuild_are_skipped(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    blueprints.setup("Person", ignore_if=_vanishing)
    _seed(store, person(1), person(2), person(3))

    with caplog.at_level("WARNING", logger="indexsync.rebuild"):
        result = RebuildCoordinator(blueprints, store, indexer).run("Person")

    assert (result.indexed, result.skipped) == (2, 1)
    assert "Person-2" not in engine
    assert "Person-2" in caplog.text


def test_abort_policy_reraises_missing_records(
    blueprints: BlueprintRegistry, indexer: Indexer, store: MemoryRecordStore
) -> None:
    blueprints.setup("Person", ignore_if=_vanishing)
    _seed(store, person(1), person(2), person(3))
    coordinator = RebuildCoordinator(blueprints, store, indexer, on_missing="abort")

    with pytest.raises(RecordNotFound):
        coordinator.rebuild("Person")


def test_rebuild_of_unknown_type_raises(
    blueprints: BlueprintRegistry, indexer: Indexer, store: MemoryRecordStore
) -> None:
    with pytest.raises(UnknownRecordType):
        RebuildCoordinator(blueprints, store, indexer).rebuild("Ghost")


def test_invalid_missing_policy_is_rejected(
    blueprints: BlueprintRegistry, indexer: Indexer, store: MemoryRecordStore
) -> None:
    with pytest.raises(ValueError):
        RebuildCoordinator(blueprints, store, indexer, on_missing="retry")  # type: ignore[arg-type]


def test_records_deleted_during_enumeration_are_skipped(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    def _delete_meier(record: object) -> bool:
        if record["id"] == 1:
            store.destroy(person(2))
        return False

    blueprints.setup("Person", ignore_if=_delete_meier)
    _seed(store, person(1), person(2, "Meier"), person(3))

    with caplog.at_level("WARNING", logger="indexsync.rebuild"):
        result = RebuildCoordinator(blueprints, store, indexer).run("Person")

    assert (result.indexed, result.skipped) == (2, 1)
    assert "Person-2" not in engine
    assert "Person-2" in caplog.text


def test_store_iterator_resumes_after_deleted_record(store: MemoryRecordStore) -> None:
    _seed(store, person(1), person(2), person(3))
    records = store.all_records_of("Person")

    assert next(records)["id"] == 1
    store.destroy(person(2))
    with pytest.raises(RecordNotFound) as excinfo:
        next(records)

    assert excinfo.value.identity == "Person-2"
    assert [record["id"] for record in records] == [3]


class _FlakyStore:
    """Store whose enumeration fails for the second record."""

    def __init__(self, store: MemoryRecordStore) -> None:
        self._store = store

    def all_records_of(self, type_name: str):
        yield person(1)
        raise RecordNotFound("Person 2 deleted concurrently")

    def snapshot_of(self, record):
        return None

    def primary_key_of(self, record):
        return self._store.primary_key_of(record)


def test_enumeration_errors_follow_skip_policy(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    indexer: Indexer,
    store: MemoryRecordStore,
) -> None:
    blueprints.setup("Person")

    result = RebuildCoordinator(blueprints, _FlakyStore(store), indexer).run("Person")

    assert (result.indexed, result.skipped) == (1, 1)
    assert "Person-1" in engine


def test_enumeration_errors_follow_abort_policy(
    blueprints: BlueprintRegistry, indexer: Indexer, store: MemoryRecordStore
) -> None:
    blueprints.setup("Person")
    coordinator = RebuildCoordinator(blueprints, _FlakyStore(store), indexer, on_missing="abort")

    with pytest.raises(RecordNotFound):
        coordinator.run("Person")
