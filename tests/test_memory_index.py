"""In-memory engine tests."""

from __future__ import annotations

import threading
from typing import Callable

import pytest

from indexsync.blueprints import BlueprintRegistry
from indexsync.errors import UnknownRecordType
from indexsync.hooks import HookRegistry
from indexsync.records import MemoryRecordStore
from indexsync.search import MemoryIndex, normalize_search_text, record_text

from .factories import company, person


def test_search_hit_exposes_typed_key_and_indexed_object(
    blueprints: BlueprintRegistry,
    engine: MemoryIndex,
    store: MemoryRecordStore,
    wire: Callable[[], HookRegistry],
) -> None:
    blueprints.setup("Person", index=["name"])
    wire()
    source = person(1, "Kogler")
    store.save(source)

    hit = engine.search("kogler")[0]

    assert hit.identity == "Person-1"
    assert hit.key == 1
    assert hit.indexed_object().attributes == source.attributes


def test_only_indexed_attributes_are_searchable(
    blueprints: BlueprintRegistry, engine: MemoryIndex
) -> None:
    blueprints.setup("Person", index=["name"])

    engine.upsert("Person-1", person(1, "Kogler", city="Zürich"), {"name"})

    assert len(engine.search("Kogler")) == 1
    assert engine.search("Zürich") == []


def test_all_text_attributes_are_indexed_without_declaration(engine: MemoryIndex) -> None:
    engine.upsert("Company-7", company(7, "Acme", city="Bern"), {"name"})

    assert len(engine.search("acme bern")) == 1
    assert engine.search("acme zurich") == []


def test_search_filters_by_type(engine: MemoryIndex) -> None:
    engine.upsert("Person-1", person(1, "Acme"), {"name"})
    engine.upsert("Company-7", company(7, "Acme"), {"name"})

    hits = engine.search("acme", type_name="Company")

    assert [hit.identity for hit in hits] == ["Company-7"]


def test_remove_of_absent_identity_is_ignored(engine: MemoryIndex) -> None:
    engine.remove("Person-404")

    assert len(engine) == 0


def test_upsert_replaces_existing_document(engine: MemoryIndex) -> None:
    engine.upsert("Person-1", person(1, "Kogler"), {"name"})
    engine.upsert("Person-1", person(1, "Meier"), {"name"})

    assert engine.count() == 1
    assert engine.search("Kogler") == []
    assert len(engine.search("Meier")) == 1


def test_hits_without_type_registry_cannot_load_records() -> None:
    engine = MemoryIndex()
    engine.upsert("Person-1", person(), {"name"})

    hit = engine.search("Kogler")[0]

    assert hit.key == "1"
    with pytest.raises(UnknownRecordType):
        hit.indexed_object()


def test_normalize_search_text_collapses_whitespace_and_limits() -> None:
    assert normalize_search_text("  a\x00b\n\n c  ") == "a b c"
    assert normalize_search_text("abcdef", limit=3) == "abc"


def test_record_text_skips_missing_values() -> None:
    record = person(1, "Kogler", nickname=None)

    assert record_text(record, ["name", "nickname", "missing"]) == "Kogler"


@pytest.mark.parametrize(
    "read",
    [
        lambda index: index.get("Person-1"),
        lambda index: index.count(),
        lambda index: "Person-1" in index,
        lambda index: len(index),
    ],
)
def test_reads_wait_for_writers_holding_the_lock(engine: MemoryIndex, read) -> None:
    engine.upsert("Person-1", person(), {"name"})
    finished = threading.Event()

    def _reader() -> None:
        read(engine)
        finished.set()

    engine._lock.acquire()
    try:
        thread = threading.Thread(target=_reader)
        thread.start()
        assert not finished.wait(timeout=0.1)
    finally:
        engine._lock.release()
    thread.join(timeout=2)
    assert finished.is_set()
