"""Chroma engine adapter tests with a mocked client."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from indexsync.blueprints import BlueprintRegistry
from indexsync.errors import EngineUnavailable, EngineWriteFailed
from indexsync.search.chroma import ChromaIndex

from .factories import person


@pytest.fixture
def mock_chroma_client():
    """Create a mock ChromaDB client and collection."""
    collection = MagicMock()
    collection.count = MagicMock(return_value=0)
    client = MagicMock()
    client.get_or_create_collection.return_value = collection
    return client, collection


@pytest.fixture
def chroma_index(tmp_path: Path, mock_chroma_client):
    client, collection = mock_chroma_client
    blueprints = BlueprintRegistry()
    blueprints.setup("Person", index=["name"])
    with patch(
        "indexsync.search.chroma.chromadb.PersistentClient", return_value=client
    ) as factory:
        index = ChromaIndex(tmp_path / "chroma", collection="people", blueprints=blueprints)
        index.initialize()
    factory.assert_called_once_with(path=str(tmp_path / "chroma"))
    return index, client, collection


def test_upsert_writes_document_and_metadata(chroma_index) -> None:
    index, _, collection = chroma_index

    index.upsert("Person-1", person(1, "Kogler", city="Wien"), {"name", "city"})

    collection.upsert.assert_called_once_with(
        ids=["Person-1"],
        documents=["Kogler"],
        metadatas=[{"type_name": "Person", "key": "1", "changed_attributes": "city,name"}],
    )


def test_remove_deletes_by_identity(chroma_index) -> None:
    index, _, collection = chroma_index

    index.remove("Person-1")

    collection.delete.assert_called_once_with(ids=["Person-1"])


def test_client_errors_become_engine_write_failures(chroma_index) -> None:
    index, _, collection = chroma_index
    collection.upsert.side_effect = RuntimeError("disk full")
    collection.delete.side_effect = RuntimeError("disk full")

    with pytest.raises(EngineWriteFailed):
        index.upsert("Person-1", person(), {"name"})
    with pytest.raises(EngineWriteFailed):
        index.remove("Person-1")


def test_count_by_type_queries_metadata(chroma_index) -> None:
    index, _, collection = chroma_index
    collection.get.return_value = {"ids": ["Person-1", "Person-2"]}

    assert index.count("Person") == 2
    collection.get.assert_called_once_with(where={"type_name": "Person"}, include=[])


def test_drop_deletes_collection(chroma_index) -> None:
    index, client, _ = chroma_index

    index.drop()

    client.delete_collection.assert_called_once_with(name="people")


def test_unreachable_client_raises_engine_unavailable() -> None:
    with patch(
        "indexsync.search.chroma.chromadb.EphemeralClient",
        side_effect=RuntimeError("no backend"),
    ):
        index = ChromaIndex()
        with pytest.raises(EngineUnavailable):
            index.initialize()
