"""Helpers for opening and dropping the configured indexing engine."""

from __future__ import annotations

from typing import Any, Optional

from indexsync.blueprints import BlueprintRegistry
from indexsync.config.loader import import_object
from indexsync.config.models import EngineSettings
from indexsync.identity import TypeRegistry
from indexsync.ports import IndexingEngine

from .memory import MemoryIndex


def open_engine(
    settings: EngineSettings,
    blueprints: BlueprintRegistry,
    *,
    types: Optional[TypeRegistry] = None,
    separator: str = "-",
) -> IndexingEngine:
    """Return an initialized engine for ``settings.backend``.

    Args:
        settings: Engine section of the configuration.
        blueprints: Registry supplying indexed attributes per type.
        types: Registry used by in-memory search hits to load records.
        separator: Identity separator, used by Chroma to split keys.

    Returns:
        IndexingEngine: Engine ready to receive upserts and removals.

    Raises:
        EngineUnavailable: If the backend cannot be opened.
        ConfigError: If the embedding function path cannot be imported.
    """

    if settings.backend == "memory":
        return MemoryIndex(blueprints, types=types)

    from .chroma import ChromaIndex

    index = ChromaIndex(
        settings.path,
        collection=settings.collection,
        blueprints=blueprints,
        embedding_function=_embedding_function(settings),
        separator=separator,
    )
    index.initialize()
    return index


def drop_index(settings: EngineSettings) -> None:
    """Delete the configured collection; a no-op for the memory backend.

    Raises:
        EngineUnavailable: If the backend cannot be opened.
        EngineWriteFailed: If the collection cannot be deleted.
    """

    if settings.backend != "chroma":
        return

    from .chroma import ChromaIndex

    ChromaIndex(
        settings.path,
        collection=settings.collection,
        embedding_function=_embedding_function(settings),
    ).drop()


def _embedding_function(settings: EngineSettings) -> Any | None:
    if not settings.embedding_function:
        return None
    factory = import_object(settings.embedding_function)
    return factory() if isinstance(factory, type) else factory


__all__ = ["drop_index", "open_engine"]
