"""Runtime wiring shared by CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from rich.logging import RichHandler

from indexsync.blueprints import BlueprintRegistry
from indexsync.config import IndexSyncConfig, import_object
from indexsync.decision import Indexer
from indexsync.hooks import HookRegistry
from indexsync.identity import IdentityCodec, TypeRegistry
from indexsync.ports import IndexingEngine, RecordStore
from indexsync.rebuild import RebuildCoordinator
from indexsync.records import MemoryRecordStore
from indexsync.search import open_engine

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class Runtime:
    """Collaborators assembled from configuration.

    Attributes:
        config: Effective configuration.
        types: Registry of record types used to decode identities.
        blueprints: Registry of per-type indexing configuration.
        store: Record store holding the indexed records.
        engine: Indexing engine receiving writes.
        indexer: Policy engine applying blueprints.
        hooks: Commit hooks attached to autoindexed types.
        rebuilder: Coordinator for full rebuilds.
    """

    config: IndexSyncConfig
    types: TypeRegistry
    blueprints: BlueprintRegistry
    store: RecordStore
    engine: IndexingEngine
    indexer: Indexer
    hooks: HookRegistry
    rebuilder: RebuildCoordinator


def configure_logging(level: str) -> None:
    """Route log records through Rich at the configured level."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        force=True,
    )


def build_runtime(config: IndexSyncConfig) -> Runtime:
    """Assemble registries, store, engine, and services from ``config``.

    ``app.types`` and ``app.blueprints`` name callables that populate the
    registries; ``app.store`` names a factory ``(config, types)`` returning the
    record store. Blueprinted types missing from the type registry are
    registered with default settings.

    Raises:
        ConfigError: If a configured dotted path cannot be imported.
        EngineUnavailable: If the engine cannot be opened.
    """

    codec = IdentityCodec(config.identity.separator)
    types = TypeRegistry(codec)
    blueprints = BlueprintRegistry()
    if config.app.types:
        import_object(config.app.types)(types)
    if config.app.blueprints:
        import_object(config.app.blueprints)(blueprints)
    for blueprint in blueprints:
        if blueprint.type_name not in types:
            types.register(blueprint.type_name)

    store: Any
    if config.app.store:
        store = import_object(config.app.store)(config, types)
    else:
        store = MemoryRecordStore(types, page_size=config.rebuild.page_size)

    engine = open_engine(config.engine, blueprints, types=types, separator=codec.separator)
    indexer = Indexer(blueprints, engine, store, codec=codec)
    hooks = HookRegistry(indexer, store)
    hooks.register(blueprints)
    attach = getattr(store, "attach", None)
    if callable(attach):
        attach(hooks)
    rebuilder = RebuildCoordinator(
        blueprints, store, indexer, on_missing=config.rebuild.on_missing
    )
    LOGGER.debug("Runtime ready with %d blueprint(s)", len(blueprints))
    return Runtime(
        config=config,
        types=types,
        blueprints=blueprints,
        store=store,
        engine=engine,
        indexer=indexer,
        hooks=hooks,
        rebuilder=rebuilder,
    )


__all__ = ["Runtime", "build_runtime", "configure_logging"]
