"""Keep a full-text search index in step with a mutable record store."""

from importlib import metadata as _metadata

from .blueprints import Blueprint, BlueprintRegistry, DependencyRule
from .decision import Decision, Indexer
from .dependencies import DependencyResolver
from .errors import (
    EngineError,
    EngineUnavailable,
    EngineWriteFailed,
    IndexSyncError,
    MalformedIdentity,
    RecordNotFound,
    ResolverFailure,
    UnknownRecordType,
)
from .hooks import CommitHooks, HookRegistry
from .identity import IdentityCodec, RecordType, TypeRegistry, decode, encode
from .rebuild import RebuildCoordinator, RebuildResult
from .records import MemoryRecordStore, Record
from .tracking import changed_attributes

__all__ = [
    "__version__",
    "Blueprint",
    "BlueprintRegistry",
    "CommitHooks",
    "Decision",
    "DependencyResolver",
    "DependencyRule",
    "EngineError",
    "EngineUnavailable",
    "EngineWriteFailed",
    "HookRegistry",
    "IdentityCodec",
    "IndexSyncError",
    "Indexer",
    "MalformedIdentity",
    "MemoryRecordStore",
    "RebuildCoordinator",
    "RebuildResult",
    "Record",
    "RecordNotFound",
    "RecordType",
    "ResolverFailure",
    "TypeRegistry",
    "UnknownRecordType",
    "changed_attributes",
    "decode",
    "encode",
]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version("indexsync")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + ["__version__"])
