"""Configuration models describing indexsync settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IndexSyncBaseModel(BaseModel):
    """Shared configuration for indexsync settings models."""

    model_config = ConfigDict(extra="forbid")


class EngineSettings(IndexSyncBaseModel):
    """Indexing engine selection.

    Attributes:
        backend: Engine implementation to open.
        path: Storage directory for persistent backends.
        collection: Collection name used by the Chroma backend.
        embedding_function: Dotted path to an embedding function factory.
    """

    backend: Literal["memory", "chroma"] = "memory"
    path: Optional[str] = None
    collection: str = "records"
    embedding_function: Optional[str] = None


class IdentitySettings(IndexSyncBaseModel):
    """Document identity encoding.

    Attributes:
        separator: String placed between type name and primary key.
    """

    separator: str = "-"

    @field_validator("separator")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("separator must not be empty")
        return value


class RebuildSettings(IndexSyncBaseModel):
    """Full rebuild behavior.

    Attributes:
        on_missing: Whether a record vanishing mid-rebuild is skipped or aborts.
        page_size: Records fetched per page by stores that page.
    """

    on_missing: Literal["skip", "abort"] = "skip"
    page_size: int = Field(default=500, ge=1)


class LoggingSettings(IndexSyncBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(IndexSyncBaseModel):
    """CLI presentation defaults."""

    quiet_default: bool = False
    summary_default: bool = False


class AppSettings(IndexSyncBaseModel):
    """Dotted paths to the application objects the CLI wires together.

    Attributes:
        blueprints: Callable receiving a ``BlueprintRegistry`` to populate.
        types: Callable receiving a ``TypeRegistry`` to populate.
        store: Factory ``(config, types) -> RecordStore``.
    """

    blueprints: Optional[str] = None
    types: Optional[str] = None
    store: Optional[str] = None


class IndexSyncConfig(IndexSyncBaseModel):
    """Top-level configuration for indexsync."""

    engine: EngineSettings = Field(default_factory=EngineSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    rebuild: RebuildSettings = Field(default_factory=RebuildSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)
    app: AppSettings = Field(default_factory=AppSettings)


__all__ = [
    "IndexSyncBaseModel",
    "EngineSettings",
    "IdentitySettings",
    "RebuildSettings",
    "LoggingSettings",
    "CLIOptions",
    "AppSettings",
    "IndexSyncConfig",
]
