"""Merging of configuration sources into a validated model."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import IndexSyncConfig

ENV_PREFIX = "INDEXSYNC__"


def resolve_with_precedence(
    *,
    defaults: IndexSyncConfig,
    file_overrides: Optional[Mapping[str, Any]] = None,
    env_overrides: Optional[Mapping[str, Any]] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
) -> IndexSyncConfig:
    """Layer overrides onto defaults: file, then environment, then CLI.

    Keys may be nested mappings or dotted paths such as ``engine.backend``.

    Raises:
        ConfigError: If an override is malformed or the result fails validation.
    """
    merged = defaults.model_dump(mode="python")
    sources = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for name, source in sources:
        if source is not None:
            merged = _deep_merge(merged, _expand(source, source_name=name))

    try:
        return IndexSyncConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: IndexSyncConfig) -> Dict[str, str]:
    """Render every leaf setting as an ``INDEXSYNC__SECTION__KEY`` variable."""
    flat: Dict[str, str] = {}

    def _walk(path: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                _walk([*path, str(key)], child)
            return
        if isinstance(value, list):
            rendered = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            rendered = "null" if value is None else str(value)
        flat[ENV_PREFIX + "__".join(part.upper() for part in path)] = rendered

    _walk([], config.model_dump(mode="python"))
    return flat


def env_to_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Extract nested overrides from ``INDEXSYNC__`` environment variables.

    Values are parsed as YAML scalars so ``true`` or ``10`` keep their types.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        _assign(overrides, path, value, source_name="environment")
    return overrides


def _expand(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        _assign(result, key.split("."), value, source_name=source_name)
    return result


def _assign(target: dict[str, Any], path: list[str], value: Any, *, source_name: str) -> None:
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{source_name.capitalize()} override for {'.'.join(path)} "
                "conflicts with an existing value."
            )
        node = child
    leaf = path[-1]
    if isinstance(value, MappingABC):
        existing = node.get(leaf)
        nested = _expand(value, source_name=source_name)
        node[leaf] = _deep_merge(existing, nested) if isinstance(existing, dict) else nested
    else:
        node[leaf] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "env_to_overrides", "flatten_for_env", "resolve_with_precedence"]
