"""Import application objects referenced by dotted paths in configuration."""

from __future__ import annotations

import importlib
from typing import Any

from .exceptions import ConfigError


def import_object(path: str) -> Any:
    """Return the object named by ``package.module:attr`` or ``package.module.attr``.

    Raises:
        ConfigError: If the module cannot be imported or lacks the attribute.
    """
    module_name, sep, attribute = path.partition(":")
    if not sep:
        module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        raise ConfigError(f"{path!r} is not a dotted object path.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Cannot import module {module_name!r}: {exc}") from exc
    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ConfigError(f"{module_name!r} has no attribute {attribute!r}.") from exc
    return target


__all__ = ["import_object"]
