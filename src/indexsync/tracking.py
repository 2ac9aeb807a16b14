"""Attribute change detection between persisted snapshots and records."""

from __future__ import annotations

from typing import Any, FrozenSet, Mapping, Optional

_MISSING = object()


def changed_attributes(
    prior_snapshot: Optional[Mapping[str, Any]],
    current: Mapping[str, Any] | Any,
) -> FrozenSet[str]:
    """Return the names of attributes that differ from the prior snapshot.

    Args:
        prior_snapshot: Attribute values as last persisted, or ``None`` for a
            record that was never persisted.
        current: Current attribute mapping, or an object exposing one through
            an ``attributes`` property.

    Returns:
        frozenset[str]: Changed attribute names. An empty set means the save
        was a no-op and no indexing work is needed.
    """

    prior = prior_snapshot or {}
    values = current if isinstance(current, Mapping) else current.attributes
    changed = set()
    for name in set(prior) | set(values):
        before = prior.get(name, _MISSING)
        after = values.get(name, _MISSING)
        if before is _MISSING and after is None:
            continue
        if after is _MISSING and before is None:
            continue
        if before != after:
            changed.add(name)
    return frozenset(changed)


__all__ = ["changed_attributes"]
