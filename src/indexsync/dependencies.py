"""Resolution of dependent records affected by a change."""

from __future__ import annotations

import logging
from typing import AbstractSet, Any, List

from .blueprints import BlueprintRegistry
from .errors import ResolverFailure

LOGGER = logging.getLogger(__name__)


class DependencyResolver:
    """Collect the records that must be reindexed when a source record changes."""

    def __init__(self, blueprints: BlueprintRegistry) -> None:
        self._blueprints = blueprints

    def resolve(self, record: Any, changed: AbstractSet[str]) -> List[Any]:
        """Return the dependents of ``record`` for a set of changed attributes.

        Rules are evaluated in declaration order and their results are
        concatenated as returned. Dependents reached through several rules
        appear once per rule.

        Args:
            record: Source record that changed.
            changed: Names of the attributes that changed.

        Returns:
            list[Any]: Dependent records, possibly with duplicates.

        Raises:
            ResolverFailure: If any rule's resolver raises.
        """

        type_name = record.type_name
        dependents: List[Any] = []
        for rule in self._blueprints.dependencies_for(type_name, changed):
            try:
                found = list(rule.resolver(record) or ())
            except Exception as exc:
                raise ResolverFailure(
                    f"Dependency resolver for {type_name} "
                    f"(watching {', '.join(sorted(rule.when_changed))}) failed: {exc}"
                ) from exc
            LOGGER.debug(
                "%s change on %s resolved %d dependent(s)",
                ", ".join(sorted(changed)),
                type_name,
                len(found),
            )
            dependents.extend(found)
        return dependents


__all__ = ["DependencyResolver"]
