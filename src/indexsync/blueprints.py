"""Per-type indexing configuration ("blueprints") and dependency rules."""

from __future__ import annotations

from typing import AbstractSet, Any, Callable, Dict, Iterable, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import UnknownRecordType

Predicate = Callable[[Any], bool]
Resolver = Callable[[Any], Iterable[Any]]


class BlueprintModel(BaseModel):
    """Shared configuration for blueprint models."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")


class DependencyRule(BlueprintModel):
    """Declares that changes on a source type require reindexing other records.

    Attributes:
        source_type: Type whose changes trigger the rule.
        when_changed: Attribute names of the source type that are watched.
        resolver: Callable returning the dependent records for a source record.
    """

    source_type: str
    when_changed: frozenset[str]
    resolver: Resolver

    @field_validator("when_changed", mode="before")
    @classmethod
    def _coerce_names(cls, value: Any) -> frozenset[str]:
        if isinstance(value, str):
            return frozenset({value})
        return frozenset(str(name) for name in value)

    def fires_for(self, changed: AbstractSet[str]) -> bool:
        """Return True when ``changed`` intersects the watched attributes."""
        return not self.when_changed.isdisjoint(changed)


class Blueprint(BlueprintModel):
    """Indexing configuration for one record type.

    Attributes:
        type_name: Record type the blueprint applies to.
        autoindex: Whether commit hooks keep the index in step automatically.
        indexed_attributes: Attributes whose text is indexed; empty means all
            string-valued attributes.
        ignore_if: Optional predicate; records it accepts are kept out of the
            index.
        dependencies: Rules declared by this type on the types it derives
            from.
    """

    type_name: str
    autoindex: bool = True
    indexed_attributes: tuple[str, ...] = ()
    ignore_if: Optional[Predicate] = None
    dependencies: tuple[DependencyRule, ...] = Field(default_factory=tuple)

    def excludes(self, record: Any) -> bool:
        """Return True when the exclusion predicate rejects ``record``."""
        if self.ignore_if is None:
            return False
        return bool(self.ignore_if(record))


def dependency(
    source_type: str,
    *,
    when_changed: Iterable[str] | str,
    resolver: Resolver,
) -> DependencyRule:
    """Build a dependency rule for use in :meth:`BlueprintRegistry.setup`."""
    return DependencyRule(source_type=source_type, when_changed=when_changed, resolver=resolver)


class BlueprintRegistry:
    """Lookup of blueprints by type name, in declaration order."""

    def __init__(self) -> None:
        self._blueprints: Dict[str, Blueprint] = {}

    def setup(
        self,
        type_name: str,
        *,
        autoindex: bool = True,
        index: Iterable[str] = (),
        ignore_if: Optional[Predicate] = None,
        dependencies: Iterable[DependencyRule] = (),
    ) -> Blueprint:
        """Declare (or replace) the blueprint for a type.

        Args:
            type_name: Record type the blueprint applies to.
            autoindex: Whether commit hooks should be registered for the type.
            index: Attributes to index.
            ignore_if: Exclusion predicate evaluated against a record.
            dependencies: Rules triggering reindexing of this type's records.

        Returns:
            Blueprint: The stored blueprint.
        """
        blueprint = Blueprint(
            type_name=type_name,
            autoindex=autoindex,
            indexed_attributes=tuple(index),
            ignore_if=ignore_if,
            dependencies=tuple(dependencies),
        )
        return self.add(blueprint)

    def add(self, blueprint: Blueprint) -> Blueprint:
        # Replacing keeps the original declaration position.
        self._blueprints[blueprint.type_name] = blueprint
        return blueprint

    def get(self, type_name: str) -> Optional[Blueprint]:
        return self._blueprints.get(type_name)

    def blueprint_for(self, type_name: str) -> Blueprint:
        """Return the blueprint for a type.

        Raises:
            UnknownRecordType: If no blueprint is declared for the type.
        """
        blueprint = self._blueprints.get(type_name)
        if blueprint is None:
            raise UnknownRecordType(f"No blueprint configured for {type_name!r}.")
        return blueprint

    def dependencies_for(
        self,
        type_name: str,
        changed: AbstractSet[str] | None = None,
    ) -> List[DependencyRule]:
        """Return rules sourced on ``type_name``, optionally filtered by changes.

        Args:
            type_name: Source record type.
            changed: When given, only rules watching one of these attributes
                are returned.

        Returns:
            list[DependencyRule]: Matching rules in declaration order.
        """
        rules: List[DependencyRule] = []
        for blueprint in self._blueprints.values():
            for rule in blueprint.dependencies:
                if rule.source_type != type_name:
                    continue
                if changed is not None and not rule.fires_for(changed):
                    continue
                rules.append(rule)
        return rules

    def clear(self) -> None:
        self._blueprints.clear()

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._blueprints

    def __iter__(self) -> Iterator[Blueprint]:
        return iter(list(self._blueprints.values()))

    def __len__(self) -> int:
        return len(self._blueprints)


__all__ = [
    "Blueprint",
    "BlueprintRegistry",
    "DependencyRule",
    "Predicate",
    "Resolver",
    "dependency",
]
