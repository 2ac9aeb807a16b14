"""Blueprint registry tests."""

from __future__ import annotations

import pytest

from indexsync.blueprints import BlueprintRegistry, dependency
from indexsync.errors import UnknownRecordType

from .factories import person


def test_setup_defaults_to_autoindex_without_exclusion() -> None:
    registry = BlueprintRegistry()

    blueprint = registry.setup("Person", index=["name"])

    assert blueprint.autoindex is True
    assert blueprint.indexed_attributes == ("name",)
    assert blueprint.excludes(person()) is False
    assert registry.blueprint_for("Person") is blueprint


def test_setup_replaces_existing_blueprint() -> None:
    registry = BlueprintRegistry()
    registry.setup("Person")

    registry.setup("Person", autoindex=False)

    assert len(registry) == 1
    assert registry.blueprint_for("Person").autoindex is False


def test_exclusion_predicate_sees_record() -> None:
    registry = BlueprintRegistry()
    blueprint = registry.setup("Person", ignore_if=lambda record: record["name"] == "Kogler")

    assert blueprint.excludes(person(name="Kogler")) is True
    assert blueprint.excludes(person(name="Meier")) is False


def test_blueprint_for_unknown_type_raises() -> None:
    with pytest.raises(UnknownRecordType):
        BlueprintRegistry().blueprint_for("Ghost")


def test_dependencies_for_filters_by_source_and_changes_in_declaration_order() -> None:
    registry = BlueprintRegistry()
    by_name = dependency("Person", when_changed=["name"], resolver=lambda record: [])
    by_email = dependency("Person", when_changed="email", resolver=lambda record: [])
    by_title = dependency("Company", when_changed=["title"], resolver=lambda record: [])
    registry.setup("Company", dependencies=[by_name])
    registry.setup("Invoice", dependencies=[by_title, by_email])

    assert registry.dependencies_for("Person") == [by_name, by_email]
    assert registry.dependencies_for("Person", {"email", "phone"}) == [by_email]
    assert registry.dependencies_for("Person", {"phone"}) == []
    assert by_email.when_changed == frozenset({"email"})
