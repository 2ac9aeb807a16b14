"""Record model and an in-memory record store wired to the commit hooks."""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field

from .errors import RecordNotFound
from .identity import TypeRegistry

if TYPE_CHECKING:
    from .hooks import HookRegistry

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500


class Record(BaseModel):
    """A mutable entity identified by its type name and primary key.

    Attributes:
        type_name: Name of the record type.
        attributes: Mapping of attribute names to current values.
    """

    type_name: str
    attributes: Dict[str, Any] = Field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.attributes[name]


class MemoryRecordStore:
    """Dict-backed record store that runs commit hooks after each write.

    ``save`` and ``destroy`` persist first and then invoke the registered
    hooks synchronously, so an indexing failure surfaces to the caller of the
    write just like an after-commit callback would.
    """

    def __init__(
        self,
        types: TypeRegistry,
        *,
        hooks: Optional["HookRegistry"] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """Initialize the store.

        Args:
            types: Registry describing each type's primary key attribute.
            hooks: Optional hook registry invoked after writes.
            page_size: Number of records fetched per page during enumeration.
        """
        self._types = types
        self._hooks = hooks
        self._page_size = max(1, page_size)
        self._rows: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._snapshots: Dict[Tuple[str, str], Optional[Dict[str, Any]]] = {}

    def attach(self, hooks: Optional["HookRegistry"]) -> None:
        """Attach (or detach with ``None``) the hook registry."""
        self._hooks = hooks

    def primary_key_of(self, record: Record) -> Any:
        """Return the record's primary key value."""
        attribute = self._types.get(record.type_name).primary_key
        return record.attributes.get(attribute)

    def snapshot_of(self, record: Record) -> Optional[Dict[str, Any]]:
        """Return the attributes persisted before the record's latest save."""
        return deepcopy(self._snapshots.get(self._key(record)))

    def save(self, record: Record) -> Record:
        """Persist the record, then run the create/update hook."""
        key = self._key(record)
        self._snapshots[key] = self._rows.get(key)
        self._rows[key] = deepcopy(record.attributes)
        if self._hooks is not None:
            self._hooks.on_create_or_update(record)
        return record

    def destroy(self, record: Record) -> None:
        """Delete the record, then run the destroy hook.

        Raises:
            RecordNotFound: If the record is not stored.
        """
        key = self._key(record)
        if self._rows.pop(key, None) is None:
            raise RecordNotFound(f"{record.type_name} {key[1]} is not stored.")
        self._snapshots.pop(key, None)
        if self._hooks is not None:
            self._hooks.on_destroy(record)

    def find(self, type_name: str, primary_key: Any) -> Record:
        """Return a fresh copy of a stored record.

        Raises:
            RecordNotFound: If no record is stored under the key.
        """
        row = self._rows.get((type_name, str(primary_key)))
        if row is None:
            raise RecordNotFound(f"{type_name} {primary_key} is not stored.")
        return Record(type_name=type_name, attributes=deepcopy(row))

    def all_records_of(self, type_name: str) -> Iterator[Record]:
        """Return an iterator over every stored record of a type.

        Keys are listed up front and walked one page at a time. A record
        deleted before it is reached makes ``next()`` raise ``RecordNotFound``;
        the iterator stays usable and resumes with the following key.
        """
        keys = [key for (name, key) in self._rows if name == type_name]
        return _RecordPages(self._rows, self._types, type_name, keys, self._page_size)

    def __len__(self) -> int:
        return len(self._rows)

    def _key(self, record: Record) -> Tuple[str, str]:
        primary_key = self.primary_key_of(record)
        if primary_key is None:
            raise ValueError(f"{record.type_name} record has no primary key.")
        return record.type_name, str(primary_key)


class _RecordPages:
    """Iterator over a fixed key list that reports vanished records."""

    def __init__(
        self,
        rows: Dict[Tuple[str, str], Dict[str, Any]],
        types: TypeRegistry,
        type_name: str,
        keys: List[str],
        page_size: int,
    ) -> None:
        self._rows = rows
        self._types = types
        self._type_name = type_name
        self._keys = keys
        self._page_size = page_size
        self._position = 0

    def __iter__(self) -> "_RecordPages":
        return self

    def __next__(self) -> Record:
        if self._position >= len(self._keys):
            raise StopIteration
        if self._position % self._page_size == 0:
            page = self._keys[self._position : self._position + self._page_size]
            LOGGER.debug("Fetching %s page of %d record(s)", self._type_name, len(page))
        key = self._keys[self._position]
        self._position += 1
        row = self._rows.get((self._type_name, key))
        if row is None:
            raise RecordNotFound(
                f"{self._type_name} {key} was deleted during enumeration.",
                identity=self._types.codec.encode(self._type_name, key),
            )
        return Record(type_name=self._type_name, attributes=deepcopy(row))


__all__ = ["DEFAULT_PAGE_SIZE", "MemoryRecordStore", "Record"]
