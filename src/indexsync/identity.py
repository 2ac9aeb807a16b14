"""Document identity encoding and the registry of indexable record types.

A document identity correlates a document stored by the indexing engine with
the record it was built from. Identities have the form ``<type><sep><key>``
(``Person-1`` with the default separator). Type names must not contain the
separator; keys may, because decoding splits on the first occurrence only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from .errors import MalformedIdentity, UnknownRecordType

DEFAULT_SEPARATOR = "-"


class IdentityCodec:
    """Encode and decode document identities with a fixed separator."""

    def __init__(self, separator: str = DEFAULT_SEPARATOR) -> None:
        """Initialize the codec.

        Args:
            separator: Non-empty string placed between type name and key.

        Raises:
            ValueError: If the separator is empty.
        """
        if not separator:
            raise ValueError("Identity separator must not be empty.")
        self._separator = separator

    @property
    def separator(self) -> str:
        """Return the separator placed between type name and key."""
        return self._separator

    def encode(self, type_name: str, primary_key: Any) -> str:
        """Return the document identity for a record.

        Args:
            type_name: Name of the record type.
            primary_key: Primary key value; rendered with ``str``.

        Returns:
            str: Identity string correlating the document to the record.

        Raises:
            MalformedIdentity: If the type name is empty or contains the
                separator, or the key renders to an empty string.
        """
        if not type_name:
            raise MalformedIdentity("Type name must not be empty.")
        if self._separator in type_name:
            raise MalformedIdentity(
                f"Type name {type_name!r} contains the identity separator {self._separator!r}."
            )
        key = "" if primary_key is None else str(primary_key)
        if not key:
            raise MalformedIdentity(f"Record of type {type_name!r} has no primary key.")
        return f"{type_name}{self._separator}{key}"

    def decode(
        self,
        identity: str,
        key_type: Callable[[str], Any] = str,
    ) -> Tuple[str, Any]:
        """Split an identity into its type name and key.

        Args:
            identity: Identity string produced by :meth:`encode`.
            key_type: Callable converting the key text, e.g. ``int``.

        Returns:
            tuple[str, Any]: Type name and converted key.

        Raises:
            MalformedIdentity: If the separator is missing, either part is
                empty, or ``key_type`` rejects the key.
        """
        type_name, separator, key = identity.partition(self._separator)
        if not separator or not type_name or not key:
            raise MalformedIdentity(f"Cannot decode document identity {identity!r}.")
        try:
            return type_name, key_type(key)
        except (TypeError, ValueError) as exc:
            label = getattr(key_type, "__name__", repr(key_type))
            raise MalformedIdentity(
                f"Key {key!r} in identity {identity!r} is not a valid {label}."
            ) from exc


_DEFAULT_CODEC = IdentityCodec()


def encode(type_name: str, primary_key: Any) -> str:
    """Encode an identity with the default separator."""
    return _DEFAULT_CODEC.encode(type_name, primary_key)


def decode(identity: str, key_type: Callable[[str], Any] = str) -> Tuple[str, Any]:
    """Decode an identity with the default separator."""
    return _DEFAULT_CODEC.decode(identity, key_type)


@dataclass(frozen=True, slots=True)
class RecordType:
    """Registration describing how to rebuild a record from its identity.

    Attributes:
        name: Type name used in document identities.
        primary_key: Attribute holding the record's primary key.
        key_type: Callable converting decoded key text to the key's type.
        finder: Optional loader returning the record for a typed key.
    """

    name: str
    primary_key: str = "id"
    key_type: Callable[[str], Any] = str
    finder: Optional[Callable[[Any], Any]] = None


class TypeRegistry:
    """Explicit mapping from type names to record type registrations."""

    def __init__(self, codec: IdentityCodec | None = None) -> None:
        self._codec = codec or _DEFAULT_CODEC
        self._types: Dict[str, RecordType] = {}

    @property
    def codec(self) -> IdentityCodec:
        return self._codec

    def register(
        self,
        name: str,
        *,
        primary_key: str = "id",
        key_type: Callable[[str], Any] = str,
        finder: Optional[Callable[[Any], Any]] = None,
    ) -> RecordType:
        """Register (or replace) a record type.

        Raises:
            MalformedIdentity: If the name could not appear in an identity.
        """
        if not name or self._codec.separator in name:
            raise MalformedIdentity(
                f"Type name {name!r} cannot be used in document identities."
            )
        record_type = RecordType(
            name=name, primary_key=primary_key, key_type=key_type, finder=finder
        )
        self._types[name] = record_type
        return record_type

    def get(self, name: str) -> RecordType:
        try:
            return self._types[name]
        except KeyError as exc:
            raise UnknownRecordType(f"No record type registered as {name!r}.") from exc

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def resolve(self, identity: str) -> Tuple[str, Any]:
        """Decode an identity and convert its key with the registered key type.

        Raises:
            MalformedIdentity: If the identity cannot be decoded.
            UnknownRecordType: If the decoded type is not registered.
        """
        type_name, _ = self._codec.decode(identity)
        record_type = self.get(type_name)
        return self._codec.decode(identity, record_type.key_type)

    def load(self, identity: str) -> Any:
        """Return the record an identity points at.

        Raises:
            UnknownRecordType: If the type is unknown or has no finder.
        """
        type_name, key = self.resolve(identity)
        record_type = self.get(type_name)
        if record_type.finder is None:
            raise UnknownRecordType(f"Record type {type_name!r} has no finder registered.")
        return record_type.finder(key)


__all__ = [
    "DEFAULT_SEPARATOR",
    "IdentityCodec",
    "RecordType",
    "TypeRegistry",
    "encode",
    "decode",
]
