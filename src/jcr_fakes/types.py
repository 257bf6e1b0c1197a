"""Property types, node types and well-known repository names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from jcr_fakes.errors import PreconditionError

# Well-known item names
JCR_PRIMARY_TYPE = "jcr:primaryType"
JCR_MIXIN_TYPES = "jcr:mixinTypes"
JCR_UUID = "jcr:uuid"

# Well-known node type names
NT_BASE = "nt:base"
NT_UNSTRUCTURED = "nt:unstructured"
REP_ROOT = "rep:root"
MIX_REFERENCEABLE = "mix:referenceable"

ROOT_IDENTIFIER = "cafebabe-cafe-babe-cafe-babecafebabe"
UNTITLED = "untitled"

# Query languages
JCR_SQL2 = "JCR-SQL2"
XPATH = "xpath"
SQL = "sql"


class PropertyType(Enum):
    """Types a property value can have."""

    STRING = "String"
    BINARY = "Binary"
    LONG = "Long"
    DOUBLE = "Double"
    DATE = "Date"
    BOOLEAN = "Boolean"
    NAME = "Name"
    PATH = "Path"
    REFERENCE = "Reference"
    WEAKREFERENCE = "WeakReference"
    URI = "URI"
    DECIMAL = "Decimal"
    UNDEFINED = "undefined"

    @property
    def code(self) -> int:
        """Return the numeric code the repository API uses for this type."""
        return _TYPE_CODES[self]

    @property
    def is_textual(self) -> bool:
        """Return True if values of this type are stored as text."""
        return self in _TEXTUAL_TYPES

    @property
    def is_reference(self) -> bool:
        """Return True if values of this type point at a node."""
        return self in (PropertyType.REFERENCE, PropertyType.WEAKREFERENCE, PropertyType.PATH)

    @classmethod
    def from_name(cls, name: str) -> PropertyType:
        """Look up a type by its name, ignoring case.

        Raises:
            PreconditionError: If the name is not a known type name.
        """
        try:
            return PROPERTY_TYPE_NAMES[name.strip().lower()]
        except KeyError:
            raise PreconditionError(f"Unknown property type name: {name!r}") from None


_TYPE_CODES = {
    PropertyType.UNDEFINED: 0,
    PropertyType.STRING: 1,
    PropertyType.BINARY: 2,
    PropertyType.LONG: 3,
    PropertyType.DOUBLE: 4,
    PropertyType.DATE: 5,
    PropertyType.BOOLEAN: 6,
    PropertyType.NAME: 7,
    PropertyType.PATH: 8,
    PropertyType.REFERENCE: 9,
    PropertyType.WEAKREFERENCE: 10,
    PropertyType.URI: 11,
    PropertyType.DECIMAL: 12,
}

_TEXTUAL_TYPES = frozenset(
    {
        PropertyType.STRING,
        PropertyType.NAME,
        PropertyType.PATH,
        PropertyType.REFERENCE,
        PropertyType.WEAKREFERENCE,
        PropertyType.URI,
    }
)

# Map lower-cased type names to types
PROPERTY_TYPE_NAMES: dict[str, PropertyType] = {pt.value.lower(): pt for pt in PropertyType}


@dataclass(frozen=True)
class NodeType:
    """A primary or mixin node type, identified by its name."""

    name: str
    is_mixin: bool = False

    def is_node_type(self, name: str) -> bool:
        """Return True if this type has the given name."""
        return self.name == name

    def __str__(self) -> str:
        return self.name
