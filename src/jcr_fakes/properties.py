"""Named single- or multi-valued properties."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, BinaryIO, Iterable

from jcr_fakes.errors import FormatError, PreconditionError, require_not_blank
from jcr_fakes.items import Item
from jcr_fakes.paths import ROOT_PATH, check_name, join_path
from jcr_fakes.types import PropertyType
from jcr_fakes.values import Binary, Value

if TYPE_CHECKING:
    from jcr_fakes.nodes import Node


def to_values(objects: Iterable[Any], type: PropertyType | None = None) -> list[Value]:
    """Turn Python objects into values, dropping nulls."""
    values = (Value.of(obj, type) for obj in objects)
    return [value for value in values if not value.is_null]


class Property(Item):
    """A named property holding one value, or an ordered list of values.

    A property reads like its first value: ``get_string()``, ``get_long()``
    and friends delegate to it, so the usual conversion errors apply.
    """

    def __init__(self, name: str, values: Iterable[Value], multiple: bool | None = None) -> None:
        super().__init__(check_name(require_not_blank(name, "Property name must not be blank")))
        self._values: list[Value] = []
        self._multiple = False
        self._assign(list(values), multiple)

    @classmethod
    def of(cls, name: str, *objects: Any, type: PropertyType | None = None) -> Property:
        """Create a property from one or more objects.

        One object gives a single-valued property, more give a multi-valued one.
        """
        return cls(name, to_values(objects, type))

    @classmethod
    def of_values(cls, name: str, objects: Iterable[Any], type: PropertyType | None = None) -> Property:
        """Create a multi-valued property, even from a single object."""
        return cls(name, to_values(objects, type), multiple=True)

    def _assign(self, values: list[Value], multiple: bool | None) -> None:
        if not values:
            raise PreconditionError(f"Property {self._name} needs at least one value")
        if multiple is None:
            multiple = len(values) > 1
        if not multiple and len(values) > 1:
            raise PreconditionError(f"Single-valued property {self._name} got {len(values)} values")
        self._values = values
        self._multiple = multiple

    # --- Values ---

    def set_value(self, value: Any, type: PropertyType | None = None) -> None:
        """Replace the values with a single value.

        A null value removes the property from its node.
        """
        values = to_values([value], type)
        if not values:
            self.remove()
            return
        self._assign(values, False)

    def set_values(self, objects: Iterable[Any], type: PropertyType | None = None) -> None:
        """Replace the values, making the property multi-valued.

        Null entries are dropped; if nothing is left the property is removed.
        """
        values = to_values(objects, type)
        if not values:
            self.remove()
            return
        self._assign(values, True)

    def is_multiple(self) -> bool:
        return self._multiple

    def get_value(self) -> Value | None:
        """Return the first value, or None once the property was removed."""
        return self._values[0] if self._values else None

    def get_values(self) -> list[Value]:
        return list(self._values)

    @property
    def type(self) -> PropertyType:
        return self._values[0].type if self._values else PropertyType.UNDEFINED

    def _first(self) -> Value:
        return self._values[0] if self._values else Value.null()

    def get_string(self) -> str:
        return self._first().get_string()

    def get_boolean(self) -> bool:
        return self._first().get_boolean()

    def get_long(self) -> int:
        return self._first().get_long()

    def get_double(self) -> float:
        return self._first().get_double()

    def get_decimal(self) -> Decimal:
        return self._first().get_decimal()

    def get_date(self) -> datetime | None:
        return self._first().get_date()

    def get_binary(self) -> Binary | None:
        return self._first().get_binary()

    def get_stream(self) -> BinaryIO | None:
        return self._first().get_stream()

    def get_length(self) -> int:
        """Return the byte size of a binary value, or the length of the string form."""
        binary = self._first().get_binary() if self.type is PropertyType.BINARY else None
        if binary is not None:
            return binary.size
        return len(self.get_string())

    def get_node(self) -> Node | None:
        """Return the node a REFERENCE, WEAKREFERENCE or PATH property points at.

        Raises:
            FormatError: If the property has another type.
        """
        if not self.type.is_reference:
            raise FormatError(f"Property {self.path} of type {self.type.value} does not point at a node")
        target = self.get_string()
        if self.type is PropertyType.PATH:
            if target.startswith("/"):
                session = self.session
                return session.get_node(target) if session is not None else None
            return self._parent.get_node(target) if self._parent is not None else None
        session = self.session
        return session.get_node_by_identifier(target) if session is not None else None

    # --- Item ---

    @property
    def path(self) -> str:
        parent_path = self._parent.path if self._parent is not None else ROOT_PATH
        return join_path(parent_path, self._name)

    def remove(self) -> None:
        """Detach this property from its node and the session index."""
        if self._parent is not None:
            self._parent._detach_property(self)

    def __str__(self) -> str:
        return f"{self._name}:" + ";".join(str(value) for value in self._values)
