"""Typed values and the conversion rules between them.

A Value holds exactly one payload of its declared type. Conversions are
computed on read by the ``get_*`` accessors and never change the value:

    >>> Value.of("5.5").get_long()
    6
    >>> Value.of(1.25).get_long()
    1
    >>> Value.of(True).get_date()
    Traceback (most recent call last):
        ...
    jcr_fakes.errors.FormatError: Cannot convert Boolean value 'true' to Date

Known gap: a BINARY value read as long, double, decimal or date yields the
zero value of the requested type instead of raising FormatError.
"""

from __future__ import annotations

import io
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any, BinaryIO

from jcr_fakes.errors import FormatError, PreconditionError, require_not_blank, require_not_none
from jcr_fakes.types import PropertyType

if TYPE_CHECKING:
    from jcr_fakes.nodes import Node

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_ISO8601_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}(Z|[+-]\d{2}:\d{2})$"
)

# Spellings written by format_double for values without a numeric form
_SPECIAL_DOUBLES = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}


# --- Dates ---


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_iso8601(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDThh:mm:ss.SSS`` plus zone designator.

    Naive datetimes are taken to be UTC, which is written as ``Z``.
    """
    text = _aware(value).isoformat(timespec="milliseconds")
    if text.endswith("+00:00"):
        return text[:-6] + "Z"
    return text


def parse_iso8601(text: str) -> datetime | None:
    """Parse the format written by format_iso8601, or return None."""
    if not _ISO8601_PATTERN.match(text):
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def to_epoch_millis(value: datetime) -> int:
    """Return the milliseconds between the epoch and value."""
    return (_aware(value) - EPOCH) // timedelta(milliseconds=1)


def from_epoch_millis(millis: int) -> datetime:
    """Return the UTC datetime that lies millis after the epoch."""
    try:
        return EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        raise FormatError(f"Epoch milliseconds out of range: {millis}") from None


# --- Numbers ---


def _parse_long(text: str) -> int:
    """Parse numeric text, rounding half up when it has a fraction."""
    if not _NUMBER_PATTERN.match(text):
        raise FormatError(f"Cannot convert {text!r} to Long")
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return math.floor(float(text) + 0.5)
    except OverflowError:
        raise FormatError(f"Cannot convert {text!r} to Long") from None


def _parse_double(text: str) -> float:
    if text in _SPECIAL_DOUBLES:
        return _SPECIAL_DOUBLES[text]
    if not _NUMBER_PATTERN.match(text):
        raise FormatError(f"Cannot convert {text!r} to Double")
    return float(text)


def _parse_decimal(text: str) -> Decimal:
    if text in _SPECIAL_DOUBLES:
        return Decimal(text)
    if not _NUMBER_PATTERN.match(text):
        raise FormatError(f"Cannot convert {text!r} to Decimal")
    return Decimal(text)


def _parse_date(text: str) -> datetime:
    if _NUMBER_PATTERN.match(text):
        return from_epoch_millis(_parse_long(text))
    parsed = parse_iso8601(text)
    if parsed is None:
        raise FormatError(f"Cannot convert {text!r} to Date")
    return parsed


def format_double(value: float) -> str:
    """Return the canonical text of a double."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return repr(value)


def _truncate(value: float) -> int:
    if math.isnan(value) or math.isinf(value):
        raise FormatError(f"Cannot convert Double value {format_double(value)} to Long")
    return int(value)


# --- Binary ---


@dataclass(frozen=True)
class Binary:
    """An immutable block of bytes stored in a BINARY value."""

    data: bytes

    @classmethod
    def from_text(cls, text: str) -> Binary:
        return cls(text.encode("utf-8"))

    @property
    def size(self) -> int:
        """Return the number of bytes."""
        return len(self.data)

    def get_stream(self) -> BinaryIO:
        """Return a fresh stream positioned at the first byte."""
        return io.BytesIO(self.data)

    def read(self, position: int = 0, length: int | None = None) -> bytes:
        """Return up to length bytes starting at position."""
        if position < 0:
            raise PreconditionError(f"Negative read position: {position}")
        end = None if length is None else position + length
        return self.data[position:end]

    def __str__(self) -> str:
        return self.data.decode("utf-8", errors="replace")


# --- Values ---

_PAYLOAD_TYPES: dict[PropertyType, tuple[type, ...]] = {
    PropertyType.BINARY: (Binary,),
    PropertyType.LONG: (int,),
    PropertyType.DOUBLE: (float,),
    PropertyType.DATE: (datetime,),
    PropertyType.BOOLEAN: (bool,),
    PropertyType.DECIMAL: (Decimal,),
}


@dataclass(frozen=True)
class Value:
    """An immutable typed scalar.

    Attributes:
        type: The declared type. Never UNDEFINED.
        payload: The stored data, or None for the null value of the type.
    """

    type: PropertyType
    payload: Any = None

    def __post_init__(self) -> None:
        if self.type is PropertyType.UNDEFINED:
            raise PreconditionError("A value cannot have type UNDEFINED")
        if self.payload is None:
            return
        expected = (str,) if self.type.is_textual else _PAYLOAD_TYPES[self.type]
        valid = isinstance(self.payload, expected)
        if self.type is PropertyType.LONG and isinstance(self.payload, bool):
            valid = False
        if not valid:
            raise PreconditionError(
                f"Payload {self.payload!r} does not match type {self.type.value}"
            )

    # --- Construction ---

    @classmethod
    def of(cls, value: Any, type: PropertyType | None = None) -> Value:
        """Create a value from a Python object.

        The type is inferred from the object unless given. Text combined with
        an explicit type is parsed into that type; other objects are
        converted with the usual conversion rules.

        Raises:
            FormatError: If the object cannot be converted to the given type.
            PreconditionError: If the object has no value representation.
        """
        from jcr_fakes.nodes import Node

        if isinstance(value, Value):
            return value if type is None else value.convert(type)
        if value is None:
            return cls.null(type or PropertyType.STRING)
        if isinstance(value, Node):
            return cls.reference(value, type or PropertyType.REFERENCE)
        if isinstance(value, str):
            return cls(PropertyType.STRING, value).convert(type or PropertyType.STRING)

        if isinstance(value, bool):
            inferred = cls(PropertyType.BOOLEAN, value)
        elif isinstance(value, int):
            inferred = cls(PropertyType.LONG, value)
        elif isinstance(value, float):
            inferred = cls(PropertyType.DOUBLE, value)
        elif isinstance(value, Decimal):
            inferred = cls(PropertyType.DECIMAL, value)
        elif isinstance(value, datetime):
            inferred = cls(PropertyType.DATE, value)
        elif isinstance(value, Binary):
            inferred = cls(PropertyType.BINARY, value)
        elif isinstance(value, (bytes, bytearray)):
            inferred = cls(PropertyType.BINARY, Binary(bytes(value)))
        else:
            raise PreconditionError(f"Unsupported value object: {value!r}")
        return inferred if type is None else inferred.convert(type)

    @classmethod
    def null(cls, type: PropertyType = PropertyType.STRING) -> Value:
        """Return the null value of a type."""
        return cls(type)

    @classmethod
    def reference(cls, node: Node, type: PropertyType = PropertyType.REFERENCE) -> Value:
        """Create a value pointing at a node.

        REFERENCE and WEAKREFERENCE values hold the node identifier, PATH
        values hold the node path.

        Raises:
            PreconditionError: If node is None, or has no identifier for a
                reference type.
        """
        require_not_none(node, "Cannot reference a missing node")
        if type is PropertyType.PATH:
            return cls(type, node.path)
        if type not in (PropertyType.REFERENCE, PropertyType.WEAKREFERENCE):
            raise PreconditionError(f"A node cannot be stored as {type.value}")
        identifier = require_not_blank(
            node.identifier, f"Cannot reference node without identifier: {node.path}"
        )
        return cls(type, identifier)

    def convert(self, type: PropertyType) -> Value:
        """Return this value converted to another type."""
        if type is self.type:
            return self
        if self.payload is None:
            return Value.null(type)
        if type.is_textual:
            return Value(type, self.get_string())
        if type is PropertyType.BOOLEAN:
            return Value(type, self.get_boolean())
        if type is PropertyType.LONG:
            return Value(type, self.get_long())
        if type is PropertyType.DOUBLE:
            return Value(type, self.get_double())
        if type is PropertyType.DECIMAL:
            return Value(type, self.get_decimal())
        if type is PropertyType.DATE:
            return Value(type, self.get_date())
        if type is PropertyType.BINARY:
            return Value(type, self.get_binary())
        raise PreconditionError(f"Cannot convert to {type.value}")

    @property
    def is_null(self) -> bool:
        return self.payload is None

    # --- Conversions ---

    def _unsupported(self, target: str) -> FormatError:
        return FormatError(
            f"Cannot convert {self.type.value} value {self.get_string()!r} to {target}"
        )

    def get_string(self) -> str:
        if self.payload is None:
            return ""
        if self.type is PropertyType.BOOLEAN:
            return "true" if self.payload else "false"
        if self.type is PropertyType.DOUBLE:
            return format_double(self.payload)
        if self.type is PropertyType.DATE:
            return format_iso8601(self.payload)
        return str(self.payload)

    def get_boolean(self) -> bool:
        if self.payload is None:
            return False
        if self.type is PropertyType.BOOLEAN:
            return self.payload
        if self.type.is_textual or self.type is PropertyType.BINARY:
            return self.get_string().lower() == "true"
        raise self._unsupported("Boolean")

    def get_long(self) -> int:
        if self.payload is None or self.type is PropertyType.BINARY:
            return 0
        if self.type is PropertyType.LONG:
            return self.payload
        if self.type is PropertyType.DOUBLE:
            return _truncate(self.payload)
        if self.type is PropertyType.DECIMAL:
            if not self.payload.is_finite():
                raise self._unsupported("Long")
            return int(self.payload)
        if self.type is PropertyType.DATE:
            return to_epoch_millis(self.payload)
        if self.type.is_textual:
            return _parse_long(self.payload)
        raise self._unsupported("Long")

    def get_double(self) -> float:
        if self.payload is None or self.type is PropertyType.BINARY:
            return 0.0
        if self.type in (PropertyType.DOUBLE, PropertyType.LONG, PropertyType.DECIMAL):
            return float(self.payload)
        if self.type is PropertyType.DATE:
            return float(to_epoch_millis(self.payload))
        if self.type.is_textual:
            return _parse_double(self.payload)
        raise self._unsupported("Double")

    def get_decimal(self) -> Decimal:
        if self.payload is None or self.type is PropertyType.BINARY:
            return Decimal(0)
        if self.type is PropertyType.DECIMAL:
            return self.payload
        if self.type is PropertyType.LONG:
            return Decimal(self.payload)
        if self.type is PropertyType.DOUBLE:
            return Decimal(format_double(self.payload))
        if self.type is PropertyType.DATE:
            return Decimal(to_epoch_millis(self.payload))
        if self.type.is_textual:
            return _parse_decimal(self.payload)
        raise self._unsupported("Decimal")

    def get_date(self) -> datetime | None:
        if self.payload is None or self.type is PropertyType.BINARY:
            return None
        if self.type is PropertyType.DATE:
            return self.payload
        if self.type is PropertyType.LONG:
            return from_epoch_millis(self.payload)
        if self.type in (PropertyType.DOUBLE, PropertyType.DECIMAL):
            return from_epoch_millis(self.get_long())
        if self.type.is_textual:
            return _parse_date(self.payload)
        raise self._unsupported("Date")

    def get_binary(self) -> Binary | None:
        if self.payload is None:
            return None
        if self.type is PropertyType.BINARY:
            return self.payload
        return Binary.from_text(self.get_string())

    def get_stream(self) -> BinaryIO | None:
        binary = self.get_binary()
        return binary.get_stream() if binary is not None else None

    def __str__(self) -> str:
        if self.payload is None:
            return "NULL"
        return self.get_string()


class ValueFactory:
    """Creates values and binaries for a session."""

    def create_value(self, value: Any, type: PropertyType | None = None) -> Value:
        """Create a value, see Value.of."""
        return Value.of(value, type)

    def create_binary(self, data: bytes | str | BinaryIO) -> Binary:
        """Create a binary from bytes, text (UTF-8 encoded) or a readable stream."""
        if isinstance(data, str):
            return Binary.from_text(data)
        if isinstance(data, (bytes, bytearray)):
            return Binary(bytes(data))
        return Binary(data.read())
