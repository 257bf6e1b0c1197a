"""Error types raised by the content store."""

from __future__ import annotations

from typing import Any


class FormatError(ValueError):
    """A value cannot be represented in the requested type."""


class PreconditionError(AssertionError):
    """A public operation was called with an invalid argument."""


def require_not_none(value: Any, message: str) -> Any:
    """Return value, or raise PreconditionError if it is None."""
    if value is None:
        raise PreconditionError(message)
    return value


def require_not_blank(value: str | None, message: str) -> str:
    """Return value, or raise PreconditionError if it is None or only whitespace."""
    if value is None or not value.strip():
        raise PreconditionError(message)
    return value
