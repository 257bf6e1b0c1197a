"""Helpers for building, checking and normalizing item paths."""

from __future__ import annotations

from fnmatch import fnmatchcase

from jcr_fakes.errors import PreconditionError
from jcr_fakes.parsing import ParsedPath, PathParser, PathSegment
from jcr_fakes.types import UNTITLED

ROOT_PATH = "/"

_parser: PathParser | None = None


def parse_path(path: str) -> ParsedPath:
    """Parse a path with a shared parser instance."""
    global _parser
    if _parser is None:
        _parser = PathParser()
    return _parser.parse(path)


def sanitize_path(path: str | None) -> str:
    """Trim a path, turn backslashes into slashes and make it absolute.

    A blank path becomes ``/untitled``.
    """
    if path is None or not path.strip():
        return ROOT_PATH + UNTITLED
    path = path.strip().replace("\\", "/")
    if not path.startswith("/"):
        path = "/" + path
    return path


def join_path(parent_path: str, name: str) -> str:
    """Append a name to a parent path without doubling the root slash."""
    if parent_path == ROOT_PATH:
        return ROOT_PATH + name
    return f"{parent_path}/{name}"


def normalize_path(path: str) -> str:
    """Return the canonical absolute form of a path.

    Relative paths are taken relative to the root. ``.`` steps are dropped,
    ``..`` steps remove the previous segment and ``[1]`` indexes are omitted.

    Raises:
        PreconditionError: If the path is malformed or climbs above the root.
    """
    segments: list[PathSegment] = []
    for segment in parse_path(path).segments:
        if segment.is_current:
            continue
        if segment.is_parent:
            if not segments:
                raise PreconditionError(f"Path climbs above the root: {path}")
            segments.pop()
            continue
        segments.append(segment)
    return str(ParsedPath(absolute=True, segments=segments))


def check_name(name: str) -> str:
    """Return name if it can be used as a node or property name."""
    if name in (".", "..") or any(char in name for char in "/[]"):
        raise PreconditionError(f"Invalid item name: {name!r}")
    return name


def matches_name_pattern(name: str, pattern: str | None) -> bool:
    """Check a name against a glob pattern with ``|`` separated alternatives.

    A pattern of None matches every name.
    """
    if pattern is None:
        return True
    return any(fnmatchcase(name, part.strip()) for part in pattern.split("|"))
