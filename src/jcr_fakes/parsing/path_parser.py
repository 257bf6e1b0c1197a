"""Parser for repository paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from jcr_fakes.errors import PreconditionError
from jcr_fakes.parsing.path_lexer import PathLexer

PARENT = ".."
CURRENT = "."


@dataclass(frozen=True)
class PathSegment:
    """One step of a path: a name with its 1-based sibling index, or a dot step."""

    name: str
    index: int = 1

    @property
    def is_parent(self) -> bool:
        return self.name == PARENT

    @property
    def is_current(self) -> bool:
        return self.name == CURRENT

    def __str__(self) -> str:
        if self.index > 1:
            return f"{self.name}[{self.index}]"
        return self.name


@dataclass
class ParsedPath:
    """A path split into segments."""

    absolute: bool
    segments: list[PathSegment] = field(default_factory=list)

    def __str__(self) -> str:
        joined = "/".join(str(segment) for segment in self.segments)
        return "/" + joined if self.absolute else joined


class PathParser:
    """Parser for absolute and relative item paths."""

    tokens = PathLexer.tokens

    def __init__(self) -> None:
        self.lexer = PathLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_path_root(self, p: yacc.YaccProduction) -> None:
        """path : SLASH"""
        p[0] = ParsedPath(absolute=True)

    def p_path_absolute(self, p: yacc.YaccProduction) -> None:
        """path : SLASH relative"""
        p[0] = ParsedPath(absolute=True, segments=p[2])

    def p_path_relative(self, p: yacc.YaccProduction) -> None:
        """path : relative"""
        p[0] = ParsedPath(absolute=False, segments=p[1])

    def p_relative_single(self, p: yacc.YaccProduction) -> None:
        """relative : segment"""
        p[0] = [p[1]]

    def p_relative_multiple(self, p: yacc.YaccProduction) -> None:
        """relative : relative SLASH segment"""
        p[0] = p[1] + [p[3]]

    def p_relative_trailing_slash(self, p: yacc.YaccProduction) -> None:
        """relative : relative SLASH"""
        p[0] = p[1]

    def p_segment_name(self, p: yacc.YaccProduction) -> None:
        """segment : NAME"""
        p[0] = PathSegment(name=p[1])

    def p_segment_indexed(self, p: yacc.YaccProduction) -> None:
        """segment : NAME INDEX"""
        if p[2] < 1:
            raise PreconditionError(f"Sibling index must be 1 or greater: {p[1]}[{p[2]}]")
        p[0] = PathSegment(name=p[1], index=p[2])

    def p_segment_parent(self, p: yacc.YaccProduction) -> None:
        """segment : DOTDOT"""
        p[0] = PathSegment(name=PARENT)

    def p_segment_current(self, p: yacc.YaccProduction) -> None:
        """segment : DOT"""
        p[0] = PathSegment(name=CURRENT)

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise PreconditionError(f"Invalid path at '{p.value}' (position {p.lexpos})")
        else:
            raise PreconditionError("Invalid path: unexpected end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> ParsedPath:
        """Parse a path string."""
        if not data:
            raise PreconditionError("Path must not be empty")
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        return self.parser.parse(data, lexer=self.lexer.lexer)
