"""Parsing module for repository paths."""

from jcr_fakes.parsing.path_lexer import PathLexer
from jcr_fakes.parsing.path_parser import ParsedPath, PathParser, PathSegment

__all__ = [
    "ParsedPath",
    "PathLexer",
    "PathParser",
    "PathSegment",
]
