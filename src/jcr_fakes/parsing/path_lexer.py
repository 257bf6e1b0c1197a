"""Lexer for repository paths."""

import ply.lex as lex

from jcr_fakes.errors import PreconditionError


class PathLexer:
    """Lexer for tokenizing absolute and relative item paths."""

    tokens = [
        "SLASH",
        "NAME",
        "INDEX",
        "DOT",
        "DOTDOT",
    ]

    t_SLASH = r"/"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_INDEX(self, t: lex.LexToken) -> lex.LexToken:
        r"\[\d+\]"
        t.value = int(t.value[1:-1])
        return t

    # Dots only count as navigation when they make up the whole segment
    def t_DOTDOT(self, t: lex.LexToken) -> lex.LexToken:
        r"\.\.(?=/|$)"
        return t

    def t_DOT(self, t: lex.LexToken) -> lex.LexToken:
        r"\.(?=/|$)"
        return t

    def t_NAME(self, t: lex.LexToken) -> lex.LexToken:
        r"[^/\[\]]+"
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise PreconditionError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input string and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if not tok:
                break
            tokens.append(tok)
        return tokens
