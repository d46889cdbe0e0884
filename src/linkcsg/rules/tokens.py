"""
Token types for the rule lexer.

Rule text is a small language:
- signed integers are surface literals (``5``, ``-7``)
- juxtaposition is intersection (``1 -2 3``)
- ``:`` is union (``1 : 2``)
- ``#( ... )`` is complement
- parentheses group
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Dict, Optional


class TokenType(Enum):
    """All token types recognized by the rule lexer."""
    INTEGER = auto()        # 5, -7, +12
    COLON = auto()          # :
    HASH = auto()           # #
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    EOF = auto()            # end of input


@dataclass(frozen=True)
class SourceLocation:
    """Position in rule text (rule strings are single line)."""
    column: int         # 1-indexed column
    offset: int         # 0-indexed character offset
    source: Optional[str] = None    # optional label, e.g. the owning component

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}:{self.column}"
        return f"col {self.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # int for INTEGER, otherwise None
    lexeme: str             # the original text
    location: SourceLocation

    def __str__(self) -> str:
        if self.type == TokenType.INTEGER:
            return f"INTEGER({self.value})"
        return self.type.name


PUNCTUATION: Dict[str, TokenType] = {
    ":": TokenType.COLON,
    "#": TokenType.HASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


def describe(token: Token) -> str:
    """Human readable name of a token for error messages."""
    if token.type == TokenType.EOF:
        return "end of rule"
    if token.type == TokenType.INTEGER:
        return f"surface '{token.lexeme}'"
    return f"'{token.lexeme}'"
