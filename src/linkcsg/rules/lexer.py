"""
Lexer for rule text.

Converts a rule string such as ``"10001 -10002 (10007 : -10008) #(10011)"``
into a stream of tokens for the parser.  Whitespace separates tokens and
is otherwise insignificant.
"""

from typing import Iterator, List, Optional

from .tokens import Token, TokenType, SourceLocation, PUNCTUATION
from .errors import (
    error_unexpected_character,
    error_non_numeric_literal,
    error_dangling_sign,
)

# characters swallowed into a bad literal so the error covers the whole word
_WORD_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_.+-"

# surface numbers are ASCII only; str.isdigit() also accepts e.g. superscripts
_DIGITS = "0123456789"


class Lexer:
    """
    Tokenizer for rule text.

    Usage:
        lexer = Lexer("1 -2 : 3")
        tokens = lexer.tokenize()
    """

    def __init__(self, source: str, label: Optional[str] = None):
        self.source = source
        self.label = label
        self.pos = 0

    def _location(self, offset: Optional[int] = None) -> SourceLocation:
        off = self.pos if offset is None else offset
        return SourceLocation(off + 1, off, self.label)

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _skip_whitespace(self) -> None:
        while not self._is_at_end() and self._peek().isspace():
            self._advance()

    def _read_word(self) -> str:
        start = self.pos
        while not self._is_at_end() and self._peek() in _WORD_CHARS:
            self._advance()
        return self.source[start:self.pos]

    def _scan_number(self) -> Token:
        start = self.pos
        if self._peek() in '+-':
            self._advance()
            if self._peek() not in _DIGITS:
                if self._peek() in _WORD_CHARS:
                    self.pos = start
                    word = self._read_word()
                    raise error_non_numeric_literal(word, self._location(start), self.source)
                raise error_dangling_sign(self._location(start), self.source)
        while self._peek() in _DIGITS:
            self._advance()
        if not self._is_at_end() and self._peek() in _WORD_CHARS:
            # e.g. "12a" or "3.5"
            self.pos = start
            word = self._read_word()
            raise error_non_numeric_literal(word, self._location(start), self.source)
        lexeme = self.source[start:self.pos]
        return Token(TokenType.INTEGER, int(lexeme), lexeme, self._location(start))

    def next_token(self) -> Token:
        """Scan and return the next token."""
        self._skip_whitespace()
        if self._is_at_end():
            return Token(TokenType.EOF, None, "", self._location())

        ch = self._peek()
        if ch in _DIGITS or ch in "+-":
            return self._scan_number()

        if ch in PUNCTUATION:
            start = self.pos
            self._advance()
            return Token(PUNCTUATION[ch], None, ch, self._location(start))

        if ch in _WORD_CHARS:
            start = self.pos
            word = self._read_word()
            raise error_non_numeric_literal(word, self._location(start), self.source)

        raise error_unexpected_character(ch, self._location(), self.source)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def tokenize(self) -> List[Token]:
        """Tokenize the whole source; the list always ends with EOF."""
        return list(self)


def tokenize(source: str, label: Optional[str] = None) -> List[Token]:
    """Convenience wrapper around :class:`Lexer`."""
    return Lexer(source, label).tokenize()
