"""
Recursive descent parser for rule text.

Grammar (intersection binds tighter than union):

    rule         := union EOF
    union        := intersection (':' intersection)*
    intersection := factor factor*
    factor       := INTEGER | '(' union ')' | '#' '(' union ')'

A parenthesised group becomes its own node, so ``(1 2) 3`` parses to an
intersection whose first child is an intersection.  This keeps
``parse(serialize(r)) == r`` for every tree, not only flattened ones.
"""

from typing import List, Optional

from .tokens import Token, TokenType, describe
from .lexer import tokenize
from .ast import Rule, Literal, Intersection, Union, Complement
from .errors import (
    error_unexpected_token,
    error_unclosed_paren,
    error_trailing_tokens,
    error_zero_surface,
    error_empty_rule,
)

_FACTOR_START = (TokenType.INTEGER, TokenType.LPAREN, TokenType.HASH)


class Parser:
    """
    Parser over a token list produced by :func:`tokenize`.

    Usage:
        parser = Parser(tokenize("1 -2 : 3"))
        rule = parser.parse_rule()
    """

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source
        self.pos = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _check_any(self, *token_types: TokenType) -> bool:
        return self._current().type in token_types

    def _advance(self) -> Token:
        token = self._current()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    # =========================================================================
    # Grammar
    # =========================================================================

    def parse_rule(self) -> Rule:
        """Parse a complete rule; the whole token list must be consumed."""
        if self._check(TokenType.EOF):
            raise error_empty_rule(self._current().location, self.source)
        rule = self._union()
        if not self._check(TokenType.EOF):
            tok = self._current()
            raise error_trailing_tokens(describe(tok), tok.location, self.source)
        return rule

    def _union(self) -> Rule:
        terms = [self._intersection()]
        while self._check(TokenType.COLON):
            self._advance()
            terms.append(self._intersection())
        if len(terms) == 1:
            return terms[0]
        return Union(tuple(terms))

    def _intersection(self) -> Rule:
        factors = [self._factor()]
        while self._check_any(*_FACTOR_START):
            factors.append(self._factor())
        if len(factors) == 1:
            return factors[0]
        return Intersection(tuple(factors))

    def _factor(self) -> Rule:
        tok = self._current()
        if tok.type == TokenType.INTEGER:
            self._advance()
            if tok.value == 0:
                raise error_zero_surface(tok.location, self.source)
            return Literal(tok.value)

        if tok.type == TokenType.LPAREN:
            return self._group()

        if tok.type == TokenType.HASH:
            self._advance()
            if not self._check(TokenType.LPAREN):
                cur = self._current()
                raise error_unexpected_token("'(' after '#'", describe(cur),
                                             cur.location, self.source)
            return Complement(self._group())

        raise error_unexpected_token("surface number, '(' or '#('", describe(tok),
                                     tok.location, self.source)

    def _group(self) -> Rule:
        opening = self._advance()
        if self._check(TokenType.RPAREN):
            tok = self._current()
            raise error_unexpected_token("rule inside parentheses", describe(tok),
                                         tok.location, self.source)
        inner = self._union()
        if not self._check(TokenType.RPAREN):
            if self._check(TokenType.EOF):
                raise error_unclosed_paren(opening.location, self.source)
            tok = self._current()
            raise error_unexpected_token("')'", describe(tok), tok.location, self.source)
        self._advance()
        return inner


def parse(source: str, label: Optional[str] = None) -> Rule:
    """Parse rule text into a rule tree.

    Raises :class:`~linkcsg.errors.RuleSyntaxError` on mismatched
    parentheses, non-numeric or zero literals, empty input and trailing
    tokens.
    """
    tokens = tokenize(source, label)
    return Parser(tokens, source).parse_rule()
