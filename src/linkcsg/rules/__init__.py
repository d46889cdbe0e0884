"""
Boolean rule algebra over signed surface ids.

This package provides:
- Lexer: tokenizes rule text
- Parser: builds rule trees from tokens
- Algebra: pure builders, De Morgan complement, canonical form,
  point evaluation

Usage:
    from linkcsg.rules import literal, intersect, unite, complement_of, parse

    cell = intersect(literal(10001), literal(-10002), unite(literal(7), literal(8)))
    text = serialize(cell)          # '10001 -10002 (7 : 8)'
    assert parse(text) == cell
    outside = complement_of(cell)   # '-10001 : 10002 : (-7 -8)'
"""

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    Rule,
    Literal,
    Intersection,
    Union,
    Complement,
)

from .algebra import (
    literal,
    intersect,
    unite,
    complement,
    complement_of,
    canonical,
    serialize,
    rule_equal,
    surface_ids,
    signed_literals,
    offset_rule,
    evaluate,
    to_rule,
)

from .errors import Diagnostic

__all__ = [
    "Token", "TokenType", "SourceLocation",
    "Lexer", "tokenize",
    "Parser", "parse",
    "Rule", "Literal", "Intersection", "Union", "Complement",
    "literal", "intersect", "unite", "complement", "complement_of",
    "canonical", "serialize", "rule_equal", "surface_ids",
    "signed_literals", "offset_rule", "evaluate", "to_rule",
    "Diagnostic",
]
