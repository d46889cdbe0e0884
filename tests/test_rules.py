"""
Unit tests for the rule lexer, parser and algebra.
"""

import pytest

from linkcsg.errors import RuleSyntaxError
from linkcsg.rules import (
    Complement,
    Intersection,
    Literal,
    TokenType,
    Union,
    canonical,
    complement,
    complement_of,
    evaluate,
    intersect,
    literal,
    offset_rule,
    parse,
    rule_equal,
    serialize,
    signed_literals,
    surface_ids,
    to_rule,
    tokenize,
    unite,
)


def sample_rules():
    a, b, c, d = literal(1), literal(-2), literal(3), literal(-4)
    return [
        a,
        b,
        intersect(a, b),
        unite(a, b, c),
        intersect(a, unite(b, c)),
        unite(intersect(a, b), intersect(c, d)),
        complement(intersect(a, b)),
        intersect(complement(unite(a, c)), d),
        unite(a, complement(b)),
        Intersection((Intersection((a, b)), c)),
        Union((Union((a, b)), Intersection((c, d)))),
        complement(complement(intersect(a, unite(b, complement(intersect(c, d)))))),
    ]


class TestLexer:
    """Tokenizing rule text."""

    def test_empty_source(self):
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_token_types(self):
        tokens = tokenize("10001 -10002 : #(7)")
        assert [t.type for t in tokens] == [
            TokenType.INTEGER,
            TokenType.INTEGER,
            TokenType.COLON,
            TokenType.HASH,
            TokenType.LPAREN,
            TokenType.INTEGER,
            TokenType.RPAREN,
            TokenType.EOF,
        ]
        assert tokens[1].value == -10002
        assert tokens[5].value == 7

    def test_columns(self):
        tokens = tokenize("1  -2")
        assert tokens[0].location.column == 1
        assert tokens[1].location.column == 4

    def test_plus_sign(self):
        tokens = tokenize("+5")
        assert tokens[0].value == 5
        assert tokens[0].lexeme == "+5"

    def test_non_numeric_literal(self):
        with pytest.raises(RuleSyntaxError) as exc:
            tokenize("1 abc")
        assert exc.value.code == "E002"
        assert exc.value.column == 3

    def test_decimal_is_not_a_surface(self):
        with pytest.raises(RuleSyntaxError) as exc:
            tokenize("3.5")
        assert exc.value.code == "E002"

    def test_dangling_sign(self):
        with pytest.raises(RuleSyntaxError) as exc:
            tokenize("1 - 2")
        assert exc.value.code == "E003"

    def test_unexpected_character(self):
        with pytest.raises(RuleSyntaxError) as exc:
            tokenize("1 & 2")
        assert exc.value.code == "E001"

    @pytest.mark.parametrize("text, column", [
        ("1 ²", 3),
        ("12²", 3),
        ("٣", 1),
    ])
    def test_non_ascii_digits_rejected(self, text, column):
        with pytest.raises(RuleSyntaxError) as exc:
            parse(text)
        assert exc.value.code == "E001"
        assert exc.value.column == column

    def test_sign_before_non_ascii_digit(self):
        with pytest.raises(RuleSyntaxError) as exc:
            tokenize("-²")
        assert exc.value.code == "E003"


class TestParser:
    """Parsing rule text into trees."""

    def test_literal(self):
        assert parse("5") == Literal(5)
        assert parse("-7") == Literal(-7)

    def test_intersection_binds_tighter_than_union(self):
        rule = parse("1 2 : 3")
        assert rule == Union((Intersection((Literal(1), Literal(2))), Literal(3)))

    def test_parentheses(self):
        rule = parse("1 (2 : 3)")
        assert rule == Intersection((Literal(1), Union((Literal(2), Literal(3)))))

    def test_complement(self):
        rule = parse("#(1 -2)")
        assert rule == Complement(Intersection((Literal(1), Literal(-2))))

    def test_whitespace_insignificant(self):
        assert parse("  1   -2:3 ") == parse("1 -2 : 3")

    def test_unclosed_paren(self):
        with pytest.raises(RuleSyntaxError) as exc:
            parse("1 (2 : 3")
        assert exc.value.code == "E102"
        assert exc.value.column == 3

    def test_unmatched_close(self):
        with pytest.raises(RuleSyntaxError) as exc:
            parse("1 2)")
        assert exc.value.code == "E103"

    def test_zero_literal(self):
        with pytest.raises(RuleSyntaxError) as exc:
            parse("1 0")
        assert exc.value.code == "E104"

    def test_empty(self):
        with pytest.raises(RuleSyntaxError) as exc:
            parse("   ")
        assert exc.value.code == "E105"

    def test_empty_group(self):
        with pytest.raises(RuleSyntaxError) as exc:
            parse("1 ()")
        assert exc.value.code == "E101"

    def test_hash_needs_paren(self):
        with pytest.raises(RuleSyntaxError) as exc:
            parse("#5")
        assert exc.value.code == "E101"

    def test_dangling_union(self):
        with pytest.raises(RuleSyntaxError):
            parse("1 :")

    def test_syntax_error_is_builtin_syntax_error(self):
        with pytest.raises(SyntaxError):
            parse("(1")

    def test_formatted_diagnostic_has_caret(self):
        with pytest.raises(RuleSyntaxError) as exc:
            parse("1 2 x")
        text = str(exc.value)
        assert "error[E002]" in text
        assert "  |     ^" in text
        assert exc.value.diagnostic.to_json()["column"] == 5


class TestBuilders:
    """Pure rule builders."""

    def test_literal_rejects_zero_and_non_int(self):
        with pytest.raises(ValueError):
            literal(0)
        with pytest.raises(ValueError):
            literal(1.5)
        with pytest.raises(ValueError):
            literal(True)

    def test_intersect_flattens(self):
        rule = intersect(literal(1), intersect(literal(2), literal(3)))
        assert rule == Intersection((Literal(1), Literal(2), Literal(3)))

    def test_unite_flattens(self):
        rule = unite(unite(literal(1), literal(2)), literal(3))
        assert rule == Union((Literal(1), Literal(2), Literal(3)))

    def test_single_argument_is_returned(self):
        a = literal(4)
        assert intersect(a) is a
        assert unite(a) is a

    def test_no_arguments(self):
        with pytest.raises(ValueError):
            intersect()

    def test_composite_needs_two_children(self):
        with pytest.raises(ValueError):
            Intersection((Literal(1),))

    def test_double_complement_collapses(self):
        r = intersect(literal(1), literal(2))
        assert complement(complement(r)) is r

    def test_operators(self):
        a, b = literal(1), literal(-2)
        assert (a & b) == intersect(a, b)
        assert (a | b) == unite(a, b)
        assert ~a == Complement(a)

    def test_no_simplification(self):
        a = literal(3)
        assert serialize(intersect(a, a)) == "3 3"


class TestSerialize:
    """Canonical text and round trip."""

    def test_scenario_text(self):
        r = complement_of(intersect(literal(5), literal(-7)))
        assert r == unite(literal(-5), literal(7))
        assert serialize(r) == "-5 : 7"

    def test_nested_text(self):
        cell = intersect(literal(10001), literal(-10002), unite(literal(7), literal(8)))
        assert serialize(cell) == "10001 -10002 (7 : 8)"

    def test_complement_text(self):
        assert serialize(complement(literal(5))) == "#(5)"
        assert serialize(intersect(literal(1), complement(unite(literal(2), literal(3))))) \
            == "1 #(2 : 3)"

    def test_nested_same_kind_keeps_parentheses(self):
        r = Intersection((Intersection((Literal(1), Literal(2))), Literal(3)))
        assert serialize(r) == "(1 2) 3"

    @pytest.mark.parametrize("rule", sample_rules())
    def test_round_trip(self, rule):
        assert parse(serialize(rule)) == rule

    def test_str_is_serialize(self):
        r = unite(literal(1), intersect(literal(2), literal(3)))
        assert str(r) == serialize(r)


class TestComplement:
    """De Morgan complement and canonical form."""

    def test_literal(self):
        assert complement_of(literal(5)) == literal(-5)

    def test_union(self):
        r = complement_of(unite(literal(1), literal(-2)))
        assert r == intersect(literal(-1), literal(2))

    def test_docstring_example(self):
        cell = intersect(literal(10001), literal(-10002), unite(literal(7), literal(8)))
        assert serialize(complement_of(cell)) == "-10001 : 10002 : (-7 -8)"

    def test_complement_node_removed(self):
        r = complement_of(complement(literal(3)))
        assert r == literal(3)

    @pytest.mark.parametrize("rule", sample_rules())
    def test_involution(self, rule):
        assert complement_of(complement_of(rule)) == canonical(rule)

    @pytest.mark.parametrize("rule", sample_rules())
    def test_canonical_has_no_complements(self, rule):
        assert "#" not in serialize(canonical(rule))

    def test_canonical_flattens(self):
        r = Intersection((Intersection((Literal(1), Literal(2))), Literal(3)))
        assert serialize(canonical(r)) == "1 2 3"


class TestHelpers:
    """Surface sets, offsets, evaluation and coercion."""

    def test_surface_ids(self):
        r = parse("1 -2 (3 : #(-4 1))")
        assert surface_ids(r) == {1, 2, 3, 4}

    def test_signed_literals(self):
        assert signed_literals(parse("1 -2 (3 : -4)")) == [1, -2, 3, -4]

    def test_offset_rule(self):
        r = offset_rule(parse("1 -2 #(3)"), 10000)
        assert serialize(r) == "10001 -10002 #(10003)"

    def test_rule_equal(self):
        assert rule_equal(parse("1 2"), intersect(literal(1), literal(2)))
        assert not rule_equal(parse("1 2"), parse("2 1"))
        assert rule_equal(None, None)
        assert not rule_equal(None, literal(1))

    def test_evaluate(self):
        positive = {1: True, 2: False, 3: True}
        sense = positive.__getitem__
        assert evaluate(parse("1 -2"), sense)
        assert not evaluate(parse("1 2"), sense)
        assert evaluate(parse("2 : 3"), sense)
        assert not evaluate(parse("#(1 -2)"), sense)

    @pytest.mark.parametrize("rule", sample_rules())
    def test_complement_evaluates_opposite(self, rule):
        for bits in range(16):
            def sense(n, bits=bits):
                return bool(bits >> (n - 1) & 1)
            assert evaluate(complement_of(rule), sense) != evaluate(rule, sense)

    def test_to_rule(self):
        assert to_rule(None) is None
        assert to_rule("") is None
        assert to_rule(-3) == literal(-3)
        assert to_rule("1 : 2") == unite(literal(1), literal(2))
        r = literal(9)
        assert to_rule(r) is r
        with pytest.raises(ValueError):
            to_rule(2.5)
