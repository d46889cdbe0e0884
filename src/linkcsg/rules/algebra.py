"""Builders and transforms for rule trees.

All functions are pure: they never modify their arguments and always
return new trees (or the argument itself when nothing changes).

The algebra does no logical simplification.  ``intersect(a, a)`` keeps
both copies and two rules are equal only when their canonical text is
equal; detecting logical equivalence is left to the caller.
"""

from __future__ import annotations

from typing import Callable, Optional, Set

from .ast import Rule, Literal, Intersection, Complement
from .ast import Union as UnionRule
from .parser import parse


def literal(signed_id: int) -> Rule:
    """Half-space on the ``sign(signed_id)`` side of surface ``|signed_id|``."""
    return Literal(signed_id)


def intersect(*rules: Rule) -> Rule:
    """Region where every rule holds (nested intersections are flattened)."""
    return Intersection.of(*rules)


def unite(*rules: Rule) -> Rule:
    """Region where any rule holds (nested unions are flattened)."""
    return UnionRule.of(*rules)


def complement(rule: Rule) -> Rule:
    """Wrap ``rule`` in a complement node; ``complement(complement(r)) is r``."""
    return Complement.of(rule)


def complement_of(rule: Rule) -> Rule:
    """De Morgan complement pushed down to the literals.

    Intersections become unions, unions become intersections, literal
    signs flip and complement nodes are removed.  The result never
    contains a :class:`Complement`, so applying this twice returns
    :func:`canonical` of the input.
    """
    if isinstance(rule, Literal):
        return Literal(-rule.surface)
    if isinstance(rule, Intersection):
        return UnionRule.of(*(complement_of(c) for c in rule.children))
    if isinstance(rule, UnionRule):
        return Intersection.of(*(complement_of(c) for c in rule.children))
    if isinstance(rule, Complement):
        return canonical(rule.child)
    raise ValueError(f'not a rule: {rule!r}')


def canonical(rule: Rule) -> Rule:
    """Complement-free, flattened form of ``rule``."""
    if isinstance(rule, Literal):
        return rule
    if isinstance(rule, Intersection):
        return Intersection.of(*(canonical(c) for c in rule.children))
    if isinstance(rule, UnionRule):
        return UnionRule.of(*(canonical(c) for c in rule.children))
    if isinstance(rule, Complement):
        return complement_of(rule.child)
    raise ValueError(f'not a rule: {rule!r}')


def serialize(rule: Rule) -> str:
    """Canonical text of ``rule``; ``parse(serialize(r)) == r``."""
    return rule.to_text()


def rule_equal(a: Optional[Rule], b: Optional[Rule]) -> bool:
    """Structural equality on canonical text (not logical equivalence)."""
    if a is None or b is None:
        return a is b
    return serialize(a) == serialize(b)


def surface_ids(rule: Rule) -> Set[int]:
    """Unsigned surface numbers referenced anywhere in ``rule``."""
    if isinstance(rule, Literal):
        return {abs(rule.surface)}
    if isinstance(rule, Complement):
        return surface_ids(rule.child)
    out: Set[int] = set()
    for c in rule.children:
        out |= surface_ids(c)
    return out


def signed_literals(rule: Rule) -> list:
    """Signed literals in text order."""
    if isinstance(rule, Literal):
        return [rule.surface]
    if isinstance(rule, Complement):
        return signed_literals(rule.child)
    out = []
    for c in rule.children:
        out.extend(signed_literals(c))
    return out


def offset_rule(rule: Rule, base: int) -> Rule:
    """Add ``base`` to the magnitude of every literal, keeping signs."""
    if isinstance(rule, Literal):
        n = rule.surface
        return Literal(n + base if n > 0 else n - base)
    if isinstance(rule, Complement):
        return Complement(offset_rule(rule.child, base))
    return type(rule)(tuple(offset_rule(c, base) for c in rule.children))


def evaluate(rule: Rule, sense: Callable[[int], bool]) -> bool:
    """Point membership.

    ``sense(n)`` must return True when the point lies on the positive side
    of surface ``n`` (``n`` is always positive).
    """
    if isinstance(rule, Literal):
        positive = sense(abs(rule.surface))
        return positive if rule.surface > 0 else not positive
    if isinstance(rule, Intersection):
        return all(evaluate(c, sense) for c in rule.children)
    if isinstance(rule, UnionRule):
        return any(evaluate(c, sense) for c in rule.children)
    if isinstance(rule, Complement):
        return not evaluate(rule.child, sense)
    raise ValueError(f'not a rule: {rule!r}')


def to_rule(value) -> Optional[Rule]:
    """Coerce ``None``, an int, rule text or a rule into a rule (or None)."""
    if value is None or isinstance(value, Rule):
        return value
    if isinstance(value, bool):
        raise ValueError(f'cannot make a rule from {value!r}')
    if isinstance(value, int):
        return Literal(value)
    if isinstance(value, str):
        if not value.strip():
            return None
        return parse(value)
    raise ValueError(f'cannot make a rule from {value!r}')
