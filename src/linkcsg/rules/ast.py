"""
Rule tree node definitions.

A rule is an immutable boolean expression over signed surface ids:

    Literal(5)                     5
    Intersection((1, -2))          1 -2
    Union((1, 2))                  1 : 2
    Complement(Intersection(..))   #(1 -2)

Nodes compare and hash structurally.  The operators ``&``, ``|`` and
``~`` build intersections, unions and complements through the
flattening constructors :meth:`Intersection.of`, :meth:`Union.of` and
:meth:`Complement.of`.
"""

from dataclasses import dataclass
from typing import Tuple
from abc import ABC, abstractmethod


@dataclass(frozen=True)
class Rule(ABC):
    """Base class for all rule nodes."""

    @abstractmethod
    def to_text(self) -> str:
        """Canonical text form."""

    def _wrapped(self) -> str:
        """Text form as a child of a composite node."""
        return f"({self.to_text()})"

    def __str__(self) -> str:
        return self.to_text()

    def __and__(self, other: "Rule") -> "Rule":
        if not isinstance(other, Rule):
            return NotImplemented
        return Intersection.of(self, other)

    def __or__(self, other: "Rule") -> "Rule":
        if not isinstance(other, Rule):
            return NotImplemented
        return Union.of(self, other)

    def __invert__(self) -> "Rule":
        return Complement.of(self)


@dataclass(frozen=True)
class Literal(Rule):
    """A signed surface id; positive means the side the normal points to."""
    surface: int

    def __post_init__(self):
        if isinstance(self.surface, bool) or not isinstance(self.surface, int):
            raise ValueError(f'surface literal must be an int: {self.surface!r}')
        if self.surface == 0:
            raise ValueError('surface literal must be non-zero')

    def to_text(self) -> str:
        return str(self.surface)

    def _wrapped(self) -> str:
        return self.to_text()


def _check_children(kind: str, children) -> Tuple[Rule, ...]:
    children = tuple(children)
    if len(children) < 2:
        raise ValueError(f'{kind} needs at least two children, got {len(children)}')
    for c in children:
        if not isinstance(c, Rule):
            raise ValueError(f'bad child in {kind}: {c!r}')
    return children


@dataclass(frozen=True)
class Intersection(Rule):
    """All children must hold."""
    children: Tuple[Rule, ...]

    def __post_init__(self):
        object.__setattr__(self, 'children', _check_children('Intersection', self.children))

    @classmethod
    def of(cls, *rules: Rule) -> Rule:
        """Intersect ``rules``, splicing in children of nested intersections."""
        flat = []
        for r in rules:
            if isinstance(r, Intersection):
                flat.extend(r.children)
            else:
                flat.append(r)
        if not flat:
            raise ValueError('intersection of nothing')
        if len(flat) == 1:
            return flat[0]
        return cls(tuple(flat))

    def to_text(self) -> str:
        return " ".join(c._wrapped() for c in self.children)


@dataclass(frozen=True)
class Union(Rule):
    """Any child may hold."""
    children: Tuple[Rule, ...]

    def __post_init__(self):
        object.__setattr__(self, 'children', _check_children('Union', self.children))

    @classmethod
    def of(cls, *rules: Rule) -> Rule:
        """Unite ``rules``, splicing in children of nested unions."""
        flat = []
        for r in rules:
            if isinstance(r, Union):
                flat.extend(r.children)
            else:
                flat.append(r)
        if not flat:
            raise ValueError('union of nothing')
        if len(flat) == 1:
            return flat[0]
        return cls(tuple(flat))

    def to_text(self) -> str:
        return " : ".join(c._wrapped() for c in self.children)


@dataclass(frozen=True)
class Complement(Rule):
    """The child region's complement."""
    child: Rule

    def __post_init__(self):
        if not isinstance(self.child, Rule):
            raise ValueError(f'bad child in Complement: {self.child!r}')

    @classmethod
    def of(cls, rule: Rule) -> Rule:
        """Complement ``rule``; a double complement collapses to the original."""
        if isinstance(rule, Complement):
            return rule.child
        return cls(rule)

    def to_text(self) -> str:
        return f"#({self.child.to_text()})"

    def _wrapped(self) -> str:
        return self.to_text()
