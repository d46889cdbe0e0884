"""Concrete surfaces and the per-component surface map.

A surface splits space into a negative and a positive side.  For planes
the positive side is the one the normal points to; for cylinders and
spheres it is the outside.  ``-N`` in a rule therefore means "behind
plane N" or "inside cylinder N".

Builders never pick global surface numbers themselves.  They ask their
:class:`SurfaceMap` for local offsets (``3``, ``-7``, ``2007`` ...) which
the map turns into ids inside the component's reserved block.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Tuple

import numpy as np

from . import geom
from .errors import RegistrationError
from .rules import Rule, parse

logger = logging.getLogger(__name__)


class Surface(ABC):
    """Base class for quadric surfaces."""

    kind: str = "surface"

    @abstractmethod
    def value(self, point: geom.VectorLike) -> float:
        """Signed implicit-function value; positive on the positive side."""

    def side(self, point: geom.VectorLike) -> bool:
        """True if ``point`` is on the positive side."""
        return self.value(point) > 0.0

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.to_dict().items() if k != "type")
        return f"{self.__class__.__name__}({params})"


class Plane(Surface):
    """Plane ``n . p = d`` with unit normal ``n``."""

    kind = "plane"

    def __init__(self, normal: geom.VectorLike, distance: float):
        self.normal = geom.unit(normal)
        self.distance = float(distance)

    @classmethod
    def through(cls, point: geom.VectorLike, normal: geom.VectorLike) -> "Plane":
        n = geom.unit(normal)
        return cls(n, geom.dot(n, point))

    def value(self, point: geom.VectorLike) -> float:
        return geom.dot(self.normal, point) - self.distance

    def shifted(self, distance: float) -> "Plane":
        """Parallel plane moved ``distance`` along the normal."""
        return Plane(self.normal, self.distance + distance)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind,
                "normal": [float(c) for c in self.normal],
                "distance": self.distance}


class Cylinder(Surface):
    """Infinite circular cylinder about the line through ``centre`` along ``axis``."""

    kind = "cylinder"

    def __init__(self, centre: geom.VectorLike, axis: geom.VectorLike, radius: float):
        if radius <= 0.0:
            raise ValueError(f'cylinder radius must be positive: {radius}')
        self.centre = geom.vec3(centre)
        self.axis = geom.unit(axis)
        self.radius = float(radius)

    def value(self, point: geom.VectorLike) -> float:
        d = np.asarray(point, dtype=float) - self.centre
        radial = d - geom.dot(d, self.axis) * self.axis
        return float(np.dot(radial, radial)) - self.radius * self.radius

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind,
                "centre": [float(c) for c in self.centre],
                "axis": [float(c) for c in self.axis],
                "radius": self.radius}


class Sphere(Surface):
    """Sphere of ``radius`` about ``centre``."""

    kind = "sphere"

    def __init__(self, centre: geom.VectorLike, radius: float):
        if radius <= 0.0:
            raise ValueError(f'sphere radius must be positive: {radius}')
        self.centre = geom.vec3(centre)
        self.radius = float(radius)

    def value(self, point: geom.VectorLike) -> float:
        d = np.asarray(point, dtype=float) - self.centre
        return float(np.dot(d, d)) - self.radius * self.radius

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind,
                "centre": [float(c) for c in self.centre],
                "radius": self.radius}


## suffix letter on a template number -> which offset argument applies
_OFFSET_SUFFIX = {"": 0, "M": 1, "N": 2, "O": 3, "P": 4}
_TEMPLATE_NUMBER = re.compile(r'(?<![\w])([+-]?)(\d+)([MNOP]?)(?![\w])')


class SurfaceMap:
    """Surfaces owned by one component.

    Local offsets are mapped to real ids as ``base + offset`` where
    ``base`` is the block the registry reserved for ``owner``.  Offsets may
    also be aliased to a surface owned by someone else with
    :meth:`add_match`, which is how a component shares a neighbour's face
    instead of building a coincident duplicate.
    """

    def __init__(self, registry, owner: str):
        self.registry = registry
        self.owner = owner
        self._matches: Dict[int, int] = {}

    @property
    def base(self) -> int:
        if not self.registry.is_reserved(self.owner):
            raise RegistrationError(
                f"'{self.owner}' has no reserved surface block; reserve before building surfaces")
        return self.registry.base_of(self.owner)

    def real_surf(self, local: int) -> int:
        """Signed real id for a signed local offset."""
        if local == 0:
            raise ValueError('local surface offset must be non-zero')
        sign = 1 if local > 0 else -1
        key = abs(local)
        if key in self._matches:
            return sign * self._matches[key]
        return sign * (self.base + key)

    def add_surface(self, local: int, surface: Surface) -> int:
        """Register ``surface`` at ``base + local``; returns the real id."""
        if local <= 0:
            raise ValueError(f'local surface offset must be positive: {local}')
        number = self.base + local
        self.registry.add_surface(self.owner, number, surface)
        logger.debug("%s: surface %d = %r", self.owner, number, surface)
        return number

    def add_match(self, local: int, real: int) -> None:
        """Alias offset ``local`` to the existing signed surface ``real``.

        A negative ``real`` means the alias sees that surface from its far
        side, so ``+local`` expands to ``real``.
        """
        if local <= 0:
            raise ValueError(f'local surface offset must be positive: {local}')
        if real == 0:
            raise ValueError('matched surface must be non-zero')
        self._matches[local] = real

    def build_plane(self, local: int, point: geom.VectorLike, normal: geom.VectorLike) -> int:
        return self.add_surface(local, Plane.through(point, normal))

    def build_shifted_plane(self, local: int, plane: Plane, distance: float) -> int:
        return self.add_surface(local, plane.shifted(distance))

    def build_cylinder(self, local: int, centre: geom.VectorLike,
                       axis: geom.VectorLike, radius: float) -> int:
        return self.add_surface(local, Cylinder(centre, axis, radius))

    def build_sphere(self, local: int, centre: geom.VectorLike, radius: float) -> int:
        return self.add_surface(local, Sphere(centre, radius))

    def surface(self, local: int) -> Surface:
        return self.registry.surface(abs(self.real_surf(local)))

    def composite_text(self, template: str, *offsets: int) -> str:
        """Expand a rule template into text with real surface ids.

        Numbers in ``template`` are local offsets; a bare number adds
        ``offsets[0]``, a trailing ``M``/``N``/``O``/``P`` adds
        ``offsets[1]`` .. ``offsets[4]``.  With no offsets the numbers are
        used as-is.
        """
        offs = offsets or (0,)

        def _sub(m: "re.Match") -> str:
            sign, digits, suffix = m.group(1), m.group(2), m.group(3)
            slot = _OFFSET_SUFFIX[suffix]
            if slot >= len(offs):
                raise ValueError(
                    f"template '{template}' uses suffix '{suffix}' but only {len(offs)} offset(s) given")
            local = int(digits) + offs[slot]
            real = self.real_surf(local)
            return str(-real if sign == '-' else real)

        return " ".join(_TEMPLATE_NUMBER.sub(_sub, template).split())

    def composite(self, template: str, *offsets: int) -> Rule:
        """:meth:`composite_text` parsed into a rule."""
        return parse(self.composite_text(template, *offsets), label=self.owner)

    def rule(self, local: int) -> Rule:
        """Single-literal rule for a signed local offset."""
        return parse(str(self.real_surf(local)))

    def items(self) -> Iterator[Tuple[int, Surface]]:
        """(real id, surface) pairs built by this map, sorted by id."""
        for number, surf in self.registry.definitions():
            if self.registry.owner_of(number) == self.owner:
                yield number, surf
