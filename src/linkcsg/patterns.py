"""Repeated-geometry patterns.

:func:`bolt_ring` divides an annular plate into ``N`` equal wedges, each
with one bolt hole, so a flange or chopper housing gets its bolts, the
wall between them and an optional seal in one call.

Wedge ``i`` lies between divider plane ``i-1`` (on its positive side)
and divider plane ``i`` (on its negative side); the divider planes sit
half a step either side of bolt ``i``.  All wedge, bolt and seal cells
together fill ``front_back ∧ edge`` exactly once, provided the bolts lie
inside ``edge`` and clear of the seal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from . import geom
from .cells import Cell
from .rules import Rule, complement_of, intersect, to_rule
from .xform import rotate_vector

logger = logging.getLogger(__name__)

__all__ = ["RingMaterials", "RingResult", "bolt_ring", "bolt_surface_offset"]

## local offset of bolt i's surfaces: cylinder at +7, divider plane at +3
BOLT_BLOCK = 100
BOLT_STEP = 10


def bolt_surface_offset(surf_offset: int, i: int) -> int:
    """First local offset used by bolt ``i`` of a ring at ``surf_offset``."""
    return surf_offset + BOLT_BLOCK + BOLT_STEP * i


@dataclass(frozen=True)
class RingMaterials:
    bolt: int = 0
    wall: int = 0
    seal: int = 0


@dataclass
class RingResult:
    """Cells and geometry produced by :func:`bolt_ring`.

    ``entries`` holds ``(group, cell)`` pairs in creation order; groups are
    ``"Bolts"``, ``"Wall"`` and ``"Seal"``.  ``spans`` are the wedge
    angular ranges in degrees measured from ``radial`` about ``axis``.
    """
    entries: List[Tuple[str, Cell]] = field(default_factory=list)
    spans: List[Tuple[float, float]] = field(default_factory=list)
    bolt_centres: List[np.ndarray] = field(default_factory=list)
    surfaces: List[int] = field(default_factory=list)

    @property
    def cells(self) -> List[Cell]:
        return [c for _, c in self.entries]

    @property
    def groups(self) -> Dict[str, List[int]]:
        out: Dict[str, List[int]] = {"Bolts": [], "Wall": [], "Seal": []}
        for group, cell in self.entries:
            out[group].append(cell.number)
        return out

    def total_span(self) -> float:
        return sum(end - start for start, end in self.spans)


def bolt_ring(smap, surf_offset: int, centre: geom.VectorLike, axis: geom.VectorLike,
              radial: geom.VectorLike, n_bolts: int, bolt_radius_position: float,
              bolt_radius: float, next_cell: Callable[[], int],
              front_back, edge, seal=None, angle_offset: float = 0.0,
              materials: RingMaterials = RingMaterials()) -> RingResult:
    """Build a ring of ``n_bolts`` bolts about ``centre``.

    Args:
        smap: surface map of the owning component; bolt surfaces use local
            offsets ``surf_offset + 100 + 10 i`` (+7 cylinder, +3 plane).
        axis: ring axis (bolts run along it).
        radial: direction of bolt 0 before ``angle_offset``; must be
            perpendicular to ``axis``.
        bolt_radius_position: distance of the bolt centres from ``centre``.
        bolt_radius: radius of each bolt.
        next_cell: returns the next free cell number.
        front_back: rule for the slab between the ring's faces.
        edge: rule for the annulus (inner and outer radius).
        seal: optional rule for a seal region, cut out of the wall and
            split into one seal cell per wedge.

    With one bolt the ring is treated as welded: a single wall cell and no
    bolt or seal cells.
    """
    if n_bolts < 1:
        raise ValueError(f'a bolt ring needs at least one bolt, got {n_bolts}')
    if bolt_radius <= 0.0 or bolt_radius_position <= 0.0:
        raise ValueError('bolt radius and bolt position radius must be positive')

    ax = geom.unit(axis)
    rad = geom.unit(radial)
    if abs(geom.dot(ax, rad)) > geom.zero_tol:
        raise ValueError('radial direction must be perpendicular to the ring axis')
    c = geom.vec3(centre)
    fb = to_rule(front_back)
    edge_rule = to_rule(edge)
    seal_rule = to_rule(seal)
    result = RingResult()

    if n_bolts == 1:
        cell = Cell(next_cell(), materials.wall, intersect(fb, edge_rule))
        result.entries.append(("Wall", cell))
        result.spans.append((angle_offset, angle_offset + 360.0))
        logger.debug("welded ring at offset %d", surf_offset)
        return result

    step = 360.0 / n_bolts
    divider = geom.cross(ax, rad)
    for i in range(n_bolts):
        local = bolt_surface_offset(surf_offset, i)
        angle = angle_offset + i * step
        bolt_c = geom.vec3(c + bolt_radius_position * rotate_vector(rad, ax, angle))
        normal = rotate_vector(divider, ax, angle + step / 2.0)
        result.surfaces.append(smap.build_cylinder(local + 7, bolt_c, ax, bolt_radius))
        result.surfaces.append(smap.build_plane(local + 3, c, normal))
        result.bolt_centres.append(bolt_c)
        result.spans.append((angle - step / 2.0, angle + step / 2.0))

    not_seal: Optional[Rule] = None if seal_rule is None else complement_of(seal_rule)
    prev = bolt_surface_offset(surf_offset, n_bolts - 1)
    for i in range(n_bolts):
        local = bolt_surface_offset(surf_offset, i)

        bolt = smap.composite(" -7 ", local)
        result.entries.append(("Bolts", Cell(next_cell(), materials.bolt, intersect(bolt, fb))))

        wedge = smap.composite(" 3 -3M 7M ", prev, local)
        parts = [wedge, fb, edge_rule] + ([not_seal] if not_seal is not None else [])
        result.entries.append(("Wall", Cell(next_cell(), materials.wall, intersect(*parts))))

        if seal_rule is not None:
            seal_wedge = smap.composite(" 3 -3M ", prev, local)
            result.entries.append(
                ("Seal", Cell(next_cell(), materials.seal, intersect(seal_wedge, seal_rule))))
        prev = local

    logger.debug("bolt ring at offset %d: %d bolt(s), %d cell(s)",
                 surf_offset, n_bolts, len(result.entries))
    return result
