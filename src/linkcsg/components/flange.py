"""Annular flange plate with a bolt ring."""

from __future__ import annotations

import logging
from typing import Optional

from ..component import Component
from ..patterns import RingMaterials, RingResult, bolt_ring
from ..rules import Literal, Rule

logger = logging.getLogger(__name__)

__all__ = ["BoltedFlange"]

## local offset of the bolt ring surfaces
RING_OFFSET = 1000


class BoltedFlange(Component):
    """Flange of thickness ``Thick`` starting at its frame origin.

    Variables (prefixed with the key name):

    ========================  ==========================================
    ``Radius``                bore radius
    ``OuterRadius``           outer radius
    ``Thick``                 thickness along Y
    ``NBolts``                number of bolts (default 8, 1 = welded)
    ``BoltCentre``            radius of the bolt circle (default midway)
    ``BoltRadius``            bolt radius
    ``BoltAngOff``            angle of the first bolt from Z (default 0)
    ``SealRadius``            optional inner radius of a seal band
    ``SealWidth``             radial width of the seal band
    ``Mat``, ``BoltMat``,     materials (default void)
    ``SealMat``
    ========================  ==========================================

    When attached to a port whose rule is a single surface and no frame
    offset is applied, the flange reuses that surface as its front face.
    """

    n_links = 2

    def __init__(self, key_name: str):
        super().__init__(key_name)
        self.radius = 0.0
        self.outer_radius = 0.0
        self.thick = 0.0
        self.n_bolts = 8
        self.bolt_centre = 0.0
        self.bolt_radius = 0.0
        self.bolt_ang_off = 0.0
        self.seal_radius: Optional[float] = None
        self.seal_width = 0.0
        self.mat = 0
        self.bolt_mat = 0
        self.seal_mat = 0
        self.front_rule: Optional[Rule] = None
        self.ring: Optional[RingResult] = None

    def populate(self, variables) -> None:
        super().populate(variables)
        key = self.key_name
        self.radius = variables.eval_variable(key + "Radius", float)
        self.outer_radius = variables.eval_variable(key + "OuterRadius", float)
        self.thick = variables.eval_variable(key + "Thick", float)
        self.n_bolts = variables.eval_default(key + "NBolts", 8, int)
        self.bolt_centre = variables.eval_default(
            key + "BoltCentre", (self.radius + self.outer_radius) / 2.0, float)
        self.bolt_radius = variables.eval_variable(key + "BoltRadius", float)
        self.bolt_ang_off = variables.eval_default(key + "BoltAngOff", 0.0, float)
        self.seal_radius = variables.eval_default(key + "SealRadius", None)
        if self.seal_radius is not None:
            self.seal_radius = float(self.seal_radius)
            self.seal_width = variables.eval_variable(key + "SealWidth", float)
        self.mat = variables.eval_default(key + "Mat", 0, int)
        self.bolt_mat = variables.eval_default(key + "BoltMat", 0, int)
        self.seal_mat = variables.eval_default(key + "SealMat", 0, int)

        if not 0.0 < self.radius < self.outer_radius:
            raise ValueError(f"{key}: need 0 < Radius < OuterRadius")
        if self.thick <= 0.0:
            raise ValueError(f"{key}Thick must be positive: {self.thick}")
        if not (self.radius < self.bolt_centre - self.bolt_radius
                and self.bolt_centre + self.bolt_radius < self.outer_radius):
            raise ValueError(f"{key}: bolts do not fit between Radius and OuterRadius")
        if self.seal_radius is not None:
            seal_outer = self.seal_radius + self.seal_width
            if self.seal_width <= 0.0:
                raise ValueError(f"{key}SealWidth must be positive: {self.seal_width}")
            if not (self.radius < self.seal_radius and seal_outer < self.outer_radius):
                raise ValueError(f"{key}: seal band must lie between Radius and OuterRadius")
            # the ring cuts the seal out of the wall only, never out of a bolt
            if (self.seal_radius < self.bolt_centre + self.bolt_radius
                    and self.bolt_centre - self.bolt_radius < seal_outer):
                raise ValueError(f"{key}: seal band overlaps the bolt circle")

    def create_unit_vector(self, parent, side_index: int = 0) -> None:
        super().create_unit_vector(parent, side_index)
        self.front_rule = None
        if parent is not None and side_index != 0 and self.offset.is_identity:
            self.front_rule = parent.query_link_point(side_index).rule

    def create_surfaces(self) -> None:
        f = self.frame
        if isinstance(self.front_rule, Literal):
            self.smap.add_match(1, self.front_rule.surface)
            logger.debug("%s: front face shared with surface %d",
                         self.key_name, self.front_rule.surface)
        else:
            self.smap.build_plane(1, f.origin, f.y)
        self.smap.build_plane(2, f.origin + self.thick * f.y, f.y)
        self.smap.build_cylinder(7, f.origin, f.y, self.radius)
        self.smap.build_cylinder(17, f.origin, f.y, self.outer_radius)
        if self.seal_radius is not None:
            self.smap.build_cylinder(27, f.origin, f.y, self.seal_radius)
            self.smap.build_cylinder(37, f.origin, f.y, self.seal_radius + self.seal_width)

    def create_objects(self) -> None:
        self.add_cell("Void", 0, self.smap.composite(" 1 -2 -7 "))

        seal = None
        if self.seal_radius is not None:
            seal = self.smap.composite(" 1 -2 27 -37 ")
        f = self.frame
        self.ring = bolt_ring(
            self.smap, RING_OFFSET, f.origin, f.y, f.z, self.n_bolts,
            self.bolt_centre, self.bolt_radius, self.next_cell,
            front_back=self.smap.composite(" 1 -2 "),
            edge=self.smap.composite(" 7 -17 "),
            seal=seal,
            angle_offset=self.bolt_ang_off,
            materials=RingMaterials(self.bolt_mat, self.mat, self.seal_mat))
        for group, cell in self.ring.entries:
            self.add_cells(group, [cell])

    def create_links(self) -> None:
        f = self.frame
        outer = self.smap.composite(" -17 ")
        self.frame = (f
                      .attach_link_point(0, f.origin, -f.y, self.smap.rule(-1), outer)
                      .attach_link_point(1, f.origin + self.thick * f.y, f.y,
                                         self.smap.rule(2), outer))
