"""Rectangular shielding block centred on its frame origin."""

from __future__ import annotations

from ..component import Component
from ..geom import VectorLike

__all__ = ["ShieldBlock"]


class ShieldBlock(Component):
    """Box of one material.

    Variables (prefixed with the key name): ``Length`` (along Y),
    ``Width`` (X), ``Height`` (Z), ``Mat``, optional ``Temp`` and the
    frame offset ``XStep`` .. ``ZAngle``.

    Surfaces 1/2 are the -Y/+Y faces, 3/4 the -X/+X faces and 5/6 the
    -Z/+Z faces.  The six link points follow the same order, each with
    the half-space just outside its face as the rule; the -Y/+Y ports also
    carry the lateral extent as their common rule.
    """

    n_links = 6

    def __init__(self, key_name: str):
        super().__init__(key_name)
        self.length = 0.0
        self.width = 0.0
        self.height = 0.0
        self.mat = 0
        self.temp = 0.0

    def populate(self, variables) -> None:
        super().populate(variables)
        self.length = variables.eval_variable(self.key_name + "Length", float)
        self.width = variables.eval_variable(self.key_name + "Width", float)
        self.height = variables.eval_variable(self.key_name + "Height", float)
        self.mat = variables.eval_default(self.key_name + "Mat", 0, int)
        self.temp = variables.eval_default(self.key_name + "Temp", 0.0, float)
        for name, value in (("Length", self.length), ("Width", self.width),
                            ("Height", self.height)):
            if value <= 0.0:
                raise ValueError(f"{self.key_name}{name} must be positive: {value}")

    def _face(self, local: int, direction: VectorLike, half: float) -> None:
        self.smap.build_plane(local, self.frame.origin + half * direction, direction)

    def create_surfaces(self) -> None:
        f = self.frame
        self._face(1, f.y, -self.length / 2.0)
        self._face(2, f.y, self.length / 2.0)
        self._face(3, f.x, -self.width / 2.0)
        self._face(4, f.x, self.width / 2.0)
        self._face(5, f.z, -self.height / 2.0)
        self._face(6, f.z, self.height / 2.0)

    def create_objects(self) -> None:
        self.add_cell("Main", self.mat, self.smap.composite(" 1 -2 3 -4 5 -6 "), self.temp)

    def create_links(self) -> None:
        frame = self.frame.set_basic_extent(self.width / 2.0, self.length / 2.0,
                                            self.height / 2.0)
        for index, local in enumerate((-1, 2, -3, 4, -5, 6)):
            frame = frame.set_link_rule(index, self.smap.rule(local))
        sides = self.smap.composite(" 3 -4 5 -6 ")
        frame = frame.set_link_common(0, sides).set_link_common(1, sides)
        self.frame = frame
