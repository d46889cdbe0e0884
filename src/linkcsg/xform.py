"""Rotation operations for linkCSG frames.

Rotations are carried as unit quaternions.  Angles are in degrees and
follow the right-hand rule about the (normalised) rotation axis, so a
positive rotation about Z takes X towards Y.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from . import geom
from .errors import DegenerateGeometryError


class Quaternion:
    """Unit quaternion ``w + xi + yj + zk``."""

    __slots__ = ('w', 'x', 'y', 'z')

    def __init__(self, w: float = 1.0, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self.w = float(w)
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    @classmethod
    def from_axis_angle(cls, axis: geom.VectorLike, angle: float) -> "Quaternion":
        """Rotation of ``angle`` degrees about ``axis``."""
        m = geom.mag(axis)
        if m < geom.epsilon:
            raise DegenerateGeometryError('zero-length rotation axis not allowed')
        u = np.asarray(axis, dtype=float) / m
        half = math.radians(angle % 360.0) / 2.0
        s = math.sin(half)
        return cls(math.cos(half), u[0] * s, u[1] * s, u[2] * s)

    def __repr__(self) -> str:
        return "Quaternion({},{},{},{})".format(self.w, self.x, self.y, self.z)

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        """Hamilton product; ``(a * b).rotate(v) == a.rotate(b.rotate(v))``."""
        if not isinstance(other, Quaternion):
            return NotImplemented
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1*w2 - x1*x2 - y1*y2 - z1*z2,
            w1*x2 + x1*w2 + y1*z2 - z1*y2,
            w1*y2 - x1*z2 + y1*w2 + z1*x2,
            w1*z2 + x1*y2 - y1*x2 + z1*w2,
        )

    def conjugate(self) -> "Quaternion":
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def norm(self) -> float:
        return math.sqrt(self.w*self.w + self.x*self.x + self.y*self.y + self.z*self.z)

    def matrix(self) -> np.ndarray:
        """3x3 rotation matrix equivalent to this quaternion."""
        w, x, y, z = self.w, self.x, self.y, self.z
        return np.array([
            [1 - 2*(y*y + z*z), 2*(x*y - z*w), 2*(x*z + y*w)],
            [2*(x*y + z*w), 1 - 2*(x*x + z*z), 2*(y*z - x*w)],
            [2*(x*z - y*w), 2*(y*z + x*w), 1 - 2*(x*x + y*y)],
        ])

    def rotate(self, v: geom.VectorLike) -> np.ndarray:
        """Return ``v`` rotated by this quaternion (``q v q*``)."""
        return geom.vec3(self.matrix() @ np.asarray(v, dtype=float))

    def rotate_all(self, vectors: Iterable[geom.VectorLike]) -> list:
        return [self.rotate(v) for v in vectors]


def rotate_vector(v: geom.VectorLike, axis: geom.VectorLike, angle: float) -> np.ndarray:
    """Rotate ``v`` by ``angle`` degrees about ``axis`` through the origin."""
    return Quaternion.from_axis_angle(axis, angle).rotate(v)


def rotate_point(p: geom.VectorLike, centre: geom.VectorLike,
                 axis: geom.VectorLike, angle: float) -> np.ndarray:
    """Rotate point ``p`` about the line through ``centre`` along ``axis``."""
    c = np.asarray(centre, dtype=float)
    return geom.vec3(c + rotate_vector(np.asarray(p, dtype=float) - c, axis, angle))
