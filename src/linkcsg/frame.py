"""
Coordinate frames and link points.

A :class:`CoordinateFrame` is the placement of one component: an origin,
a right-handed orthonormal basis ``(X, Y, Z)`` with ``Y`` along the
logical beam direction, an auxiliary beam origin/axis, and an ordered
list of :class:`LinkPoint` ports that other components attach to.

Frames are values.  Every operation returns a new frame and leaves the
receiver untouched, so a child derived from a parent's port can never
disturb the parent or its siblings::

    parent = create_frame((0, 0, 0), (0, 1, 0), (0, 0, 1), n_links=2)
    parent = parent.attach_link_point(1, point=(0, 10, 0), axis=(0, 1, 0),
                                      rule=literal(-10002))
    child = derive_frame(parent, 2).shift(0, 1.5, 0).rotate(30.0, 0.0)

Port indices are zero-based when a port is set and signed one-based when
it is queried: ``+k`` reads port ``k-1`` as stored, ``-k`` reads it facing
the other way (negated axis, complemented rule) and ``0`` stands for the
frame's own origin and beam axis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

import numpy as np

from . import geom
from .errors import DegenerateGeometryError, IncompleteLinkError, LinkIndexError
from .rules import Rule, complement_of, intersect, to_rule
from .xform import Quaternion

logger = logging.getLogger(__name__)

__all__ = [
    "LinkPoint",
    "LinkView",
    "FrameOffset",
    "CoordinateFrame",
    "create_frame",
    "derive_frame",
]


def _opt_vec(v) -> Optional[np.ndarray]:
    return None if v is None else geom.vec3(v)


def _opt_unit(v) -> Optional[np.ndarray]:
    return None if v is None else geom.unit(v)


@dataclass(frozen=True, eq=False)
class LinkPoint:
    """One attachment port.

    ``rule`` bounds the region beyond the port, on the side its axis points
    to; ``common`` is an optional extra bound that must accompany it (e.g.
    the outer radius of a flange face).
    """
    index: int
    point: Optional[np.ndarray] = None
    axis: Optional[np.ndarray] = None
    rule: Optional[Rule] = None
    common: Optional[Rule] = None

    @property
    def has_point(self) -> bool:
        return self.point is not None

    @property
    def has_axis(self) -> bool:
        return self.axis is not None

    @property
    def has_rule(self) -> bool:
        return self.rule is not None

    @property
    def has_common(self) -> bool:
        return self.common is not None

    def __repr__(self) -> str:
        pt = None if self.point is None else [float(c) for c in self.point]
        ax = None if self.axis is None else [float(c) for c in self.axis]
        return (f"LinkPoint(index={self.index}, point={pt}, axis={ax}, "
                f"rule={self.rule}, common={self.common})")


@dataclass(frozen=True, eq=False)
class LinkView:
    """A port as seen through a signed index."""
    signed_index: int
    point: Optional[np.ndarray]
    axis: Optional[np.ndarray]
    rule: Optional[Rule] = None
    common: Optional[Rule] = None

    @property
    def has_point(self) -> bool:
        return self.point is not None

    @property
    def has_axis(self) -> bool:
        return self.axis is not None

    @property
    def has_rule(self) -> bool:
        return self.rule is not None

    @property
    def has_common(self) -> bool:
        return self.common is not None


@dataclass(frozen=True)
class FrameOffset:
    """Local shift followed by a two-angle rotation, in degrees."""
    x_step: float = 0.0
    y_step: float = 0.0
    z_step: float = 0.0
    xy_angle: float = 0.0
    z_angle: float = 0.0

    @classmethod
    def from_variables(cls, store, key: str) -> "FrameOffset":
        """Read ``{key}XStep`` .. ``{key}ZAngle``, each defaulting to zero."""
        return cls(
            x_step=float(store.eval_default(key + "XStep", 0.0)),
            y_step=float(store.eval_default(key + "YStep", 0.0)),
            z_step=float(store.eval_default(key + "ZStep", 0.0)),
            xy_angle=float(store.eval_default(key + "XYAngle", 0.0)),
            z_angle=float(store.eval_default(key + "ZAngle", 0.0)),
        )

    @property
    def is_identity(self) -> bool:
        return not any((self.x_step, self.y_step, self.z_step, self.xy_angle, self.z_angle))


@dataclass(frozen=True, eq=False)
class CoordinateFrame:
    """Immutable placement of a component.

    ``provenance`` lists, oldest first, the operations that produced the
    frame; it is informational and never affects geometry.
    """
    origin: np.ndarray
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    beam_origin: np.ndarray
    beam_axis: np.ndarray
    links: Tuple[LinkPoint, ...] = ()
    provenance: Tuple[str, ...] = field(default=())

    # ------------------------------------------------------------------
    # basis
    # ------------------------------------------------------------------

    @property
    def n_links(self) -> int:
        return len(self.links)

    @property
    def axes(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.x, self.y, self.z

    def is_orthonormal(self, tol: float = geom.epsilon) -> bool:
        return geom.is_orthonormal(self.x, self.y, self.z, tol)

    def _evolve(self, note: str, **changes) -> "CoordinateFrame":
        return replace(self, provenance=self.provenance + (note,), **changes)

    def _with_basis(self, note: str, x, y, **changes) -> "CoordinateFrame":
        X, Y, Z = geom.orthonormalize(x, y)
        return self._evolve(note, x=X, y=Y, z=Z, **changes)

    def shift(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "CoordinateFrame":
        """Translate along the frame's own axes (beam origin moves too)."""
        step = dx * self.x + dy * self.y + dz * self.z
        return self._evolve(f"shift({dx:g},{dy:g},{dz:g})",
                            origin=geom.vec3(self.origin + step),
                            beam_origin=geom.vec3(self.beam_origin + step))

    def rotate(self, angle_xy: float = 0.0, angle_z: float = 0.0,
               centre: Optional[geom.VectorLike] = None) -> "CoordinateFrame":
        """Tilt by ``angle_z`` about X, then turn by ``angle_xy`` about Z.

        Both rotation axes are taken as they stand before the call.  The
        beam axis is left alone.  With ``centre`` the origin is swung about
        that point as well.
        """
        qz = Quaternion.from_axis_angle(self.x, angle_z)
        qxy = Quaternion.from_axis_angle(self.z, angle_xy)
        q = qxy * qz
        changes = {}
        if centre is not None:
            c = np.asarray(centre, dtype=float)
            changes["origin"] = geom.vec3(c + q.rotate(self.origin - c))
        return self._with_basis(f"rotate({angle_xy:g},{angle_z:g})",
                                q.rotate(self.x), q.rotate(self.y), **changes)

    def rotate_xyz(self, angle_x: float = 0.0, angle_y: float = 0.0,
                   angle_z: float = 0.0) -> "CoordinateFrame":
        """Rotate about X, then Y, then Z (axes taken before the call)."""
        qx = Quaternion.from_axis_angle(self.x, angle_x)
        qy = Quaternion.from_axis_angle(self.y, angle_y)
        qz = Quaternion.from_axis_angle(self.z, angle_z)
        q = qz * qy * qx
        return self._with_basis(f"rotate_xyz({angle_x:g},{angle_y:g},{angle_z:g})",
                                q.rotate(self.x), q.rotate(self.y))

    def rotate_about(self, axis: geom.VectorLike, angle: float) -> "CoordinateFrame":
        """Rotate the basis and the beam axis about an arbitrary axis."""
        q = Quaternion.from_axis_angle(axis, angle)
        return self._with_basis(f"rotate_about({angle:g})",
                                q.rotate(self.x), q.rotate(self.y),
                                beam_axis=geom.unit(q.rotate(self.beam_axis)))

    def reverse_z(self) -> "CoordinateFrame":
        """Flip Z (and X, to stay right handed) keeping Y."""
        return self._evolve("reverse_z", x=geom.vec3(-self.x), z=geom.vec3(-self.z))

    def apply_offset(self, offset: FrameOffset) -> "CoordinateFrame":
        if offset.is_identity:
            return self
        return (self.shift(offset.x_step, offset.y_step, offset.z_step)
                .rotate(offset.xy_angle, offset.z_angle))

    def at(self, point: geom.VectorLike) -> "CoordinateFrame":
        """Same axes, origin (and beam origin) moved to ``point``."""
        p = geom.vec3(point)
        return self._evolve("at", origin=p, beam_origin=p)

    def to_global(self, local: geom.VectorLike) -> np.ndarray:
        """Point given in frame coordinates ``(x, y, z)`` as a global point."""
        lx, ly, lz = (float(c) for c in local)
        return geom.vec3(self.origin + lx * self.x + ly * self.y + lz * self.z)

    def to_local(self, point: geom.VectorLike) -> np.ndarray:
        d = np.asarray(point, dtype=float) - self.origin
        return geom.vec3(np.dot(d, self.x), np.dot(d, self.y), np.dot(d, self.z))

    # ------------------------------------------------------------------
    # link points
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self.links):
            raise LinkIndexError(index, len(self.links), "link point")

    def _signed(self, signed_index: int) -> LinkPoint:
        k = abs(signed_index)
        if k == 0 or k > len(self.links):
            raise LinkIndexError(signed_index, len(self.links), "signed link point")
        return self.links[k - 1]

    def _replace_link(self, note: str, lp: LinkPoint) -> "CoordinateFrame":
        links = list(self.links)
        links[lp.index] = lp
        return self._evolve(note, links=tuple(links))

    def resize_links(self, n: int) -> "CoordinateFrame":
        """Truncate or pad the port list to ``n`` entries."""
        if n < 0:
            raise ValueError(f'link count must be non-negative: {n}')
        links = self.links[:n] + tuple(LinkPoint(i) for i in range(len(self.links), n))
        return self._evolve(f"resize_links({n})", links=links)

    def link(self, index: int) -> LinkPoint:
        """Stored port ``index`` (zero based)."""
        self._check_index(index)
        return self.links[index]

    def attach_link_point(self, index: int, point=None, axis=None,
                          rule=None, common=None) -> "CoordinateFrame":
        """Replace port ``index`` wholesale."""
        self._check_index(index)
        lp = LinkPoint(index, _opt_vec(point), _opt_unit(axis), to_rule(rule), to_rule(common))
        return self._replace_link(f"attach({index})", lp)

    def set_connect(self, index: int, point: geom.VectorLike,
                    axis: geom.VectorLike) -> "CoordinateFrame":
        """Set the point and axis of port ``index``, keeping its rules."""
        lp = replace(self.link(index), point=geom.vec3(point), axis=geom.unit(axis))
        return self._replace_link(f"connect({index})", lp)

    def set_link_rule(self, index: int, rule) -> "CoordinateFrame":
        lp = replace(self.link(index), rule=to_rule(rule))
        return self._replace_link(f"link_rule({index})", lp)

    def set_link_common(self, index: int, rule) -> "CoordinateFrame":
        lp = replace(self.link(index), common=to_rule(rule))
        return self._replace_link(f"link_common({index})", lp)

    def query_link_point(self, signed_index: int) -> LinkView:
        """Port seen through ``signed_index``.

        ``+k``: port ``k-1`` as stored.  ``-k``: same point, negated axis,
        :func:`~linkcsg.rules.complement_of` of the rule.  ``0``: origin and
        beam axis, no rules.
        """
        if signed_index == 0:
            return LinkView(0, self.origin, self.beam_axis)
        lp = self._signed(signed_index)
        if signed_index > 0:
            return LinkView(signed_index, lp.point, lp.axis, lp.rule, lp.common)
        axis = None if lp.axis is None else geom.vec3(-lp.axis)
        rule = None if lp.rule is None else complement_of(lp.rule)
        return LinkView(signed_index, lp.point, axis, rule, lp.common)

    def link_pt(self, signed_index: int) -> np.ndarray:
        """Connection point for ``signed_index``; IncompleteLinkError if unset."""
        view = self.query_link_point(signed_index)
        if view.point is None:
            raise IncompleteLinkError(f"link point {signed_index} has no connection point")
        return view.point

    def link_axis(self, signed_index: int) -> np.ndarray:
        """Axis for ``signed_index``; IncompleteLinkError if unset."""
        view = self.query_link_point(signed_index)
        if view.axis is None:
            raise IncompleteLinkError(f"link point {signed_index} has no axis")
        return view.axis

    def link_rule(self, signed_index: int) -> Rule:
        """Signed main rule; IncompleteLinkError if unset."""
        view = self.query_link_point(signed_index)
        if view.rule is None:
            raise IncompleteLinkError(f"link point {signed_index} has no rule")
        return view.rule

    def bridge_rule(self, signed_index: int) -> Rule:
        """Signed main rule intersected with the port's common rule."""
        view = self.query_link_point(signed_index)
        if view.rule is None:
            raise IncompleteLinkError(f"link point {signed_index} has no rule")
        if view.common is None:
            return view.rule
        return intersect(view.rule, view.common)

    def set_basic_extent(self, x_width: float, y_width: float,
                         z_width: float) -> "CoordinateFrame":
        """Ports 0..5 at the faces of a box of half widths about the origin.

        Order is -Y, +Y, -X, +X, -Z, +Z; the frame must have at least six
        ports.  Existing rules are kept.
        """
        if len(self.links) < 6:
            raise LinkIndexError(5, len(self.links), "set_basic_extent needs 6 link points")
        faces = ((-self.y, y_width), (self.y, y_width),
                 (-self.x, x_width), (self.x, x_width),
                 (-self.z, z_width), (self.z, z_width))
        links = list(self.links)
        for i, (direction, width) in enumerate(faces):
            links[i] = replace(links[i], point=geom.vec3(self.origin + width * direction),
                               axis=geom.vec3(direction))
        return self._evolve(f"basic_extent({x_width:g},{y_width:g},{z_width:g})",
                            links=tuple(links))

    def link_copy(self, index: int, other: "CoordinateFrame",
                  signed_index: int) -> "CoordinateFrame":
        """Copy another frame's port into port ``index``.

        A negative ``signed_index`` copies the port as seen from the far
        side (negated axis, complemented rule).
        """
        self._check_index(index)
        if signed_index == 0:
            raise LinkIndexError(0, len(other.links), "link_copy needs a non-zero side")
        view = other.query_link_point(signed_index)
        lp = LinkPoint(index, view.point, view.axis, view.rule, view.common)
        return self._replace_link(f"link_copy({index},{signed_index})", lp)

    def rotate_link_axis(self, signed_index: int, angle_xy: float,
                         angle_z: float) -> "CoordinateFrame":
        """Turn one port's axis (not its point) like :meth:`rotate`.

        Angles are negated for a negative index so the rotation is seen the
        same way from either side.
        """
        lp = self._signed(signed_index)
        if lp.axis is None:
            raise IncompleteLinkError(f"link point {signed_index} has no axis")
        sign = 1.0 if signed_index > 0 else -1.0
        qz = Quaternion.from_axis_angle(self.x, sign * angle_z)
        qxy = Quaternion.from_axis_angle(self.z, sign * angle_xy)
        axis = geom.unit((qxy * qz).rotate(lp.axis))
        return self._replace_link(f"rotate_link({signed_index})", replace(lp, axis=axis))

    def find_link_axis(self, direction: geom.VectorLike) -> int:
        """Zero-based index of the port whose axis best matches ``direction``."""
        best, best_value = None, -2.0
        for lp in self.links:
            if lp.axis is None:
                continue
            value = geom.dot(direction, lp.axis)
            if value > best_value:
                best, best_value = lp.index, value
        if best is None:
            raise IncompleteLinkError('no link point has an axis')
        return best

    def calc_link_axis(self, signed_index: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Orthonormal ``(X, Y, Z)`` with Y along the signed port axis.

        Z is kept as close to the frame's Z as possible; if the port axis is
        along Z, the frame's X is used as the up hint instead.
        """
        if signed_index == 0:
            return self.x, self.y, self.z
        y = self.link_axis(signed_index)
        z_hint = self.x if geom.isparallel(self.z, y) else self.z
        x = geom.unit(np.cross(y, z_hint))
        z = geom.unit(np.cross(x, y))
        return x, y, z

    def exit_point(self) -> np.ndarray:
        """Connection point of port 1 (signed 2), else the origin."""
        if len(self.links) > 1 and self.links[1].has_point:
            return self.links[1].point
        return self.origin

    def exit_axis(self) -> np.ndarray:
        """Axis of port 1 (signed 2), else the beam axis."""
        if len(self.links) > 1 and self.links[1].has_axis:
            return self.links[1].axis
        return self.beam_axis

    def set_exit(self, point: geom.VectorLike, axis: geom.VectorLike) -> "CoordinateFrame":
        if len(self.links) < 2:
            raise LinkIndexError(1, len(self.links), "set_exit needs 2 link points")
        return self.set_connect(1, point, axis)

    def __repr__(self) -> str:
        def fmt(v):
            return "(" + ", ".join(f"{float(c):g}" for c in v) + ")"
        return (f"CoordinateFrame(origin={fmt(self.origin)}, X={fmt(self.x)}, "
                f"Y={fmt(self.y)}, Z={fmt(self.z)}, links={len(self.links)})")


def _basis(beam_axis: geom.VectorLike, z_hint: geom.VectorLike):
    y = geom.unit(beam_axis)
    zt = geom.unit(z_hint)
    if geom.isparallel(y, zt):
        raise DegenerateGeometryError(
            f'beam axis {list(y)} is parallel to the Z hint {list(zt)}')
    x = geom.unit(np.cross(y, zt))
    z = geom.unit(np.cross(x, y))
    return x, y, z


def create_frame(origin: geom.VectorLike, beam_axis: geom.VectorLike,
                 z_hint: geom.VectorLike, n_links: int = 0) -> CoordinateFrame:
    """Frame at ``origin`` with Y along ``beam_axis`` and Z near ``z_hint``.

    Raises DegenerateGeometryError if either vector is zero or they are
    parallel.
    """
    if n_links < 0:
        raise ValueError(f'link count must be non-negative: {n_links}')
    x, y, z = _basis(beam_axis, z_hint)
    o = geom.vec3(origin)
    return CoordinateFrame(origin=o, x=x, y=y, z=z, beam_origin=o, beam_axis=y,
                           links=tuple(LinkPoint(i) for i in range(n_links)),
                           provenance=("create_frame",))


def derive_frame(parent: CoordinateFrame, side_index: int = 0,
                 n_links: int = 0) -> CoordinateFrame:
    """New frame attached to ``parent`` at signed port ``side_index``.

    ``0`` copies the parent's origin, axes and beam.  ``±k`` puts the
    origin at port ``k-1``'s point with Y along ``±`` its axis; Z follows
    the parent's Z unless that is (anti)parallel to Y, in which case the
    parent's X is used.  The new frame has ``n_links`` empty ports.
    """
    if n_links < 0:
        raise ValueError(f'link count must be non-negative: {n_links}')
    links = tuple(LinkPoint(i) for i in range(n_links))
    if side_index == 0:
        return CoordinateFrame(origin=parent.origin, x=parent.x, y=parent.y, z=parent.z,
                               beam_origin=parent.beam_origin, beam_axis=parent.beam_axis,
                               links=links,
                               provenance=parent.provenance + ("derive(0)",))

    lp = parent._signed(side_index)
    if lp.point is None or lp.axis is None:
        raise IncompleteLinkError(
            f"link point {side_index} of the parent frame has no "
            f"{'connection point' if lp.point is None else 'axis'}")
    sign = 1.0 if side_index > 0 else -1.0
    y = geom.vec3(sign * lp.axis)
    z_hint = parent.x if geom.isparallel(parent.z, y) else parent.z
    x, y, z = _basis(y, z_hint)
    logger.debug("derived frame at link %d: origin %s", side_index, list(lp.point))
    return CoordinateFrame(origin=lp.point, x=x, y=y, z=z,
                           beam_origin=lp.point, beam_axis=y, links=links,
                           provenance=parent.provenance + (f"derive({side_index})",))
