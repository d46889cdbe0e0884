"""
Unit tests for coordinate frames and link points.
"""

import math
import random

import numpy as np
import pytest

from linkcsg import geom
from linkcsg.errors import DegenerateGeometryError, IncompleteLinkError, LinkIndexError
from linkcsg.frame import FrameOffset, create_frame, derive_frame
from linkcsg.rules import complement_of, intersect, literal, parse
from linkcsg.variables import VariableStore


def identity_frame(n_links=0):
    return create_frame((0, 0, 0), (0, 1, 0), (0, 0, 1), n_links)


def two_port_frame():
    frame = identity_frame(2)
    frame = frame.attach_link_point(0, point=(0, -5, 0), axis=(0, -1, 0), rule=literal(-10001))
    frame = frame.attach_link_point(1, point=(0, 5, 0), axis=(0, 1, 0),
                                    rule=literal(10002), common=parse("-10007"))
    return frame


class TestCreateFrame:

    def test_identity(self):
        f = identity_frame()
        assert geom.close(f.x, (1, 0, 0))
        assert geom.close(f.y, (0, 1, 0))
        assert geom.close(f.z, (0, 0, 1))
        assert geom.close(f.origin, (0, 0, 0))
        assert geom.close(f.beam_axis, (0, 1, 0))
        assert f.provenance == ("create_frame",)

    def test_z_hint_not_orthogonal(self):
        f = create_frame((1, 2, 3), (0, 2, 0), (0, 1, 1))
        assert f.is_orthonormal()
        assert geom.close(f.y, (0, 1, 0))
        assert geom.close(f.z, (0, 0, 1))

    def test_parallel_axes(self):
        with pytest.raises(DegenerateGeometryError):
            create_frame((0, 0, 0), (0, 0, 1), (0, 0, -3))

    def test_zero_axis(self):
        with pytest.raises(DegenerateGeometryError):
            create_frame((0, 0, 0), (0, 0, 0), (0, 0, 1))
        with pytest.raises(ValueError):
            create_frame((0, 0, 0), (0, 1, 0), (0, 0, 0))

    def test_links_are_empty(self):
        f = identity_frame(3)
        assert f.n_links == 3
        assert [lp.index for lp in f.links] == [0, 1, 2]
        assert not f.links[0].has_point
        assert not f.links[0].has_rule


class TestTransforms:

    def test_shift_uses_local_axes(self):
        f = identity_frame().rotate(90.0, 0.0).shift(1.0, 0.0, 0.0)
        # after a quarter turn about Z, local X points along global Y
        assert geom.close(f.origin, (0, 1, 0))

    def test_shift_moves_beam_origin(self):
        f = identity_frame().shift(0, 2, 0)
        assert geom.close(f.beam_origin, (0, 2, 0))

    def test_rotate_xy(self):
        f = identity_frame().rotate(90.0, 0.0)
        assert geom.close(f.y, (-1, 0, 0))
        assert geom.close(f.x, (0, 1, 0))
        assert geom.close(f.z, (0, 0, 1))

    def test_rotate_z_angle_tilts_y_up(self):
        f = identity_frame().rotate(0.0, 90.0)
        assert geom.close(f.y, (0, 0, 1))
        assert geom.close(f.z, (0, -1, 0))

    def test_rotate_order(self):
        # tilt about the original X first, then turn about the original Z
        f = identity_frame().rotate(90.0, 90.0)
        assert geom.close(f.y, (0, 0, 1))
        assert geom.close(f.x, (0, 1, 0))
        assert f.is_orthonormal()

    def test_rotate_leaves_beam_axis(self):
        f = identity_frame().rotate(30.0, 10.0)
        assert geom.close(f.beam_axis, (0, 1, 0))

    def test_rotate_about_turns_beam_axis(self):
        f = identity_frame().rotate_about((0, 0, 1), 90.0)
        assert geom.close(f.beam_axis, (-1, 0, 0))
        assert geom.close(f.y, (-1, 0, 0))

    def test_rotate_xyz_order(self):
        f = identity_frame().rotate_xyz(90.0, 0.0, 90.0)
        # X rotation takes Y to Z; the Z rotation (about the original Z)
        # then leaves it there and takes X to Y
        assert geom.close(f.y, (0, 0, 1))
        assert geom.close(f.x, (0, 1, 0))

    def test_rotate_xyz_single_axis(self):
        f = identity_frame().rotate_xyz(0.0, 90.0, 0.0)
        assert geom.close(f.y, (0, 1, 0))
        assert geom.close(f.x, (0, 0, -1))

    def test_rotate_about_centre(self):
        f = create_frame((1, 0, 0), (0, 1, 0), (0, 0, 1)).rotate(180.0, 0.0, centre=(0, 0, 0))
        assert geom.close(f.origin, (-1, 0, 0))

    def test_reverse_z(self):
        f = identity_frame().reverse_z()
        assert geom.close(f.z, (0, 0, -1))
        assert geom.close(f.x, (-1, 0, 0))
        assert geom.close(f.y, (0, 1, 0))
        assert f.is_orthonormal()

    def test_orthonormal_after_many_operations(self):
        rng = random.Random(1234)
        f = create_frame((0, 0, 0), (0.3, 1, 0.1), (0.1, 0, 1))
        for _ in range(300):
            choice = rng.randrange(4)
            if choice == 0:
                f = f.shift(rng.uniform(-5, 5), rng.uniform(-5, 5), rng.uniform(-5, 5))
            elif choice == 1:
                f = f.rotate(rng.uniform(-180, 180), rng.uniform(-180, 180))
            elif choice == 2:
                f = f.rotate_xyz(rng.uniform(-90, 90), rng.uniform(-90, 90), rng.uniform(-90, 90))
            else:
                f = f.rotate_about((rng.random(), rng.random(), 1.0), rng.uniform(-90, 90))
            assert f.is_orthonormal(1e-10)
            assert geom.close(np.cross(f.x, f.y), f.z, 1e-10)

    def test_frames_are_values(self):
        f = two_port_frame()
        g = f.shift(1, 1, 1).rotate(45.0, 0.0).set_link_rule(0, literal(-5))
        assert geom.close(f.origin, (0, 0, 0))
        assert f.links[0].rule == literal(-10001)
        assert g.links[0].rule == literal(-5)
        with pytest.raises(ValueError):
            f.origin[0] = 3.0

    def test_apply_offset(self):
        offset = FrameOffset(x_step=1.0, y_step=2.0, xy_angle=90.0)
        f = identity_frame().apply_offset(offset)
        assert geom.close(f.origin, (1, 2, 0))
        assert geom.close(f.y, (-1, 0, 0))

    def test_offset_from_variables(self):
        store = VariableStore({"PipeYStep": 3.0, "PipeZAngle": 5.0})
        offset = FrameOffset.from_variables(store, "Pipe")
        assert offset == FrameOffset(y_step=3.0, z_angle=5.0)
        assert FrameOffset().is_identity
        assert identity_frame().apply_offset(FrameOffset()).provenance == ("create_frame",)

    def test_at(self):
        f = identity_frame().at((4, 5, 6))
        assert geom.close(f.origin, (4, 5, 6))
        assert geom.close(f.beam_origin, (4, 5, 6))

    def test_local_global(self):
        f = create_frame((1, 1, 1), (1, 0, 0), (0, 0, 1))
        p = f.to_global((0, 2, 0))
        assert geom.close(p, (3, 1, 1))
        assert geom.close(f.to_local(p), (0, 2, 0))

    def test_provenance(self):
        f = identity_frame().shift(0, 1, 0).reverse_z()
        assert f.provenance == ("create_frame", "shift(0,1,0)", "reverse_z")


class TestLinkPoints:

    def test_attach_normalises_axis(self):
        f = identity_frame(1).attach_link_point(0, point=(1, 2, 3), axis=(0, 5, 0))
        lp = f.link(0)
        assert geom.close(lp.axis, (0, 1, 0))
        assert lp.has_point and lp.has_axis
        assert not lp.has_rule and not lp.has_common

    def test_attach_accepts_rule_text(self):
        f = identity_frame(1).attach_link_point(0, rule="1 -2", common=7)
        assert f.link(0).rule == parse("1 -2")
        assert f.link(0).common == literal(7)

    def test_out_of_range(self):
        f = identity_frame(2)
        with pytest.raises(LinkIndexError):
            f.attach_link_point(2, point=(0, 0, 0))
        with pytest.raises(IndexError):
            f.set_link_rule(-1, literal(1))
        with pytest.raises(IndexError):
            f.query_link_point(3)
        with pytest.raises(IndexError):
            f.query_link_point(-3)

    def test_query_positive(self):
        f = two_port_frame()
        view = f.query_link_point(2)
        assert geom.close(view.point, (0, 5, 0))
        assert geom.close(view.axis, (0, 1, 0))
        assert view.rule == literal(10002)
        assert view.common == literal(-10007)

    def test_query_negative(self):
        f = two_port_frame()
        view = f.query_link_point(-2)
        assert geom.close(view.point, (0, 5, 0))
        assert geom.close(view.axis, (0, -1, 0))
        assert view.rule == literal(-10002)
        assert view.common == literal(-10007)

    @pytest.mark.parametrize("k", [1, 2])
    def test_sign_symmetry(self, k):
        f = two_port_frame()
        plus, minus = f.query_link_point(k), f.query_link_point(-k)
        assert geom.close(plus.point, minus.point)
        assert geom.close(plus.axis, -minus.axis)
        assert minus.rule == complement_of(plus.rule)

    def test_query_zero(self):
        f = two_port_frame().shift(0, 1, 0)
        view = f.query_link_point(0)
        assert geom.close(view.point, (0, 1, 0))
        assert geom.close(view.axis, (0, 1, 0))
        assert view.rule is None

    def test_set_connect_keeps_rule(self):
        f = two_port_frame().set_connect(1, (0, 7, 0), (0, 2, 0))
        assert f.link(1).rule == literal(10002)
        assert geom.close(f.link(1).point, (0, 7, 0))

    def test_set_link_common(self):
        f = two_port_frame().set_link_common(0, "-10017")
        assert f.link(0).common == literal(-10017)

    def test_resize(self):
        f = two_port_frame().resize_links(4)
        assert f.n_links == 4
        assert f.link(1).rule == literal(10002)
        assert not f.link(3).has_point
        g = f.resize_links(1)
        assert g.n_links == 1
        with pytest.raises(ValueError):
            f.resize_links(-1)

    def test_bridge_rule(self):
        f = two_port_frame()
        assert f.bridge_rule(2) == intersect(literal(10002), literal(-10007))
        assert f.bridge_rule(-2) == intersect(literal(-10002), literal(-10007))
        assert f.bridge_rule(1) == literal(-10001)
        with pytest.raises(IncompleteLinkError):
            identity_frame(1).bridge_rule(1)

    def test_link_accessors(self):
        f = two_port_frame()
        assert geom.close(f.link_pt(-1), (0, -5, 0))
        assert geom.close(f.link_axis(-1), (0, 1, 0))
        assert f.link_rule(-1) == literal(10001)
        with pytest.raises(IncompleteLinkError):
            identity_frame(1).link_pt(1)

    def test_set_basic_extent(self):
        f = identity_frame(6).shift(0, 0, 1).set_basic_extent(2.0, 3.0, 4.0)
        expected = [((0, -3, 1), (0, -1, 0)), ((0, 3, 1), (0, 1, 0)),
                    ((-2, 0, 1), (-1, 0, 0)), ((2, 0, 1), (1, 0, 0)),
                    ((0, 0, -3), (0, 0, -1)), ((0, 0, 5), (0, 0, 1))]
        for lp, (point, axis) in zip(f.links, expected):
            assert geom.close(lp.point, point)
            assert geom.close(lp.axis, axis)

    def test_set_basic_extent_needs_six(self):
        with pytest.raises(LinkIndexError):
            identity_frame(4).set_basic_extent(1.0, 1.0, 1.0)

    def test_link_copy(self):
        other = two_port_frame()
        f = identity_frame(2).link_copy(0, other, 2).link_copy(1, other, -2)
        assert f.link(0).rule == literal(10002)
        assert f.link(1).rule == literal(-10002)
        assert geom.close(f.link(1).axis, (0, -1, 0))
        assert f.link(1).index == 1
        with pytest.raises(LinkIndexError):
            f.link_copy(0, other, 0)

    def test_find_link_axis(self):
        f = identity_frame(6).set_basic_extent(1.0, 1.0, 1.0)
        assert f.find_link_axis((0, 0.9, 0.1)) == 1
        assert f.find_link_axis((-1, 0, 0)) == 2
        with pytest.raises(IncompleteLinkError):
            identity_frame(2).find_link_axis((0, 1, 0))

    def test_calc_link_axis(self):
        f = identity_frame(6).set_basic_extent(1.0, 1.0, 1.0)
        x, y, z = f.calc_link_axis(4)
        assert geom.close(y, (1, 0, 0))
        assert geom.close(z, (0, 0, 1))
        assert geom.is_orthonormal(x, y, z)
        x, y, z = f.calc_link_axis(6)
        assert geom.close(y, (0, 0, 1))
        assert geom.is_orthonormal(x, y, z)
        for a, b in zip(f.calc_link_axis(0), f.axes):
            assert a is b

    def test_rotate_link_axis(self):
        f = two_port_frame().rotate_link_axis(2, 90.0, 0.0)
        assert geom.close(f.link(1).axis, (-1, 0, 0))
        assert geom.close(f.link(1).point, (0, 5, 0))

    def test_exit(self):
        f = identity_frame(1)
        assert geom.close(f.exit_point(), f.origin)
        assert geom.close(f.exit_axis(), f.beam_axis)
        g = two_port_frame()
        assert geom.close(g.exit_point(), (0, 5, 0))
        h = identity_frame(2).set_exit((0, 9, 0), (1, 1, 0))
        assert geom.close(h.exit_axis(), (1 / math.sqrt(2), 1 / math.sqrt(2), 0))


class TestDeriveFrame:

    def test_side_zero_copies(self):
        parent = create_frame((1, 2, 3), (1, 1, 0), (0, 0, 1), 2)
        child = derive_frame(parent, 0, 3)
        assert geom.close(child.origin, parent.origin)
        for a, b in zip(child.axes, parent.axes):
            assert geom.close(a, b)
        assert child.n_links == 3
        assert child.provenance[-1] == "derive(0)"

    def test_positive_side(self):
        child = derive_frame(two_port_frame(), 2)
        assert geom.close(child.origin, (0, 5, 0))
        assert geom.close(child.y, (0, 1, 0))
        assert geom.close(child.z, (0, 0, 1))

    def test_negative_side(self):
        parent = two_port_frame()
        child = derive_frame(parent, -2)
        assert geom.close(child.y, -parent.links[1].axis)
        assert geom.close(child.origin, (0, 5, 0))
        assert child.is_orthonormal()

    def test_axis_along_parent_z_uses_parent_x(self):
        parent = identity_frame(1).attach_link_point(0, point=(0, 0, 2), axis=(0, 0, 1))
        child = derive_frame(parent, 1)
        assert geom.close(child.y, (0, 0, 1))
        assert child.is_orthonormal()
        # the parent's X is the up hint, so the child's Z follows it
        assert geom.close(child.z, (1, 0, 0))

    def test_out_of_range(self):
        with pytest.raises(LinkIndexError):
            derive_frame(two_port_frame(), 3)
        with pytest.raises(IndexError):
            derive_frame(two_port_frame(), -3)

    def test_incomplete_link(self):
        parent = identity_frame(1).attach_link_point(0, rule=literal(5))
        with pytest.raises(IncompleteLinkError):
            derive_frame(parent, 1)

    def test_parent_untouched(self):
        parent = two_port_frame()
        derive_frame(parent, 2).shift(1, 2, 3).rotate(30.0, 20.0)
        assert geom.close(parent.origin, (0, 0, 0))
        assert geom.close(parent.links[1].point, (0, 5, 0))
