from decimal import Decimal
from fractions import Fraction

import pytest

from src.sdg2d.arith import INF, NEG_INF, covers, meets, negative_set
from src.sdg2d.config import KernelConfig
from src.sdg2d.kernel import (
    Kernel,
    crossing_point,
    on_open_segment,
    orientation,
    segment_relation,
    squared_distance,
)
from src.sdg2d.sites import Point, point_site, segment_site

TOL = Decimal("1e-40")


def test_orientation_is_exact():
    assert orientation(Point(0, 0), Point(1, 0), Point(0, 1)) == 1
    assert orientation(Point(0, 0), Point(0, 1), Point(1, 0)) == -1
    assert orientation(Point(0, 0), Point(1, 1), Point(3, 3)) == 0
    # decimal strings are read exactly
    assert orientation(Point("0.1", "0.1"), Point("0.2", "0.2"), Point("0.3", "0.3")) == 0


def test_on_open_segment():
    assert on_open_segment(Point(1, 1), Point(0, 0), Point(2, 2))
    assert not on_open_segment(Point(0, 0), Point(0, 0), Point(2, 2))
    assert not on_open_segment(Point(3, 3), Point(0, 0), Point(2, 2))
    assert not on_open_segment(Point(1, 0), Point(0, 0), Point(2, 2))


@pytest.mark.parametrize(
    "s, t, expected",
    [
        ((0, 0, 2, 2), (0, 2, 2, 0), "crossing"),
        ((0, 0, 2, 0), (1, 0, 1, 1), "touching"),
        ((0, 0, 2, 0), (1, 0, 3, 0), "overlapping"),
        ((0, 0, 2, 0), (2, 0, 0, 0), "duplicate"),
        ((0, 0, 1, 0), (0, 0, 0, 1), None),
        ((0, 0, 1, 0), (1, 0, 2, 0), None),
        ((0, 0, 1, 0), (2, 0, 3, 0), None),
        ((0, 0, 1, 0), (0, 1, 1, 1), None),
    ],
)
def test_segment_relation(s, t, expected):
    assert segment_relation(segment_site(*s), segment_site(*t)) == expected


def test_crossing_point_is_exact():
    assert crossing_point(segment_site(0, 0, 2, 2), segment_site(0, 2, 2, 0)) == Point(1, 1)
    x = crossing_point(segment_site(0, 0, 3, 1), segment_site(1, -1, 1, 3))
    assert x == Point(1, Fraction(1, 3))
    assert crossing_point(segment_site(1, -1, 1, 3), segment_site(3, 1, 0, 0)) == x


def test_forget_lines_keeps_only_live_segments():
    k = Kernel()
    s, t = segment_site(0, 0, 1, 0), segment_site(0, 1, 1, 1)
    k._line(s)
    k._line(t)
    k.forget_lines({t: 3})
    assert set(k._lines) == {t}


def test_squared_distance_to_closed_segment():
    s = segment_site(0, 0, 2, 0)
    assert squared_distance(Point(1, 1), s) == 1
    assert squared_distance(Point(3, 0), s) == 1
    assert squared_distance(Point(-1, -1), s) == 2
    assert squared_distance(Point(1, 1), point_site(0, 0)) == 2


def test_circumcenter_of_three_points():
    k = Kernel()
    vv = k.vertex(point_site(0, 0), point_site(2, 0), point_site(1, 2))
    assert vv.as_float() == pytest.approx((1.0, 0.75))
    assert float(vv.radius2) == pytest.approx(1.5625)


def test_collinear_points_have_no_vertex():
    k = Kernel()
    assert k.vertex(point_site(0, 0), point_site(1, 0), point_site(2, 0)) is None


def test_vertex_at_segment_endpoint():
    k = Kernel()
    s = segment_site(-5, 0, 5, 0)
    vv = k.vertex(point_site(5, 0), s, point_site(0, 1))
    assert vv.as_float() == pytest.approx((5.0, 13.0))
    assert float(vv.radius2) == pytest.approx(169.0)


def test_vertex_of_segment_and_its_endpoints_is_degenerate():
    k = Kernel()
    s = segment_site(0, 0, 1, 0)
    vv = k.vertex(point_site(0, 0), s, point_site(0, 0))
    assert vv.radius2 == 0


def test_finite_face_conflict_is_strict():
    k = Kernel()
    vv = k.vertex(point_site(0, 0), point_site(2, 0), point_site(1, 2))
    assert k.finite_face_conflict(vv, point_site(1, 1))
    assert not k.finite_face_conflict(vv, point_site(5, 5))
    # on the circle: a tie, never a conflict
    assert not k.finite_face_conflict(vv, point_site(0, 1.5))
    assert k.finite_face_conflict(vv, segment_site(-1, 1, 3, 1))
    assert not k.finite_face_conflict(vv, segment_site(-1, 5, 3, 5))
    assert not k.finite_face_conflict(None, point_site(1, 1))


def test_infinite_face_conflict_is_the_left_half_plane():
    k = Kernel()
    u, v = point_site(0, 0), point_site(2, 0)
    assert k.infinite_face_conflict(u, v, point_site(1, 1))
    assert not k.infinite_face_conflict(u, v, point_site(1, -1))
    assert k.infinite_face_conflict(u, v, point_site(1, 0))
    assert not k.infinite_face_conflict(u, v, point_site(3, 0))
    assert k.infinite_face_conflict(u, v, segment_site(0, 0, 2, 0))
    assert not k.infinite_face_conflict(u, v, segment_site(0, 5, 2, 5))


def test_point_bisector_is_oriented_with_first_site_on_the_left():
    k = Kernel()
    bis = k.bisector(point_site(0, 0), point_site(2, 0))
    assert tuple(float(x) for x in bis.X0) == pytest.approx((1.0, 0.0))
    assert tuple(float(x) for x in bis.X1) == pytest.approx((0.0, 2.0))


def test_parabola_bisector_parameter_runs_along_the_segment():
    k = Kernel()
    bis = k.bisector(point_site(0, 1), segment_site(-5, 0, 5, 0))
    x = (Decimal(5), Decimal(13))
    assert float(bis.tau(x)) == pytest.approx(5.0)
    bis2 = k.bisector(segment_site(-5, 0, 5, 0), point_site(0, 1))
    assert float(bis2.tau(x)) == pytest.approx(-5.0)


def test_point_on_segment_line_has_no_parabola():
    from src.sdg2d.errors import UnsupportedConfigurationError

    k = Kernel()
    with pytest.raises(UnsupportedConfigurationError):
        k.bisector(point_site(9, 0), segment_site(-5, 0, 5, 0))


def test_kernel_uses_its_own_precision():
    k = Kernel(KernelConfig(decimal_precision=40, zero_tolerance="1e-25"))
    assert k.context.prec == 40
    assert k.tol == Decimal("1e-25")


def test_negative_set_of_quadratics():
    # (t - 1)(t - 3)
    got = negative_set((Decimal(3), Decimal(-4), Decimal(1)), TOL)
    assert [(float(a), float(b)) for a, b in got] == [(1.0, 3.0)]
    got = negative_set((Decimal(-3), Decimal(4), Decimal(-1)), TOL)
    assert got[0][0] == NEG_INF and got[-1][1] == INF
    # (t - 2)^2 never negative, and a tangent root splits nothing
    assert negative_set((Decimal(4), Decimal(-4), Decimal(1)), TOL) == []
    assert negative_set((Decimal(-1),), TOL) == [(NEG_INF, INF)]
    assert negative_set((Decimal(1), Decimal(0), Decimal(0)), TOL) == []
    assert negative_set((Decimal(-2), Decimal(1)), TOL) == [(NEG_INF, Decimal(2))]


def test_covers_and_meets():
    intervals = [(Decimal(1), Decimal(3))]
    assert covers(intervals, Decimal(1), Decimal(3), TOL)
    assert not covers(intervals, Decimal(0), Decimal(3), TOL)
    assert meets(intervals, Decimal(0), Decimal(2), TOL)
    assert not meets(intervals, Decimal(3), Decimal(5), TOL)
    assert not covers(intervals, Decimal(1), INF, TOL)
    assert covers([(NEG_INF, INF)], NEG_INF, INF, TOL)
