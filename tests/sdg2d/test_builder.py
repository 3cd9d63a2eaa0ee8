from fractions import Fraction

import numpy as np
import pytest

from src.sdg2d.errors import DegenerateInputError
from src.sdg2d.sites import Point, PointSite, SegmentSite, point_site, segment_site
from src.sdg2d.voronoi import SegmentDelaunayGraph2D
from tests.sdg2d.helpers_diagram import delaunay_edge_set, hash_dual_edges


def _counts(sdg):
    return sdg.number_of_vertices(), sdg.number_of_faces(), sdg.number_of_edges()


def test_first_two_points_form_a_chain():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert(point_site(0, 0))
    assert _counts(sdg) == (1, 0, 0)
    sdg.insert(point_site(2, 0))
    assert _counts(sdg) == (2, 2, 3)
    assert sdg.dimension == 1
    assert sdg.validate(2)


def test_collinear_points_stay_one_dimensional():
    sdg = SegmentDelaunayGraph2D()
    for x in (0, 4, 2, 6, -1):
        sdg.insert(point_site(x, 0))
    assert sdg.dimension == 1
    assert sdg.validate(2)
    # neighbours along the line only
    pairs = {
        tuple(sorted(float(sdg.tds.site(v).point.x) for v in sdg.tds.edge_vertices(f, i)))
        for f, i in sdg.finite_edges()
    }
    assert pairs == {(-1.0, 0.0), (0.0, 2.0), (2.0, 4.0), (4.0, 6.0)}


def test_third_point_off_the_line_makes_a_triangle():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([point_site(0, 0), point_site(2, 0), point_site(1, 2)])
    assert sdg.dimension == 2
    assert _counts(sdg) == (3, 4, 6)
    assert sdg.validate(2)


def test_reinserting_a_point_returns_the_same_vertex():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([point_site(0, 0), point_site(2, 0), point_site(1, 2)])
    before = _counts(sdg)
    v = sdg.insert(point_site(2, 0))
    assert v.index == 2
    assert _counts(sdg) == before


def test_segment_inserts_its_endpoints():
    sdg = SegmentDelaunayGraph2D()
    v = sdg.insert(segment_site(0, 0, 4, 0))
    assert sdg.number_of_vertices() == 3
    assert v.site == segment_site(0, 0, 4, 0)
    assert sdg.tds.find(point_site(0, 0)) is not None
    assert sdg.tds.find(point_site(4, 0)) is not None
    assert sdg.validate(2)


def test_segment_between_existing_points():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([point_site(0, 0), point_site(4, 0), point_site(2, 3)])
    sdg.insert(segment_site(0, 0, 4, 0))
    assert sdg.number_of_vertices() == 4
    assert sdg.validate(2)


def test_segments_sharing_an_endpoint():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([
        segment_site(0, 0, 4, 0),
        segment_site(0, 0, 0, 4),
        point_site(3, 3),
    ])
    assert sdg.number_of_vertices() == 6
    assert sdg.validate(2)


@pytest.mark.parametrize(
    "site",
    [
        segment_site(1, 1, 1, 1),
        segment_site(1, 0, 3, 0),     # overlaps
        segment_site(-1, 0, 5, 0),    # covers
        segment_site(0, 0, 4, 0),     # duplicate
        segment_site(4, 0, 0, 0),     # duplicate, reversed
    ],
)
def test_degenerate_sites_are_rejected_atomically(site):
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([segment_site(0, 0, 4, 0), point_site(3, 3), point_site(0, 3)])
    before = _counts(sdg)
    digest = hash_dual_edges(sdg.dual_edges())
    with pytest.raises(DegenerateInputError) as exc:
        sdg.insert(site)
    assert exc.value.site == site
    assert _counts(sdg) == before
    assert hash_dual_edges(sdg.dual_edges()) == digest
    assert sdg.validate(1)


@pytest.mark.parametrize(
    "site, n_vertices, present, gone",
    [
        (   # crosses the base segment at (2, 0)
            segment_site(2, -1, 2, 1),
            11,
            [segment_site(0, 0, 2, 0), segment_site(2, 0, 4, 0), segment_site(2, -1, 2, 0), point_site(2, 0)],
            [segment_site(0, 0, 4, 0), segment_site(2, -1, 2, 1)],
        ),
        (   # ends on the interior of the base segment
            segment_site(2, 0, 2, 2),
            9,
            [segment_site(0, 0, 2, 0), segment_site(2, 0, 4, 0), segment_site(2, 0, 2, 2)],
            [segment_site(0, 0, 4, 0)],
        ),
        (   # a point inside the base segment
            point_site(1, 0),
            7,
            [segment_site(0, 0, 1, 0), segment_site(1, 0, 4, 0), point_site(1, 0)],
            [segment_site(0, 0, 4, 0)],
        ),
        (   # passes through the point (3, 3)
            segment_site(1, 2, 5, 4),
            9,
            [segment_site(1, 2, 3, 3), segment_site(3, 3, 5, 4), segment_site(0, 0, 4, 0)],
            [segment_site(1, 2, 5, 4)],
        ),
    ],
)
def test_interfering_sites_are_split(site, n_vertices, present, gone):
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([segment_site(0, 0, 4, 0), point_site(3, 3), point_site(0, 3)])
    v = sdg.insert(site)
    assert sdg.number_of_vertices() == n_vertices
    sites = set(sdg.sites())
    for s in present:
        assert s in sites
    for s in gone:
        assert s not in sites
    if site.is_point:
        assert v.site == site
    else:
        assert v.site.p1 == site.p1
    assert sdg.validate(2)


def test_crossing_segments_meet_at_an_exact_point():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert(segment_site(0, 0, 3, 1))
    v = sdg.insert(segment_site(1, -1, 1, 3))
    x = Point(1, Fraction(1, 3))
    assert sdg.tds.find(PointSite(x)) is not None
    assert v.site == SegmentSite(Point(1, -1), x)
    assert sdg.number_of_vertices() == 9
    assert sdg.validate(2)


def test_split_sites_do_not_depend_on_insertion_order():
    sites = [
        segment_site(0, 0, 4, 4),
        segment_site(0, 4, 4, 0),
        segment_site(1, 3, 5, 3),
        point_site(3, -1),
    ]
    found = set()
    for seed in range(3):
        order = list(np.random.default_rng(seed).permutation(len(sites)))
        sdg = SegmentDelaunayGraph2D()
        sdg.insert_many([sites[k] for k in order])
        assert sdg.validate(2)
        found.add(frozenset(sdg.sites()))
    assert len(found) == 1


def test_failed_split_restores_the_original_segment(monkeypatch):
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([segment_site(0, 0, 4, 0), point_site(3, 3), point_site(0, 3)])
    before = _counts(sdg)
    digest = hash_dual_edges(sdg.dual_edges())
    original = sdg.builder._insert_general

    def failing(v, hints):
        if v.site == segment_site(2, 0, 4, 0):
            raise RuntimeError("boom")
        return original(v, hints)

    monkeypatch.setattr(sdg.builder, "_insert_general", failing)
    with pytest.raises(RuntimeError):
        sdg.insert(point_site(2, 0))
    assert _counts(sdg) == before
    assert sdg.tds.find(segment_site(0, 0, 4, 0)) is not None
    assert sdg.tds.find(point_site(2, 0)) is None
    assert set(sdg.kernel._lines) <= set(sdg.tds.segment_index)
    assert hash_dual_edges(sdg.dual_edges()) == digest
    assert sdg.validate(2)


def test_failure_after_endpoints_are_inserted_is_rolled_back(monkeypatch):
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([point_site(0, 0), point_site(5, 1), point_site(2, 4)])
    before = _counts(sdg)
    original = sdg.builder._insert_general

    def failing(v, hints):
        if v.site.is_segment:
            raise RuntimeError("boom")
        return original(v, hints)

    monkeypatch.setattr(sdg.builder, "_insert_general", failing)
    with pytest.raises(RuntimeError):
        sdg.insert(segment_site(1, -2, 3, -2))
    assert _counts(sdg) == before
    assert sdg.tds.find(point_site(1, -2)) is None
    assert sdg.validate(2)


def test_skip_degenerate_keeps_going():
    sdg = SegmentDelaunayGraph2D()
    vs = sdg.insert_many(
        [point_site(0, 0), segment_site(1, 1, 1, 1), point_site(2, 0), point_site(1, 2)],
        skip_degenerate=True,
    )
    assert len(vs) == 3
    assert sdg.number_of_vertices() == 3


def test_insert_rejects_non_sites():
    sdg = SegmentDelaunayGraph2D()
    with pytest.raises(TypeError):
        sdg.insert((0, 0))


def test_point_delaunay_matches_scipy():
    scipy_spatial = pytest.importorskip("scipy.spatial")
    rng = np.random.default_rng(7)
    pts = rng.uniform(0.0, 10.0, size=(30, 2))

    sdg = SegmentDelaunayGraph2D()
    for x, y in pts:
        sdg.insert(point_site(float(x), float(y)))
    assert sdg.validate(1)

    tri = scipy_spatial.Delaunay(pts)
    expected = set()
    for simplex in tri.simplices:
        for k in range(3):
            a, b = int(simplex[k]) + 1, int(simplex[(k + 1) % 3]) + 1
            expected.add((min(a, b), max(a, b)))
    assert delaunay_edge_set(sdg) == expected


def test_insertion_order_does_not_change_the_diagram():
    sites = [
        segment_site(0, 0, 3, 1),
        segment_site(5, 5, 7, 2),
        point_site(1, 4),
        point_site(6, -1),
        point_site(-2, 2),
        point_site(4, 3),
    ]
    digests = set()
    for seed in range(3):
        order = list(np.random.default_rng(seed).permutation(len(sites)))
        sdg = SegmentDelaunayGraph2D()
        sdg.insert_many([sites[k] for k in order])
        assert sdg.validate(2)
        digests.add(hash_dual_edges(sdg.dual_edges()))
    assert len(digests) == 1
