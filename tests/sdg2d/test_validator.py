import pytest

from src.sdg2d.errors import InvalidTriangulationError
from src.sdg2d.sites import point_site, segment_site
from src.sdg2d.triangulation import INFINITE
from src.sdg2d.voronoi import SegmentDelaunayGraph2D


def _square_with_center():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([
        point_site(0, 0),
        point_site(4, 0),
        point_site(4, 4),
        point_site(0, 5),
        point_site(1.5, 2),
    ])
    return sdg


def test_valid_at_every_level():
    sdg = _square_with_center()
    for level in (0, 1, 2):
        assert sdg.validate(level)
        assert sdg.is_valid(level)


def test_empty_and_single_site_are_valid():
    sdg = SegmentDelaunayGraph2D()
    assert sdg.validate(2)
    sdg.insert(point_site(1, 1))
    assert sdg.validate(2)


def test_bad_strictness_is_rejected():
    sdg = _square_with_center()
    with pytest.raises(ValueError):
        sdg.validate(3)


def test_broken_adjacency_is_reported():
    sdg = _square_with_center()
    f = min(sdg.tds.faces)
    face = sdg.tds.face(f)
    face.neighbors[0], face.neighbors[1] = face.neighbors[1], face.neighbors[0]
    with pytest.raises(InvalidTriangulationError):
        sdg.validate(0)
    assert not sdg.is_valid(0)


def test_missing_face_is_reported():
    sdg = _square_with_center()
    f = min(sdg.tds.faces)
    sdg.tds.delete_face(f)
    with pytest.raises(InvalidTriangulationError):
        sdg.validate(0)


def test_non_delaunay_flip_is_reported_at_level_one():
    sdg = _square_with_center()
    tds = sdg.tds
    # flip one interior edge by hand: combinatorially fine, not Delaunay
    for f, i in tds.finite_edges():
        g = tds.face(f).neighbors[i]
        if tds.is_infinite_face(f) or tds.is_infinite_face(g):
            continue
        j = tds.mirror_index(f, i)
        a, b = tds.edge_vertices(f, i)
        c = tds.face(f).vertices[i]
        d = tds.face(g).vertices[j]
        break
    else:
        pytest.fail("no interior edge")

    outer = {
        (c, a): _across(tds, f, c, a),
        (b, c): _across(tds, f, b, c),
        (a, d): _across(tds, g, a, d),
        (d, b): _across(tds, g, d, b),
    }
    tds.delete_face(f)
    tds.delete_face(g)
    n1 = tds.create_face(c, a, d)
    n2 = tds.create_face(d, b, c)
    tds.set_adjacency(n1, 1, n2, 1)
    for (u, v), (h, k) in outer.items():
        n = n1 if (u, v) in ((c, a), (a, d)) else n2
        face = tds.face(n)
        idx = next(x for x in range(3) if face.vertices[(x + 1) % 3] == u and face.vertices[(x + 2) % 3] == v)
        tds.set_adjacency(n, idx, h, k)

    assert sdg.validate(0)
    with pytest.raises(InvalidTriangulationError):
        sdg.validate(1)


def _across(tds, f, u, v):
    """Neighbour face and mirror index across the edge u -> v of face f."""
    face = tds.face(f)
    i = next(x for x in range(3) if face.vertices[(x + 1) % 3] == u and face.vertices[(x + 2) % 3] == v)
    return face.neighbors[i], tds.mirror_index(f, i)


def test_segments_validate_globally():
    sdg = SegmentDelaunayGraph2D()
    sdg.insert_many([segment_site(0, 0, 4, 1), point_site(1, 3), point_site(3, -2), point_site(5, 4)])
    assert sdg.validate(2)
    assert INFINITE not in [v.index for v in sdg.tds.finite_vertices()]
