"""
Incremental insertion of point and segment sites.

Each insertion finds the faces whose Voronoi vertex the new site conflicts
with, grows that region across adjacent conflicting faces, and replaces it by
a star of faces around the new vertex. When no Voronoi vertex is in conflict,
the new region lies inside a single Voronoi edge and is inserted as a vertex
of degree two on that edge.

Sites that cross or touch are cut at the contact point. Cutting a segment
that is already in the graph rebuilds the graph from the adjusted site list.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .arith import dot, sub
from .datastructures import FiniteVertex, ccw, cw
from .errors import DegenerateInputError, InvalidTriangulationError
from .kernel import Kernel, VoronoiVertex, crossing_point, on_open_segment, segment_relation, squared_distance
from .sites import Point, PointSite, SegmentSite, Site, is_site
from .triangulation import INFINITE, Triangulation

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]


def split_segment(site: SegmentSite, cuts) -> List[SegmentSite]:
    """Pieces of a segment cut at points of its interior, in order from p1."""
    d = sub(site.p2, site.p1)
    stops = sorted(cuts, key=lambda p: dot(sub(p, site.p1), d))
    ends = [site.p1] + stops + [site.p2]
    return [SegmentSite(a, b) for a, b in zip(ends, ends[1:])]


class Builder:
    def __init__(self, tds: Triangulation, kernel: Kernel):
        self.tds = tds
        self.kernel = kernel

    # -- public ---------------------------------------------------------------

    def insert(self, site: Site) -> FiniteVertex:
        """
        Insert a site and return its vertex.

        Re-inserting an existing point returns its vertex unchanged. A segment
        inserts its endpoints first. Segments that cross or touch, and points
        on a segment, are split there and the pieces become the sites; a
        split segment returns the vertex of its first piece. On any error the
        triangulation is left as it was before the call.
        """
        if not is_site(site):
            raise TypeError(f"expected PointSite or SegmentSite, got {type(site).__name__}")
        if site.is_point:
            existing = self.tds.find(site)
            if existing is not None:
                logger.info("point %r already present as vertex %d", site, existing.index)
                return existing
        snap = self.tds.snapshot()
        try:
            if site.is_point:
                return self._insert_point(site)
            return self._insert_segment(site)
        except Exception:
            self.tds.restore(snap)
            self.kernel.forget_lines(self.tds.segment_index)
            raise

    def insert_many(self, sites: Iterable[Site], skip_degenerate: bool = False) -> List[FiniteVertex]:
        out = []
        for n, site in enumerate(sites):
            try:
                out.append(self.insert(site))
            except DegenerateInputError as e:
                if not skip_degenerate:
                    raise
                logger.warning("skipping site #%d %r: %s", n, site, e)
        return out

    # -- interference with existing sites -------------------------------------

    def _segments(self) -> List[Tuple[int, SegmentSite]]:
        return sorted((idx, seg) for seg, idx in self.tds.segment_index.items())

    def _split_plan(self, site: SegmentSite) -> Tuple[List[SegmentSite], Dict[int, Set[Point]]]:
        """
        Pieces of a new segment and the cut points of existing segments it
        crosses or touches. Only zero length and collinear overlap are errors.
        """
        if site.is_degenerate:
            raise DegenerateInputError(f"zero-length segment {site!r}", site)
        cuts: Set[Point] = set()
        split: Dict[int, Set[Point]] = {}
        for idx, other in self._segments():
            rel = segment_relation(site, other)
            if rel in ("duplicate", "overlapping"):
                raise DegenerateInputError(f"segment {site!r} is {rel} with {other!r}", site)
            if rel == "crossing":
                x = crossing_point(site, other)
                cuts.add(x)
                split.setdefault(idx, set()).add(x)
            elif rel == "touching":
                for p in site.support_points:
                    if on_open_segment(p, other.p1, other.p2):
                        split.setdefault(idx, set()).add(p)
        for p in self.tds.point_index:
            if on_open_segment(p, site.p1, site.p2):
                cuts.add(p)
        return split_segment(site, cuts), split

    def _rebuild(self, split: Dict[int, Set[Point]], extra: List[Site]) -> None:
        sites: List[Site] = []
        for v in self.tds.finite_vertices():
            if v.index in split:
                sites.extend(split_segment(v.site, split[v.index]))
            else:
                sites.append(v.site)
        sites.extend(extra)
        logger.info("splitting %d segment(s), rebuilding from %d sites", len(split), len(sites))
        self.tds.clear()
        for s in sites:
            if s.is_point:
                self._insert_point(s)
            else:
                self._insert_segment(s)
        self.kernel.forget_lines(self.tds.segment_index)

    # -- insertion ------------------------------------------------------------

    def _insert_point(self, site: PointSite) -> FiniteVertex:
        existing = self.tds.find(site)
        if existing is not None:
            return existing
        p = site.point
        split = {idx: {p} for idx, seg in self._segments() if on_open_segment(p, seg.p1, seg.p2)}
        if split:
            self._rebuild(split, [site])
            return self.tds.find(site)
        v = self.tds.add_vertex(site)
        n = self.tds.number_of_vertices()
        if n == 2:
            u = next(x.index for x in self.tds.finite_vertices() if x.index != v.index)
            f = self.tds.create_face(u, v.index, INFINITE)
            g = self.tds.create_face(v.index, u, INFINITE)
            self.tds.set_adjacency(f, 0, g, 1)
            self.tds.set_adjacency(f, 1, g, 0)
            self.tds.set_adjacency(f, 2, g, 2)
        elif n > 2:
            self._insert_general(v, hints=[self._nearest_vertex(site, exclude=v.index)])
        logger.debug("inserted %r as vertex %d", site, v.index)
        return v

    def _insert_segment(self, site: SegmentSite) -> FiniteVertex:
        if self.tds.find(site) is not None:
            raise DegenerateInputError(f"duplicate segment {site!r}", site)
        pieces, split = self._split_plan(site)
        if split:
            self._rebuild(split, pieces)
        else:
            for piece in pieces:
                self._insert_piece(piece)
        return self.tds.find(pieces[0])

    def _insert_piece(self, site: SegmentSite) -> FiniteVertex:
        a, b = site.endpoint_sites()
        va = self._insert_point(a)
        vb = self._insert_point(b)
        v = self.tds.add_vertex(site)
        self._insert_general(v, hints=[va.index, vb.index])
        logger.debug("inserted %r as vertex %d", site, v.index)
        return v

    def _nearest_vertex(self, site: PointSite, exclude: int) -> int:
        best = None
        best_d = None
        for v in self.tds.finite_vertices():
            if v.index == exclude:
                continue
            d = squared_distance(site.point, v.site)
            if best_d is None or d < best_d:
                best, best_d = v.index, d
        return best

    def _insert_general(self, v: FiniteVertex, hints: List[int]) -> None:
        t = v.site
        conflicts: Dict[int, bool] = {}
        start = self._locate(t, hints, conflicts)
        if start is None:
            edge = self._locate_edge(t, hints)
            if edge is None:
                raise InvalidTriangulationError(f"no conflict found for {t!r}")
            logger.debug("degree-2 insertion of %r on edge %r", t, edge)
            self._insert_degree_2(edge, v.index)
            return

        hole = self._grow(start, t, conflicts)
        boundary, cycle = self._boundary(hole, t)
        logger.debug("conflict region of %r: %d faces, %d boundary edges", t, len(hole), len(cycle))
        self._retriangulate(hole, boundary, cycle, v.index)

    # -- conflicts ------------------------------------------------------------

    def voronoi_vertex(self, fid: int) -> Optional[VoronoiVertex]:
        face = self.tds.face(fid)
        if not face.voronoi_ready:
            if INFINITE in face.vertices:
                face.voronoi = None
            else:
                a, b, c = (self.tds.site(x) for x in face.vertices)
                face.voronoi = self.kernel.vertex(a, b, c)
            face.voronoi_ready = True
        return face.voronoi

    def face_conflict(self, fid: int, t: Site) -> bool:
        face = self.tds.face(fid)
        if INFINITE in face.vertices:
            k = face.index_of(INFINITE)
            u = self.tds.site(face.vertices[ccw(k)])
            w = self.tds.site(face.vertices[cw(k)])
            return self.kernel.infinite_face_conflict(u, w, t)
        return self.kernel.finite_face_conflict(self.voronoi_vertex(fid), t)

    def edge_conflict(self, f: int, i: int, t: Site, full: bool) -> bool:
        tds = self.tds
        face = tds.face(f)
        a, b = face.vertices[ccw(i)], face.vertices[cw(i)]
        c = face.vertices[i]
        g = face.neighbors[i]
        d = tds.face(g).vertices[tds.mirror_index(f, i)]
        if a == INFINITE or b == INFINITE:
            if b == INFINITE:
                u, v, w = c, a, d
            else:
                u, v, w = d, b, c
            return self.kernel.infinite_edge_conflict(tds.site(u), tds.site(v), tds.site(w), t, full)
        vf = None if c == INFINITE else self.voronoi_vertex(f)
        vg = None if d == INFINITE else self.voronoi_vertex(g)
        if (c != INFINITE and vf is None) or (d != INFINITE and vg is None):
            logger.debug("edge (%d, %d) has a face without a finite Voronoi vertex", f, i)
            return False
        return self.kernel.edge_conflict(tds.site(a), tds.site(b), vg, vf, t, full)

    def _locate(self, t: Site, hints: List[int], conflicts: Dict[int, bool]) -> Optional[int]:
        def test(fid):
            if fid not in conflicts:
                conflicts[fid] = self.face_conflict(fid, t)
            return conflicts[fid]

        for h in hints:
            for fid in self.tds.incident_faces(h):
                if test(fid):
                    return fid
        for fid in sorted(self.tds.faces):
            if test(fid):
                return fid
        return None

    def _locate_edge(self, t: Site, hints: List[int]) -> Optional[Edge]:
        tried = set()
        candidates = [fid for h in hints for fid in self.tds.incident_faces(h)]
        candidates += sorted(self.tds.faces)
        for fid in candidates:
            if fid in tried:
                continue
            tried.add(fid)
            for i in range(3):
                if self.edge_conflict(fid, i, t, full=False):
                    return fid, i
        return None

    # -- restructuring --------------------------------------------------------

    def _grow(self, start: int, t: Site, conflicts: Dict[int, bool]) -> List[int]:
        hole = [start]
        in_hole = {start}
        stack = [start]
        while stack:
            f = stack.pop()
            for g in self.tds.face(f).neighbors:
                if g in in_hole:
                    continue
                if g not in conflicts:
                    conflicts[g] = self.face_conflict(g, t)
                if conflicts[g]:
                    in_hole.add(g)
                    hole.append(g)
                    stack.append(g)
        return sorted(hole)

    def _boundary(self, hole: List[int], t: Site) -> Tuple[Set[Edge], List[Edge]]:
        tds = self.tds
        in_hole = set(hole)
        interior: Dict[Tuple[Edge, Edge], bool] = {}
        boundary: Set[Edge] = set()
        for f in hole:
            for i in range(3):
                g = tds.face(f).neighbors[i]
                if g in in_hole:
                    j = tds.mirror_index(f, i)
                    key = min(((f, i), (g, j)), ((g, j), (f, i)))
                    if key not in interior:
                        interior[key] = self.edge_conflict(key[0][0], key[0][1], t, full=True)
                    if interior[key]:
                        continue
                boundary.add((f, i))

        if len(boundary) != len(hole) + 2:
            raise InvalidTriangulationError(
                f"conflict region of {t!r} is not a disc ({len(hole)} faces, {len(boundary)} boundary edges)"
            )

        limit = 3 * len(hole) + 3

        def successor(e: Edge) -> Edge:
            f, j = e[0], ccw(e[1])
            for _ in range(limit):
                if (f, j) in boundary:
                    return f, j
                g = tds.face(f).neighbors[j]
                jj = tds.mirror_index(f, j)
                f, j = g, ccw(jj)
            raise InvalidTriangulationError(f"conflict region of {t!r} swallows a vertex")

        start = min(boundary)
        cycle = [start]
        e = successor(start)
        while e != start:
            if len(cycle) > len(boundary) or e in cycle:
                raise InvalidTriangulationError(f"boundary of the conflict region of {t!r} is not a cycle")
            cycle.append(e)
            e = successor(e)
        if len(cycle) != len(boundary):
            raise InvalidTriangulationError(f"boundary of the conflict region of {t!r} is disconnected")

        on_boundary = {v for f, i in cycle for v in tds.edge_vertices(f, i)}
        for f in hole:
            for v in tds.face(f).vertices:
                if v not in on_boundary:
                    raise InvalidTriangulationError(f"inserting {t!r} would remove vertex {v}")
        return boundary, cycle

    def _retriangulate(self, hole: List[int], boundary: Set[Edge], cycle: List[Edge], t: int) -> None:
        tds = self.tds
        in_hole = set(hole)
        outer = {e: (tds.face(e[0]).neighbors[e[1]], tds.mirror_index(*e)) for e in cycle}
        created = [tds.create_face(*tds.edge_vertices(f, i), t) for f, i in cycle]
        by_edge = dict(zip(cycle, created))
        m = len(cycle)
        for k, e in enumerate(cycle):
            nk = created[k]
            tds.set_adjacency(nk, 0, created[(k + 1) % m], 1)
            g, j = outer[e]
            if g in in_hole:
                # edge kept between two removed faces: both sides get a new face
                tds.set_adjacency(nk, 2, by_edge[(g, j)], 2)
            else:
                tds.set_adjacency(nk, 2, g, j)
        for f in hole:
            tds.delete_face(f)

    def _insert_degree_2(self, edge: Edge, t: int) -> None:
        tds = self.tds
        f, i = edge
        u, v = tds.edge_vertices(f, i)
        g = tds.face(f).neighbors[i]
        j = tds.mirror_index(f, i)
        f1 = tds.create_face(v, u, t)
        f2 = tds.create_face(u, v, t)
        tds.set_adjacency(f1, 2, f, i)
        tds.set_adjacency(f2, 2, g, j)
        tds.set_adjacency(f1, 0, f2, 1)
        tds.set_adjacency(f1, 1, f2, 0)
