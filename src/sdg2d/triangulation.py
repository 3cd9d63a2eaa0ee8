from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .datastructures import Face, FiniteVertex, InfiniteVertex, Vertex, ccw, cw
from .errors import InvalidTriangulationError
from .sites import Point, SegmentSite, Site

logger = logging.getLogger(__name__)

INFINITE = 0  # index of the infinite vertex


@dataclass
class Snapshot:
    vertices: List[Vertex]
    faces: Dict[int, Tuple[Tuple[int, ...], Tuple[int, ...], object, bool]]
    next_face: int
    point_index: Dict[Point, int]
    segment_index: Dict[SegmentSite, int]


class Triangulation:
    """
    Arena of vertices and faces addressed by integer ids.

    Vertex 0 is the infinite vertex. Faces are oriented counter-clockwise;
    two faces may share several edges, so the edge matching a given one in the
    neighbor face is found by its endpoints.
    """

    def __init__(self):
        self.vertices: List[Vertex] = [InfiniteVertex(INFINITE)]
        self.faces: Dict[int, Face] = {}
        self._next_face = 0
        self._incident: Dict[int, Set[int]] = {INFINITE: set()}
        self.point_index: Dict[Point, int] = {}
        self.segment_index: Dict[SegmentSite, int] = {}

    # -- counts ---------------------------------------------------------------

    def number_of_vertices(self) -> int:
        """Finite vertices, i.e. inserted sites."""
        return len(self.vertices) - 1

    def number_of_faces(self) -> int:
        return len(self.faces)

    def number_of_edges(self) -> int:
        return 3 * len(self.faces) // 2

    @property
    def dimension(self) -> int:
        if self.number_of_vertices() < 2:
            return self.number_of_vertices() - 1
        if all(self.is_infinite_face(f) for f in self.faces):
            return 1
        return 2

    # -- vertices -------------------------------------------------------------

    def add_vertex(self, site: Site) -> FiniteVertex:
        v = FiniteVertex(len(self.vertices), site)
        self.vertices.append(v)
        self._incident[v.index] = set()
        if site.is_point:
            self.point_index[site.point] = v.index
        else:
            self.segment_index[site] = v.index
        return v

    def vertex(self, index: int) -> Vertex:
        return self.vertices[index]

    def site(self, index: int) -> Optional[Site]:
        v = self.vertices[index]
        return None if v.is_infinite else v.site

    def is_infinite(self, index: int) -> bool:
        return index == INFINITE

    def finite_vertices(self) -> Iterator[FiniteVertex]:
        return iter(self.vertices[1:])

    def find(self, site: Site) -> Optional[FiniteVertex]:
        if site.is_point:
            idx = self.point_index.get(site.point)
        else:
            idx = self.segment_index.get(site)
        return None if idx is None else self.vertices[idx]

    def incident_faces(self, v: int) -> List[int]:
        return sorted(self._incident.get(v, ()))

    # -- faces ----------------------------------------------------------------

    def create_face(self, a: int, b: int, c: int) -> int:
        fid = self._next_face
        self._next_face += 1
        self.faces[fid] = Face([a, b, c], [-1, -1, -1])
        for v in (a, b, c):
            self._incident[v].add(fid)
        return fid

    def delete_face(self, fid: int) -> None:
        f = self.faces.pop(fid)
        for v in f.vertices:
            self._incident[v].discard(fid)

    def face(self, fid: int) -> Face:
        return self.faces[fid]

    def is_infinite_face(self, fid: int) -> bool:
        return INFINITE in self.faces[fid].vertices

    def face_sites(self, fid: int) -> Tuple[Optional[Site], ...]:
        return tuple(self.site(v) for v in self.faces[fid].vertices)

    def set_adjacency(self, f: int, i: int, g: int, j: int) -> None:
        self.faces[f].neighbors[i] = g
        self.faces[g].neighbors[j] = f

    def mirror_index(self, f: int, i: int) -> int:
        """Index, in the neighbor across edge (f, i), of the same edge."""
        face = self.faces[f]
        g = face.neighbors[i]
        gf = self.faces.get(g)
        if gf is None:
            raise InvalidTriangulationError(f"face {f} has no neighbor across edge {i}")
        a = face.vertices[ccw(i)]
        b = face.vertices[cw(i)]
        for j in range(3):
            if gf.neighbors[j] == f and gf.vertices[ccw(j)] == b and gf.vertices[cw(j)] == a:
                return j
        raise InvalidTriangulationError(f"edge ({f}, {i}) has no mirror in face {g}")

    def mirror_vertex(self, f: int, i: int) -> int:
        g = self.faces[f].neighbors[i]
        return self.faces[g].vertices[self.mirror_index(f, i)]

    def edge_vertices(self, f: int, i: int) -> Tuple[int, int]:
        face = self.faces[f]
        return face.vertices[ccw(i)], face.vertices[cw(i)]

    def is_infinite_edge(self, f: int, i: int) -> bool:
        return INFINITE in self.edge_vertices(f, i)

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Every edge once, from the side with the smaller (face, index)."""
        for f in sorted(self.faces):
            for i in range(3):
                g = self.faces[f].neighbors[i]
                j = self.mirror_index(f, i)
                if (f, i) < (g, j):
                    yield f, i

    def finite_edges(self) -> Iterator[Tuple[int, int]]:
        for f, i in self.edges():
            if not self.is_infinite_edge(f, i):
                yield f, i

    # -- transactions ---------------------------------------------------------

    def clear(self) -> None:
        """Remove every site and face. Face ids keep counting up."""
        self.vertices = [InfiniteVertex(INFINITE)]
        self.faces = {}
        self._incident = {INFINITE: set()}
        self.point_index = {}
        self.segment_index = {}

    def snapshot(self) -> Snapshot:
        return Snapshot(
            vertices=list(self.vertices),
            faces={
                fid: (tuple(f.vertices), tuple(f.neighbors), f.voronoi, f.voronoi_ready)
                for fid, f in self.faces.items()
            },
            next_face=self._next_face,
            point_index=dict(self.point_index),
            segment_index=dict(self.segment_index),
        )

    def restore(self, snap: Snapshot) -> None:
        self.vertices = list(snap.vertices)
        self.faces = {}
        self._incident = {v.index: set() for v in self.vertices}
        for fid, (vs, ns, vor, ready) in snap.faces.items():
            self.faces[fid] = Face(list(vs), list(ns), vor, ready)
            for v in vs:
                self._incident[v].add(fid)
        # ids handed out after the snapshot are not reused
        self._next_face = max(self._next_face, snap.next_face)
        self.point_index = snap.point_index
        self.segment_index = snap.segment_index
        logger.debug("restored triangulation to %d vertices, %d faces", len(snap.vertices) - 1, len(self.faces))

    def check_incidence(self) -> Optional[str]:
        expected: Dict[int, Set[int]] = {v.index: set() for v in self.vertices}
        for fid, f in self.faces.items():
            for v in f.vertices:
                if v not in expected:
                    return f"face {fid} references unknown vertex {v}"
                expected[v].add(fid)
        for v, fs in expected.items():
            if self._incident.get(v, set()) != fs:
                return f"incidence cache of vertex {v} is stale"
        return None
