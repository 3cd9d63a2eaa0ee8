from __future__ import annotations

import logging
from typing import Optional

from .builder import Builder
from .datastructures import ccw, cw
from .errors import InvalidTriangulationError
from .triangulation import INFINITE, Triangulation

logger = logging.getLogger(__name__)


class Validator:
    """
    Read-only consistency oracle.

    Strictness levels:
    - 0: combinatorial structure (vertices, symmetric adjacency, Euler relation)
    - 1: level 0 plus the local Delaunay test across every edge
    - 2: level 1 plus every site against every face it is not a vertex of
    """

    def __init__(self, tds: Triangulation, builder: Builder):
        self.tds = tds
        self.builder = builder

    def validate(self, strictness: int = 1) -> bool:
        if strictness not in (0, 1, 2):
            raise ValueError("strictness must be 0, 1 or 2")
        problem = self._combinatorial()
        if problem is None and strictness >= 1:
            problem = self._local_delaunay()
        if problem is None and strictness >= 2:
            problem = self._global_delaunay()
        if problem is not None:
            logger.debug("validation failed: %s", problem)
            raise InvalidTriangulationError(problem)
        return True

    def is_valid(self, strictness: int = 1) -> bool:
        try:
            return self.validate(strictness)
        except InvalidTriangulationError:
            return False

    def _combinatorial(self) -> Optional[str]:
        tds = self.tds
        if not tds.vertices or not tds.vertices[0].is_infinite:
            return "vertex 0 must be the infinite vertex"
        if any(v.is_infinite for v in tds.vertices[1:]):
            return "more than one infinite vertex"
        n = tds.number_of_vertices()
        if n < 2:
            if tds.faces:
                return f"{n} sites but {len(tds.faces)} faces"
            return None

        for fid, face in tds.faces.items():
            if len(face.vertices) != 3 or len(face.neighbors) != 3:
                return f"face {fid} does not have three vertices and three neighbors"
            if len(set(face.vertices)) != 3:
                return f"face {fid} repeats a vertex: {face.vertices}"
            for i in range(3):
                g = face.neighbors[i]
                if g not in tds.faces:
                    return f"face {fid} has a missing neighbor across edge {i}"
                try:
                    j = tds.mirror_index(fid, i)
                except InvalidTriangulationError as e:
                    return str(e)
                gface = tds.faces[g]
                if gface.vertices[ccw(j)] != face.vertices[cw(i)] or gface.vertices[cw(j)] != face.vertices[ccw(i)]:
                    return f"edge ({fid}, {i}) and its mirror ({g}, {j}) disagree"

        problem = tds.check_incidence()
        if problem is not None:
            return problem
        for v in tds.vertices:
            if not tds.incident_faces(v.index):
                return f"vertex {v.index} has no incident face"

        if 3 * len(tds.faces) % 2 != 0:
            return "odd number of face sides"
        euler = (n + 1) - tds.number_of_edges() + tds.number_of_faces()
        if euler != 2:
            return f"Euler characteristic is {euler}, expected 2"
        return None

    def _local_delaunay(self) -> Optional[str]:
        tds = self.tds
        for fid, face in tds.faces.items():
            for i in range(3):
                d = tds.mirror_vertex(fid, i)
                if d == INFINITE or d in face.vertices:
                    continue
                if self.builder.face_conflict(fid, tds.site(d)):
                    return f"vertex {d} ({tds.site(d)!r}) is in conflict with face {fid} {face.vertices}"
        return None

    def _global_delaunay(self) -> Optional[str]:
        tds = self.tds
        for fid, face in tds.faces.items():
            for v in tds.finite_vertices():
                if v.index in face.vertices:
                    continue
                if self.builder.face_conflict(fid, v.site):
                    return f"site {v.site!r} is in conflict with face {fid} {face.vertices}"
        return None
