"""
Dual extraction: one classified Voronoi primitive per finite triangulation edge.
"""

from __future__ import annotations

import logging
from typing import Iterator, Tuple

import numpy as np

from . import geometry
from .builder import Builder
from .datastructures import (
    AT_INFINITY,
    DualEdge,
    Endpoint,
    Line,
    ParabolicArc,
    Primitive,
    PrimitiveKind,
    Ray,
    Segment,
    ccw,
    cw,
)
from .errors import InvalidTriangulationError, UnsupportedConfigurationError
from .sites import Site, incident
from .triangulation import INFINITE, Triangulation

logger = logging.getLogger(__name__)


def is_parabolic_pair(a: Site, b: Site) -> bool:
    """A point and a segment it is not an endpoint of."""
    if a.is_point == b.is_point:
        return False
    return not (incident(a, b) or incident(b, a))


def classify(a: Site, b: Site, c_infinite: bool, d_infinite: bool) -> PrimitiveKind:
    parabolic = is_parabolic_pair(a, b)
    if c_infinite or d_infinite:
        if parabolic:
            raise UnsupportedConfigurationError(
                f"unbounded parabolic edge between {a!r} and {b!r}"
            )
        return PrimitiveKind.LINE if c_infinite and d_infinite else PrimitiveKind.RAY
    return PrimitiveKind.PARABOLIC_ARC if parabolic else PrimitiveKind.SEGMENT


class DualExtractor:
    """
    Restartable iterable over the Voronoi edges of a triangulation.

    The edge (f, i) is the bisector of A = v[ccw i] and B = v[cw i], with A on
    its left. It runs from the Voronoi vertex of the neighbour face (apex D)
    to the Voronoi vertex of f (apex C).
    """

    def __init__(self, tds: Triangulation, builder: Builder):
        self.tds = tds
        self.builder = builder

    def __iter__(self) -> Iterator[DualEdge]:
        for f, i in self.tds.finite_edges():
            yield self.edge(f, i)

    def __len__(self) -> int:
        return sum(1 for _ in self.tds.finite_edges())

    def quadruple(self, f: int, i: int) -> Tuple[int, int, int, int]:
        face = self.tds.face(f)
        return face.vertices[ccw(i)], face.vertices[cw(i)], face.vertices[i], self.tds.mirror_vertex(f, i)

    def edge(self, f: int, i: int) -> DualEdge:
        tds = self.tds
        ia, ib, ic, id_ = self.quadruple(f, i)
        if ia == INFINITE or ib == INFINITE:
            raise ValueError(f"edge ({f}, {i}) is not finite")
        a, b = tds.site(ia), tds.site(ib)
        kind = classify(a, b, ic == INFINITE, id_ == INFINITE)
        g = tds.face(f).neighbors[i]
        vf = None if ic == INFINITE else self._vertex(f)
        vg = None if id_ == INFINITE else self._vertex(g)

        if kind is PrimitiveKind.LINE:
            primitive: Primitive = self._line(a, b)
        elif kind is PrimitiveKind.RAY:
            hint = self.builder.voronoi_vertex(f if vf is not None else g)
            direction = self._direction(a, b, hint)
            if vf is None:
                primitive = Ray(_xy(vg), _xy(direction))
            else:
                primitive = Ray(_xy(vf), _xy(-direction))
        elif kind is PrimitiveKind.SEGMENT:
            primitive = Segment(_xy(vg), _xy(vf))
        else:
            primitive = self._parabolic_arc(a, b, vg, vf)

        sites = tuple(self._endpoint(v) for v in (ia, ib, ic, id_))
        logger.debug("edge (%d, %d) -> %s", f, i, kind.value)
        return DualEdge(primitive, sites, f, i)

    # -- helpers --------------------------------------------------------------

    def _endpoint(self, v: int) -> Endpoint:
        return AT_INFINITY if v == INFINITE else self.tds.site(v)

    def _vertex(self, fid: int) -> np.ndarray:
        vv = self.builder.voronoi_vertex(fid)
        if vv is None:
            raise InvalidTriangulationError(f"face {fid} has no Voronoi vertex")
        return np.array(vv.as_float(), dtype=np.float64)

    def _line(self, a: Site, b: Site) -> Line:
        if a.is_point and b.is_point:
            return Line(*geometry.point_bisector_line(a.point, b.point))
        if a.is_point != b.is_point:
            p, s = (a, b) if a.is_point else (b, a)
            return Line(*geometry.perpendicular_line(p.point, s.other_endpoint(p.point)))
        bis = self.builder.kernel.bisector(a, b)
        origin = np.array([float(x) for x in bis.X0])
        return Line(*geometry.line_through(origin, self._kernel_direction(bis)))

    def _direction(self, a: Site, b: Site, hint) -> np.ndarray:
        """Direction of the bisector with a on its left."""
        if a.is_point and b.is_point:
            return geometry.point_bisector_direction(a.point, b.point)
        if a.is_point != b.is_point:
            p, s = (a, b) if a.is_point else (b, a)
            return geometry.endpoint_normal_direction(
                p.point, s.other_endpoint(p.point), point_on_left=a.is_point
            )
        return self._kernel_direction(self.builder.kernel.bisector(a, b, hint))

    @staticmethod
    def _kernel_direction(bis) -> np.ndarray:
        return np.array([float(x) for x in bis.X1], dtype=np.float64)

    def _parabolic_arc(self, a: Site, b: Site, vg: np.ndarray, vf: np.ndarray) -> ParabolicArc:
        p, s = (a, b) if a.is_point else (b, a)
        frame = geometry.parabola_frame(p.point, s.p1, s.p2)
        return ParabolicArc(
            source=_xy(vg),
            target=_xy(vf),
            focus=_xy(frame.focus),
            directrix=geometry.supporting_line(s.p1, s.p2),
            t_source=frame.parameter(vg),
            t_target=frame.parameter(vf),
        )


def _xy(v) -> Tuple[float, float]:
    return float(v[0]), float(v[1])
