from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .sites import Site


def ccw(i: int) -> int:
    return (i + 1) % 3


def cw(i: int) -> int:
    return (i + 2) % 3


@dataclass(frozen=True)
class FiniteVertex:
    index: int
    site: Site

    @property
    def is_infinite(self) -> bool:
        return False


@dataclass(frozen=True)
class InfiniteVertex:
    index: int = 0

    @property
    def is_infinite(self) -> bool:
        return True


Vertex = Union[FiniteVertex, InfiniteVertex]


@dataclass
class Face:
    vertices: List[int]                   # 3 vertex indices, counter-clockwise
    neighbors: List[int]                  # neighbor i is across the edge opposite vertex i
    voronoi: Optional[object] = field(default=None, repr=False)  # cached kernel vertex
    voronoi_ready: bool = field(default=False, repr=False)

    def index_of(self, v: int) -> int:
        return self.vertices.index(v)

    def has_vertex(self, v: int) -> bool:
        return v in self.vertices


class Marker(enum.Enum):
    AT_INFINITY = "inf"

    def __repr__(self):
        return "AT_INFINITY"


AT_INFINITY = Marker.AT_INFINITY

Endpoint = Union[Site, Marker]
XY = Tuple[float, float]


class PrimitiveKind(str, enum.Enum):
    LINE = "line"
    SEGMENT = "segment"
    RAY = "ray"
    PARABOLIC_ARC = "parabolic_arc"


@dataclass(frozen=True)
class Line:
    a: float
    b: float
    c: float  # a*x + b*y + c == 0

    kind = PrimitiveKind.LINE


@dataclass(frozen=True)
class Ray:
    source: XY
    direction: XY

    kind = PrimitiveKind.RAY


@dataclass(frozen=True)
class Segment:
    source: XY
    target: XY

    kind = PrimitiveKind.SEGMENT


@dataclass(frozen=True)
class ParabolicArc:
    source: XY
    target: XY
    focus: XY
    directrix: Tuple[float, float, float]
    t_source: float
    t_target: float

    kind = PrimitiveKind.PARABOLIC_ARC


Primitive = Union[Line, Ray, Segment, ParabolicArc]


@dataclass(frozen=True)
class DualEdge:
    """
    One Voronoi edge: the bisector of sites A and B, bounded by the Voronoi
    vertices of the faces whose apices are C and D.
    """
    primitive: Primitive
    sites: Tuple[Endpoint, Endpoint, Endpoint, Endpoint]  # (A, B, C, D)
    face: int
    index: int

    @property
    def kind(self) -> PrimitiveKind:
        return self.primitive.kind


@dataclass
class SegmentVoronoiDiagram2D:
    sites: List[Site]          # inserted sites, in vertex order
    edges: List[DualEdge]

    def by_kind(self, kind: PrimitiveKind) -> List[DualEdge]:
        return [e for e in self.edges if e.kind == kind]

    def counts(self) -> dict:
        out = {k.value: 0 for k in PrimitiveKind}
        for e in self.edges:
            out[e.kind.value] += 1
        return out
