from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from numbers import Rational, Real
from typing import Tuple, Union


def _exact(value) -> Fraction:
    if isinstance(value, Fraction):
        return value
    if isinstance(value, bool):
        raise TypeError("coordinates must be numbers, not bool")
    if isinstance(value, (int, Rational)):
        return Fraction(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"coordinate must be finite, got {value!r}")
        return Fraction(value)
    if isinstance(value, str):
        return _exact(Decimal(value.strip())) if "/" not in value else Fraction(value.strip())
    if isinstance(value, Real):
        f = float(value)
        if f != f or f in (float("inf"), float("-inf")):
            raise ValueError(f"coordinate must be finite, got {value!r}")
        return Fraction(f)
    raise TypeError(f"unsupported coordinate type: {type(value).__name__}")


@dataclass(frozen=True)
class Point:
    """Exact 2D point. Floats are converted without rounding."""
    x: Fraction
    y: Fraction

    def __post_init__(self):
        object.__setattr__(self, "x", _exact(self.x))
        object.__setattr__(self, "y", _exact(self.y))

    def __iter__(self):
        yield self.x
        yield self.y

    def __getitem__(self, i):
        return (self.x, self.y)[i]

    def __len__(self):
        return 2

    def __lt__(self, other: "Point") -> bool:
        return (self.x, self.y) < (other.x, other.y)

    def as_float(self) -> Tuple[float, float]:
        return float(self.x), float(self.y)

    def __repr__(self):
        return f"Point({float(self.x)!r}, {float(self.y)!r})"


@dataclass(frozen=True)
class PointSite:
    point: Point

    @property
    def is_point(self) -> bool:
        return True

    @property
    def is_segment(self) -> bool:
        return False

    @property
    def support_points(self) -> Tuple[Point]:
        return (self.point,)

    def __repr__(self):
        x, y = self.point.as_float()
        return f"PointSite({x!r}, {y!r})"


@dataclass(frozen=True, eq=False)
class SegmentSite:
    """
    Open segment between two distinct points.

    Equality and hashing ignore the endpoint order. The stored order only
    fixes the orientation used by the kernel for the supporting line.
    """
    p1: Point
    p2: Point
    _key: Tuple[Point, Point] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.p1, Point) or not isinstance(self.p2, Point):
            raise TypeError("SegmentSite endpoints must be Point instances")
        a, b = sorted((self.p1, self.p2))
        object.__setattr__(self, "_key", (a, b))

    def __eq__(self, other):
        if not isinstance(other, SegmentSite):
            return NotImplemented
        return self._key == other._key

    def __hash__(self):
        return hash(("segment",) + self._key)

    @property
    def is_point(self) -> bool:
        return False

    @property
    def is_segment(self) -> bool:
        return True

    @property
    def support_points(self) -> Tuple[Point, Point]:
        return (self.p1, self.p2)

    @property
    def is_degenerate(self) -> bool:
        return self.p1 == self.p2

    def has_endpoint(self, p: Point) -> bool:
        return p == self.p1 or p == self.p2

    def other_endpoint(self, p: Point) -> Point:
        if p == self.p1:
            return self.p2
        if p == self.p2:
            return self.p1
        raise ValueError(f"{p!r} is not an endpoint of {self!r}")

    def endpoint_sites(self) -> Tuple[PointSite, PointSite]:
        return PointSite(self.p1), PointSite(self.p2)

    def __repr__(self):
        x1, y1 = self.p1.as_float()
        x2, y2 = self.p2.as_float()
        return f"SegmentSite(({x1!r}, {y1!r}), ({x2!r}, {y2!r}))"


Site = Union[PointSite, SegmentSite]


def point_site(x, y) -> PointSite:
    return PointSite(Point(x, y))


def segment_site(x1, y1, x2, y2) -> SegmentSite:
    return SegmentSite(Point(x1, y1), Point(x2, y2))


def is_site(obj) -> bool:
    return isinstance(obj, (PointSite, SegmentSite))


def incident(p: Site, s: Site) -> bool:
    """True when point site p is an endpoint of segment site s."""
    return p.is_point and s.is_segment and s.has_endpoint(p.point)
