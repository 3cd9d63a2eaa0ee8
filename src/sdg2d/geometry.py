"""
Construction path of the kernel: float64 geometry for output and plotting.

Nothing here feeds back into a combinatorial decision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .sites import Point


def as_xy(p: Point) -> np.ndarray:
    return np.array([float(p.x), float(p.y)], dtype=np.float64)


def rot90(v: np.ndarray) -> np.ndarray:
    return np.array([-v[1], v[0]], dtype=np.float64)


def unit(v: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(v)
    if n == 0:
        raise ValueError("zero-length direction")
    return v / n


def point_bisector_line(p: Point, q: Point) -> Tuple[float, float, float]:
    """Perpendicular bisector of two points as (a, b, c) with a*x + b*y + c = 0."""
    P, Q = as_xy(p), as_xy(q)
    a = 2.0 * (P[0] - Q[0])
    b = 2.0 * (P[1] - Q[1])
    c = Q[0] ** 2 + Q[1] ** 2 - P[0] ** 2 - P[1] ** 2
    return float(a), float(b), float(c)


def perpendicular_line(p: Point, e: Point) -> Tuple[float, float, float]:
    """Line through p perpendicular to the direction p -> e."""
    P, E = as_xy(p), as_xy(e)
    a, b = E - P
    return float(a), float(b), float(-(a * P[0] + b * P[1]))


def supporting_line(p1: Point, p2: Point) -> Tuple[float, float, float]:
    P, Q = as_xy(p1), as_xy(p2)
    a = P[1] - Q[1]
    b = Q[0] - P[0]
    c = P[0] * Q[1] - P[1] * Q[0]
    return float(a), float(b), float(c)


def line_through(origin, direction) -> Tuple[float, float, float]:
    o = np.asarray(origin, dtype=np.float64)
    d = np.asarray(direction, dtype=np.float64)
    a, b = -d[1], d[0]
    return float(a), float(b), float(-(a * o[0] + b * o[1]))


def point_bisector_direction(a: Point, b: Point) -> np.ndarray:
    """Direction of the bisector of two points with a on its left."""
    return rot90(as_xy(b) - as_xy(a))


def endpoint_normal_direction(p: Point, e: Point, point_on_left: bool) -> np.ndarray:
    """Direction of the normal at endpoint p of segment (p, e), the point's side on the left."""
    w = rot90(as_xy(e) - as_xy(p))
    return w if point_on_left else -w


@dataclass(frozen=True)
class ParabolaFrame:
    """Focus, foot of the focus on the directrix, unit axes and focal distance."""
    focus: np.ndarray
    foot: np.ndarray
    e_hat: np.ndarray  # along the directrix, p1 -> p2
    n_hat: np.ndarray  # from the directrix towards the focus
    h: float

    def parameter(self, x) -> float:
        return float((np.asarray(x, dtype=np.float64) - self.foot) @ self.e_hat)

    def point(self, t: float) -> np.ndarray:
        y = (t * t + self.h * self.h) / (2.0 * self.h)
        return self.foot + t * self.e_hat + y * self.n_hat

    def sample(self, t0: float, t1: float, n: int = 64) -> np.ndarray:
        ts = np.linspace(t0, t1, n)
        ys = (ts ** 2 + self.h ** 2) / (2.0 * self.h)
        return self.foot + np.outer(ts, self.e_hat) + np.outer(ys, self.n_hat)


def parabola_frame(focus: Point, p1: Point, p2: Point) -> ParabolaFrame:
    F = as_xy(focus)
    A, B = as_xy(p1), as_xy(p2)
    e_hat = unit(B - A)
    n_hat = rot90(e_hat)
    h = float((F - A) @ n_hat)
    if h < 0:
        n_hat = -n_hat
        h = -h
    if h == 0:
        raise ValueError("focus lies on the directrix")
    foot = F - h * n_hat
    return ParabolaFrame(focus=F, foot=foot, e_hat=e_hat, n_hat=n_hat, h=h)


def clip_line_to_box(a: float, b: float, c: float, bbox) -> np.ndarray:
    """Two points where the line a*x + b*y + c = 0 crosses the box (minx, miny, maxx, maxy)."""
    minx, miny, maxx, maxy = map(float, bbox)
    pts = []
    if abs(b) > 1e-300:
        for x in (minx, maxx):
            y = -(a * x + c) / b
            if miny - 1e-9 <= y <= maxy + 1e-9:
                pts.append((x, y))
    if abs(a) > 1e-300:
        for y in (miny, maxy):
            x = -(b * y + c) / a
            if minx - 1e-9 <= x <= maxx + 1e-9:
                pts.append((x, y))
    if len(pts) < 2:
        return np.zeros((0, 2), dtype=np.float64)
    pts = np.array(pts, dtype=np.float64)
    # farthest pair
    d = np.linalg.norm(pts[:, None, :] - pts[None, :, :], axis=-1)
    i, j = np.unravel_index(np.argmax(d), d.shape)
    return pts[[i, j]]


def ray_end_in_box(source, direction, bbox) -> np.ndarray:
    """Point where a ray leaves the box, or the source if it starts outside."""
    s = np.asarray(source, dtype=np.float64)
    d = np.asarray(direction, dtype=np.float64)
    minx, miny, maxx, maxy = map(float, bbox)
    ts = []
    for k, lo, hi in ((0, minx, maxx), (1, miny, maxy)):
        if d[k] > 0:
            ts.append((hi - s[k]) / d[k])
        elif d[k] < 0:
            ts.append((lo - s[k]) / d[k])
    t = min(ts) if ts else 0.0
    return s + max(t, 0.0) * d
