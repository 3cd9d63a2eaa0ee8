from __future__ import annotations

from typing import List, Optional

import numpy as np
from shapely.geometry import LineString, Point as ShapelyPoint, Polygon

from .sites import Point, PointSite, SegmentSite, Site


def sample_sites_in_polygon(
    polygon_uv: np.ndarray,
    *,
    n_points: int,
    n_segments: int,
    rng: np.random.Generator,
    max_segment_length: Optional[float] = None,
    min_clearance: float = 1e-3,
    decimals: Optional[int] = 6,
    max_tries: int = 10000,
) -> List[Site]:
    """
    Random sites inside a polygon: segments first, then isolated points.

    Every new site keeps at least min_clearance from the sites already drawn,
    so segments never cross or touch and points never sit on a segment.
    Coordinates are rounded to `decimals` places (None keeps full floats).
    """
    poly = Polygon(polygon_uv)
    if poly.is_empty or not poly.is_valid:
        raise ValueError("Input polygon_uv must be a valid, non-empty polygon")
    minx, miny, maxx, maxy = poly.bounds
    if max_segment_length is None:
        max_segment_length = 0.25 * max(maxx - minx, maxy - miny)

    def draw():
        x, y = rng.uniform(minx, maxx), rng.uniform(miny, maxy)
        if decimals is not None:
            x, y = round(x, decimals), round(y, decimals)
        return x, y

    taken = []
    sites: List[Site] = []
    tries = 0

    def fits(geom) -> bool:
        return poly.contains(geom) and all(geom.distance(g) >= min_clearance for g in taken)

    while sum(s.is_segment for s in sites) < n_segments:
        tries += 1
        if tries > max_tries:
            raise RuntimeError("could not place the requested number of segments")
        a = draw()
        ang = rng.uniform(0.0, 2.0 * np.pi)
        length = rng.uniform(0.1, 1.0) * max_segment_length
        b = (a[0] + length * np.cos(ang), a[1] + length * np.sin(ang))
        if decimals is not None:
            b = (round(b[0], decimals), round(b[1], decimals))
        if a == b:
            continue
        geom = LineString([a, b])
        if fits(geom):
            taken.append(geom)
            sites.append(SegmentSite(Point(*a), Point(*b)))

    while sum(s.is_point for s in sites) < n_points:
        tries += 1
        if tries > max_tries:
            raise RuntimeError("could not place the requested number of points")
        p = draw()
        geom = ShapelyPoint(p)
        if fits(geom):
            taken.append(geom)
            sites.append(PointSite(Point(*p)))

    return sites
