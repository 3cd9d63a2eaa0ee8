import matplotlib.pyplot as plt
import numpy as np

from .datastructures import Line, ParabolicArc, Ray, Segment
from .geometry import clip_line_to_box, parabola_frame, ray_end_in_box
from .sites import Point


def sites_bbox(sites, margin: float = 0.25):
    pts = np.array([p.as_float() for s in sites for p in s.support_points], dtype=np.float64)
    if len(pts) == 0:
        return -1.0, -1.0, 1.0, 1.0
    lo, hi = pts.min(axis=0), pts.max(axis=0)
    pad = margin * max(float(np.max(hi - lo)), 1.0)
    return lo[0] - pad, lo[1] - pad, hi[0] + pad, hi[1] + pad


def plot_sites(sites, ax=None):
    if ax is None:
        fig, ax = plt.subplots()

    for s in sites:
        if s.is_point:
            ax.plot(*s.point.as_float(), "o", color="tab:blue", ms=3)
        else:
            p = np.array([s.p1.as_float(), s.p2.as_float()])
            ax.plot(*p.T, "-", color="tab:blue", lw=2)

    ax.set_aspect("equal")
    return ax


def plot_dual_edges(edges, bbox, ax=None, samples: int = 64):
    if ax is None:
        fig, ax = plt.subplots()

    for edge in edges:
        prim = edge.primitive
        if isinstance(prim, Line):
            p = clip_line_to_box(prim.a, prim.b, prim.c, bbox)
        elif isinstance(prim, Ray):
            p = np.array([prim.source, ray_end_in_box(prim.source, prim.direction, bbox)])
        elif isinstance(prim, Segment):
            p = np.array([prim.source, prim.target])
        elif isinstance(prim, ParabolicArc):
            p = _arc_points(edge, samples)
        else:
            continue
        if len(p):
            ax.plot(*p.T, "-k", lw=0.8)

    ax.set_aspect("equal")
    return ax


def _arc_points(edge, samples: int) -> np.ndarray:
    prim = edge.primitive
    seg = next(s for s in edge.sites[:2] if s.is_segment)
    frame = parabola_frame(Point(*prim.focus), seg.p1, seg.p2)
    return frame.sample(prim.t_source, prim.t_target, samples)


def plot_segment_voronoi(diagram, ax=None):
    if ax is None:
        fig, ax = plt.subplots()

    bbox = sites_bbox(diagram.sites)
    plot_dual_edges(diagram.edges, bbox, ax=ax)
    plot_sites(diagram.sites, ax=ax)
    ax.set_xlim(bbox[0], bbox[2])
    ax.set_ylim(bbox[1], bbox[3])
    ax.set_title("Segment Voronoi 2D")
    return ax
