"""
Decision path of the geometric kernel.

Rational predicates (orientation, incidence, squared distances, conflicts at
infinity) are exact on Fraction coordinates. Predicates that need square
roots (Voronoi vertices of segments, conflicts along bisectors) run in a local
Decimal context of configurable precision; magnitudes below the configured
tolerance are ties, and ties are never conflicts.
"""

from __future__ import annotations

import decimal
import logging
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Dict, List, Optional, Sequence, Tuple

from .arith import (
    INF,
    NEG_INF,
    DVec,
    add,
    covers,
    cross,
    dot,
    dsqrt,
    dvec,
    intersect_sets,
    make_context,
    meets,
    negative_set,
    norm2,
    rot90,
    scale,
    sign,
    sub,
    to_decimal,
)
from .config import KernelConfig, get_kernel_config
from .errors import UnsupportedConfigurationError
from .sites import Point, PointSite, SegmentSite, Site, incident

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# exact rational predicates

def orientation(p: Point, q: Point, r: Point) -> int:
    """+1 if p, q, r turn counter-clockwise, -1 if clockwise, 0 if collinear."""
    return sign((q.x - p.x) * (r.y - p.y) - (q.y - p.y) * (r.x - p.x))


def on_open_segment(p: Point, a: Point, b: Point) -> bool:
    """True when p lies strictly between a and b on the segment ab."""
    if orientation(a, b, p) != 0:
        return False
    d = sub(b, a)
    return dot(sub(p, a), d) > 0 and dot(sub(p, b), d) < 0


def segment_relation(s: SegmentSite, t: SegmentSite) -> Optional[str]:
    """
    Describe how two segments interfere, or None when they are disjoint or
    only share an endpoint.
    """
    if s == t:
        return "duplicate"
    a, b = s.p1, s.p2
    c, d = t.p1, t.p2
    o1 = orientation(a, b, c)
    o2 = orientation(a, b, d)
    if o1 == 0 and o2 == 0:
        # collinear: compare open parameter ranges along ab
        u = sub(b, a)
        ta, tb = Fraction(0), dot(u, u)
        tc, td = dot(sub(c, a), u), dot(sub(d, a), u)
        lo = max(ta, min(tc, td))
        hi = min(tb, max(tc, td))
        if lo < hi:
            return "overlapping"
        return None
    o3 = orientation(c, d, a)
    o4 = orientation(c, d, b)
    if o1 * o2 < 0 and o3 * o4 < 0:
        return "crossing"
    for p, (x, y) in ((c, (a, b)), (d, (a, b)), (a, (c, d)), (b, (c, d))):
        if on_open_segment(p, x, y):
            return "touching"
    return None


def crossing_point(s: SegmentSite, t: SegmentSite) -> Point:
    """Exact intersection point of two segments that cross."""
    u = sub(s.p2, s.p1)
    v = sub(t.p2, t.p1)
    lam = Fraction(cross(sub(t.p1, s.p1), v)) / cross(u, v)
    x, y = add(s.p1, scale(u, lam))
    return Point(x, y)


def squared_distance(x: Point, site: Site) -> Fraction:
    """Exact squared distance from a point to a point site or closed segment."""
    if site.is_point:
        return norm2(sub(x, site.point))
    a, b = site.p1, site.p2
    d = sub(b, a)
    lam = dot(sub(x, a), d) / norm2(d)
    if lam <= 0:
        return norm2(sub(x, a))
    if lam >= 1:
        return norm2(sub(x, b))
    foot = add(a, scale(d, lam))
    return norm2(sub(x, foot))


def _arc_contains(d1, d2, w) -> bool:
    """w strictly inside the counter-clockwise arc of directions from d1 to d2."""
    c12 = cross(d1, d2)
    if c12 > 0:
        return cross(d1, w) > 0 and cross(w, d2) > 0
    if c12 == 0:
        if dot(d1, d2) > 0:
            return False
        return cross(d1, w) > 0
    # reflex arc: complement of the closed arc from d2 to d1
    return not (cross(d2, w) >= 0 and cross(w, d1) >= 0)


# ---------------------------------------------------------------------------
# Decimal-side data

@dataclass(frozen=True)
class VoronoiVertex:
    """Centre and squared radius of the circle tangent to a face's three sites."""
    center: DVec
    radius2: Decimal

    @property
    def radius(self) -> Decimal:
        return dsqrt(self.radius2)

    def as_float(self) -> Tuple[float, float]:
        return float(self.center[0]), float(self.center[1])


@dataclass(frozen=True)
class _Line:
    a: DVec
    b: DVec
    d: DVec       # b - a
    n: DVec       # rot90(d), points to the left of a -> b
    k: Decimal    # n.x + k == 0 on the line
    ell: Decimal  # |n|
    len2: Decimal

    def signed(self, x: DVec) -> Decimal:
        """Signed distance of x to the supporting line (positive on the left)."""
        return (dot(self.n, x) + self.k) / self.ell

    def param(self, x: DVec) -> Decimal:
        return dot(sub(x, self.a), self.d) / self.len2

    def foot(self, x: DVec) -> DVec:
        t = min(max(self.param(x), Decimal(0)), Decimal(1))
        return add(self.a, scale(self.d, t))


@dataclass
class _Bisector:
    """
    Parameterised bisector X(tau) = X0 + tau X1 + tau^2 X2 of two sites,
    oriented so that the first site lies on its left.
    """
    X0: DVec
    X1: DVec
    X2: DVec
    focus: Optional[DVec]             # a point site of the pair, if any
    rho: Optional[Tuple[Decimal, ...]]   # distance to the pair as a polynomial
    rho2: Tuple[Decimal, ...]         # squared distance as a polynomial
    origin: DVec
    axis: DVec
    axis_norm2: Decimal

    def tau(self, x: DVec) -> Decimal:
        return dot(sub(x, self.origin), self.axis) / self.axis_norm2


class Kernel:
    """
    Predicates used by the builder, the validator and the dual extractor.

    All Decimal work happens under this kernel's private context, so callers
    never need to touch the thread's Decimal context.
    """

    def __init__(self, config: Optional[KernelConfig] = None):
        self.config = config if config is not None else get_kernel_config()
        self.context = make_context(self.config.decimal_precision)
        self.tol = self.config.tolerance
        self._lines: Dict[SegmentSite, _Line] = {}

    # -- exact --------------------------------------------------------------

    orientation = staticmethod(orientation)
    squared_distance = staticmethod(squared_distance)

    def infinite_face_conflict(self, u: Site, v: Site, t: Site) -> bool:
        """Conflict of t with the infinite face (u, v, inf), i.e. its limiting half-plane."""
        if t.is_segment:
            return (
                u.is_point and v.is_point
                and t.has_endpoint(u.point) and t.has_endpoint(v.point)
            )
        pu, pv = self._hull_points(u, v)
        if pu is None:
            return False
        o = orientation(pu, pv, t.point)
        if o > 0:
            return True
        if o == 0 and u.is_point and v.is_point:
            return on_open_segment(t.point, u.point, v.point)
        return False

    def infinite_edge_conflict(self, u: Site, v: Site, w: Site, t: Site, full: bool) -> bool:
        """
        Conflict of t with the edge (v, inf) shared by faces (u, v, inf) and
        (v, w, inf). The edge is the arc of directions at infinity that belong
        to v's region.
        """
        if t.is_segment:
            return False
        if v.is_segment:
            if not full:
                return False
            pu, pv = self._hull_points(u, v)
            if pu is None:
                return False
            return orientation(pu, pv, t.point) > 0
        pu, _ = self._hull_points(u, v)
        _, pw = self._hull_points(v, w)
        if pu is None or pw is None:
            return False
        vp = v.point
        d_end = rot90(sub(vp, pu))
        d_start = rot90(sub(pw, vp))
        wdir = sub(t.point, vp)
        s_start = dot(d_start, wdir)
        s_end = dot(d_end, wdir)
        if full:
            return s_start > 0 and s_end > 0
        zero_width = cross(d_start, d_end) == 0 and dot(d_start, d_end) > 0
        if zero_width:
            return False
        return s_start > 0 or s_end > 0 or _arc_contains(d_start, d_end, wdir)

    def _hull_points(self, u: Site, v: Site):
        """
        Points spanning the limiting half-plane of the infinite face (u, v, inf).
        A segment next to its own endpoint is replaced by its other endpoint.
        """
        if u.is_point and v.is_point:
            return u.point, v.point
        if u.is_segment and v.is_point and u.has_endpoint(v.point):
            return u.other_endpoint(v.point), v.point
        if u.is_point and v.is_segment and v.has_endpoint(u.point):
            return u.point, v.other_endpoint(u.point)
        logger.debug("infinite face with unexpected sites %r, %r", u, v)
        return None, None

    # -- Voronoi vertices ---------------------------------------------------

    def vertex(self, a: Site, b: Site, c: Site) -> Optional[VoronoiVertex]:
        """
        Voronoi vertex of three sites met counter-clockwise in the order a, b, c,
        or None when no finite circle is tangent to all three.
        """
        with decimal.localcontext(self.context):
            return self._vertex((a, b, c))

    def _line(self, s: SegmentSite) -> _Line:
        line = self._lines.get(s)
        if line is None:
            a, b = dvec(s.p1), dvec(s.p2)
            d = sub(b, a)
            n = rot90(d)
            line = _Line(a=a, b=b, d=d, n=n, k=-dot(n, a), ell=dsqrt(norm2(n)), len2=norm2(d))
            self._lines[s] = line
        return line

    def forget_lines(self, keep) -> None:
        """Drop cached supporting lines of segments not in `keep`."""
        for s in [s for s in self._lines if s not in keep]:
            del self._lines[s]

    def _vertex(self, sites: Sequence[Site]) -> Optional[VoronoiVertex]:
        common = set(sites[0].support_points)
        for s in sites[1:]:
            common &= set(s.support_points)
        if common:
            (p,) = common
            return VoronoiVertex(dvec(p), Decimal(0))

        for ip, p in enumerate(sites):
            for js, s in enumerate(sites):
                if incident(p, s):
                    return self._vertex_at_endpoint(sites, ip, js)

        points = [s for s in sites if s.is_point]
        if len(points) == 3:
            return self._circumcenter(*[s.point for s in sites])
        if len(points) == 2:
            candidates = self._candidates_pps(sites)
        elif len(points) == 1:
            candidates = self._candidates_pss(sites)
        else:
            candidates = self._candidates_sss(sites)
        return self._select(sites, candidates)

    def _circumcenter(self, a: Point, b: Point, c: Point) -> Optional[VoronoiVertex]:
        ba = sub(b, a)
        ca = sub(c, a)
        den = 2 * cross(ba, ca)
        if den == 0:
            return None
        b2, c2 = norm2(ba), norm2(ca)
        ux = (ca[1] * b2 - ba[1] * c2) / den
        uy = (ba[0] * c2 - ca[0] * b2) / den
        center = (a.x + ux, a.y + uy)
        return VoronoiVertex(dvec(center), to_decimal(ux * ux + uy * uy))

    def _vertex_at_endpoint(self, sites, ip: int, js: int) -> Optional[VoronoiVertex]:
        # the circle touches the segment at its endpoint p, so its centre is on
        # the normal through p; the cyclic order of (p, s) fixes the side
        p = sites[ip].point
        seg = sites[js]
        other = sites[3 - ip - js]
        side = 1 if (js - ip) % 3 == 1 else -1
        P = dvec(p)
        n = rot90(sub(dvec(seg.other_endpoint(p)), P))
        if other.is_point:
            if seg.has_endpoint(other.point):
                return None
            q = dvec(other.point)
            den = 2 * dot(n, sub(q, P))
            if self._zero(den, norm2(n) + norm2(sub(q, P))):
                return None
            mu = norm2(sub(q, P)) / den
            center = add(P, scale(n, mu))
            return VoronoiVertex(center, norm2(sub(center, P)))
        line = self._line(other)
        nn = dsqrt(norm2(n))
        lp = line.signed(P)
        sigmas = [sign(lp)] if not self._zero(lp, nn) else [1, -1]
        best = None
        for sigma in sigmas:
            den = sigma * dot(n, line.n) / line.ell - side * nn
            if self._zero(den, nn):
                continue
            mu = -sigma * lp / den
            if sign(mu) != side:
                continue
            center = add(P, scale(n, mu))
            r2 = mu * mu * norm2(n)
            if best is None or r2 < best.radius2:
                best = VoronoiVertex(center, r2)
        return best

    def _side(self, line: _Line, pts: Sequence[DVec]) -> List[int]:
        for q in pts:
            v = line.signed(q)
            if not self._zero(v, dsqrt(line.len2)):
                return [sign(v)]
        return [1, -1]

    def _candidates_pps(self, sites):
        p1, p2 = [dvec(s.point) for s in sites if s.is_point]
        (seg,) = [s for s in sites if s.is_segment]
        line = self._line(seg)
        m = scale(add(p1, p2), Decimal(1) / 2)
        d = rot90(sub(p2, p1))
        out = []
        for sigma in self._side(line, (p1, p2)):
            alpha = sigma * line.signed(m)
            beta = sigma * dot(line.n, d) / line.ell
            a2 = norm2(d) - beta * beta
            a1 = -2 * alpha * beta
            a0 = norm2(sub(m, p1)) - alpha * alpha
            for s in self._roots(a2, a1, a0):
                out.append((add(m, scale(d, s)), alpha + beta * s))
        return out

    def _candidates_pss(self, sites):
        (ps,) = [s for s in sites if s.is_point]
        P = dvec(ps.point)
        l1, l2 = [self._line(s) for s in sites if s.is_segment]
        out = []
        for s1 in self._side(l1, (P,)):
            for s2 in self._side(l2, (P,)):
                G = sub(scale(l1.n, s1 / l1.ell), scale(l2.n, s2 / l2.ell))
                g0 = s1 * l1.k / l1.ell - s2 * l2.k / l2.ell
                gg = norm2(G)
                if self._zero(gg, Decimal(1)):
                    continue
                c0 = scale(G, -g0 / gg)
                g = rot90(G)
                alpha = s1 * l1.signed(c0)
                beta = s1 * dot(l1.n, g) / l1.ell
                cp = sub(c0, P)
                a2 = norm2(g) - beta * beta
                a1 = 2 * (dot(g, cp) - alpha * beta)
                a0 = norm2(cp) - alpha * alpha
                for s in self._roots(a2, a1, a0):
                    out.append((add(c0, scale(g, s)), alpha + beta * s))
        return out

    def _candidates_sss(self, sites):
        lines = [self._line(s) for s in sites]
        out = []
        for mask in range(8):
            sig = [1 if mask & (1 << i) else -1 for i in range(3)]
            # sigma_i * (n_i . c + k_i) / ell_i - r = 0
            rows = [
                (sig[i] * ln.n[0] / ln.ell, sig[i] * ln.n[1] / ln.ell, Decimal(-1), -sig[i] * ln.k / ln.ell)
                for i, ln in enumerate(lines)
            ]
            sol = _solve3(rows, self.tol)
            if sol is None:
                continue
            x, y, r = sol
            out.append(((x, y), r))
        return out

    def _roots(self, a2: Decimal, a1: Decimal, a0: Decimal) -> List[Decimal]:
        big = max(abs(a2), abs(a1), abs(a0))
        if big == 0:
            return []
        if abs(a2) <= self.tol * big:
            if abs(a1) <= self.tol * big:
                return []
            return [-a0 / a1]
        disc = a1 * a1 - 4 * a2 * a0
        if disc < 0:
            if -disc <= self.tol * max(a1 * a1, abs(4 * a2 * a0)):
                disc = Decimal(0)
            else:
                return []
        s = disc.sqrt()
        return [(-a1 - s) / (2 * a2), (-a1 + s) / (2 * a2)]

    def _tangent(self, site: Site, center: DVec) -> Tuple[DVec, Decimal]:
        """Closest point of a site to the centre and its parameter overshoot."""
        if site.is_point:
            return dvec(site.point), Decimal(0)
        line = self._line(site)
        t = line.param(center)
        over = max(-t, t - 1, Decimal(0))
        return line.foot(center), over

    def _select(self, sites, candidates) -> Optional[VoronoiVertex]:
        best = None
        best_score = None
        for center, r in candidates:
            scale_ = max(Decimal(1), abs(r), abs(center[0]), abs(center[1]))
            if r < -self.tol * scale_:
                continue
            tangents = []
            overshoot = Decimal(0)
            for s in sites:
                tp, over = self._tangent(s, center)
                tangents.append(tp)
                overshoot += over
            turn = cross(sub(tangents[1], tangents[0]), sub(tangents[2], tangents[0]))
            valid = overshoot <= self.tol * scale_ and turn > self.tol * scale_ * scale_
            r2 = r * r
            # valid candidates first, then the smallest circle
            score = (0 if valid else 1, overshoot if not valid else Decimal(0), r2)
            if best_score is None or score < best_score:
                best_score = score
                best = VoronoiVertex(center, r2)
        if best is not None and best_score[0] != 0:
            logger.debug("no exact-order candidate for %r; using closest", sites)
        return best

    # -- conflicts ----------------------------------------------------------

    def finite_face_conflict(self, vv: Optional[VoronoiVertex], t: Site) -> bool:
        """t is strictly closer to the face's Voronoi vertex than the face's sites."""
        if vv is None:
            return False
        with decimal.localcontext(self.context):
            d2 = self._squared_distance_dec(vv.center, t)
            return d2 < vv.radius2 - self.tol * max(Decimal(1), vv.radius2)

    def _squared_distance_dec(self, x: DVec, site: Site) -> Decimal:
        if site.is_point:
            return norm2(sub(x, dvec(site.point)))
        line = self._line(site)
        return norm2(sub(x, line.foot(x)))

    def edge_conflict(
        self,
        a: Site,
        b: Site,
        vg: Optional[VoronoiVertex],
        vf: Optional[VoronoiVertex],
        t: Site,
        full: bool,
    ) -> bool:
        """
        Conflict of t with the interior of the Voronoi edge of sites (a, b)
        running from vg to vf (None means the end at infinity).

        full=False: some interior point is closer to t.
        full=True: every interior point is closer to t.
        """
        with decimal.localcontext(self.context):
            bis = self.bisector(a, b, vf, vg)
            lo = bis.tau(vg.center) if vg is not None else NEG_INF
            hi = bis.tau(vf.center) if vf is not None else INF
            if lo > hi:
                lo, hi = hi, lo
            if lo != NEG_INF and hi != INF and hi - lo <= self.tol * max(Decimal(1), abs(lo), abs(hi)):
                return full
            sets = self._conflict_set(bis, t)
            if full:
                return covers(sets, lo, hi, self.tol)
            return meets(sets, lo, hi, self.tol)

    def bisector(self, a: Site, b: Site, hint: Optional[VoronoiVertex] = None,
                 other: Optional[VoronoiVertex] = None) -> _Bisector:
        """Oriented bisector of two sites, with a on its left."""
        with decimal.localcontext(self.context):
            zero = (Decimal(0), Decimal(0))
            if a.is_point and b.is_point:
                A, B = dvec(a.point), dvec(b.point)
                m = scale(add(A, B), Decimal(1) / 2)
                w = rot90(sub(B, A))
                return _Bisector(m, w, zero, A, None, (norm2(sub(m, A)), Decimal(0), norm2(w)), m, w, norm2(w))
            if a.is_point != b.is_point:
                p, s = (a, b) if a.is_point else (b, a)
                if s.has_endpoint(p.point):
                    P = dvec(p.point)
                    e = dvec(s.other_endpoint(p.point))
                    w = rot90(sub(e, P))
                    if not a.is_point:
                        w = scale(w, -1)
                    return _Bisector(P, w, zero, P, None, (Decimal(0), Decimal(0), norm2(w)), P, w, norm2(w))
                return self._parabola(p, s, point_on_left=a.is_point)
            return self._segment_bisector(a, b, hint, other)

    def _parabola(self, p: PointSite, s: SegmentSite, point_on_left: bool) -> _Bisector:
        line = self._line(s)
        P = dvec(p.point)
        h = line.signed(P)
        if self._zero(h, dsqrt(line.len2)):
            raise UnsupportedConfigurationError(f"point {p!r} is on the supporting line of {s!r}")
        n_hat = scale(line.n, sign(h) / line.ell)
        habs = abs(h)
        foot = sub(P, scale(n_hat, habs))
        e_hat = (n_hat[1], -n_hat[0]) if point_on_left else (-n_hat[1], n_hat[0])
        X0 = add(foot, scale(n_hat, habs / 2))
        X2 = scale(n_hat, 1 / (2 * habs))
        rho = (habs / 2, Decimal(0), 1 / (2 * habs))
        # quartic; conflicts use rho directly for parabolas
        rho2 = (rho[0] * rho[0], Decimal(0), 2 * rho[0] * rho[2], Decimal(0), rho[2] * rho[2])
        return _Bisector(X0, e_hat, X2, P, rho, rho2, foot, e_hat, Decimal(1))

    def _segment_bisector(self, a: SegmentSite, b: SegmentSite, hint, other) -> _Bisector:
        la, lb = self._line(a), self._line(b)
        sides = None
        for vv in (hint, other):
            if vv is not None and vv.radius2 > self.tol * max(Decimal(1), abs(vv.center[0]), abs(vv.center[1])):
                sides = (sign(la.signed(vv.center)), sign(lb.signed(vv.center)))
                if 0 not in sides:
                    break
                sides = None
        if sides is None:
            shared = set(a.support_points) & set(b.support_points)
            if shared:
                (q,) = shared
                qa, qb = a.other_endpoint(q), b.other_endpoint(q)
            else:
                qa = qb = None
            ref_b = dvec(qb) if qb is not None else scale(add(lb.a, lb.b), Decimal(1) / 2)
            ref_a = dvec(qa) if qa is not None else scale(add(la.a, la.b), Decimal(1) / 2)
            sides = (sign(la.signed(ref_b)) or 1, sign(lb.signed(ref_a)) or 1)
        sa, sb = sides
        G = sub(scale(la.n, sa / la.ell), scale(lb.n, sb / lb.ell))
        g0 = sa * la.k / la.ell - sb * lb.k / lb.ell
        gg = norm2(G)
        if self._zero(gg, Decimal(1)):
            raise UnsupportedConfigurationError(f"segments {a!r} and {b!r} have no straight bisector")
        X0 = scale(G, -g0 / gg)
        w = rot90(G)
        rho0 = sa * la.signed(X0)
        rho1 = sa * dot(la.n, w) / la.ell
        zero = (Decimal(0), Decimal(0))
        return _Bisector(X0, w, zero, None, (rho0, rho1), (rho0 * rho0, 2 * rho0 * rho1, rho1 * rho1), X0, w, norm2(w))

    def _conflict_set(self, bis: _Bisector, t: Site):
        X0, X1, X2 = bis.X0, bis.X1, bis.X2
        tol = self.tol
        if t.is_point:
            T = dvec(t.point)
            if bis.focus is not None:
                P = bis.focus
                pt = sub(P, T)
                coeffs = (
                    2 * dot(X0, pt) + norm2(T) - norm2(P),
                    2 * dot(X1, pt),
                    2 * dot(X2, pt),
                )
            else:
                r0, r1 = bis.rho
                xt = sub(X0, T)
                coeffs = (norm2(xt) - r0 * r0, 2 * dot(X1, xt) - 2 * r0 * r1, norm2(X1) - r1 * r1)
            return negative_set(coeffs, tol)
        line = self._line(t)
        d = line.d
        strip_lo = (-dot(sub(X0, line.a), d), -dot(X1, d), -dot(X2, d))
        strip_hi = (dot(sub(X0, line.b), d), dot(X1, d), dot(X2, d))
        sets = intersect_sets(negative_set(strip_lo, tol), negative_set(strip_hi, tol))
        L = (dot(line.n, X0) + line.k, dot(line.n, X1), dot(line.n, X2))
        if bis.rho is not None:
            rho = tuple(bis.rho) + (Decimal(0),) * (3 - len(bis.rho))
            above = tuple(L[i] - line.ell * rho[i] for i in range(3))
            below = tuple(-L[i] - line.ell * rho[i] for i in range(3))
            sets = intersect_sets(sets, negative_set(above, tol))
            sets = intersect_sets(sets, negative_set(below, tol))
        else:
            l0, l1 = L[0], L[1]
            e2 = line.ell * line.ell
            q = (
                l0 * l0 - e2 * bis.rho2[0],
                2 * l0 * l1 - e2 * bis.rho2[1],
                l1 * l1 - e2 * bis.rho2[2],
            )
            sets = intersect_sets(sets, negative_set(q, tol))
        return sets

    def _zero(self, value: Decimal, magnitude: Decimal) -> bool:
        return abs(value) <= self.tol * max(Decimal(1), abs(magnitude))


def _solve3(rows, tol: Decimal) -> Optional[Tuple[Decimal, Decimal, Decimal]]:
    """Cramer's rule for a 3x3 system given as rows (a, b, c, rhs)."""
    def det(m):
        return (
            m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
            - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
            + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
        )

    A = [r[:3] for r in rows]
    rhs = [r[3] for r in rows]
    D = det(A)
    big = max(abs(x) for row in A for x in row)
    if abs(D) <= tol * max(Decimal(1), big ** 3):
        return None
    out = []
    for col in range(3):
        M = [list(row) for row in A]
        for i in range(3):
            M[i][col] = rhs[i]
        out.append(det(M) / D)
    return out[0], out[1], out[2]
