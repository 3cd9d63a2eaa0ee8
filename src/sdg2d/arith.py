"""
Numeric plumbing for the decision path.

- Exact 2D vector helpers on Fraction tuples (rational predicates).
- Decimal conversion under a caller-provided context (square-root predicates).
- Sign sets of low-degree polynomials: {tau : q(tau) < 0} as open intervals.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from fractions import Fraction
from typing import List, Sequence, Tuple

Vec = Tuple[Fraction, Fraction]
DVec = Tuple[Decimal, Decimal]
Interval = Tuple[Decimal, Decimal]

INF = Decimal("Infinity")
NEG_INF = Decimal("-Infinity")


def sub(a, b):
    return (a[0] - b[0], a[1] - b[1])


def add(a, b):
    return (a[0] + b[0], a[1] + b[1])


def scale(a, k):
    return (a[0] * k, a[1] * k)


def dot(a, b):
    return a[0] * b[0] + a[1] * b[1]


def cross(a, b):
    return a[0] * b[1] - a[1] * b[0]


def rot90(a):
    return (-a[1], a[0])


def norm2(a):
    return a[0] * a[0] + a[1] * a[1]


def sign(v) -> int:
    return (v > 0) - (v < 0)


def to_decimal(value) -> Decimal:
    """Convert an exact Fraction (or int) into the current Decimal context."""
    if isinstance(value, Decimal):
        return +value
    if isinstance(value, Fraction):
        return Decimal(value.numerator) / Decimal(value.denominator)
    return +Decimal(value)


def dvec(p) -> DVec:
    return (to_decimal(p[0]), to_decimal(p[1]))


def dsqrt(value: Decimal) -> Decimal:
    if value <= 0:
        return Decimal(0)
    return value.sqrt()


def make_context(precision: int) -> decimal.Context:
    return decimal.Context(prec=precision, rounding=decimal.ROUND_HALF_EVEN, traps=[decimal.InvalidOperation, decimal.DivisionByZero])


def is_zero(value: Decimal, tol: Decimal, magnitude: Decimal = Decimal(1)) -> bool:
    return abs(value) <= tol * max(Decimal(1), abs(magnitude))


# ---------------------------------------------------------------------------
# polynomial sign sets

def _trim(coeffs: Sequence[Decimal], tol: Decimal) -> List[Decimal]:
    """Drop leading coefficients that are negligible relative to the largest one."""
    cs = list(coeffs)
    big = max((abs(c) for c in cs), default=Decimal(0))
    if big == 0:
        return [Decimal(0)]
    while len(cs) > 1 and abs(cs[-1]) <= tol * big:
        cs.pop()
    return cs


def negative_set(coeffs: Sequence[Decimal], tol: Decimal) -> List[Interval]:
    """
    Open intervals where c0 + c1*t + c2*t^2 < 0.

    Values within tolerance of zero count as zero, so a double root splits
    nothing and a tangent polynomial is treated as touching, not crossing.
    """
    cs = _trim(coeffs, tol)
    big = max(abs(c) for c in cs)
    if len(cs) == 1:
        return [(NEG_INF, INF)] if cs[0] < -tol * max(big, Decimal(1)) else []
    if len(cs) == 2:
        c0, c1 = cs
        root = -c0 / c1
        return [(NEG_INF, root)] if c1 > 0 else [(root, INF)]
    c0, c1, c2 = cs
    disc = c1 * c1 - 4 * c2 * c0
    if disc <= tol * max(c1 * c1, abs(4 * c2 * c0)):
        # no sign change
        return [(NEG_INF, INF)] if c2 < 0 else []
    s = disc.sqrt()
    # numerically stable roots
    if c1 >= 0:
        qq = -(c1 + s) / 2
    else:
        qq = -(c1 - s) / 2
    r1 = qq / c2
    r2 = c0 / qq if qq != 0 else r1
    lo, hi = (r1, r2) if r1 <= r2 else (r2, r1)
    if c2 > 0:
        return [(lo, hi)]
    return [(NEG_INF, lo), (hi, INF)]


def intersect_sets(a: List[Interval], b: List[Interval]) -> List[Interval]:
    out = []
    for lo1, hi1 in a:
        for lo2, hi2 in b:
            lo = max(lo1, lo2)
            hi = min(hi1, hi2)
            if lo < hi:
                out.append((lo, hi))
    out.sort()
    return out


def covers(intervals: List[Interval], lo: Decimal, hi: Decimal, tol: Decimal) -> bool:
    """True if the open range (lo, hi) lies inside one interval, up to tolerance."""
    for a, b in intervals:
        ok_lo = a == NEG_INF if lo == NEG_INF else a <= lo + tol * max(Decimal(1), abs(lo))
        ok_hi = b == INF if hi == INF else b >= hi - tol * max(Decimal(1), abs(hi))
        if ok_lo and ok_hi:
            return True
    return False


def meets(intervals: List[Interval], lo: Decimal, hi: Decimal, tol: Decimal) -> bool:
    """True if some interval overlaps the open range (lo, hi) by more than tolerance."""
    for a, b in intervals:
        x = max(a, lo)
        y = min(b, hi)
        if x == NEG_INF or y == INF:
            if x < y:
                return True
            continue
        if y - x > tol * max(Decimal(1), abs(x), abs(y)):
            return True
    return False
