"""
Site reader for the point/segment text format.

    p x y             point
    s x1 y1 x2 y2     segment
    x y               point (bare)
    x1 y1 x2 y2       segment (bare)

Blank lines and everything after '#' are ignored.
"""

from __future__ import annotations

import logging
from decimal import InvalidOperation
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from .errors import SiteFormatError
from .sites import Point, PointSite, SegmentSite, Site

logger = logging.getLogger(__name__)


def _coords(tokens: List[str], line_no: int) -> List[Point]:
    try:
        values = [Point(tokens[k], tokens[k + 1]) for k in range(0, len(tokens), 2)]
    except (ValueError, ZeroDivisionError, InvalidOperation) as e:
        raise SiteFormatError(f"bad coordinate in {' '.join(tokens)!r}: {e}", line_no) from None
    return values


def parse_line(line: str, line_no: int = None) -> Union[Site, None]:
    body = line.split("#", 1)[0].strip()
    if not body:
        return None
    tokens = body.split()
    tag = tokens[0].lower()
    if tag in ("p", "s"):
        tokens = tokens[1:]
        expected = 2 if tag == "p" else 4
        if len(tokens) != expected:
            raise SiteFormatError(f"'{tag}' record needs {expected} numbers, got {len(tokens)}", line_no)
    elif len(tokens) not in (2, 4):
        raise SiteFormatError(f"expected 2 or 4 numbers, got {len(tokens)}", line_no)
    pts = _coords(tokens, line_no)
    if len(pts) == 1:
        return PointSite(pts[0])
    return SegmentSite(pts[0], pts[1])


def parse_sites(lines: Iterable[str]) -> Iterator[Site]:
    for n, line in enumerate(lines, start=1):
        site = parse_line(line, n)
        if site is not None:
            yield site


def read_sites(path) -> List[Site]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        sites = list(parse_sites(fh))
    logger.info("read %d sites from %s", len(sites), path)
    return sites
