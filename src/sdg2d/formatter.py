from __future__ import annotations

import json
from typing import Iterable, List, TextIO

from .datastructures import AT_INFINITY, DualEdge, Endpoint, Line, ParabolicArc, Ray, Segment


def _num(value: float, precision: int) -> str:
    return "%.*g" % (precision, value)


def _nums(values, precision: int) -> str:
    return " ".join(_num(float(v), precision) for v in values)


def format_site(site: Endpoint, precision: int = 10) -> str:
    if site is AT_INFINITY:
        return "inf"
    if site.is_point:
        return "p " + _nums(site.point.as_float(), precision)
    return "s " + _nums(site.p1.as_float() + site.p2.as_float(), precision)


def primitive_values(edge: DualEdge) -> List[float]:
    """Numbers of the text record, in order."""
    prim = edge.primitive
    if isinstance(prim, Line):
        return [prim.a, prim.b, prim.c]
    if isinstance(prim, Segment):
        return list(prim.source) + list(prim.target)
    if isinstance(prim, Ray):
        second = (prim.source[0] + prim.direction[0], prim.source[1] + prim.direction[1])
        return list(prim.source) + list(second)
    if isinstance(prim, ParabolicArc):
        return list(prim.source) + list(prim.target) + list(prim.focus) + list(prim.directrix)
    raise TypeError(f"unknown primitive {type(prim).__name__}")


_TAGS = {Line: "l", Segment: "s", Ray: "r", ParabolicArc: "p"}


def format_dual_edge(edge: DualEdge, precision: int = 10, with_sites: bool = False) -> str:
    text = _TAGS[type(edge.primitive)] + " " + _nums(primitive_values(edge), precision)
    if with_sites:
        text += " | " + " ; ".join(format_site(s, precision) for s in edge.sites)
    return text


def _site_json(site: Endpoint):
    if site is AT_INFINITY:
        return None
    if site.is_point:
        return {"type": "point", "coords": list(site.point.as_float())}
    return {"type": "segment", "coords": [list(site.p1.as_float()), list(site.p2.as_float())]}


def dual_edge_to_dict(edge: DualEdge, with_sites: bool = True) -> dict:
    prim = edge.primitive
    out = {"kind": edge.kind.value}
    if isinstance(prim, Line):
        out.update(a=prim.a, b=prim.b, c=prim.c)
    elif isinstance(prim, Ray):
        out.update(source=list(prim.source), direction=list(prim.direction))
    elif isinstance(prim, Segment):
        out.update(source=list(prim.source), target=list(prim.target))
    else:
        out.update(
            source=list(prim.source),
            target=list(prim.target),
            focus=list(prim.focus),
            directrix=list(prim.directrix),
            t_source=prim.t_source,
            t_target=prim.t_target,
        )
    if with_sites:
        out["sites"] = [_site_json(s) for s in edge.sites]
    return out


def write_dual_edges(
    edges: Iterable[DualEdge],
    stream: TextIO,
    fmt: str = "text",
    precision: int = 10,
    with_sites: bool = False,
) -> int:
    """Write edges to stream and return how many were written."""
    if fmt == "text":
        n = 0
        for edge in edges:
            stream.write(format_dual_edge(edge, precision, with_sites) + "\n")
            n += 1
        return n
    if fmt == "json":
        records = [dual_edge_to_dict(e, with_sites) for e in edges]
        json.dump(records, stream, indent=2)
        stream.write("\n")
        return len(records)
    raise ValueError(f"unknown output format {fmt!r}")
