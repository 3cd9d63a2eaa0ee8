from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .builder import Builder
from .config import KernelConfig, get_kernel_config
from .datastructures import FiniteVertex, SegmentVoronoiDiagram2D
from .dual import DualExtractor
from .kernel import Kernel
from .sites import Site
from .triangulation import Triangulation
from .validator import Validator

logger = logging.getLogger(__name__)


class SegmentDelaunayGraph2D:
    """
    Segment Delaunay graph of point and segment sites, built incrementally.

    Sites are inserted one at a time. A failed insertion raises and leaves
    the graph as it was. The Voronoi diagram is read back through
    dual_edges(), which can be iterated any number of times.
    """

    def __init__(self, config: Optional[KernelConfig] = None):
        self.config = config if config is not None else get_kernel_config()
        self.kernel = Kernel(self.config)
        self.tds = Triangulation()
        self.builder = Builder(self.tds, self.kernel)
        self.validator = Validator(self.tds, self.builder)
        self._dual = DualExtractor(self.tds, self.builder)

    # -- construction ---------------------------------------------------------

    def insert(self, site: Site) -> FiniteVertex:
        return self.builder.insert(site)

    def insert_many(self, sites: Iterable[Site], skip_degenerate: bool = False) -> List[FiniteVertex]:
        return self.builder.insert_many(sites, skip_degenerate=skip_degenerate)

    # -- checks ---------------------------------------------------------------

    def validate(self, strictness: Optional[int] = None) -> bool:
        if strictness is None:
            strictness = self.config.validate_strictness
        return self.validator.validate(strictness)

    def is_valid(self, strictness: Optional[int] = None) -> bool:
        if strictness is None:
            strictness = self.config.validate_strictness
        return self.validator.is_valid(strictness)

    # -- queries --------------------------------------------------------------

    def dual_edges(self) -> DualExtractor:
        return self._dual

    def finite_edges(self):
        return self.tds.finite_edges()

    def sites(self) -> List[Site]:
        return [v.site for v in self.tds.finite_vertices()]

    def number_of_vertices(self) -> int:
        return self.tds.number_of_vertices()

    def number_of_faces(self) -> int:
        return self.tds.number_of_faces()

    def number_of_edges(self) -> int:
        return self.tds.number_of_edges()

    def number_of_finite_edges(self) -> int:
        return len(self._dual)

    @property
    def dimension(self) -> int:
        return self.tds.dimension

    def diagram(self) -> SegmentVoronoiDiagram2D:
        return SegmentVoronoiDiagram2D(sites=self.sites(), edges=list(self._dual))

    def __len__(self) -> int:
        return self.number_of_vertices()

    def __iter__(self):
        return iter(self._dual)


def compute_segment_voronoi_2d(
    sites: Iterable[Site],
    *,
    config: Optional[KernelConfig] = None,
    skip_degenerate: bool = False,
    validate: bool = True,
) -> SegmentVoronoiDiagram2D:
    """
    Build the segment Delaunay graph of the given sites and return its
    Voronoi diagram as classified dual edges.
    """
    sdg = SegmentDelaunayGraph2D(config)
    sdg.insert_many(sites, skip_degenerate=skip_degenerate)
    if validate:
        sdg.validate()
    diagram = sdg.diagram()
    logger.debug("%d sites, %d Voronoi edges %s", len(diagram.sites), len(diagram.edges), diagram.counts())
    return diagram
