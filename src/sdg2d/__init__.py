from .config import KernelConfig, get_kernel_config, set_kernel_config
from .datastructures import (
    AT_INFINITY,
    DualEdge,
    FiniteVertex,
    InfiniteVertex,
    Line,
    ParabolicArc,
    PrimitiveKind,
    Ray,
    Segment,
    SegmentVoronoiDiagram2D,
)
from .errors import (
    DegenerateInputError,
    InvalidTriangulationError,
    SDGError,
    SiteFormatError,
    UnsupportedConfigurationError,
)
from .formatter import format_dual_edge, write_dual_edges
from .reader import parse_sites, read_sites
from .sampling import sample_sites_in_polygon
from .sites import Point, PointSite, SegmentSite, point_site, segment_site
from .voronoi import SegmentDelaunayGraph2D, compute_segment_voronoi_2d
