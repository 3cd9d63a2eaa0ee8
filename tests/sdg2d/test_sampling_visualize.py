import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest
from shapely.geometry import LineString, Point, Polygon

from src.sdg2d.config import KernelConfig, get_kernel_config, set_kernel_config
from src.sdg2d.sampling import sample_sites_in_polygon
from src.sdg2d.visualize import plot_segment_voronoi, sites_bbox
from src.sdg2d.voronoi import compute_segment_voronoi_2d

SQUARE = np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float64)


def test_sampled_sites_do_not_interfere():
    rng = np.random.default_rng(5)
    sites = sample_sites_in_polygon(SQUARE, n_points=10, n_segments=4, rng=rng)
    assert sum(s.is_segment for s in sites) == 4
    assert sum(s.is_point for s in sites) == 10
    geoms = [
        LineString([s.p1.as_float(), s.p2.as_float()]) if s.is_segment else Point(s.point.as_float())
        for s in sites
    ]
    for i, g in enumerate(geoms):
        for h in geoms[i + 1:]:
            assert g.distance(h) >= 1e-3


def test_sampling_is_deterministic_with_seed():
    a = sample_sites_in_polygon(SQUARE, n_points=5, n_segments=2, rng=np.random.default_rng(999))
    b = sample_sites_in_polygon(SQUARE, n_points=5, n_segments=2, rng=np.random.default_rng(999))
    assert a == b


@pytest.mark.parametrize("seed", [1, 2])
def test_sampled_sites_validate_globally(seed):
    sites = sample_sites_in_polygon(SQUARE, n_points=6, n_segments=3, rng=np.random.default_rng(seed))
    d = compute_segment_voronoi_2d(sites, config=KernelConfig(validate_strictness=2))
    assert len(d.sites) == 6 + 3 * 3
    assert d.edges


def test_plot_segment_voronoi():
    d = compute_segment_voronoi_2d(
        sample_sites_in_polygon(SQUARE, n_points=4, n_segments=2, rng=np.random.default_rng(3))
    )
    ax = plot_segment_voronoi(d)
    assert ax.get_title() == "Segment Voronoi 2D"
    assert len(ax.lines) >= len(d.sites)
    minx, miny, maxx, maxy = sites_bbox(d.sites)
    for s in d.sites:
        for x, y in (p.as_float() for p in s.support_points):
            assert minx < x < maxx and miny < y < maxy
    plt.close(ax.figure)


def test_kernel_config_roundtrip_and_validation():
    old = get_kernel_config()
    try:
        set_kernel_config(KernelConfig(output_precision=6))
        assert get_kernel_config().output_precision == 6
        cfg = get_kernel_config()
        cfg.output_precision = 2
        assert get_kernel_config().output_precision == 6
    finally:
        set_kernel_config(old)
    with pytest.raises(ValueError):
        KernelConfig(decimal_precision=10)
    with pytest.raises(ValueError):
        KernelConfig(zero_tolerance="-1")
    with pytest.raises(ValueError):
        KernelConfig(zero_tolerance="1e-5")
    with pytest.raises(ValueError):
        KernelConfig(validate_strictness=4)
