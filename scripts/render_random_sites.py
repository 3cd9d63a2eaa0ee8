import argparse

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from src.sdg2d.formatter import write_dual_edges
from src.sdg2d.sampling import sample_sites_in_polygon
from src.sdg2d.visualize import plot_segment_voronoi
from src.sdg2d.voronoi import compute_segment_voronoi_2d


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Plot the Voronoi diagram of random sites")
    parser.add_argument("output", help="PNG path")
    parser.add_argument("--points", type=int, default=20)
    parser.add_argument("--segments", type=int, default=6)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--edges", help="Also write the edges in text format here")
    args = parser.parse_args()

    square = np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float64)
    sites = sample_sites_in_polygon(
        square, n_points=args.points, n_segments=args.segments, rng=np.random.default_rng(args.seed)
    )
    diagram = compute_segment_voronoi_2d(sites)

    ax = plot_segment_voronoi(diagram)
    ax.figure.savefig(args.output, dpi=150)
    plt.close(ax.figure)

    if args.edges:
        with open(args.edges, "w", encoding="utf-8") as fout:
            write_dual_edges(diagram.edges, fout, with_sites=True)
