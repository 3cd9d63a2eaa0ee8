import argparse
import logging
import sys
from typing import Optional, Sequence

from .config import get_kernel_config
from .errors import DegenerateInputError, InvalidTriangulationError, SiteFormatError, UnsupportedConfigurationError
from .formatter import format_site, write_dual_edges
from .reader import read_sites
from .voronoi import SegmentDelaunayGraph2D

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 2
EXIT_INVALID = 3


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = get_kernel_config()
    parser = argparse.ArgumentParser(description="Voronoi diagram of point and segment sites")
    parser.add_argument("path", help="Site file: 'p x y' and 's x1 y1 x2 y2' records")
    parser.add_argument("--output", "-o", help="Write the edges here instead of stdout")
    parser.add_argument("--format", choices=["text", "json"], default="text")
    parser.add_argument(
        "--with-sites",
        action="store_true",
        help="Append the four defining sites of every edge",
    )
    parser.add_argument(
        "--precision",
        type=int,
        default=config.output_precision,
        help=f"Significant digits of the text output (default: {config.output_precision})",
    )
    parser.add_argument(
        "--strictness",
        type=int,
        choices=[0, 1, 2],
        default=config.validate_strictness,
        help=f"Validation level run after construction (default: {config.validate_strictness})",
    )
    parser.add_argument(
        "--skip-degenerate",
        action="store_true",
        help="Skip degenerate sites with a warning instead of aborting",
    )
    parser.add_argument("--plot", help="Save a plot of sites and Voronoi edges to this PNG")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        sites = read_sites(args.path)
    except (OSError, SiteFormatError) as e:
        print(f"error: {args.path}: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    sdg = SegmentDelaunayGraph2D(config)
    try:
        sdg.insert_many(sites, skip_degenerate=args.skip_degenerate)
    except DegenerateInputError as e:
        site = format_site(e.site) if e.site is not None else "?"
        print(f"error: cannot insert site '{site}': {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except (InvalidTriangulationError, UnsupportedConfigurationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID
    logger.info("inserted %d sites, %d faces", sdg.number_of_vertices(), sdg.number_of_faces())

    try:
        sdg.validate(args.strictness)
        edges = list(sdg.dual_edges())
    except (InvalidTriangulationError, UnsupportedConfigurationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    if args.output:
        with open(args.output, "w", encoding="utf-8") as fout:
            n = write_dual_edges(edges, fout, args.format, args.precision, args.with_sites)
    else:
        n = write_dual_edges(edges, sys.stdout, args.format, args.precision, args.with_sites)
    logger.info("wrote %d Voronoi edges", n)

    if args.plot:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from .visualize import plot_segment_voronoi

        ax = plot_segment_voronoi(sdg.diagram())
        ax.figure.savefig(args.plot, dpi=150)
        plt.close(ax.figure)
        logger.info("saved plot to %s", args.plot)

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
