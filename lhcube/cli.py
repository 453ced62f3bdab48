import argparse
import contextlib
import sys
from typing import List, Optional

from lhcube.config import build_config, load_config
from lhcube.errors import ConfigurationError, GenerationError
from lhcube.formatting import format_table, write_table
from lhcube.generator import generate
from lhcube.internals.logging import logger
from lhcube.internals.random import PERMUTATION_METHODS
from lhcube.plotting import plot_samples
from lhcube.utils import summary

__all__ = ['main', 'build_parser']

EXIT_GENERATION_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lhcube',
        description='Generate a Latin Hypercube sample and write it as comma separated text'
    )
    parser.add_argument('points', type=int, nargs='?', default=None,
                        help='Number of points, also the number of strata per dimension')
    parser.add_argument('dimensions', type=int, nargs='?', default=None,
                        help='Number of dimensions')
    parser.add_argument('--scale', type=str, default=None,
                        help="Bounds of every dimension as 'lower:upper' (default: 0:points)")
    parser.add_argument('--override', type=str, action='append', default=None, metavar='INDEX:LOWER:UPPER',
                        help='Bounds of a single dimension, may be repeated')
    parser.add_argument('--jitter', type=str, default=None,
                        help="'true' or '1', 'false' or '0' (default), or comma separated dimension indices to jitter "
                             "(a single index needs a trailing comma, e.g. '2,')")
    parser.add_argument('--headings', type=str, default=None,
                        help='Comma separated column headings (default: dim0,dim1,...)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (default: seeded from the clock)')
    parser.add_argument('--method', type=str, default=None, choices=PERMUTATION_METHODS,
                        help='Permutation method (default: shuffle)')
    parser.add_argument('--config', type=str, default=None,
                        help='TOML file with a [lhcube] table, command line options take precedence')
    parser.add_argument('-o', '--output', type=str, default=None,
                        help='Output file (default: standard output)')
    parser.add_argument('--summary', action='store_true',
                        help='Print per-dimension statistics to standard error')
    parser.add_argument('--plot', type=str, default=None,
                        help='Save a diagnostic plot to this file')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.config is not None:
            config = load_config(args.config,
                                 point_count=args.points,
                                 dimension_count=args.dimensions,
                                 scale=args.scale,
                                 overrides=args.override,
                                 jitter=args.jitter,
                                 headings=args.headings,
                                 seed=args.seed,
                                 permutation_method=args.method,
                                 output=args.output)
        else:
            if args.points is None or args.dimensions is None:
                parser.error("points and dimensions are required without --config")
            config = build_config(point_count=args.points,
                                  dimension_count=args.dimensions,
                                  scale=args.scale,
                                  overrides=args.override or (),
                                  jitter=args.jitter if args.jitter is not None else False,
                                  headings=args.headings,
                                  seed=args.seed,
                                  permutation_method=args.method or 'shuffle',
                                  output=args.output)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIGURATION_ERROR

    try:
        sample = generate(config)
    except GenerationError as e:
        logger.error(f"Generation failed: {e}")
        return EXIT_GENERATION_ERROR

    if config.output is not None:
        try:
            write_table(config.output, sample)
        except OSError as e:
            logger.error(f"Failed to write {config.output}: {e}")
            return EXIT_GENERATION_ERROR
    else:
        sys.stdout.write(format_table(sample.points, sample.headings, sample.precisions).getvalue())

    if args.summary:
        with contextlib.redirect_stdout(sys.stderr):
            summary(sample)
    if args.plot is not None:
        plot_samples(sample, save_name=args.plot, show=False)
    return 0
