"""
Command line entry point: python -m mandelbrot_explorer
"""

import logging
from argparse import ArgumentParser

from .app import run
from .config import ConfigError, ExplorerConfig, load_settings
from .logging_config import setup_logging


def build_parser():
    parser = ArgumentParser(prog="mandelbrot-explorer",
                            description="Interactive Mandelbrot set explorer")

    parser.add_argument('--width', type=int, dest='grid_width', metavar='WIDTH',
                        help='width of the pixel grid (default 600)')
    parser.add_argument('--height', type=int, dest='grid_height', metavar='HEIGHT',
                        help='height of the pixel grid (default 600)')
    parser.add_argument('--workers', type=int, dest='worker_count', metavar='N',
                        help='worker threads per recompute (default: number of CPUs)')
    parser.add_argument('--center-x', type=float, dest='center_x', metavar='X',
                        help='real part of the initial view center (default -0.5)')
    parser.add_argument('--center-y', type=float, dest='center_y', metavar='Y',
                        help='imaginary part of the initial view center (default 0)')
    parser.add_argument('--extent', type=float, dest='initial_extent', metavar='EXTENT',
                        help='width of the initial view in the complex plane (default 2.5)')
    parser.add_argument('--max-iterations', type=int, dest='initial_iteration_limit',
                        metavar='N', help='initial iteration limit (default 250)')
    parser.add_argument('--max-extent', type=float, dest='max_extent', metavar='EXTENT',
                        help='largest extent zooming out may reach (default 4x --extent)')
    parser.add_argument('--no-max-extent', action='store_true',
                        help='allow zooming out without limit')
    parser.add_argument('--saturation', type=float, metavar='S',
                        help='color saturation in [0, 1] (default 0.8)')
    parser.add_argument('--fps', type=int, metavar='FPS',
                        help='frame rate cap (default 60)')
    parser.add_argument('--settings', type=str, metavar='PATH',
                        help='JSON file with settings; command line options take precedence')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable debug logging')
    return parser


def config_from_args(args):
    """Build an ExplorerConfig from parsed arguments."""
    config = load_settings(args.settings) if args.settings else ExplorerConfig()

    origin = None
    if args.center_x is not None or args.center_y is not None:
        x = args.center_x if args.center_x is not None else config.initial_origin.real
        y = args.center_y if args.center_y is not None else config.initial_origin.imag
        origin = complex(x, y)

    config = config.with_overrides(
        grid_width=args.grid_width,
        grid_height=args.grid_height,
        worker_count=args.worker_count,
        initial_origin=origin,
        initial_extent=args.initial_extent,
        initial_iteration_limit=args.initial_iteration_limit,
        max_extent=args.max_extent,
        saturation=args.saturation,
        fps=args.fps,
    )
    if args.no_max_extent:
        config = config.without_max_extent()
    return config


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        parser.error(str(e))

    logger = setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger.info("Starting explorer at %s, extent %g, %d iterations",
                config.initial_origin, config.initial_extent,
                config.initial_iteration_limit)
    run(config)


if __name__ == "__main__":
    main()
