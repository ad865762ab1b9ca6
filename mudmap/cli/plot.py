"""Plot subcommand - visualization"""

from __future__ import annotations
from typing import Optional, Tuple
import logging
from argparse import ArgumentParser, Namespace, _SubParsersAction

from ..config import PlotConfig, PRESET_NAMES
from ..visualizer import TowerPlotter
from .common import add_common_arguments, configure_logging, load_tower, output_dir

logger = logging.getLogger(__name__)


def add_parser(subparsers: _SubParsersAction) -> ArgumentParser:
    """
    Add plot subcommand parser

    Args:
        subparsers: Subparser action from main argument parser

    Returns:
        Configured ArgumentParser for plot subcommand
    """
    parser = subparsers.add_parser(
        'plot',
        help='Render the tower diagram as PNG'
    )
    add_common_arguments(parser)

    # Optional
    parser.add_argument('--figsize', nargs=2, type=float,
                        help='Figure size (width height) in inches, default from preset')
    parser.add_argument('--preset', choices=PRESET_NAMES, default='default',
                        help='Plot style preset (default: default)')
    parser.add_argument('--title', help='Plot title')

    return parser  # type: ignore[no-any-return]


def run(args: Namespace) -> None:
    """
    Execute plot subcommand

    Args:
        args: Parsed command-line arguments from argparse
    """
    configure_logging(args)
    logger.info("=== MudMap: Tower Plot ===")

    layers, total_limit = load_tower(args)
    plot_file = output_dir(args) / f"{args.prefix}.mudmap.png"

    logger.info(f"Output: {plot_file}")
    logger.info(f"Preset: {args.preset}")

    config = PlotConfig.preset(args.preset)
    figsize: Optional[Tuple[float, float]] = tuple(args.figsize) if args.figsize else None  # type: ignore

    plotter = TowerPlotter(config)
    plotter.plot(
        layers,
        total_limit,
        output_file=str(plot_file),
        title=args.title,
        figsize=figsize
    )

    logger.info(f"Plot saved: {plot_file}")
