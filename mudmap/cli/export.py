"""Export subcommand - workbook and image bundle"""

from __future__ import annotations
import logging
from argparse import ArgumentParser, Namespace, _SubParsersAction

from ..config import PlotConfig, PRESET_NAMES
from ..io import ExportPackager
from .common import add_common_arguments, configure_logging, load_tower, output_dir

logger = logging.getLogger(__name__)


def add_parser(subparsers: _SubParsersAction) -> ArgumentParser:
    """
    Add export subcommand parser

    Args:
        subparsers: Subparser action from main argument parser

    Returns:
        Configured ArgumentParser for export subcommand
    """
    parser = subparsers.add_parser(
        'export',
        help='Export layers (.xlsx) and diagram (.png) as one ZIP archive'
    )
    add_common_arguments(parser)
    parser.add_argument('--preset', choices=PRESET_NAMES, default='default',
                        help='Plot style preset for the packed image (default: default)')
    parser.add_argument('--title', help='Plot title')

    return parser  # type: ignore[no-any-return]


def run(args: Namespace) -> None:
    """
    Execute export subcommand

    Args:
        args: Parsed command-line arguments from argparse
    """
    configure_logging(args)
    logger.info("=== MudMap: Export ===")

    layers, total_limit = load_tower(args)
    config = PlotConfig.preset(args.preset)
    archive = output_dir(args) / f"{args.prefix}.{config.export.archive_name}"

    ExportPackager(config).write(layers, total_limit, archive, title=args.title)

    logger.info(f"Export bundle: {archive}")
