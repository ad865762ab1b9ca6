"""Layout subcommand - compute placements"""

from __future__ import annotations
import logging
from argparse import ArgumentParser, Namespace, _SubParsersAction

from ..layout import LayoutEngine
from ..io import write_layout, write_summary, write_intermediate
from .common import add_common_arguments, configure_logging, load_tower, output_dir

logger = logging.getLogger(__name__)


def add_parser(subparsers: _SubParsersAction) -> ArgumentParser:
    """
    Add layout subcommand parser

    Args:
        subparsers: Subparser action from main argument parser

    Returns:
        Configured ArgumentParser for layout subcommand
    """
    parser = subparsers.add_parser(
        'layout',
        help='Compute layer placements and write a tower summary'
    )
    add_common_arguments(parser)
    parser.add_argument('--save-layers', action='store_true',
                        help='Also save the normalized layer table (.mudmap_layers.tsv)')

    return parser  # type: ignore[no-any-return]


def run(args: Namespace) -> None:
    """
    Execute layout subcommand

    Args:
        args: Parsed command-line arguments from argparse
    """
    configure_logging(args)
    logger.info("=== MudMap: Layer Layout ===")

    layers, total_limit = load_tower(args)
    out = output_dir(args)

    layout_file = out / f"{args.prefix}.mudmap_layout.tsv"
    summary_file = out / f"{args.prefix}.mudmap_summary.txt"

    layout = LayoutEngine().calculate_layout(layers, total_limit)

    write_layout(layout, layout_file)
    write_summary(layout, summary_file, layers)
    logger.info(f"Placements: {layout_file}")
    logger.info(f"Summary: {summary_file}")

    if args.save_layers:
        layers_file = out / f"{args.prefix}.mudmap_layers.tsv"
        write_intermediate(layers, layers_file, total_limit)
        logger.info(f"Layers: {layers_file}")
