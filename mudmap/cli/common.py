"""Shared options and setup for MudMap subcommands"""

from __future__ import annotations
from typing import List, Tuple
from pathlib import Path
import logging
from argparse import ArgumentParser, Namespace

from ..io import read_layers
from ..layout import Layer

logger = logging.getLogger(__name__)


def add_common_arguments(parser: ArgumentParser) -> None:
    """
    Input/output options shared by all subcommands

    Args:
        parser: Subcommand parser
    """
    parser.add_argument('-i', '--input', required=True,
                        help='Layer file (.tsv, .csv or .xlsx)')
    parser.add_argument('-t', '--total-limit',
                        help='Total policy limit, commas allowed (default: value stored in the input file)')
    parser.add_argument('--prefix', default='tower',
                        help='Prefix for output files (default: tower)')
    parser.add_argument('--output-dir', default='.',
                        help='Output directory (default: current directory)')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging for troubleshooting')


def configure_logging(args: Namespace) -> None:
    """Configure root logging for a subcommand run"""
    debug = getattr(args, 'debug', False)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )

    # Silence very noisy third-party loggers (matplotlib font discovery etc.)
    for noisy in ("matplotlib", "matplotlib.font_manager", "PIL", "PIL.Image", "fontTools"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def load_tower(args: Namespace) -> Tuple[List[Layer], str]:
    """
    Load layers and total limit from the input file

    Returns:
        Tuple of (layers, total_limit)

    Raises:
        FileNotFoundError: If the input file does not exist
        ValueError: If no total limit is given on the command line or in the file
    """
    input_file = Path(args.input)
    if not input_file.exists():
        raise FileNotFoundError(f"Input file not found: {input_file}\n"
                                f"Expected a layer table (.tsv, .csv or .xlsx)")

    layers, total_limit = read_layers(input_file, total_limit=args.total_limit)
    if total_limit is None or str(total_limit).strip() == '':
        raise ValueError(f"No total policy limit: pass --total-limit or add a "
                         f"'# total_limit=' line to {input_file}")

    logger.info(f"Input: {input_file}")
    logger.info(f"Loaded {len(layers)} layers, total limit {total_limit}")
    return layers, str(total_limit)


def output_dir(args: Namespace) -> Path:
    """Create and return the output directory"""
    path = Path(args.output_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path
