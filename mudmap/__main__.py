"""
MudMap CLI

Command-line interface with subcommands for layout, plotting and export.
"""

import argparse
import sys
from .cli import layout, plot, export


def main():
    parser = argparse.ArgumentParser(
        prog='mudmap',
        description='MudMap: Insurance tower layout and visualization'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Add subcommand parsers
    layout.add_parser(subparsers)
    plot.add_parser(subparsers)
    export.add_parser(subparsers)

    # Parse arguments
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Execute the appropriate subcommand
    if args.command == 'layout':
        layout.run(args)
    elif args.command == 'plot':
        plot.run(args)
    elif args.command == 'export':
        export.run(args)


if __name__ == "__main__":
    main()
