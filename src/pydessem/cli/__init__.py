"""
pydessem command-line interface.

Usage:
    pydessem hidr FILE [options]      Summarise a HIDR.DAT plant registry
    pydessem cascade FILE [options]   Print river-basin cascades
"""

from __future__ import annotations

import argparse


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pydessem",
        description="Python tools for DESSEM hydroelectric plant registries.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Register subcommands
    from pydessem.cli.cascade import add_cascade_parser
    from pydessem.cli.hidr import add_hidr_parser

    add_hidr_parser(subparsers)
    add_cascade_parser(subparsers)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    # Dispatch to the subcommand handler
    result: int = args.func(args)
    return result


__all__ = ["main"]
