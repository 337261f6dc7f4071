"""
``pydessem hidr`` subcommand.

Reads a HIDR.DAT file in either layout and prints a summary of the
decoded registry, optionally writing an HDF5 snapshot.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pydessem.cli._loader import configure_logging, load_registry
from pydessem.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def add_hidr_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    """Register the ``hidr`` subcommand."""
    p = subparsers.add_parser(
        "hidr",
        help="Summarise a HIDR.DAT plant registry.",
        description="Decode a binary or text HIDR.DAT file and print a summary.",
    )
    p.add_argument("file", type=Path, help="Path to the HIDR.DAT file")
    p.add_argument(
        "--plants",
        action="store_true",
        help="Print one row per plant",
    )
    p.add_argument(
        "--validate",
        action="store_true",
        help="Report duplicate plant numbers, dangling references and cycles",
    )
    p.add_argument(
        "--hdf5",
        type=Path,
        metavar="FILE",
        default=None,
        help="Write an HDF5 snapshot of the registry to FILE",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    p.set_defaults(func=run_hidr)


def run_hidr(args: argparse.Namespace) -> int:
    """Run the ``hidr`` subcommand."""
    configure_logging(args.debug)

    registry = load_registry(args.file)
    if registry is None:
        return 1

    print(f"Registry: {args.file}")
    for key, value in registry.summary().items():
        print(f"  {key:<18} {value}")

    if args.plants:
        frame = registry.plants_dataframe()
        columns = [
            "plant_num",
            "name",
            "subsystem",
            "downstream_plant",
            "min_volume",
            "max_volume",
            "installed_capacity",
        ]
        print()
        print(frame[frame["plant_num"] > 0][columns].to_string(index=False))

    status = 0
    if args.validate:
        try:
            registry.validate()
            print("\nValidation: OK")
        except ValidationError as exc:
            print(f"\nValidation: {exc}")
            for error in exc.errors:
                print(f"  - {error}")
            status = 1

    if args.hdf5 is not None:
        from pydessem.io.hdf5 import write_registry_hdf5

        write_registry_hdf5(args.hdf5, registry)
        print(f"\nSnapshot written: {args.hdf5}")

    return status
