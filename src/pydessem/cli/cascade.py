"""
``pydessem cascade`` subcommand.

Prints every river basin of a plant registry as a tree, from the sink
(the most downstream plant) up to the headwater plants.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from pydessem.cli._loader import configure_logging, load_registry
from pydessem.components.cascade import CascadeGraph


def add_cascade_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    """Register the ``cascade`` subcommand."""
    p = subparsers.add_parser(
        "cascade",
        help="Print river-basin cascades of a HIDR.DAT registry.",
    )
    p.add_argument("file", type=Path, help="Path to the HIDR.DAT file")
    p.add_argument(
        "--sink",
        type=int,
        default=None,
        help="Only print the basin draining into this plant number",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    p.set_defaults(func=run_cascade)


def format_basin(graph: CascadeGraph, sink: int) -> list[str]:
    """Render the basin of *sink* as tree lines, upstream plants sorted by name."""
    lines: list[str] = []
    visited: set[int] = set()

    def walk(num: int, prefix: str, is_last: bool) -> None:
        connector = "└─" if is_last else "├─"
        if num in visited:
            lines.append(f"{prefix}{connector} [cycle at {num}]")
            return
        visited.add(num)

        plant = graph.plants[num]
        name = plant.name or "[unnamed]"
        capacity = plant.installed_capacity or 0.0
        lines.append(f"{prefix}{connector} {name} (#{num}) [{capacity:.1f} MW]")

        parents = sorted(graph.upstream_of(num), key=lambda n: graph.plants[n].name)
        extension = "   " if is_last else "│  "
        for i, parent in enumerate(parents):
            walk(parent, prefix + extension, i == len(parents) - 1)

    walk(sink, "", True)
    return lines


def run_cascade(args: argparse.Namespace) -> int:
    """Run the ``cascade`` subcommand."""
    configure_logging(args.debug)

    registry = load_registry(args.file)
    if registry is None:
        return 1

    graph = registry.cascade
    if args.sink is not None:
        if args.sink not in graph:
            print(f"ERROR: Plant {args.sink} not found")
            return 1
        sinks = [args.sink]
    else:
        sinks = sorted(graph.sinks(), key=lambda n: graph.plants[n].name)

    print(f"Found {len(sinks)} cascade sink(s) in {args.file}\n")
    for sink in sinks:
        for line in format_basin(graph, sink):
            print(line)
        print()

    cycles = graph.find_cycles()
    if cycles:
        print(f"WARNING: {len(cycles)} cycle(s) detected:")
        for cycle in cycles:
            print("  " + " -> ".join(str(n) for n in [*cycle, cycle[0]]))
    return 0
