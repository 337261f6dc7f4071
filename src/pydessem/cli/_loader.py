"""Shared helpers for CLI subcommands."""

from __future__ import annotations

import logging
from pathlib import Path

from pydessem.components.registry import PlantRegistry
from pydessem.core.exceptions import PyDessemError
from pydessem.io.registry import default_registry, parse_file

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_registry(filepath: Path) -> PlantRegistry | None:
    """
    Load a registry for a CLI command, printing errors instead of raising.

    Files not named HIDR.DAT are still read as plant registries.
    """
    registry = default_registry()
    if registry.get_parser(filepath) is None:
        registry = registry.with_parser(filepath.name, registry["HIDR.DAT"])

    try:
        result: PlantRegistry = parse_file(filepath, registry)
    except FileNotFoundError:
        print(f"ERROR: File not found: {filepath}")
        return None
    except PyDessemError as exc:
        logger.debug("Failed to read %s", filepath, exc_info=True)
        print(f"ERROR: Failed to read registry: {exc}")
        return None
    return result
