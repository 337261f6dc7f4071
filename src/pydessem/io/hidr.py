"""
HIDR.DAT reader entry point.

:func:`read_hidr` detects whether a file uses the binary (792 bytes per
plant) or the block-structured text layout and decodes it into a
:class:`~pydessem.components.registry.PlantRegistry`. Only the text
layout carries unit sets, travel times, curves and evaporation.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydessem.components.registry import PlantRegistry
from pydessem.io.config import DEFAULT_BINARY_LAYOUT, DEFAULT_TEXT_LAYOUT, BinaryLayout, TextLayout
from pydessem.io.format_detection import FileFormat, detect_format
from pydessem.io.hidr_binary import decode_all
from pydessem.io.hidr_text import read_hidr_text

logger = logging.getLogger(__name__)


def read_hidr_binary(
    filepath: Path | str, layout: BinaryLayout = DEFAULT_BINARY_LAYOUT
) -> PlantRegistry:
    """Read a binary HIDR.DAT file; only ``plants`` is populated."""
    plants = decode_all(filepath, layout)
    logger.info("Read %d binary plant records from %s", len(plants), filepath)
    return PlantRegistry(plants=tuple(plants), source_format="binary", filepath=Path(filepath))


def read_hidr(
    filepath: Path | str,
    binary_layout: BinaryLayout = DEFAULT_BINARY_LAYOUT,
    text_layout: TextLayout = DEFAULT_TEXT_LAYOUT,
) -> PlantRegistry:
    """
    Read a HIDR.DAT file in either layout.

    Args:
        filepath: Path to the registry file
        binary_layout: Binary record constants (detection and decoding)
        text_layout: Text block conventions

    Returns:
        A freshly built PlantRegistry

    Raises:
        FileNotFoundError: If the file does not exist
        TruncatedRecordError: If a binary file is shorter than one record
        FieldFormatError: If a text data line does not parse

    Example:
        >>> registry = read_hidr("hidr.dat")
        >>> if not registry.has_auxiliary_data:
        ...     print("binary registry: plants only")
    """
    fmt = detect_format(filepath, binary_layout)
    logger.info("Detected %s HIDR format: %s", fmt.value, filepath)
    if fmt is FileFormat.BINARY:
        return read_hidr_binary(filepath, binary_layout)
    return read_hidr_text(filepath, text_layout)
