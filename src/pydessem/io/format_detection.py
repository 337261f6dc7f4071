"""
Binary/text detection for HIDR.DAT files.

The binary layout has no magic header, so detection is a heuristic:
the file size must sit near a multiple of the record size, and the
4 bytes at the plant-identifier offset must decode (little-endian int32)
to a plausible plant number. In the text layout those bytes are part
of the first line (letters or space padding), which never decodes to a
small positive integer.
"""

from __future__ import annotations

import logging
import struct
from enum import Enum
from pathlib import Path

from pydessem.io.config import DEFAULT_BINARY_LAYOUT, BinaryLayout

logger = logging.getLogger(__name__)


class FileFormat(Enum):
    """On-disk representation of a registry file."""

    BINARY = "binary"
    TEXT = "text"


def is_binary(filepath: Path | str, layout: BinaryLayout = DEFAULT_BINARY_LAYOUT) -> bool:
    """
    Decide whether *filepath* holds binary fixed-size records.

    Args:
        filepath: Candidate registry file
        layout: Record size, probe offset, tolerance and id range

    Returns:
        True if the file looks like binary records, False for text

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(filepath)
    size = path.stat().st_size

    if size < layout.record_size:
        return False
    if not layout.near_record_boundary(size):
        return False

    with open(path, "rb") as f:
        f.seek(layout.probe_offset)
        probe = f.read(4)
    if len(probe) < 4:
        return False

    value: int = struct.unpack(f"{layout.endian}i", probe)[0]
    return layout.id_min <= value <= layout.id_max


def detect_format(filepath: Path | str, layout: BinaryLayout = DEFAULT_BINARY_LAYOUT) -> FileFormat:
    """Return the :class:`FileFormat` of *filepath*."""
    fmt = FileFormat.BINARY if is_binary(filepath, layout) else FileFormat.TEXT
    logger.debug("Detected %s format for %s", fmt.value, filepath)
    return fmt
