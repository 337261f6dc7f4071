"""
Layout configuration for HIDR.DAT decoding.

These dataclasses hold the constants that describe the binary record
layout and the text block conventions. Readers take a layout object so
tests can exercise alternative values without patching module globals.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BinaryLayout:
    """
    Constants of the fixed-size binary HIDR.DAT layout.

    Attributes:
        record_size: Bytes per plant record
        probe_offset: Offset of the plant identifier used by format detection
        size_tolerance: Allowed distance (bytes) from a record-size multiple
        id_min: Smallest plausible plant identifier
        id_max: Largest plausible plant identifier
        endian: Byte order ('<' = little-endian)
    """

    record_size: int = 792
    probe_offset: int = 12
    size_tolerance: int = 100
    id_min: int = 1
    id_max: int = 9999
    endian: str = "<"

    def n_records(self, file_size: int) -> int:
        """Number of complete records in a file of *file_size* bytes."""
        return file_size // self.record_size

    def near_record_boundary(self, file_size: int) -> bool:
        """Return True if *file_size* is within tolerance of a record multiple."""
        remainder = file_size % self.record_size
        return remainder <= self.size_tolerance or remainder >= (
            self.record_size - self.size_tolerance
        )


@dataclass(frozen=True)
class TextLayout:
    """
    Conventions of the block-structured text HIDR.DAT file.

    Attributes:
        terminator: Leading token that closes the current block
        comment_chars: Column-1 characters marking a comment line
    """

    terminator: str = "FIM"
    comment_chars: tuple[str, ...] = ("*", "&")

    def is_comment(self, line: str) -> bool:
        """Return True for blank lines and column-1 comment lines."""
        if not line or not line.strip():
            return True
        return line[0] in self.comment_chars


DEFAULT_BINARY_LAYOUT = BinaryLayout()
DEFAULT_TEXT_LAYOUT = TextLayout()
