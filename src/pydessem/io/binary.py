"""
Binary file I/O handlers for fixed-size record files.

This module provides classes for reading and writing headerless binary
files made of back-to-back records of one constant size:
- ``FixedRecordReader``: iterates complete records and reports any
  trailing partial chunk.
- ``FixedRecordWriter``: writes records, checking their size.

Neither class interprets record contents; see
:mod:`pydessem.io.hidr_binary` for the plant record layout.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from pydessem.core.exceptions import TruncatedRecordError


class FixedRecordReader:
    """
    Reader for headerless files of fixed-size records.

    Example:
        >>> with FixedRecordReader("hidr.dat", 792) as reader:
        ...     for chunk in reader.iter_records():
        ...         ...
    """

    def __init__(self, filepath: Path | str, record_size: int) -> None:
        """
        Initialize the reader.

        Args:
            filepath: Path to the binary file
            record_size: Bytes per record
        """
        if record_size <= 0:
            raise ValueError(f"record_size must be positive, got {record_size}")
        self.filepath = Path(filepath)
        self.record_size = record_size
        self._file: BinaryIO | None = None
        self._file_size = 0

    # -- context manager ---------------------------------------------------
    def __enter__(self) -> FixedRecordReader:
        self._file = open(self.filepath, "rb")
        self._file_size = self.filepath.stat().st_size
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if self._file:
            self._file.close()
            self._file = None

    # -- sizes -------------------------------------------------------------
    @property
    def file_size(self) -> int:
        """Size of the open file in bytes."""
        return self._file_size

    @property
    def n_records(self) -> int:
        """Number of complete records in the file."""
        return self._file_size // self.record_size

    @property
    def trailing_bytes(self) -> int:
        """Bytes after the last complete record."""
        return self._file_size % self.record_size

    # -- reads -------------------------------------------------------------
    def read_record(self) -> bytes | None:
        """
        Read the next record.

        Returns:
            Record bytes, or None at a clean end of file

        Raises:
            TruncatedRecordError: If the file ends inside the record
        """
        if self._file is None:
            raise RuntimeError("File not open")
        offset = self._file.tell()
        data = self._file.read(self.record_size)
        if not data:
            return None
        if len(data) < self.record_size:
            raise TruncatedRecordError(
                f"Incomplete record: expected {self.record_size} bytes, got {len(data)}",
                filepath=self.filepath,
                byte_offset=offset,
            )
        return data

    def iter_records(self) -> Iterator[bytes]:
        """Yield every complete record; a trailing partial chunk is not read."""
        if self._file is None:
            raise RuntimeError("File not open")
        for _ in range(self.n_records):
            data = self.read_record()
            if data is None:
                # File shrank while open
                raise TruncatedRecordError(
                    "Unexpected end of file",
                    filepath=self.filepath,
                    byte_offset=self.get_position(),
                )
            yield data

    # -- position ----------------------------------------------------------
    def get_position(self) -> int:
        """
        Get current file position.

        Returns:
            Current byte offset in the file
        """
        if self._file is None:
            raise RuntimeError("File not open")
        return self._file.tell()

    def seek_record(self, index: int) -> None:
        """Seek to the start of record *index* (0-based)."""
        if self._file is None:
            raise RuntimeError("File not open")
        self._file.seek(index * self.record_size)

    def at_eof(self) -> bool:
        if self._file is None:
            raise RuntimeError("File not open")
        pos = self._file.tell()
        data = self._file.read(1)
        if not data:
            return True
        self._file.seek(pos)
        return False


class FixedRecordWriter:
    """
    Writer for headerless files of fixed-size records.
    """

    def __init__(self, filepath: Path | str, record_size: int) -> None:
        """
        Initialize the writer.

        Args:
            filepath: Path to the output file
            record_size: Bytes per record
        """
        self.filepath = Path(filepath)
        self.record_size = record_size
        self._file: BinaryIO | None = None

    def __enter__(self) -> FixedRecordWriter:
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.filepath, "wb")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if self._file:
            self._file.close()
            self._file = None

    def write_record(self, data: bytes) -> None:
        """
        Write a single record.

        Args:
            data: Record data, exactly ``record_size`` bytes
        """
        if self._file is None:
            raise RuntimeError("File not open")
        if len(data) != self.record_size:
            raise ValueError(f"Record must be {self.record_size} bytes, got {len(data)}")
        self._file.write(data)

    def write_raw(self, data: bytes) -> None:
        """Write bytes outside the record structure (e.g. trailing padding)."""
        if self._file is None:
            raise RuntimeError("File not open")
        self._file.write(data)
