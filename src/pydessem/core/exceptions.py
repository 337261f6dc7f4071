"""Custom exceptions for pydessem package."""

from __future__ import annotations

from pathlib import Path


class PyDessemError(Exception):
    """Base exception for all pydessem errors."""

    pass


class ValidationError(PyDessemError):
    """Error raised when registry validation fails."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class DessemIOError(PyDessemError):
    """Error related to file I/O operations."""

    pass


class FileFormatError(DessemIOError):
    """Error raised when file format is invalid.

    Carries whatever location context is known: the file path, a 1-based
    line number for text files, or a byte offset for binary files.
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        filepath: Path | str | None = None,
        byte_offset: int | None = None,
    ) -> None:
        self.message = message
        self.line_number = line_number
        self.filepath = Path(filepath) if filepath is not None else None
        self.byte_offset = byte_offset
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.filepath is not None:
            where.append(str(self.filepath))
        if self.line_number is not None:
            where.append(f"line {self.line_number}")
        if self.byte_offset is not None:
            where.append(f"byte {self.byte_offset}")
        if not where:
            return self.message
        return f"{', '.join(where)}: {self.message}"


class FieldFormatError(FileFormatError):
    """Error raised when a fixed-width field is not a valid number."""

    def __init__(
        self,
        message: str,
        field: str = "",
        line_number: int | None = None,
        filepath: Path | str | None = None,
    ) -> None:
        self.field = field
        super().__init__(message, line_number=line_number, filepath=filepath)


class TruncatedRecordError(FileFormatError):
    """Error raised when a binary file ends in the middle of a record."""

    pass


class CycleDetectedError(PyDessemError):
    """Raised when a cascade walk revisits a plant.

    Attributes:
        plant_num: The plant that was reached a second time
        chain: Plants visited before the repeat, in walk order
    """

    def __init__(self, plant_num: int, chain: list[int]) -> None:
        self.plant_num = plant_num
        self.chain = list(chain)
        path = " -> ".join(str(n) for n in [*self.chain, plant_num])
        super().__init__(f"Cycle detected in cascade at plant {plant_num}: {path}")
