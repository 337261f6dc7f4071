"""Core base classes and exceptions for pydessem."""

from __future__ import annotations

from pydessem.core.base_component import BaseComponent
from pydessem.core.exceptions import (
    CycleDetectedError,
    DessemIOError,
    FieldFormatError,
    FileFormatError,
    PyDessemError,
    TruncatedRecordError,
    ValidationError,
)

__all__ = [
    "BaseComponent",
    "PyDessemError",
    "ValidationError",
    "DessemIOError",
    "FileFormatError",
    "FieldFormatError",
    "TruncatedRecordError",
    "CycleDetectedError",
]
