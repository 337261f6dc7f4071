"""
pydessem - Python package for DESSEM hydroelectric plant registries.

This package provides tools for:
- Reading HIDR.DAT plant registries in binary and text layouts
- Walking and validating river-basin cascades
- Exporting registries to numpy arrays, pandas and HDF5
"""

from __future__ import annotations

__version__ = "0.1.0"

from pydessem.components.cascade import CascadeGraph, StorageTotals
from pydessem.components.plant import (
    CurveKind,
    EvaporationCoefficients,
    Plant,
    PolynomialCurve,
    TravelTime,
    UnitSet,
)
from pydessem.components.registry import PlantRegistry
from pydessem.core.exceptions import (
    CycleDetectedError,
    DessemIOError,
    FieldFormatError,
    FileFormatError,
    PyDessemError,
    TruncatedRecordError,
    ValidationError,
)
from pydessem.io.format_detection import FileFormat, detect_format, is_binary
from pydessem.io.hidr import read_hidr, read_hidr_binary
from pydessem.io.hidr_text import read_hidr_text
from pydessem.io.registry import ParserRegistry, default_registry, parse_file

__all__ = [
    "__version__",
    # Records
    "Plant",
    "UnitSet",
    "TravelTime",
    "PolynomialCurve",
    "CurveKind",
    "EvaporationCoefficients",
    # Registry and cascade
    "PlantRegistry",
    "CascadeGraph",
    "StorageTotals",
    # Reading
    "FileFormat",
    "detect_format",
    "is_binary",
    "read_hidr",
    "read_hidr_binary",
    "read_hidr_text",
    "ParserRegistry",
    "default_registry",
    "parse_file",
    # Exceptions
    "PyDessemError",
    "ValidationError",
    "DessemIOError",
    "FileFormatError",
    "FieldFormatError",
    "TruncatedRecordError",
    "CycleDetectedError",
]
