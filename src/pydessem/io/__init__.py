"""I/O handlers for DESSEM file formats."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

# ---------------------------------------------------------------------------
# Lazy import mapping: symbol_name -> (module_path, attr_name)
# ---------------------------------------------------------------------------
_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    # Layout configuration
    "BinaryLayout": ("pydessem.io.config", "BinaryLayout"),
    "TextLayout": ("pydessem.io.config", "TextLayout"),
    "DEFAULT_BINARY_LAYOUT": ("pydessem.io.config", "DEFAULT_BINARY_LAYOUT"),
    "DEFAULT_TEXT_LAYOUT": ("pydessem.io.config", "DEFAULT_TEXT_LAYOUT"),
    # Fixed-width fields
    "FieldSpec": ("pydessem.io.fixed_width", "FieldSpec"),
    "extract": ("pydessem.io.fixed_width", "extract"),
    "extract_fields": ("pydessem.io.fixed_width", "extract_fields"),
    "parse_float": ("pydessem.io.fixed_width", "parse_float"),
    "parse_int": ("pydessem.io.fixed_width", "parse_int"),
    # Fixed-size records
    "FixedRecordReader": ("pydessem.io.binary", "FixedRecordReader"),
    "FixedRecordWriter": ("pydessem.io.binary", "FixedRecordWriter"),
    # Format detection
    "FileFormat": ("pydessem.io.format_detection", "FileFormat"),
    "detect_format": ("pydessem.io.format_detection", "detect_format"),
    "is_binary": ("pydessem.io.format_detection", "is_binary"),
    # HIDR.DAT binary
    "HidrBinaryRecord": ("pydessem.io.hidr_binary", "HidrBinaryRecord"),
    "decode_all": ("pydessem.io.hidr_binary", "decode_all"),
    "decode_record": ("pydessem.io.hidr_binary", "decode_record"),
    "encode_record": ("pydessem.io.hidr_binary", "encode_record"),
    "read_binary_records": ("pydessem.io.hidr_binary", "read_binary_records"),
    "write_binary_records": ("pydessem.io.hidr_binary", "write_binary_records"),
    # HIDR.DAT text
    "BlockState": ("pydessem.io.hidr_text", "BlockState"),
    "HidrTextReader": ("pydessem.io.hidr_text", "HidrTextReader"),
    "read_hidr_text": ("pydessem.io.hidr_text", "read_hidr_text"),
    # Dispatch
    "read_hidr": ("pydessem.io.hidr", "read_hidr"),
    "read_hidr_binary": ("pydessem.io.hidr", "read_hidr_binary"),
    "ParserRegistry": ("pydessem.io.registry", "ParserRegistry"),
    "default_registry": ("pydessem.io.registry", "default_registry"),
    "parse_file": ("pydessem.io.registry", "parse_file"),
    # HDF5
    "read_registry_hdf5": ("pydessem.io.hdf5", "read_registry_hdf5"),
    "write_registry_hdf5": ("pydessem.io.hdf5", "write_registry_hdf5"),
}

__all__ = sorted(_LAZY_IMPORTS)


def __getattr__(name: str) -> object:
    spec = _LAZY_IMPORTS.get(name)
    if spec is not None:
        module_path, attr_name = spec
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value

    # Fall back: try to import as a submodule
    try:
        module = importlib.import_module(f"pydessem.io.{name}")
    except ImportError:
        raise AttributeError(f"module 'pydessem.io' has no attribute {name!r}") from None
    globals()[name] = module
    return module


if TYPE_CHECKING:
    from pydessem.io.config import BinaryLayout as BinaryLayout
    from pydessem.io.config import TextLayout as TextLayout
    from pydessem.io.hdf5 import read_registry_hdf5 as read_registry_hdf5
    from pydessem.io.hdf5 import write_registry_hdf5 as write_registry_hdf5
    from pydessem.io.hidr import read_hidr as read_hidr
    from pydessem.io.registry import ParserRegistry as ParserRegistry
