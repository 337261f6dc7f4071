"""
Binary HIDR.DAT reader and writer.

The binary registry is a headerless, footerless sequence of 792-byte
little-endian records, one per plant slot. Each record holds 40 named
fields (110 values once arrays are expanded) at fixed offsets. One
field (``station_bdh``) is an 8-byte integer and bytes 196-495 are a
reserved block that is never interpreted.

Decoding is purely mechanical byte reinterpretation through a numpy
structured dtype. Plausibility of the decoded values is not checked and
placeholder rows (``station == 0``) are kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Any

import numpy as np

from pydessem.components.plant import Plant
from pydessem.core.exceptions import TruncatedRecordError
from pydessem.io.binary import FixedRecordReader, FixedRecordWriter
from pydessem.io.config import DEFAULT_BINARY_LAYOUT, BinaryLayout

logger = logging.getLogger(__name__)

RECORD_SIZE = 792
RESERVED_OFFSET = 196
RESERVED_SIZE = 300

# (field, dtype code, count, offset). Strings use count 1 with an 'S' code.
_LAYOUT: tuple[tuple[str, str, int, int], ...] = (
    ("name", "S12", 1, 0),
    ("station", "i4", 1, 12),  # plant identifier
    ("station_bdh", "i8", 1, 16),
    ("subsystem", "i4", 1, 24),
    ("company", "i4", 1, 28),
    ("downstream", "i4", 1, 32),
    ("diversion", "i4", 1, 36),
    ("min_volume", "f4", 1, 40),
    ("max_volume", "f4", 1, 44),
    ("spillway_volume", "f4", 1, 48),
    ("diversion_volume", "f4", 1, 52),
    ("min_elevation", "f4", 1, 56),
    ("max_elevation", "f4", 1, 60),
    ("volume_elevation", "f4", 5, 64),
    ("elevation_area", "f4", 5, 84),
    ("evaporation", "i4", 12, 104),
    ("n_unit_sets", "i4", 1, 152),
    ("units_per_set", "i4", 5, 156),
    ("unit_power", "f4", 5, 176),
    # 196-495: reserved
    ("unit_head", "f4", 5, 496),
    ("unit_flow", "i4", 5, 516),
    ("productivity", "f4", 1, 536),
    ("losses", "f4", 1, 540),
    ("n_tailrace_polys", "i4", 1, 544),
    ("tailrace_polys", "f4", 36, 548),
    ("mean_tailrace", "f4", 1, 692),
    ("spillway_tailrace_influence", "i4", 1, 696),
    ("max_load_factor", "f4", 1, 700),
    ("min_load_factor", "f4", 1, 704),
    ("historical_min_flow", "i4", 1, 708),
    ("base_units", "i4", 1, 712),
    ("turbine_type", "i4", 1, 716),
    ("set_representation", "i4", 1, 720),
    ("teif", "f4", 1, 724),
    ("ip", "f4", 1, 728),
    ("loss_type", "i4", 1, 732),
    ("reference_date", "S12", 1, 736),
    ("notes", "S39", 1, 748),
    ("reference_volume", "f4", 1, 787),
    ("regulation", "S1", 1, 791),
)


@lru_cache(maxsize=2)
def hidr_record_dtype(endian: str = "<") -> np.dtype:
    """Build the structured dtype of one 792-byte record."""
    names, formats, offsets = [], [], []
    for name, code, count, offset in _LAYOUT:
        names.append(name)
        if code.startswith("S"):
            formats.append(code)
        elif count == 1:
            formats.append(f"{endian}{code}")
        else:
            formats.append((f"{endian}{code}", (count,)))
        offsets.append(offset)
    return np.dtype(
        {"names": names, "formats": formats, "offsets": offsets, "itemsize": RECORD_SIZE}
    )


HIDR_RECORD_DTYPE = hidr_record_dtype("<")


@dataclass(frozen=True)
class HidrBinaryRecord:
    """All fields of one binary plant record."""

    name: str = ""
    station: int = 0
    station_bdh: int = 0
    subsystem: int = 0
    company: int = 0
    downstream: int = 0
    diversion: int = 0
    min_volume: float = 0.0
    max_volume: float = 0.0
    spillway_volume: float = 0.0
    diversion_volume: float = 0.0
    min_elevation: float = 0.0
    max_elevation: float = 0.0
    volume_elevation: tuple[float, ...] = (0.0,) * 5
    elevation_area: tuple[float, ...] = (0.0,) * 5
    evaporation: tuple[int, ...] = (0,) * 12
    n_unit_sets: int = 0
    units_per_set: tuple[int, ...] = (0,) * 5
    unit_power: tuple[float, ...] = (0.0,) * 5
    unit_head: tuple[float, ...] = (0.0,) * 5
    unit_flow: tuple[int, ...] = (0,) * 5
    productivity: float = 0.0
    losses: float = 0.0
    n_tailrace_polys: int = 0
    tailrace_polys: tuple[float, ...] = (0.0,) * 36
    mean_tailrace: float = 0.0
    spillway_tailrace_influence: int = 0
    max_load_factor: float = 0.0
    min_load_factor: float = 0.0
    historical_min_flow: int = 0
    base_units: int = 0
    turbine_type: int = 0
    set_representation: int = 0
    teif: float = 0.0
    ip: float = 0.0
    loss_type: int = 0
    reference_date: str = ""
    notes: str = ""
    reference_volume: float = 0.0
    regulation: str = ""

    @property
    def installed_capacity(self) -> float:
        """Sum of units x unit power over sets with at least one unit."""
        return float(
            sum(n * power for n, power in zip(self.units_per_set, self.unit_power) if n > 0)
        )


# Record fields consumed by record_to_plant; everything else is dropped.
BINARY_PLANT_FIELDS: tuple[str, ...] = (
    "name",
    "station",
    "subsystem",
    "downstream",
    "diversion",
    "min_volume",
    "max_volume",
    "units_per_set",
    "unit_power",
    "productivity",
)

BINARY_DROPPED_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(HidrBinaryRecord) if f.name not in BINARY_PLANT_FIELDS
)


def _decode_text(raw: bytes) -> str:
    return raw.decode("latin-1").replace("\x00", "").strip()


def _from_numpy(row: np.void) -> HidrBinaryRecord:
    values: dict[str, Any] = {}
    for name, code, count, _ in _LAYOUT:
        item = row[name]
        if code.startswith("S"):
            values[name] = _decode_text(bytes(item))
        elif count > 1:
            values[name] = tuple(item.tolist())
        elif code.startswith("f"):
            values[name] = float(item)
        else:
            values[name] = int(item)
    return HidrBinaryRecord(**values)


def decode_record(data: bytes, endian: str = "<") -> HidrBinaryRecord:
    """
    Decode one 792-byte record.

    Args:
        data: Raw record bytes
        endian: Byte order of numeric fields

    Returns:
        HidrBinaryRecord with every field of the layout
    """
    if len(data) != RECORD_SIZE:
        raise ValueError(f"Record must be {RECORD_SIZE} bytes, got {len(data)}")
    row = np.frombuffer(data, dtype=hidr_record_dtype(endian), count=1)[0]
    return _from_numpy(row)


def encode_record(record: HidrBinaryRecord, endian: str = "<") -> bytes:
    """
    Encode a record at its documented offsets.

    Strings are truncated to their field width and NUL-padded; the
    reserved block is zero-filled.
    """
    arr = np.zeros(1, dtype=hidr_record_dtype(endian))
    for name, code, count, _ in _LAYOUT:
        value = getattr(record, name)
        if code.startswith("S"):
            arr[name] = value.encode("latin-1", errors="replace")[: int(code[1:])]
        elif count > 1:
            if len(value) != count:
                raise ValueError(f"Field {name} needs {count} values, got {len(value)}")
            arr[name] = np.asarray(value)
        else:
            arr[name] = value
    return arr.tobytes()


def _optional_ref(value: int) -> int | None:
    return value if value != 0 else None


def record_to_plant(record: HidrBinaryRecord) -> Plant:
    """
    Map a binary record onto the public Plant fields.

    Only the fields listed in :data:`BINARY_PLANT_FIELDS` are read;
    :data:`BINARY_DROPPED_FIELDS` lists the rest. Text-only Plant
    attributes stay ``None``.
    """
    return Plant(
        plant_num=record.station,
        name=record.name,
        subsystem=record.subsystem,
        downstream_plant=_optional_ref(record.downstream),
        diversion_plant=_optional_ref(record.diversion),
        min_volume=record.min_volume,
        max_volume=record.max_volume,
        installed_capacity=record.installed_capacity,
        productivity=record.productivity,
    )


def read_binary_records(
    filepath: Path | str, layout: BinaryLayout = DEFAULT_BINARY_LAYOUT
) -> list[HidrBinaryRecord]:
    """
    Read every complete record of a binary HIDR.DAT file.

    A trailing chunk shorter than one record is dropped with a warning.

    Raises:
        FileNotFoundError: If the file does not exist
        TruncatedRecordError: If the file is non-empty but shorter than
            one record
    """
    if layout.record_size != RECORD_SIZE:
        raise ValueError(
            f"Binary HIDR records are {RECORD_SIZE} bytes, layout says {layout.record_size}"
        )

    records: list[HidrBinaryRecord] = []
    with FixedRecordReader(filepath, layout.record_size) as reader:
        if reader.n_records == 0 and reader.file_size > 0:
            raise TruncatedRecordError(
                f"File ends after {reader.file_size} bytes, before the first "
                f"{layout.record_size}-byte record boundary",
                filepath=filepath,
                byte_offset=0,
            )
        for chunk in reader.iter_records():
            records.append(decode_record(chunk, layout.endian))
        if reader.trailing_bytes:
            logger.warning(
                "Dropped %d trailing bytes after %d records in %s",
                reader.trailing_bytes,
                reader.n_records,
                filepath,
            )
    return records


def decode_all(filepath: Path | str, layout: BinaryLayout = DEFAULT_BINARY_LAYOUT) -> list[Plant]:
    """
    Decode a binary HIDR.DAT file into plants.

    Returns exactly ``file_size // 792`` plants, in file order.
    """
    return [record_to_plant(r) for r in read_binary_records(filepath, layout)]


def write_binary_records(
    filepath: Path | str,
    records: list[HidrBinaryRecord],
    trailing_padding: bytes = b"",
    endian: str = "<",
) -> None:
    """
    Write records as a binary HIDR.DAT file.

    Args:
        filepath: Output path
        records: Records in file order
        trailing_padding: Extra bytes appended after the last record
        endian: Byte order of numeric fields
    """
    with FixedRecordWriter(filepath, RECORD_SIZE) as writer:
        for record in records:
            writer.write_record(encode_record(record, endian))
        if trailing_padding:
            writer.write_raw(trailing_padding)
