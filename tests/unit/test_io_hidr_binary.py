"""Unit tests for the binary HIDR.DAT decoder."""

from __future__ import annotations

import logging
import struct
from dataclasses import fields
from pathlib import Path

import pytest

from pydessem.core.exceptions import TruncatedRecordError
from pydessem.io.config import BinaryLayout
from pydessem.io.hidr_binary import (
    BINARY_DROPPED_FIELDS,
    BINARY_PLANT_FIELDS,
    HIDR_RECORD_DTYPE,
    RECORD_SIZE,
    RESERVED_OFFSET,
    RESERVED_SIZE,
    HidrBinaryRecord,
    decode_all,
    decode_record,
    encode_record,
    read_binary_records,
    record_to_plant,
    write_binary_records,
)


class TestRecordLayout:
    """Tests for the 792-byte record dtype."""

    def test_itemsize(self) -> None:
        assert HIDR_RECORD_DTYPE.itemsize == RECORD_SIZE == 792

    def test_fields_tile_the_record(self) -> None:
        """Mapped fields plus the reserved block cover all 792 bytes exactly once."""
        spans = sorted(
            (offset, offset + dtype.itemsize)
            for dtype, offset in (HIDR_RECORD_DTYPE.fields[n][:2] for n in HIDR_RECORD_DTYPE.names)
        )
        spans.append((RESERVED_OFFSET, RESERVED_OFFSET + RESERVED_SIZE))
        spans.sort()
        position = 0
        for start, end in spans:
            assert start == position
            position = end
        assert position == RECORD_SIZE

    def test_known_offsets(self) -> None:
        offsets = {name: HIDR_RECORD_DTYPE.fields[name][1] for name in HIDR_RECORD_DTYPE.names}
        assert offsets["name"] == 0
        assert offsets["station"] == 12
        assert offsets["station_bdh"] == 16
        assert offsets["downstream"] == 32
        assert offsets["unit_head"] == 496
        assert offsets["regulation"] == 791

    def test_station_bdh_is_eight_bytes(self) -> None:
        assert HIDR_RECORD_DTYPE.fields["station_bdh"][0].itemsize == 8

    def test_reserved_block_is_unmapped(self) -> None:
        reserved = range(RESERVED_OFFSET, RESERVED_OFFSET + RESERVED_SIZE)
        for name in HIDR_RECORD_DTYPE.names:
            dtype, offset = HIDR_RECORD_DTYPE.fields[name][:2]
            assert offset + dtype.itemsize <= reserved.start or offset >= reserved.stop


class TestDecodeRecord:
    """Tests for decode_record() and encode_record()."""

    def test_name_and_identifier(self) -> None:
        data = bytearray(RECORD_SIZE)
        data[0:12] = b"FURNAS\x00\x00\x00\x00\x00\x00"
        data[12:16] = struct.pack("<i", 6)
        data[32:36] = struct.pack("<i", 7)
        record = decode_record(bytes(data))
        assert record.name == "FURNAS"
        assert record.station == 6
        assert record.downstream == 7

    def test_space_padded_name(self) -> None:
        data = bytearray(RECORD_SIZE)
        data[0:12] = b"ITUTINGA    "
        assert decode_record(bytes(data)).name == "ITUTINGA"

    def test_latin1_name(self) -> None:
        data = bytearray(RECORD_SIZE)
        data[0:12] = "SÃO SIMÃO".encode("latin-1").ljust(12, b"\x00")
        assert decode_record(bytes(data)).name == "SÃO SIMÃO"

    def test_float_fields(self) -> None:
        data = bytearray(RECORD_SIZE)
        data[40:44] = struct.pack("<f", 5733.0)
        data[44:48] = struct.pack("<f", 22950.0)
        data[536:540] = struct.pack("<f", 0.5)
        record = decode_record(bytes(data))
        assert record.min_volume == 5733.0
        assert record.max_volume == 22950.0
        assert record.productivity == 0.5

    def test_misaligned_reference_volume(self) -> None:
        data = bytearray(RECORD_SIZE)
        data[787:791] = struct.pack("<f", 1.25)
        data[791:792] = b"D"
        record = decode_record(bytes(data))
        assert record.reference_volume == 1.25
        assert record.regulation == "D"

    def test_reserved_bytes_ignored(self) -> None:
        data = bytearray(RECORD_SIZE)
        data[RESERVED_OFFSET : RESERVED_OFFSET + RESERVED_SIZE] = b"\xff" * RESERVED_SIZE
        assert decode_record(bytes(data)) == HidrBinaryRecord()

    def test_all_zero_record(self) -> None:
        record = decode_record(bytes(RECORD_SIZE))
        assert record == HidrBinaryRecord()
        assert record.name == ""
        assert record.station == 0

    @pytest.mark.parametrize("size", [0, 791, 793])
    def test_wrong_size_rejected(self, size: int) -> None:
        with pytest.raises(ValueError, match="Record must be 792 bytes"):
            decode_record(bytes(size))

    def test_encode_record_size(self, camargos_record: HidrBinaryRecord) -> None:
        assert len(encode_record(camargos_record)) == RECORD_SIZE

    def test_encode_then_decode(self, camargos_record: HidrBinaryRecord) -> None:
        assert decode_record(encode_record(camargos_record)) == camargos_record

    def test_encode_truncates_long_name(self) -> None:
        record = HidrBinaryRecord(name="A VERY LONG PLANT NAME")
        assert decode_record(encode_record(record)).name == "A VERY LONG"

    def test_encode_rejects_wrong_array_length(self) -> None:
        with pytest.raises(ValueError, match="units_per_set needs 5 values"):
            encode_record(HidrBinaryRecord(units_per_set=(1, 2)))

    def test_big_endian_layout(self, camargos_record: HidrBinaryRecord) -> None:
        data = encode_record(camargos_record, endian=">")
        assert data[12:16] == struct.pack(">i", 1)
        assert decode_record(data, endian=">") == camargos_record


class TestRecordToPlant:
    """Tests for the explicit record -> Plant mapping."""

    def test_mapped_fields(self, camargos_record: HidrBinaryRecord) -> None:
        plant = record_to_plant(camargos_record)
        assert plant.plant_num == 1
        assert plant.name == "CAMARGOS"
        assert plant.subsystem == 1
        assert plant.downstream_plant == 2
        assert plant.diversion_plant is None
        assert plant.min_volume == 120.0
        assert plant.max_volume == 792.0
        assert plant.productivity == 0.0087890625

    def test_installed_capacity_from_unit_sets(self) -> None:
        record = HidrBinaryRecord(
            units_per_set=(2, 3, 0, -1, 0),
            unit_power=(10.0, 5.0, 99.0, 99.0, 0.0),
        )
        assert record_to_plant(record).installed_capacity == 35.0

    def test_text_only_fields_stay_none(self, camargos_record: HidrBinaryRecord) -> None:
        plant = record_to_plant(camargos_record)
        assert plant.commission_year is None
        assert plant.plant_type is None
        assert plant.max_turbine_flow is None

    def test_zero_references_are_none(self) -> None:
        plant = record_to_plant(HidrBinaryRecord(station=4))
        assert plant.downstream_plant is None
        assert plant.diversion_plant is None

    def test_field_partition_covers_record(self) -> None:
        record_fields = {f.name for f in fields(HidrBinaryRecord)}
        assert set(BINARY_PLANT_FIELDS) | set(BINARY_DROPPED_FIELDS) == record_fields
        assert not set(BINARY_PLANT_FIELDS) & set(BINARY_DROPPED_FIELDS)

    def test_dropped_fields_do_not_affect_plant(self, camargos_record: HidrBinaryRecord) -> None:
        from dataclasses import replace

        changed = replace(
            camargos_record,
            company=99,
            losses=3.0,
            notes="changed",
            tailrace_polys=(1.0,) * 36,
        )
        assert record_to_plant(changed) == record_to_plant(camargos_record)


class TestDecodeAll:
    """Tests for decode_all() and read_binary_records()."""

    def test_camargos_and_padding(self, binary_hidr_file: Path) -> None:
        assert binary_hidr_file.stat().st_size == 1584
        plants = decode_all(binary_hidr_file)
        assert len(plants) == 2
        assert plants[0].plant_num == 1
        assert plants[0].name == "CAMARGOS"
        assert plants[0].installed_capacity == 46.0
        assert plants[1].plant_num == 0
        assert plants[1].name == ""
        assert plants[1].is_placeholder

    def test_trailing_partial_record_dropped(
        self,
        tmp_path: Path,
        camargos_record: HidrBinaryRecord,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        path = tmp_path / "HIDR.DAT"
        write_binary_records(path, [camargos_record], trailing_padding=b"\x00" * 40)
        with caplog.at_level(logging.WARNING, logger="pydessem.io.hidr_binary"):
            plants = decode_all(path)
        assert len(plants) == 1
        assert "Dropped 40 trailing bytes" in caplog.text

    def test_record_count_law(self, tmp_path: Path) -> None:
        path = tmp_path / "HIDR.DAT"
        write_binary_records(
            path, [HidrBinaryRecord(station=i + 1) for i in range(5)], trailing_padding=b"\x01" * 791
        )
        size = path.stat().st_size
        assert len(decode_all(path)) == size // 792 == 5

    def test_file_order_preserved(self, tmp_path: Path) -> None:
        path = tmp_path / "HIDR.DAT"
        write_binary_records(path, [HidrBinaryRecord(station=n) for n in (17, 3, 250)])
        assert [p.plant_num for p in decode_all(path)] == [17, 3, 250]

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "HIDR.DAT"
        path.write_bytes(b"")
        assert decode_all(path) == []

    def test_shorter_than_one_record(self, tmp_path: Path) -> None:
        path = tmp_path / "HIDR.DAT"
        path.write_bytes(bytes(100))
        with pytest.raises(TruncatedRecordError) as exc:
            decode_all(path)
        assert exc.value.byte_offset == 0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            decode_all(tmp_path / "missing.dat")

    def test_layout_record_size_must_match(self, binary_hidr_file: Path) -> None:
        with pytest.raises(ValueError, match="792"):
            read_binary_records(binary_hidr_file, BinaryLayout(record_size=800))

    def test_read_binary_records_keeps_every_field(
        self, binary_hidr_file: Path, camargos_record: HidrBinaryRecord
    ) -> None:
        records = read_binary_records(binary_hidr_file)
        assert records[0] == camargos_record
        assert records[1] == HidrBinaryRecord()
