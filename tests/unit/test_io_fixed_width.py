"""Unit tests for fixed-column field extraction."""

from __future__ import annotations

import pytest

from pydessem.core.exceptions import FieldFormatError
from pydessem.io.fixed_width import (
    FieldSpec,
    extract,
    extract_fields,
    parse_float,
    parse_int,
    parse_str,
)


class TestExtract:
    """Tests for extract()."""

    def test_inclusive_one_based_range(self) -> None:
        assert extract("ABCDEFGH", 2, 4) == "BCD"

    def test_single_column(self) -> None:
        assert extract("ABCDEFGH", 1, 1) == "A"

    def test_short_line_reads_blank(self) -> None:
        assert extract("ABC", 5, 10) == ""

    def test_partially_short_line(self) -> None:
        assert extract("ABCDE", 4, 10) == "DE"

    def test_line_ending_not_part_of_field(self) -> None:
        assert extract("AB\r\n", 1, 4) == "AB"

    @pytest.mark.parametrize("start,end", [(0, 3), (5, 4), (-1, 2)])
    def test_invalid_range(self, start: int, end: int) -> None:
        with pytest.raises(ValueError, match="Invalid column range"):
            extract("ABCDEFGH", start, end)


class TestParseInt:
    """Tests for parse_int()."""

    def test_padded_value(self) -> None:
        assert parse_int("  42 ") == 42

    def test_negative(self) -> None:
        assert parse_int(" -7") == -7

    def test_blank_allowed(self) -> None:
        assert parse_int("    ", allow_blank=True) is None

    def test_dot_is_blank(self) -> None:
        assert parse_int("  .", allow_blank=True) is None

    def test_blank_required_raises(self) -> None:
        with pytest.raises(FieldFormatError, match="Required field plant_num is blank") as exc:
            parse_int("   ", context="plant_num")
        assert exc.value.field == "plant_num"

    def test_garbage_raises(self) -> None:
        with pytest.raises(FieldFormatError, match="Expected integer for subsystem"):
            parse_int(" 1a", context="subsystem")

    def test_float_text_raises(self) -> None:
        with pytest.raises(FieldFormatError):
            parse_int("1.5")

    def test_underscore_rejected(self) -> None:
        with pytest.raises(FieldFormatError):
            parse_int("1_000")


class TestParseFloat:
    """Tests for parse_float()."""

    def test_plain(self) -> None:
        assert parse_float("  120.5") == 120.5

    def test_integer_text(self) -> None:
        assert parse_float("  46") == 46.0

    def test_exponent(self) -> None:
        assert parse_float("1.5E+02") == 150.0

    def test_fortran_d_exponent(self) -> None:
        assert parse_float("1.5D+02") == 150.0
        assert parse_float("2.5d-01") == 0.25

    def test_blank_allowed(self) -> None:
        assert parse_float("          ", allow_blank=True) is None

    def test_blank_required_raises(self) -> None:
        with pytest.raises(FieldFormatError, match="blank"):
            parse_float("", context="hours")

    def test_garbage_raises(self) -> None:
        with pytest.raises(FieldFormatError, match="Expected number for min_volume, got 'abc'"):
            parse_float("abc", context="min_volume")

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
    def test_non_finite_rejected(self, raw: str) -> None:
        with pytest.raises(FieldFormatError, match="finite"):
            parse_float(raw)


class TestParseStr:
    """Tests for parse_str()."""

    def test_strips(self) -> None:
        assert parse_str(" FURNAS     ") == "FURNAS"

    def test_blank_allowed_by_default(self) -> None:
        assert parse_str("    ") == ""

    def test_blank_required_raises(self) -> None:
        with pytest.raises(FieldFormatError):
            parse_str("   ", allow_blank=False, context="name")


class TestFieldSpec:
    """Tests for FieldSpec and extract_fields()."""

    def test_width(self) -> None:
        assert FieldSpec("x", 48, 57).width == 10

    def test_parse_int_field(self) -> None:
        spec = FieldSpec("plant_num", 9, 11, "int")
        assert spec.parse("        156 FURNAS") == 156

    def test_optional_blank_field(self) -> None:
        spec = FieldSpec("downstream_plant", 40, 41, "int", required=False)
        assert spec.parse("x" * 20) is None

    def test_extract_fields(self) -> None:
        specs = (
            FieldSpec("plant_num", 1, 3, "int"),
            FieldSpec("name", 5, 12, "str"),
            FieldSpec("hours", 14, 18),
        )
        assert extract_fields("  6 FURNAS    12.5", specs) == {
            "plant_num": 6,
            "name": "FURNAS",
            "hours": 12.5,
        }

    def test_extract_fields_reports_failing_field(self) -> None:
        specs = (FieldSpec("plant_num", 1, 3, "int"), FieldSpec("hours", 5, 9))
        with pytest.raises(FieldFormatError) as exc:
            extract_fields("  6 x.y  ", specs)
        assert exc.value.field == "hours"
