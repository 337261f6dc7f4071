"""
Fixed-column field extraction for DESSEM text files.

DESSEM input files describe every record as a set of 1-based,
inclusive column ranges (the ``I3``/``F10.0``/``A12`` fields of the
user manual). The helpers in this module slice those ranges out of a
line and parse them with blank-as-null semantics.

Every text reader should import helpers from this module rather than
defining its own copy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal, overload

from pydessem.core.exceptions import FieldFormatError

# Values that mean "no value" in an optional numeric column
BLANK_TOKENS = ("", ".")

FieldKind = Literal["int", "float", "str"]


def extract(line: str, start: int, end: int) -> str:
    """Return columns *start* .. *end* (1-based, inclusive) of *line*.

    Columns past the end of the line read as blank, so short lines
    never raise.
    """
    if start < 1 or end < start:
        raise ValueError(f"Invalid column range {start}-{end}")
    return line.rstrip("\r\n")[start - 1 : end]


@overload
def parse_int(raw: str, allow_blank: Literal[False] = ..., context: str = "") -> int: ...


@overload
def parse_int(raw: str, allow_blank: bool, context: str = "") -> int | None: ...


def parse_int(raw: str, allow_blank: bool = False, context: str = "") -> int | None:
    """Parse a fixed-width integer field.

    Parameters
    ----------
    raw : str
        The raw column text.
    allow_blank : bool
        If ``True``, an empty field or a lone ``"."`` returns ``None``.
    context : str
        Field name used in error messages.
    """
    value = raw.strip()
    if value in BLANK_TOKENS:
        if allow_blank:
            return None
        raise FieldFormatError(_blank_message(context), field=context)
    try:
        if "_" in value:
            raise ValueError(value)
        return int(value)
    except ValueError as exc:
        msg = (
            f"Expected integer for {context}, got {value!r}"
            if context
            else f"Expected integer, got {value!r}"
        )
        raise FieldFormatError(msg, field=context) from exc


@overload
def parse_float(raw: str, allow_blank: Literal[False] = ..., context: str = "") -> float: ...


@overload
def parse_float(raw: str, allow_blank: bool, context: str = "") -> float | None: ...


def parse_float(raw: str, allow_blank: bool = False, context: str = "") -> float | None:
    """Parse a fixed-width real field.

    Accepts Fortran ``D`` exponents (``1.5D+02``) in addition to the
    forms Python's :func:`float` understands. ``nan``/``inf`` spellings
    are rejected because they never appear in DESSEM files.
    """
    value = raw.strip()
    if value in BLANK_TOKENS:
        if allow_blank:
            return None
        raise FieldFormatError(_blank_message(context), field=context)
    normalized = value.replace("D", "E").replace("d", "e")
    try:
        if "_" in normalized:
            raise ValueError(normalized)
        result = float(normalized)
    except ValueError as exc:
        msg = (
            f"Expected number for {context}, got {value!r}"
            if context
            else f"Expected number, got {value!r}"
        )
        raise FieldFormatError(msg, field=context) from exc
    if not math.isfinite(result):
        raise FieldFormatError(f"Expected finite number for {context}, got {value!r}", field=context)
    return result


def parse_str(raw: str, allow_blank: bool = True, context: str = "") -> str:
    """Strip a fixed-width text field; blank is an error unless allowed."""
    value = raw.strip()
    if not value and not allow_blank:
        raise FieldFormatError(_blank_message(context), field=context)
    return value


def _blank_message(context: str) -> str:
    return f"Required field {context} is blank" if context else "Required field is blank"


@dataclass(frozen=True)
class FieldSpec:
    """
    One column range of a fixed-width record.

    Attributes:
        name: Key used in the parsed result
        start: First column (1-based, inclusive)
        end: Last column (1-based, inclusive)
        kind: 'int', 'float' or 'str'
        required: If True a blank field raises FieldFormatError
    """

    name: str
    start: int
    end: int
    kind: FieldKind = "float"
    required: bool = True

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    def parse(self, line: str) -> Any:
        raw = extract(line, self.start, self.end)
        if self.kind == "int":
            return parse_int(raw, allow_blank=not self.required, context=self.name)
        if self.kind == "float":
            return parse_float(raw, allow_blank=not self.required, context=self.name)
        return parse_str(raw, allow_blank=not self.required, context=self.name)


def extract_fields(line: str, specs: tuple[FieldSpec, ...] | list[FieldSpec]) -> dict[str, Any]:
    """Apply a column layout to *line* and return ``{name: value}``.

    The first failing field raises :class:`FieldFormatError`; the caller
    adds file and line context.
    """
    return {spec.name: spec.parse(line) for spec in specs}
