"""
Text HIDR.DAT reader.

The text registry is organised in blocks. A block starts with a marker
line whose leading token names the record type and ends with a ``FIM``
line; every line in between is a fixed-width data record of that type.
Data records may also repeat the marker in their leading columns, in
which case the line both selects the block and is decoded as a record.
Lines outside any block are headers or comments and are ignored.

Block types:
- ``CADUSIH``: plant registry
- ``USITVIAG``: travel times
- ``POLCOT``: volume -> elevation polynomials
- ``POLARE``: volume -> area polynomials
- ``POLJUS``: discharge -> tailrace elevation polynomials
- ``COEFEVA``: monthly evaporation coefficients
- ``CADCONJ``: generating-unit sets

Once a data line fails to parse, column alignment for the rest of the
block cannot be trusted, so the whole parse fails.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydessem.components.plant import (
    CurveKind,
    EvaporationCoefficients,
    Plant,
    PolynomialCurve,
    TravelTime,
    UnitSet,
)
from pydessem.components.registry import PlantRegistry
from pydessem.core.exceptions import FieldFormatError
from pydessem.io.config import DEFAULT_TEXT_LAYOUT, TextLayout
from pydessem.io.fixed_width import FieldSpec, extract_fields

logger = logging.getLogger(__name__)


class BlockState(Enum):
    """Decoder state: outside any block, or inside one block type."""

    NONE = "NONE"
    CADUSIH = "CADUSIH"
    USITVIAG = "USITVIAG"
    POLCOT = "POLCOT"
    POLARE = "POLARE"
    POLJUS = "POLJUS"
    COEFEVA = "COEFEVA"
    CADCONJ = "CADCONJ"


BLOCK_STATES: tuple[BlockState, ...] = tuple(s for s in BlockState if s is not BlockState.NONE)
MARKERS: frozenset[str] = frozenset(s.value for s in BLOCK_STATES)


def build_transitions(terminator: str) -> Mapping[BlockState, Mapping[str, BlockState]]:
    """
    Build the transition table ``state -> {leading token -> next state}``.

    Every state opens any block on its marker; every block state returns
    to NONE on *terminator*. Tokens absent from a state's row cause no
    transition.
    """
    table: dict[BlockState, Mapping[str, BlockState]] = {}
    for state in BlockState:
        row = {block.value: block for block in BLOCK_STATES}
        if state is not BlockState.NONE:
            row[terminator] = BlockState.NONE
        table[state] = MappingProxyType(row)
    return MappingProxyType(table)


TRANSITIONS = build_transitions(DEFAULT_TEXT_LAYOUT.terminator)


def leading_token(line: str) -> str:
    """Return the first whitespace-delimited token of *line*, or ''."""
    parts = line.split(None, 1)
    return parts[0] if parts else ""


def has_record(line: str) -> bool:
    """Return True if a marker line also carries a data record after its token.

    Records may repeat their block's marker in the leading columns
    (``CADUSIH   1 CAMARGOS ...``); a bare marker line only opens the block.
    """
    text = line.strip()
    return bool(text[len(leading_token(text)) :].strip())


def transition(
    state: BlockState,
    token: str,
    table: Mapping[BlockState, Mapping[str, BlockState]] = TRANSITIONS,
) -> BlockState | None:
    """Return the state after a line starting with *token*, or None if it is not a control line."""
    return table[state].get(token)


# =============================================================================
# Column layouts (1-based, inclusive)
# =============================================================================

CADUSIH_FIELDS = (
    FieldSpec("plant_num", 9, 11, "int"),
    FieldSpec("name", 13, 24, "str"),
    FieldSpec("subsystem", 26, 27, "int"),
    FieldSpec("commission_year", 29, 32, "int", required=False),
    FieldSpec("commission_month", 34, 35, "int", required=False),
    FieldSpec("commission_day", 37, 38, "int", required=False),
    FieldSpec("downstream_plant", 40, 41, "int", required=False),
    FieldSpec("diversion_plant", 43, 44, "int", required=False),
    FieldSpec("plant_type", 46, 46, "int", required=False),
    FieldSpec("min_volume", 48, 57, "float", required=False),
    FieldSpec("max_volume", 59, 68, "float", required=False),
    FieldSpec("max_turbine_flow", 70, 79, "float", required=False),
    FieldSpec("installed_capacity", 81, 90, "float", required=False),
    FieldSpec("productivity", 92, 101, "float", required=False),
)

USITVIAG_FIELDS = (
    FieldSpec("from_plant", 10, 12, "int"),
    FieldSpec("to_plant", 14, 15, "int"),
    FieldSpec("hours", 17, 21, "float"),
)

POLYNOMIAL_FIELDS = (
    FieldSpec("plant_num", 8, 10, "int"),
    FieldSpec("degree", 12, 13, "int"),
    FieldSpec("coef0", 15, 24),
    FieldSpec("coef1", 26, 35),
    FieldSpec("coef2", 37, 46),
    FieldSpec("coef3", 48, 57),
    FieldSpec("coef4", 59, 68),
    FieldSpec("coef5", 70, 79),
)

MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

COEFEVA_FIELDS = (
    FieldSpec("plant_num", 9, 11, "int"),
    *(FieldSpec(month, 13 + 6 * i, 17 + 6 * i) for i, month in enumerate(MONTHS)),
)

CADCONJ_FIELDS = (
    FieldSpec("plant_num", 9, 11, "int"),
    FieldSpec("set_num", 13, 14, "int"),
    FieldSpec("num_units", 16, 17, "int"),
    FieldSpec("unit_capacity", 19, 28),
    FieldSpec("min_generation", 30, 39),
    FieldSpec("max_turbine_flow", 41, 50),
)

BLOCK_FIELDS: Mapping[BlockState, tuple[FieldSpec, ...]] = MappingProxyType(
    {
        BlockState.CADUSIH: CADUSIH_FIELDS,
        BlockState.USITVIAG: USITVIAG_FIELDS,
        BlockState.POLCOT: POLYNOMIAL_FIELDS,
        BlockState.POLARE: POLYNOMIAL_FIELDS,
        BlockState.POLJUS: POLYNOMIAL_FIELDS,
        BlockState.COEFEVA: COEFEVA_FIELDS,
        BlockState.CADCONJ: CADCONJ_FIELDS,
    }
)

_CURVE_KINDS = {
    BlockState.POLCOT: CurveKind.VOLUME_ELEVATION,
    BlockState.POLARE: CurveKind.VOLUME_AREA,
    BlockState.POLJUS: CurveKind.TAILRACE,
}


def _plant(data: dict[str, Any]) -> Plant:
    data["downstream_plant"] = data["downstream_plant"] or None
    data["diversion_plant"] = data["diversion_plant"] or None
    return Plant(**data)


def _curve(state: BlockState, data: dict[str, Any]) -> PolynomialCurve:
    coefficients = tuple(data[f"coef{i}"] for i in range(6))
    return PolynomialCurve(
        plant_num=data["plant_num"],
        kind=_CURVE_KINDS[state],
        degree=data["degree"],
        coefficients=coefficients,
    )


class HidrTextReader:
    """
    Block-aware reader for text HIDR.DAT files.

    Example:
        >>> reader = HidrTextReader("hidr.dat")
        >>> registry = reader.read()
        >>> reader.ignored_lines
        3
    """

    def __init__(self, filepath: Path | str, layout: TextLayout = DEFAULT_TEXT_LAYOUT) -> None:
        self.filepath = Path(filepath)
        self.layout = layout
        self.transitions = (
            TRANSITIONS
            if layout.terminator == DEFAULT_TEXT_LAYOUT.terminator
            else build_transitions(layout.terminator)
        )
        self.ignored_lines = 0
        self.blocks_seen: list[BlockState] = []

    def read(self) -> PlantRegistry:
        """
        Read the file and return the decoded registry.

        Raises:
            FileNotFoundError: If the file does not exist
            FieldFormatError: If a data line does not match its block layout
        """
        with open(self.filepath, encoding="latin-1") as f:
            return self.read_lines(f)

    def read_lines(self, lines: Iterable[str]) -> PlantRegistry:
        """Decode an iterable of lines (the body of :meth:`read`)."""
        self.ignored_lines = 0
        self.blocks_seen = []

        plants: list[Plant] = []
        unit_sets: list[UnitSet] = []
        travel_times: list[TravelTime] = []
        curves: dict[CurveKind, list[PolynomialCurve]] = {kind: [] for kind in CurveKind}
        evaporation: list[EvaporationCoefficients] = []

        state = BlockState.NONE
        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            if self.layout.is_comment(line):
                continue

            token = leading_token(line)
            next_state = transition(state, token, self.transitions)
            if next_state is not None:
                carries_record = next_state is not BlockState.NONE and has_record(line)
                if next_state is not BlockState.NONE and (
                    next_state is not state or not carries_record
                ):
                    self.blocks_seen.append(next_state)
                state = next_state
                if not carries_record:
                    continue

            if state is BlockState.NONE:
                self.ignored_lines += 1
                logger.debug(
                    "Ignoring line %d of %s outside any block: %r", line_number, self.filepath, token
                )
                continue

            try:
                data = extract_fields(line, BLOCK_FIELDS[state])
            except FieldFormatError as exc:
                raise FieldFormatError(
                    f"{state.value} block: {exc.message}",
                    field=exc.field,
                    line_number=line_number,
                    filepath=self.filepath,
                ) from exc

            if state is BlockState.CADUSIH:
                plants.append(_plant(data))
            elif state is BlockState.USITVIAG:
                travel_times.append(TravelTime(**data))
            elif state in _CURVE_KINDS:
                curves[_CURVE_KINDS[state]].append(_curve(state, data))
            elif state is BlockState.COEFEVA:
                evaporation.append(
                    EvaporationCoefficients(
                        plant_num=data["plant_num"],
                        values=tuple(data[m] for m in MONTHS),
                    )
                )
            elif state is BlockState.CADCONJ:
                unit_sets.append(UnitSet(**data))

        if state is not BlockState.NONE:
            logger.warning("%s ends inside an unterminated %s block", self.filepath, state.value)

        logger.info(
            "Read %d plants, %d unit sets, %d travel times from %s",
            len(plants),
            len(unit_sets),
            len(travel_times),
            self.filepath,
        )
        return PlantRegistry(
            plants=tuple(plants),
            unit_sets=tuple(unit_sets),
            travel_times=tuple(travel_times),
            volume_elevation=tuple(curves[CurveKind.VOLUME_ELEVATION]),
            volume_area=tuple(curves[CurveKind.VOLUME_AREA]),
            tailrace=tuple(curves[CurveKind.TAILRACE]),
            evaporation=tuple(evaporation),
            source_format="text",
            filepath=self.filepath,
        )


def read_hidr_text(filepath: Path | str, layout: TextLayout = DEFAULT_TEXT_LAYOUT) -> PlantRegistry:
    """Read a text HIDR.DAT file."""
    return HidrTextReader(filepath, layout).read()
