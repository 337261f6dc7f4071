"""Pytest configuration and fixtures for pydessem tests."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest

from pydessem.components.plant import Plant
from pydessem.io.fixed_width import FieldSpec
from pydessem.io.hidr_binary import HidrBinaryRecord, write_binary_records
from pydessem.io.hidr_text import (
    CADCONJ_FIELDS,
    CADUSIH_FIELDS,
    COEFEVA_FIELDS,
    MONTHS,
    POLYNOMIAL_FIELDS,
    USITVIAG_FIELDS,
)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "property: property-based tests using Hypothesis")


# Helper functions for tests


def fixed_line(specs: Iterable[FieldSpec], values: Mapping[str, Any]) -> str:
    """
    Lay *values* out in the columns described by *specs*.

    Text fields are left-justified and numbers right-justified, the way
    DESSEM files are written. Fields missing from *values* stay blank.
    """
    specs = list(specs)
    chars = [" "] * max(spec.end for spec in specs)
    for spec in specs:
        if spec.name not in values or values[spec.name] is None:
            continue
        text = str(values[spec.name])
        if len(text) > spec.width:
            raise ValueError(f"{spec.name}={text!r} does not fit in {spec.width} columns")
        text = text.ljust(spec.width) if spec.kind == "str" else text.rjust(spec.width)
        chars[spec.start - 1 : spec.end] = text
    return "".join(chars).rstrip()


def make_plant(
    plant_num: int,
    downstream: int | None = None,
    min_volume: float | None = 0.0,
    max_volume: float | None = 0.0,
    name: str = "",
    **kwargs: Any,
) -> Plant:
    """Create a Plant with only the cascade-relevant fields filled in."""
    return Plant(
        plant_num=plant_num,
        name=name or f"PLANT{plant_num}",
        downstream_plant=downstream,
        min_volume=min_volume,
        max_volume=max_volume,
        **kwargs,
    )


# Binary fixtures


@pytest.fixture
def camargos_record() -> HidrBinaryRecord:
    """A populated binary record; floats are exactly representable in float32."""
    return HidrBinaryRecord(
        name="CAMARGOS",
        station=1,
        station_bdh=1001,
        subsystem=1,
        company=7,
        downstream=2,
        min_volume=120.0,
        max_volume=792.0,
        volume_elevation=(881.5, 0.25, -0.5, 0.0, 0.0),
        evaporation=(10, 9, 8, 7, 6, 5, 4, 3, 2, 1, 0, -1),
        n_unit_sets=1,
        units_per_set=(2, 0, 0, 0, 0),
        unit_power=(23.0, 0.0, 0.0, 0.0, 0.0),
        productivity=0.0087890625,
        reference_date="01/01/1960",
        notes="test record",
        regulation="M",
    )


@pytest.fixture
def binary_hidr_file(tmp_path: Path, camargos_record: HidrBinaryRecord) -> Path:
    """A 1,584-byte binary registry: CAMARGOS followed by an all-zero slot."""
    path = tmp_path / "HIDR.DAT"
    write_binary_records(path, [camargos_record, HidrBinaryRecord()])
    return path


# Text fixtures


CAMARGOS_VALUES: dict[str, Any] = {
    "plant_num": 1,
    "name": "CAMARGOS",
    "subsystem": 1,
    "commission_year": 1960,
    "commission_month": 1,
    "commission_day": 15,
    "downstream_plant": 2,
    "plant_type": 0,
    "min_volume": 120.0,
    "max_volume": 792.0,
    "max_turbine_flow": 220.0,
    "installed_capacity": 46.0,
    "productivity": 0.0085,
}


def text_registry_lines() -> list[str]:
    """Lines of a text registry that uses every block type."""
    evaporation = {"plant_num": 1, **{m: i + 1 for i, m in enumerate(MONTHS)}}
    return [
        "* HIDR.DAT test registry",
        "TITULO  Cadastro de usinas hidreletricas",
        "",
        "CADUSIH",
        "&  usi nome         ss ano  me di ju de t",
        fixed_line(CADUSIH_FIELDS, CAMARGOS_VALUES),
        fixed_line(
            CADUSIH_FIELDS,
            {"plant_num": 2, "name": "ITUTINGA", "subsystem": 1, "max_volume": 11.0},
        ),
        fixed_line(
            CADUSIH_FIELDS,
            {"plant_num": 6, "name": "FURNAS", "subsystem": 1, "downstream_plant": 7,
             "min_volume": 5733.0, "max_volume": 22950.0},
        ),
        "FIM",
        "USITVIAG",
        fixed_line(USITVIAG_FIELDS, {"from_plant": 1, "to_plant": 2, "hours": 12.5}),
        "FIM",
        "POLCOT",
        fixed_line(
            POLYNOMIAL_FIELDS,
            {"plant_num": 1, "degree": 2, "coef0": 881.5, "coef1": 0.25, "coef2": -0.5,
             "coef3": 0.0, "coef4": 0.0, "coef5": 0.0},
        ),
        "FIM",
        "POLARE",
        fixed_line(
            POLYNOMIAL_FIELDS,
            {"plant_num": 1, "degree": 1, "coef0": 10.0, "coef1": 0.1, "coef2": 0.0,
             "coef3": 0.0, "coef4": 0.0, "coef5": 0.0},
        ),
        "FIM",
        "POLJUS",
        fixed_line(
            POLYNOMIAL_FIELDS,
            {"plant_num": 2, "degree": 1, "coef0": 850.0, "coef1": "1.5D+00",
             "coef2": 0.0, "coef3": 0.0, "coef4": 0.0, "coef5": 0.0},
        ),
        "FIM",
        "COEFEVA",
        fixed_line(COEFEVA_FIELDS, evaporation),
        "FIM",
        "CADCONJ",
        fixed_line(
            CADCONJ_FIELDS,
            {"plant_num": 1, "set_num": 1, "num_units": 2, "unit_capacity": 23.0,
             "min_generation": 5.0, "max_turbine_flow": 110.0},
        ),
        "FIM",
    ]


def with_record_type(marker: str, line: str) -> str:
    """Write *marker* into the leading blank columns of a data line."""
    if line[: len(marker)].strip():
        raise ValueError(f"{line!r} has no room for {marker!r}")
    return marker + line[len(marker) :]


def record_type_lines(lines: Iterable[str], keep_markers: bool = True) -> list[str]:
    """
    Rewrite registry lines so every data record starts with its block marker.

    With ``keep_markers=False`` the bare marker lines are dropped and the
    prefixed records alone open their blocks.
    """
    markers = {"CADUSIH", "USITVIAG", "POLCOT", "POLARE", "POLJUS", "COEFEVA", "CADCONJ"}
    out: list[str] = []
    block = None
    for line in lines:
        token = line.split(None, 1)[0] if line.strip() else ""
        if token in markers:
            block = token
            if keep_markers:
                out.append(line)
        elif token == "FIM":
            block = None
            out.append(line)
        elif block is not None and token and line[0] not in "*&":
            out.append(with_record_type(block, line))
        else:
            out.append(line)
    return out


@pytest.fixture
def text_hidr_file(tmp_path: Path) -> Path:
    """A text registry populating every collection."""
    path = tmp_path / "HIDR.DAT"
    path.write_text("\n".join(text_registry_lines()) + "\n", encoding="latin-1")
    return path


@pytest.fixture
def linear_cascade() -> list[Plant]:
    """
    Three plants in one chain.

    Layout:
        3 -> 2 -> 1
    """
    return [
        make_plant(1, None, min_volume=10.0, max_volume=100.0),
        make_plant(2, 1, min_volume=20.0, max_volume=200.0),
        make_plant(3, 2, min_volume=30.0, max_volume=300.0),
    ]


@pytest.fixture
def branching_cascade() -> list[Plant]:
    """
    Two tributaries joining above a sink, plus a separate basin.

    Layout:
        11 -> 13 -> 14
        12 -> 13
        20 (alone)
    """
    return [
        make_plant(11, 13),
        make_plant(12, 13),
        make_plant(13, 14),
        make_plant(14),
        make_plant(20),
    ]
