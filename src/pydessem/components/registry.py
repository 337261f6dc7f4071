"""
Plant registry aggregate.

:class:`PlantRegistry` is the single model produced by both HIDR.DAT
decoders. It is immutable: every collection is a tuple and the derived
views (plant lookup, cascade graph) are computed once on first access.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pydessem.components.cascade import CascadeGraph
from pydessem.components.plant import (
    CurveKind,
    EvaporationCoefficients,
    Plant,
    PolynomialCurve,
    TravelTime,
    UnitSet,
)
from pydessem.core.base_component import BaseComponent
from pydessem.core.exceptions import ValidationError

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)

# Sentinel for a missing optional integer in array form
INT_MISSING = np.iinfo(np.int64).min

_PLANT_INT_FIELDS = (
    "plant_num",
    "subsystem",
    "downstream_plant",
    "diversion_plant",
    "commission_year",
    "commission_month",
    "commission_day",
    "plant_type",
)
_PLANT_FLOAT_FIELDS = (
    "min_volume",
    "max_volume",
    "installed_capacity",
    "productivity",
    "max_turbine_flow",
)


@dataclass(frozen=True)
class PlantRegistry(BaseComponent):
    """
    All collections decoded from one HIDR.DAT file.

    A registry decoded from the binary layout only has plants; the
    other collections are always empty (see :attr:`has_auxiliary_data`).

    Attributes:
        plants: Plants in file order, placeholders included
        unit_sets: Generating-unit sets (text only)
        travel_times: Travel times between plants (text only)
        volume_elevation: Volume -> elevation polynomials (text only)
        volume_area: Volume -> area polynomials (text only)
        tailrace: Discharge -> tailrace elevation polynomials (text only)
        evaporation: Monthly evaporation coefficients (text only)
        source_format: 'binary' or 'text'
        filepath: File the registry was decoded from
    """

    plants: tuple[Plant, ...] = ()
    unit_sets: tuple[UnitSet, ...] = ()
    travel_times: tuple[TravelTime, ...] = ()
    volume_elevation: tuple[PolynomialCurve, ...] = ()
    volume_area: tuple[PolynomialCurve, ...] = ()
    tailrace: tuple[PolynomialCurve, ...] = ()
    evaporation: tuple[EvaporationCoefficients, ...] = ()
    source_format: str = field(default="text", compare=False)
    filepath: Path | None = field(default=None, compare=False)

    @property
    def n_items(self) -> int:
        """Return number of plant rows (placeholders included)."""
        return len(self.plants)

    @property
    def n_plants(self) -> int:
        """Return number of plants with a positive plant number."""
        return len(self.plant_map)

    @property
    def has_auxiliary_data(self) -> bool:
        """True if any non-plant collection is populated.

        Binary-derived registries always return False.
        """
        return any(
            (
                self.unit_sets,
                self.travel_times,
                self.volume_elevation,
                self.volume_area,
                self.tailrace,
                self.evaporation,
            )
        )

    # -- lookups -----------------------------------------------------------
    @cached_property
    def plant_map(self) -> dict[int, Plant]:
        """Plants with a positive plant number, keyed by number."""
        result: dict[int, Plant] = {}
        for plant in self.plants:
            if plant.plant_num <= 0:
                continue
            if plant.plant_num in result:
                logger.warning(
                    "Duplicate plant number %d (%s); keeping %s",
                    plant.plant_num,
                    plant.name,
                    result[plant.plant_num].name,
                )
                continue
            result[plant.plant_num] = plant
        return result

    def get_plant(self, plant_num: int) -> Plant:
        """Get a plant by number."""
        return self.plant_map[plant_num]

    def unit_sets_for(self, plant_num: int) -> list[UnitSet]:
        """Get the unit sets of a plant, ordered by set number."""
        return sorted((u for u in self.unit_sets if u.plant_num == plant_num), key=lambda u: u.set_num)

    def curves(self, kind: CurveKind) -> tuple[PolynomialCurve, ...]:
        """Get every curve of one family."""
        if kind is CurveKind.VOLUME_ELEVATION:
            return self.volume_elevation
        if kind is CurveKind.VOLUME_AREA:
            return self.volume_area
        return self.tailrace

    def curves_for(self, plant_num: int, kind: CurveKind | None = None) -> list[PolynomialCurve]:
        """Get the curves of a plant, optionally of one family."""
        kinds = [kind] if kind is not None else list(CurveKind)
        return [c for k in kinds for c in self.curves(k) if c.plant_num == plant_num]

    def evaporation_for(self, plant_num: int) -> EvaporationCoefficients | None:
        """Get the evaporation coefficients of a plant, if any."""
        for coeffs in self.evaporation:
            if coeffs.plant_num == plant_num:
                return coeffs
        return None

    def travel_time(self, from_plant: int, to_plant: int) -> TravelTime | None:
        """Get the travel time between two plants, if any."""
        for tt in self.travel_times:
            if tt.key == (from_plant, to_plant):
                return tt
        return None

    @cached_property
    def cascade(self) -> CascadeGraph:
        """Cascade graph built from the plants on first access."""
        return CascadeGraph(self.plants)

    # -- checks ------------------------------------------------------------
    def validate(self) -> None:
        """
        Check plant-number uniqueness and cascade consistency.

        Decoding never calls this; callers decide whether to.

        Raises:
            ValidationError: Listing every problem found
        """
        errors: list[str] = []
        seen: set[int] = set()
        for plant in self.plants:
            if plant.plant_num <= 0:
                continue
            if plant.plant_num in seen:
                errors.append(f"Duplicate plant number {plant.plant_num}")
            seen.add(plant.plant_num)
        try:
            self.cascade.validate()
        except ValidationError as exc:
            errors.extend(exc.errors)
        if errors:
            raise ValidationError(f"Registry has {len(errors)} problem(s)", errors=errors)

    # -- export ------------------------------------------------------------
    def to_arrays(self) -> dict[str, NDArray]:
        """
        Convert the registry to flat numpy arrays.

        Keys are ``"<collection>/<column>"``. Missing optional integers
        are :data:`INT_MISSING`, missing floats are NaN and names are
        unicode arrays. The layout is stable and deterministic.
        """
        arrays: dict[str, NDArray] = {}
        for name in _PLANT_INT_FIELDS:
            arrays[f"plants/{name}"] = np.array(
                [_int_or_missing(getattr(p, name)) for p in self.plants], dtype=np.int64
            )
        for name in _PLANT_FLOAT_FIELDS:
            arrays[f"plants/{name}"] = np.array(
                [_float_or_nan(getattr(p, name)) for p in self.plants], dtype=np.float64
            )
        arrays["plants/name"] = np.array([p.name for p in self.plants], dtype=np.str_)

        for f in fields(UnitSet):
            dtype = np.int64 if f.name in ("plant_num", "set_num", "num_units") else np.float64
            arrays[f"unit_sets/{f.name}"] = np.array(
                [getattr(u, f.name) for u in self.unit_sets], dtype=dtype
            )

        arrays["travel_times/from_plant"] = np.array(
            [t.from_plant for t in self.travel_times], dtype=np.int64
        )
        arrays["travel_times/to_plant"] = np.array(
            [t.to_plant for t in self.travel_times], dtype=np.int64
        )
        arrays["travel_times/hours"] = np.array(
            [t.hours for t in self.travel_times], dtype=np.float64
        )

        for kind in CurveKind:
            curves = self.curves(kind)
            width = max((len(c.coefficients) for c in curves), default=0)
            coeffs = np.full((len(curves), width), np.nan, dtype=np.float64)
            for i, curve in enumerate(curves):
                coeffs[i, : len(curve.coefficients)] = curve.coefficients
            prefix = f"curves/{kind.name.lower()}"
            arrays[f"{prefix}/plant_num"] = np.array([c.plant_num for c in curves], dtype=np.int64)
            arrays[f"{prefix}/degree"] = np.array([c.degree for c in curves], dtype=np.int64)
            arrays[f"{prefix}/coefficients"] = coeffs

        arrays["evaporation/plant_num"] = np.array(
            [e.plant_num for e in self.evaporation], dtype=np.int64
        )
        arrays["evaporation/values"] = np.array(
            [e.values for e in self.evaporation], dtype=np.float64
        ).reshape(len(self.evaporation), 12)
        return arrays

    @classmethod
    def from_arrays(
        cls,
        arrays: dict[str, NDArray],
        source_format: str = "text",
        filepath: Path | None = None,
    ) -> PlantRegistry:
        """Rebuild a registry from :meth:`to_arrays` output."""
        n_plants = len(arrays["plants/plant_num"])
        plants = []
        for i in range(n_plants):
            values: dict[str, object] = {"name": str(arrays["plants/name"][i])}
            for name in _PLANT_INT_FIELDS:
                values[name] = _missing_to_none(int(arrays[f"plants/{name}"][i]))
            for name in _PLANT_FLOAT_FIELDS:
                values[name] = _nan_to_none(float(arrays[f"plants/{name}"][i]))
            if values["plant_num"] is None:
                values["plant_num"] = 0
            plants.append(Plant(**values))  # type: ignore[arg-type]

        unit_sets = tuple(
            UnitSet(
                plant_num=int(arrays["unit_sets/plant_num"][i]),
                set_num=int(arrays["unit_sets/set_num"][i]),
                num_units=int(arrays["unit_sets/num_units"][i]),
                unit_capacity=float(arrays["unit_sets/unit_capacity"][i]),
                min_generation=float(arrays["unit_sets/min_generation"][i]),
                max_turbine_flow=float(arrays["unit_sets/max_turbine_flow"][i]),
            )
            for i in range(len(arrays["unit_sets/plant_num"]))
        )
        travel_times = tuple(
            TravelTime(int(a), int(b), float(h))
            for a, b, h in zip(
                arrays["travel_times/from_plant"],
                arrays["travel_times/to_plant"],
                arrays["travel_times/hours"],
            )
        )

        curves: dict[CurveKind, tuple[PolynomialCurve, ...]] = {}
        for kind in CurveKind:
            prefix = f"curves/{kind.name.lower()}"
            rows = []
            for num, degree, coeffs in zip(
                arrays[f"{prefix}/plant_num"],
                arrays[f"{prefix}/degree"],
                arrays[f"{prefix}/coefficients"],
            ):
                kept = tuple(float(c) for c in coeffs if not np.isnan(c))
                rows.append(PolynomialCurve(int(num), kind, int(degree), kept))
            curves[kind] = tuple(rows)

        evaporation = tuple(
            EvaporationCoefficients(int(num), tuple(float(v) for v in values))
            for num, values in zip(arrays["evaporation/plant_num"], arrays["evaporation/values"])
        )

        return cls(
            plants=tuple(plants),
            unit_sets=unit_sets,
            travel_times=travel_times,
            volume_elevation=curves[CurveKind.VOLUME_ELEVATION],
            volume_area=curves[CurveKind.VOLUME_AREA],
            tailrace=curves[CurveKind.TAILRACE],
            evaporation=evaporation,
            source_format=source_format,
            filepath=filepath,
        )

    def plants_dataframe(self) -> pd.DataFrame:
        """Return the plants as a pandas DataFrame, one row per plant."""
        import pandas as pd

        columns = [f.name for f in fields(Plant)]
        return pd.DataFrame([asdict(p) for p in self.plants], columns=columns)

    def summary(self) -> dict[str, int | str]:
        """Return collection sizes, for reporting."""
        return {
            "source_format": self.source_format,
            "plant_rows": len(self.plants),
            "plants": self.n_plants,
            "unit_sets": len(self.unit_sets),
            "travel_times": len(self.travel_times),
            "volume_elevation": len(self.volume_elevation),
            "volume_area": len(self.volume_area),
            "tailrace": len(self.tailrace),
            "evaporation": len(self.evaporation),
        }

    def __repr__(self) -> str:
        return (
            f"PlantRegistry(source_format='{self.source_format}', "
            f"n_plants={len(self.plants)}, auxiliary={self.has_auxiliary_data})"
        )


def _int_or_missing(value: int | None) -> int:
    return INT_MISSING if value is None else value


def _float_or_nan(value: float | None) -> float:
    return float("nan") if value is None else value


def _missing_to_none(value: int) -> int | None:
    return None if value == INT_MISSING else value


def _nan_to_none(value: float) -> float | None:
    return None if np.isnan(value) else value
