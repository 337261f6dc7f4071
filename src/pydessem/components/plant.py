"""
Hydroelectric plant entities for the DESSEM plant registry.

This module provides the record types decoded from ``HIDR.DAT``:
plants, generating-unit sets, travel times between plants,
polynomial curves and monthly evaporation coefficients. All entities
are immutable once decoded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CurveKind(Enum):
    """Polynomial curve families of the plant registry."""

    VOLUME_ELEVATION = "POLCOT"  # reservoir volume -> elevation
    VOLUME_AREA = "POLARE"  # reservoir volume -> surface area
    TAILRACE = "POLJUS"  # discharge -> tailrace elevation


@dataclass(frozen=True)
class Plant:
    """
    A hydroelectric plant.

    Attributes:
        plant_num: Plant number (registry key; 0 marks a placeholder row)
        name: Plant name
        subsystem: Electrical subsystem the plant belongs to
        downstream_plant: Plant receiving this plant's discharge (None = sink)
        diversion_plant: Plant receiving diverted flow
        min_volume: Minimum reservoir volume (hm3)
        max_volume: Maximum reservoir volume (hm3)
        installed_capacity: Installed capacity (MW)
        productivity: Specific productivity (MW/(m3/s)/m)
        commission_year: Year of commissioning (text files only)
        commission_month: Month of commissioning (text files only)
        commission_day: Day of commissioning (text files only)
        plant_type: Plant type code (text files only)
        max_turbine_flow: Maximum turbined flow, m3/s (text files only)
    """

    plant_num: int
    name: str = ""
    subsystem: int | None = None
    downstream_plant: int | None = None
    diversion_plant: int | None = None
    min_volume: float | None = None
    max_volume: float | None = None
    installed_capacity: float | None = None
    productivity: float | None = None
    commission_year: int | None = None
    commission_month: int | None = None
    commission_day: int | None = None
    plant_type: int | None = None
    max_turbine_flow: float | None = None

    @property
    def is_placeholder(self) -> bool:
        """Return True for padding rows that carry no plant."""
        return self.plant_num == 0

    @property
    def useful_volume(self) -> float | None:
        """Maximum minus minimum volume, when both are known."""
        if self.min_volume is None or self.max_volume is None:
            return None
        return self.max_volume - self.min_volume

    def __repr__(self) -> str:
        return f"Plant(plant_num={self.plant_num}, name='{self.name}')"


@dataclass(frozen=True)
class UnitSet:
    """
    A set of identical generating units within a plant.

    Attributes:
        plant_num: Owning plant
        set_num: Set number within the plant
        num_units: Number of units in the set
        unit_capacity: Capacity of each unit (MW)
        min_generation: Minimum generation per unit (MW)
        max_turbine_flow: Maximum turbined flow per unit (m3/s)
    """

    plant_num: int
    set_num: int
    num_units: int
    unit_capacity: float
    min_generation: float = 0.0
    max_turbine_flow: float = 0.0

    @property
    def key(self) -> tuple[int, int]:
        return (self.plant_num, self.set_num)

    @property
    def total_capacity(self) -> float:
        return self.num_units * self.unit_capacity


@dataclass(frozen=True)
class TravelTime:
    """Water travel time between a plant and its downstream neighbour."""

    from_plant: int
    to_plant: int
    hours: float

    @property
    def key(self) -> tuple[int, int]:
        return (self.from_plant, self.to_plant)


@dataclass(frozen=True)
class PolynomialCurve:
    """
    A polynomial characteristic curve of a plant.

    Coefficients are stored constant term first, so the curve value is
    ``sum(c[i] * x**i)``.

    Attributes:
        plant_num: Owning plant
        kind: Curve family
        degree: Declared polynomial degree
        coefficients: Ordered coefficients, constant term first
    """

    plant_num: int
    kind: CurveKind
    degree: int
    coefficients: tuple[float, ...]

    def evaluate(self, x: float) -> float:
        """Evaluate the polynomial at *x* (Horner's rule)."""
        result = 0.0
        for coef in reversed(self.coefficients):
            result = result * x + coef
        return result


@dataclass(frozen=True)
class EvaporationCoefficients:
    """Monthly evaporation coefficients (mm), January first."""

    plant_num: int
    values: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.values) != 12:
            raise ValueError(f"Expected 12 monthly values, got {len(self.values)}")

    def for_month(self, month: int) -> float:
        """Return the coefficient for *month* (1 = January)."""
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be in 1..12, got {month}")
        return self.values[month - 1]
