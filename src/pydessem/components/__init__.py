"""Plant registry components (plants, auxiliary tables and the cascade)."""

from __future__ import annotations

from pydessem.components.cascade import CascadeGraph, StorageTotals, UnresolvedReference
from pydessem.components.plant import (
    CurveKind,
    EvaporationCoefficients,
    Plant,
    PolynomialCurve,
    TravelTime,
    UnitSet,
)
from pydessem.components.registry import PlantRegistry

__all__ = [
    "Plant",
    "UnitSet",
    "TravelTime",
    "PolynomialCurve",
    "CurveKind",
    "EvaporationCoefficients",
    "PlantRegistry",
    "CascadeGraph",
    "StorageTotals",
    "UnresolvedReference",
]
