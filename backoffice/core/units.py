"""Measurement units and the conversions the costing engine relies on.

Prices are always stored per kilogram-equivalent, so every cost calculation
goes through ``to_canonical``. Stock comparisons between a recipe line and an
ingredient stocked in a different unit go through the gram bridge
(``to_grams``/``from_grams``). Litres and millilitres are treated as mass
(1 l == 1 kg). ``unit`` is a discrete count and never scales.

Unknown units are not an error anywhere in this module: the quantity passes
through unchanged so data entry is never blocked by a typo.
"""

from __future__ import annotations

from enum import Enum


class Unit(str, Enum):
    KG = "kg"
    G = "g"
    ML = "ml"
    L = "l"
    UNIT = "unit"


LARGE_UNITS = {Unit.KG.value, Unit.L.value}
SMALL_UNITS = {Unit.G.value, Unit.ML.value}

SMALL_PER_LARGE = 1000


def normalize_unit(value: str | Unit | None) -> str:
    """Return a lowercase unit string; unknown values are kept as entered."""

    if isinstance(value, Unit):
        return value.value
    return (value or "").strip().lower()


def to_canonical(quantity: float, unit: str | Unit | None) -> float:
    """Express ``quantity`` in kilogram-equivalents (or a plain count)."""

    if normalize_unit(unit) in SMALL_UNITS:
        return quantity / SMALL_PER_LARGE
    return quantity


def from_canonical(value: float, unit: str | Unit | None) -> float:
    if normalize_unit(unit) in SMALL_UNITS:
        return value * SMALL_PER_LARGE
    return value


def to_grams(quantity: float, unit: str | Unit | None) -> float:
    """Express ``quantity`` in grams (or a plain count for ``unit``)."""

    if normalize_unit(unit) in LARGE_UNITS:
        return quantity * SMALL_PER_LARGE
    return quantity


def from_grams(grams: float, unit: str | Unit | None) -> float:
    if normalize_unit(unit) in LARGE_UNITS:
        return grams / SMALL_PER_LARGE
    return grams


def convert_quantity(quantity: float, from_unit: str | Unit | None, to_unit: str | Unit | None) -> float:
    """Convert between two units through the gram bridge."""

    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if source == target:
        return quantity
    return from_grams(to_grams(quantity, source), target)


__all__ = [
    "LARGE_UNITS",
    "SMALL_UNITS",
    "Unit",
    "convert_quantity",
    "from_canonical",
    "from_grams",
    "normalize_unit",
    "to_canonical",
    "to_grams",
]
