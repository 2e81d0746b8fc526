"""Mass unit normalization and conversion to grams.

Formulas are always held in grams; these helpers only translate imported
quantities expressed in other mass units.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

_MASS_UNIT_ALIASES = {
    "g": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "gramme": "g",
    "grammes": "g",
    "kg": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "mg": "mg",
    "milligram": "mg",
    "milligrams": "mg",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
}

_MASS_UNIT_TO_G = {
    "mg": Decimal("0.001"),
    "g": Decimal("1"),
    "kg": Decimal("1000"),
    "lb": Decimal("453.59237"),
    "oz": Decimal("28.349523125"),
}


def normalize_mass_unit(unit: Optional[str]) -> str:
    """Normalize a mass unit to its canonical symbol ("" if unknown)."""
    if not unit:
        return ""
    return _MASS_UNIT_ALIASES.get(str(unit).strip().lower().rstrip("."), "")


def is_mass_unit(unit: Optional[str]) -> bool:
    return normalize_mass_unit(unit) != ""


def convert_mass(value: Decimal | float, from_unit: str, to_unit: str) -> Decimal | None:
    """Convert a mass value between units, None for unknown units."""
    source = normalize_mass_unit(from_unit)
    target = normalize_mass_unit(to_unit)
    if not source or not target:
        return None
    if source == target:
        return _to_decimal(value)
    return _to_decimal(value) * _MASS_UNIT_TO_G[source] / _MASS_UNIT_TO_G[target]


def mass_to_g(value: Decimal | float, unit: Optional[str]) -> Decimal | None:
    """Convert to grams; a missing unit means the value is already grams."""
    if not unit or not str(unit).strip():
        return _to_decimal(value)
    return convert_mass(value, unit, "g")


def _to_decimal(value: Decimal | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
