from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from domain.services.unit_normalizer import mass_to_g

_QUANTITY_PATTERN = re.compile(r"^\s*(?P<number>[-+]?[\d.,\s]*\d)\s*(?P<unit>[^\d\s].*)?$")


def parse_user_number(value: Any) -> Decimal | None:
    """Parse a number typed by a person or read from a spreadsheet cell.

    Accepts "1,234.5", "1.234,5", "12,5" and plain numbers. When both
    separators appear, the last one is the decimal mark.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        if value != value:  # NaN from empty spreadsheet cells
            return None
        return Decimal(str(value))

    text = str(value).strip().replace(" ", "")
    if not text:
        return None

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        head, _, tail = text.rpartition(",")
        if len(tail) == 3 and head.lstrip("+-").isdigit():
            text = head + tail
        else:
            text = text.replace(",", ".")

    try:
        return Decimal(text)
    except (InvalidOperation, ValueError):
        return None


def parse_mass(value: Any, default_unit: str | None = None) -> Decimal | None:
    """Parse a quantity such as "350 g" or "1,2 kg" into grams."""
    if value is None or isinstance(value, (int, float, Decimal)):
        amount = parse_user_number(value)
        if amount is None:
            return None
        return mass_to_g(amount, default_unit)

    match = _QUANTITY_PATTERN.match(str(value))
    if not match:
        return None
    amount = parse_user_number(match.group("number"))
    if amount is None:
        return None
    unit = (match.group("unit") or default_unit or "").strip()
    return mass_to_g(amount, unit)
