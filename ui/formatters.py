from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from domain.models import Rounding
from domain.services.formula_analyzer import Finding
from domain.services.number_parser import parse_user_number


def _to_decimal(value: Any) -> Decimal | None:
    return parse_user_number(value)


def fmt_decimal(value: Any, decimals: int = 2, thousands: bool = True) -> str:
    """Round for display only; the engines never round."""
    dec = _to_decimal(value)
    if dec is None:
        return "-"
    quant = Decimal("1") if decimals <= 0 else Decimal(1).scaleb(-decimals)
    dec = dec.quantize(quant, rounding=ROUND_HALF_UP)
    if dec == 0:
        dec = abs(dec)
    pattern = f"{{:,.{decimals}f}}" if thousands else f"{{:.{decimals}f}}"
    return pattern.format(dec)


def fmt_weight(value: Any, rounding: Rounding = Rounding.WHOLE_GRAM) -> str:
    return f"{fmt_decimal(value, decimals=rounding.decimal_places)} g"


def fmt_percent(value: Any, decimals: int = 1) -> str:
    dec = _to_decimal(value)
    if dec is None:
        return "-"
    return f"{fmt_decimal(dec, decimals=decimals, thousands=False)}%"


def fmt_finding(finding: Finding, decimals: int = 1) -> str:
    label = f"[{finding.severity.value.upper()}] {finding.category}: {finding.message}"
    if finding.value is None:
        return label
    return f"{label} ({fmt_decimal(finding.value, decimals=decimals, thousands=False)})"
