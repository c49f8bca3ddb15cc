"""Formattering av belopp, procentsatser och kvoter för visning."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

MISSING = "—"


def _round_half_up(value: Optional[float], decimals: int = 0) -> Optional[Decimal]:
    """Avrundar med kommersiell avrundning (0.5 -> 1)."""

    if value is None or isinstance(value, bool):
        return None

    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(numeric):
        return None

    exponent = Decimal(1).scaleb(-decimals)
    try:
        quantized = Decimal(str(numeric)).quantize(exponent, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None

    if quantized == 0:
        return abs(quantized)
    return quantized


def _format_thousands(value: Decimal, decimals: int = 0) -> str:
    """Formaterar tal med mellanslag som tusentalsavgränsare och decimalkomma."""

    text = f"{value:,.{decimals}f}"
    return text.replace(",", " ").replace(".", ",")


def format_currency(value: Optional[float]) -> str:
    """Formaterar ett belopp till heltal med mellanslag som tusentalsavgränsare."""

    rounded = _round_half_up(value)
    if rounded is None:
        return MISSING
    return _format_thousands(rounded)


def format_difference(a: Optional[float], b: Optional[float]) -> str:
    """Formaterar differensen mellan två belopp."""

    if a is None or b is None:
        return MISSING

    try:
        difference = float(a) - float(b)
    except (TypeError, ValueError):
        return MISSING

    return format_currency(difference)


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    """Formaterar en procentsats, t.ex. ``12,5 %``."""

    rounded = _round_half_up(value, decimals)
    if rounded is None:
        return MISSING
    return f"{_format_thousands(rounded, decimals)} %"


def format_ratio(value: Optional[float], decimals: int = 2) -> str:
    """Formaterar en kvot (t.ex. kassalikviditet) med decimalkomma."""

    rounded = _round_half_up(value, decimals)
    if rounded is None:
        return MISSING
    return _format_thousands(rounded, decimals)


__all__ = [
    "MISSING",
    "format_currency",
    "format_difference",
    "format_percent",
    "format_ratio",
]
