"""Konvertering av belopp i SIE-filer till flyttal."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[int, float, Decimal]


def parse_amount(value: Optional[Union[str, Number]]) -> float:
    """Tolkar ett SIE-belopp och faller tillbaka till 0.

    Tomma eller otolkbara värden blir ``0.0`` och ``-0.0`` viks till ``0.0``
    så att negativa nollor aldrig syns i beräkningar eller utdata.
    """

    if value is None or value == "":
        return 0.0

    if isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        numeric = float(value)
    else:
        text = "".join(ch for ch in str(value) if not ch.isspace())
        if not text:
            return 0.0
        if text.count(",") == 1 and "." not in text:
            text = text.replace(",", ".")
        try:
            numeric = float(text)
        except ValueError:
            return 0.0

    if not math.isfinite(numeric):
        return 0.0
    if numeric == 0.0:
        return 0.0
    return numeric


def parse_optional_amount(value: Optional[str]) -> Optional[float]:
    """Som :func:`parse_amount`, men saknat fält ger ``None``."""

    if value is None or value == "":
        return None
    return parse_amount(value)


def to_decimal(value: Number) -> Decimal:
    """Omvandlar ett belopp till ``Decimal`` via strängform för exakta summor."""

    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


__all__ = ["parse_amount", "parse_optional_amount", "to_decimal"]
