"""Samlingsmodul för generella hjälpare."""

from .formatting import format_currency, format_difference, format_percent, format_ratio
from .number_parsing import parse_amount, parse_optional_amount, to_decimal

__all__ = [
    "format_currency",
    "format_difference",
    "format_percent",
    "format_ratio",
    "parse_amount",
    "parse_optional_amount",
    "to_decimal",
]
