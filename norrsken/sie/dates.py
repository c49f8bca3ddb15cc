"""Gemensamma hjälpfunktioner för datumtolkning i SIE-koden."""

from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from typing import Optional

__all__ = ["format_sie_date", "parse_sie_date"]


def parse_sie_date(value: Optional[str]) -> Optional[date]:
    """Tolkar ett SIE-datum (``YYYYMMDD``) med ISO-format som reserv."""

    if value is None:
        return None

    text = value.strip()
    if not text:
        return None

    return _parse_sie_date_cached(text)


@lru_cache(maxsize=4096)
def _parse_sie_date_cached(text: str) -> Optional[date]:
    """Tolkar en datumsträng med enkel cache för snabbare massimport."""

    formats = ("%Y%m%d", "%Y-%m-%d")
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    return None


def format_sie_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"
