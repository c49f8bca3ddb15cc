"""Gemensamma inställningar som läses från miljövariabler."""

from __future__ import annotations

import os
from typing import Optional

__all__ = [
    "CORPORATE_TAX_RATE_OVERRIDE",
    "OWNER_DEBT_AS_EQUITY",
    "RECONCILIATION_TOLERANCE",
    "DEFAULT_RECONCILIATION_TOLERANCE",
]

DEFAULT_RECONCILIATION_TOLERANCE = 0.01


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "ja", "on", "yes"}:
        return True
    if normalized in {"0", "false", "nej", "off", "no"}:
        return False
    return default


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None:
        return None
    try:
        return float(value.strip().replace(",", "."))
    except ValueError:
        return None


CORPORATE_TAX_RATE_OVERRIDE = _env_float("NORRSKEN_CORPORATE_TAX_RATE")
OWNER_DEBT_AS_EQUITY = _env_flag("NORRSKEN_OWNER_DEBT_AS_EQUITY", default=True)
_tolerance = _env_float("NORRSKEN_RECONCILIATION_TOLERANCE")
RECONCILIATION_TOLERANCE = (
    DEFAULT_RECONCILIATION_TOLERANCE if _tolerance is None else _tolerance
)
