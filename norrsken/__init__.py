"""Norrsken-bibliotekets gränssnitt."""

from __future__ import annotations

from importlib import import_module
from typing import Any

from .constants import APP_TITLE, DEFAULT_COMPANY_NAME, DEFAULT_CURRENCY

__all__ = [
    "APP_TITLE",
    "DEFAULT_COMPANY_NAME",
    "DEFAULT_CURRENCY",
    "bas",
    "kpi",
    "sie",
]

_MODULE_MAP = {
    "bas": "norrsken.bas",
    "kpi": "norrsken.kpi",
    "sie": "norrsken.sie",
}


def __getattr__(name: str) -> Any:
    """Laddar moduler först när de faktiskt används."""

    if name in _MODULE_MAP:
        module = import_module(_MODULE_MAP[name])
        globals()[name] = module
        return module
    raise AttributeError(f"module 'norrsken' has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(set(__all__ + list(globals().keys())))
