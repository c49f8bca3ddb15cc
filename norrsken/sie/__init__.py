"""Läsning och skrivning av SIE-filer."""

from __future__ import annotations

from .encoding import decode_sie_bytes, detect_encoding, encode_sie_text, read_sie_file
from .models import (
    BalanceKind,
    FiscalYear,
    SieAccount,
    SieBalance,
    SieDimension,
    SieDimensionType,
    SieDocument,
    SieMetadata,
    SiePosting,
    Verification,
)
from .parser import SieParseError, parse_sie
from .tokens import SieTokenError
from .writer import WriteOptions, write_sie

__all__ = [
    "BalanceKind",
    "FiscalYear",
    "SieAccount",
    "SieBalance",
    "SieDimension",
    "SieDimensionType",
    "SieDocument",
    "SieMetadata",
    "SieParseError",
    "SiePosting",
    "SieTokenError",
    "Verification",
    "WriteOptions",
    "decode_sie_bytes",
    "detect_encoding",
    "encode_sie_text",
    "parse_sie",
    "read_sie_file",
    "write_sie",
]
