"""Teckenkodning för SIE-filer.

SIE-filer från äldre bokföringsprogram är oftast kodade i CP437 (``#FORMAT
PC8``), men Latin-1 och UTF-8 förekommer också.
"""

from __future__ import annotations

import codecs
import logging
from pathlib import Path
from typing import Union

_LOGGER = logging.getLogger(__name__)

__all__ = ["decode_sie_bytes", "detect_encoding", "encode_sie_text", "read_sie_file"]

_SCAN_LENGTH = 4096
# å, ä och ö i respektive kodning.
_CP437_MARKERS = frozenset({0x84, 0x86, 0x94})
_LATIN1_MARKERS = frozenset({0xE4, 0xE5, 0xF6})
_PCUTF8_DECLARATION = b"#FORMAT PCUTF8"


def detect_encoding(data: bytes) -> str:
    """Gissar kodningen utifrån BOM och svenska tecken i filens början."""

    if data.startswith(codecs.BOM_UTF8):
        return "utf-8-sig"

    sample = data[:_SCAN_LENGTH]
    if _PCUTF8_DECLARATION in sample.upper():
        return "utf-8"
    has_cp437 = any(byte in _CP437_MARKERS for byte in sample)
    has_latin1 = any(byte in _LATIN1_MARKERS for byte in sample)
    if has_latin1 and not has_cp437:
        return "iso-8859-1"
    return "cp437"


def decode_sie_bytes(data: bytes) -> str:
    encoding = detect_encoding(data)
    _LOGGER.debug("Avkodar SIE-data som %s", encoding)
    return data.decode(encoding, errors="replace")


def encode_sie_text(text: str, file_format: str = "PCUTF8") -> bytes:
    """Kodar text enligt ``#FORMAT``: PC8 blir CP437, annars UTF-8."""

    if file_format.strip().upper() == "PC8":
        return text.encode("cp437", errors="replace")
    return text.encode("utf-8")


def read_sie_file(path: Union[str, Path]) -> str:
    return decode_sie_bytes(Path(path).read_bytes())
