"""Skriver ett :class:`SieDocument` tillbaka till SIE-text.

Utdata läses in igen av :func:`norrsken.sie.parser.parse_sie` till ett
likvärdigt dokument. Ordningen på saldon och verifikationer normaliseras.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..bas import account_number_to_int
from .dates import format_sie_date
from .models import FiscalYear, SieBalance, SieDocument, SiePosting, Verification
from .parser import COST_CENTER_DIMENSION, PROJECT_DIMENSION

__all__ = ["WriteOptions", "format_amount", "quote", "write_sie"]

_SPECIAL_CHARS = set('"{}')


@dataclass(frozen=True)
class WriteOptions:
    """Huvudposter att skriva ut.

    Fält som lämnas som ``None`` tas från dokumentets egna metadata, och
    saknas de även där utelämnas posten.
    """

    program_name: Optional[str] = None
    program_version: Optional[str] = None
    file_format: Optional[str] = None
    include_flag: bool = True


def format_amount(amount: float) -> str:
    """Två decimaler utan avslutande nollor, ``-0`` skrivs som ``0``."""

    if amount is None or not math.isfinite(amount):
        return "0"
    text = f"{amount:.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def quote(value: Optional[str]) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def _token(value: Optional[str]) -> str:
    """Nakna ord skrivs som de är, övriga citeras."""

    text = "" if value is None else str(value)
    if not text or any(ch.isspace() or ch in _SPECIAL_CHARS for ch in text):
        return quote(text)
    return text


def _fiscal_years(document: SieDocument) -> List[Tuple[int, FiscalYear]]:
    return sorted(
        document.metadata.fiscal_years.items(), key=lambda item: item[0], reverse=True
    )


def _balance_sort_key(balance: SieBalance) -> Tuple[int, int, bool, int, str]:
    number = account_number_to_int(balance.account)
    return (
        balance.kind.rank,
        -balance.year_index,
        number is None,
        number if number is not None else 0,
        balance.account,
    )


def _dimension_field(posting: SiePosting) -> str:
    parts = []
    if posting.cost_center:
        parts.append(f"{COST_CENTER_DIMENSION} {_token(posting.cost_center)}")
    if posting.project:
        parts.append(f"{PROJECT_DIMENSION} {_token(posting.project)}")
    return "{" + " ".join(parts) + "}"


def _header_lines(document: SieDocument, options: WriteOptions) -> Iterable[str]:
    metadata = document.metadata
    if options.include_flag:
        yield "#FLAGGA 0"
    program_name = options.program_name or metadata.program_name
    if program_name:
        line = f"#PROGRAM {quote(program_name)}"
        version = options.program_version or metadata.program_version
        if version:
            line += f" {_token(version)}"
        yield line
    file_format = options.file_format or metadata.file_format
    if file_format:
        yield f"#FORMAT {_token(file_format)}"
    if metadata.generated_date:
        yield f"#GEN {format_sie_date(metadata.generated_date)}"
    if metadata.sie_type is not None:
        yield f"#SIETYP {metadata.sie_type}"
    yield f"#FNAMN {quote(metadata.company_name)}"
    if metadata.org_number:
        yield f"#ORGNR {_token(metadata.org_number)}"
    yield f"#VALUTA {_token(metadata.currency)}"

    for index, year in _fiscal_years(document):
        yield f"#RAR {index} {format_sie_date(year.start)} {format_sie_date(year.end)}"

    if metadata.scope_date:
        yield f"#OMFATTN {format_sie_date(metadata.scope_date)}"
    if metadata.account_plan_type:
        yield f"#KPTYP {_token(metadata.account_plan_type)}"


def _account_lines(document: SieDocument) -> Iterable[str]:
    for account in document.accounts:
        yield f"#KONTO {_token(account.number)} {quote(account.name)}"
        if account.account_type:
            yield f"#KTYP {_token(account.number)} {_token(account.account_type)}"
        if account.tax_code:
            yield f"#SRU {_token(account.number)} {_token(account.tax_code)}"

    for dimension_type in document.dimension_types:
        yield f"#DIM {dimension_type.number} {quote(dimension_type.name)}"
    for dimension in document.dimensions:
        yield (
            f"#OBJEKT {dimension.dimension_type} {_token(dimension.code)} "
            f"{quote(dimension.name)}"
        )


def _balance_lines(document: SieDocument) -> Iterable[str]:
    for balance in sorted(document.balances, key=_balance_sort_key):
        line = (
            f"#{balance.kind.value} {balance.year_index} {_token(balance.account)} "
            f"{format_amount(balance.amount)}"
        )
        if balance.quantity is not None:
            line += f" {format_amount(balance.quantity)}"
        yield line


def _transaction_line(posting: SiePosting, verification: Verification) -> str:
    row_date = ""
    if posting.date is not None and posting.date != verification.date:
        row_date = format_sie_date(posting.date)

    # Med kvantitet måste texten skrivas ut, annars tolkas kvantiteten som text.
    explicit_text = posting.text != verification.text or posting.quantity is not None
    row_text = posting.text if explicit_text else ""

    line = (
        f"#TRANS {_token(posting.account)} {_dimension_field(posting)} "
        f"{format_amount(posting.amount)} {_token(row_date)} {quote(row_text)}"
    )
    if posting.quantity is not None:
        line += f" {format_amount(posting.quantity)}"
    return line


def _verification_lines(document: SieDocument) -> Iterable[str]:
    for verification in document.verifications():
        line = (
            f"#VER {_token(verification.series)} {_token(verification.number)} "
            f"{_token(format_sie_date(verification.date))} {quote(verification.text)}"
        )
        if verification.registration_date:
            line += f" {format_sie_date(verification.registration_date)}"
        yield line
        yield "{"
        for posting in verification.postings:
            yield _transaction_line(posting, verification)
        yield "}"


def write_sie(document: SieDocument, options: Optional[WriteOptions] = None) -> str:
    """Returnerar dokumentet som SIE-text med ``\\n`` som radslut."""

    options = options or WriteOptions()
    lines: List[str] = []
    lines.extend(_header_lines(document, options))
    lines.extend(_account_lines(document))
    lines.extend(_balance_lines(document))
    lines.extend(_verification_lines(document))
    return "\n".join(lines) + "\n"
