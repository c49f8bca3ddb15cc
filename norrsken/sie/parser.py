"""Inläsning av SIE-filer (typ 1-4) till :class:`SieDocument`."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from ..bas import account_group
from ..constants import DEFAULT_COMPANY_NAME, DEFAULT_CURRENCY
from ..helpers.number_parsing import parse_amount, parse_optional_amount
from .dates import parse_sie_date
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
)
from .tokens import (
    Field,
    SieTokenError,
    field_text,
    is_date_token,
    meaningful_trailing_fields,
    split_fields,
    tokenize,
)

_LOGGER = logging.getLogger(__name__)

COST_CENTER_DIMENSION = "1"
PROJECT_DIMENSION = "6"

_SKIPPED_TRANSACTION_LABELS = {"BTRANS", "RTRANS"}


class SieParseError(ValueError):
    """Filen är strukturellt trasig och kan inte läsas vidare."""

    def __init__(
        self, message: str, line_number: Optional[int] = None, line: Optional[str] = None
    ) -> None:
        self.message = message
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"Rad {line_number}: {message}"
        super().__init__(message)


def _field(fields: Sequence[Field], index: int) -> str:
    if index < len(fields):
        return field_text(fields[index])
    return ""


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_dimensions(text: str) -> Dict[str, str]:
    """Tolkar dimensionspar som ``1 "100" 6 "P1"`` till en ordlista."""

    try:
        values = [field_text(item) for item in split_fields(text)]
    except SieTokenError:
        values = text.split()
    pairs: Dict[str, str] = {}
    for index in range(0, len(values) - 1, 2):
        pairs[values[index]] = values[index + 1]
    return pairs


class _SieParser:
    """Samlar upp poster rad för rad och bygger ett fryst dokument på slutet."""

    def __init__(self) -> None:
        self.company_name = DEFAULT_COMPANY_NAME
        self.currency = DEFAULT_CURRENCY
        self.sie_type: Optional[int] = None
        self.generated_date: Optional[date] = None
        self.org_number: Optional[str] = None
        self.fiscal_years: Dict[int, FiscalYear] = {}
        self.scope_date: Optional[date] = None
        self.program_name: Optional[str] = None
        self.program_version: Optional[str] = None
        self.file_format: Optional[str] = None
        self.account_plan_type: Optional[str] = None

        self.account_names: Dict[str, str] = {}
        self.tax_codes: Dict[str, str] = {}
        self.account_types: Dict[str, str] = {}
        self.dimension_types: List[SieDimensionType] = []
        self.dimensions: List[SieDimension] = []
        self.postings: List[SiePosting] = []
        self.balances: List[SieBalance] = []
        self._unknown_labels: Set[str] = set()
        self._current_label = ""

        self._handlers: Dict[str, Callable[[List[Field], int], None]] = {
            "FLAGGA": self._ignore,
            "PROGRAM": self._program,
            "FORMAT": self._format,
            "SIETYP": self._sie_type,
            "FNAMN": self._company_name,
            "VALUTA": self._currency,
            "GEN": self._generated,
            "ORGNR": self._org_number,
            "RAR": self._fiscal_year,
            "OMFATTN": self._scope,
            "KPTYP": self._account_plan_type,
            "KONTO": self._account,
            "KTYP": self._account_type,
            "SRU": self._tax_code,
            "DIM": self._dimension_type,
            "OBJEKT": self._dimension,
            "IB": self._balance,
            "UB": self._balance,
            "RES": self._balance,
        }

    def parse(self, text: str) -> SieDocument:
        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        index = 0
        while index < len(lines):
            line = lines[index]
            stripped = line.strip()
            if stripped == "}":
                raise SieParseError("Oväntad '}' utanför verifikation.", index + 1, line)
            if stripped == "{":
                raise SieParseError("Oväntad '{' utan föregående #VER.", index + 1, line)

            parsed = self._tokenize(line, index)
            if parsed is None:
                index += 1
                continue

            label, fields = parsed
            if label == "VER":
                index = self._verification(lines, index, fields)
                continue

            handler = self._handlers.get(label)
            if handler is None:
                if label not in self._unknown_labels:
                    _LOGGER.debug("Ignorerar okänd post #%s (rad %d)", label, index + 1)
                    self._unknown_labels.add(label)
            else:
                self._current_label = label
                handler(fields, index + 1)
            index += 1

        document = self._build()
        _LOGGER.debug(
            "Läste SIE-fil: %d konton, %d saldon, %d transaktioner",
            len(document.accounts),
            len(document.balances),
            len(document.postings),
        )
        return document

    @staticmethod
    def _tokenize(line: str, index: int) -> Optional[Tuple[str, List[Field]]]:
        try:
            return tokenize(line)
        except SieTokenError as exc:
            raise SieParseError(str(exc), index + 1, line) from exc

    def _build(self) -> SieDocument:
        accounts = tuple(
            SieAccount(
                number=number,
                name=name,
                group=account_group(number),
                tax_code=self.tax_codes.get(number),
                account_type=self.account_types.get(number),
            )
            for number, name in self.account_names.items()
        )
        metadata = SieMetadata(
            company_name=self.company_name,
            currency=self.currency,
            sie_type=self.sie_type,
            generated_date=self.generated_date,
            org_number=self.org_number,
            fiscal_years=self.fiscal_years,
            scope_date=self.scope_date,
            program_name=self.program_name,
            program_version=self.program_version,
            file_format=self.file_format,
            account_plan_type=self.account_plan_type,
        )
        return SieDocument(
            metadata=metadata,
            accounts=accounts,
            dimensions=tuple(self.dimensions),
            postings=tuple(self.postings),
            balances=tuple(self.balances),
            dimension_types=tuple(self.dimension_types),
        )

    # Huvud

    def _ignore(self, fields: List[Field], line_number: int) -> None:
        return None

    def _program(self, fields: List[Field], line_number: int) -> None:
        self.program_name = _field(fields, 0) or None
        self.program_version = _field(fields, 1) or None

    def _format(self, fields: List[Field], line_number: int) -> None:
        self.file_format = _field(fields, 0) or None

    def _sie_type(self, fields: List[Field], line_number: int) -> None:
        self.sie_type = _parse_int(_field(fields, 0))

    def _company_name(self, fields: List[Field], line_number: int) -> None:
        self.company_name = _field(fields, 0) or DEFAULT_COMPANY_NAME

    def _currency(self, fields: List[Field], line_number: int) -> None:
        self.currency = _field(fields, 0) or DEFAULT_CURRENCY

    def _generated(self, fields: List[Field], line_number: int) -> None:
        self.generated_date = parse_sie_date(_field(fields, 0))

    def _org_number(self, fields: List[Field], line_number: int) -> None:
        self.org_number = _field(fields, 0) or None

    def _fiscal_year(self, fields: List[Field], line_number: int) -> None:
        year_index = _parse_int(_field(fields, 0))
        start = parse_sie_date(_field(fields, 1))
        end = parse_sie_date(_field(fields, 2))
        if year_index is None or start is None or end is None:
            _LOGGER.warning("Hoppar över ogiltig #RAR-post på rad %d", line_number)
            return
        try:
            self.fiscal_years[year_index] = FiscalYear(start, end)
        except ValueError as exc:
            _LOGGER.warning("Hoppar över #RAR-post på rad %d: %s", line_number, exc)

    def _scope(self, fields: List[Field], line_number: int) -> None:
        self.scope_date = parse_sie_date(_field(fields, 0))

    def _account_plan_type(self, fields: List[Field], line_number: int) -> None:
        self.account_plan_type = _field(fields, 0) or None

    # Kontoplan och dimensioner

    def _account(self, fields: List[Field], line_number: int) -> None:
        number = _field(fields, 0)
        if not number:
            _LOGGER.debug("Hoppar över #KONTO utan kontonummer på rad %d", line_number)
            return
        self.account_names[number] = _field(fields, 1)

    def _account_type(self, fields: List[Field], line_number: int) -> None:
        number = _field(fields, 0)
        value = _field(fields, 1)
        if number and value:
            self.account_types[number] = value

    def _tax_code(self, fields: List[Field], line_number: int) -> None:
        number = _field(fields, 0)
        value = _field(fields, 1)
        if number and value:
            self.tax_codes[number] = value

    def _dimension_type(self, fields: List[Field], line_number: int) -> None:
        number = _parse_int(_field(fields, 0))
        if number is None:
            _LOGGER.debug("Hoppar över ogiltig #DIM-post på rad %d", line_number)
            return
        self.dimension_types.append(SieDimensionType(number=number, name=_field(fields, 1)))

    def _dimension(self, fields: List[Field], line_number: int) -> None:
        dimension_type = _parse_int(_field(fields, 0))
        code = _field(fields, 1)
        if dimension_type is None or not code:
            _LOGGER.debug("Hoppar över ogiltig #OBJEKT-post på rad %d", line_number)
            return
        self.dimensions.append(
            SieDimension(
                dimension_type=dimension_type,
                code=code,
                name=_field(fields, 2) or code,
            )
        )

    # Saldon

    def _balance(self, fields: List[Field], line_number: int) -> None:
        kind = BalanceKind(self._current_label)
        year_text = _field(fields, 0)
        account = _field(fields, 1)
        amount_text = _field(fields, 2)
        if not (year_text and account and amount_text):
            _LOGGER.debug("Hoppar över ofullständig #%s-post på rad %d", kind.value, line_number)
            return
        year_index = _parse_int(year_text)
        if year_index is None:
            _LOGGER.warning(
                "Ogiltigt årsnummer %r i #%s på rad %d", year_text, kind.value, line_number
            )
            return
        self.balances.append(
            SieBalance(
                kind=kind,
                year_index=year_index,
                account=account,
                amount=parse_amount(amount_text),
                quantity=parse_optional_amount(_field(fields, 3)),
            )
        )

    # Verifikationer

    def _verification(self, lines: List[str], index: int, fields: List[Field]) -> int:
        """Läser ``#VER`` och dess block, returnerar index för nästa rad."""

        series = _field(fields, 0)
        number = _field(fields, 1)
        raw_date = _field(fields, 2)
        text = _field(fields, 3)
        registration_date = parse_sie_date(_field(fields, 4))
        verification_date = parse_sie_date(raw_date)

        next_index = index + 1
        if next_index >= len(lines) or lines[next_index].strip() != "{":
            _LOGGER.debug("Verifikation %s %s saknar transaktionsblock", series, number)
            return next_index

        position = next_index + 1
        while position < len(lines):
            line = lines[position]
            stripped = line.strip()
            if stripped == "}":
                return position + 1
            if stripped == "{":
                raise SieParseError("Nästlat block i verifikation.", position + 1, line)

            parsed = self._tokenize(line, position)
            if parsed is not None:
                label, row = parsed
                if label == "TRANS":
                    self.postings.append(
                        self._posting(
                            row,
                            series=series,
                            number=number,
                            raw_date=raw_date,
                            verification_date=verification_date,
                            verification_text=text,
                            registration_date=registration_date,
                        )
                    )
                elif label not in _SKIPPED_TRANSACTION_LABELS:
                    _LOGGER.debug("Ignorerar #%s i verifikation (rad %d)", label, position + 1)
            position += 1

        raise SieParseError(
            f"Verifikation {series} {number} avslutas aldrig med '}}'.",
            index + 1,
            lines[index],
        )

    @staticmethod
    def _posting(
        fields: List[Field],
        *,
        series: str,
        number: str,
        raw_date: str,
        verification_date: Optional[date],
        verification_text: str,
        registration_date: Optional[date],
    ) -> SiePosting:
        dimensions = _parse_dimensions(_field(fields, 1))

        date_text = raw_date
        row_text = verification_text
        meaningful = meaningful_trailing_fields(fields[3:])
        if meaningful:
            first = meaningful[0]
            if is_date_token(first):
                date_text = field_text(first)
                if len(meaningful) > 1:
                    row_text = field_text(meaningful[1])
            else:
                row_text = field_text(first)

        quantity_text = _field(fields, 5)
        quantity = parse_amount(quantity_text) if quantity_text else None

        return SiePosting(
            series=series,
            number=number,
            account=_field(fields, 0),
            amount=parse_amount(_field(fields, 2)),
            date=parse_sie_date(date_text),
            text=row_text,
            verification_date=verification_date,
            verification_text=verification_text,
            cost_center=dimensions.get(COST_CENTER_DIMENSION),
            project=dimensions.get(PROJECT_DIMENSION),
            quantity=quantity if quantity else None,
            registration_date=registration_date,
        )


def parse_sie(text: str) -> SieDocument:
    """Läser SIE-text till ett oföränderligt dokument.

    Strukturella fel (oavslutade citat eller klammer, block som aldrig stängs)
    avbryter inläsningen med :class:`SieParseError`. Enskilda fält som saknas
    eller inte går att tolka ersätts med standardvärden.
    """

    return _SieParser().parse(text)


__all__ = ["SieParseError", "parse_sie"]
