"""Datamodeller for ett inläst SIE-dokument."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ..constants import DEFAULT_COMPANY_NAME, DEFAULT_CURRENCY


class BalanceKind(str, Enum):
    """Saldotyp per konto och räkenskapsår."""

    IB = "IB"
    UB = "UB"
    RES = "RES"

    @property
    def rank(self) -> int:
        return _KIND_RANK[self]


_KIND_RANK = {BalanceKind.IB: 0, BalanceKind.UB: 1, BalanceKind.RES: 2}


@dataclass(frozen=True)
class FiscalYear:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"Räkenskapsårets start {self.start} ligger efter slutet {self.end}."
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def _frozen_years(years: Optional[Mapping[int, FiscalYear]]) -> Mapping[int, FiscalYear]:
    return MappingProxyType(dict(years or {}))


@dataclass(frozen=True)
class SieMetadata:
    """Filhuvudet: företag, räkenskapsår och producerande program."""

    company_name: str = DEFAULT_COMPANY_NAME
    currency: str = DEFAULT_CURRENCY
    sie_type: Optional[int] = None
    generated_date: Optional[date] = None
    org_number: Optional[str] = None
    fiscal_years: Mapping[int, FiscalYear] = field(default_factory=dict)
    scope_date: Optional[date] = None
    program_name: Optional[str] = None
    program_version: Optional[str] = None
    file_format: Optional[str] = None
    account_plan_type: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fiscal_years", _frozen_years(self.fiscal_years))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SieMetadata):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def _key(self) -> Tuple[object, ...]:
        return (
            self.company_name,
            self.currency,
            self.sie_type,
            self.generated_date,
            self.org_number,
            tuple(sorted(self.fiscal_years.items())),
            self.scope_date,
            self.program_name,
            self.program_version,
            self.file_format,
            self.account_plan_type,
        )

    def fiscal_year(self, year_index: int = 0) -> Optional[FiscalYear]:
        return self.fiscal_years.get(year_index)

    @property
    def fiscal_year_start(self) -> Optional[date]:
        year = self.fiscal_year(0)
        return year.start if year else None

    @property
    def fiscal_year_end(self) -> Optional[date]:
        year = self.fiscal_year(0)
        return year.end if year else None


@dataclass(frozen=True)
class SieAccount:
    number: str
    name: str
    group: str = ""
    tax_code: Optional[str] = None
    account_type: Optional[str] = None


@dataclass(frozen=True)
class SieDimensionType:
    number: int
    name: str


@dataclass(frozen=True)
class SieDimension:
    dimension_type: int
    code: str
    name: str


@dataclass(frozen=True)
class SiePosting:
    """En transaktionsrad inom en verifikation.

    ``date`` och ``text`` är de effektiva värdena: radens egna om de finns,
    annars verifikationens.
    """

    series: str
    number: str
    account: str
    amount: float
    date: Optional[date] = None
    text: str = ""
    verification_date: Optional[date] = None
    verification_text: str = ""
    cost_center: Optional[str] = None
    project: Optional[str] = None
    quantity: Optional[float] = None
    registration_date: Optional[date] = None


@dataclass(frozen=True)
class SieBalance:
    kind: BalanceKind
    year_index: int
    account: str
    amount: float
    quantity: Optional[float] = None


@dataclass(frozen=True)
class Verification:
    """Postningar grupperade på ``(serie, nummer)``."""

    series: str
    number: str
    date: Optional[date]
    text: str
    registration_date: Optional[date]
    postings: Tuple[SiePosting, ...]

    @property
    def total(self) -> float:
        return sum(posting.amount for posting in self.postings)


@dataclass(frozen=True)
class SieDocument:
    metadata: SieMetadata = field(default_factory=SieMetadata)
    accounts: Tuple[SieAccount, ...] = ()
    dimensions: Tuple[SieDimension, ...] = ()
    postings: Tuple[SiePosting, ...] = ()
    balances: Tuple[SieBalance, ...] = ()
    dimension_types: Tuple[SieDimensionType, ...] = ()

    def __post_init__(self) -> None:
        for name in ("accounts", "dimensions", "postings", "balances", "dimension_types"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def balances_for(
        self, kind: BalanceKind, year_index: int = 0
    ) -> Tuple[SieBalance, ...]:
        return tuple(
            balance
            for balance in self.balances
            if balance.kind == kind and balance.year_index == year_index
        )

    def has_balances(self, kind: BalanceKind, year_index: int = 0) -> bool:
        return any(
            balance.kind == kind and balance.year_index == year_index
            for balance in self.balances
        )

    def account(self, number: str) -> Optional[SieAccount]:
        for account in self.accounts:
            if account.number == number:
                return account
        return None

    def year_indices(self) -> Tuple[int, ...]:
        indices = {balance.year_index for balance in self.balances}
        indices.update(self.metadata.fiscal_years.keys())
        return tuple(sorted(indices, reverse=True))

    def verifications(self) -> Tuple[Verification, ...]:
        groups: Dict[Tuple[str, str], List[SiePosting]] = {}
        for posting in self.postings:
            groups.setdefault((posting.series, posting.number), []).append(posting)

        result = []
        for (series, number), postings in groups.items():
            first = postings[0]
            result.append(
                Verification(
                    series=series,
                    number=number,
                    date=first.verification_date,
                    text=first.verification_text,
                    registration_date=first.registration_date,
                    postings=tuple(postings),
                )
            )
        return tuple(result)


__all__ = [
    "BalanceKind",
    "FiscalYear",
    "SieAccount",
    "SieBalance",
    "SieDimension",
    "SieDimensionType",
    "SieDocument",
    "SieMetadata",
    "SiePosting",
    "Verification",
]
