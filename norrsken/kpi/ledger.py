"""Nyckeltal från synkroniserad bokföringsdata.

Två vägar finns. Har kontoplanen både ingående och utgående balans från
bokföringssystemet används de direkt som IB, UB och RES (UB - IB). Annars
byggs saldona upp från journalernas transaktioner, och debet stäms av mot
kredit innan resultatet lämnas ut.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..bas import INCOME_STATEMENT, REVENUE, AccountType, account_type
from ..helpers.number_parsing import parse_amount, parse_optional_amount
from ..sie.dates import parse_sie_date
from ..sie.models import BalanceKind, SieBalance, SieDocument
from .annual import annualization_for_period, calculate_annual_kpis
from .formulas import (
    Averages,
    compute_balance_sheet,
    compute_income_statement,
    derive_kpis,
    growth,
)
from .models import KpiResult, KpiSource, MonthlyKpiSeries
from .monthly import calculate_monthly_kpis
from .policy import KpiPolicy
from .reconciliation import ReconciliationReport, Tolerance, check_reconciliation
from .sums import AccountSums

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Journal",
    "JournalEntry",
    "LedgerAccount",
    "LedgerKpiResult",
    "LedgerMonthlyResult",
    "LedgerPosting",
    "calculate_ledger_kpis",
    "calculate_ledger_monthly_kpis",
    "document_from_ledger_accounts",
    "has_authoritative_balances",
    "journal_postings",
]

DEFAULT_PERIOD_DAYS = 365


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # ISO-tidsstämplar som 2024-01-31T00:00:00Z.
    return parse_sie_date(text) or parse_sie_date(text[:10])


def _optional_amount(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return parse_amount(value)
    return parse_optional_amount(str(value))


@dataclass(frozen=True)
class LedgerAccount:
    account_number: str
    name: str = ""
    opening_balance: Optional[float] = None
    closing_balance: Optional[float] = None

    @property
    def has_both_balances(self) -> bool:
        return self.opening_balance is not None and self.closing_balance is not None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LedgerAccount":
        """Tolkar ett konto från synkroniseringens JSON (camelCase-nycklar)."""

        return cls(
            account_number=str(_first(data, "accountNumber", "account_number") or ""),
            name=str(_first(data, "name", "accountName") or ""),
            opening_balance=_optional_amount(
                _first(data, "openingBalance", "balanceBroughtForward", "opening_balance")
            ),
            closing_balance=_optional_amount(
                _first(data, "closingBalance", "balanceCarriedForward", "closing_balance")
            ),
        )


@dataclass(frozen=True)
class JournalEntry:
    account_number: str
    debit: float = 0.0
    credit: float = 0.0
    date: Optional[date] = None
    description: str = ""

    @property
    def amount(self) -> float:
        return self.debit - self.credit

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "JournalEntry":
        return cls(
            account_number=str(_first(data, "accountNumber", "account_number") or ""),
            debit=parse_amount(_first(data, "debit")),
            credit=parse_amount(_first(data, "credit")),
            date=_parse_date(_first(data, "transactionDate", "date")),
            description=str(_first(data, "description") or ""),
        )


@dataclass(frozen=True)
class Journal:
    series: str = ""
    number: str = ""
    registration_date: Optional[date] = None
    description: str = ""
    entries: Tuple[JournalEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Journal":
        series = data.get("series")
        if isinstance(series, Mapping):
            series = _first(series, "id", "code")
        return cls(
            series=str(series or ""),
            number=str(_first(data, "journalNumber", "number", "id") or ""),
            registration_date=_parse_date(_first(data, "registrationDate", "registration_date")),
            description=str(_first(data, "description") or ""),
            entries=tuple(
                JournalEntry.from_mapping(entry) for entry in data.get("entries") or ()
            ),
        )


@dataclass(frozen=True)
class LedgerPosting:
    """En journalrad omräknad till SIE:s tecken (debet minus kredit)."""

    account: str
    amount: float
    date: Optional[date]
    series: str = ""
    number: str = ""


def journal_postings(journals: Iterable[Journal]) -> Tuple[LedgerPosting, ...]:
    """Plattar ut journalerna. Radens datum gäller före journalens."""

    return tuple(
        LedgerPosting(
            account=entry.account_number,
            amount=entry.amount,
            date=entry.date or journal.registration_date,
            series=journal.series,
            number=journal.number,
        )
        for journal in journals
        for entry in journal.entries
    )


def has_authoritative_balances(accounts: Iterable[LedgerAccount]) -> bool:
    return any(account.has_both_balances for account in accounts)


def document_from_ledger_accounts(accounts: Iterable[LedgerAccount]) -> SieDocument:
    """Bygger IB, UB och RES (UB - IB) för år 0 från kontonas balanser."""

    balances: List[SieBalance] = []
    for account in accounts:
        opening = account.opening_balance or 0.0
        closing = account.closing_balance or 0.0
        balances.extend(
            (
                SieBalance(BalanceKind.IB, 0, account.account_number, opening),
                SieBalance(BalanceKind.UB, 0, account.account_number, closing),
                SieBalance(BalanceKind.RES, 0, account.account_number, closing - opening),
            )
        )
    return SieDocument(balances=tuple(balances))


@dataclass(frozen=True)
class LedgerKpiResult:
    kpis: KpiResult
    source: KpiSource
    start_date: date
    end_date: date
    account_count: int
    journal_count: Optional[int] = None
    entry_count: Optional[int] = None
    reconciliation: Optional[ReconciliationReport] = None

    @property
    def reconciled(self) -> Optional[bool]:
        return self.reconciliation.balanced if self.reconciliation else None

    @property
    def reconciliation_drift(self) -> Optional[float]:
        return self.reconciliation.drift_amount if self.reconciliation else None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kpis": self.kpis.as_dict(),
            "source": self.source.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "account_count": self.account_count,
            "journal_count": self.journal_count,
            "entry_count": self.entry_count,
            "reconciled": self.reconciled,
            "reconciliation_drift": self.reconciliation_drift,
        }


@dataclass(frozen=True)
class LedgerMonthlyResult:
    series: MonthlyKpiSeries
    reconciliation: ReconciliationReport


def _default_period(
    start_date: Optional[date], end_date: Optional[date]
) -> Tuple[date, date]:
    end = end_date or date.today()
    start = start_date or end - timedelta(days=DEFAULT_PERIOD_DAYS)
    return start, end


class _Buckets:
    """Journalbelopp per konto uppdelade på perioder.

    ``previous`` är lika lång som den aktuella perioden och slutar dagen före
    dess start. ``earlier`` är allt före det.
    """

    def __init__(
        self,
        accounts: Sequence[LedgerAccount],
        postings: Iterable[LedgerPosting],
        start: date,
        end: date,
    ) -> None:
        previous_start = start - (end - start) - timedelta(days=1)
        self.opening: Dict[str, float] = {}
        self.earlier: Dict[str, float] = {}
        self.previous: Dict[str, float] = {}
        self.current: Dict[str, float] = {}

        for account in accounts:
            if (
                account.opening_balance is not None
                and account_type(account.account_number) == AccountType.BALANCE_SHEET
            ):
                self.opening[account.account_number] = account.opening_balance

        for posting in postings:
            when = posting.date
            if when is None:
                continue
            if start <= when <= end:
                bucket = self.current
            elif previous_start <= when < start:
                bucket = self.previous
            elif when < previous_start:
                bucket = self.earlier
            else:
                continue
            bucket[posting.account] = bucket.get(posting.account, 0.0) + posting.amount

    def sums(self, *names: str) -> AccountSums:
        total = AccountSums.empty()
        for name in names:
            total = total + AccountSums.from_mapping(getattr(self, name))
        return total


def _journal_kpis(
    accounts: Sequence[LedgerAccount],
    postings: Sequence[LedgerPosting],
    start: date,
    end: date,
    policy: KpiPolicy,
) -> KpiResult:
    buckets = _Buckets(accounts, postings, start, end)
    if accounts:
        closing = buckets.sums("opening", "current")
        opening = buckets.sums("opening")
    else:
        closing = buckets.sums("earlier", "previous", "current")
        opening = buckets.sums("earlier", "previous")

    current = buckets.sums("current")
    ytd_result = -current.total(INCOME_STATEMENT)

    balance = compute_balance_sheet(closing, policy, ytd_result)
    opening_balance = compute_balance_sheet(opening, policy)
    income = compute_income_statement(current)
    annualization = annualization_for_period(start, end)

    return derive_kpis(
        balance,
        income,
        Averages.between(opening_balance, balance),
        factor=annualization.factor,
        days=annualization.days,
        is_partial=annualization.is_partial,
        revenue_growth=growth(
            income.total_operating_income, buckets.sums("previous").magnitude(REVENUE.ALL)
        ),
        asset_growth=growth(balance.total_assets, opening_balance.total_assets),
        equity_growth=growth(balance.adjusted_equity, opening_balance.adjusted_equity),
    )


def calculate_ledger_kpis(
    accounts: Iterable[LedgerAccount],
    journals: Iterable[Journal],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    policy: Optional[KpiPolicy] = None,
    tolerance: Tolerance = None,
) -> LedgerKpiResult:
    """Väljer datakälla och beräknar nyckeltal.

    Kontobalanser från bokföringssystemet föredras alltid. Journalvägen
    används bara när inget konto har både ingående och utgående balans, och
    de två vägarna blandas aldrig i samma beräkning. Utan datum används de
    senaste 365 dagarna fram till i dag.
    """

    policy = policy or KpiPolicy.from_settings()
    accounts = tuple(accounts)
    start, end = _default_period(start_date, end_date)

    if accounts and has_authoritative_balances(accounts):
        _LOGGER.debug("Beräknar nyckeltal från %d kontobalanser", len(accounts))
        return LedgerKpiResult(
            kpis=calculate_annual_kpis(document_from_ledger_accounts(accounts), 0, policy),
            source=KpiSource.ACCOUNT_BALANCES,
            start_date=start,
            end_date=end,
            account_count=len(accounts),
        )

    journals = tuple(journals)
    reconciliation = check_reconciliation(journals, tolerance)
    if not accounts:
        _LOGGER.warning("Inga konton hittades, ingående balanser saknas i balansräkningen.")

    postings = journal_postings(journals)
    return LedgerKpiResult(
        kpis=_journal_kpis(accounts, postings, start, end, policy),
        source=KpiSource.JOURNALS,
        start_date=start,
        end_date=end,
        account_count=len(accounts),
        journal_count=len(journals),
        entry_count=len(postings),
        reconciliation=reconciliation,
    )


def calculate_ledger_monthly_kpis(
    accounts: Iterable[LedgerAccount],
    journals: Iterable[Journal],
    period_start: date,
    period_end: date,
    policy: Optional[KpiPolicy] = None,
    tolerance: Tolerance = None,
) -> LedgerMonthlyResult:
    """Månadsnyckeltal från journaler med kontonas ingående balanser som start."""

    journals = tuple(journals)
    opening = {
        account.account_number: account.opening_balance
        for account in accounts
        if account.opening_balance is not None
        and account_type(account.account_number) == AccountType.BALANCE_SHEET
    }
    series = calculate_monthly_kpis(
        opening,
        journal_postings(journals),
        period_start,
        period_end,
        policy,
        source=KpiSource.JOURNALS,
    )
    return LedgerMonthlyResult(
        series=series, reconciliation=check_reconciliation(journals, tolerance)
    )
