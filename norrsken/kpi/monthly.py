"""Nyckeltal månad för månad från transaktioner.

Balanskonton (1000-2999) får värdet ingående balans plus ackumulerade
transaktioner till och med månaden. Resultatkonton (3000-8999) räknas bara på
månadens egna transaktioner.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..bas import AccountType, account_type
from ..constants import MONTH_LABELS, MONTHS_PER_YEAR
from ..sie.models import BalanceKind, SieDocument
from .annual import annualization_for_period
from .formulas import (
    Averages,
    BalanceSheet,
    IncomeStatement,
    compute_balance_sheet,
    compute_income_statement,
    derive_kpis,
    growth,
)
from .models import (
    DataUnavailableError,
    KpiResult,
    KpiSource,
    MonthlyKpiEntry,
    MonthlyKpiSeries,
)
from .policy import KpiPolicy
from .sums import AccountSums

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "PostingLike",
    "calculate_monthly_kpis",
    "calculate_monthly_kpis_from_document",
    "fold_postings",
    "month_keys",
    "month_label",
]

MonthKey = Tuple[int, int]


class PostingLike(Protocol):
    account: str
    amount: float
    date: Optional[date]


def month_keys(start: date, end: date) -> List[MonthKey]:
    """Alla kalendermånader som berör perioden, i kronologisk ordning."""

    keys: List[MonthKey] = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        keys.append((year, month))
        month += 1
        if month > MONTHS_PER_YEAR:
            year, month = year + 1, 1
    return keys


def month_label(key: MonthKey) -> str:
    year, month = key
    return f"{MONTH_LABELS[month - 1]} {year}"


def _month_text(key: MonthKey) -> str:
    return f"{key[0]:04d}-{key[1]:02d}"


def fold_postings(
    totals: Mapping[str, float], postings: Iterable[PostingLike]
) -> Mapping[str, float]:
    """Returnerar en ny karta med postningarnas belopp tillagda per konto."""

    updated: Dict[str, float] = dict(totals)
    for posting in postings:
        updated[posting.account] = updated.get(posting.account, 0.0) + posting.amount
    return MappingProxyType(updated)


def _month_end_balances(
    opening: Mapping[str, float], movements: Mapping[str, float]
) -> Dict[str, float]:
    balances = {
        account: amount + movements.get(account, 0.0)
        for account, amount in opening.items()
        if account_type(account) == AccountType.BALANCE_SHEET
    }
    for account, movement in movements.items():
        if account not in balances and account_type(account) == AccountType.BALANCE_SHEET:
            balances[account] = movement
    return balances


def _group_by_month(postings: Iterable[PostingLike]) -> Dict[MonthKey, List[PostingLike]]:
    grouped: Dict[MonthKey, List[PostingLike]] = {}
    skipped = 0
    for posting in postings:
        if posting.date is None:
            skipped += 1
            continue
        grouped.setdefault((posting.date.year, posting.date.month), []).append(posting)
    if skipped:
        _LOGGER.debug("Hoppar över %d transaktioner utan datum", skipped)
    return grouped


def _aggregate(
    balances: Sequence[BalanceSheet],
    statements: Sequence[IncomeStatement],
    period_start: date,
    period_end: date,
) -> KpiResult:
    if not balances:
        return derive_kpis(
            BalanceSheet(), IncomeStatement(), Averages(), factor=1.0, days=0, is_partial=True
        )

    annualization = annualization_for_period(period_start, period_end)
    return derive_kpis(
        balances[-1],
        IncomeStatement.combine(statements),
        Averages.between(balances[0], balances[-1]),
        factor=annualization.factor,
        days=annualization.days,
        is_partial=annualization.is_partial,
    )


def calculate_monthly_kpis(
    opening_balances: Mapping[str, float],
    postings: Iterable[PostingLike],
    period_start: date,
    period_end: date,
    policy: Optional[KpiPolicy] = None,
    *,
    source: KpiSource = KpiSource.SIE_TRANSACTIONS,
) -> MonthlyKpiSeries:
    """Beräknar nyckeltal för varje månad i perioden samt ett aggregat.

    Månadernas flöden räknas upp med faktor 12 och jämförs med föregående
    månad. Aggregatet summerar resultaträkningarna och använder sista
    månadens balansräkning. Transaktioner utanför perioden ignoreras.
    """

    policy = policy or KpiPolicy.from_settings()
    by_month = _group_by_month(postings)

    cumulative: Mapping[str, float] = MappingProxyType({})
    entries: List[MonthlyKpiEntry] = []
    balances: List[BalanceSheet] = []
    statements: List[IncomeStatement] = []
    previous: Optional[KpiResult] = None

    for key in month_keys(period_start, period_end):
        month_postings = by_month.get(key, [])
        cumulative = fold_postings(
            cumulative,
            (
                posting
                for posting in month_postings
                if account_type(posting.account) == AccountType.BALANCE_SHEET
            ),
        )
        flows = fold_postings(
            {},
            (
                posting
                for posting in month_postings
                if account_type(posting.account) == AccountType.INCOME_STATEMENT
            ),
        )

        balance = compute_balance_sheet(
            AccountSums.from_mapping(_month_end_balances(opening_balances, cumulative)),
            policy,
        )
        income = compute_income_statement(AccountSums.from_mapping(flows))
        kpis = derive_kpis(
            balance,
            income,
            Averages.snapshot(balance),
            factor=float(MONTHS_PER_YEAR),
            days=calendar.monthrange(*key)[1],
            is_partial=True,
            revenue_growth=growth(income.net_sales, previous.net_sales) if previous else None,
            asset_growth=growth(balance.total_assets, previous.total_assets) if previous else None,
            equity_growth=(
                growth(balance.adjusted_equity, previous.adjusted_equity) if previous else None
            ),
        )
        entries.append(MonthlyKpiEntry(month=_month_text(key), kpis=kpis, label=month_label(key)))
        balances.append(balance)
        statements.append(income)
        previous = kpis

    return MonthlyKpiSeries(
        months=tuple(entries),
        aggregate=_aggregate(balances, statements, period_start, period_end),
        period_start=period_start,
        period_end=period_end,
        source=source,
    )


def calculate_monthly_kpis_from_document(
    document: SieDocument, policy: Optional[KpiPolicy] = None
) -> MonthlyKpiSeries:
    """Månadsnyckeltal för innevarande räkenskapsår i ett SIE-dokument.

    Ingående balanser hämtas från ``#IB 0`` och perioden från ``#RAR 0``.
    """

    fiscal_year = document.metadata.fiscal_year(0)
    if fiscal_year is None:
        raise DataUnavailableError(
            "Räkenskapsårets start- och slutdatum (#RAR 0) krävs för månadsnyckeltal."
        )
    if not document.postings:
        raise DataUnavailableError("SIE-filen innehåller inga transaktioner att beräkna på.")

    opening_totals: Dict[str, float] = {}
    for balance in document.balances_for(BalanceKind.IB, 0):
        opening_totals[balance.account] = opening_totals.get(balance.account, 0.0) + balance.amount

    return calculate_monthly_kpis(
        opening_totals,
        document.postings,
        fiscal_year.start,
        fiscal_year.end,
        policy,
        source=KpiSource.SIE_TRANSACTIONS,
    )
