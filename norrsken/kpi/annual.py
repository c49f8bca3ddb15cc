"""Årsnyckeltal från IB-, UB- och RES-saldon i ett SIE-dokument."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..bas import (
    CURRENT_ASSETS,
    CURRENT_LIABILITIES,
    EQUITY,
    INCOME_STATEMENT,
    LONG_TERM_LIABILITIES,
    REVENUE,
    TOTAL_ASSETS,
    UNTAXED_RESERVES,
    AccountRange,
)
from ..constants import DAYS_PER_YEAR, FULL_YEAR_MAX_DAYS, FULL_YEAR_MIN_DAYS
from ..sie.models import BalanceKind, SieDocument, SieMetadata
from .formulas import (
    Averages,
    adjusted_equity_value,
    compute_balance_sheet,
    compute_income_statement,
    derive_kpis,
    growth,
)
from .models import KpiResult
from .policy import KpiPolicy
from .sums import AccountSums

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Annualization",
    "annualization_for_period",
    "annualization_for_year",
    "calculate_annual_kpis",
]


@dataclass(frozen=True)
class Annualization:
    factor: float = 1.0
    days: int = DAYS_PER_YEAR
    is_partial: bool = False


def annualization_for_period(start: date, end: date) -> Annualization:
    """Perioder under 350 eller över 380 dagar räknas om till 365 dagar."""

    days = (end - start).days + 1
    if days <= 0:
        _LOGGER.warning("Perioden %s-%s saknar dagar, räknar som helår", start, end)
        return Annualization()
    is_partial = days < FULL_YEAR_MIN_DAYS or days > FULL_YEAR_MAX_DAYS
    factor = DAYS_PER_YEAR / days if is_partial else 1.0
    return Annualization(factor=factor, days=days, is_partial=is_partial)


def annualization_for_year(metadata: SieMetadata, year_index: int = 0) -> Annualization:
    """Uppräkning för ett räkenskapsår. ``#OMFATTN`` gäller bara innevarande år."""

    fiscal_year = metadata.fiscal_year(year_index)
    if fiscal_year is None:
        return Annualization()
    end = fiscal_year.end
    if year_index == 0 and metadata.scope_date is not None:
        end = metadata.scope_date
    return annualization_for_period(fiscal_year.start, end)


class _YearBalances:
    """IB- och UB-summor för ett år med regeln för genomsnitt."""

    def __init__(self, document: SieDocument, year_index: int) -> None:
        self.opening = AccountSums.from_balances(
            document.balances_for(BalanceKind.IB, year_index)
        )
        self.closing = AccountSums.from_balances(
            document.balances_for(BalanceKind.UB, year_index)
        )
        self.has_opening = document.has_balances(BalanceKind.IB, year_index)
        self.has_closing = document.has_balances(BalanceKind.UB, year_index)

    def average(self, range_: AccountRange) -> float:
        opening = self.opening.total(range_)
        closing = self.closing.total(range_)
        if self.has_opening and self.has_closing:
            return (opening + closing) / 2
        if self.has_closing:
            return closing
        return opening

    def averages(self, policy: KpiPolicy, ytd_result: float) -> Averages:
        owner_debt = (
            abs(self.average(LONG_TERM_LIABILITIES.NON_INTEREST_BEARING))
            if policy.owner_debt_as_equity
            else 0.0
        )
        adjusted_equity = (
            abs(self.average(EQUITY.ALL))
            + abs(self.average(UNTAXED_RESERVES.ALL)) * policy.equity_portion
            + owner_debt
            + ytd_result / 2
        )
        return Averages(
            total_assets=self.average(TOTAL_ASSETS),
            adjusted_equity=adjusted_equity,
            interest_bearing_debt=abs(self.average(LONG_TERM_LIABILITIES.INTEREST_BEARING))
            + abs(self.average(CURRENT_LIABILITIES.INTEREST_BEARING_SHORT)),
            inventory=self.average(CURRENT_ASSETS.INVENTORY),
            customer_receivables=self.average(CURRENT_ASSETS.CUSTOMER_RECEIVABLES),
            accounts_payable=abs(self.average(CURRENT_LIABILITIES.ACCOUNTS_PAYABLE)),
        )


def calculate_annual_kpis(
    document: SieDocument,
    year_index: int = 0,
    policy: Optional[KpiPolicy] = None,
) -> KpiResult:
    """Beräknar nyckeltal för ett räkenskapsår.

    Balansräkningen bygger på UB och resultaträkningen på RES för
    ``year_index``. Räntabilitet och effektivitet använder genomsnittet av IB
    och UB, och tillväxten jämförs mot ``year_index - 1``. Årets resultat
    läggs till justerat eget kapital endast för innevarande år (index 0),
    eftersom tidigare års resultat redan är bokfört mot eget kapital.

    Ett år utan saldon ger nollbelopp och ``None`` för alla kvoter.
    """

    policy = policy or KpiPolicy.from_settings()

    result_sums = AccountSums.from_balances(
        document.balances_for(BalanceKind.RES, year_index)
    )
    year = _YearBalances(document, year_index)
    ytd_result = -result_sums.total(INCOME_STATEMENT) if year_index == 0 else 0.0

    balance = compute_balance_sheet(year.closing, policy, ytd_result)
    income = compute_income_statement(result_sums)
    averages = year.averages(policy, ytd_result)
    annualization = annualization_for_year(document.metadata, year_index)

    previous_index = year_index - 1
    previous_revenue = AccountSums.from_balances(
        document.balances_for(BalanceKind.RES, previous_index)
    ).magnitude(REVENUE.ALL)
    previous_closing = AccountSums.from_balances(
        document.balances_for(BalanceKind.UB, previous_index)
    )

    return derive_kpis(
        balance,
        income,
        averages,
        factor=annualization.factor,
        days=annualization.days,
        is_partial=annualization.is_partial,
        revenue_growth=growth(income.total_operating_income, previous_revenue),
        asset_growth=growth(balance.total_assets, previous_closing.total(TOTAL_ASSETS)),
        equity_growth=growth(
            balance.adjusted_equity, adjusted_equity_value(previous_closing, policy)
        ),
    )
