"""Resultattyper för nyckeltalsberäkningarna."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class DataUnavailableError(ValueError):
    """Fel som signalerar att önskad data inte finns tillgänglig."""


class KpiSource(str, Enum):
    """Vilken datakälla nyckeltalen bygger på."""

    ACCOUNT_BALANCES = "account-balances"
    JOURNALS = "journals"
    SIE_TRANSACTIONS = "sie-transactions"


@dataclass(frozen=True)
class KpiResult:
    """Nyckeltal för en period.

    Belopp är i redovisningsvalutan med positivt tecken för skulder, eget
    kapital och intäkter. Marginaler, räntabilitet, soliditet och tillväxt
    anges i procent. Kvoter som inte går att beräkna är ``None``.
    """

    # Balansräkning
    total_assets: float
    fixed_assets: float
    current_assets: float
    inventory: float
    customer_receivables: float
    cash_and_bank: float
    total_equity: float
    untaxed_reserves: float
    adjusted_equity: float
    owner_equity_adjustment: float
    deferred_tax_liability: float
    provisions: float
    long_term_liabilities: float
    current_liabilities: float
    total_liabilities: float
    interest_bearing_debt: float
    net_debt: float
    accounts_payable: float

    # Resultaträkning
    net_sales: float
    total_operating_income: float
    cost_of_goods_sold: float
    gross_profit: float
    external_costs: float
    personnel_costs: float
    write_downs: float
    depreciation: float
    ebitda: float
    ebit: float
    financial_income: float
    interest_expenses: float
    financial_net: float
    result_before_tax: float
    tax: float
    net_income: float

    # Marginaler
    gross_margin: Optional[float]
    ebitda_margin: Optional[float]
    operating_margin: Optional[float]
    profit_margin: Optional[float]
    net_margin: Optional[float]

    # Räntabilitet
    roa: Optional[float]
    roe: Optional[float]
    roce: Optional[float]

    # Kapitalstruktur
    equity_ratio: Optional[float]
    debt_to_equity_ratio: Optional[float]
    de_ratio: Optional[float]
    net_debt_to_ebitda: Optional[float]
    interest_coverage_ratio: Optional[float]

    # Likviditet
    cash_ratio: Optional[float]
    quick_ratio: Optional[float]
    current_ratio: Optional[float]
    working_capital: float
    working_capital_ratio: Optional[float]

    # Effektivitet
    dio: Optional[float]
    dso: Optional[float]
    dpo: Optional[float]
    ccc: Optional[float]
    asset_turnover: Optional[float]

    # Tillväxt
    revenue_growth: Optional[float]
    asset_growth: Optional[float]
    equity_growth: Optional[float]

    annualization_factor: float
    days_in_period: int
    is_partial_year: bool

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyKpiEntry:
    month: str
    kpis: KpiResult
    label: str


@dataclass(frozen=True)
class MonthlyKpiSeries:
    months: Tuple[MonthlyKpiEntry, ...]
    aggregate: KpiResult
    period_start: date
    period_end: date
    source: KpiSource

    @property
    def month_count(self) -> int:
        return len(self.months)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "months": [
                {"month": entry.month, "label": entry.label, "kpis": entry.kpis.as_dict()}
                for entry in self.months
            ],
            "aggregate": self.aggregate.as_dict(),
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "source": self.source.value,
            "month_count": self.month_count,
        }


__all__ = [
    "DataUnavailableError",
    "KpiResult",
    "KpiSource",
    "MonthlyKpiEntry",
    "MonthlyKpiSeries",
]
