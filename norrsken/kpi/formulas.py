"""Gemensamma formler för nyckeltal.

Årsberäkningen, månadsmotorn och journalberäkningen bygger alla en
:class:`BalanceSheet`, en :class:`IncomeStatement` och en uppsättning
:class:`Averages` och låter :func:`derive_kpis` räkna fram kvoterna.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Iterable, Optional

from ..bas import (
    COST_OF_GOODS_SOLD,
    CURRENT_ASSETS,
    CURRENT_LIABILITIES,
    EQUITY,
    FINANCIAL_ITEMS,
    FIXED_ASSETS,
    LONG_TERM_LIABILITIES,
    OPERATING_EXPENSES,
    PERSONNEL_COSTS,
    PROVISIONS,
    REVENUE,
    UNTAXED_RESERVES,
)
from ..constants import DAYS_PER_YEAR
from .models import KpiResult
from .policy import KpiPolicy
from .sums import AccountSums

__all__ = [
    "Averages",
    "BalanceSheet",
    "IncomeStatement",
    "adjusted_equity_value",
    "compute_balance_sheet",
    "compute_income_statement",
    "derive_kpis",
    "growth",
]


def _finite(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator <= 0:
        return None
    return _finite(numerator / denominator)


def _pct(numerator: float, denominator: float) -> Optional[float]:
    value = _ratio(numerator, denominator)
    return value * 100 if value is not None else None


def _days(balance: float, annual_flow: float) -> Optional[float]:
    value = _ratio(balance, annual_flow)
    return value * DAYS_PER_YEAR if value is not None else None


def growth(current: float, previous: float) -> Optional[float]:
    """Procentuell förändring, ``None`` när föregående värde är noll eller negativt."""

    return _pct(current - previous, previous)


def adjusted_equity_value(
    sums: AccountSums, policy: KpiPolicy, ytd_result: float = 0.0
) -> float:
    """Eget kapital plus skattejusterade reserver, ägarlån och årets resultat."""

    owner_debt = (
        sums.magnitude(LONG_TERM_LIABILITIES.NON_INTEREST_BEARING)
        if policy.owner_debt_as_equity
        else 0.0
    )
    return (
        sums.magnitude(EQUITY.ALL)
        + sums.magnitude(UNTAXED_RESERVES.ALL) * policy.equity_portion
        + owner_debt
        + ytd_result
    )


@dataclass(frozen=True)
class BalanceSheet:
    total_assets: float = 0.0
    fixed_assets: float = 0.0
    current_assets: float = 0.0
    inventory: float = 0.0
    customer_receivables: float = 0.0
    cash_and_bank: float = 0.0
    total_equity: float = 0.0
    untaxed_reserves: float = 0.0
    adjusted_equity: float = 0.0
    owner_equity_adjustment: float = 0.0
    deferred_tax_liability: float = 0.0
    provisions: float = 0.0
    long_term_liabilities: float = 0.0
    current_liabilities: float = 0.0
    total_liabilities: float = 0.0
    interest_bearing_debt: float = 0.0
    net_debt: float = 0.0
    accounts_payable: float = 0.0


def compute_balance_sheet(
    closing: AccountSums, policy: KpiPolicy, ytd_result: float = 0.0
) -> BalanceSheet:
    """Balansräkning från utgående saldon.

    ``ytd_result`` är årets resultat som ännu inte bokförts mot eget kapital
    (intäkter minus kostnader, med positivt tecken för vinst).
    """

    fixed_assets = closing.total(FIXED_ASSETS.ALL)
    current_assets = closing.total(CURRENT_ASSETS.ALL)
    cash_and_bank = closing.total(CURRENT_ASSETS.CASH_AND_BANK)
    untaxed_reserves = closing.magnitude(UNTAXED_RESERVES.ALL)

    owner_adjustment = (
        closing.magnitude(LONG_TERM_LIABILITIES.NON_INTEREST_BEARING)
        if policy.owner_debt_as_equity
        else 0.0
    )
    deferred_tax = untaxed_reserves * policy.corporate_tax_rate
    provisions = closing.magnitude(PROVISIONS.ALL)
    long_term = closing.magnitude(LONG_TERM_LIABILITIES.ALL) - owner_adjustment
    current_liabilities = closing.magnitude(CURRENT_LIABILITIES.ALL)
    interest_bearing = closing.magnitude(
        LONG_TERM_LIABILITIES.INTEREST_BEARING
    ) + closing.magnitude(CURRENT_LIABILITIES.INTEREST_BEARING_SHORT)

    return BalanceSheet(
        total_assets=fixed_assets + current_assets,
        fixed_assets=fixed_assets,
        current_assets=current_assets,
        inventory=closing.total(CURRENT_ASSETS.INVENTORY),
        customer_receivables=closing.total(CURRENT_ASSETS.CUSTOMER_RECEIVABLES),
        cash_and_bank=cash_and_bank,
        total_equity=closing.magnitude(EQUITY.ALL),
        untaxed_reserves=untaxed_reserves,
        adjusted_equity=adjusted_equity_value(closing, policy, ytd_result),
        owner_equity_adjustment=owner_adjustment,
        deferred_tax_liability=deferred_tax,
        provisions=provisions,
        long_term_liabilities=long_term,
        current_liabilities=current_liabilities,
        total_liabilities=provisions + long_term + current_liabilities + deferred_tax,
        interest_bearing_debt=interest_bearing,
        net_debt=interest_bearing - cash_and_bank,
        accounts_payable=closing.magnitude(CURRENT_LIABILITIES.ACCOUNTS_PAYABLE),
    )


@dataclass(frozen=True)
class IncomeStatement:
    """Periodens flöden. Kostnader har positivt tecken."""

    net_sales: float = 0.0
    total_operating_income: float = 0.0
    cost_of_goods_sold: float = 0.0
    external_costs: float = 0.0
    personnel_costs: float = 0.0
    write_downs: float = 0.0
    depreciation: float = 0.0
    financial_income: float = 0.0
    interest_expenses: float = 0.0
    other_financial_expenses: float = 0.0
    tax: float = 0.0

    @property
    def gross_profit(self) -> float:
        return self.net_sales - self.cost_of_goods_sold

    @property
    def ebitda(self) -> float:
        return (
            self.total_operating_income
            - self.cost_of_goods_sold
            - self.external_costs
            - self.personnel_costs
        )

    @property
    def ebit(self) -> float:
        return self.ebitda - self.depreciation - self.write_downs

    @property
    def financial_net(self) -> float:
        return self.financial_income - self.interest_expenses - self.other_financial_expenses

    @property
    def result_before_tax(self) -> float:
        return self.ebit + self.financial_net

    @property
    def net_income(self) -> float:
        return self.result_before_tax - self.tax

    @classmethod
    def combine(cls, statements: Iterable["IncomeStatement"]) -> "IncomeStatement":
        """Summerar flera perioders flöden till en."""

        totals = {item.name: 0.0 for item in fields(cls)}
        for statement in statements:
            for name in totals:
                totals[name] += getattr(statement, name)
        return cls(**totals)


def compute_income_statement(result: AccountSums) -> IncomeStatement:
    return IncomeStatement(
        net_sales=result.magnitude(REVENUE.NET_SALES) - result.magnitude(REVENUE.DISCOUNTS),
        total_operating_income=result.magnitude(REVENUE.ALL),
        cost_of_goods_sold=result.total(COST_OF_GOODS_SOLD.ALL),
        external_costs=result.total(OPERATING_EXPENSES.ALL),
        personnel_costs=result.total(PERSONNEL_COSTS.WAGES),
        write_downs=result.total(PERSONNEL_COSTS.WRITE_DOWNS),
        depreciation=result.total(PERSONNEL_COSTS.DEPRECIATION),
        financial_income=result.magnitude(FINANCIAL_ITEMS.FINANCIAL_INCOME),
        interest_expenses=result.magnitude(FINANCIAL_ITEMS.INTEREST_EXPENSES),
        other_financial_expenses=result.magnitude(FINANCIAL_ITEMS.OTHER_FINANCIAL_EXPENSES),
        tax=result.total(FINANCIAL_ITEMS.TAXES),
    )


@dataclass(frozen=True)
class Averages:
    """Genomsnittliga balansposter som nämnare i räntabilitet och effektivitet."""

    total_assets: float = 0.0
    adjusted_equity: float = 0.0
    interest_bearing_debt: float = 0.0
    inventory: float = 0.0
    customer_receivables: float = 0.0
    accounts_payable: float = 0.0

    @classmethod
    def snapshot(cls, balance: BalanceSheet) -> "Averages":
        return cls(
            total_assets=balance.total_assets,
            adjusted_equity=balance.adjusted_equity,
            interest_bearing_debt=balance.interest_bearing_debt,
            inventory=balance.inventory,
            customer_receivables=balance.customer_receivables,
            accounts_payable=balance.accounts_payable,
        )

    @classmethod
    def between(cls, opening: BalanceSheet, closing: BalanceSheet) -> "Averages":
        """Medelvärdet av två balansräkningar. Ett medel på noll ersätts av det utgående värdet."""

        def mean(name: str) -> float:
            end = getattr(closing, name)
            value = (getattr(opening, name) + end) / 2
            return value if value != 0 else end

        return cls(**{item.name: mean(item.name) for item in fields(cls)})


def derive_kpis(
    balance: BalanceSheet,
    income: IncomeStatement,
    averages: Averages,
    *,
    factor: float,
    days: int,
    is_partial: bool,
    revenue_growth: Optional[float] = None,
    asset_growth: Optional[float] = None,
    equity_growth: Optional[float] = None,
) -> KpiResult:
    """Räknar fram alla kvoter.

    ``factor`` räknar upp periodens flöden till helår. Marginaler och kvoter
    mellan balansposter påverkas inte.
    """

    net_sales = income.net_sales
    ebit = income.ebit
    ebitda = income.ebitda

    annual_ebit = ebit * factor
    annual_ebitda = ebitda * factor
    annual_sales = net_sales * factor
    annual_cogs = income.cost_of_goods_sold * factor

    working_capital = balance.current_assets - balance.current_liabilities

    dio = _days(averages.inventory, annual_cogs)
    dso = _days(averages.customer_receivables, annual_sales)
    dpo = _days(averages.accounts_payable, annual_cogs)
    ccc = dio + dso - dpo if None not in (dio, dso, dpo) else None

    return KpiResult(
        total_assets=balance.total_assets,
        fixed_assets=balance.fixed_assets,
        current_assets=balance.current_assets,
        inventory=balance.inventory,
        customer_receivables=balance.customer_receivables,
        cash_and_bank=balance.cash_and_bank,
        total_equity=balance.total_equity,
        untaxed_reserves=balance.untaxed_reserves,
        adjusted_equity=balance.adjusted_equity,
        owner_equity_adjustment=balance.owner_equity_adjustment,
        deferred_tax_liability=balance.deferred_tax_liability,
        provisions=balance.provisions,
        long_term_liabilities=balance.long_term_liabilities,
        current_liabilities=balance.current_liabilities,
        total_liabilities=balance.total_liabilities,
        interest_bearing_debt=balance.interest_bearing_debt,
        net_debt=balance.net_debt,
        accounts_payable=balance.accounts_payable,
        net_sales=net_sales,
        total_operating_income=income.total_operating_income,
        cost_of_goods_sold=income.cost_of_goods_sold,
        gross_profit=income.gross_profit,
        external_costs=income.external_costs,
        personnel_costs=income.personnel_costs,
        write_downs=income.write_downs,
        depreciation=income.depreciation,
        ebitda=ebitda,
        ebit=ebit,
        financial_income=income.financial_income,
        interest_expenses=income.interest_expenses,
        financial_net=income.financial_net,
        result_before_tax=income.result_before_tax,
        tax=income.tax,
        net_income=income.net_income,
        gross_margin=_pct(income.gross_profit, net_sales),
        ebitda_margin=_pct(ebitda, net_sales),
        operating_margin=_pct(ebit, net_sales),
        profit_margin=_pct(income.result_before_tax, net_sales),
        net_margin=_pct(income.net_income, net_sales),
        roa=_pct(annual_ebit, averages.total_assets),
        roe=_pct(income.net_income * factor, averages.adjusted_equity),
        roce=_pct(
            annual_ebit, averages.adjusted_equity + averages.interest_bearing_debt
        ),
        equity_ratio=_pct(balance.adjusted_equity, balance.total_assets),
        debt_to_equity_ratio=_ratio(balance.total_liabilities, balance.adjusted_equity),
        de_ratio=_ratio(balance.interest_bearing_debt, balance.adjusted_equity),
        net_debt_to_ebitda=_ratio(balance.net_debt, annual_ebitda),
        interest_coverage_ratio=_ratio(annual_ebitda, income.interest_expenses * factor),
        cash_ratio=_ratio(balance.cash_and_bank, balance.current_liabilities),
        quick_ratio=_ratio(
            balance.current_assets - balance.inventory, balance.current_liabilities
        ),
        current_ratio=_ratio(balance.current_assets, balance.current_liabilities),
        working_capital=working_capital,
        working_capital_ratio=_pct(working_capital, annual_sales),
        dio=dio,
        dso=dso,
        dpo=dpo,
        ccc=ccc,
        asset_turnover=_ratio(annual_sales, balance.total_assets),
        revenue_growth=revenue_growth,
        asset_growth=asset_growth,
        equity_growth=equity_growth,
        annualization_factor=factor,
        days_in_period=days,
        is_partial_year=is_partial,
    )
