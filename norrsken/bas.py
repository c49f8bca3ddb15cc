"""Kontointervall i BAS-kontoplanen och klassificering av kontonummer.

Kontoklasser:

- 1xxx: Tillgångar
- 2xxx: Eget kapital och skulder
- 3xxx: Rörelsens intäkter
- 4xxx: Kostnader för sålda varor
- 5xxx-7xxx: Övriga rörelsekostnader
- 8xxx: Finansiella poster, bokslutsdispositioner och skatt

Teckenkonvention i SIE-filer: tillgångar och kostnader är positiva, skulder,
eget kapital och intäkter negativa. Summor för de senare vänds med ``abs()``
innan de används i nyckeltal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, NamedTuple, Optional, Tuple, Union

AccountNumber = Union[str, int]

__all__ = [
    "AccountCategory",
    "AccountClass",
    "AccountRange",
    "AccountType",
    "BALANCE_SHEET",
    "CATEGORIES",
    "CORPORATE_TAX_RATE",
    "COST_OF_GOODS_SOLD",
    "CURRENT_ASSETS",
    "CURRENT_LIABILITIES",
    "EQUITY",
    "EQUITY_PORTION_OF_UNTAXED_RESERVES",
    "FINANCIAL_ITEMS",
    "FIXED_ASSETS",
    "INCOME_STATEMENT",
    "LONG_TERM_LIABILITIES",
    "OPERATING_EXPENSES",
    "PERSONNEL_COSTS",
    "PROVISIONS",
    "REVENUE",
    "TOTAL_ASSETS",
    "UNTAXED_RESERVES",
    "account_group",
    "account_number_to_int",
    "account_type",
    "classify",
    "classify_label",
    "is_in_range",
    "sum_accounts_in_range",
]

# Bolagsskatt 2024, används för att dela upp obeskattade reserver.
CORPORATE_TAX_RATE = 0.206
EQUITY_PORTION_OF_UNTAXED_RESERVES = 1 - CORPORATE_TAX_RATE

_LEADING_DIGITS = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class AccountRange:
    """Slutet intervall av kontonummer, t.ex. 1500-1599."""

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"Ogiltigt kontointervall: {self.min}-{self.max}")

    def contains(self, account: AccountNumber) -> bool:
        number = account_number_to_int(account)
        return number is not None and self.min <= number <= self.max

    def __str__(self) -> str:
        return f"{self.min}-{self.max}"


class _FixedAssets(NamedTuple):
    ALL: AccountRange = AccountRange(1000, 1399)
    INTANGIBLE: AccountRange = AccountRange(1000, 1099)
    BUILDINGS_AND_LAND: AccountRange = AccountRange(1100, 1199)
    MACHINERY_AND_EQUIPMENT: AccountRange = AccountRange(1200, 1299)
    FINANCIAL: AccountRange = AccountRange(1300, 1399)


class _CurrentAssets(NamedTuple):
    ALL: AccountRange = AccountRange(1400, 1999)
    INVENTORY: AccountRange = AccountRange(1400, 1499)
    CUSTOMER_RECEIVABLES: AccountRange = AccountRange(1500, 1599)
    OTHER_RECEIVABLES: AccountRange = AccountRange(1600, 1699)
    PREPAID_EXPENSES: AccountRange = AccountRange(1700, 1799)
    SHORT_TERM_INVESTMENTS: AccountRange = AccountRange(1800, 1899)
    CASH_AND_BANK: AccountRange = AccountRange(1900, 1999)


class _Equity(NamedTuple):
    ALL: AccountRange = AccountRange(2080, 2099)
    SHARE_CAPITAL: AccountRange = AccountRange(2081, 2089)
    RETAINED_EARNINGS: AccountRange = AccountRange(2091, 2098)
    NET_INCOME: AccountRange = AccountRange(2099, 2099)


class _UntaxedReserves(NamedTuple):
    ALL: AccountRange = AccountRange(2100, 2199)


class _Provisions(NamedTuple):
    ALL: AccountRange = AccountRange(2200, 2299)


class _LongTermLiabilities(NamedTuple):
    ALL: AccountRange = AccountRange(2300, 2399)
    INTEREST_BEARING: AccountRange = AccountRange(2310, 2359)
    # Skulder till ägare, koncern- och intresseföretag.
    NON_INTEREST_BEARING: AccountRange = AccountRange(2360, 2399)


class _CurrentLiabilities(NamedTuple):
    ALL: AccountRange = AccountRange(2400, 2999)
    ACCOUNTS_PAYABLE: AccountRange = AccountRange(2400, 2499)
    TAX_LIABILITIES: AccountRange = AccountRange(2500, 2699)
    PERSONNEL_LIABILITIES: AccountRange = AccountRange(2700, 2799)
    OTHER_CURRENT: AccountRange = AccountRange(2800, 2899)
    INTEREST_BEARING_SHORT: AccountRange = AccountRange(2840, 2849)
    ACCRUED_EXPENSES: AccountRange = AccountRange(2900, 2999)


class _Revenue(NamedTuple):
    ALL: AccountRange = AccountRange(3000, 3999)
    NET_SALES: AccountRange = AccountRange(3000, 3699)
    DISCOUNTS: AccountRange = AccountRange(3700, 3799)
    CAPITALIZED_WORK: AccountRange = AccountRange(3800, 3899)
    OTHER_OPERATING_INCOME: AccountRange = AccountRange(3900, 3999)


class _CostOfGoodsSold(NamedTuple):
    ALL: AccountRange = AccountRange(4000, 4999)
    MATERIALS: AccountRange = AccountRange(4000, 4499)
    GOODS_FOR_RESALE: AccountRange = AccountRange(4500, 4999)


class _OperatingExpenses(NamedTuple):
    ALL: AccountRange = AccountRange(5000, 6999)
    PREMISES: AccountRange = AccountRange(5000, 5099)
    SALES_EXPENSES: AccountRange = AccountRange(5100, 5999)
    OTHER_EXTERNAL: AccountRange = AccountRange(6000, 6999)


class _PersonnelCosts(NamedTuple):
    ALL: AccountRange = AccountRange(7000, 7999)
    WAGES: AccountRange = AccountRange(7000, 7699)
    WRITE_DOWNS: AccountRange = AccountRange(7700, 7799)
    DEPRECIATION: AccountRange = AccountRange(7800, 7899)
    OTHER: AccountRange = AccountRange(7900, 7999)


class _FinancialItems(NamedTuple):
    ALL: AccountRange = AccountRange(8000, 8999)
    FINANCIAL_INCOME: AccountRange = AccountRange(8000, 8299)
    OTHER_FINANCIAL_EXPENSES: AccountRange = AccountRange(8300, 8399)
    INTEREST_EXPENSES: AccountRange = AccountRange(8400, 8499)
    APPROPRIATIONS: AccountRange = AccountRange(8800, 8899)
    TAXES: AccountRange = AccountRange(8900, 8999)


FIXED_ASSETS = _FixedAssets()
CURRENT_ASSETS = _CurrentAssets()
EQUITY = _Equity()
UNTAXED_RESERVES = _UntaxedReserves()
PROVISIONS = _Provisions()
LONG_TERM_LIABILITIES = _LongTermLiabilities()
CURRENT_LIABILITIES = _CurrentLiabilities()
REVENUE = _Revenue()
COST_OF_GOODS_SOLD = _CostOfGoodsSold()
OPERATING_EXPENSES = _OperatingExpenses()
PERSONNEL_COSTS = _PersonnelCosts()
FINANCIAL_ITEMS = _FinancialItems()

TOTAL_ASSETS = AccountRange(1000, 1999)
BALANCE_SHEET = AccountRange(1000, 2999)
INCOME_STATEMENT = AccountRange(3000, 8999)


class AccountClass(str, Enum):
    """Grov indelning av ett konto i balans- eller resultaträkningen."""

    ASSET = "asset"
    EQUITY = "equity"
    LIABILITY = "liability"
    REVENUE = "revenue"
    EXPENSE = "expense"


class AccountType(str, Enum):
    BALANCE_SHEET = "BALANCE_SHEET"
    INCOME_STATEMENT = "INCOME_STATEMENT"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class AccountCategory:
    """En rad i klassificeringstabellen."""

    key: str
    label: str
    account_class: AccountClass
    range: AccountRange


def _category(
    key: str, label: str, account_class: AccountClass, range_: AccountRange
) -> AccountCategory:
    return AccountCategory(key=key, label=label, account_class=account_class, range=range_)


CATEGORIES: Tuple[AccountCategory, ...] = (
    _category("intangible_assets", "Immateriella anläggningstillgångar", AccountClass.ASSET, FIXED_ASSETS.INTANGIBLE),
    _category("buildings_and_land", "Byggnader och mark", AccountClass.ASSET, FIXED_ASSETS.BUILDINGS_AND_LAND),
    _category("machinery_and_equipment", "Maskiner och inventarier", AccountClass.ASSET, FIXED_ASSETS.MACHINERY_AND_EQUIPMENT),
    _category("financial_fixed_assets", "Finansiella anläggningstillgångar", AccountClass.ASSET, FIXED_ASSETS.FINANCIAL),
    _category("inventory", "Varulager", AccountClass.ASSET, CURRENT_ASSETS.INVENTORY),
    _category("customer_receivables", "Kundfordringar", AccountClass.ASSET, CURRENT_ASSETS.CUSTOMER_RECEIVABLES),
    _category("other_receivables", "Övriga fordringar", AccountClass.ASSET, CURRENT_ASSETS.OTHER_RECEIVABLES),
    _category("prepaid_expenses", "Förutbetalda kostnader", AccountClass.ASSET, CURRENT_ASSETS.PREPAID_EXPENSES),
    _category("short_term_investments", "Kortfristiga placeringar", AccountClass.ASSET, CURRENT_ASSETS.SHORT_TERM_INVESTMENTS),
    _category("cash_and_bank", "Kassa och bank", AccountClass.ASSET, CURRENT_ASSETS.CASH_AND_BANK),
    _category("equity", "Eget kapital", AccountClass.EQUITY, EQUITY.ALL),
    _category("untaxed_reserves", "Obeskattade reserver", AccountClass.LIABILITY, UNTAXED_RESERVES.ALL),
    _category("provisions", "Avsättningar", AccountClass.LIABILITY, PROVISIONS.ALL),
    _category("long_term_liabilities", "Långfristiga skulder", AccountClass.LIABILITY, LONG_TERM_LIABILITIES.ALL),
    _category("accounts_payable", "Leverantörsskulder", AccountClass.LIABILITY, CURRENT_LIABILITIES.ACCOUNTS_PAYABLE),
    _category("tax_liabilities", "Skatteskulder", AccountClass.LIABILITY, CURRENT_LIABILITIES.TAX_LIABILITIES),
    _category("personnel_liabilities", "Personalens skatter och avgifter", AccountClass.LIABILITY, CURRENT_LIABILITIES.PERSONNEL_LIABILITIES),
    _category("other_current_liabilities", "Övriga kortfristiga skulder", AccountClass.LIABILITY, CURRENT_LIABILITIES.OTHER_CURRENT),
    _category("accrued_expenses", "Upplupna kostnader", AccountClass.LIABILITY, CURRENT_LIABILITIES.ACCRUED_EXPENSES),
    _category("net_sales", "Nettoomsättning", AccountClass.REVENUE, REVENUE.NET_SALES),
    _category("discounts", "Rabatter och avdrag", AccountClass.REVENUE, REVENUE.DISCOUNTS),
    _category("capitalized_work", "Aktiverat arbete", AccountClass.REVENUE, REVENUE.CAPITALIZED_WORK),
    _category("other_operating_income", "Övriga rörelseintäkter", AccountClass.REVENUE, REVENUE.OTHER_OPERATING_INCOME),
    _category("cost_of_goods_sold", "Kostnader för sålda varor", AccountClass.EXPENSE, COST_OF_GOODS_SOLD.ALL),
    _category("premises", "Lokalkostnader", AccountClass.EXPENSE, OPERATING_EXPENSES.PREMISES),
    _category("sales_expenses", "Försäljningskostnader", AccountClass.EXPENSE, OPERATING_EXPENSES.SALES_EXPENSES),
    _category("other_external_costs", "Övriga externa kostnader", AccountClass.EXPENSE, OPERATING_EXPENSES.OTHER_EXTERNAL),
    _category("personnel_costs", "Personalkostnader", AccountClass.EXPENSE, PERSONNEL_COSTS.WAGES),
    _category("write_downs", "Nedskrivningar", AccountClass.EXPENSE, PERSONNEL_COSTS.WRITE_DOWNS),
    _category("depreciation", "Avskrivningar", AccountClass.EXPENSE, PERSONNEL_COSTS.DEPRECIATION),
    _category("other_operating_expenses", "Övriga rörelsekostnader", AccountClass.EXPENSE, PERSONNEL_COSTS.OTHER),
    _category("financial_income", "Finansiella intäkter", AccountClass.REVENUE, FINANCIAL_ITEMS.FINANCIAL_INCOME),
    _category("other_financial_expenses", "Övriga finansiella kostnader", AccountClass.EXPENSE, FINANCIAL_ITEMS.OTHER_FINANCIAL_EXPENSES),
    _category("interest_expenses", "Räntekostnader", AccountClass.EXPENSE, FINANCIAL_ITEMS.INTEREST_EXPENSES),
    _category("appropriations", "Bokslutsdispositioner", AccountClass.EXPENSE, FINANCIAL_ITEMS.APPROPRIATIONS),
    _category("taxes", "Skatter", AccountClass.EXPENSE, FINANCIAL_ITEMS.TAXES),
)

_ACCOUNT_GROUPS = {
    "1": "1 - Tillgångar",
    "2": "2 - Eget kapital och skulder",
    "3": "3 - Rörelsens inkomster och intäkter",
    "4": "4 - Utgifter och kostnader förädling",
    "5": "5 - Övriga externa rörelseutgifter och kostnader",
    "6": "6 - Övriga externa rörelseutgifter och kostnader",
    "7": "7 - Utgifter och kostnader för personal",
    "8": "8 - Finansiella och andra inkomster/utgifter",
}


def account_number_to_int(account: Optional[AccountNumber]) -> Optional[int]:
    """Tolkar de inledande siffrorna i ett kontonummer, annars ``None``."""

    if account is None or isinstance(account, bool):
        return None
    if isinstance(account, int):
        return account
    match = _LEADING_DIGITS.match(str(account))
    if not match:
        return None
    return int(match.group(1))


def is_in_range(
    account: AccountNumber,
    range_or_min: Union[AccountRange, int],
    max_value: Optional[int] = None,
) -> bool:
    """Kontrollerar om ett konto ligger i ett intervall eller mellan två gränser."""

    number = account_number_to_int(account)
    if number is None:
        return False
    if isinstance(range_or_min, AccountRange):
        return range_or_min.min <= number <= range_or_min.max
    upper = range_or_min if max_value is None else max_value
    return range_or_min <= number <= upper


def classify(account: AccountNumber) -> Optional[AccountCategory]:
    """Returnerar kategorin för ett konto, eller ``None`` för okända konton."""

    number = account_number_to_int(account)
    if number is None:
        return None
    for category in CATEGORIES:
        if category.range.min <= number <= category.range.max:
            return category
    return None


def classify_label(account: AccountNumber) -> Optional[str]:
    category = classify(account)
    return category.label if category is not None else None


def account_type(account: AccountNumber) -> AccountType:
    """Avgör om kontot hör till balans- eller resultaträkningen."""

    number = account_number_to_int(account)
    if number is None:
        return AccountType.UNKNOWN
    if BALANCE_SHEET.min <= number <= BALANCE_SHEET.max:
        return AccountType.BALANCE_SHEET
    if INCOME_STATEMENT.min <= number <= INCOME_STATEMENT.max:
        return AccountType.INCOME_STATEMENT
    return AccountType.UNKNOWN


def account_group(account: AccountNumber) -> str:
    """Kontoklassens rubrik utifrån första siffran, tom sträng om okänd."""

    text = str(account).strip()
    if not text:
        return ""
    return _ACCOUNT_GROUPS.get(text[0], "")


def sum_accounts_in_range(
    amounts: Union[Mapping[str, float], Iterable[Tuple[str, float]]],
    range_: AccountRange,
) -> float:
    """Summerar belopp för alla konton inom intervallet.

    Enkel variant för anropare som har en lös mappning konto till belopp.
    Nyckeltalsberäkningen använder :class:`norrsken.kpi.sums.AccountSums`,
    som ger samma summor med sorterade kontonummer.
    """

    items = amounts.items() if isinstance(amounts, Mapping) else amounts
    return float(
        sum(amount for account, amount in items if range_.contains(account))
    )
