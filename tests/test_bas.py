from __future__ import annotations

import pytest

from norrsken.bas import (
    CURRENT_ASSETS,
    REVENUE,
    AccountClass,
    AccountRange,
    AccountType,
    account_group,
    account_number_to_int,
    account_type,
    classify,
    classify_label,
    is_in_range,
    sum_accounts_in_range,
)
from norrsken.kpi.sums import AccountSums


def test_account_type_is_total_over_bas_range() -> None:
    for number in range(1000, 9000):
        expected = AccountType.BALANCE_SHEET if number < 3000 else AccountType.INCOME_STATEMENT
        assert account_type(number) == expected
    assert account_type(9999) == AccountType.UNKNOWN
    assert account_type(999) == AccountType.UNKNOWN


def test_account_type_handles_text_and_garbage() -> None:
    assert account_type("1930") == AccountType.BALANCE_SHEET
    assert account_type("3010 Försäljning") == AccountType.INCOME_STATEMENT
    assert account_type("Kassa") == AccountType.UNKNOWN
    assert account_type("") == AccountType.UNKNOWN


@pytest.mark.parametrize(
    ("account", "expected"),
    [("1510", "Kundfordringar"), ("1930", "Kassa och bank"), ("2440", "Leverantörsskulder"),
     ("3010", "Nettoomsättning"), ("7830", "Avskrivningar"), ("8910", "Skatter")],
)
def test_classify_label(account: str, expected: str) -> None:
    assert classify_label(account) == expected


def test_classify_returns_class_and_none_for_unknown() -> None:
    assert classify("2081").account_class == AccountClass.EQUITY
    assert classify("4010").account_class == AccountClass.EXPENSE
    assert classify("9999") is None
    assert classify("abc") is None


def test_is_in_range_accepts_range_or_bounds() -> None:
    assert is_in_range("1510", CURRENT_ASSETS.CUSTOMER_RECEIVABLES)
    assert not is_in_range("1600", CURRENT_ASSETS.CUSTOMER_RECEIVABLES)
    assert is_in_range(1930, 1900, 1999)
    assert not is_in_range("Bank", 1900, 1999)


def test_account_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        AccountRange(2000, 1000)
    assert str(AccountRange(1500, 1599)) == "1500-1599"


def test_account_number_to_int() -> None:
    assert account_number_to_int(" 1930 ") == 1930
    assert account_number_to_int("1930A") == 1930
    assert account_number_to_int(True) is None
    assert account_number_to_int(None) is None


def test_account_group_and_range_sum() -> None:
    assert account_group("1930").startswith("1 - ")
    assert account_group("X") == ""
    amounts = {"1910": 10.0, "1930": 15.5, "2440": -7.0}
    assert sum_accounts_in_range(amounts, CURRENT_ASSETS.CASH_AND_BANK) == pytest.approx(25.5)
    assert sum_accounts_in_range(list(amounts.items()), AccountRange(2000, 2999)) == -7.0


def test_range_sum_agrees_with_account_sums() -> None:
    amounts = {"1510": 300.0, "1930": 15.5, "2440": -7.0, "3010": -900.0, "Okänt": 1.0}
    sums = AccountSums.from_mapping(amounts)

    for range_ in (CURRENT_ASSETS.CASH_AND_BANK, CURRENT_ASSETS.CUSTOMER_RECEIVABLES, REVENUE.ALL):
        assert sum_accounts_in_range(amounts, range_) == pytest.approx(sums.total(range_))
