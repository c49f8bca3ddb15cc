from __future__ import annotations

import importlib

import norrsken.settings as settings
import pytest

from norrsken.kpi import KpiPolicy, check_reconciliation
from norrsken.kpi.ledger import Journal, JournalEntry

_VARIABLES = (
    "NORRSKEN_CORPORATE_TAX_RATE",
    "NORRSKEN_OWNER_DEBT_AS_EQUITY",
    "NORRSKEN_RECONCILIATION_TOLERANCE",
)


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)
    importlib.reload(settings)
    yield
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)
    importlib.reload(settings)


def test_defaults():
    assert settings.CORPORATE_TAX_RATE_OVERRIDE is None
    assert settings.OWNER_DEBT_AS_EQUITY is True
    assert settings.RECONCILIATION_TOLERANCE == settings.DEFAULT_RECONCILIATION_TOLERANCE


def test_tax_rate_override_accepts_decimal_comma(monkeypatch):
    monkeypatch.setenv("NORRSKEN_CORPORATE_TAX_RATE", "0,22")
    reloaded = importlib.reload(settings)
    assert reloaded.CORPORATE_TAX_RATE_OVERRIDE == pytest.approx(0.22)
    assert KpiPolicy.from_settings().corporate_tax_rate == pytest.approx(0.22)


def test_tax_rate_override_invalid(monkeypatch):
    monkeypatch.setenv("NORRSKEN_CORPORATE_TAX_RATE", "abc")
    reloaded = importlib.reload(settings)
    assert reloaded.CORPORATE_TAX_RATE_OVERRIDE is None


@pytest.mark.parametrize(("value", "expected"), [("nej", False), ("0", False), ("ja", True), ("kanske", True)])
def test_owner_debt_flag(monkeypatch, value, expected):
    monkeypatch.setenv("NORRSKEN_OWNER_DEBT_AS_EQUITY", value)
    importlib.reload(settings)
    assert KpiPolicy.from_settings().owner_debt_as_equity is expected


def test_reconciliation_tolerance_is_read_at_call_time(monkeypatch):
    journals = [
        Journal(entries=(JournalEntry("1930", debit=100.0), JournalEntry("3010", credit=99.0)))
    ]
    assert not check_reconciliation(journals).balanced

    monkeypatch.setenv("NORRSKEN_RECONCILIATION_TOLERANCE", "5")
    importlib.reload(settings)
    assert check_reconciliation(journals).balanced


def test_zero_reconciliation_tolerance_is_kept(monkeypatch):
    monkeypatch.setenv("NORRSKEN_RECONCILIATION_TOLERANCE", "0")
    reloaded = importlib.reload(settings)
    assert reloaded.RECONCILIATION_TOLERANCE == 0.0

    balanced = [
        Journal(entries=(JournalEntry("1930", debit=100.0), JournalEntry("3010", credit=100.0)))
    ]
    half_a_cent_off = [
        Journal(entries=(JournalEntry("1930", debit=100.0), JournalEntry("3010", credit=99.995)))
    ]
    assert check_reconciliation(balanced).balanced
    assert not check_reconciliation(half_a_cent_off).balanced


def test_policy_rejects_invalid_tax_rate():
    with pytest.raises(ValueError):
        KpiPolicy(corporate_tax_rate=1.5)
