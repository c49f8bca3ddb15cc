from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

import pytest

from norrsken.kpi import (
    Journal,
    JournalEntry,
    KpiSource,
    LedgerAccount,
    calculate_ledger_kpis,
    calculate_ledger_monthly_kpis,
    check_reconciliation,
    find_unbalanced_verifications,
)
from norrsken.kpi.ledger import (
    document_from_ledger_accounts,
    has_authoritative_balances,
    journal_postings,
)
from norrsken.sie import BalanceKind, parse_sie

START = date(2024, 1, 1)
END = date(2024, 12, 31)


def _journal(when: date, *entries: JournalEntry, number: str = "1") -> Journal:
    return Journal(series="A", number=number, registration_date=when, entries=entries)


def _sale(amount: float) -> tuple[JournalEntry, JournalEntry]:
    return (JournalEntry("1930", debit=amount), JournalEntry("3010", credit=amount))


def test_account_balances_are_preferred_over_journals() -> None:
    accounts = [
        LedgerAccount("1930", "Bank", opening_balance=100000.0, closing_balance=150000.0),
        LedgerAccount("3010", "Försäljning", opening_balance=0.0, closing_balance=-500000.0),
        LedgerAccount("5010", "Lokalhyra", opening_balance=0.0, closing_balance=400000.0),
    ]
    unbalanced = [_journal(date(2024, 5, 1), JournalEntry("1930", debit=10.0))]

    result = calculate_ledger_kpis(accounts, unbalanced, START, END)

    assert result.source == KpiSource.ACCOUNT_BALANCES
    assert result.reconciliation is None
    assert result.reconciled is None
    assert result.kpis.net_sales == pytest.approx(500000.0)
    assert result.kpis.ebit == pytest.approx(100000.0)
    assert result.kpis.total_assets == pytest.approx(150000.0)


def test_document_from_ledger_accounts_builds_result_as_difference() -> None:
    document = document_from_ledger_accounts(
        [LedgerAccount("1930", opening_balance=100.0, closing_balance=None)]
    )

    (result,) = document.balances_for(BalanceKind.RES, 0)
    assert result.amount == pytest.approx(-100.0)
    assert not has_authoritative_balances(
        [LedgerAccount("1930", opening_balance=100.0, closing_balance=None)]
    )


def test_reconciliation_drift_is_reported_but_not_fatal(caplog) -> None:
    journals = [
        _journal(
            date(2024, 3, 1),
            JournalEntry("1930", debit=1000.00),
            JournalEntry("3010", credit=999.50),
        )
    ]

    with caplog.at_level(logging.WARNING):
        result = calculate_ledger_kpis([], journals, START, END)

    assert result.source == KpiSource.JOURNALS
    assert result.reconciled is False
    assert result.reconciliation_drift == pytest.approx(0.50)
    assert result.kpis.net_sales == pytest.approx(999.50)
    assert result.kpis.total_assets == pytest.approx(1000.0)
    assert any("Avstämningen misslyckades" in record.getMessage() for record in caplog.records)
    assert result.as_dict()["reconciled"] is False


def test_journal_fallback_buckets_by_period() -> None:
    accounts = [
        LedgerAccount("1930", opening_balance=5000.0),
        LedgerAccount("3010", opening_balance=123.0),
    ]
    journals = [
        _journal(date(2024, 6, 1), *_sale(1000.0), number="1"),
        _journal(date(2023, 6, 1), *_sale(400.0), number="2"),
        _journal(date(2025, 2, 1), *_sale(9999.0), number="3"),
        Journal(series="A", number="4", entries=_sale(77.0)),
    ]

    result = calculate_ledger_kpis(accounts, journals, START, END)

    assert result.source == KpiSource.JOURNALS
    assert result.reconciled is True
    assert result.journal_count == 4
    assert result.entry_count == 8
    assert result.kpis.net_sales == pytest.approx(1000.0)
    assert result.kpis.total_assets == pytest.approx(6000.0)
    assert result.kpis.revenue_growth == pytest.approx(150.0)
    assert result.kpis.asset_growth == pytest.approx(20.0)
    assert result.kpis.annualization_factor == 1.0


def test_journal_fallback_without_accounts_sums_all_history() -> None:
    journals = [
        _journal(date(2022, 6, 1), *_sale(300.0), number="1"),
        _journal(date(2023, 6, 1), *_sale(400.0), number="2"),
        _journal(date(2024, 6, 1), *_sale(1000.0), number="3"),
    ]

    result = calculate_ledger_kpis([], journals, START, END)

    assert result.kpis.total_assets == pytest.approx(1700.0)
    assert result.kpis.asset_growth == pytest.approx(1000.0 / 700.0 * 100)


def test_entry_date_takes_precedence_over_registration_date() -> None:
    journal = Journal(
        series="B",
        number="9",
        registration_date=date(2024, 1, 31),
        entries=(JournalEntry("1930", debit=5.0, date=date(2024, 2, 2)), JournalEntry("3010", credit=5.0)),
    )

    postings = journal_postings([journal])

    assert [posting.date for posting in postings] == [date(2024, 2, 2), date(2024, 1, 31)]
    assert postings[1].amount == pytest.approx(-5.0)


def test_default_period_is_last_365_days() -> None:
    result = calculate_ledger_kpis([], [])

    assert (result.end_date - result.start_date).days == 365
    assert result.account_count == 0


def test_from_mapping_reads_camel_case_payloads() -> None:
    account = LedgerAccount.from_mapping(
        {"accountNumber": 1930, "name": "Bank", "balanceBroughtForward": 100, "balanceCarriedForward": "250,5"}
    )
    journal = Journal.from_mapping(
        {
            "series": {"id": "A"},
            "journalNumber": 12,
            "registrationDate": "2024-03-01T00:00:00Z",
            "description": "Faktura",
            "entries": [
                {"accountNumber": "1930", "debit": "100,50", "credit": None, "transactionDate": "2024-03-02"},
                {"accountNumber": "3010", "credit": 100.5},
            ],
        }
    )

    assert account.account_number == "1930"
    assert account.opening_balance == pytest.approx(100.0)
    assert account.closing_balance == pytest.approx(250.5)
    assert journal.series == "A"
    assert journal.number == "12"
    assert journal.registration_date == date(2024, 3, 1)
    assert journal.entries[0].debit == pytest.approx(100.5)
    assert journal.entries[0].date == date(2024, 3, 2)
    assert journal.entries[1].date is None
    assert check_reconciliation([journal]).balanced


def test_ledger_monthly_kpis_start_from_opening_balances() -> None:
    accounts = [LedgerAccount("1930", opening_balance=5000.0), LedgerAccount("3010", opening_balance=50.0)]
    journals = [_journal(date(2024, 2, 10), *_sale(300.0))]

    result = calculate_ledger_monthly_kpis(accounts, journals, date(2024, 1, 1), date(2024, 3, 31))

    assert result.series.source == KpiSource.JOURNALS
    assert [entry.kpis.total_assets for entry in result.series.months] == pytest.approx(
        [5000.0, 5300.0, 5300.0]
    )
    assert result.series.aggregate.net_sales == pytest.approx(300.0)
    assert result.reconciliation.balanced


def test_check_reconciliation_uses_decimal_sums() -> None:
    journals = [_journal(date(2024, 1, 1), *(JournalEntry("1930", debit=0.1) for _ in range(3)), JournalEntry("3010", credit=0.3))]

    report = check_reconciliation(journals)

    assert report.drift == Decimal("0")
    assert report.balanced
    assert report.entry_count == 4
    assert report.as_dict()["total_debit"] == pytest.approx(0.3)


def test_check_reconciliation_respects_explicit_tolerance() -> None:
    journals = [_journal(date(2024, 1, 1), JournalEntry("1930", debit=1000.0), JournalEntry("3010", credit=999.5))]

    assert check_reconciliation(journals, tolerance=1).balanced
    assert not check_reconciliation(journals, tolerance=Decimal("0.5")).balanced


def test_find_unbalanced_verifications_flags_only_broken_vouchers() -> None:
    document = parse_sie(
        '#VER A 1 20240301 "Ok"\n{\n#TRANS 4010 {} 100.00\n#TRANS 2440 {} -60.00\n#TRANS 1930 {} -40.00\n}\n'
        '#VER A 2 20240302 "Fel"\n{\n#TRANS 4010 {} 100.00\n#TRANS 2440 {} -90.00\n}\n'
    )

    unbalanced = find_unbalanced_verifications(document.postings)

    assert [(item.series, item.number) for item in unbalanced] == [("A", "2")]
    assert unbalanced[0].total == Decimal("10.0")
