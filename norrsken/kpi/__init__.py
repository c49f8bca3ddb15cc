"""Nyckeltalsberäkningar för svenska bokslut."""

from __future__ import annotations

from .annual import (
    Annualization,
    annualization_for_period,
    annualization_for_year,
    calculate_annual_kpis,
)
from .ledger import (
    Journal,
    JournalEntry,
    LedgerAccount,
    LedgerKpiResult,
    LedgerMonthlyResult,
    calculate_ledger_kpis,
    calculate_ledger_monthly_kpis,
)
from .models import (
    DataUnavailableError,
    KpiResult,
    KpiSource,
    MonthlyKpiEntry,
    MonthlyKpiSeries,
)
from .monthly import calculate_monthly_kpis, calculate_monthly_kpis_from_document
from .policy import KpiPolicy
from .reconciliation import (
    ReconciliationReport,
    check_reconciliation,
    find_unbalanced_verifications,
)

__all__ = [
    "Annualization",
    "DataUnavailableError",
    "Journal",
    "JournalEntry",
    "KpiPolicy",
    "KpiResult",
    "KpiSource",
    "LedgerAccount",
    "LedgerKpiResult",
    "LedgerMonthlyResult",
    "MonthlyKpiEntry",
    "MonthlyKpiSeries",
    "ReconciliationReport",
    "annualization_for_period",
    "annualization_for_year",
    "calculate_annual_kpis",
    "calculate_ledger_kpis",
    "calculate_ledger_monthly_kpis",
    "calculate_monthly_kpis",
    "calculate_monthly_kpis_from_document",
    "check_reconciliation",
    "find_unbalanced_verifications",
]
