"""Nyckeltal som pandas DataFrames för visning och export."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

import pandas as pd

from ..helpers.formatting import format_currency, format_percent, format_ratio
from .models import KpiResult, MonthlyKpiSeries

__all__ = ["KPI_LABELS", "kpi_frame", "monthly_frame"]

KPI_LABELS: Dict[str, str] = {
    "net_sales": "Nettoomsättning",
    "gross_profit": "Bruttoresultat",
    "ebitda": "EBITDA",
    "ebit": "Rörelseresultat",
    "net_income": "Årets resultat",
    "total_assets": "Totala tillgångar",
    "adjusted_equity": "Justerat eget kapital",
    "net_debt": "Nettoskuld",
    "working_capital": "Rörelsekapital",
    "gross_margin": "Bruttomarginal",
    "ebitda_margin": "EBITDA-marginal",
    "operating_margin": "Rörelsemarginal",
    "net_margin": "Nettomarginal",
    "roa": "Avkastning på totalt kapital",
    "roe": "Avkastning på eget kapital",
    "roce": "Avkastning på sysselsatt kapital",
    "equity_ratio": "Soliditet",
    "debt_to_equity_ratio": "Skuldsättningsgrad",
    "current_ratio": "Balanslikviditet",
    "quick_ratio": "Kassalikviditet",
    "revenue_growth": "Omsättningstillväxt",
}

_RATIO_KEYS = {"debt_to_equity_ratio", "current_ratio", "quick_ratio"}
_PERCENT_KEYS = {
    "gross_margin",
    "ebitda_margin",
    "operating_margin",
    "net_margin",
    "roa",
    "roe",
    "roce",
    "equity_ratio",
    "revenue_growth",
}


def _formatter(key: str) -> Callable[[Optional[float]], str]:
    if key in _PERCENT_KEYS:
        return format_percent
    if key in _RATIO_KEYS:
        return format_ratio
    return format_currency


def kpi_frame(kpis: KpiResult) -> "pd.DataFrame":
    """En rad per nyckeltal med svensk benämning och formaterat värde."""

    values = kpis.as_dict()
    rows = [
        {
            "Nyckeltal": key,
            "Benämning": label,
            "Värde": values[key],
            "Visning": _formatter(key)(values[key]),
        }
        for key, label in KPI_LABELS.items()
    ]
    return pd.DataFrame(rows, columns=["Nyckeltal", "Benämning", "Värde", "Visning"])


def monthly_frame(series: MonthlyKpiSeries) -> "pd.DataFrame":
    """Månadsserien med en rad per månad och en kolumn per nyckeltal."""

    rows: List[Dict[str, object]] = []
    for entry in series.months:
        values = entry.kpis.as_dict()
        row: Dict[str, object] = {"Månad": entry.month, "Etikett": entry.label}
        row.update({label: values[key] for key, label in KPI_LABELS.items()})
        rows.append(row)
    return pd.DataFrame(rows, columns=["Månad", "Etikett", *KPI_LABELS.values()])
