from __future__ import annotations

import math
from dataclasses import fields
from datetime import date

import pytest

from norrsken.kpi import (
    KpiPolicy,
    annualization_for_period,
    annualization_for_year,
    calculate_annual_kpis,
)
from norrsken.kpi.frames import kpi_frame
from norrsken.sie import parse_sie

MARGINS = ("gross_margin", "ebitda_margin", "operating_margin", "profit_margin", "net_margin")

MINIMAL = """#RAR 0 20240101 20241231
#IB 0 1930 100000
#UB 0 1930 150000
#RES 0 3010 -500000
#RES 0 5010 400000
"""


def test_end_to_end_minimal_document() -> None:
    kpis = calculate_annual_kpis(parse_sie(MINIMAL))

    assert kpis.net_sales == pytest.approx(500000.0)
    assert kpis.ebit == pytest.approx(100000.0)
    assert kpis.current_ratio is None
    assert kpis.total_assets == pytest.approx(150000.0)
    assert kpis.adjusted_equity == pytest.approx(100000.0)
    assert kpis.operating_margin == pytest.approx(20.0)
    assert kpis.roa == pytest.approx(80.0)
    assert kpis.annualization_factor == 1.0
    assert kpis.is_partial_year is False


def test_growth_against_previous_year(sample_sie_text: str) -> None:
    kpis = calculate_annual_kpis(parse_sie(sample_sie_text))

    assert kpis.revenue_growth == pytest.approx(25.0)
    assert kpis.asset_growth == pytest.approx(50.0)
    assert kpis.equity_growth is None


def test_previous_year_excludes_ytd_result(sample_sie_text: str) -> None:
    kpis = calculate_annual_kpis(parse_sie(sample_sie_text), year_index=-1)

    assert kpis.net_sales == pytest.approx(400000.0)
    assert kpis.total_assets == pytest.approx(100000.0)
    assert kpis.adjusted_equity == 0.0
    assert kpis.revenue_growth is None


def test_margins_are_none_without_sales() -> None:
    kpis = calculate_annual_kpis(parse_sie("#RAR 0 20240101 20241231\n#UB 0 1930 5000\n"))

    for name in MARGINS:
        assert getattr(kpis, name) is None


def test_year_without_data_gives_no_ratios() -> None:
    kpis = calculate_annual_kpis(parse_sie(MINIMAL), year_index=-5)

    assert kpis.total_assets == 0.0
    assert kpis.roa is None
    assert kpis.equity_ratio is None
    for item in fields(kpis):
        value = getattr(kpis, item.name)
        if isinstance(value, float):
            assert math.isfinite(value)


def test_annualization_boundaries() -> None:
    full = annualization_for_period(date(2023, 1, 1), date(2023, 12, 31))
    assert full.factor == 1.0
    assert full.is_partial is False

    half = annualization_for_period(date(2024, 1, 1), date(2024, 6, 28))
    assert half.days == 180
    assert half.factor == pytest.approx(2.0278, abs=1e-4)
    assert half.is_partial is True


def test_short_fiscal_year_is_annualized() -> None:
    text = MINIMAL.replace("20241231", "20240628")

    kpis = calculate_annual_kpis(parse_sie(text))

    assert kpis.is_partial_year is True
    assert kpis.days_in_period == 180
    assert kpis.roa == pytest.approx(80.0 * 365 / 180)
    assert kpis.operating_margin == pytest.approx(20.0)


def test_scope_date_limits_current_year() -> None:
    document = parse_sie(MINIMAL + "#OMFATTN 20240331\n")

    annualization = annualization_for_year(document.metadata, 0)

    assert annualization.days == 91
    assert annualization.is_partial is True
    assert annualization_for_year(document.metadata, -1).factor == 1.0


def test_owner_debt_policy_moves_debt_between_equity_and_liabilities() -> None:
    document = parse_sie(
        "#RAR 0 20240101 20241231\n"
        "#UB 0 1930 100000\n"
        "#UB 0 2081 -25000\n"
        "#UB 0 2110 -10000\n"
        "#UB 0 2393 -40000\n"
        "#UB 0 2440 -25000\n"
    )

    with_owner = calculate_annual_kpis(document, policy=KpiPolicy(owner_debt_as_equity=True))
    without_owner = calculate_annual_kpis(document, policy=KpiPolicy(owner_debt_as_equity=False))

    assert with_owner.adjusted_equity == pytest.approx(25000 + 10000 * 0.794 + 40000)
    assert with_owner.long_term_liabilities == pytest.approx(0.0)
    assert without_owner.adjusted_equity == pytest.approx(25000 + 10000 * 0.794)
    assert without_owner.long_term_liabilities == pytest.approx(40000.0)
    assert with_owner.deferred_tax_liability == pytest.approx(2060.0)
    assert with_owner.current_ratio == pytest.approx(4.0)


def test_kpi_frame_formats_values_for_display() -> None:
    frame = kpi_frame(calculate_annual_kpis(parse_sie(MINIMAL))).set_index("Nyckeltal")

    assert frame.loc["net_sales", "Visning"] == "500 000"
    assert frame.loc["operating_margin", "Visning"] == "20,0 %"
    assert frame.loc["current_ratio", "Visning"] == "—"
    assert frame.loc["equity_ratio", "Benämning"] == "Soliditet"
