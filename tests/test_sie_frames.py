from __future__ import annotations

import pandas as pd
import pytest

from norrsken.sie import parse_sie
from norrsken.sie.frames import balances_frame, postings_frame, trial_balance_frame


def test_trial_balance_frame_combines_ib_ub_and_res(sample_sie_text: str) -> None:
    frame = trial_balance_frame(parse_sie(sample_sie_text))

    assert list(frame["Konto"]) == ["1930", "3010", "5010"]
    bank = frame.set_index("Konto").loc["1930"]
    assert bank["IB"] == pytest.approx(100000.0)
    assert bank["UB"] == pytest.approx(150000.0)
    assert bank["Förändring"] == pytest.approx(50000.0)
    assert bank["Kategori"] == "Kassa och bank"
    sales = frame.set_index("Konto").loc["3010"]
    assert sales["Förändring"] == pytest.approx(-500000.0)
    assert sales["Kontonamn"] == "Försäljning"


def test_trial_balance_frame_for_previous_year(sample_sie_text: str) -> None:
    frame = trial_balance_frame(parse_sie(sample_sie_text), year_index=-1)

    assert list(frame["Konto"]) == ["1930", "3010"]


def test_trial_balance_frame_is_empty_without_balances() -> None:
    frame = trial_balance_frame(parse_sie("#KONTO 1930 Bank\n"))

    assert frame.empty
    assert "Förändring" in frame.columns


def test_balances_and_postings_frames(sample_sie_text: str) -> None:
    document = parse_sie(sample_sie_text)

    balances = balances_frame(document)
    postings = postings_frame(document)

    assert len(balances) == len(document.balances)
    assert balances["Konto_int"].dtype == "Int64"
    assert len(postings) == 4
    assert postings.loc[2, "Kostnadsställe"] == "100"
    assert postings.loc[2, "Datum"] == pd.Timestamp("2024-02-22")
    assert postings["Belopp"].sum() == pytest.approx(0.0)
