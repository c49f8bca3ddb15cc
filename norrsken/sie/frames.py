"""Tabellvyer över ett SIE-dokument som pandas DataFrames."""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

from ..bas import account_number_to_int, classify_label
from .models import BalanceKind, SieDocument

__all__ = ["balances_frame", "postings_frame", "trial_balance_frame"]

BALANCE_COLUMNS = ["Typ", "År", "Konto", "Kontonamn", "Belopp", "Kvantitet", "Konto_int"]
POSTING_COLUMNS = [
    "Serie",
    "Vernr",
    "Datum",
    "Verifikationstext",
    "Konto",
    "Kontonamn",
    "Belopp",
    "Text",
    "Kostnadsställe",
    "Projekt",
    "Kvantitet",
]
TRIAL_BALANCE_COLUMNS = [
    "Konto",
    "Kontonamn",
    "Kategori",
    "IB",
    "UB",
    "RES",
    "Förändring",
    "Konto_int",
]


def _account_names(document: SieDocument) -> Dict[str, str]:
    return {account.number: account.name for account in document.accounts}


def balances_frame(document: SieDocument) -> "pd.DataFrame":
    """Alla IB-, UB- och RES-poster, en rad per saldo."""

    names = _account_names(document)
    rows = [
        {
            "Typ": balance.kind.value,
            "År": balance.year_index,
            "Konto": balance.account,
            "Kontonamn": names.get(balance.account, ""),
            "Belopp": balance.amount,
            "Kvantitet": balance.quantity,
            "Konto_int": account_number_to_int(balance.account),
        }
        for balance in document.balances
    ]
    frame = pd.DataFrame(rows, columns=BALANCE_COLUMNS)
    frame["Konto_int"] = frame["Konto_int"].astype("Int64")
    return frame


def postings_frame(document: SieDocument) -> "pd.DataFrame":
    names = _account_names(document)
    rows = [
        {
            "Serie": posting.series,
            "Vernr": posting.number,
            "Datum": pd.Timestamp(posting.date) if posting.date else pd.NaT,
            "Verifikationstext": posting.verification_text,
            "Konto": posting.account,
            "Kontonamn": names.get(posting.account, ""),
            "Belopp": posting.amount,
            "Text": posting.text,
            "Kostnadsställe": posting.cost_center,
            "Projekt": posting.project,
            "Kvantitet": posting.quantity,
        }
        for posting in document.postings
    ]
    return pd.DataFrame(rows, columns=POSTING_COLUMNS)


def trial_balance_frame(document: SieDocument, year_index: int = 0) -> "pd.DataFrame":
    """Saldobalans för ett räkenskapsår med IB, UB och RES per konto.

    Konton som saknar ett visst saldo får ``0.0``. ``Förändring`` är UB minus
    IB för balanskonton och RES för resultatkonton.
    """

    names = _account_names(document)
    amounts: Dict[str, Dict[str, float]] = {}
    for balance in document.balances:
        if balance.year_index != year_index:
            continue
        per_kind = amounts.setdefault(balance.account, {})
        per_kind[balance.kind.value] = per_kind.get(balance.kind.value, 0.0) + balance.amount

    rows: List[Dict[str, object]] = []
    for account, per_kind in amounts.items():
        ib = per_kind.get(BalanceKind.IB.value, 0.0)
        ub = per_kind.get(BalanceKind.UB.value, 0.0)
        res = per_kind.get(BalanceKind.RES.value, 0.0)
        is_result_account = BalanceKind.RES.value in per_kind
        rows.append(
            {
                "Konto": account,
                "Kontonamn": names.get(account, ""),
                "Kategori": classify_label(account),
                "IB": ib,
                "UB": ub,
                "RES": res,
                "Förändring": res if is_result_account else ub - ib,
                "Konto_int": account_number_to_int(account),
            }
        )

    frame = pd.DataFrame(rows, columns=TRIAL_BALANCE_COLUMNS)
    if frame.empty:
        return frame
    frame["Konto_int"] = frame["Konto_int"].astype("Int64")
    return frame.sort_values(["Konto_int", "Konto"], na_position="last").reset_index(
        drop=True
    )
