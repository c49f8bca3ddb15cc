"""Intervallsummor över sorterade kontonummer med numpy."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Tuple

import numpy as np

from ..bas import AccountRange, account_number_to_int
from ..sie.models import SieBalance

__all__ = ["AccountSums"]


class AccountSums:
    """Belopp per konto, sorterade för snabba summor över kontointervall.

    Konton utan numeriskt kontonummer ignoreras. Flera belopp på samma konto
    summeras.
    """

    __slots__ = ("_accounts", "_values", "_amounts")

    def __init__(self, amounts: Mapping[int, float]) -> None:
        self._amounts: Dict[int, float] = dict(amounts)
        accounts = np.array(sorted(self._amounts), dtype=np.int64)
        values = np.array([self._amounts[int(a)] for a in accounts], dtype=float)
        self._accounts = accounts
        self._values = values

    @classmethod
    def from_items(cls, items: Iterable[Tuple[str, float]]) -> "AccountSums":
        totals: Dict[int, float] = {}
        for account, amount in items:
            number = account_number_to_int(account)
            if number is None:
                continue
            totals[number] = totals.get(number, 0.0) + float(amount)
        return cls(totals)

    @classmethod
    def from_mapping(cls, amounts: Mapping[str, float]) -> "AccountSums":
        return cls.from_items(amounts.items())

    @classmethod
    def from_balances(cls, balances: Iterable[SieBalance]) -> "AccountSums":
        return cls.from_items((balance.account, balance.amount) for balance in balances)

    @classmethod
    def empty(cls) -> "AccountSums":
        return cls({})

    def __len__(self) -> int:
        return len(self._amounts)

    def __add__(self, other: "AccountSums") -> "AccountSums":
        totals = dict(self._amounts)
        for account, amount in other._amounts.items():
            totals[account] = totals.get(account, 0.0) + amount
        return AccountSums(totals)

    def amount(self, account: int) -> float:
        return self._amounts.get(account, 0.0)

    def total(self, range_: AccountRange) -> float:
        """Summan för alla konton i ``range_`` (med teckenkonventionen kvar)."""

        if not len(self._accounts):
            return 0.0
        left = int(np.searchsorted(self._accounts, range_.min, side="left"))
        right = int(np.searchsorted(self._accounts, range_.max, side="right")) - 1
        if left > right:
            return 0.0
        return float(self._values[left : right + 1].sum())

    def magnitude(self, range_: AccountRange) -> float:
        """Absolutbeloppet av intervallsumman, för skulder, eget kapital och intäkter."""

        return abs(self.total(range_))
