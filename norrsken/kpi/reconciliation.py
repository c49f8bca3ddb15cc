"""Avstämning av debet mot kredit i journaldata."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List, Tuple, Union

from .. import settings
from ..helpers.number_parsing import to_decimal

if TYPE_CHECKING:  # pragma: no cover - endast för typkontroll
    from ..sie.models import SiePosting
    from .ledger import Journal

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "ReconciliationReport",
    "UnbalancedVerification",
    "check_reconciliation",
    "find_unbalanced_verifications",
]

Tolerance = Union[float, Decimal, None]


def _tolerance(value: Tolerance) -> Decimal:
    if value is None:
        value = settings.RECONCILIATION_TOLERANCE
    return to_decimal(value)


def _within(drift: Decimal, limit: Decimal) -> bool:
    # Toleransen 0 kräver exakt balans.
    return drift < limit or drift == 0


@dataclass(frozen=True)
class ReconciliationReport:
    """Summerad debet och kredit för alla journaler.

    ``balanced`` är falskt när skillnaden når toleransen. Nyckeltalen
    beräknas ändå, men bör då behandlas med försiktighet.
    """

    total_debit: Decimal
    total_credit: Decimal
    drift: Decimal
    tolerance: Decimal
    balanced: bool
    journal_count: int
    entry_count: int

    @property
    def drift_amount(self) -> float:
        return float(self.drift)

    def as_dict(self) -> Dict[str, object]:
        return {
            "total_debit": float(self.total_debit),
            "total_credit": float(self.total_credit),
            "drift": float(self.drift),
            "tolerance": float(self.tolerance),
            "balanced": self.balanced,
            "journal_count": self.journal_count,
            "entry_count": self.entry_count,
        }


def check_reconciliation(
    journals: Iterable["Journal"], tolerance: Tolerance = None
) -> ReconciliationReport:
    """Summerar debet och kredit och rapporterar differensen."""

    limit = _tolerance(tolerance)
    total_debit = Decimal("0")
    total_credit = Decimal("0")
    journal_count = 0
    entry_count = 0
    for journal in journals:
        journal_count += 1
        for entry in journal.entries:
            entry_count += 1
            total_debit += to_decimal(entry.debit)
            total_credit += to_decimal(entry.credit)

    drift = abs(total_debit - total_credit)
    balanced = _within(drift, limit)
    if not balanced:
        _LOGGER.warning(
            "Avstämningen misslyckades: debet/kredit skiljer %s. Synkroniseringen kan vara ofullständig.",
            f"{drift:.2f}",
        )
    return ReconciliationReport(
        total_debit=total_debit,
        total_credit=total_credit,
        drift=drift,
        tolerance=limit,
        balanced=balanced,
        journal_count=journal_count,
        entry_count=entry_count,
    )


@dataclass(frozen=True)
class UnbalancedVerification:
    series: str
    number: str
    total: Decimal


def find_unbalanced_verifications(
    postings: Iterable["SiePosting"], tolerance: Tolerance = None
) -> List[UnbalancedVerification]:
    """Verifikationer vars postningar inte summerar till noll."""

    limit = _tolerance(tolerance)
    totals: Dict[Tuple[str, str], Decimal] = {}
    for posting in postings:
        key = (posting.series, posting.number)
        totals[key] = totals.get(key, Decimal("0")) + to_decimal(posting.amount)

    unbalanced = [
        UnbalancedVerification(series=series, number=number, total=total)
        for (series, number), total in totals.items()
        if not _within(abs(total), limit)
    ]
    if unbalanced:
        _LOGGER.warning("%d verifikationer balanserar inte", len(unbalanced))
    return unbalanced
