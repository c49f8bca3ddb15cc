"""Beräkningspolicy för justerat eget kapital."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .. import settings
from ..bas import CORPORATE_TAX_RATE

__all__ = ["KpiPolicy"]


@dataclass(frozen=True)
class KpiPolicy:
    """Styr hur obeskattade reserver och ägarskulder behandlas.

    ``owner_debt_as_equity`` räknar räntefria långfristiga skulder till ägare
    och koncernföretag (2360-2399) som eget kapital, vilket är praxis vid
    analys av mindre bolag. Utan den räknas kontona som vanliga skulder.
    """

    corporate_tax_rate: float = CORPORATE_TAX_RATE
    owner_debt_as_equity: bool = True

    def __post_init__(self) -> None:
        if not 0.0 <= self.corporate_tax_rate < 1.0:
            raise ValueError(
                f"Ogiltig bolagsskattesats: {self.corporate_tax_rate!r} "
                "(förväntade ett värde mellan 0 och 1)."
            )

    @property
    def equity_portion(self) -> float:
        return 1.0 - self.corporate_tax_rate

    @classmethod
    def from_settings(cls) -> "KpiPolicy":
        rate: Optional[float] = settings.CORPORATE_TAX_RATE_OVERRIDE
        return cls(
            corporate_tax_rate=CORPORATE_TAX_RATE if rate is None else rate,
            owner_debt_as_equity=settings.OWNER_DEBT_AS_EQUITY,
        )
