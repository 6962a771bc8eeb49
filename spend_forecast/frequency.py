"""
Frequency Table Module
Converts recurring amounts to monthly equivalents and steps dates forward
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, NamedTuple, Optional

from dateutil.relativedelta import relativedelta

from .money import ZERO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frequency:
    """One row of the frequency table.

    The monthly factor is kept as multiplier/divisor so yearly amounts are
    divided by exactly 12 instead of multiplied by a rounded 1/12.
    """

    name: str
    multiplier: Decimal
    divisor: Decimal
    step: relativedelta

    def monthly_equivalent(self, amount: Decimal) -> Decimal:
        return amount * self.multiplier / self.divisor

    def advance(self, anchor: date, periods: int) -> date:
        """Date of occurrence number ``periods`` counted from ``anchor``.

        Month and year steps are applied to the anchor in one go, so the
        day-of-month clamps to the end of short months without drifting
        (Jan 31 -> Feb 28 -> Mar 31).
        """
        return anchor + self.step * periods

    def periods_before(self, anchor: date, reference: date) -> int:
        """Lower bound on the number of whole steps from anchor to reference"""
        if reference <= anchor:
            return 0
        if self.step.days:
            return (reference - anchor).days // self.step.days

        months_per_step = self.step.years * 12 + self.step.months
        elapsed = (reference.year - anchor.year) * 12 + reference.month - anchor.month
        return max(elapsed - 1, 0) // months_per_step


class MonthlyConversion(NamedTuple):
    amount: Decimal
    recognized: bool


class FrequencyTable:
    """Single lookup table for every frequency-dependent computation"""

    DEFAULT_FREQUENCIES = (
        Frequency("daily", Decimal("30"), Decimal("1"), relativedelta(days=1)),
        Frequency("weekly", Decimal("4.33"), Decimal("1"), relativedelta(days=7)),
        Frequency("biweekly", Decimal("2.17"), Decimal("1"), relativedelta(days=14)),
        Frequency("monthly", Decimal("1"), Decimal("1"), relativedelta(months=1)),
        Frequency("yearly", Decimal("1"), Decimal("12"), relativedelta(years=1)),
    )

    def __init__(self, frequencies=None):
        rows = frequencies if frequencies is not None else self.DEFAULT_FREQUENCIES
        self._frequencies: Dict[str, Frequency] = {row.name: row for row in rows}

    @property
    def names(self):
        return tuple(self._frequencies)

    def get(self, frequency: Optional[str]) -> Optional[Frequency]:
        if frequency is None:
            return None
        return self._frequencies.get(frequency)

    def is_recognized(self, frequency: Optional[str]) -> bool:
        return self.get(frequency) is not None

    def convert(self, amount: Decimal, frequency: str) -> MonthlyConversion:
        """
        Convert a per-occurrence amount to its monthly equivalent

        Args:
            amount: Amount charged per occurrence
            frequency: Frequency tag

        Returns:
            MonthlyConversion; ``recognized`` is False when the frequency is
            unknown and the amount is a zero placeholder, not a computed value
        """
        row = self.get(frequency)
        if row is None:
            logger.warning(f"Unrecognized frequency {frequency!r}, contributing 0 per month")
            return MonthlyConversion(ZERO, False)
        return MonthlyConversion(row.monthly_equivalent(amount), True)

    def monthly_equivalent(self, amount: Decimal, frequency: str) -> Decimal:
        return self.convert(amount, frequency).amount

    def advance(self, anchor: date, frequency: str, periods: int = 1) -> Optional[date]:
        row = self.get(frequency)
        if row is None:
            return None
        return row.advance(anchor, periods)


DEFAULT_TABLE = FrequencyTable()
FREQUENCIES = DEFAULT_TABLE.names
