"""
Occurrence Scheduler Module
Works out when recurring rules next fire and which fire within a window
"""

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from .frequency import DEFAULT_TABLE, FrequencyTable
from .models import RecurringRule, UpcomingOccurrence
from .money import round_money, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 7


class OccurrenceScheduler:
    """Computes occurrence dates from a rule's fixed start-date anchor"""

    def __init__(self, frequency_table: Optional[FrequencyTable] = None):
        self.frequency_table = frequency_table or DEFAULT_TABLE

    def next_occurrence(self, rule: RecurringRule, reference_date: date) -> Optional[date]:
        """
        First occurrence on or after the reference date

        Args:
            rule: Recurring rule to schedule
            reference_date: Date to look forward from

        Returns:
            Occurrence date, the start date itself when it is not in the past,
            or None for an unrecognized frequency
        """
        frequency = self.frequency_table.get(rule.frequency)
        if frequency is None:
            logger.warning(
                f"Skipping rule {rule.description!r}: unrecognized frequency {rule.frequency!r}"
            )
            return None

        anchor = rule.start_date
        if anchor >= reference_date:
            return anchor

        periods = frequency.periods_before(anchor, reference_date)
        candidate = frequency.advance(anchor, periods)
        while candidate < reference_date:
            periods += 1
            candidate = frequency.advance(anchor, periods)
        return candidate

    def upcoming(self,
                 rules: Iterable[RecurringRule],
                 reference_date: date,
                 horizon_days: int = DEFAULT_HORIZON_DAYS) -> List[UpcomingOccurrence]:
        """
        Occurrences of active rules falling within the lookahead window

        Args:
            rules: Recurring rules for one user
            reference_date: Start of the window
            horizon_days: Window length in days (inclusive end)

        Returns:
            Occurrences sorted by date, ties kept in input order
        """
        window_end = reference_date + timedelta(days=horizon_days)
        upcoming = []

        for rule in rules:
            if not rule.is_active:
                continue
            if rule.end_date is not None and rule.end_date < reference_date:
                continue

            next_date = self.next_occurrence(rule, reference_date)
            if next_date is None or next_date > window_end:
                continue

            upcoming.append(UpcomingOccurrence(
                description=rule.description,
                category=rule.category,
                amount=round_money(to_decimal(rule.amount)),
                next_date=next_date,
            ))

        # sorted() is stable, so equal dates keep input order
        return sorted(upcoming, key=lambda item: item.next_date)
