"""
Forecast Calculator Module
Projects end-of-month spend from a linear extrapolation of spend-to-date
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from .models import ForecastResult
from .money import ZERO, round_money, round_percent, to_decimal

# Fixed month length used for the projection, independent of the calendar.
DAYS_IN_MONTH = 30


def days_into_month(today: Optional[date] = None) -> int:
    """Days elapsed in the current month, counting today"""
    if today is None:
        today = date.today()
    return today.day


def month_bounds(today: Optional[date] = None) -> Tuple[date, date]:
    """First and last calendar day of the month containing ``today``"""
    if today is None:
        today = date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


class ForecastCalculator:
    """Projects monthly spending and compares it with a goal"""

    def __init__(self, days_in_month: int = DAYS_IN_MONTH):
        self.days_in_month = days_in_month

    def forecast(self, spend_to_date, goal, days_elapsed: int) -> ForecastResult:
        """
        Project end-of-month spend

        Args:
            spend_to_date: Total spent so far this month
            goal: Budget for the month (or category)
            days_elapsed: Days into the month

        Returns:
            ForecastResult rounded to 2 places
        """
        spend = to_decimal(spend_to_date)
        goal = to_decimal(goal)

        if days_elapsed == 0:
            return ForecastResult(
                current_spend=round_money(ZERO),
                projected_spend=round_money(goal),
                budget=round_money(goal),
                days_into_month=0,
                average_daily_spend=round_money(ZERO),
                will_overspend=False,
                overspend_amount=round_money(ZERO),
                percent_of_budget=0,
            )

        average_daily = spend / days_elapsed
        # Day 31 would otherwise project below what's already spent
        remaining_days = max(self.days_in_month - days_elapsed, 0)
        projected = spend + average_daily * remaining_days

        if goal == 0:
            # Any projected spend against a zero goal is overspend; the
            # percentage is undefined.
            percent: Optional[Decimal] = None
        else:
            percent = projected / goal * 100

        return ForecastResult(
            current_spend=round_money(spend),
            projected_spend=round_money(projected),
            budget=round_money(goal),
            days_into_month=days_elapsed,
            average_daily_spend=round_money(average_daily),
            will_overspend=projected > goal,
            overspend_amount=round_money(max(ZERO, projected - goal)),
            percent_of_budget=round_percent(percent),
        )
