"""
Category Forecast Aggregator Module
Splits category spend into recurring and variable parts and forecasts each
category against its goal
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .frequency import DEFAULT_TABLE, FrequencyTable
from .models import (
    BudgetForecast,
    CategoryForecastResult,
    ExpenseRecord,
    GoalSet,
    RecurringRule,
)
from .money import ZERO, round_money, to_decimal
from .projector import ForecastCalculator

logger = logging.getLogger(__name__)


def totals_by_category(expenses: Iterable[ExpenseRecord],
                       start: Optional[date] = None,
                       end: Optional[date] = None) -> Dict[str, Decimal]:
    """Sum of expense amounts grouped by category, optionally within [start, end]"""
    totals: Dict[str, Decimal] = {}
    for expense in expenses:
        if start is not None and expense.date < start:
            continue
        if end is not None and expense.date > end:
            continue
        totals[expense.category] = totals.get(expense.category, ZERO) + to_decimal(expense.amount)
    return totals


def total_spend(expenses: Iterable[ExpenseRecord],
                start: Optional[date] = None,
                end: Optional[date] = None) -> Decimal:
    return sum(totals_by_category(expenses, start, end).values(), ZERO)


class CategoryForecastAggregator:
    """Merges actual spend with recurring monthly equivalents per category"""

    def __init__(self,
                 frequency_table: Optional[FrequencyTable] = None,
                 calculator: Optional[ForecastCalculator] = None):
        self.frequency_table = frequency_table or DEFAULT_TABLE
        self.calculator = calculator or ForecastCalculator()

    def recurring_by_category(self, rules: Iterable[RecurringRule]) -> Dict[str, Decimal]:
        """Unrounded monthly equivalent of active rules, per category"""
        recurring: Dict[str, Decimal] = {}
        for rule in rules:
            if not rule.is_active:
                continue
            monthly = self.frequency_table.monthly_equivalent(to_decimal(rule.amount), rule.frequency)
            recurring[rule.category] = recurring.get(rule.category, ZERO) + monthly
        return recurring

    def monthly_impact(self, rules: Iterable[RecurringRule]) -> Decimal:
        """Total monthly equivalent of all active rules"""
        return round_money(sum(self.recurring_by_category(rules).values(), ZERO))

    def aggregate_by_category(self,
                              actual_by_category: Dict[str, Decimal],
                              active_rules: Iterable[RecurringRule],
                              goals: GoalSet,
                              days_elapsed: int) -> Dict[str, CategoryForecastResult]:
        """
        Forecast every category that has spend or recurring obligations

        Args:
            actual_by_category: Spend so far this month per category
            active_rules: Active recurring rules for the user
            goals: Budget goals; missing category goals count as 0
            days_elapsed: Days into the month

        Returns:
            Mapping of category to CategoryForecastResult
        """
        recurring_by_category = self.recurring_by_category(active_rules)

        categories: List[str] = list(actual_by_category)
        categories.extend(cat for cat in recurring_by_category if cat not in actual_by_category)

        results = {}
        for category in categories:
            recurring = recurring_by_category.get(category, ZERO)
            spent = to_decimal(actual_by_category.get(category, ZERO))
            # Bills not yet charged this month would push this negative
            variable = max(spent - recurring, ZERO)
            projected_total = variable + recurring
            goal = to_decimal(goals.goal_for(category))

            forecast = self.calculator.forecast(projected_total, goal, days_elapsed)

            results[category] = CategoryForecastResult(
                recurring=round_money(recurring),
                variable=round_money(variable),
                projected_spend=round_money(projected_total),
                budget=round_money(goal),
                will_overspend=forecast.will_overspend,
                overspend_amount=forecast.overspend_amount,
            )

        logger.debug(f"Category forecasts computed for {len(results)} categories")
        return results

    def overall_forecast(self,
                         month_spend,
                         rules: Iterable[RecurringRule],
                         goals: GoalSet,
                         days_elapsed: int) -> BudgetForecast:
        """
        Forecast the total budget with recurring obligations added to spend

        Args:
            month_spend: Total spent so far this month
            rules: Recurring rules for the user (inactive ones are ignored)
            goals: Budget goals; ``total_budget`` is the comparison target
            days_elapsed: Days into the month

        Returns:
            BudgetForecast with the monthly recurring total alongside
        """
        total_recurring = sum(self.recurring_by_category(rules).values(), ZERO)
        combined = to_decimal(month_spend) + total_recurring
        forecast = self.calculator.forecast(combined, goals.total_budget, days_elapsed)
        return BudgetForecast(forecast=forecast, total_recurring=round_money(total_recurring))
