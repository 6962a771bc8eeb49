"""
Records consumed and produced by the forecasting engine.

Inputs (expenses, recurring rules, goal sets) come from the record store as
plain dicts and are converted with ``from_dict``; outputs are converted back
with ``to_dict`` for whoever renders or stores them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from .errors import InvalidDateError, InvalidFlagError, MissingFieldError
from .money import ZERO, round_money, to_amount, to_decimal

CATEGORIES = ("Food", "Utilities", "Rent", "Entertainment", "Other")

_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off")


def parse_date(value: Any) -> Optional[date]:
    """Accept a date, a datetime or an ISO ``YYYY-MM-DD`` string"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def parse_bool(value: Any, default: Optional[bool] = None) -> Optional[bool]:
    """Accept a bool, 0/1 or a true/false, yes/no, on/off string"""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise InvalidFlagError(f"Invalid boolean value {value!r}")


def _pick(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return default


def _require(payload: Dict[str, Any], *keys: str) -> Any:
    value = _pick(payload, *keys)
    if value is None or value == "":
        raise MissingFieldError(f"Missing required field: {keys[0]}")
    return value


@dataclass(frozen=True)
class ExpenseRecord:
    """A single expense as stored by the expense collaborator."""

    user_id: str
    description: str
    amount: Decimal
    category: str
    date: date
    expense_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expense_id": self.expense_id,
            "user_id": self.user_id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ExpenseRecord":
        return cls(
            user_id=str(_require(payload, "user_id", "userId")),
            description=_pick(payload, "description", default="") or "",
            amount=to_amount(_require(payload, "amount")),
            category=_require(payload, "category"),
            date=parse_date(_require(payload, "date")),
            expense_id=_pick(payload, "expense_id", "id"),
        )


@dataclass(frozen=True)
class RecurringRule:
    """A repeating obligation.

    Frozen: ``start_date`` is the fixed anchor every occurrence is computed
    from. Changes produce a new rule (see ``recurring.apply_patch``).
    """

    user_id: str
    description: str
    amount: Decimal
    category: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True
    rule_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "user_id": self.user_id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "frequency": self.frequency,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RecurringRule":
        return cls(
            user_id=str(_require(payload, "user_id", "userId")),
            description=_require(payload, "description"),
            amount=to_amount(_require(payload, "amount")),
            category=_require(payload, "category"),
            frequency=_require(payload, "frequency"),
            start_date=parse_date(_require(payload, "start_date", "startDate")),
            end_date=parse_date(_pick(payload, "end_date", "endDate")),
            is_active=parse_bool(_pick(payload, "is_active", "isActive"), default=True),
            rule_id=_pick(payload, "rule_id", "id"),
        )


@dataclass
class GoalSet:
    """Monthly budget plus optional per-category goals."""

    total_budget: Decimal = ZERO
    category_goals: Dict[str, Decimal] = field(default_factory=dict)

    def goal_for(self, category: str) -> Decimal:
        return self.category_goals.get(category, ZERO)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_budget": self.total_budget,
            "category_goals": dict(self.category_goals),
        }

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "GoalSet":
        if not payload:
            return cls()
        goals = _pick(payload, "category_goals", "categoryGoals", default=None) or {}
        return cls(
            total_budget=to_decimal(_pick(payload, "total_budget", "totalBudget", default=0)),
            category_goals={cat: to_decimal(value) for cat, value in goals.items()},
        )


@dataclass(frozen=True)
class ForecastResult:
    """Linear end-of-month projection for one budget line.

    ``percent_of_budget`` is None when the goal is zero (undefined ratio).
    """

    current_spend: Decimal
    projected_spend: Decimal
    budget: Decimal
    days_into_month: int
    average_daily_spend: Decimal
    will_overspend: bool
    overspend_amount: Decimal
    percent_of_budget: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_spend": self.current_spend,
            "projected_spend": self.projected_spend,
            "budget": self.budget,
            "days_into_month": self.days_into_month,
            "average_daily_spend": self.average_daily_spend,
            "will_overspend": self.will_overspend,
            "overspend_amount": self.overspend_amount,
            "percent_of_budget": self.percent_of_budget,
        }


@dataclass(frozen=True)
class BudgetForecast:
    """Overall forecast including the monthly recurring total"""

    forecast: ForecastResult
    total_recurring: Decimal

    def to_dict(self) -> Dict[str, Any]:
        payload = self.forecast.to_dict()
        payload["total_recurring"] = self.total_recurring
        return payload


@dataclass(frozen=True)
class CategoryForecastResult:
    recurring: Decimal
    variable: Decimal
    projected_spend: Decimal
    budget: Decimal
    will_overspend: bool
    overspend_amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recurring": self.recurring,
            "variable": self.variable,
            "projected_spend": self.projected_spend,
            "budget": self.budget,
            "will_overspend": self.will_overspend,
            "overspend_amount": self.overspend_amount,
        }


@dataclass(frozen=True)
class UpcomingOccurrence:
    description: str
    category: str
    amount: Decimal
    next_date: date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "category": self.category,
            "amount": self.amount,
            "next_date": self.next_date.isoformat(),
        }


@dataclass(frozen=True)
class BudgetSnapshot:
    """Cached budget aggregate written back after every expense mutation"""

    user_id: str
    total_budget: Decimal
    expenses: Decimal
    remaining: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "total_budget": round_money(self.total_budget),
            "expenses": round_money(self.expenses),
            "remaining": round_money(self.remaining),
        }


@dataclass(frozen=True)
class RecurringRulePatch:
    """Partial update of a recurring rule.

    A field left as None is not part of the patch and stays unchanged on the
    rule. ``end_date`` can only be set, not cleared, matching the record
    collaborator's update semantics.
    """

    description: Optional[str] = None
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    frequency: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        return {
            name: value
            for name, value in (
                ("description", self.description),
                ("amount", self.amount),
                ("category", self.category),
                ("frequency", self.frequency),
                ("start_date", self.start_date),
                ("end_date", self.end_date),
                ("is_active", self.is_active),
            )
            if value is not None
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RecurringRulePatch":
        amount = _pick(payload, "amount")
        is_active = _pick(payload, "is_active", "isActive")
        return cls(
            description=_pick(payload, "description") or None,
            amount=to_amount(amount) if amount is not None else None,
            category=_pick(payload, "category") or None,
            frequency=_pick(payload, "frequency") or None,
            start_date=parse_date(_pick(payload, "start_date", "startDate")),
            end_date=parse_date(_pick(payload, "end_date", "endDate")),
            is_active=parse_bool(is_active),
        )
