"""
In-Memory Record Store
Holds expenses, recurring rules and goal sets per user
"""

import logging
import uuid
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .errors import RecordNotFoundError
from .models import BudgetSnapshot, ExpenseRecord, GoalSet, RecurringRule

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """Simple in-memory store standing in for the external record store"""

    def __init__(self):
        self.expenses: Dict[str, Dict[str, ExpenseRecord]] = {}
        self.rules: Dict[str, Dict[str, RecurringRule]] = {}
        self.goals: Dict[str, GoalSet] = {}
        self.snapshots: Dict[str, BudgetSnapshot] = {}

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    def user_ids(self) -> List[str]:
        users = set(self.expenses) | set(self.rules) | set(self.goals)
        return sorted(users)

    # Expenses

    def save_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        self.expenses.setdefault(expense.user_id, {})[expense.expense_id] = expense
        return expense

    def get_expense(self, user_id: str, expense_id: str) -> ExpenseRecord:
        try:
            return self.expenses[user_id][expense_id]
        except KeyError:
            raise RecordNotFoundError(f"Expense {expense_id} not found for user {user_id}") from None

    def delete_expense(self, user_id: str, expense_id: str) -> ExpenseRecord:
        expense = self.get_expense(user_id, expense_id)
        del self.expenses[user_id][expense_id]
        return expense

    def expenses_for(self,
                     user_id: str,
                     start: Optional[date] = None,
                     end: Optional[date] = None) -> List[ExpenseRecord]:
        return [
            expense for expense in self.expenses.get(user_id, {}).values()
            if (start is None or expense.date >= start) and (end is None or expense.date <= end)
        ]

    # Recurring rules

    def save_rule(self, rule: RecurringRule) -> RecurringRule:
        self.rules.setdefault(rule.user_id, {})[rule.rule_id] = rule
        return rule

    def get_rule(self, user_id: str, rule_id: str) -> RecurringRule:
        try:
            return self.rules[user_id][rule_id]
        except KeyError:
            raise RecordNotFoundError(f"Recurring rule {rule_id} not found for user {user_id}") from None

    def delete_rule(self, user_id: str, rule_id: str) -> RecurringRule:
        rule = self.get_rule(user_id, rule_id)
        del self.rules[user_id][rule_id]
        return rule

    def rules_for(self, user_id: str, active_only: bool = False) -> List[RecurringRule]:
        rules = list(self.rules.get(user_id, {}).values())
        if active_only:
            rules = [rule for rule in rules if rule.is_active]
        return rules

    # Goals and snapshots

    def get_goals(self, user_id: str) -> Optional[GoalSet]:
        return self.goals.get(user_id)

    def save_goals(self, user_id: str, goals: GoalSet) -> GoalSet:
        self.goals[user_id] = goals
        return goals

    def get_snapshot(self, user_id: str) -> Optional[BudgetSnapshot]:
        return self.snapshots.get(user_id)

    def save_snapshot(self, snapshot: BudgetSnapshot) -> BudgetSnapshot:
        self.snapshots[snapshot.user_id] = snapshot
        return snapshot

    @classmethod
    def from_yaml(cls, path) -> "InMemoryRecordStore":
        """
        Load records from a YAML file

        Expected layout::

            users:
              <user_id>:
                budget: {total_budget: 1500, category_goals: {Food: 400}}
                expenses: [{description: ..., amount: ..., category: ..., date: ...}]
                recurring: [{description: ..., amount: ..., frequency: ..., start_date: ...}]
        """
        with open(Path(path), "r") as f:
            data = yaml.safe_load(f) or {}

        store = cls()
        for user_id, records in (data.get("users") or {}).items():
            user_id = str(user_id)
            records = records or {}
            if records.get("budget") is not None:
                store.save_goals(user_id, GoalSet.from_dict(records["budget"]))
            for payload in records.get("expenses") or []:
                expense = ExpenseRecord.from_dict({"expense_id": cls.new_id(), **payload, "user_id": user_id})
                store.save_expense(expense)
            for payload in records.get("recurring") or []:
                rule = RecurringRule.from_dict({"rule_id": cls.new_id(), **payload, "user_id": user_id})
                store.save_rule(rule)

        logger.info(f"Loaded records for {len(store.user_ids())} users from {path}")
        return store
