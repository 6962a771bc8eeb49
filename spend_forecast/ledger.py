"""
Budget Ledger Module
Applies expense and recurring-rule mutations and keeps the cached budget
snapshot (expenses, remaining) in step with the expense set
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from .aggregator import total_spend
from .errors import RecordNotFoundError
from .models import BudgetSnapshot, ExpenseRecord, GoalSet, RecurringRule, RecurringRulePatch
from .money import to_decimal
from .recurring import apply_patch, build_rule, validate_category
from .store import InMemoryRecordStore

logger = logging.getLogger(__name__)


class BudgetLedger:
    """Serializes writes per user and recomputes the budget snapshot.

    The snapshot is always rebuilt from the full expense set while the user's
    lock is held, so two concurrent writes cannot leave a stale total behind.
    """

    def __init__(self, store: Optional[InMemoryRecordStore] = None):
        self.store = store if store is not None else InMemoryRecordStore()
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def user_lock(self, user_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(user_id, threading.RLock())
        with lock:
            yield

    def _recompute(self, user_id: str, create: bool = False) -> Optional[BudgetSnapshot]:
        """Rebuild the snapshot from stored expenses; caller holds the user lock"""
        goals = self.store.get_goals(user_id)
        if goals is None:
            if not create:
                return None
            logger.info(f"No budget found for user {user_id}, creating one")
            goals = self.store.save_goals(user_id, GoalSet())

        expenses = total_spend(self.store.expenses_for(user_id))
        snapshot = BudgetSnapshot(
            user_id=user_id,
            total_budget=goals.total_budget,
            expenses=expenses,
            remaining=goals.total_budget - expenses,
        )
        self.store.save_snapshot(snapshot)
        logger.info(f"Budget updated for {user_id}: expenses={snapshot.expenses}, remaining={snapshot.remaining}")
        return snapshot

    def _expense_from_payload(self, user_id: str, expense_id: str, payload: Dict[str, Any]) -> ExpenseRecord:
        expense = ExpenseRecord.from_dict({**payload, "user_id": user_id, "expense_id": expense_id})
        validate_category(expense.category)
        return expense

    # Expenses

    def add_expense(self, user_id: str, payload: Dict[str, Any]) -> ExpenseRecord:
        expense = self._expense_from_payload(user_id, self.store.new_id(), payload)
        with self.user_lock(user_id):
            self.store.save_expense(expense)
            self._recompute(user_id)
        return expense

    def update_expense(self, user_id: str, expense_id: str, payload: Dict[str, Any]) -> ExpenseRecord:
        expense = self._expense_from_payload(user_id, expense_id, payload)
        with self.user_lock(user_id):
            self.store.get_expense(user_id, expense_id)
            self.store.save_expense(expense)
            self._recompute(user_id)
        return expense

    def delete_expense(self, user_id: str, expense_id: str) -> BudgetSnapshot:
        with self.user_lock(user_id):
            self.store.delete_expense(user_id, expense_id)
            logger.info(f"Deleted expense {expense_id} for user {user_id}")
            return self._recompute(user_id, create=True)

    # Budget

    def set_budget(self,
                   user_id: str,
                   total_budget,
                   category_goals: Optional[Dict[str, Any]] = None) -> BudgetSnapshot:
        """
        Create or update a user's budget

        Args:
            user_id: Budget owner
            total_budget: Monthly budget amount
            category_goals: Per-category goals; existing goals are kept when None

        Returns:
            Fresh BudgetSnapshot
        """
        total = to_decimal(total_budget)
        goals_update = None
        if category_goals is not None:
            goals_update = {validate_category(cat): to_decimal(value) for cat, value in category_goals.items()}

        with self.user_lock(user_id):
            existing = self.store.get_goals(user_id) or GoalSet()
            goals = GoalSet(
                total_budget=total,
                category_goals=goals_update if goals_update is not None else dict(existing.category_goals),
            )
            self.store.save_goals(user_id, goals)
            return self._recompute(user_id)

    def snapshot(self, user_id: str) -> BudgetSnapshot:
        snapshot = self.store.get_snapshot(user_id)
        if snapshot is None:
            with self.user_lock(user_id):
                snapshot = self._recompute(user_id)
        if snapshot is None:
            raise RecordNotFoundError(f"No budget found for user {user_id}")
        return snapshot

    # Recurring rules

    def add_rule(self, user_id: str, payload: Dict[str, Any]) -> RecurringRule:
        rule = build_rule(payload, user_id, rule_id=self.store.new_id())
        with self.user_lock(user_id):
            return self.store.save_rule(rule)

    def patch_rule(self, user_id: str, rule_id: str, patch: RecurringRulePatch) -> RecurringRule:
        with self.user_lock(user_id):
            rule = self.store.get_rule(user_id, rule_id)
            return self.store.save_rule(apply_patch(rule, patch))

    def deactivate_rule(self, user_id: str, rule_id: str) -> RecurringRule:
        return self.patch_rule(user_id, rule_id, RecurringRulePatch(is_active=False))

    def remove_rule(self, user_id: str, rule_id: str) -> RecurringRule:
        with self.user_lock(user_id):
            return self.store.delete_rule(user_id, rule_id)

