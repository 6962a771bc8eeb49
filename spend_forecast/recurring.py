"""
Validation and partial updates for recurring rules.

The forecasting components degrade silently on bad frequencies; this module is
where strict checks happen before a rule is stored.
"""

import dataclasses
import logging
from typing import Any, Dict, Optional

from .errors import InvalidAmountError, InvalidCategoryError, UnrecognizedFrequencyError
from .frequency import DEFAULT_TABLE, FrequencyTable
from .models import CATEGORIES, RecurringRule, RecurringRulePatch

logger = logging.getLogger(__name__)


def validate_frequency(frequency: str, table: Optional[FrequencyTable] = None) -> str:
    table = table or DEFAULT_TABLE
    if not table.is_recognized(frequency):
        raise UnrecognizedFrequencyError(
            f"Invalid frequency {frequency!r}. Allowed values: {list(table.names)}"
        )
    return frequency


def validate_category(category: str) -> str:
    if category not in CATEGORIES:
        raise InvalidCategoryError(
            f"Invalid category {category!r}. Allowed values: {list(CATEGORIES)}"
        )
    return category


def validate_rule(rule: RecurringRule, table: Optional[FrequencyTable] = None) -> RecurringRule:
    if rule.amount < 0:
        raise InvalidAmountError(f"amount must not be negative: {rule.amount}")
    validate_category(rule.category)
    validate_frequency(rule.frequency, table)
    return rule


def build_rule(payload: Dict[str, Any],
               user_id: str,
               rule_id: Optional[str] = None,
               table: Optional[FrequencyTable] = None) -> RecurringRule:
    """
    Create a validated rule from a request payload

    Args:
        payload: Fields of the new rule (snake_case or camelCase keys)
        user_id: Owner of the rule; overrides any user id in the payload
        rule_id: Identifier assigned by the record store

    Returns:
        New active RecurringRule
    """
    rule = RecurringRule.from_dict({**payload, "user_id": user_id})
    rule = dataclasses.replace(rule, rule_id=rule_id or rule.rule_id, is_active=True)
    return validate_rule(rule, table)


def apply_patch(rule: RecurringRule,
                patch: RecurringRulePatch,
                table: Optional[FrequencyTable] = None) -> RecurringRule:
    """
    Apply a partial update in one step

    The patch is validated as a whole before any field changes, so a rejected
    patch leaves the rule untouched.

    Returns:
        New RecurringRule with the patched fields replaced
    """
    changes = patch.changes()
    if not changes:
        return rule

    updated = validate_rule(dataclasses.replace(rule, **changes), table)
    logger.info(f"Patched recurring rule {rule.rule_id}: {sorted(changes)}")
    return updated

