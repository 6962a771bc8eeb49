"""Shared pytest configuration for the project test suite."""
from __future__ import annotations

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest


# Ensure the repository root (which contains the ``spend_forecast`` package) is importable.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from spend_forecast.models import RecurringRule  # noqa: E402


@pytest.fixture
def make_rule():
    """Factory for recurring rules with sensible defaults"""

    def _make_rule(frequency="monthly",
                   start_date=date(2024, 1, 15),
                   amount="100",
                   category="Utilities",
                   description="Internet",
                   end_date=None,
                   is_active=True,
                   user_id="user-1",
                   rule_id=None):
        return RecurringRule(
            user_id=user_id,
            description=description,
            amount=Decimal(str(amount)),
            category=category,
            frequency=frequency,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
            rule_id=rule_id,
        )

    return _make_rule
