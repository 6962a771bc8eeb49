"""
Test Suite: Recurring rule occurrence scheduling
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from spend_forecast.scheduler import OccurrenceScheduler


@pytest.fixture
def scheduler():
    return OccurrenceScheduler()


class TestNextOccurrence:
    """Next occurrence on or after a reference date"""

    def test_future_start_returned_unchanged(self, scheduler, make_rule):
        rule = make_rule(frequency="weekly", start_date=date(2024, 6, 1))

        assert scheduler.next_occurrence(rule, date(2024, 5, 20)) == date(2024, 6, 1)

    def test_start_on_reference_date(self, scheduler, make_rule):
        rule = make_rule(frequency="daily", start_date=date(2024, 5, 20))

        assert scheduler.next_occurrence(rule, date(2024, 5, 20)) == date(2024, 5, 20)

    @pytest.mark.parametrize("frequency,reference,expected", [
        ("daily", date(2024, 3, 1), date(2024, 3, 1)),
        ("weekly", date(2024, 1, 20), date(2024, 1, 22)),
        ("weekly", date(2024, 1, 22), date(2024, 1, 22)),
        ("biweekly", date(2024, 1, 20), date(2024, 1, 29)),
        ("monthly", date(2024, 2, 16), date(2024, 3, 15)),
        ("monthly", date(2024, 2, 15), date(2024, 2, 15)),
        ("yearly", date(2024, 1, 16), date(2025, 1, 15)),
    ])
    def test_advances_past_reference(self, scheduler, make_rule, frequency, reference, expected):
        rule = make_rule(frequency=frequency, start_date=date(2024, 1, 15))

        assert scheduler.next_occurrence(rule, reference) == expected

    def test_monthly_from_month_end_anchor(self, scheduler, make_rule):
        rule = make_rule(frequency="monthly", start_date=date(2024, 1, 31))

        assert scheduler.next_occurrence(rule, date(2024, 2, 1)) == date(2024, 2, 29)
        assert scheduler.next_occurrence(rule, date(2024, 3, 1)) == date(2024, 3, 31)
        assert scheduler.next_occurrence(rule, date(2024, 4, 1)) == date(2024, 4, 30)

    def test_anchor_is_not_mutated(self, scheduler, make_rule):
        rule = make_rule(frequency="monthly", start_date=date(2023, 1, 31))

        scheduler.next_occurrence(rule, date(2024, 7, 4))

        assert rule.start_date == date(2023, 1, 31)

    def test_long_running_daily_rule(self, scheduler, make_rule):
        rule = make_rule(frequency="daily", start_date=date(2000, 1, 1))

        assert scheduler.next_occurrence(rule, date(2024, 7, 4)) == date(2024, 7, 4)

    def test_unrecognized_frequency_returns_none(self, scheduler, make_rule):
        rule = make_rule(frequency="quarterly", start_date=date(2020, 1, 1))

        assert scheduler.next_occurrence(rule, date(2024, 1, 1)) is None

    def test_unrecognized_frequency_future_start(self, scheduler, make_rule):
        rule = make_rule(frequency="quarterly", start_date=date(2030, 1, 1))

        assert scheduler.next_occurrence(rule, date(2024, 1, 1)) is None

    @pytest.mark.parametrize("frequency", ["daily", "weekly", "biweekly", "monthly", "yearly"])
    def test_result_never_before_reference(self, scheduler, make_rule, frequency):
        rule = make_rule(frequency=frequency, start_date=date(2021, 8, 31))
        reference = date(2024, 1, 1)

        for offset in range(0, 400, 13):
            day = reference + timedelta(days=offset)
            result = scheduler.next_occurrence(rule, day)
            assert result >= day


class TestUpcoming:
    """Occurrences within a lookahead window"""

    def test_sorted_by_next_date(self, scheduler, make_rule):
        rules = [
            make_rule(description="Gym", frequency="monthly", start_date=date(2024, 1, 20)),
            make_rule(description="Coffee", frequency="daily", start_date=date(2024, 1, 1)),
            make_rule(description="Rent", frequency="monthly", start_date=date(2024, 1, 17)),
        ]

        upcoming = scheduler.upcoming(rules, date(2024, 3, 16), horizon_days=7)

        assert [item.description for item in upcoming] == ["Coffee", "Rent", "Gym"]
        assert [item.next_date for item in upcoming] == [
            date(2024, 3, 16), date(2024, 3, 17), date(2024, 3, 20)
        ]

    def test_ties_keep_input_order(self, scheduler, make_rule):
        rules = [
            make_rule(description="B", start_date=date(2024, 1, 18)),
            make_rule(description="A", start_date=date(2024, 1, 18)),
            make_rule(description="C", frequency="weekly", start_date=date(2024, 1, 7)),
        ]

        upcoming = scheduler.upcoming(rules, date(2024, 2, 16), horizon_days=3)

        assert [item.description for item in upcoming] == ["B", "A", "C"]

    def test_excludes_inactive_and_ended(self, scheduler, make_rule):
        reference = date(2024, 3, 10)
        rules = [
            make_rule(description="inactive", frequency="daily", is_active=False),
            make_rule(description="ended", frequency="daily", end_date=date(2024, 3, 9)),
            make_rule(description="ends today", frequency="daily", end_date=date(2024, 3, 10)),
            make_rule(description="open", frequency="daily"),
        ]

        upcoming = scheduler.upcoming(rules, reference)

        assert [item.description for item in upcoming] == ["ends today", "open"]

    def test_window_end_is_inclusive(self, scheduler, make_rule):
        rules = [
            make_rule(description="edge", start_date=date(2024, 3, 17)),
            make_rule(description="beyond", start_date=date(2024, 3, 18)),
        ]

        upcoming = scheduler.upcoming(rules, date(2024, 3, 10), horizon_days=7)

        assert [item.description for item in upcoming] == ["edge"]

    def test_skips_unrecognized_frequency(self, scheduler, make_rule):
        rules = [
            make_rule(description="odd", frequency="hourly"),
            make_rule(description="daily", frequency="daily"),
        ]

        upcoming = scheduler.upcoming(rules, date(2024, 3, 10))

        assert [item.description for item in upcoming] == ["daily"]

    def test_default_horizon_is_seven_days(self, scheduler, make_rule):
        rules = [
            make_rule(description="in", start_date=date(2024, 3, 17)),
            make_rule(description="out", start_date=date(2024, 3, 18)),
        ]

        upcoming = scheduler.upcoming(rules, date(2024, 3, 10))

        assert [item.description for item in upcoming] == ["in"]

    def test_occurrence_fields(self, scheduler, make_rule):
        rule = make_rule(description="Streaming", category="Entertainment",
                         amount="15.5", frequency="monthly", start_date=date(2024, 1, 12))

        (item,) = scheduler.upcoming([rule], date(2024, 4, 10))

        assert item.description == "Streaming"
        assert item.category == "Entertainment"
        assert item.amount == Decimal("15.50")
        assert item.next_date == date(2024, 4, 12)
        assert item.to_dict()["next_date"] == "2024-04-12"

    def test_recomputed_fresh_each_call(self, scheduler, make_rule):
        rules = [make_rule(frequency="weekly", start_date=date(2024, 1, 1))]

        first = scheduler.upcoming(rules, date(2024, 2, 1), 14)
        second = scheduler.upcoming(rules, date(2024, 2, 1), 14)

        assert first == second

    def test_empty_rules(self, scheduler):
        assert scheduler.upcoming([], date(2024, 1, 1)) == []
