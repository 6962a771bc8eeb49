"""
Test Suite: Settings loading and YAML records
"""

import textwrap

import pytest
import schedule
from datetime import date
from decimal import Decimal

from spend_forecast.config import Settings
from spend_forecast.errors import ConfigError, InvalidDateError
from spend_forecast.store import InMemoryRecordStore


class TestSettings:
    """Settings from file and environment"""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("CONFIG", "LOOKAHEAD_DAYS", "SUMMARY_TIME", "SUMMARY_WINDOW_MINUTES",
                     "LOG_LEVEL", "RECORDS_PATH"):
            monkeypatch.delenv(f"FORECAST_{name}", raising=False)

    def test_defaults(self):
        settings = Settings.from_environment()

        assert settings.lookahead_days == 7
        assert settings.summary_time == "08:00"
        assert settings.summary_window_minutes == 10
        assert settings.log_level == "INFO"
        assert settings.records_path is None

    def test_environment_overrides_file(self, monkeypatch, tmp_path):
        config = tmp_path / "forecast.yaml"
        config.write_text("lookahead_days: 14\nlog_level: debug\nsummary_time: '07:30'\n")
        monkeypatch.setenv("FORECAST_CONFIG", str(config))
        monkeypatch.setenv("FORECAST_LOOKAHEAD_DAYS", "3")

        settings = Settings.from_environment()

        assert settings.lookahead_days == 3
        assert settings.log_level == "DEBUG"
        assert settings.summary_hour == 7
        assert settings.summary_minute == 30

    @pytest.mark.parametrize("name,value", [
        ("FORECAST_LOOKAHEAD_DAYS", "soon"),
        ("FORECAST_LOOKAHEAD_DAYS", "-1"),
        ("FORECAST_SUMMARY_TIME", "25:00"),
        ("FORECAST_SUMMARY_TIME", "8:00"),
        ("FORECAST_SUMMARY_TIME", "08:00:00"),
        ("FORECAST_SUMMARY_WINDOW_MINUTES", "0"),
        ("FORECAST_SUMMARY_WINDOW_MINUTES", "-5"),
        ("FORECAST_LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigError):
            Settings.from_environment()

    def test_summary_time_accepted_by_schedule(self, monkeypatch):
        monkeypatch.setenv("FORECAST_SUMMARY_TIME", "07:45")
        settings = Settings.from_environment()

        job = schedule.Scheduler().every().day.at(settings.summary_time).do(lambda: None)

        assert job.at_time.hour == 7
        assert job.at_time.minute == 45

    def test_one_minute_window_allowed(self, monkeypatch):
        monkeypatch.setenv("FORECAST_SUMMARY_WINDOW_MINUTES", "1")

        assert Settings.from_environment().summary_window_minutes == 1

    def test_unknown_file_keys(self, tmp_path):
        config = tmp_path / "forecast.yaml"
        config.write_text("horizon: 3\n")

        with pytest.raises(ConfigError):
            Settings.from_environment(str(config))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            Settings.from_environment(str(tmp_path / "nope.yaml"))


class TestRecordsFile:
    """Loading the in-memory store from YAML"""

    @pytest.fixture
    def records_path(self, tmp_path):
        path = tmp_path / "records.yaml"
        path.write_text(textwrap.dedent("""
            users:
              alice:
                budget:
                  total_budget: 1500
                  category_goals:
                    Food: 400
                expenses:
                  - {description: Lunch, amount: 12.5, category: Food, date: 2024-03-02}
                  - {description: Power, amount: 80, category: Utilities, date: 2024-03-05}
                recurring:
                  - description: Rent
                    amount: 1000
                    category: Rent
                    frequency: monthly
                    startDate: 2024-01-01
                  - description: Old gym
                    amount: 30
                    category: Other
                    frequency: monthly
                    start_date: 2023-01-01
                    isActive: false
                  - description: Paused streaming
                    amount: 15
                    category: Entertainment
                    frequency: monthly
                    startDate: 2024-02-01
                    isActive: "off"
              bob:
                expenses: []
        """))
        return path

    def test_load(self, records_path):
        store = InMemoryRecordStore.from_yaml(records_path)

        assert store.user_ids() == ["alice"]
        assert store.get_goals("alice").goal_for("Food") == Decimal("400")
        assert sorted(e.amount for e in store.expenses_for("alice")) == [Decimal("12.5"), Decimal("80")]
        assert [r.description for r in store.rules_for("alice", active_only=True)] == ["Rent"]
        assert store.rules_for("alice")[0].start_date == date(2024, 1, 1)

    def test_expense_date_filter(self, records_path):
        store = InMemoryRecordStore.from_yaml(records_path)

        march_3_on = store.expenses_for("alice", start=date(2024, 3, 3))

        assert [e.description for e in march_3_on] == ["Power"]

    def test_bad_date_in_records_file(self, tmp_path):
        path = tmp_path / "records.yaml"
        path.write_text(textwrap.dedent("""
            users:
              alice:
                expenses:
                  - {description: Lunch, amount: 12.5, category: Food, date: "2024-13-01"}
        """))

        with pytest.raises(InvalidDateError):
            InMemoryRecordStore.from_yaml(path)
