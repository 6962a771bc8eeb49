"""
Daily Summary Module
Builds the per-user forecast summary and gates the daily job to its window
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional

from .aggregator import CategoryForecastAggregator, total_spend, totals_by_category
from .config import Settings
from .projector import days_into_month, month_bounds
from .scheduler import OccurrenceScheduler
from .store import InMemoryRecordStore

logger = logging.getLogger(__name__)


class DailySummaryScheduler:
    """Schedules and builds daily forecast summaries"""

    def __init__(self,
                 store: InMemoryRecordStore,
                 settings: Optional[Settings] = None,
                 aggregator: Optional[CategoryForecastAggregator] = None,
                 occurrences: Optional[OccurrenceScheduler] = None):
        self.store = store
        self.settings = settings or Settings()
        self.aggregator = aggregator or CategoryForecastAggregator()
        self.occurrences = occurrences or OccurrenceScheduler(self.aggregator.frequency_table)
        self.last_run: Optional[datetime] = None
        self.is_running = False

    def should_run_now(self, current_time: Optional[datetime] = None) -> bool:
        """
        Check if the summary should run now

        Args:
            current_time: Optional datetime for testing

        Returns:
            True inside the summary window when no run happened today yet
        """
        if current_time is None:
            current_time = datetime.now()

        start_window = current_time.replace(
            hour=self.settings.summary_hour,
            minute=self.settings.summary_minute,
            second=0,
            microsecond=0,
        )
        end_window = start_window + timedelta(minutes=self.settings.summary_window_minutes)

        if not (start_window <= current_time <= end_window):
            return False

        if self.last_run and self.last_run.date() == current_time.date():
            return False

        return True

    async def generate_summary(self, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Generate the forecast summary for one user

        Args:
            user_id: User to summarize
            today: Reference date (default: today)

        Returns:
            Summary dict; forecasts are None/empty when the user has no budget
        """
        if today is None:
            today = date.today()

        start, end = month_bounds(today)
        days_elapsed = days_into_month(today)
        expenses = self.store.expenses_for(user_id, start, end)
        rules = self.store.rules_for(user_id, active_only=True)
        goals = self.store.get_goals(user_id)

        budget_forecast = None
        category_forecasts = {}
        if goals is not None:
            budget_forecast = self.aggregator.overall_forecast(
                total_spend(expenses), rules, goals, days_elapsed
            ).to_dict()
            category_forecasts = {
                category: result.to_dict()
                for category, result in self.aggregator.aggregate_by_category(
                    totals_by_category(expenses), rules, goals, days_elapsed
                ).items()
            }
        else:
            logger.info(f"No budget found for user {user_id}, skipping forecasts")

        upcoming = self.occurrences.upcoming(rules, today, self.settings.lookahead_days)

        return {
            "user_id": user_id,
            "summary_date": today.isoformat(),
            "generated_at": datetime.now().isoformat(),
            "days_into_month": days_elapsed,
            "budget_forecast": budget_forecast,
            "category_forecasts": category_forecasts,
            "upcoming": [item.to_dict() for item in upcoming],
            "monthly_impact": self.aggregator.monthly_impact(rules),
        }

    async def run_daily_job(self,
                            user_ids: Optional[Iterable[str]] = None,
                            current_time: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Execute the daily summary job

        Returns:
            Job result with status
        """
        if self.is_running:
            return {
                "status": "error",
                "message": "Job already running"
            }

        if current_time is None:
            current_time = datetime.now()

        if not self.should_run_now(current_time):
            return {
                "status": "skipped",
                "message": "Outside scheduled window or already ran today"
            }

        self.is_running = True

        try:
            users = list(user_ids) if user_ids is not None else self.store.user_ids()
            summaries = [
                await self.generate_summary(user_id, current_time.date())
                for user_id in users
            ]
            self.last_run = current_time

            result = {
                "status": "success",
                "summaries": summaries,
                "completed_at": datetime.now().isoformat()
            }

        except Exception as e:
            logger.error(f"Daily summary job failed: {e}")
            result = {
                "status": "error",
                "message": str(e)
            }

        finally:
            self.is_running = False

        return result

    def get_next_run_time(self, now: Optional[datetime] = None) -> datetime:
        """Next scheduled run time"""
        if now is None:
            now = datetime.now()
        next_run = now.replace(
            hour=self.settings.summary_hour,
            minute=self.settings.summary_minute,
            second=0,
            microsecond=0
        )

        window_end = next_run + timedelta(minutes=self.settings.summary_window_minutes)
        if now > window_end or (self.last_run and self.last_run.date() == now.date()):
            next_run += timedelta(days=1)

        return next_run
