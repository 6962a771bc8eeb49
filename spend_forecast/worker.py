#!/usr/bin/env python3
"""
Forecast Worker
Runs the daily forecast summary for every user in the record store
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

import schedule

from .config import Settings
from .store import InMemoryRecordStore
from .summary import DailySummaryScheduler

logger = logging.getLogger(__name__)


class ForecastWorker:
    """Worker service for the daily forecast summary"""

    def __init__(self,
                 settings: Optional[Settings] = None,
                 store: Optional[InMemoryRecordStore] = None):
        self.settings = settings or Settings.from_environment()

        if store is None:
            if self.settings.records_path:
                store = InMemoryRecordStore.from_yaml(self.settings.records_path)
            else:
                logger.warning("No records file configured, starting with an empty store")
                store = InMemoryRecordStore()
        self.store = store

        self.summary = DailySummaryScheduler(self.store, self.settings)
        logger.info("Forecast worker initialized")

    def run_daily_jobs(self) -> Dict[str, Any]:
        """Run the daily summary job and log each summary"""
        logger.info("Running daily jobs...")

        result = asyncio.run(self.summary.run_daily_job())

        if result["status"] == "success":
            for summary in result["summaries"]:
                logger.info(f"Daily summary for {summary['user_id']}: {summary}")
            logger.info("Daily jobs completed successfully")
        elif result["status"] == "skipped":
            logger.info(f"Daily jobs skipped: {result['message']}")
        else:
            logger.error(f"Daily jobs failed: {result['message']}")

        return result

    def health_check(self) -> Dict[str, Any]:
        return {
            'status': 'healthy',
            'users': len(self.store.user_ids()),
            'last_run': self.summary.last_run.isoformat() if self.summary.last_run else None,
            'next_run': self.summary.get_next_run_time().isoformat(),
            'timestamp': datetime.now().isoformat(),
        }


def main():
    """Main worker loop"""
    settings = Settings.from_environment()
    logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.info("Starting forecast worker")

    worker = ForecastWorker(settings)

    schedule.every().day.at(settings.summary_time).do(worker.run_daily_jobs)
    logger.info(f"Daily jobs scheduled at {settings.summary_time}")

    while True:
        try:
            schedule.run_pending()
            time.sleep(60)

        except KeyboardInterrupt:
            logger.info("Forecast worker shutting down...")
            break
        except Exception as e:
            logger.error(f"Worker loop error: {e}")
            time.sleep(60)


if __name__ == "__main__":
    main()
