"""
Spend Forecast - Core Modules
"""

from .frequency import FrequencyTable
from .projector import ForecastCalculator
from .scheduler import OccurrenceScheduler
from .aggregator import CategoryForecastAggregator
from .ledger import BudgetLedger
from .summary import DailySummaryScheduler

__all__ = [
    'FrequencyTable',
    'ForecastCalculator',
    'OccurrenceScheduler',
    'CategoryForecastAggregator',
    'BudgetLedger',
    'DailySummaryScheduler',
]

__version__ = '0.1.0'
