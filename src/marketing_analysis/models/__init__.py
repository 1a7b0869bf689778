"""Data models for marketing analysis"""

from .table import TimeSeriesTable, DayOfWeek, BASE_COLUMNS
from .validators import DataValidator

__all__ = [
    'TimeSeriesTable',
    'DayOfWeek',
    'BASE_COLUMNS',
    'DataValidator'
]
