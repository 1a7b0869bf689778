"""Calendar and moving-average features"""

import logging
from typing import Optional
import pandas as pd

from ..models.table import TimeSeriesTable, DayOfWeek
from ..utils.config import FeatureConfig


logger = logging.getLogger(__name__)


class FeatureEngineer:
    """
    Derive calendar and smoothing features from the base columns

    Adds ``day_of_week``, ``is_weekend`` and trailing moving averages of
    visits and ad spend. Each derived column depends only on the base
    columns, so the order of computation does not matter.
    """

    def __init__(self, config: Optional[FeatureConfig] = None):
        self.config = config or FeatureConfig()

    @property
    def window(self) -> int:
        return self.config.moving_average_window

    @property
    def visits_ma_column(self) -> str:
        return f"visits_ma{self.window}"

    @property
    def spend_ma_column(self) -> str:
        return f"spend_ma{self.window}"

    def enrich(self, table: TimeSeriesTable) -> TimeSeriesTable:
        """Add derived columns to the table in place and return it"""
        table.set_column('day_of_week', self.day_of_week(table.dates))
        table.set_column('is_weekend', self.weekend_flags(table.dates))
        table.set_column(self.visits_ma_column, self.trailing_mean(table.visits, self.window))
        table.set_column(self.spend_ma_column, self.trailing_mean(table.ad_spend, self.window))

        logger.debug(f"Added calendar features and {self.window}-day moving averages")
        return table

    @staticmethod
    def day_of_week(dates: pd.Series) -> pd.Categorical:
        """Weekday names as a categorical with all seven days as categories"""
        names = [DayOfWeek.from_date(d).value for d in dates]
        return pd.Categorical(names, categories=DayOfWeek.names())

    @staticmethod
    def weekend_flags(dates: pd.Series) -> pd.Series:
        """True for Saturday and Sunday"""
        return pd.to_datetime(dates).dt.dayofweek >= 5

    @staticmethod
    def trailing_mean(values: pd.Series, window: int) -> pd.Series:
        """
        Mean of the current and up to ``window - 1`` previous values

        The first rows average whatever history is available instead of
        producing NaN.
        """
        return values.astype(float).rolling(window=window, min_periods=1).mean()
