"""Time series table data model"""

from enum import Enum
from typing import List, Sequence, Union
import numpy as np
import pandas as pd


BASE_COLUMNS = ['date', 'ad_spend', 'visits']


class DayOfWeek(str, Enum):
    """Gregorian weekday, Monday first"""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_date(cls, value) -> 'DayOfWeek':
        """Weekday of a date, datetime or timestamp"""
        return list(cls)[pd.Timestamp(value).dayofweek]

    @classmethod
    def names(cls) -> List[str]:
        return [day.value for day in cls]

    @property
    def is_weekend(self) -> bool:
        return self in (DayOfWeek.SATURDAY, DayOfWeek.SUNDAY)


class TimeSeriesTable:
    """
    Daily marketing observations, one row per calendar day

    Wraps a DataFrame sorted ascending by ``date`` with unique dates.
    Pipeline stages add columns and correct ``visits``/``ad_spend`` values
    in place; rows are never added, removed or reordered after construction.
    """

    def __init__(self, frame: pd.DataFrame):
        """
        Initialize table from an already validated frame

        Use ``TimeSeriesTable.from_frame`` for raw input.

        Args:
            frame: DataFrame with at least the base columns, sorted by date
        """
        self._frame = frame

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> 'TimeSeriesTable':
        """
        Build a table from raw tabular input

        Raises:
            MalformedInputError: if required columns are missing, values
                cannot be coerced or dates are duplicated
        """
        from .validators import DataValidator

        return cls(DataValidator.prepare_input(frame))

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        if len(self._frame) == 0:
            return "TimeSeriesTable(rows=0)"
        return (f"TimeSeriesTable(rows={len(self._frame)}, "
                f"start={self.dates.iloc[0].date()}, end={self.dates.iloc[-1].date()})")

    @property
    def frame(self) -> pd.DataFrame:
        """Underlying DataFrame (live, not a copy)"""
        return self._frame

    @property
    def columns(self) -> List[str]:
        return list(self._frame.columns)

    @property
    def dates(self) -> pd.Series:
        return self._frame['date']

    @property
    def ad_spend(self) -> pd.Series:
        return self._frame['ad_spend']

    @property
    def visits(self) -> pd.Series:
        return self._frame['visits']

    def missing_visits_count(self) -> int:
        """Number of rows without a visits value"""
        return int(self._frame['visits'].isna().sum())

    def has_column(self, name: str) -> bool:
        return name in self._frame.columns

    def get_column(self, name: str) -> pd.Series:
        if name not in self._frame.columns:
            raise KeyError(f"Column not found: {name}")
        return self._frame[name]

    def set_column(self, name: str, values: Union[Sequence, np.ndarray, pd.Series]) -> None:
        """Add or replace a column; values must have one entry per row"""
        if len(values) != len(self._frame):
            raise ValueError(
                f"Column {name} has {len(values)} values, table has {len(self._frame)} rows"
            )
        if isinstance(values, pd.Series):
            values = values.to_numpy()
        self._frame[name] = values

    def to_frame(self) -> pd.DataFrame:
        """Copy of the table for export"""
        return self._frame.copy()
