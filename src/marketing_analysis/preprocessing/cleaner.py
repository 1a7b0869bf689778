"""Missing value interpolation and value clamping"""

import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np

from ..exceptions import InsufficientDataError
from ..models.table import TimeSeriesTable
from ..utils.config import CleaningConfig


logger = logging.getLogger(__name__)


@dataclass
class CleaningReport:
    """Summary of corrections applied by the cleaner"""
    rows: int
    missing_visits_filled: int
    spend_values_clamped: int


class Cleaner:
    """
    Fill missing visits and clamp impossible ad spend

    Missing visits are linearly interpolated on the time axis (days), so
    irregular gaps are weighted by their length. Gaps before the first or
    after the last observed value take the nearest observed value.
    """

    def __init__(self, config: Optional[CleaningConfig] = None):
        self.config = config or CleaningConfig()
        self.report: Optional[CleaningReport] = None

    def clean(self, table: TimeSeriesTable) -> TimeSeriesTable:
        """
        Clean the table in place

        Args:
            table: Table with ``date``, ``ad_spend`` and ``visits``

        Returns:
            The same table, with visits filled and spend clamped

        Raises:
            InsufficientDataError: if no visits value is observed
        """
        missing_count = table.missing_visits_count()
        if missing_count:
            table.set_column('visits', self.interpolate_visits(table))

        clamped_count = 0
        if self.config.clamp_negative_spend:
            spend = table.ad_spend.to_numpy(dtype=float)
            negative = spend < 0
            clamped_count = int(negative.sum())
            if clamped_count:
                table.set_column('ad_spend', np.where(negative, 0.0, spend))

        self.report = CleaningReport(
            rows=len(table),
            missing_visits_filled=missing_count,
            spend_values_clamped=clamped_count
        )
        logger.info(f"Filled {missing_count} missing visits, clamped {clamped_count} negative ad spend values")

        return table

    @staticmethod
    def interpolate_visits(table: TimeSeriesTable) -> np.ndarray:
        """Visits with gaps filled, leaving the table untouched"""
        visits = table.visits.to_numpy(dtype=float)
        known = ~np.isnan(visits)

        if not known.any():
            raise InsufficientDataError(
                f"All {len(visits)} visits values are missing; cannot interpolate"
            )

        # Days since the first row as the interpolation axis
        days = (table.dates - table.dates.iloc[0]).dt.days.to_numpy(dtype=float)

        # np.interp holds the end values flat outside the known range
        return np.interp(days, days[known], visits[known])
