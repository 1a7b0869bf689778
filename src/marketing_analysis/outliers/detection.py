"""Median absolute deviation outlier detection"""

import logging
import numpy as np
from typing import Dict, Optional, Sequence, Set, Tuple
from dataclasses import dataclass
from scipy import stats

from ..models.table import TimeSeriesTable
from ..utils.config import OutlierConfig


logger = logging.getLogger(__name__)


@dataclass
class OutlierResult:
    """Results from outlier detection"""
    outlier_indices: Set[int]  # Row positions flagged as outliers
    outlier_scores: Dict[int, float]  # Row position -> robust z-score
    statistics: Dict[str, float]  # Summary statistics
    thresholds: Dict[str, float]  # Thresholds used


class OutlierDetector:
    """
    Flag anomalous values with the scaled MAD rule

    A value v is an outlier when ``|v - median| > threshold * scale * MAD``
    with ``scale = 1.4826`` (MAD as a standard deviation estimate under
    normality) and ``threshold = 3``. When the MAD is zero, every value
    different from the median is flagged.
    """

    def __init__(self, config: Optional[OutlierConfig] = None):
        """
        Initialize outlier detector

        Args:
            config: Threshold and MAD scale settings
        """
        self.config = config or OutlierConfig()

    def detect(self, values: Sequence[float]) -> np.ndarray:
        """
        Flag outliers

        Args:
            values: Observations; NaN entries are ignored and never flagged

        Returns:
            Boolean array, one flag per input value in input order
        """
        flags, _ = self._flag(values)
        return flags

    def detect_outliers(self, table: TimeSeriesTable, column: str = 'visits') -> OutlierResult:
        """
        Flag outliers in a table column and store them as ``is_outlier``

        Args:
            table: Table to annotate in place
            column: Column to screen

        Returns:
            OutlierResult with flagged rows and summary statistics
        """
        values = table.get_column(column).to_numpy(dtype=float)
        flags, stats_dict = self._flag(values)
        table.set_column('is_outlier', flags)

        outlier_indices = set(int(i) for i in np.flatnonzero(flags))
        scaled_mad = stats_dict['scaled_mad']
        outlier_scores = {}
        for idx in outlier_indices:
            deviation = abs(values[idx] - stats_dict['median'])
            outlier_scores[idx] = float(deviation / scaled_mad) if scaled_mad > 0 else float('inf')

        statistics = {
            'total_observations': len(values),
            'total_outliers': len(outlier_indices),
            'outlier_rate': len(outlier_indices) / len(values) if len(values) > 0 else 0,
            **stats_dict
        }

        logger.info(f"Detected {len(outlier_indices)} outliers in {column}")

        return OutlierResult(
            outlier_indices=outlier_indices,
            outlier_scores=outlier_scores,
            statistics=statistics,
            thresholds={
                'threshold': self.config.threshold,
                'mad_scale': self.config.mad_scale,
                'cutoff': self.config.threshold * scaled_mad
            }
        )

    def _flag(self, values: Sequence[float]) -> Tuple[np.ndarray, Dict[str, float]]:
        """Compute flags together with the median and MAD they were based on"""
        values = np.asarray(values, dtype=float)
        flags = np.zeros(len(values), dtype=bool)
        observed_mask = ~np.isnan(values)

        if not observed_mask.any():
            return flags, {'median': float('nan'), 'mad': float('nan'), 'scaled_mad': float('nan')}

        observed = values[observed_mask]
        center = float(np.median(observed))
        mad = float(stats.median_abs_deviation(observed, scale=1.0))
        scaled_mad = self.config.mad_scale * mad

        if mad == 0:
            logger.warning("MAD is zero; flagging every value that differs from the median")
            flags[observed_mask] = observed != center
        else:
            flags[observed_mask] = np.abs(observed - center) > self.config.threshold * scaled_mad

        return flags, {'median': center, 'mad': mad, 'scaled_mad': scaled_mad}
