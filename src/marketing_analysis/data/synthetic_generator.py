"""Generate synthetic daily marketing data for testing"""

import numpy as np
import pandas as pd
from datetime import date
from typing import Optional, Union
from dataclasses import dataclass


@dataclass
class MarketingProfile:
    """Parameters of the simulated spend/visits relationship"""
    base_spend: float = 200.0
    spend_amplitude: float = 20.0
    spend_period: float = 6.0  # Days per radian of the spend cycle
    spend_noise: float = 30.0
    base_visits: float = 1200.0
    spend_effect: float = 3.8  # Visits per unit of ad spend
    weekend_lift: float = -150.0
    visits_noise: float = 120.0


class SyntheticDataGenerator:
    """
    Generate a raw daily marketing table

    Ad spend follows a noisy sine cycle; visits are linear in spend with a
    weekend dip plus Gaussian noise. Some visits are then blanked out and
    a few others shifted by a large spike or dip.
    """

    def __init__(self, seed: int = 42, profile: Optional[MarketingProfile] = None):
        self.seed = seed
        self.profile = profile or MarketingProfile()
        self.rng = np.random.RandomState(seed)

    def generate(self,
                 start_date: Union[str, date] = '2024-01-01',
                 end_date: Union[str, date] = '2024-03-31',
                 num_missing: int = 8,
                 num_outliers: int = 5,
                 outlier_magnitude: float = 1500.0) -> pd.DataFrame:
        """
        Generate raw data

        Args:
            start_date: First day (inclusive)
            end_date: Last day (inclusive)
            num_missing: Number of visits values to blank out
            num_outliers: Number of visits values to shift
            outlier_magnitude: Size of each shift

        Returns:
            DataFrame with ``date``, ``ad_spend`` and ``visits``
        """
        dates = pd.date_range(start=start_date, end=end_date, freq='D')
        n = len(dates)
        if n == 0:
            raise ValueError("end_date must not be before start_date")
        if num_missing + num_outliers > n:
            raise ValueError(
                f"Cannot place {num_missing} missing and {num_outliers} outlier rows in {n} days"
            )

        ad_spend = self.generate_ad_spend(n)
        visits = self.generate_visits(dates, ad_spend)

        missing_idx = self.rng.choice(n, size=num_missing, replace=False)
        candidates = np.setdiff1d(np.arange(n), missing_idx)
        outlier_idx = self.rng.choice(candidates, size=num_outliers, replace=False)

        visits[missing_idx] = np.nan
        signs = self.rng.choice([-1.0, 1.0], size=num_outliers)
        visits[outlier_idx] += outlier_magnitude * signs

        return pd.DataFrame({
            'date': dates,
            'ad_spend': ad_spend,
            'visits': visits
        })

    def generate_ad_spend(self, n: int) -> np.ndarray:
        """Cyclical spend with noise, floored at zero"""
        p = self.profile
        t = np.arange(1, n + 1)
        spend = p.base_spend + p.spend_amplitude * np.sin(t / p.spend_period) \
            + p.spend_noise * self.rng.randn(n)
        return np.maximum(0.0, spend)

    def generate_visits(self, dates: pd.DatetimeIndex, ad_spend: np.ndarray) -> np.ndarray:
        """Visits from spend, weekend effect and noise"""
        p = self.profile
        is_weekend = (dates.dayofweek >= 5).astype(float)
        return (p.base_visits + p.spend_effect * ad_spend + p.weekend_lift * is_weekend
                + p.visits_noise * self.rng.randn(len(dates)))
