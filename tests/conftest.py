"""Pytest configuration and fixtures"""

import pytest
import pandas as pd
import numpy as np
import tempfile
from pathlib import Path

from marketing_analysis.data import SyntheticDataGenerator
from marketing_analysis.models import TimeSeriesTable
from marketing_analysis.preprocessing import Cleaner, FeatureEngineer


@pytest.fixture
def linear_frame():
    """Ten days where visits = 1200 + 3.8 * ad_spend exactly"""
    ad_spend = np.arange(100.0, 200.0, 10.0)
    return pd.DataFrame({
        'date': pd.date_range('2024-01-01', periods=10, freq='D'),
        'ad_spend': ad_spend,
        'visits': 1200 + 3.8 * ad_spend
    })


@pytest.fixture
def linear_table(linear_frame):
    return TimeSeriesTable.from_frame(linear_frame)


@pytest.fixture
def enriched_linear_table(linear_table):
    """Linear table after cleaning and feature engineering"""
    Cleaner().clean(linear_table)
    return FeatureEngineer().enrich(linear_table)


@pytest.fixture
def noisy_design():
    """
    Thirty days with a known relationship, mild deterministic noise and
    one large spike on the first day
    """
    n = 30
    dates = pd.date_range('2024-01-01', periods=n, freq='D')
    ad_spend = np.linspace(100.0, 390.0, n)
    is_weekend = (dates.dayofweek >= 5).astype(float)
    y = 1200 + 3.8 * ad_spend - 150 * is_weekend + 10 * np.sin(np.arange(n))
    y[0] += 1500
    X = np.column_stack([np.ones(n), ad_spend, is_weekend])
    return X, y


@pytest.fixture
def synthetic_generator():
    """Create synthetic data generator with fixed seed"""
    return SyntheticDataGenerator(seed=42)


@pytest.fixture
def raw_marketing_frame(synthetic_generator):
    """Ninety-one days of raw data with missing values and spikes"""
    return synthetic_generator.generate()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
