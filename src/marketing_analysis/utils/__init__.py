"""Shared utilities"""

from .config import (
    AnalysisConfig,
    CleaningConfig,
    FeatureConfig,
    OutlierConfig,
    RobustRegressionConfig,
    load_config
)

__all__ = [
    'AnalysisConfig',
    'CleaningConfig',
    'FeatureConfig',
    'OutlierConfig',
    'RobustRegressionConfig',
    'load_config'
]
