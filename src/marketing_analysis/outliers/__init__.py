"""Outlier detection and robustness module"""

from .detection import OutlierDetector, OutlierResult
from .robust_regression import RobustRegression, huber_weights, robust_scale
from ..utils.config import OutlierConfig, RobustRegressionConfig

__all__ = [
    'OutlierDetector',
    'OutlierResult',
    'OutlierConfig',
    'RobustRegression',
    'RobustRegressionConfig',
    'huber_weights',
    'robust_scale'
]
