"""Marketing Analysis: ad spend vs. website visits modelling"""

__version__ = "0.1.0"

from .exceptions import (
    AnalysisError,
    InsufficientDataError,
    SingularMatrixError,
    MalformedInputError,
    ConfigurationError
)
from .models import TimeSeriesTable, DayOfWeek
from .pipeline import MarketingAnalysisPipeline, AnalysisResult

__all__ = [
    'AnalysisError',
    'InsufficientDataError',
    'SingularMatrixError',
    'MalformedInputError',
    'ConfigurationError',
    'TimeSeriesTable',
    'DayOfWeek',
    'MarketingAnalysisPipeline',
    'AnalysisResult'
]
