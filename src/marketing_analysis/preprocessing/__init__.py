"""Cleaning and feature engineering stages"""

from .cleaner import Cleaner, CleaningReport
from .features import FeatureEngineer

__all__ = [
    'Cleaner',
    'CleaningReport',
    'FeatureEngineer'
]
