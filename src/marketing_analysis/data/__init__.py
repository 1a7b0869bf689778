"""Data generation and loading modules"""

from .synthetic_generator import SyntheticDataGenerator, MarketingProfile
from .data_loader import DataLoader, to_json_safe

__all__ = [
    'SyntheticDataGenerator',
    'MarketingProfile',
    'DataLoader',
    'to_json_safe'
]
