"""Core regression algorithms"""

from .regression import (
    OLSRegression,
    RegressionResults,
    build_design_matrix,
    calculate_fit_metrics,
    solve_least_squares,
    COEFFICIENT_NAMES
)

__all__ = [
    'OLSRegression',
    'RegressionResults',
    'build_design_matrix',
    'calculate_fit_metrics',
    'solve_least_squares',
    'COEFFICIENT_NAMES'
]
