"""Ordinary least squares regression of visits on ad spend"""

import logging
import numpy as np
import pandas as pd
from scipy import linalg
from typing import Tuple, Dict, Optional, Any, List
from dataclasses import dataclass, field

from ..exceptions import SingularMatrixError
from ..models.table import TimeSeriesTable


logger = logging.getLogger(__name__)

COEFFICIENT_NAMES = ['intercept', 'ad_spend', 'is_weekend']


def coefficient_names(k: int) -> List[str]:
    """Predictor names for a k-column design matrix"""
    return COEFFICIENT_NAMES if k == len(COEFFICIENT_NAMES) else [f"x{i}" for i in range(k)]


@dataclass
class RegressionResults:
    """Results from a (weighted) least squares fit"""
    coefficients: np.ndarray
    fitted_values: np.ndarray
    residuals: np.ndarray
    r_squared: float
    mae: float
    rmse: float
    num_observations: int
    weights: Optional[np.ndarray] = None
    convergence_info: Dict[str, Any] = field(default_factory=dict)

    def coefficient_dict(self) -> Dict[str, float]:
        """Coefficients keyed by predictor name"""
        names = coefficient_names(len(self.coefficients))
        return {name: float(value) for name, value in zip(names, self.coefficients)}

    def metrics(self) -> Dict[str, float]:
        return {
            'r_squared': float(self.r_squared),
            'mae': float(self.mae),
            'rmse': float(self.rmse)
        }


def build_design_matrix(table: TimeSeriesTable) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the design matrix for ``visits ~ 1 + ad_spend + is_weekend``

    Returns:
        (X with columns [1, ad_spend, is_weekend], y = visits)
    """
    if not table.has_column('is_weekend'):
        raise KeyError("Table has no is_weekend column; run feature engineering first")

    n = len(table)
    X = np.column_stack([
        np.ones(n),
        table.ad_spend.to_numpy(dtype=float),
        table.get_column('is_weekend').to_numpy(dtype=float)
    ])
    y = table.visits.to_numpy(dtype=float)

    return X, y


def calculate_fit_metrics(y: np.ndarray, fitted: np.ndarray) -> Dict[str, float]:
    """
    Goodness-of-fit metrics

    R-squared is SSR / (SSR + SSE) with SSR taken around the mean of y;
    it is NaN when both sums vanish (constant y fitted exactly).
    """
    y = np.asarray(y, dtype=float)
    fitted = np.asarray(fitted, dtype=float)
    errors = y - fitted

    ssr = np.sum((fitted - np.mean(y)) ** 2)
    sse = np.sum(errors ** 2)

    if ssr + sse == 0:
        logger.warning("Total variation is zero; R-squared is undefined")
        r_squared = float('nan')
    else:
        r_squared = float(ssr / (ssr + sse))

    return {
        'r_squared': r_squared,
        'mae': float(np.mean(np.abs(errors))),
        'rmse': float(np.sqrt(np.mean(errors ** 2)))
    }


def solve_least_squares(X: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Solve min ||X b - y||^2 with an SVD-based solver

    Raises:
        SingularMatrixError: if X has fewer rows than columns, is rank
            deficient or contains non-finite values
    """
    n, k = X.shape
    if n < k:
        raise SingularMatrixError(f"Need at least {k} observations, got {n}")
    if not (np.all(np.isfinite(X)) and np.all(np.isfinite(y))):
        raise SingularMatrixError("Design matrix or response contains non-finite values")

    # Rank uses matrix_rank's size-scaled tolerance, not the lstsq cutoff
    rank = np.linalg.matrix_rank(X)
    if rank < k:
        raise SingularMatrixError(f"Design matrix is rank deficient (rank {rank} < {k})")

    try:
        beta, _, _, _ = linalg.lstsq(X, y)
    except (linalg.LinAlgError, ValueError) as e:
        raise SingularMatrixError(f"Least squares solve failed: {e}") from e

    return beta


class OLSRegression:
    """
    Ordinary least squares regression

    Fits ``visits = b0 + b1 * ad_spend + b2 * is_weekend`` and reports
    R-squared, mean absolute error and root mean squared error.
    """

    def __init__(self):
        self.results: Optional[RegressionResults] = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> RegressionResults:
        """
        Fit the model

        Args:
            X: Design matrix (n x k), not modified
            y: Response vector (n), not modified

        Returns:
            RegressionResults
        """
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float)

        coefficients = solve_least_squares(X, y)
        fitted = X @ coefficients
        metrics = calculate_fit_metrics(y, fitted)

        self.results = RegressionResults(
            coefficients=coefficients,
            fitted_values=fitted,
            residuals=y - fitted,
            r_squared=metrics['r_squared'],
            mae=metrics['mae'],
            rmse=metrics['rmse'],
            num_observations=len(y),
            convergence_info={'method': 'ols', 'solver': 'lstsq'}
        )

        logger.info(f"OLS fit: coefficients={np.round(coefficients, 4).tolist()}, "
                    f"R2={metrics['r_squared']:.3f}")

        return self.results

    def fit_table(self, table: TimeSeriesTable) -> RegressionResults:
        """Build the design matrix from a table and fit"""
        X, y = build_design_matrix(table)
        return self.fit(X, y)

    def get_predictions(self, dates: Optional[pd.Series] = None) -> pd.DataFrame:
        """
        Actual vs fitted values from the last fit

        Args:
            dates: Optional dates to label rows with
        """
        if self.results is None:
            raise ValueError("Must fit model before getting predictions")

        predictions = pd.DataFrame({
            'actual': self.results.fitted_values + self.results.residuals,
            'fitted': self.results.fitted_values,
            'residual': self.results.residuals
        })
        if dates is not None:
            predictions.insert(0, 'date', pd.Series(dates).to_numpy())

        return predictions
