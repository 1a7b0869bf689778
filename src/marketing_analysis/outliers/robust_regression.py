"""Huber-weighted robust regression"""

import logging
import numpy as np
import pandas as pd
from typing import Optional
from scipy import stats

from ..algorithms.regression import (
    OLSRegression, RegressionResults, calculate_fit_metrics,
    coefficient_names, solve_least_squares
)
from ..exceptions import ConfigurationError, SingularMatrixError
from ..utils.config import RobustRegressionConfig


logger = logging.getLogger(__name__)


def robust_scale(residuals: np.ndarray, mad_scale: float = 1.4826) -> float:
    """Scaled median absolute deviation of residuals around their median"""
    return float(mad_scale * stats.median_abs_deviation(residuals, scale=1.0))


def huber_weights(residuals: np.ndarray, threshold: float) -> np.ndarray:
    """
    Huber weights ``min(1, c / max(c, |r|))``

    Residuals inside the threshold keep weight 1, larger ones shrink
    towards 0. With a zero threshold only exact zero residuals keep
    any weight.
    """
    abs_resid = np.abs(np.asarray(residuals, dtype=float))
    if threshold <= 0:
        return np.where(abs_resid == 0, 1.0, 0.0)
    return np.minimum(1.0, threshold / np.maximum(threshold, abs_resid))


class RobustRegression(OLSRegression):
    """
    Robust regression using Huber reweighting

    Starts from an OLS fit, weights each row by its residual and refits by
    weighted least squares. By default a single reweighting pass is made;
    ``max_iterations > 1`` repeats the reweighting (IRLS) until the largest
    coefficient change falls below ``convergence_tolerance``.
    """

    def __init__(self, config: Optional[RobustRegressionConfig] = None):
        """
        Initialize robust regression

        Args:
            config: Tuning constant, MAD scale and iteration settings
        """
        super().__init__()
        self.config = config or RobustRegressionConfig()
        if self.config.max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations must be >= 1, got {self.config.max_iterations}"
            )
        self.base_results: Optional[RegressionResults] = None
        self._weights = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> RegressionResults:
        """Fit OLS and then reweight"""
        base_result = OLSRegression().fit(X, y)
        return self.fit_robust(X, y, base_result)

    def fit_robust(self,
                   X: np.ndarray,
                   y: np.ndarray,
                   base_result: RegressionResults) -> RegressionResults:
        """
        Refit with Huber weights derived from a previous fit

        Args:
            X: Design matrix used for the base fit
            y: Response vector used for the base fit
            base_result: Unweighted fit supplying the initial residuals

        Returns:
            RegressionResults with the weights of the final pass

        Raises:
            SingularMatrixError: if the weighted design is rank deficient or
                every weight is zero
        """
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float)

        if len(base_result.fitted_values) != len(y):
            raise ValueError(
                f"Base fit has {len(base_result.fitted_values)} fitted values, expected {len(y)}"
            )

        self.base_results = base_result
        c = self.config.tuning_constant
        beta_old = np.asarray(base_result.coefficients, dtype=float)
        fitted = np.asarray(base_result.fitted_values, dtype=float)

        convergence_info = {
            'iterations': 0,
            'converged': False,
            'final_change': np.inf,
            'method': 'huber',
            'tuning_constant': c
        }

        for iteration in range(self.config.max_iterations):
            residuals = y - fitted

            scale = robust_scale(residuals, self.config.mad_scale)
            threshold = c * scale
            weights = huber_weights(residuals, threshold)

            beta_new = self._solve_weighted(X, y, weights)
            fitted = X @ beta_new

            change = float(np.max(np.abs(beta_new - beta_old)))
            convergence_info.update({
                'iterations': iteration + 1,
                'final_change': change,
                'scale': scale,
                'threshold': threshold,
                'downweighted': int(np.sum(weights < 1.0))
            })

            if change < self.config.convergence_tolerance:
                convergence_info['converged'] = True
                break

            beta_old = beta_new

        self._weights = weights
        metrics = calculate_fit_metrics(y, fitted)

        self.results = RegressionResults(
            coefficients=beta_new,
            fitted_values=fitted,
            residuals=y - fitted,
            r_squared=metrics['r_squared'],
            mae=metrics['mae'],
            rmse=metrics['rmse'],
            num_observations=len(y),
            weights=weights,
            convergence_info=convergence_info
        )

        logger.info(f"Robust fit: coefficients={np.round(beta_new, 4).tolist()}, "
                    f"R2={metrics['r_squared']:.3f}, "
                    f"{convergence_info['downweighted']} rows downweighted")

        return self.results

    @staticmethod
    def _solve_weighted(X: np.ndarray, y: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """Weighted least squares via sqrt(W)-scaled rows"""
        if not np.any(weights > 0):
            raise SingularMatrixError("All robust weights are zero")

        sqrt_w = np.sqrt(weights)
        return solve_least_squares(X * sqrt_w[:, None], y * sqrt_w)

    def get_weights(self) -> Optional[np.ndarray]:
        """Get the robust weights from the last fit"""
        return self._weights

    def get_influence_statistics(self) -> pd.DataFrame:
        """
        Per-row weights and residuals of the last fit

        Returns:
            DataFrame with weights and influence measures
        """
        if self._weights is None:
            raise ValueError("Must fit model before getting influence statistics")

        residuals = self.results.residuals
        resid_std = np.std(residuals)

        influence_df = pd.DataFrame({
            'observation': range(len(self._weights)),
            'weight': self._weights,
            'residual': residuals,
            'standardized_residual': residuals / resid_std if resid_std > 0 else np.zeros(len(residuals)),
            'downweighted': self._weights < 1.0
        })

        influence_df['weight_percentile'] = influence_df['weight'].rank(pct=True)

        return influence_df

    def compare_with_ols(self) -> pd.DataFrame:
        """
        Compare robust estimates with the OLS fit they were seeded from

        Returns:
            DataFrame with one row per coefficient and per metric
        """
        if self.results is None or self.base_results is None:
            raise ValueError("Must fit model before comparing with OLS")

        ols, robust = self.base_results, self.results
        rows = []
        for name, ols_value, robust_value in zip(
                coefficient_names(len(robust.coefficients)), ols.coefficients, robust.coefficients):
            rows.append({'term': name, 'kind': 'coefficient',
                         'ols': float(ols_value), 'robust': float(robust_value)})

        ols_metrics, robust_metrics = ols.metrics(), robust.metrics()
        for name in ols_metrics:
            rows.append({'term': name, 'kind': 'metric',
                         'ols': ols_metrics[name], 'robust': robust_metrics[name]})

        comparison_df = pd.DataFrame(rows)
        comparison_df['difference'] = comparison_df['robust'] - comparison_df['ols']

        return comparison_df
