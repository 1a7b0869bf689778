"""Unit tests for robust regression"""

import pytest
import numpy as np
import pandas as pd

from marketing_analysis.algorithms import OLSRegression, RegressionResults
from marketing_analysis.exceptions import ConfigurationError, SingularMatrixError
from marketing_analysis.outliers import (
    RobustRegression, RobustRegressionConfig, huber_weights, robust_scale
)


class TestHuberWeights:
    """Test weight and scale helpers"""

    def test_known_weights(self):
        """Weights are 1 inside the threshold and c/|r| outside"""
        weights = huber_weights(np.array([0.0, 0.5, 2.0, -4.0]), 1.0)

        np.testing.assert_allclose(weights, [1.0, 1.0, 0.5, 0.25])

    def test_zero_threshold(self):
        """Only exact zero residuals keep weight when c is zero"""
        weights = huber_weights(np.array([0.0, 1.0, -2.0]), 0.0)

        np.testing.assert_array_equal(weights, [1.0, 0.0, 0.0])

    def test_weight_bounds(self):
        rng = np.random.RandomState(0)
        residuals = rng.standard_cauchy(500)
        residuals[::50] = 0.0

        weights = huber_weights(residuals, 1.345)

        assert np.all(weights >= 0)
        assert np.all(weights <= 1)
        assert np.all(weights[residuals == 0] == 1.0)

    def test_robust_scale(self):
        """Median 3, MAD 1"""
        assert robust_scale(np.array([1.0, 2.0, 3.0, 4.0, 100.0])) == pytest.approx(1.4826)


class TestRobustRegression:
    """Test Huber-reweighted fitting"""

    def test_single_pass_matches_weighted_normal_equations(self, noisy_design):
        """One pass equals (X'WX)^-1 X'Wy with weights from OLS residuals"""
        X, y = noisy_design
        base = OLSRegression().fit(X, y)

        resid = y - base.fitted_values
        s = 1.4826 * np.median(np.abs(resid - np.median(resid)))
        c = 1.345 * s
        w = np.minimum(1, c / np.maximum(c, np.abs(resid)))
        W = np.diag(w)
        expected = np.linalg.solve(X.T @ W @ X, X.T @ W @ y)

        results = RobustRegression().fit_robust(X, y, base)

        np.testing.assert_allclose(results.coefficients, expected, rtol=1e-8)
        np.testing.assert_allclose(results.weights, w)
        assert results.convergence_info['iterations'] == 1
        assert results.convergence_info['method'] == 'huber'

    def test_outlier_downweighted(self, noisy_design):
        """The spiked first row gets a small weight and less influence"""
        X, y = noisy_design
        base = OLSRegression().fit(X, y)
        regression = RobustRegression()
        results = regression.fit_robust(X, y, base)

        weights = regression.get_weights()
        assert weights[0] == weights.min()
        assert weights[0] < 0.5
        assert np.all(weights >= 0) and np.all(weights <= 1)
        assert abs(results.coefficients[1] - 3.8) < abs(base.coefficients[1] - 3.8)

    def test_metrics_use_unweighted_formulas(self, noisy_design):
        X, y = noisy_design
        results = RobustRegression().fit(X, y)
        errors = y - results.fitted_values

        assert results.mae == pytest.approx(np.mean(np.abs(errors)))
        assert results.rmse == pytest.approx(np.sqrt(np.mean(errors ** 2)))
        assert 0 <= results.r_squared <= 1

    def test_iterative_reweighting(self, noisy_design):
        """More passes are made when requested"""
        X, y = noisy_design
        config = RobustRegressionConfig(max_iterations=50, convergence_tolerance=1e-8)
        results = RobustRegression(config).fit(X, y)

        info = results.convergence_info
        assert 1 <= info['iterations'] <= 50
        assert info['converged'] == (info['final_change'] < 1e-8)
        assert abs(results.coefficients[1] - 3.8) < 0.2

    def test_all_weights_zero(self):
        """Identical nonzero residuals give c = 0 and no usable rows"""
        X = np.column_stack([np.ones(10), np.arange(10.0), np.arange(10) % 2])
        y = X @ np.array([1.0, 2.0, 3.0])
        base = RegressionResults(
            coefficients=np.zeros(3),
            fitted_values=y - 5.0,
            residuals=np.full(len(y), 5.0),
            r_squared=0.0,
            mae=5.0,
            rmse=5.0,
            num_observations=len(y)
        )

        with pytest.raises(SingularMatrixError, match="weights"):
            RobustRegression().fit_robust(X, y, base)

    def test_zero_iterations_rejected(self):
        """A config built directly still needs at least one pass"""
        with pytest.raises(ConfigurationError, match="max_iterations"):
            RobustRegression(RobustRegressionConfig(max_iterations=0))

    def test_base_length_mismatch(self, noisy_design):
        X, y = noisy_design
        base = OLSRegression().fit(X[:10], y[:10])

        with pytest.raises(ValueError):
            RobustRegression().fit_robust(X, y, base)

    def test_influence_statistics(self, noisy_design):
        X, y = noisy_design
        regression = RobustRegression()

        with pytest.raises(ValueError):
            regression.get_influence_statistics()

        regression.fit(X, y)
        influence = regression.get_influence_statistics()

        assert len(influence) == len(y)
        assert bool(influence.loc[0, 'downweighted'])
        assert influence['weight'].between(0, 1).all()

    def test_compare_with_ols(self, noisy_design):
        X, y = noisy_design
        regression = RobustRegression()

        with pytest.raises(ValueError):
            regression.compare_with_ols()

        regression.fit(X, y)
        comparison = regression.compare_with_ols()

        assert list(comparison['term']) == ['intercept', 'ad_spend', 'is_weekend',
                                            'r_squared', 'mae', 'rmse']
        assert set(comparison['kind']) == {'coefficient', 'metric'}
        np.testing.assert_allclose(
            comparison['difference'], comparison['robust'] - comparison['ols']
        )
