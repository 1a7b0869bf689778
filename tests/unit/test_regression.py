"""Unit tests for OLS regression"""

import pytest
import numpy as np
import pandas as pd

from marketing_analysis.algorithms import (
    OLSRegression, RegressionResults, build_design_matrix,
    calculate_fit_metrics, COEFFICIENT_NAMES
)
from marketing_analysis.exceptions import SingularMatrixError


class TestOLSRegression:
    """Test ordinary least squares fitting"""

    def test_recovers_exact_linear_relation(self, enriched_linear_table):
        """visits = 1200 + 3.8 * ad_spend with no weekend effect"""
        results = OLSRegression().fit_table(enriched_linear_table)

        assert isinstance(results, RegressionResults)
        np.testing.assert_allclose(results.coefficients, [1200.0, 3.8, 0.0], atol=1e-6)
        assert results.r_squared == pytest.approx(1.0)
        assert results.mae == pytest.approx(0.0, abs=1e-6)
        assert results.rmse == pytest.approx(0.0, abs=1e-6)
        assert results.num_observations == 10

    def test_design_matrix(self, enriched_linear_table):
        """Columns are intercept, ad spend and weekend flag"""
        X, y = build_design_matrix(enriched_linear_table)

        assert X.shape == (10, 3)
        assert (X[:, 0] == 1.0).all()
        np.testing.assert_array_equal(X[:, 1], np.arange(100.0, 200.0, 10.0))
        np.testing.assert_array_equal(X[:, 2], [0, 0, 0, 0, 0, 1, 1, 0, 0, 0])
        assert y[0] == pytest.approx(1580.0)
        assert y[-1] == pytest.approx(1922.0)

    def test_design_matrix_requires_features(self, linear_table):
        with pytest.raises(KeyError):
            build_design_matrix(linear_table)

    def test_refit_on_fitted_values_is_exact(self, noisy_design):
        """Fitting the fitted values reproduces them perfectly"""
        X, y = noisy_design
        first = OLSRegression().fit(X, y)
        second = OLSRegression().fit(X, first.fitted_values)

        assert second.r_squared == pytest.approx(1.0)
        assert second.mae == pytest.approx(0.0, abs=1e-8)
        assert second.rmse == pytest.approx(0.0, abs=1e-8)
        np.testing.assert_allclose(second.coefficients, first.coefficients)

    def test_inputs_not_modified(self, noisy_design):
        X, y = noisy_design
        X_before, y_before = X.copy(), y.copy()
        OLSRegression().fit(X, y)

        np.testing.assert_array_equal(X, X_before)
        np.testing.assert_array_equal(y, y_before)

    def test_residuals_and_fitted_values(self, noisy_design):
        X, y = noisy_design
        results = OLSRegression().fit(X, y)

        np.testing.assert_allclose(results.fitted_values + results.residuals, y)
        np.testing.assert_allclose(results.fitted_values, X @ results.coefficients)

    def test_constant_predictor_is_singular(self):
        """A constant ad spend column duplicates the intercept"""
        X = np.column_stack([np.ones(10), np.full(10, 5.0), np.arange(10) % 2])
        y = np.arange(10, dtype=float)

        with pytest.raises(SingularMatrixError):
            OLSRegression().fit(X, y)

    def test_no_weekend_rows_is_singular(self):
        """An all-zero weekend column cannot be estimated"""
        X = np.column_stack([np.ones(5), np.arange(5.0), np.zeros(5)])
        y = np.arange(5, dtype=float)

        with pytest.raises(SingularMatrixError):
            OLSRegression().fit(X, y)

    def test_too_few_observations(self):
        X = np.array([[1.0, 2.0, 0.0], [1.0, 3.0, 1.0]])
        y = np.array([1.0, 2.0])

        with pytest.raises(SingularMatrixError, match="at least 3"):
            OLSRegression().fit(X, y)

    def test_non_finite_values(self, noisy_design):
        X, y = noisy_design
        y = y.copy()
        y[3] = np.nan

        with pytest.raises(SingularMatrixError):
            OLSRegression().fit(X, y)

    def test_coefficient_dict(self, noisy_design):
        X, y = noisy_design
        results = OLSRegression().fit(X, y)
        coefs = results.coefficient_dict()

        assert list(coefs) == COEFFICIENT_NAMES
        assert coefs['ad_spend'] == pytest.approx(results.coefficients[1])
        assert set(results.metrics()) == {'r_squared', 'mae', 'rmse'}

    def test_get_predictions(self, noisy_design):
        X, y = noisy_design
        regression = OLSRegression()

        with pytest.raises(ValueError):
            regression.get_predictions()

        regression.fit(X, y)
        dates = pd.date_range('2024-01-01', periods=len(y), freq='D')
        predictions = regression.get_predictions(pd.Series(dates))

        assert list(predictions.columns) == ['date', 'actual', 'fitted', 'residual']
        np.testing.assert_allclose(predictions['actual'], y)


class TestFitMetrics:
    """Test goodness-of-fit formulas"""

    def test_known_values(self):
        """SSR = 5, SSE = 1 around mean 2"""
        metrics = calculate_fit_metrics(np.array([1.0, 2.0, 3.0]), np.array([1.0, 2.0, 4.0]))

        assert metrics['r_squared'] == pytest.approx(5 / 6)
        assert metrics['mae'] == pytest.approx(1 / 3)
        assert metrics['rmse'] == pytest.approx(np.sqrt(1 / 3))

    def test_constant_response_is_undefined(self):
        """R-squared is NaN when there is no variation at all"""
        metrics = calculate_fit_metrics(np.array([3.0, 3.0, 3.0]), np.array([3.0, 3.0, 3.0]))

        assert np.isnan(metrics['r_squared'])
        assert metrics['mae'] == 0.0
        assert metrics['rmse'] == 0.0
