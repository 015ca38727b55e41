"""
Test the least-squares solver and the FastLinearModel wrapper.

Checks known-answer systems, shape/rank validation, and agreement with
numpy.linalg.lstsq on random overdetermined problems.
"""

import pytest
import numpy as np
import pandas as pd

from pyfastlm import (
    solve_least_squares,
    fast_lm,
    FastLinearModel,
    residuals,
    components,
    NumericalError,
    DimensionError,
)


COEF_TOL = 1e-9       # Coefficient tolerance
RESID_TOL = 1e-10     # Residual tolerance
STAT_TOL = 1e-8       # Statistics tolerance (stderr, R²)


def test_exact_line():
    """y = 1 + x through three points recovers [1, 1]."""
    X = [[1, 1], [1, 2], [1, 3]]
    y = [2, 3, 4]

    result = solve_least_squares(X, y)

    np.testing.assert_allclose(result.coefficients, [1.0, 1.0], rtol=COEF_TOL, atol=COEF_TOL)
    np.testing.assert_allclose(result.residuals, 0.0, atol=RESID_TOL)
    np.testing.assert_allclose(result.fitted_values, y, atol=RESID_TOL)
    assert result.rank == 2
    assert result.df_residual == 1


def test_square_full_rank_recovers_coefficients():
    """For square full-rank X and y = X c, the solve returns c."""
    rng = np.random.default_rng(7)
    for k in (1, 3, 8):
        X = rng.standard_normal((k, k)) + k * np.eye(k)
        c = rng.standard_normal(k)
        y = X @ c

        result = solve_least_squares(X, y)

        np.testing.assert_allclose(result.coefficients, c, rtol=COEF_TOL, atol=COEF_TOL)
        assert result.df_residual == 0
        assert np.all(np.isnan(result.stderr))


def test_matches_lstsq_overdetermined():
    """Noisy overdetermined fit agrees with numpy.linalg.lstsq."""
    rng = np.random.default_rng(42)
    n, k = 200, 4
    X = rng.standard_normal((n, k))
    y = X @ np.array([1.0, -2.0, 0.5, 3.0]) + 0.1 * rng.standard_normal(n)

    result = solve_least_squares(X, y)
    expected, *_ = np.linalg.lstsq(X, y, rcond=None)

    np.testing.assert_allclose(result.coefficients, expected, rtol=COEF_TOL, atol=COEF_TOL)
    np.testing.assert_allclose(result.residuals, y - X @ expected, atol=RESID_TOL)
    assert result.df_residual == n - k


def test_standard_errors():
    """stderr = sqrt(diag(sigma² (X'X)⁻¹)) with sigma² = RSS / (n - k)."""
    rng = np.random.default_rng(3)
    n, k = 50, 3
    X = rng.standard_normal((n, k))
    y = X @ np.array([0.5, 1.5, -1.0]) + rng.standard_normal(n)

    result = solve_least_squares(X, y)

    sigma2 = np.sum(result.residuals ** 2) / (n - k)
    expected = np.sqrt(np.diag(sigma2 * np.linalg.inv(X.T @ X)))
    np.testing.assert_allclose(result.stderr, expected, rtol=STAT_TOL)


def test_column_vector_response():
    """An (n, 1) response is accepted like a flat vector."""
    X = np.array([[1.0, 1.0], [1.0, 2.0], [1.0, 3.0]])
    y = np.array([[2.0], [3.0], [4.0]])

    result = solve_least_squares(X, y)
    np.testing.assert_allclose(result.coefficients, [1.0, 1.0], atol=COEF_TOL)


def test_inputs_not_modified():
    X = np.array([[1.0, 1.0], [1.0, 2.0], [1.0, 3.0]])
    y = np.array([2.0, 3.0, 4.0])
    X_orig, y_orig = X.copy(), y.copy()

    solve_least_squares(X, y)

    np.testing.assert_array_equal(X, X_orig)
    np.testing.assert_array_equal(y, y_orig)


class TestSolverErrors:
    """Validation happens before the solve."""

    def test_length_mismatch(self):
        X = np.ones((3, 2))
        with pytest.raises(DimensionError, match="3 rows"):
            solve_least_squares(X, [1.0, 2.0])

    def test_length_mismatch_is_numerical_error(self):
        with pytest.raises(NumericalError):
            solve_least_squares(np.ones((4, 1)), [1.0, 2.0, 3.0])

    def test_one_dimensional_design(self):
        with pytest.raises(DimensionError, match="2-dimensional"):
            solve_least_squares([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])

    def test_empty_design(self):
        with pytest.raises(DimensionError):
            solve_least_squares(np.empty((0, 2)), np.empty(0))

    def test_zero_column_is_rank_deficient(self):
        X = [[1.0, 0.0], [1.0, 0.0], [1.0, 0.0]]
        with pytest.raises(NumericalError, match="rank deficient"):
            solve_least_squares(X, [1.0, 2.0, 3.0])

    def test_collinear_columns_with_tolerance(self):
        X = [[1.0, 2.0], [2.0, 4.0], [3.0, 6.0], [4.0, 8.0]]
        with pytest.raises(NumericalError, match="rank 1 < 2"):
            solve_least_squares(X, [1.0, 2.0, 3.0, 5.0], tol=1e-8)

    def test_underdetermined(self):
        X = [[1.0, 2.0, 3.0], [4.0, 5.0, 7.0]]
        with pytest.raises(NumericalError, match="rank deficient"):
            solve_least_squares(X, [1.0, 2.0])

    def test_nan_response(self):
        with pytest.raises(NumericalError, match="NaN or Inf") as excinfo:
            solve_least_squares(np.eye(2), [1.0, np.nan])
        assert not isinstance(excinfo.value, DimensionError)

    def test_ill_conditioned_warns(self):
        X = [[1.0, 1.0], [1.0, 1.0 + 1e-11], [1.0, 1.0 - 1e-11]]
        with pytest.warns(RuntimeWarning, match="ill-conditioned"):
            result = solve_least_squares(X, [1.0, 2.0, 3.0])
        assert result.rank == 2


class TestComponents:
    """Extraction of residuals / coefficients / fitted values."""

    def test_result_components(self):
        result = solve_least_squares([[1, 1], [1, 2], [1, 3]], [2, 3, 5])
        parts = result.components()

        assert set(parts) == {'Residuals', 'Coefficients', 'Fitted Values'}
        np.testing.assert_allclose(
            parts['Residuals'] + parts['Fitted Values'], [2, 3, 5], atol=RESID_TOL
        )

    def test_mapping_components(self):
        mod = {
            'residuals': [0.1, -0.1],
            'coefficients': [1.0, 2.0],
            'fitted.values': [1.9, 4.1],
        }
        parts = components(mod)
        np.testing.assert_array_equal(parts['Fitted Values'], [1.9, 4.1])
        np.testing.assert_array_equal(residuals(mod), [0.1, -0.1])

    def test_model_residuals(self):
        model = fast_lm([2.0, 3.0, 5.0], [[1, 1], [1, 2], [1, 3]], backend='cpu')
        np.testing.assert_array_equal(residuals(model), model.residuals)
        assert components(model).keys() == model.components().keys()


class TestFastLinearModel:
    """User-facing model wrapper."""

    @pytest.fixture
    def data(self):
        rng = np.random.default_rng(11)
        n = 60
        df = pd.DataFrame({
            'x1': rng.standard_normal(n),
            'x2': rng.uniform(0, 10, n),
        })
        df['y'] = 1.0 + 2.0 * df['x1'] - 0.5 * df['x2'] + 0.2 * rng.standard_normal(n)
        return df

    def test_dataframe_with_intercept(self, data):
        model = fast_lm(y='y', X=['x1', 'x2'], data=data, intercept=True, backend='cpu')

        assert list(model.coef.index) == ['Intercept', 'x1', 'x2']
        np.testing.assert_allclose(model.coef.values, [1.0, 2.0, -0.5], atol=0.2)
        assert model.df_residual == len(data) - 3
        assert 0.9 < model.r_squared <= 1.0

    def test_centred_r_squared(self, data):
        model = fast_lm(y='y', X=['x1', 'x2'], data=data, intercept=True, backend='cpu')

        y = data['y'].values
        rss = np.sum(model.residuals ** 2)
        tss = np.sum((y - y.mean()) ** 2)
        np.testing.assert_allclose(model.r_squared, 1 - rss / tss, rtol=STAT_TOL)

    def test_no_intercept_by_default(self):
        model = FastLinearModel(y=[2, 3, 4], X=[[1, 1], [1, 2], [1, 3]], backend='cpu')
        assert model.var_names == ['x0', 'x1']
        np.testing.assert_allclose(model.coefficients, [1.0, 1.0], atol=COEF_TOL)

    def test_pvalues_and_conf_int(self, data):
        model = fast_lm(y='y', X=['x1', 'x2'], data=data, intercept=True, backend='cpu')

        assert np.all((model.pvalues >= 0) & (model.pvalues <= 1))
        assert model.pvalues[1] < 1e-6
        ci = model.conf_int()
        assert list(ci.columns) == ['lower', 'upper']
        assert np.all(ci['lower'].values < model.coefficients)
        assert np.all(model.coefficients < ci['upper'].values)

    def test_predict(self, data):
        model = fast_lm(y='y', X=['x1', 'x2'], data=data, intercept=True, backend='cpu')

        new = pd.DataFrame({'x1': [0.0, 1.0], 'x2': [0.0, 2.0]})
        pred = model.predict(new)
        expected = model.coefficients[0] + new.values @ model.coefficients[1:]
        np.testing.assert_allclose(pred, expected)

        np.testing.assert_allclose(model.predict(new.values), expected)

    def test_predict_wrong_columns(self, data):
        model = fast_lm(y='y', X=['x1', 'x2'], data=data, intercept=True, backend='cpu')
        with pytest.raises(DimensionError):
            model.predict(np.ones((2, 3)))

    def test_string_inputs_need_data(self):
        with pytest.raises(ValueError, match="Must provide data"):
            fast_lm(y='y', X=['x1'])

    def test_summary(self, data, capsys):
        model = fast_lm(y='y', X=['x1', 'x2'], data=data, intercept=True, backend='cpu')
        model.summary()
        out = capsys.readouterr().out

        assert 'FAST LINEAR MODEL' in out
        assert 'Intercept' in out
        assert 'Backend: cpu_fp64' in out

    def test_repr(self):
        model = fast_lm([2, 3, 4], [[1, 1], [1, 2], [1, 3]], backend='cpu')
        assert repr(model).startswith('FastLinearModel(n=3, k=2')
