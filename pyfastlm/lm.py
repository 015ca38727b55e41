"""
Fast linear model fitting with an R-style interface.

This is the user-facing wrapper around the least-squares solver.
"""

from collections.abc import Mapping
from typing import Optional, Union, List

import numpy as np
import pandas as pd
from scipy import stats

from ._backends import get_backend
from ._core.lm_solver import solve_least_squares
from ._utils import check_array
from .exceptions import DimensionError


class FastLinearModel:
    """
    Fit a linear model by least squares (like RcppArmadillo's fastLm()).

    Unlike R's lm(), no intercept is added unless requested and a
    rank-deficient design is an error rather than an aliased fit.

    Examples
    --------
    >>> import pandas as pd
    >>> from pyfastlm import fast_lm
    >>>
    >>> model = fast_lm(y='mpg', X=['wt', 'hp'], data=mtcars, intercept=True)
    >>> model.summary()
    >>>
    >>> model.coef         # Named coefficients
    >>> model.stderr       # Standard errors
    >>> model.components() # Residuals, coefficients, fitted values
    """

    def __init__(
        self,
        y: Union[str, np.ndarray],
        X: Union[List[str], np.ndarray, pd.DataFrame],
        data: Optional[pd.DataFrame] = None,
        intercept: bool = False,
        backend: str = 'auto',
        use_fp64: Optional[bool] = None,
        tol: Optional[float] = None,
    ):
        """
        Fit linear model.

        Parameters
        ----------
        y : str or array
            Response variable
            - If string: column name in data
            - If array: numeric values
        X : list of str, array or DataFrame
            Predictor variables
            - If list of strings: column names in data
            - If array: numeric matrix (n x k)
        data : DataFrame, optional
            Dataset containing y and X variables
        intercept : bool
            Prepend a column of ones named 'Intercept'
        backend : str
            Computational backend: 'auto', 'cpu', 'gpu', 'pytorch'
        use_fp64 : bool, optional
            Force double precision on the PyTorch backend
        tol : float, optional
            Relative tolerance for rank determination
        """
        if isinstance(y, str):
            if data is None:
                raise ValueError("Must provide data when y is a string")
            self.y_values = data[y].values
            self.y_name = y
        else:
            self.y_values = np.asarray(y)
            self.y_name = 'y'

        if isinstance(X, list) and X and all(isinstance(x, str) for x in X):
            if data is None:
                raise ValueError("Must provide data when X is list of strings")
            X_values = data[X].values
            X_names = list(X)
        elif isinstance(X, pd.DataFrame):
            X_values = X.values
            X_names = [str(c) for c in X.columns]
        else:
            X_values = check_array(X, name='X')
            X_names = [f'x{i}' for i in range(X_values.shape[1])]

        X_values = check_array(X_values, name='X')
        self.X_names = X_names
        self.intercept = intercept

        if intercept:
            X_values = np.column_stack([np.ones(X_values.shape[0]), X_values])
            self.var_names = ['Intercept'] + X_names
        else:
            self.var_names = list(X_names)
        self.X_values = X_values

        self.backend = get_backend(backend, use_fp64=use_fp64)
        self._result = solve_least_squares(
            self.X_values,
            self.y_values,
            tol=tol,
            backend=self.backend
        )

        self.n_obs = self.X_values.shape[0]
        self.n_coef = self.X_values.shape[1]
        self._compute_statistics()

    def _compute_statistics(self):
        """Compute sigma, t-stats, p-values and R-squared."""
        result = self._result

        self.coefficients = result.coefficients
        self.residuals = result.residuals
        self.fitted_values = result.fitted_values
        self.stderr = result.stderr
        self.rank = result.rank
        self.df_residual = result.df_residual

        rss = float(np.sum(self.residuals ** 2))
        y = np.asarray(self.y_values, dtype=np.float64).ravel()

        if self.df_residual > 0:
            self.sigma = np.sqrt(rss / self.df_residual)
            with np.errstate(divide='ignore', invalid='ignore'):
                self.t_values = self.coefficients / self.stderr
            self.pvalues = 2 * stats.t.sf(np.abs(self.t_values), self.df_residual)
        else:
            self.sigma = np.nan
            self.t_values = np.full(self.n_coef, np.nan)
            self.pvalues = np.full(self.n_coef, np.nan)

        # Centred R^2 only makes sense with an intercept
        if self.intercept:
            tss = float(np.sum((y - np.mean(y)) ** 2))
        else:
            tss = float(np.sum(y ** 2))
        self.r_squared = 1 - (rss / tss) if tss > 0 else 0.0

    @property
    def coef(self) -> pd.Series:
        """Named coefficients (pandas Series)."""
        return pd.Series(self.coefficients, index=self.var_names)

    def components(self) -> dict:
        """Residuals, coefficients and fitted values keyed by display name."""
        return self._result.components()

    def conf_int(self, alpha: float = 0.05) -> pd.DataFrame:
        """
        Confidence intervals for coefficients.

        Parameters
        ----------
        alpha : float
            Significance level (default: 0.05 for 95% CI)
        """
        if self.df_residual > 0:
            t_crit = stats.t.ppf(1 - alpha/2, self.df_residual)
        else:
            t_crit = np.nan
        return pd.DataFrame({
            'lower': self.coefficients - t_crit * self.stderr,
            'upper': self.coefficients + t_crit * self.stderr,
        }, index=self.var_names)

    def summary(self):
        """Print summary of regression results (like R's summary.fastLm)."""
        print()
        print("="*80)
        print("FAST LINEAR MODEL")
        print("="*80)
        print()

        print(f"Dependent variable: {self.y_name}")
        print(f"Number of observations: {self.n_obs}")
        print(f"Residual degrees of freedom: {self.df_residual}")
        print()

        if self.n_obs > 0:
            residual_summary = pd.Series(self.residuals).describe()
            print("Residuals:")
            print(f"  Min:    {residual_summary['min']:>10.4f}")
            print(f"  Median: {residual_summary['50%']:>10.4f}")
            print(f"  Max:    {residual_summary['max']:>10.4f}")
            print()

        print("Coefficients:")
        print("-"*80)
        print(f"{'Variable':<20} {'Estimate':>12} {'Std. Error':>12} {'t value':>10} {'Pr(>|t|)':>12}")
        print("-"*80)

        for i, name in enumerate(self.var_names):
            p = self.pvalues[i]
            if np.isnan(p):
                p_str, sig = 'NA', ''
            else:
                p_str = f"{p:.4f}" if p >= 0.0001 else "<.0001"
                sig = (' ***' if p < 0.001 else
                       ' **' if p < 0.01 else
                       ' *' if p < 0.05 else
                       ' .' if p < 0.1 else '')
            print(f"{name:<20} {self.coefficients[i]:>12.4f} {self.stderr[i]:>12.4f} "
                  f"{self.t_values[i]:>10.3f} {p_str:>12}{sig}")

        print("-"*80)
        print("Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
        print()
        print(f"Residual standard error: {self.sigma:.4f} on {self.df_residual} degrees of freedom")
        print(f"Multiple R-squared:      {self.r_squared:.4f}")
        print()
        print(f"Backend: {self.backend.name}")
        print("="*80)
        print()

    def predict(self, newdata: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """
        Predict response for new data.

        Parameters
        ----------
        newdata : DataFrame or array
            New predictor values (without the intercept column)
            - If DataFrame: must have columns matching self.X_names
            - If array: must have len(self.X_names) columns
        """
        if isinstance(newdata, pd.DataFrame):
            X_new = newdata[self.X_names].values
        else:
            X_new = np.asarray(newdata, dtype=np.float64)
            if X_new.ndim == 1:
                X_new = X_new.reshape(1, -1)

        X_new = check_array(X_new, name='newdata')
        if X_new.shape[1] != len(self.X_names):
            raise DimensionError(
                f"newdata has {X_new.shape[1]} columns, model expects {len(self.X_names)}"
            )

        if self.intercept:
            X_new = np.column_stack([np.ones(X_new.shape[0]), X_new])
        return X_new @ self.coefficients

    def __repr__(self):
        return f"FastLinearModel(n={self.n_obs}, k={self.n_coef}, R²={self.r_squared:.3f})"


def fast_lm(y, X, data=None, **kwargs):
    """
    Fit a fast linear model (convenience function).

    Parameters
    ----------
    y : str or array
        Response variable
    X : list of str, array or DataFrame
        Predictor variables
    data : DataFrame, optional
        Dataset
    **kwargs
        Additional arguments passed to FastLinearModel

    Returns
    -------
    FastLinearModel
        Fitted model object

    Examples
    --------
    >>> model = fast_lm([2, 3, 4], [[1, 1], [1, 2], [1, 3]])
    >>> model.coefficients
    array([1., 1.])
    """
    return FastLinearModel(y=y, X=X, data=data, **kwargs)


def _field(model, attr: str, key: str):
    if isinstance(model, Mapping):
        return np.asarray(model[key], dtype=np.float64)
    return np.asarray(getattr(model, attr), dtype=np.float64)


def residuals(model) -> np.ndarray:
    """
    Extract residuals from a fitted model.

    Accepts a FastLinearModel, a LeastSquaresResult, or any mapping with a
    'residuals' entry (e.g. a fitted model exported as a dict).
    """
    return _field(model, 'residuals', 'residuals')


def components(model) -> dict:
    """
    Extract residuals, coefficients and fitted values from a fitted model.

    Mappings are read via the keys 'residuals', 'coefficients' and
    'fitted.values' (or 'fitted_values').
    """
    if isinstance(model, Mapping):
        fitted_key = 'fitted.values' if 'fitted.values' in model else 'fitted_values'
        return {
            'Residuals': _field(model, 'residuals', 'residuals'),
            'Coefficients': _field(model, 'coefficients', 'coefficients'),
            'Fitted Values': _field(model, 'fitted_values', fitted_key),
        }
    return model.components()
