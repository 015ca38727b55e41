"""
Least-squares solver.

Validates shapes up front, then delegates to a backend for the solve.
"""

from typing import Optional

from .._utils import check_array, check_vector
from ..exceptions import DimensionError


def solve_least_squares(
    X,
    y,
    tol: Optional[float] = None,
    backend='cpu',
):
    """
    Solve min ||y - X b||^2 for b.

    X is used as given; no intercept column is added.

    Parameters
    ----------
    X : array-like, shape (n, k)
        Design matrix
    y : array-like, shape (n,) or (n, 1)
        Response vector
    tol : float, optional
        Relative tolerance for rank determination
        (default max(n, k) * machine epsilon)
    backend : str or BackendBase
        Computational backend (default 'cpu')

    Returns
    -------
    result : LeastSquaresResult
        Coefficients plus residuals, fitted values and standard errors

    Raises
    ------
    DimensionError
        If X is not 2-D, is empty, or len(y) != X.shape[0]
    NumericalError
        If inputs contain NaN/Inf or X is rank deficient

    Examples
    --------
    >>> X = [[1, 1], [1, 2], [1, 3]]
    >>> solve_least_squares(X, [2, 3, 4]).coefficients
    array([1., 1.])
    """
    X = check_array(X, name='X')
    y = check_vector(y, name='y')

    n, k = X.shape
    if n == 0 or k == 0:
        raise DimensionError(f"X must have at least one row and one column, got shape {X.shape}")
    if len(y) != n:
        raise DimensionError(
            f"X has {n} rows but y has length {len(y)}"
        )

    from .._backends import get_backend
    return get_backend(backend).solve_least_squares(X, y, tol=tol)
