"""
First-order vector autoregression simulator.

    out[0] = 0
    out[i] = out[i-1] @ A.T + epsilon[i],  i = 1..n-1
"""

import pandas as pd

from .._utils import check_array, check_square
from ..exceptions import DimensionError


def simulate_var(A, epsilon, backend='cpu'):
    """
    Simulate a VAR(1) series driven by caller-supplied innovations.

    The initial state is fixed at zero, so epsilon[0] never enters the output.

    Parameters
    ----------
    A : array-like, shape (m, m)
        Transition matrix
    epsilon : array-like or DataFrame, shape (n, m)
        Innovations, one row per time step
    backend : str or BackendBase
        Computational backend (default 'cpu')

    Returns
    -------
    out : ndarray or DataFrame, shape (n, m)
        Simulated series. A DataFrame (same index and columns) when
        epsilon is a DataFrame.

    Raises
    ------
    DimensionError
        If A is not square or its dimension differs from epsilon's column count
    NumericalError
        If A or epsilon contain NaN/Inf
    """
    frame = epsilon if isinstance(epsilon, pd.DataFrame) else None

    A = check_square(A, name='A')
    epsilon = check_array(epsilon, name='epsilon')

    if A.shape[0] != epsilon.shape[1]:
        raise DimensionError(
            f"A is {A.shape[0]}x{A.shape[1]} but epsilon has {epsilon.shape[1]} columns"
        )

    from .._backends import get_backend
    out = get_backend(backend).simulate_var(A, epsilon)

    if frame is not None:
        return pd.DataFrame(out, index=frame.index, columns=frame.columns)
    return out
