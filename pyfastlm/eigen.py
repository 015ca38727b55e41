"""
Eigenvalues of symmetric matrices.
"""

import numpy as np
from scipy.linalg import eigh

from ._utils import check_square
from .exceptions import NumericalError


def eigen_values(M, atol: float = 1e-10) -> np.ndarray:
    """
    Eigenvalues of a real symmetric matrix, in ascending order.

    Symmetry is judged relative to the matrix scale: |M - M.T| must stay
    within atol * max(1, max|M|).

    Raises
    ------
    DimensionError
        If M is not square
    NumericalError
        If M contains NaN/Inf or is not symmetric within tolerance
    """
    M = check_square(M, name='M')
    scale = max(1.0, float(np.max(np.abs(M)))) if M.size else 1.0
    if not np.allclose(M, M.T, rtol=0.0, atol=atol * scale):
        raise NumericalError("M must be symmetric")
    return eigh(M, eigvals_only=True)
