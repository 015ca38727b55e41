"""
Utility functions.
"""

import numpy as np

from .exceptions import DimensionError, NumericalError


def check_array(X, name='X', dtype=np.float64):
    """Validate matrix input."""
    X = np.asarray(X, dtype=dtype)
    if X.ndim != 2:
        raise DimensionError(f"{name} must be 2-dimensional, got shape {X.shape}")
    if not np.all(np.isfinite(X)):
        raise NumericalError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='y', dtype=np.float64, finite=True):
    """
    Validate vector input. Column matrices (n, 1) are flattened.

    finite=False lets NaN/Inf through for element-wise routines.
    """
    y = np.asarray(y, dtype=dtype)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y[:, 0]
    if y.ndim != 1:
        raise DimensionError(f"{name} must be 1-dimensional, got shape {y.shape}")
    if finite and not np.all(np.isfinite(y)):
        raise NumericalError(f"{name} contains NaN or Inf")
    return y


def check_square(A, name='A', dtype=np.float64):
    """Validate square matrix input."""
    A = check_array(A, name=name, dtype=dtype)
    if A.shape[0] != A.shape[1]:
        raise DimensionError(f"{name} must be square, got shape {A.shape}")
    return A


def check_same_length(x, y, x_name='x', y_name='y'):
    """Ensure two vectors have equal length."""
    if len(x) != len(y):
        raise DimensionError(
            f"{x_name} and {y_name} must have the same length "
            f"({len(x)} != {len(y)})"
        )
