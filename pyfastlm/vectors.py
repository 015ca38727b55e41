"""
Vector construction, element-wise transforms and aliasing.

Small routines showing how numeric vectors are built, transformed and
shared (by reference or by copy) across a call boundary.
"""

import operator
from dataclasses import dataclass

import numpy as np

from ._utils import check_vector, check_same_length


def zeros(n: int) -> np.ndarray:
    """Integer vector of n zeros."""
    n = operator.index(n)
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return np.zeros(n, dtype=np.int64)


def rep_len(a, length: int) -> np.ndarray:
    """
    Recycle a to exactly length elements (like R's rep_len).

    >>> rep_len([1, 2, 3], 7)
    array([1., 2., 3., 1., 2., 3., 1.])
    """
    a = check_vector(a, name='a', finite=False)
    length = operator.index(length)
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    if a.size == 0:
        if length > 0:
            raise ValueError("cannot recycle an empty vector")
        return a.copy()
    return np.resize(a, length)


def square(x) -> np.ndarray:
    """Element-wise square (new array). NaN stays NaN."""
    x = check_vector(x, name='x', finite=False)
    return np.square(x)


def where_square(x, y) -> np.ndarray:
    """x*x where x < y, otherwise -(y*y). A NaN comparison takes the second branch."""
    x = check_vector(x, name='x', finite=False)
    y = check_vector(y, name='y', finite=False)
    check_same_length(x, y)
    return np.where(x < y, x * x, -(y * y))


def inner_product(x, y, method: str = 'blas') -> float:
    """
    Inner product of two vectors.

    method='loop' accumulates element by element; method='blas' uses a
    single matrix product. Both give the same value up to rounding.
    """
    x = check_vector(x, name='x')
    y = check_vector(y, name='y')
    check_same_length(x, y)

    if method == 'loop':
        ip = 0.0
        for k in range(len(x)):
            ip += x[k] * y[k]
        return float(ip)
    elif method == 'blas':
        return float(x @ y)
    else:
        raise ValueError(f"Unknown method: '{method}' (use 'loop' or 'blas')")


@dataclass
class CopySemantics:
    """Snapshots of a vector and its alias/copy around a single write."""
    a_before: np.ndarray
    b_before: np.ndarray
    a_after: np.ndarray
    b_after: np.ndarray

    @property
    def shared(self) -> bool:
        """Whether the write to a was visible through b."""
        return not np.array_equal(self.b_before, self.b_after, equal_nan=True)

    def __str__(self):
        return (f"Before:\nA: {self.a_before}\nB: {self.b_before}\n"
                f"After:\nA: {self.a_after}\nB: {self.b_after}")


def _check_demo_input(a):
    if not isinstance(a, np.ndarray):
        raise TypeError(f"expected a numpy array, got {type(a).__name__}")
    if a.ndim != 1 or a.size < 2:
        raise ValueError("demo needs a 1-dimensional array with at least 2 elements")


def _write_demo(a: np.ndarray, b: np.ndarray) -> CopySemantics:
    a_before, b_before = a.copy(), b.copy()
    a[1] = 5
    return CopySemantics(a_before, b_before, a.copy(), b.copy())


def reference_demo(a: np.ndarray) -> CopySemantics:
    """
    Bind b to the same buffer as a, then set a[1] = 5.

    Modifies a in place; the change shows up in b as well.
    """
    _check_demo_input(a)
    return _write_demo(a, a)


def copy_demo(a: np.ndarray) -> CopySemantics:
    """
    Take a deep copy b of a, then set a[1] = 5.

    Modifies a in place; b keeps the original values.
    """
    _check_demo_input(a)
    return _write_demo(a, a.copy())


def scalar_copy_demo(a: float) -> CopySemantics:
    """
    Copy a scalar into b, then rebind a to 1.0.

    Python floats are immutable, so b always keeps the original value.
    """
    a = float(a)
    b = a
    a_before, b_before = np.asarray(a), np.asarray(b)
    a = 1.0
    return CopySemantics(a_before, b_before, np.asarray(a), np.asarray(b))


def add_one_view(x) -> np.ndarray:
    """Return x + 1 as a new array; x is read only and left untouched."""
    x = check_vector(x, name='x', finite=False)
    return x + 1.0
