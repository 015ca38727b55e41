"""
Full and partial sorting.

NaN values are allowed and sort to the end.
"""

import operator

import numpy as np

from ._utils import check_vector


def sort_values(y) -> np.ndarray:
    """Ascending sorted copy of y."""
    y = check_vector(y, name='y', finite=False)
    return np.sort(y, kind='stable')


def nth_partial_sort(x, nth: int) -> np.ndarray:
    """
    Partially sort a copy of x around position nth.

    After the call, out[nth] holds the value a full sort would place there,
    out[:nth] holds the nth smallest values in ascending order, and
    out[nth+1:] holds the rest in unspecified order. x is not modified.

    >>> nth_partial_sort([5, 1, 4, 2, 3], 2)[:3]
    array([1., 2., 3.])
    """
    x = check_vector(x, name='x', finite=False)
    nth = operator.index(nth)
    if not 0 <= nth < len(x):
        raise ValueError(f"nth must be in [0, {len(x)}), got {nth}")

    y = np.partition(x, nth)
    y[:nth] = np.sort(y[:nth])
    return y
