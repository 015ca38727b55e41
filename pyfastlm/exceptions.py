"""
Exception hierarchy.

All failures are raised before the underlying linear-algebra call runs.
"""

import numpy as np


class FastLmError(Exception):
    """Base class for all pyfastlm errors."""
    pass


class NumericalError(FastLmError, np.linalg.LinAlgError):
    """
    Raised when a computation cannot produce a meaningful answer.

    Singular or rank-deficient design matrices, non-finite inputs.
    """
    pass


class DimensionError(NumericalError, ValueError):
    """
    Raised when argument shapes are incompatible.

    Subclasses NumericalError so that callers catching NumericalError
    around a solve also see shape mismatches.
    """
    pass
