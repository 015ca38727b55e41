"""
pyfastlm: fast least squares and VAR simulation on NumPy/SciPy, with an
optional PyTorch backend.
"""

__version__ = "1.0.0"

# Import main user-facing API
from .lm import fast_lm, FastLinearModel, residuals, components
from ._core import solve_least_squares, simulate_var
from .exceptions import FastLmError, NumericalError, DimensionError

# Import backend utilities (for advanced users)
from ._backends import get_backend, list_available_backends

__all__ = [
    'fast_lm',
    'FastLinearModel',
    'residuals',
    'components',
    'solve_least_squares',
    'simulate_var',
    'FastLmError',
    'NumericalError',
    'DimensionError',
    'get_backend',
    'list_available_backends',
]
