"""
Monte Carlo estimation of pi.
"""

import logging
import operator
from typing import Optional, Union

import numpy as np

logger = logging.getLogger(__name__)


def estimate_pi(n: int, seed: Optional[Union[int, np.random.Generator]] = None) -> float:
    """
    Estimate pi from n uniform draws on the unit square.

    The fraction of points inside the quarter unit circle approaches pi/4.

    Parameters
    ----------
    n : int
        Number of points (> 0)
    seed : int or Generator, optional
        Seed (or generator) for numpy.random.default_rng; the same seed
        always gives the same estimate.
    """
    n = operator.index(n)
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}")

    rng = np.random.default_rng(seed)
    x = rng.uniform(size=n)
    y = rng.uniform(size=n)
    d = np.sqrt(x * x + y * y)

    estimate = 4.0 * np.count_nonzero(d <= 1.0) / n
    logger.debug("Estimated pi=%.6f from %d draws", estimate, n)
    return float(estimate)
