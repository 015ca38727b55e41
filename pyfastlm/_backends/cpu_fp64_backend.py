"""
CPU backend using NumPy + SciPy.

This is the reference implementation; other backends are validated against it.
"""

import logging
import warnings
from typing import Optional

import numpy as np
from scipy.linalg import qr, solve_triangular

from ..exceptions import NumericalError
from .base import CPUBackend, LeastSquaresResult, COND_WARN_THRESHOLD

logger = logging.getLogger(__name__)


def qr_rank(R_diag: np.ndarray, tol: float) -> int:
    """Numerical rank from the (pivoted, hence non-increasing) |diag(R)|."""
    if R_diag.size == 0 or R_diag[0] == 0:
        return 0
    return int(np.sum(R_diag > tol * R_diag[0]))


class CPUBackendFP64(CPUBackend):
    """
    CPU backend using NumPy + SciPy.

    Reference implementation. Always uses FP64 precision.
    """

    def __init__(self):
        self.name = "cpu_fp64"
        self.precision = "fp64"

    def solve_least_squares(
        self,
        X: np.ndarray,
        y: np.ndarray,
        tol: Optional[float] = None,
    ) -> LeastSquaresResult:
        """
        Least squares via QR with column pivoting (LAPACK geqp3).

        Solves R b = Q'y by back-substitution, then undoes the pivot.
        """
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        n, k = X.shape

        if tol is None:
            tol = max(n, k) * np.finfo(np.float64).eps

        logger.debug("Factorizing design matrix %s with pivoted QR", X.shape)
        Q, R, P = qr(X, mode='economic', pivoting=True)

        R_diag = np.abs(np.diag(R))
        rank = qr_rank(R_diag, tol)
        if rank < k:
            raise NumericalError(
                f"Design matrix is rank deficient: rank {rank} < {k} columns"
            )

        cond = R_diag[0] / R_diag[k - 1]
        if cond > COND_WARN_THRESHOLD:
            warnings.warn(
                f"Design matrix is ill-conditioned (QR condition estimate {cond:.3e}); "
                f"coefficients may be inaccurate.",
                RuntimeWarning
            )

        R_k = R[:k, :k]
        qty = Q.T @ y
        coef = np.empty(k, dtype=np.float64)
        coef[P] = solve_triangular(R_k, qty[:k], lower=False)

        fitted = X @ coef
        residuals = y - fitted
        df_residual = n - k

        # Var(b) = sigma^2 P (R'R)^-1 P'
        stderr = np.full(k, np.nan, dtype=np.float64)
        if df_residual > 0:
            sigma2 = float(residuals @ residuals) / df_residual
            R_inv = solve_triangular(R_k, np.eye(k), lower=False)
            stderr[P] = np.sqrt(sigma2 * np.sum(R_inv ** 2, axis=1))

        logger.debug("Solved least squares: rank=%d, df_residual=%d", rank, df_residual)

        return LeastSquaresResult(
            coefficients=coef,
            residuals=residuals,
            fitted_values=fitted,
            stderr=stderr,
            rank=rank,
            df_residual=df_residual,
            qr_R=R_k,
            qr_pivot=P.astype(np.int64),
            tol=tol
        )

    def simulate_var(self, A: np.ndarray, epsilon: np.ndarray) -> np.ndarray:
        """Sequential VAR(1) recurrence in NumPy."""
        n, m = epsilon.shape
        out = np.zeros((n, m), dtype=np.float64)
        A_t = np.asarray(A, dtype=np.float64).T

        logger.debug("Simulating VAR(1): %d steps, %d series", n, m)
        for i in range(1, n):
            out[i] = out[i - 1] @ A_t + epsilon[i]

        return out

    def get_device_info(self) -> dict:
        """Get backend information."""
        import scipy
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
