"""
Abstract base classes for backends.

Defines the interface all backends must implement.
"""

from abc import ABC, abstractmethod
import numpy as np
from typing import Optional
from dataclasses import dataclass


# |R_00| / |R_kk| above this triggers an ill-conditioning warning
COND_WARN_THRESHOLD = 1e10


@dataclass
class LeastSquaresResult:
    """Complete least-squares results."""
    coefficients: np.ndarray   # Coefficient estimates, shape (k,)
    residuals: np.ndarray      # y - X @ coefficients
    fitted_values: np.ndarray  # X @ coefficients
    stderr: np.ndarray         # Coefficient standard errors (NaN when df_residual == 0)
    rank: int
    df_residual: int
    qr_R: np.ndarray           # Upper triangular factor (pivoted column order)
    qr_pivot: np.ndarray       # Pivot indices (0-indexed)
    tol: float                 # Rank tolerance used

    def components(self) -> dict:
        """Residuals, coefficients and fitted values keyed by display name."""
        return {
            'Residuals': self.residuals,
            'Coefficients': self.coefficients,
            'Fitted Values': self.fitted_values,
        }


class BackendBase(ABC):
    """Abstract base class for all backends."""

    name: str
    precision: str

    @abstractmethod
    def solve_least_squares(
        self,
        X: np.ndarray,
        y: np.ndarray,
        tol: Optional[float] = None,
    ) -> LeastSquaresResult:
        """
        Solve min ||y - X b||^2 - complete computation.

        Backends implement ALL computation internally using their
        native types, only converting at entry/exit. Inputs have
        already been validated for shape and finiteness.

        Parameters
        ----------
        X : ndarray, shape (n, k)
            Design matrix (used as given, no intercept added)
        y : ndarray, shape (n,)
            Response vector
        tol : float, optional
            Relative tolerance for rank determination

        Returns
        -------
        LeastSquaresResult
            Complete results (all numpy arrays)

        Raises
        ------
        NumericalError
            If X is numerically rank deficient
        """
        pass

    @abstractmethod
    def simulate_var(self, A: np.ndarray, epsilon: np.ndarray) -> np.ndarray:
        """
        Run the VAR(1) recurrence out[i] = out[i-1] @ A.T + epsilon[i].

        out[0] is zero. Inputs have already been validated.
        """
        pass

    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass


class CPUBackend(BackendBase):
    """CPU backend base class (always FP64)."""
    pass


class GPUBackend(BackendBase):
    """GPU backend base class (FP32 or FP64)."""
    pass
