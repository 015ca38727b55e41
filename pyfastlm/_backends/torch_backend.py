"""
GPU backend using PyTorch.

One class covers both precisions; FP64 is only sensible on data center GPUs.
"""

import logging
import warnings
from typing import Optional, Any

import numpy as np

from ..exceptions import NumericalError
from .base import GPUBackend, LeastSquaresResult, COND_WARN_THRESHOLD

logger = logging.getLogger(__name__)


class PyTorchBackend(GPUBackend):
    """
    PyTorch backend (CUDA when available, otherwise torch on CPU).

    Keeps all computation in torch tensors.
    Only converts at entry (numpy -> torch) and exit (torch -> numpy).
    """

    def __init__(self, precision: str = 'fp32', device: Optional[str] = None):
        if precision not in ('fp32', 'fp64'):
            raise ValueError(f"precision must be 'fp32' or 'fp64', got '{precision}'")

        try:
            import torch
            self.torch = torch
        except ImportError:
            raise ImportError(
                "PyTorch required for GPU backend. "
                "Install: pip install pyfastlm[gpu]"
            )

        self.precision = precision
        self.name = f"pytorch_{precision}"
        self.dtype = torch.float64 if precision == 'fp64' else torch.float32
        self.device = self._select_device(device)

        if precision == 'fp64' and self.device.type == 'cuda':
            from .precision_detector import detect_gpu_capabilities, PrecisionSupport
            caps = detect_gpu_capabilities()
            if caps.fp64_support == PrecisionSupport.GIMPED_FP64:
                warnings.warn(
                    f"Using FP64 on {caps.gpu_name} with gimped FP64 support. "
                    f"This will be ~{int(1/caps.fp64_throughput_ratio)}x slower than FP32.",
                    UserWarning
                )

    def _select_device(self, requested: Optional[str]) -> Any:
        """Select a torch device. Metal is rejected (no QR/FP64 support)."""
        torch = self.torch

        if requested:
            device = torch.device(requested)
            if device.type == 'mps':
                raise ValueError(
                    "PyTorch backend does not support Apple MPS (Metal). "
                    "Use get_backend('cpu')."
                )
            return device

        if torch.cuda.is_available():
            return torch.device('cuda')

        warnings.warn("No CUDA GPU available, running PyTorch backend on CPU")
        return torch.device('cpu')

    def _to_tensor(self, a: np.ndarray):
        return self.torch.as_tensor(a, dtype=self.dtype, device=self.device)

    def solve_least_squares(
        self,
        X: np.ndarray,
        y: np.ndarray,
        tol: Optional[float] = None,
    ) -> LeastSquaresResult:
        """
        Least squares via (unpivoted) QR in torch.

        Rank is judged against the largest |R_ii| since columns are not pivoted.
        """
        torch = self.torch
        n, k = X.shape

        X_t = self._to_tensor(X)
        y_t = self._to_tensor(y)

        if tol is None:
            tol = max(n, k) * torch.finfo(self.dtype).eps

        logger.debug("Factorizing design matrix %s with torch QR on %s", tuple(X.shape), self.device)
        Q, R = torch.linalg.qr(X_t, mode='reduced')

        R_diag = torch.abs(torch.diagonal(R))
        R_max = float(R_diag.max().item()) if R_diag.numel() > 0 else 0.0
        if R_max == 0.0:
            rank = 0
        else:
            rank = int(torch.sum(R_diag > tol * R_max).item())
        if rank < k:
            raise NumericalError(
                f"Design matrix is rank deficient: rank {rank} < {k} columns"
            )

        cond = R_max / float(R_diag.min().item())
        if cond > COND_WARN_THRESHOLD:
            warnings.warn(
                f"Design matrix is ill-conditioned (QR condition estimate {cond:.3e}); "
                f"coefficients may be inaccurate.",
                RuntimeWarning
            )

        R_k = R[:k, :k]
        qty = Q.T @ y_t
        coef = torch.linalg.solve_triangular(
            R_k,
            qty[:k].unsqueeze(1),  # (k, 1)
            upper=True
        ).squeeze(1)

        fitted = X_t @ coef
        residuals = y_t - fitted
        df_residual = n - k

        stderr = torch.full((k,), float('nan'), dtype=self.dtype, device=self.device)
        if df_residual > 0:
            sigma2 = torch.sum(residuals ** 2) / df_residual
            eye = torch.eye(k, dtype=self.dtype, device=self.device)
            R_inv = torch.linalg.solve_triangular(R_k, eye, upper=True)
            stderr = torch.sqrt(sigma2 * torch.sum(R_inv ** 2, dim=1))

        return LeastSquaresResult(
            coefficients=coef.cpu().numpy().astype(np.float64),
            residuals=residuals.cpu().numpy().astype(np.float64),
            fitted_values=fitted.cpu().numpy().astype(np.float64),
            stderr=stderr.cpu().numpy().astype(np.float64),
            rank=rank,
            df_residual=df_residual,
            qr_R=R_k.cpu().numpy().astype(np.float64),
            qr_pivot=np.arange(k, dtype=np.int64),
            tol=float(tol)
        )

    def simulate_var(self, A: np.ndarray, epsilon: np.ndarray) -> np.ndarray:
        """Sequential VAR(1) recurrence on the torch device."""
        torch = self.torch
        n, m = epsilon.shape

        A_t = self._to_tensor(A).T
        eps = self._to_tensor(epsilon)
        out = torch.zeros((n, m), dtype=self.dtype, device=self.device)

        logger.debug("Simulating VAR(1) on %s: %d steps, %d series", self.device, n, m)
        for i in range(1, n):
            out[i] = out[i - 1] @ A_t + eps[i]

        return out.cpu().numpy().astype(np.float64)

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'gpu' if self.device.type == 'cuda' else 'cpu',
            'precision': self.precision,
            'device': str(self.device),
            'library': f'PyTorch {self.torch.__version__}',
        }
