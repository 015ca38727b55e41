"""
Backend selection and management.

Provides a unified interface for the CPU (NumPy/SciPy) and PyTorch backends.
"""

from typing import Optional
import warnings

from .base import BackendBase, LeastSquaresResult
from .precision_detector import (
    detect_gpu_capabilities,
    recommend_precision,
    GPUCapabilities
)

# Try importing CPU backend (always available)
try:
    from .cpu_fp64_backend import CPUBackendFP64
    CPU_AVAILABLE = True
except ImportError:
    CPU_AVAILABLE = False
    warnings.warn("CPU backend unavailable - installation error!")

# PyTorch is an optional extra
try:
    import torch  # noqa: F401
    from .torch_backend import PyTorchBackend
    PYTORCH_AVAILABLE = True
except ImportError:
    PYTORCH_AVAILABLE = False


def _cpu_backend() -> BackendBase:
    if not CPU_AVAILABLE:
        raise RuntimeError("CPU backend unavailable!")
    return CPUBackendFP64()


def get_backend(backend: str = 'auto', use_fp64: Optional[bool] = None) -> BackendBase:
    """
    Get computational backend.

    Parameters
    ----------
    backend : str
        Backend selection:
        - 'auto': Auto-select based on hardware
        - 'cpu': CPU with NumPy/SciPy (FP64)
        - 'gpu': CUDA GPU via PyTorch (fails without one)
        - 'pytorch': Force PyTorch (CUDA if present, otherwise torch on CPU)

    use_fp64 : bool or None
        Precision preference for PyTorch:
        - None: Auto-detect
        - True: Force FP64
        - False: Allow FP32

    Returns
    -------
    BackendBase
        Backend instance

    Examples
    --------
    >>> backend = get_backend('cpu')
    >>> result = backend.solve_least_squares(X, y)
    """
    if isinstance(backend, BackendBase):
        return backend

    if backend == 'auto':
        caps = detect_gpu_capabilities()
        if caps.gpu_type != 'cuda' or not PYTORCH_AVAILABLE:
            return _cpu_backend()

        use_fp64_final = recommend_precision(caps, use_fp64)
        if use_fp64_final and not caps.recommended_fp64:
            # FP64 on a consumer GPU is slower than the CPU path
            return _cpu_backend()
        return PyTorchBackend(precision='fp64' if use_fp64_final else 'fp32')

    elif backend == 'cpu':
        return _cpu_backend()

    elif backend == 'gpu':
        caps = detect_gpu_capabilities()
        if caps.gpu_type != 'cuda':
            raise ValueError(
                "No CUDA GPU detected.\n"
                "Options:\n"
                "  - Use backend='cpu'\n"
                "  - Install PyTorch with CUDA for NVIDIA"
            )
        if not PYTORCH_AVAILABLE:
            raise RuntimeError(
                "NVIDIA GPU detected but PyTorch unavailable.\n"
                "Install: pip install pyfastlm[gpu]"
            )
        use_fp64_final = recommend_precision(caps, use_fp64)
        return PyTorchBackend(precision='fp64' if use_fp64_final else 'fp32', device='cuda')

    elif backend == 'pytorch':
        if not PYTORCH_AVAILABLE:
            raise RuntimeError(
                "PyTorch backend unavailable.\n"
                "Install: pip install pyfastlm[gpu]"
            )
        caps = detect_gpu_capabilities()
        use_fp64_final = recommend_precision(caps, use_fp64)
        return PyTorchBackend(precision='fp64' if use_fp64_final else 'fp32')

    else:
        raise ValueError(
            f"Unknown backend: '{backend}'\n"
            f"Valid options: 'auto', 'cpu', 'gpu', 'pytorch'"
        )


def list_available_backends() -> list:
    """List names of available backends."""
    backends = []
    if CPU_AVAILABLE:
        backends.append('cpu')
    if PYTORCH_AVAILABLE:
        backends.append('pytorch')
    return backends


def print_backend_info():
    """Print detailed backend information (diagnostic)."""
    caps = detect_gpu_capabilities()

    print("pyfastlm Backend Status")
    print("=" * 50)
    print("\nAvailable Backends:")
    print(f"  CPU (FP64):     {'yes' if CPU_AVAILABLE else 'no'} - pivoted QR (LAPACK)")
    print(f"  PyTorch:        {'yes' if PYTORCH_AVAILABLE else 'no'} - QR (torch.linalg)")

    print("\nHardware Detection:")
    if caps.has_gpu:
        print(f"  GPU Type: {caps.gpu_type}")
        print(f"  GPU Name: {caps.gpu_name}")
        print(f"  FP64 Support: {caps.fp64_support.value}")
    else:
        print("  No GPU detected")

    print("\nRecommended Backend:")
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            backend = get_backend('auto')
        print(f"  {backend.name}")
    except (RuntimeError, ValueError) as e:
        print(f"  Error: {e}")


__all__ = [
    'get_backend',
    'list_available_backends',
    'print_backend_info',
    'BackendBase',
    'LeastSquaresResult',
    'GPUCapabilities',
    'detect_gpu_capabilities',
    'CPU_AVAILABLE',
    'PYTORCH_AVAILABLE',
]


if __name__ == "__main__":
    print_backend_info()
