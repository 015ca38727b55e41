"""
Hardware precision capability detection.

Decides whether the torch backend should run in FP32 or FP64.
"""

import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PrecisionSupport(Enum):
    """FP64 support level for hardware."""
    NO_GPU = "no_gpu"            # No usable GPU
    NO_FP64 = "no_fp64"          # GPU without FP64 (Apple Metal)
    GIMPED_FP64 = "gimped_fp64"  # FP64 exists but slow (consumer NVIDIA)
    FULL_FP64 = "full_fp64"      # Full-speed FP64 (A100, H100)


@dataclass
class GPUCapabilities:
    """
    GPU capability information.

    Attributes
    ----------
    has_gpu : bool
        Whether a GPU usable by the torch backend is available
    gpu_name : str
        Human-readable GPU name
    gpu_type : str
        'cuda', 'metal', or 'none'
    fp64_support : PrecisionSupport
        Level of FP64 support
    fp64_throughput_ratio : float
        Ratio of FP64 to FP32 throughput
    recommended_fp64 : bool
        Whether FP64 is recommended
    """
    has_gpu: bool
    gpu_name: str
    gpu_type: str
    fp64_support: PrecisionSupport
    fp64_throughput_ratio: float
    recommended_fp64: bool


CPU_ONLY = GPUCapabilities(
    has_gpu=False,
    gpu_name="CPU only",
    gpu_type="none",
    fp64_support=PrecisionSupport.NO_GPU,
    fp64_throughput_ratio=1.0,
    recommended_fp64=True  # CPU always supports FP64
)

# Name fragment -> (support, FP64/FP32 throughput ratio)
_NVIDIA_FP64 = [
    ('A100', PrecisionSupport.FULL_FP64, 0.5),
    ('A800', PrecisionSupport.FULL_FP64, 0.5),
    ('H100', PrecisionSupport.FULL_FP64, 0.5),
    ('H800', PrecisionSupport.FULL_FP64, 0.5),
    ('V100', PrecisionSupport.FULL_FP64, 0.5),
    ('P100', PrecisionSupport.FULL_FP64, 0.5),
    ('RTX 50', PrecisionSupport.GIMPED_FP64, 1/64),
    ('RTX 40', PrecisionSupport.GIMPED_FP64, 1/64),
    ('RTX 30', PrecisionSupport.GIMPED_FP64, 1/64),
    ('RTX 20', PrecisionSupport.GIMPED_FP64, 1/32),
    ('GTX', PrecisionSupport.GIMPED_FP64, 1/32),
]


def detect_gpu_capabilities() -> GPUCapabilities:
    """Detect GPU hardware and FP64 capabilities (CPU_ONLY without torch)."""
    try:
        import torch
    except ImportError:
        return CPU_ONLY

    if torch.cuda.is_available():
        gpu_name = torch.cuda.get_device_name(0)
        support, ratio = classify_nvidia_gpu(gpu_name)
        return GPUCapabilities(
            has_gpu=True,
            gpu_name=gpu_name,
            gpu_type="cuda",
            fp64_support=support,
            fp64_throughput_ratio=ratio,
            recommended_fp64=support == PrecisionSupport.FULL_FP64
        )

    if hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        return GPUCapabilities(
            has_gpu=True,
            gpu_name="Apple Metal GPU",
            gpu_type="metal",
            fp64_support=PrecisionSupport.NO_FP64,
            fp64_throughput_ratio=0.0,
            recommended_fp64=False
        )

    return CPU_ONLY


def classify_nvidia_gpu(gpu_name: str) -> tuple[PrecisionSupport, float]:
    """
    Classify NVIDIA GPU FP64 capabilities from its device name.

    Unknown models are assumed to have gimped FP64.
    """
    gpu_upper = gpu_name.upper()
    for fragment, support, ratio in _NVIDIA_FP64:
        if fragment in gpu_upper:
            return support, ratio

    warnings.warn(f"Unknown NVIDIA GPU '{gpu_name}'. Assuming gimped FP64.")
    return PrecisionSupport.GIMPED_FP64, 1/32


def recommend_precision(capabilities: GPUCapabilities,
                        user_preference: Optional[bool]) -> bool:
    """
    Recommend FP64 vs FP32 based on hardware.

    Returns True for FP64, False for FP32.

    Raises
    ------
    RuntimeError
        If FP64 is requested on hardware without FP64 (Metal)
    """
    if user_preference is None:
        return capabilities.recommended_fp64

    if user_preference and capabilities.fp64_support == PrecisionSupport.NO_FP64:
        raise RuntimeError(
            f"FP64 requested but not supported on {capabilities.gpu_name}. "
            f"Use FP32 (use_fp64=False) or the CPU backend."
        )
    return user_preference
