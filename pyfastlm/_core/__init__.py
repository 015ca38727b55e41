"""
Core algorithms (backend-agnostic).
"""

from .lm_solver import solve_least_squares
from .var_sim import simulate_var

__all__ = [
    "solve_least_squares",
    "simulate_var",
]
