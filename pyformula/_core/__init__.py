"""
Core algorithms (backend-agnostic).
"""

from .ols_solver import fit_least_squares, solve_least_squares

__all__ = [
    "fit_least_squares",
    "solve_least_squares",
]
