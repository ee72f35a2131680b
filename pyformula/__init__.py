"""
PyFormula: formula-driven design matrices, least squares and Newton quantiles.

Copyright (C) 2024 SGCX
Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Import main user-facing API
from .formula import Intercept, Column, Formula, parse_formula
from .design import DesignMatrix, build_design_matrix, design_from_formula
from ._core import fit_least_squares, solve_least_squares
from .lm import lm, LinearModel
from .quantile import newton_quantile
from .distributions import Distribution, Normal, Gamma, Beta, Exponential
from .exceptions import (
    PyFormulaError,
    FormulaError,
    ShapeMismatch,
    OutOfRange,
    SingularSystem,
    NoConvergence,
    DerivativeVanished,
)

# Import backend utilities (for advanced users)
from ._backends import get_backend, list_available_backends

__all__ = [
    # Formula and design
    'Intercept',
    'Column',
    'Formula',
    'parse_formula',
    'DesignMatrix',
    'build_design_matrix',
    'design_from_formula',
    # Least squares
    'fit_least_squares',
    'solve_least_squares',
    'lm',
    'LinearModel',
    # Quantiles
    'newton_quantile',
    'Distribution',
    'Normal',
    'Gamma',
    'Beta',
    'Exponential',
    # Errors
    'PyFormulaError',
    'FormulaError',
    'ShapeMismatch',
    'OutOfRange',
    'SingularSystem',
    'NoConvergence',
    'DerivativeVanished',
    # Backends
    'get_backend',
    'list_available_backends',
]
