"""
Exception hierarchy.

Every failure raised by PyFormula derives from PyFormulaError, and also from
the builtin exception a caller would naturally expect (ValueError for bad
formulas and shapes, IndexError for bad column references, etc.).
"""

import numpy as np


class PyFormulaError(Exception):
    """Base class for all PyFormula errors."""
    pass


class FormulaError(PyFormulaError, ValueError):
    """Formula text could not be parsed into terms."""
    pass


class ShapeMismatch(PyFormulaError, ValueError):
    """Response length and design/source row count disagree."""
    
    def __init__(self, n_response: int, n_rows: int):
        self.n_response = n_response
        self.n_rows = n_rows
        super().__init__(
            f"Response has {n_response} observations but source has {n_rows} rows"
        )

    def __reduce__(self):
        return type(self), (self.n_response, self.n_rows)


class OutOfRange(PyFormulaError, IndexError):
    """A term references a column the source does not have."""
    
    def __init__(self, index, n_columns: int):
        self.index = index
        self.n_columns = n_columns
        super().__init__(
            f"Column {index} is out of range for a source with {n_columns} "
            f"columns (valid: 1..{n_columns})"
        )

    def __reduce__(self):
        return type(self), (self.index, self.n_columns)


class SingularSystem(PyFormulaError, np.linalg.LinAlgError):
    """Design matrix is empty or not of full column rank."""
    
    def __init__(self, rank: int, n_columns: int):
        self.rank = rank
        self.n_columns = n_columns
        if n_columns == 0:
            msg = "Design matrix has no columns"
        else:
            msg = f"Singular fit: rank {rank} < {n_columns} columns"
        super().__init__(msg)

    def __reduce__(self):
        return type(self), (self.rank, self.n_columns)


class NoConvergence(PyFormulaError, ArithmeticError):
    """Root finding stopped without meeting the tolerance."""
    
    def __init__(self, message: str, theta: float = np.nan, iterations: int = 0):
        self.theta = theta
        self.iterations = iterations
        super().__init__(message)

    def __reduce__(self):
        return type(self), (str(self), self.theta, self.iterations)


class DerivativeVanished(NoConvergence):
    """Density is zero (or numerically zero) at the current iterate."""
    pass


__all__ = [
    "PyFormulaError",
    "FormulaError",
    "ShapeMismatch",
    "OutOfRange",
    "SingularSystem",
    "NoConvergence",
    "DerivativeVanished",
]
