"""
Ordinary least-squares solver.

Validates inputs, then delegates to a backend for the actual computation.
"""

import numpy as np

from .._utils import check_array, check_vector
from ..exceptions import ShapeMismatch


def fit_least_squares(response, design, backend=None, _stacklevel=1):
    """
    Fit min ||response - design @ coef||^2 via backend.
    
    Parameters
    ----------
    response : array-like, shape (n,)
        Response vector
    design : DesignMatrix or array-like, shape (n, k)
        Design matrix, used as given (include an Intercept term
        to get a constant column)
    backend : Backend, optional
        Computational backend (default: CPU)
    _stacklevel : int
        Frame that numerical warnings are attributed to, counted from
        this function's caller (1 = the caller itself)

    Returns
    -------
    result : LeastSquaresResult (from backend)
        Coefficients, residuals, fitted values and QR components
    
    Raises
    ------
    ShapeMismatch
        If ``len(response)`` differs from the design's row count
    SingularSystem
        If the design has no columns or is rank-deficient
    """
    if backend is None:
        from .._backends import get_backend
        backend = get_backend('cpu')
    
    X = check_array(getattr(design, 'values', design), name='design')
    y = check_vector(response, name='response')
    
    if X.shape[0] != len(y):
        raise ShapeMismatch(len(y), X.shape[0])
    
    # +1 for this frame, +1 for the backend method itself
    return backend.fit_least_squares(X, y, stacklevel=_stacklevel + 2)


def solve_least_squares(response, design, backend=None) -> np.ndarray:
    """
    Least-squares coefficient vector.
    
    Parameters
    ----------
    response : array-like, shape (n,)
        Response vector
    design : DesignMatrix or array-like, shape (n, k)
        Full column rank design matrix
    backend : Backend, optional
        Computational backend (default: CPU)
    
    Returns
    -------
    coef : ndarray, shape (k,)
        Coefficients in design column order
    
    Examples
    --------
    >>> y, design = build_design_matrix(y, [Intercept(), Column(1)], X)
    >>> solve_least_squares(y, design)
    array([ 0.98...,  2.01...])
    """
    return fit_least_squares(response, design, backend=backend, _stacklevel=2).coef
