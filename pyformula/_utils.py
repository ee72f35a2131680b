"""
Utility functions.
"""

import numpy as np


def check_array(X, name='X', dtype=np.float64):
    """Validate array input."""
    X = np.asarray(X, dtype=dtype)
    if X.ndim != 2:
        raise ValueError(f"{name} must be 2-dimensional, got {X.ndim} dimension(s)")
    if not np.all(np.isfinite(X)):
        raise ValueError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='y', dtype=np.float64):
    """Validate vector input."""
    y = np.asarray(y, dtype=dtype)
    if y.ndim != 1:
        raise ValueError(f"{name} must be 1-dimensional, got {y.ndim} dimension(s)")
    if not np.all(np.isfinite(y)):
        raise ValueError(f"{name} contains NaN or Inf")
    return y


def check_probability(q, name='q'):
    """Validate a probability strictly inside (0, 1)."""
    q = float(q)
    if not 0.0 < q < 1.0:
        raise ValueError(f"{name} must lie strictly between 0 and 1, got {q}")
    return q
