"""
Utility functions.
"""

import numpy as np


def check_array(X, name='A', dtype=np.float64):
    """Validate array input."""
    X = np.asarray(X, dtype=dtype)
    if X.ndim != 2:
        raise ValueError(f"{name} must be 2-dimensional")
    if not np.all(np.isfinite(X)):
        raise ValueError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='b', dtype=np.float64, size=None):
    """Validate vector input, optionally against an expected length."""
    y = np.asarray(y, dtype=dtype)
    if y.ndim != 1:
        raise ValueError(f"{name} must be 1-dimensional")
    if size is not None and y.shape[0] != size:
        raise ValueError(f"{name} has length {y.shape[0]}, expected {size}")
    if not np.all(np.isfinite(y)):
        raise ValueError(f"{name} contains NaN or Inf")
    return y


def check_rhs(b, size, name='b', dtype=np.float64):
    """Validate a right-hand side: a length-m vector or an (m, k) block."""
    b = np.asarray(b, dtype=dtype)
    if b.ndim not in (1, 2):
        raise ValueError(f"{name} must be 1- or 2-dimensional")
    if b.shape[0] != size:
        raise ValueError(f"{name} has {b.shape[0]} rows, expected {size}")
    if not np.all(np.isfinite(b)):
        raise ValueError(f"{name} contains NaN or Inf")
    return b
