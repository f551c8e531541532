"""
Rank tolerance for singular values.
"""

import numpy as np


EPS = np.finfo(np.float64).eps


def rank_tolerance(m: int, n: int, w_max: float) -> float:
    """Singular values at or below max(m, n) * w_max * eps count as zero."""
    return max(m, n) * w_max * EPS


def effective_rank(w: np.ndarray, tol: float) -> int:
    """Number of singular values strictly above tol."""
    return int(np.sum(w > tol))
