"""
Column normalization.

Each unknown's coefficient column is scaled to unit Euclidean norm before
factorization so that basis functions of very different magnitude (polynomial
powers next to absorption cross-sections) do not spoil the conditioning.
"""

import numpy as np
from typing import Tuple

from ..errors import NormalizationError


def column_norms(A: np.ndarray) -> np.ndarray:
    """
    Euclidean norm of every column of A.

    Raises
    ------
    NormalizationError
        If any column has zero norm.
    """
    norms = np.linalg.norm(A, axis=0)
    zero = np.flatnonzero(norms == 0.0)
    if zero.size:
        raise NormalizationError(
            f"Column(s) {zero.tolist()} have zero norm and cannot be normalized"
        )
    return norms


def normalize_columns(A: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Return a column-normalized copy of A and the norms used.

    A itself is never modified.
    """
    norms = column_norms(A)
    return A / norms[np.newaxis, :], norms
