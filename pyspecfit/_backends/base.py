"""
Abstract base classes for decomposition backends.

Defines the interface both decomposition strategies must implement. A backend
owns the storage of the coefficient matrix and, after factoring, the
factorization state. It works entirely in the column-normalized space; the
owning LinearSystem applies and undoes the normalization.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from ..errors import UnsupportedOperationError


class DecompositionMode(Enum):
    """Numerical strategy used to factor a linear system."""
    SVD = "svd"   # singular value decomposition, rank revealing
    QR = "qr"     # column-pivoted Householder QR, full rank only


@dataclass
class DecompositionResult:
    """Summary of a successful decomposition."""
    mode: str
    rank: int                                   # effective rank after truncation
    tol: float                                  # tolerance used for rank
    norms: Optional[np.ndarray] = None          # column normalization factors
    singular_values: Optional[np.ndarray] = None  # SVD only, descending
    r_diagonal: Optional[np.ndarray] = None     # QR only, |diag(R)|
    variance: Optional[np.ndarray] = None       # rescaled diag of covariance
    covariance: Optional[np.ndarray] = None     # rescaled (A'A)^-1


class DecompositionBackend(ABC):
    """Abstract base class for all decomposition backends."""

    name = "base"
    mode = None
    supports_pseudo_inverse = False

    def __init__(self, m: int, n: int):
        self.m = m
        self.n = n
        self._allocate()

    @abstractmethod
    def _allocate(self):
        """Reserve zero-initialized storage for an m x n system."""
        pass

    @property
    @abstractmethod
    def matrix(self) -> np.ndarray:
        """Copy of the stored coefficient matrix, shape (m, n)."""
        pass

    @abstractmethod
    def load_matrix(self, A: np.ndarray):
        """Overwrite storage with a dense (m, n) matrix."""
        pass

    @abstractmethod
    def set_column(self, j: int, values: np.ndarray):
        """Overwrite the coefficient column of unknown j."""
        pass

    @abstractmethod
    def scale_rows(self, sigma: np.ndarray):
        """Divide row i of the stored matrix by sigma[i]."""
        pass

    @abstractmethod
    def factor(self, A_norm: np.ndarray) -> DecompositionResult:
        """
        Factor a column-normalized matrix.

        Implementations must leave their previous state untouched when they
        raise, and commit the new factorization only on success.

        Parameters
        ----------
        A_norm : ndarray, shape (m, n)
            Column-normalized (and weighted) coefficient matrix

        Returns
        -------
        DecompositionResult
            Rank information; norms, variance and covariance are filled in
            by the caller.
        """
        pass

    @abstractmethod
    def solve(self, b: np.ndarray) -> np.ndarray:
        """Least-squares solution in normalized space, shape (n,) or (n, k)."""
        pass

    @abstractmethod
    def covariance(self) -> np.ndarray:
        """(A_norm' A_norm)^-1 in normalized space, shape (n, n)."""
        pass

    def variance(self) -> np.ndarray:
        """Diagonal of the normalized covariance."""
        return np.diag(self.covariance()).copy()

    def pseudo_inverse(self) -> np.ndarray:
        """Pseudo-inverse of A_norm, shape (n, m)."""
        raise UnsupportedOperationError(
            f"Pseudo-inverse is not available for the '{self.name}' backend; "
            f"use mode='svd'"
        )

    @abstractmethod
    def get_info(self) -> dict:
        """Get backend information."""
        pass
