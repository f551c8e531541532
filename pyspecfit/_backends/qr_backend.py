"""
QR backend using NumPy + SciPy.

Column-pivoted Householder QR. Valid for full column rank only; the
covariance comes from the triangular factor, since (AP)'(AP) = R'R.
"""

import numpy as np
import scipy
from scipy.linalg import qr, solve_triangular, LinAlgError

from .base import DecompositionBackend, DecompositionMode, DecompositionResult
from .._core.tolerance import EPS
from ..errors import DecompositionError


class QRBackend(DecompositionBackend):
    """
    Orthogonal-triangular decomposition backend.

    Storage is the plain (m, n) matrix, rows = samples.
    """

    name = "qr"
    mode = DecompositionMode.QR

    def _allocate(self):
        self._A = np.zeros((self.m, self.n), dtype=np.float64)
        self._Q = None
        self._R = None
        self._pivot = None

    @property
    def matrix(self) -> np.ndarray:
        return self._A.copy()

    def load_matrix(self, A: np.ndarray):
        self._A[:, :] = A

    def set_column(self, j: int, values: np.ndarray):
        self._A[:, j] = values

    def scale_rows(self, sigma: np.ndarray):
        self._A /= sigma[:, np.newaxis]

    def factor(self, A_norm: np.ndarray) -> DecompositionResult:
        m, n = self.m, self.n

        # A P = Q R
        try:
            Q, R, P = qr(A_norm, mode='economic', pivoting=True, check_finite=False)
        except LinAlgError as exc:
            raise DecompositionError(f"QR decomposition failed: {exc}") from exc

        # Determine rank
        R_diag = np.abs(np.diag(R))
        tol = max(m, n) * EPS * R_diag[0]
        rank = int(np.sum(R_diag > tol))
        if rank < n:
            raise DecompositionError(
                f"Rank-deficient system: rank {rank} < {n} columns "
                f"(QR requires full column rank; use mode='svd')"
            )

        self._Q = Q
        self._R = R
        self._pivot = P

        return DecompositionResult(
            mode=self.name,
            rank=rank,
            tol=tol,
            r_diagonal=R_diag,
        )

    def solve(self, b: np.ndarray) -> np.ndarray:
        # Solve R z = Q'b, then undo the column permutation
        qtb = self._Q.T @ b
        z = solve_triangular(self._R, qtb, lower=False, check_finite=False)
        x = np.empty_like(z)
        x[self._pivot] = z
        return x

    def covariance(self) -> np.ndarray:
        # (A'A)^-1 = P (R'R)^-1 P'
        R_inv = solve_triangular(self._R, np.eye(self.n), lower=False, check_finite=False)
        C = np.empty((self.n, self.n), dtype=np.float64)
        C[np.ix_(self._pivot, self._pivot)] = R_inv @ R_inv.T
        return C

    def get_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': self.name,
            'algorithm': 'Column-pivoted Householder QR',
            'lapack_driver': 'geqp3',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
