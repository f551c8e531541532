"""
SVD backend using NumPy + SciPy.

Rank revealing: singular values below max(m, n) * W_max * eps are treated as
zero in back-substitution, covariance and pseudo-inverse, so rank-deficient
systems give a least-norm answer instead of an error.
"""

import warnings

import numpy as np
import scipy
from scipy.linalg import svd, LinAlgError

from .base import DecompositionBackend, DecompositionMode, DecompositionResult
from .._core.tolerance import rank_tolerance, effective_rank
from ..errors import DecompositionError, RankDeficiencyWarning


LAPACK_DRIVERS = ('gesdd', 'gesvd')


class SVDBackend(DecompositionBackend):
    """
    Singular value decomposition backend.

    Storage keeps one unknown per row, shape (n, m), so that setting or
    normalizing a basis function touches one contiguous block. The logical
    matrix seen by callers is its transpose.
    """

    name = "svd"
    mode = DecompositionMode.SVD
    supports_pseudo_inverse = True

    def __init__(self, m: int, n: int, lapack_driver: str = 'gesdd'):
        if lapack_driver not in LAPACK_DRIVERS:
            raise ValueError(
                f"Unknown LAPACK driver: '{lapack_driver}'\n"
                f"Valid options: {', '.join(repr(d) for d in LAPACK_DRIVERS)}"
            )
        self.lapack_driver = lapack_driver
        super().__init__(m, n)

    def _allocate(self):
        self._columns = np.zeros((self.n, self.m), dtype=np.float64)
        self._U = None
        self._W = None
        self._V = None
        self._tol = None

    @property
    def matrix(self) -> np.ndarray:
        return self._columns.T.copy()

    def load_matrix(self, A: np.ndarray):
        self._columns[:, :] = A.T

    def set_column(self, j: int, values: np.ndarray):
        self._columns[j, :] = values

    def scale_rows(self, sigma: np.ndarray):
        self._columns /= sigma[np.newaxis, :]

    def _svd(self, A: np.ndarray):
        try:
            return svd(A, full_matrices=False, lapack_driver=self.lapack_driver,
                       check_finite=False)
        except LinAlgError as exc:
            if self.lapack_driver != 'gesdd':
                raise DecompositionError(f"SVD did not converge: {exc}") from exc
        # gesdd occasionally fails where the slower QR-iteration driver succeeds
        warnings.warn("SVD (gesdd) did not converge, retrying with gesvd", UserWarning)
        try:
            return svd(A, full_matrices=False, lapack_driver='gesvd',
                       check_finite=False)
        except LinAlgError as exc:
            raise DecompositionError(f"SVD did not converge: {exc}") from exc

    def factor(self, A_norm: np.ndarray) -> DecompositionResult:
        U, W, Vt = self._svd(A_norm)

        tol = rank_tolerance(self.m, self.n, W[0])
        rank = effective_rank(W, tol)
        if rank < self.n:
            warnings.warn(
                f"Rank-deficient system: {self.n - rank} of {self.n} singular "
                f"values below tolerance {tol:.3e} were truncated",
                RankDeficiencyWarning
            )

        self._U = U
        self._W = W
        self._V = Vt.T
        self._tol = tol

        return DecompositionResult(
            mode=self.name,
            rank=rank,
            tol=tol,
            singular_values=W.copy(),
        )

    def _inverse_singular_values(self) -> np.ndarray:
        """1/W for singular values above tolerance, 0 for the rest."""
        winv = np.zeros_like(self._W)
        keep = self._W > self._tol
        winv[keep] = 1.0 / self._W[keep]
        return winv

    def solve(self, b: np.ndarray) -> np.ndarray:
        winv = self._inverse_singular_values()
        utb = self._U.T @ b
        if utb.ndim == 2:
            utb = utb * winv[:, np.newaxis]
        else:
            utb = utb * winv
        return self._V @ utb

    def covariance(self) -> np.ndarray:
        winv = self._inverse_singular_values()
        return (self._V * winv**2) @ self._V.T

    def pseudo_inverse(self) -> np.ndarray:
        # pinv(A) = V * W^-1 * U'
        winv = self._inverse_singular_values()
        return (self._V * winv) @ self._U.T

    def get_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': self.name,
            'algorithm': 'Singular value decomposition',
            'lapack_driver': self.lapack_driver,
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
