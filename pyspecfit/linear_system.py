"""
Weighted linear least-squares systems.

A LinearSystem holds the coefficient matrix of an over-determined system
A x ~ b (one row per spectral sample, one column per basis function), the
per-column normalization factors and one decomposition backend. Usage follows
a fixed lifecycle:

    allocate -> set_column / set_weight -> decompose -> solve (repeatable) -> release

The system is decomposition-agnostic: every mode-specific step goes through
the backend interface.
"""

import operator

import numpy as np
from dataclasses import replace
from typing import Optional, Union

from ._backends import get_backend, resolve_mode, DecompositionMode, DecompositionResult
from ._core.normalization import normalize_columns
from ._utils import check_array, check_vector, check_rhs
from .errors import AllocationError, PreconditionError, ShapeError


class LinearSystem:
    """
    Linear system of m equations in n unknowns.

    Examples
    --------
    >>> import numpy as np
    >>> from pyspecfit import LinearSystem
    >>>
    >>> with LinearSystem(200, 3, mode='svd') as system:
    ...     system.set_column(0, np.ones(200))
    ...     system.set_column(1, wavelength)
    ...     system.set_column(2, cross_section)
    ...     system.set_weight(sigma)
    ...     result = system.decompose(covariance=True)
    ...     x = system.solve(radiance / sigma)
    """

    def __init__(
        self,
        m: int,
        n: int,
        mode: Union[str, DecompositionMode] = 'svd',
        **options
    ):
        """
        Allocate a zero-initialized system.

        Parameters
        ----------
        m : int
            Number of equations (spectral samples), m >= n
        n : int
            Number of unknowns (fitted basis functions), n >= 1
        mode : str or DecompositionMode
            'svd' or 'qr'
        **options
            Backend-specific options passed to ``get_backend``
        """
        try:
            m, n = operator.index(m), operator.index(n)
        except TypeError:
            raise ShapeError(f"System size must be integral, got {m!r} x {n!r}") from None
        if m < 1 or n < 1:
            raise ShapeError(f"Invalid system size {m} x {n}: both dimensions must be >= 1")
        if m < n:
            raise ShapeError(
                f"Under-determined system: {m} equations < {n} unknowns"
            )

        self.mode = resolve_mode(mode)
        # Larger requests cannot even be described to NumPy ("array is too big")
        if m * n > np.iinfo(np.intp).max // np.dtype(np.float64).itemsize:
            raise AllocationError(
                f"Cannot allocate storage for a {m} x {n} system"
            )
        try:
            self._backend = get_backend(self.mode, m, n, **options)
        except MemoryError as exc:
            raise AllocationError(
                f"Cannot allocate storage for a {m} x {n} system"
            ) from exc

        self._m = m
        self._n = n
        self._norms = None
        self._result = None
        self._released = False

    @classmethod
    def from_matrix(
        cls,
        A,
        mode: Union[str, DecompositionMode] = 'svd',
        **options
    ) -> "LinearSystem":
        """
        Allocate a system and copy a dense (m, n) matrix into it.

        Row i is sample i, column j is unknown j.
        """
        A = check_array(A, name='A')
        system = cls(A.shape[0], A.shape[1], mode, **options)
        system._backend.load_matrix(A)
        return system

    # ------------------------------------------------------------------
    # State

    @property
    def m(self) -> int:
        return self._m

    @property
    def n(self) -> int:
        return self._n

    @property
    def shape(self) -> tuple:
        return (self._m, self._n)

    @property
    def decomposed(self) -> bool:
        return self._result is not None

    @property
    def released(self) -> bool:
        return self._released

    @property
    def norms(self) -> np.ndarray:
        """Column normalization factors (copy)."""
        self._require_decomposed()
        return self._norms.copy()

    @property
    def matrix(self) -> np.ndarray:
        """Copy of the (weighted, unnormalized) coefficient matrix."""
        self._require_live()
        return self._backend.matrix

    @property
    def result(self) -> DecompositionResult:
        """Result of the last successful decomposition."""
        self._require_decomposed()
        return self._result

    def _require_live(self):
        if self._released:
            raise PreconditionError("Linear system has been released")

    def _require_populating(self, operation):
        self._require_live()
        if self._result is not None:
            raise PreconditionError(
                f"Cannot {operation}: linear system is already decomposed"
            )

    def _require_decomposed(self):
        self._require_live()
        if self._result is None:
            raise PreconditionError("Linear system must be decomposed first")

    def _check_column_index(self, j):
        if not 0 <= j < self._n:
            raise IndexError(f"Column index {j} out of range for {self._n} unknowns")

    # ------------------------------------------------------------------
    # Population

    def set_column(self, j: int, values) -> None:
        """Overwrite the coefficient column of unknown j (0-based)."""
        self._require_populating("set a column")
        self._check_column_index(j)
        values = check_vector(values, name='values', size=self._m)
        self._backend.set_column(j, values)

    def set_weight(self, sigma=None) -> None:
        """
        Divide row i of the matrix by sigma[i] (weighted least squares).

        ``None`` leaves the system unweighted. The right-hand side is not
        touched: pass ``b / sigma`` to ``solve``.
        """
        self._require_populating("set weights")
        if sigma is None:
            return
        sigma = check_vector(sigma, name='sigma', size=self._m)
        if np.any(sigma == 0):
            raise ValueError("sigma contains zero entries")
        self._backend.scale_rows(sigma)

    # ------------------------------------------------------------------
    # Decomposition and solution

    def decompose(
        self,
        variance: bool = False,
        covariance: bool = False
    ) -> DecompositionResult:
        """
        Normalize the columns and factor the system.

        Parameters
        ----------
        variance : bool
            Also return the per-coefficient variance diag((A'A)^-1)
        covariance : bool
            Also return the full covariance (A'A)^-1

        Returns
        -------
        DecompositionResult
            Rank, tolerance, norms and the requested (rescaled) variance and
            covariance

        Raises
        ------
        NormalizationError
            A column has zero norm
        DecompositionError
            Factorization failed; the system stays undecomposed
        """
        self._require_populating("decompose")

        A_norm, norms = normalize_columns(self._backend.matrix)
        result = self._backend.factor(A_norm)

        cov = None
        var = None
        if covariance:
            cov = self._backend.covariance() / np.outer(norms, norms)
        if variance:
            var = self._backend.variance() / norms**2

        self._norms = norms
        self._result = replace(result, norms=norms.copy(), variance=var, covariance=cov)
        return self._result

    def solve(self, b) -> np.ndarray:
        """
        Least-squares solution for a right-hand side.

        Parameters
        ----------
        b : array, shape (m,) or (m, k)
            Right-hand side(s), already weighted if ``set_weight`` was used

        Returns
        -------
        ndarray, shape (n,) or (n, k)
            Coefficients on the original (unnormalized) scale
        """
        self._require_decomposed()
        b = check_rhs(b, self._m)
        x = self._backend.solve(b)
        if x.ndim == 2:
            return x / self._norms[:, np.newaxis]
        return x / self._norms

    def covariance(self) -> np.ndarray:
        """Coefficient covariance (A'A)^-1 on the original scale, shape (n, n)."""
        self._require_decomposed()
        if self._result.covariance is not None:
            return self._result.covariance.copy()
        return self._backend.covariance() / np.outer(self._norms, self._norms)

    def variance(self) -> np.ndarray:
        """Per-coefficient variance on the original scale, shape (n,)."""
        self._require_decomposed()
        if self._result.variance is not None:
            return self._result.variance.copy()
        return self._backend.variance() / self._norms**2

    def pseudo_inverse(self) -> np.ndarray:
        """
        Moore-Penrose pseudo-inverse, shape (n, m). SVD mode only.

        Directions with singular values below the rank tolerance contribute
        nothing. Rows are rescaled by the column norms, so
        ``pseudo_inverse() @ b`` equals ``solve(b)``.
        """
        self._require_live()
        if not self._backend.supports_pseudo_inverse:
            # raises UnsupportedOperationError
            self._backend.pseudo_inverse()
        self._require_decomposed()
        return self._backend.pseudo_inverse() / self._norms[:, np.newaxis]

    def get_norm(self, j: int) -> float:
        """Normalization factor of column j."""
        self._require_decomposed()
        self._check_column_index(j)
        return float(self._norms[j])

    # ------------------------------------------------------------------
    # Resources

    def release(self) -> None:
        """Drop backend storage. Safe to call more than once."""
        self._backend = None
        self._norms = None
        self._result = None
        self._released = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def info(self) -> dict:
        """Backend information plus system dimensions."""
        self._require_live()
        info = self._backend.get_info()
        info.update({'m': self._m, 'n': self._n, 'decomposed': self.decomposed})
        return info

    def __repr__(self):
        state = 'released' if self._released else (
            'decomposed' if self.decomposed else 'populating')
        return f"LinearSystem(m={self._m}, n={self._n}, mode='{self.mode.value}', {state})"


def allocate(m: int, n: int, mode: Union[str, DecompositionMode] = 'svd', **options) -> LinearSystem:
    """Allocate a zero-initialized m x n system (convenience function)."""
    return LinearSystem(m, n, mode, **options)


def from_matrix(A, mode: Union[str, DecompositionMode] = 'svd', **options) -> LinearSystem:
    """Allocate a system from a dense (m, n) matrix (convenience function)."""
    return LinearSystem.from_matrix(A, mode, **options)


def release(system: Optional[LinearSystem]) -> None:
    """Release a system; ``None`` is ignored."""
    if system is None:
        return
    system.release()
