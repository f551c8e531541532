"""
Exceptions and warnings raised by the linear system layer.

Every failure is reported as an exception before any result is returned,
so callers never see a half-filled solution or covariance.
"""


class LinearSystemError(Exception):
    """Base class for all linear system failures."""


class AllocationError(LinearSystemError, MemoryError):
    """Storage for the system matrices could not be reserved."""


class ShapeError(LinearSystemError, ValueError):
    """System dimensions are invalid (m < 1, n < 1 or m < n)."""


class NormalizationError(LinearSystemError, ValueError):
    """A coefficient column has zero Euclidean norm."""


class DecompositionError(LinearSystemError, RuntimeError):
    """Factorization failed (non-convergence or rank-deficient normal equations)."""


class UnsupportedOperationError(LinearSystemError, NotImplementedError):
    """Operation not provided by the selected decomposition mode."""


class PreconditionError(LinearSystemError, RuntimeError):
    """Operation called in the wrong lifecycle state."""


class RankDeficiencyWarning(UserWarning):
    """Singular values were truncated below the rank tolerance."""
