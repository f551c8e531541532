"""
pyspecfit: weighted linear least squares for spectral fitting retrieval.

SVD and QR decomposition behind one interface, with column normalization,
per-sample weighting, covariance and pseudo-inverse support.
"""

__version__ = "1.0.0"

# Import main user-facing API
from .linear_system import LinearSystem, allocate, from_matrix, release
from .polyfit import fit_polynomial, polyfit, PolynomialFit
from .errors import (
    LinearSystemError,
    AllocationError,
    ShapeError,
    NormalizationError,
    DecompositionError,
    UnsupportedOperationError,
    PreconditionError,
    RankDeficiencyWarning,
)

# Import backend utilities (for advanced users)
from ._backends import (
    get_backend,
    list_available_backends,
    DecompositionMode,
    DecompositionResult,
)

__all__ = [
    'LinearSystem',
    'allocate',
    'from_matrix',
    'release',
    'fit_polynomial',
    'polyfit',
    'PolynomialFit',
    'LinearSystemError',
    'AllocationError',
    'ShapeError',
    'NormalizationError',
    'DecompositionError',
    'UnsupportedOperationError',
    'PreconditionError',
    'RankDeficiencyWarning',
    'get_backend',
    'list_available_backends',
    'DecompositionMode',
    'DecompositionResult',
]
