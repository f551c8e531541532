"""
Backend selection and management.

Provides a unified interface for the SVD and QR decomposition strategies.
"""

from typing import Union

from .base import DecompositionBackend, DecompositionMode, DecompositionResult
from .svd_backend import SVDBackend, LAPACK_DRIVERS
from .qr_backend import QRBackend


BACKENDS = {
    DecompositionMode.SVD: SVDBackend,
    DecompositionMode.QR: QRBackend,
}


def resolve_mode(mode: Union[str, DecompositionMode]) -> DecompositionMode:
    """Turn a mode name or enum member into a DecompositionMode."""
    if isinstance(mode, DecompositionMode):
        return mode
    try:
        return DecompositionMode(str(mode).lower())
    except ValueError:
        raise ValueError(
            f"Unknown decomposition mode: '{mode}'\n"
            f"Valid options: 'svd', 'qr'"
        ) from None


def get_backend(
    mode: Union[str, DecompositionMode] = 'svd',
    m: int = 1,
    n: int = 1,
    **options
) -> DecompositionBackend:
    """
    Get decomposition backend.

    Parameters
    ----------
    mode : str or DecompositionMode
        Backend selection:
        - 'svd': singular value decomposition (rank revealing, pseudo-inverse)
        - 'qr': column-pivoted QR (full column rank only)
    m : int
        Number of equations (spectral samples)
    n : int
        Number of unknowns (basis functions)
    **options
        Backend-specific options, e.g. ``lapack_driver='gesvd'`` for SVD

    Returns
    -------
    DecompositionBackend
        Backend instance owning zero-initialized (m, n) storage

    Examples
    --------
    >>> backend = get_backend('svd', 100, 3)
    >>> backend = get_backend('qr', 100, 3)
    >>> backend = get_backend('svd', 100, 3, lapack_driver='gesvd')
    """
    backend_cls = BACKENDS[resolve_mode(mode)]
    return backend_cls(m, n, **options)


def list_available_backends() -> list:
    """List names of available backends."""
    return [mode.value for mode in BACKENDS]


def print_backend_info():
    """Print detailed backend information (diagnostic)."""
    print("pyspecfit Backend Status")
    print("=" * 50)
    print(f"\nAvailable Backends:")
    for mode, backend_cls in BACKENDS.items():
        info = backend_cls(1, 1).get_info()
        pinv = 'yes' if backend_cls.supports_pseudo_inverse else 'no'
        print(f"  {mode.value.upper():<4} - {info['algorithm']} "
              f"(LAPACK {info['lapack_driver']}, pseudo-inverse: {pinv})")
    print(f"\nSVD LAPACK drivers: {', '.join(LAPACK_DRIVERS)}")
    print(f"Library: {info['library']}")


__all__ = [
    'get_backend',
    'resolve_mode',
    'list_available_backends',
    'print_backend_info',
    'DecompositionBackend',
    'DecompositionMode',
    'DecompositionResult',
    'SVDBackend',
    'QRBackend',
]


if __name__ == "__main__":
    print_backend_info()
