"""
Core numerical helpers (backend-agnostic).
"""

from .normalization import column_norms, normalize_columns
from .tolerance import rank_tolerance, effective_rank

__all__ = [
    "column_norms",
    "normalize_columns",
    "rank_tolerance",
    "effective_rank",
]
