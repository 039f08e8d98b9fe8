"""Scale-aware tolerances and input validation for numerical algorithms."""

from __future__ import annotations

import math
import sys

from .errors import DimensionError, InvalidParameterError
from .matrix import Matrix
from .vector import Vector

_EPSILON = sys.float_info.epsilon


def relative_tol(a: Matrix) -> float:
    """Tolerance ``EPSILON * max(rows, cols) * max(max|a_ij|, 1)``."""
    max_abs = max(a.norm_max(), 1.0)
    return _EPSILON * max(a.rows(), a.cols()) * max_abs


def validate_linear_system(
    a: Matrix, b: Vector, x0: Vector, max_iter: int, tol: float
) -> int:
    """Check the inputs of an iterative solver and return the system size."""
    if not a.is_square():
        raise DimensionError("Coefficient matrix must be square")
    n = a.rows()
    if b.dim() != n:
        raise DimensionError(f"Right-hand side has dimension {b.dim()}, expected {n}")
    if x0.dim() != n:
        raise DimensionError(f"Initial guess has dimension {x0.dim()}, expected {n}")
    if max_iter <= 0:
        raise InvalidParameterError("max_iter must be positive")
    if not math.isfinite(tol) or tol <= 0.0:
        raise InvalidParameterError("tol must be finite and positive")
    return n


def check_nonzero_diagonal(a: Matrix) -> bool:
    """True when no diagonal entry is numerically zero."""
    diag_tol = max(relative_tol(a), _EPSILON)
    return all(abs(value) > diag_tol for value in a.diagonal()[: a.rows()])