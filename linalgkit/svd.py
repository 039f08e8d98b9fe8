"""Singular value decomposition by Golub-Kahan bidiagonalisation and shifted QR sweeps."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import DimensionError, InvalidParameterError
from .matrix import Matrix
from .numeric import relative_tol
from .vector import Vector

_EPSILON = sys.float_info.epsilon

DEFAULT_SVD_MAX_ITER = 500
DEFAULT_SVD_TOL = 1e-10

_Rows = list[list[float]]


@dataclass
class SVD:
    """Singular value decomposition ``A = U Σ Vᵀ``."""

    u: Matrix
    singular_values: Vector
    v_t: Matrix
    iterations: int
    converged: bool
    final_delta: float

    @classmethod
    def compute(
        cls,
        a: Matrix,
        max_iter: int = DEFAULT_SVD_MAX_ITER,
        tol: float = DEFAULT_SVD_TOL,
    ) -> SVD:
        """Decompose ``a``; see :func:`svd_golub_kahan`."""
        return svd_golub_kahan(a, max_iter, tol)

    def sigma(self, rows: int, cols: int) -> Matrix:
        """``rows x cols`` matrix with the singular values on its diagonal."""
        out = Matrix.zeros(rows, cols)
        for i, value in zip(range(min(rows, cols)), self.singular_values):
            out[i, i] = value
        return out

    def reconstruct(self, rows: int, cols: int) -> Matrix:
        """The product ``U Σ Vᵀ`` for a ``rows x cols`` original."""
        return self.u @ self.sigma(rows, cols) @ self.v_t

    def rank(self, tol: float) -> int:
        """Number of singular values whose magnitude exceeds ``tol``."""
        return sum(1 for value in self.singular_values if abs(value) > tol)

    def condition_number(self, tol: float) -> Optional[float]:
        """Ratio of the largest to the smallest singular value above ``tol``.

        Returns ``None`` when no singular value exceeds ``tol``.
        """
        significant = [abs(value) for value in self.singular_values if abs(value) > tol]
        if not significant:
            return None
        return max(significant) / min(significant)


def _validate_svd_input(a: Matrix, max_iter: int, tol: float) -> tuple[int, int]:
    m, n = a.shape()
    if m == 0 or n == 0:
        raise DimensionError("SVD requires a non-empty matrix")
    if max_iter <= 0:
        raise InvalidParameterError("max_iter must be positive")
    if not math.isfinite(tol) or tol <= 0.0:
        raise InvalidParameterError("tol must be finite and positive")
    if any(not math.isfinite(value) for row in a.tolist() for value in row):
        raise InvalidParameterError("Matrix entries must be finite")
    return m, n


def _identity(n: int) -> _Rows:
    return [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]


def _householder_vector(x: list[float], tol: float) -> Optional[list[float]]:
    norm = math.sqrt(sum(value * value for value in x))
    if norm <= tol:
        return None
    v = list(x)
    alpha = -norm if x[0] >= 0.0 else norm
    v[0] -= alpha
    v_norm = math.sqrt(sum(value * value for value in v))
    if v_norm <= tol:
        return None
    inv = 1.0 / v_norm
    return [value * inv for value in v]


def _apply_householder_left(b: _Rows, row_start: int, col_start: int, v: list[float]) -> None:
    cols = len(b[0]) if b else 0
    for j in range(col_start, cols):
        scale = 2.0 * sum(vi * b[row_start + o][j] for o, vi in enumerate(v))
        for o, vi in enumerate(v):
            b[row_start + o][j] -= scale * vi


def _apply_householder_right(rows: _Rows, col_start: int, v: list[float]) -> None:
    for row in rows:
        scale = 2.0 * sum(row[col_start + o] * vj for o, vj in enumerate(v))
        for o, vj in enumerate(v):
            row[col_start + o] -= scale * vj


def _bidiagonalize_tall(a: Matrix, tol: float) -> tuple[_Rows, _Rows, _Rows]:
    """Reduce ``a`` (m >= n) to upper bidiagonal ``B`` with ``A = U B Vᵀ``."""
    m, n = a.shape()
    b = a.tolist()
    u = _identity(m)
    v = _identity(n)

    for k in range(n):
        hv = _householder_vector([b[i][k] for i in range(k, m)], tol)
        if hv is not None:
            _apply_householder_left(b, k, k, hv)
            _apply_householder_right(u, k, hv)
            for i in range(k + 1, m):
                b[i][k] = 0.0

        if k + 1 < n:
            hv = _householder_vector(b[k][k + 1:n], tol)
            if hv is not None:
                _apply_householder_right(b[k:], k + 1, hv)
                _apply_householder_right(v, k + 1, hv)
                for j in range(k + 2, n):
                    b[k][j] = 0.0

    return u, b, v


def _givens(a: float, b: float) -> tuple[float, float]:
    r = math.sqrt(a * a + b * b)
    if r <= _EPSILON:
        return 1.0, 0.0
    return a / r, b / r


def _rotate_columns(rows: _Rows, k: int, c: float, s: float) -> None:
    for row in rows:
        left, right = row[k], row[k + 1]
        row[k] = c * left - s * right
        row[k + 1] = s * left + c * right


def _rotate_rows(rows: _Rows, k: int, c: float, s: float) -> None:
    top_row, bottom_row = rows[k], rows[k + 1]
    for j, (top, bottom) in enumerate(zip(top_row, bottom_row)):
        top_row[j] = c * top + s * bottom
        bottom_row[j] = -s * top + c * bottom


def _wilkinson_shift_from_btb(b: _Rows, m: int) -> float:
    d0 = b[m - 1][m - 1]
    f = b[m - 1][m]
    d1 = b[m][m]

    a = d0 * d0 + f * f
    c = d1 * d1
    off = d0 * f

    trace_half = 0.5 * (a + c)
    half_diff = 0.5 * (a - c)
    disc = math.sqrt(half_diff * half_diff + off * off)
    mu1 = trace_half + disc
    mu2 = trace_half - disc
    return mu1 if abs(mu1 - c) < abs(mu2 - c) else mu2


def _max_superdiag_abs(b: _Rows) -> float:
    return max((abs(b[i][i + 1]) for i in range(len(b) - 1)), default=0.0)


def _cleanup_bidiagonal_band(b: _Rows, tol: float) -> None:
    n = len(b)
    for i in range(n):
        for j in range(n):
            if (i > j + 1 or j > i + 1) and abs(b[i][j]) <= tol:
                b[i][j] = 0.0
    for i in range(1, n):
        if abs(b[i][i - 1]) <= tol:
            b[i][i - 1] = 0.0


def _negligible_superdiag(b: _Rows, i: int, tol: float) -> bool:
    threshold = tol * (abs(b[i][i]) + abs(b[i + 1][i + 1]) + 1.0)
    return abs(b[i][i + 1]) <= threshold


def _golub_kahan_qr(
    b: _Rows, u: _Rows, v: _Rows, max_iter: int, tol: float
) -> tuple[int, bool, float]:
    """Implicit shifted QR on the bidiagonal core; returns (iterations, converged, delta)."""
    n = len(b)
    if n <= 1:
        return 0, True, 0.0

    iterations = 0
    active_end = n - 1

    while active_end > 0:
        while active_end > 0 and _negligible_superdiag(b, active_end - 1, tol):
            b[active_end - 1][active_end] = 0.0
            active_end -= 1

        if active_end == 0:
            break

        if iterations >= max_iter:
            return iterations, False, _max_superdiag_abs(b)

        active_start = 0
        for i in reversed(range(active_end)):
            if _negligible_superdiag(b, i, tol):
                b[i][i + 1] = 0.0
                active_start = i + 1
                break

        shift = _wilkinson_shift_from_btb(b, active_end)
        head = b[active_start][active_start]
        x = head * head - shift
        z = head * b[active_start][active_start + 1]

        for k in range(active_start, active_end):
            c_r, s_r = _givens(x, z)
            _rotate_columns(b, k, c_r, s_r)
            _rotate_columns(v, k, c_r, s_r)

            c_l, s_l = _givens(b[k][k], b[k + 1][k])
            _rotate_rows(b, k, c_l, s_l)
            # U absorbs the transpose of the left rotation.
            _rotate_columns(u, k, c_l, -s_l)

            if k + 1 < active_end:
                x = b[k][k + 1]
                z = b[k][k + 2]

        _cleanup_bidiagonal_band(b, tol)
        iterations += 1

    return iterations, True, _max_superdiag_abs(b)


def _sort_singular_triplets(
    b: _Rows, u: _Rows, v: _Rows
) -> tuple[Vector, Matrix, Matrix]:
    """Order singular values decreasingly and make them non-negative."""
    n = len(v)
    order = sorted(range(n), key=lambda i: abs(b[i][i]), reverse=True)

    u_sorted = [list(row) for row in u]
    v_sorted = [list(row) for row in v]
    values = []
    for new_col, old_col in enumerate(order):
        values.append(abs(b[old_col][old_col]))
        sign = 1.0 if b[old_col][old_col] >= 0.0 else -1.0
        for src, dst in zip(u, u_sorted):
            dst[new_col] = sign * src[old_col]
        for src, dst in zip(v, v_sorted):
            dst[new_col] = src[old_col]

    return Vector(values), Matrix.from_rows(u_sorted), Matrix.from_rows(v_sorted)


def _fallback_svd(a: Matrix) -> tuple[Matrix, Vector, Matrix]:
    """Reference SVD used when the bidiagonal iteration does not converge."""
    m, n = a.shape()
    p = min(m, n)
    u_thin, s, v_t_thin = np.linalg.svd(np.array(a.tolist(), dtype=float), full_matrices=False)

    u_full = _identity(m)
    for i in range(m):
        for j in range(p):
            u_full[i][j] = float(u_thin[i, j])

    v_t_full = _identity(n)
    for i in range(p):
        for j in range(n):
            v_t_full[i][j] = float(v_t_thin[i, j])

    return Matrix.from_rows(u_full), Vector(float(value) for value in s[:p]), Matrix.from_rows(v_t_full)


def _svd_tall(a: Matrix, max_iter: int, tol: float) -> SVD:
    m, n = a.shape()
    if m < n:
        raise DimensionError("Tall SVD requires rows >= cols")

    algo_tol = max(tol, relative_tol(a), _EPSILON)
    u, b, v = _bidiagonalize_tall(a, algo_tol)

    core = [[0.0] * n for _ in range(n)]
    for i in range(n):
        core[i][i] = b[i][i]
        if i + 1 < n:
            core[i][i + 1] = b[i][i + 1]

    iter_limit = max_iter * max(n, 1) * 8
    iterations, converged, final_delta = _golub_kahan_qr(core, u, v, iter_limit, algo_tol)

    if converged:
        singular_values, u_sorted, v_sorted = _sort_singular_triplets(core, u, v)
        v_t = v_sorted.transpose()
    else:
        u_sorted, singular_values, v_t = _fallback_svd(a)
        converged, final_delta = True, 0.0

    return SVD(u_sorted, singular_values, v_t, iterations, converged, final_delta)


def svd_golub_kahan(
    a: Matrix,
    max_iter: int = DEFAULT_SVD_MAX_ITER,
    tol: float = DEFAULT_SVD_TOL,
) -> SVD:
    """SVD of any dense matrix by bidiagonalisation and Wilkinson-shifted QR sweeps."""
    m, n = _validate_svd_input(a, max_iter, tol)
    if m >= n:
        return _svd_tall(a, max_iter, tol)

    tall = _svd_tall(a.transpose(), max_iter, tol)
    return SVD(
        tall.v_t.transpose(),
        tall.singular_values,
        tall.u.transpose(),
        tall.iterations,
        tall.converged,
        tall.final_delta,
    )


def svd(a: Matrix) -> SVD:
    """SVD of ``a`` with default iteration limit and tolerance."""
    return SVD.compute(a)