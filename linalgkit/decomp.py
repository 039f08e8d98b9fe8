"""Direct matrix factorisations: LU with partial pivoting, LDLᵀ and Householder QR."""

from __future__ import annotations

import math
import sys
from abc import ABC, abstractmethod

from .errors import DimensionError, NotSymmetricError, SingularMatrixError
from .matrix import Matrix
from .numeric import relative_tol
from .vector import Vector

_EPSILON = sys.float_info.epsilon


class DecompositionSolve(ABC):
    """A factorisation that can solve ``A x = b``."""

    @abstractmethod
    def solve(self, b: Vector) -> Vector:
        """Solve ``A x = b`` using the stored factors."""


def _identity_rows(n: int) -> list[list[float]]:
    return [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]


def _flatten(rows: int, cols: int, values: list[list[float]]) -> Matrix:
    return Matrix(rows, cols, (value for row in values for value in row))


class LU(DecompositionSolve):
    """LU factorisation with partial pivoting, ``P A = L U``."""

    def __init__(self, a: Matrix) -> None:
        if not a.is_square():
            raise DimensionError("LU decomposition requires a square matrix")

        n = a.rows()
        tol = relative_tol(a)
        work = a.tolist()
        perm = list(range(n))

        for k in range(n):
            pivot_row = max(range(k, n), key=lambda i: abs(work[i][k]))
            if abs(work[pivot_row][k]) <= tol:
                raise SingularMatrixError(f"Matrix is singular at column {k}")

            if pivot_row != k:
                work[k], work[pivot_row] = work[pivot_row], work[k]
                perm[k], perm[pivot_row] = perm[pivot_row], perm[k]

            pivot = work[k]
            inv_pivot = 1.0 / pivot[k]
            for row in work[k + 1:]:
                multiplier = row[k] * inv_pivot
                row[k] = multiplier
                for j in range(k + 1, n):
                    row[j] -= multiplier * pivot[j]

        lower = _identity_rows(n)
        upper = [[0.0] * n for _ in range(n)]
        for i, row in enumerate(work):
            lower[i][:i] = row[:i]
            upper[i][i:] = row[i:]

        self._l = _flatten(n, n, lower)
        self._u = _flatten(n, n, upper)
        self._p = tuple(perm)

    def l(self) -> Matrix:  # noqa: E743
        """Unit lower-triangular factor."""
        return self._l

    def u(self) -> Matrix:
        """Upper-triangular factor."""
        return self._u

    def permutation(self) -> tuple[int, ...]:
        """Row permutation: row ``i`` of ``P A`` is row ``p[i]`` of ``A``."""
        return self._p

    def reconstruct_pa(self) -> Matrix:
        """The product ``L U``, equal to ``P A``."""
        return self._l @ self._u

    def solve(self, b: Vector) -> Vector:
        n = len(self._p)
        if b.dim() != n:
            raise DimensionError(f"Right-hand side has dimension {b.dim()}, expected {n}")
        pb = Vector(b[index] for index in self._p)
        y = self._l.solve_lower_triangular(pb)
        return self._u.solve_upper_triangular(y)


def lu(a: Matrix) -> LU:
    """LU factorisation of ``a`` with partial pivoting."""
    return LU(a)


def _is_symmetric(rows: list[list[float]], tol: float) -> bool:
    n = len(rows)
    return all(
        abs(rows[i][j] - rows[j][i]) <= tol for i in range(n) for j in range(i + 1, n)
    )


class LDLT(DecompositionSolve):
    """LDLᵀ factorisation ``A = L D Lᵀ`` of a symmetric matrix."""

    def __init__(self, a: Matrix, check_symmetry: bool = True) -> None:
        if not a.is_square():
            raise DimensionError("LDLT decomposition requires a square matrix")

        n = a.rows()
        tol = relative_tol(a)
        rows = a.tolist()

        if check_symmetry and not _is_symmetric(rows, tol):
            raise NotSymmetricError("LDLT decomposition requires a symmetric matrix")

        lower = _identity_rows(n)
        diag_values = [0.0] * n
        # L[j, k] * D[k] products, shared by every row below j.
        dl_cache = [0.0] * n

        for j in range(n):
            row_j = lower[j]
            diag = rows[j][j]
            for k in range(j):
                dl_cache[k] = row_j[k] * diag_values[k]
                diag -= row_j[k] * dl_cache[k]

            if abs(diag) <= tol:
                raise SingularMatrixError(f"Zero pivot at position {j}")
            diag_values[j] = diag

            inv_diag = 1.0 / diag
            for i in range(j + 1, n):
                row_i = lower[i]
                value = rows[i][j]
                for k in range(j):
                    value -= row_i[k] * dl_cache[k]
                row_i[j] = value * inv_diag

        self._l = _flatten(n, n, lower)
        self._d = Vector(diag_values)

    def l(self) -> Matrix:  # noqa: E743
        """Unit lower-triangular factor."""
        return self._l

    def d(self) -> Vector:
        """Diagonal of ``D``."""
        return self._d

    def reconstruct(self) -> Matrix:
        """The product ``L D Lᵀ``."""
        return self._l @ Matrix.from_diagonal(self._d) @ self._l.transpose()

    def solve(self, b: Vector) -> Vector:
        n = self._d.dim()
        if b.dim() != n:
            raise DimensionError(f"Right-hand side has dimension {b.dim()}, expected {n}")

        y = self._l.solve_lower_triangular(b)
        pivot_tol = max(relative_tol(self._l), _EPSILON)
        if any(abs(value) <= pivot_tol for value in self._d):
            raise SingularMatrixError("Diagonal factor has a zero entry")
        z = Vector(y_i / d_i for y_i, d_i in zip(y, self._d))
        return self._l.transpose().solve_upper_triangular(z)


def ldlt(a: Matrix) -> LDLT:
    """LDLᵀ factorisation of a symmetric matrix ``a``."""
    return LDLT(a)


def ldlt_with_symmetry_check(a: Matrix, check_symmetry: bool) -> LDLT:
    """LDLᵀ factorisation, validating symmetry only when ``check_symmetry`` is true."""
    return LDLT(a, check_symmetry)


class QR(DecompositionSolve):
    """Householder QR factorisation ``A = Q R``."""

    def __init__(self, a: Matrix) -> None:
        m, n = a.shape()
        tol = relative_tol(a)

        q = _identity_rows(m)
        r = a.tolist()
        v = [0.0] * m

        for k in range(min(m, n)):
            x_norm = math.sqrt(sum(r[i][k] * r[i][k] for i in range(k, m)))
            if x_norm <= tol:
                continue

            x0 = r[k][k]
            alpha = -x_norm if x0 >= 0.0 else x_norm
            v[k] = x0 - alpha
            for i in range(k + 1, m):
                v[i] = r[i][k]

            # ||v||² = 2 * alpha² - 2 * alpha * x0 = -2 * alpha * v[k]
            v_norm_sq = abs(-2.0 * alpha * v[k])
            if v_norm_sq <= tol * tol:
                continue
            beta = 2.0 / v_norm_sq

            for j in range(k, n):
                scale = beta * sum(v[i] * r[i][j] for i in range(k, m))
                for i in range(k, m):
                    r[i][j] -= v[i] * scale

            for row in q:
                scale = beta * sum(row[j] * v[j] for j in range(k, m))
                for j in range(k, m):
                    row[j] -= scale * v[j]

        max_abs = max((abs(value) for row in r for value in row), default=0.0)
        cleanup_tol = _EPSILON * max(m, n) * max(max_abs, 1.0)
        for i, row in enumerate(r):
            for j in range(min(i, n)):
                if abs(row[j]) <= cleanup_tol:
                    row[j] = 0.0

        self._q = _flatten(m, m, q)
        self._r = _flatten(m, n, r)

    def q(self) -> Matrix:
        """Orthogonal ``m x m`` factor."""
        return self._q

    def r(self) -> Matrix:
        """Upper-triangular ``m x n`` factor."""
        return self._r

    def reconstruct(self) -> Matrix:
        """The product ``Q R``."""
        return self._q @ self._r

    def solve(self, b: Vector) -> Vector:
        """Solve ``A x = b`` for a square full-rank ``A``."""
        if not self._q.is_square() or not self._r.is_square():
            raise DimensionError("QR solve requires a square matrix")
        if b.dim() != self._q.rows():
            raise DimensionError(
                f"Right-hand side has dimension {b.dim()}, expected {self._q.rows()}"
            )
        y = self._q.transpose() @ b
        return self._r.solve_upper_triangular(y)


def qr(a: Matrix) -> QR:
    """Householder QR factorisation of ``a``."""
    return QR(a)