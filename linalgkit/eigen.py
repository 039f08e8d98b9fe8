"""Eigenvalue algorithms: power iteration, inverse iteration, shifted QR and Jacobi rotations."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass

from .decomp import lu
from .errors import (
    DimensionError,
    InvalidParameterError,
    NotSymmetricError,
    SingularMatrixError,
)
from .matrix import Matrix
from .numeric import relative_tol
from .vector import Vector

_EPSILON = sys.float_info.epsilon

DEFAULT_EIGEN_MAX_ITER = 1_000
DEFAULT_EIGEN_TOL = 1e-12


@dataclass
class EigenResult:
    """A single eigenpair found by an iterative method."""

    eigenvalue: float
    eigenvector: Vector
    iterations: int
    converged: bool
    final_delta: float

    @classmethod
    def power(
        cls,
        a: Matrix,
        x0: Vector,
        max_iter: int = DEFAULT_EIGEN_MAX_ITER,
        tol: float = DEFAULT_EIGEN_TOL,
    ) -> EigenResult:
        """Dominant eigenpair by the power method."""
        return power_method(a, x0, max_iter, tol)

    @classmethod
    def inverse(
        cls,
        a: Matrix,
        x0: Vector,
        max_iter: int = DEFAULT_EIGEN_MAX_ITER,
        tol: float = DEFAULT_EIGEN_TOL,
    ) -> EigenResult:
        """Eigenpair nearest to zero by inverse iteration."""
        return inverse_power_method(a, x0, max_iter, tol)

    def residual_norm(self, a: Matrix) -> float:
        """``||A v - lambda v||`` for the stored pair."""
        return _residual_norm(a, self.eigenvector, self.eigenvalue)


@dataclass
class QrEigenvaluesResult:
    """Eigenvalues from the shifted QR algorithm."""

    eigenvalues: Vector
    iterations: int
    converged: bool
    final_delta: float

    @classmethod
    def compute(
        cls,
        a: Matrix,
        max_iter: int = DEFAULT_EIGEN_MAX_ITER,
        tol: float = DEFAULT_EIGEN_TOL,
    ) -> QrEigenvaluesResult:
        return qr_wilkinson_eigenvalues(a, max_iter, tol)

    def diagonal_matrix(self) -> Matrix:
        """Square matrix with the eigenvalues on its diagonal."""
        return Matrix.from_diagonal(self.eigenvalues)


@dataclass
class QrEigenpairsResult:
    """Eigenvalues and eigenvectors (as columns) from the shifted QR algorithm."""

    eigenvalues: Vector
    eigenvectors: Matrix
    iterations: int
    converged: bool
    final_delta: float

    @classmethod
    def compute(
        cls,
        a: Matrix,
        max_iter: int = DEFAULT_EIGEN_MAX_ITER,
        tol: float = DEFAULT_EIGEN_TOL,
    ) -> QrEigenpairsResult:
        return qr_wilkinson_eigenpairs(a, max_iter, tol)

    def diagonal_matrix(self) -> Matrix:
        """Square matrix with the eigenvalues on its diagonal."""
        return Matrix.from_diagonal(self.eigenvalues)

    def reconstruct_symmetric(self) -> Matrix:
        """The product ``V D Vᵀ``."""
        return self.eigenvectors @ self.diagonal_matrix() @ self.eigenvectors.transpose()


@dataclass
class JacobiEigenResult:
    """Eigenvalues and eigenvectors (as columns) from Jacobi rotations."""

    eigenvalues: Vector
    eigenvectors: Matrix
    iterations: int
    converged: bool
    final_delta: float

    @classmethod
    def compute(
        cls,
        a: Matrix,
        max_iter: int = DEFAULT_EIGEN_MAX_ITER,
        tol: float = DEFAULT_EIGEN_TOL,
    ) -> JacobiEigenResult:
        return jacobi_eigenpairs(a, max_iter, tol)

    def diagonal_matrix(self) -> Matrix:
        """Square matrix with the eigenvalues on its diagonal."""
        return Matrix.from_diagonal(self.eigenvalues)

    def reconstruct_symmetric(self) -> Matrix:
        """The product ``V D Vᵀ``."""
        return self.eigenvectors @ self.diagonal_matrix() @ self.eigenvectors.transpose()


# Validation --------------------------------------------------------------


def _check_iteration_params(max_iter: int, tol: float) -> None:
    if max_iter <= 0:
        raise InvalidParameterError("max_iter must be positive")
    if not math.isfinite(tol) or tol <= 0.0:
        raise InvalidParameterError("tol must be finite and positive")


def _validate_square(a: Matrix) -> int:
    if not a.is_square():
        raise DimensionError("Eigenvalue problems require a square matrix")
    n = a.rows()
    if n == 0:
        raise DimensionError("Matrix must not be empty")
    return n


def _validate_eigen_input(a: Matrix, x0: Vector, max_iter: int, tol: float) -> int:
    n = _validate_square(a)
    if x0.dim() != n:
        raise DimensionError(f"Initial vector has dimension {x0.dim()}, expected {n}")
    _check_iteration_params(max_iter, tol)
    x0_norm = x0.norm_l2()
    if not math.isfinite(x0_norm) or x0_norm <= _EPSILON:
        raise InvalidParameterError("Initial vector must be finite and non-zero")
    return n


def _validate_qr_input(a: Matrix, max_iter: int, tol: float) -> int:
    n = _validate_square(a)
    _check_iteration_params(max_iter, tol)
    return n


def _residual_norm(a: Matrix, x: Vector, eigenvalue: float) -> float:
    return (a @ x - eigenvalue * x).norm_l2()


def _is_symmetric(rows: list[list[float]], tol: float) -> bool:
    n = len(rows)
    return all(
        abs(rows[i][j] - rows[j][i]) <= tol for i in range(n) for j in range(i + 1, n)
    )


# Power and inverse iteration ---------------------------------------------


def power_method(
    a: Matrix,
    x0: Vector,
    max_iter: int = DEFAULT_EIGEN_MAX_ITER,
    tol: float = DEFAULT_EIGEN_TOL,
) -> EigenResult:
    """Dominant eigenpair of ``a`` by the power method."""
    _validate_eigen_input(a, x0, max_iter, tol)

    breakdown_tol = max(relative_tol(a), _EPSILON)
    x = x0.normalize()
    eigenvalue = x.dot(a @ x)
    final_delta = math.inf

    for iteration in range(1, max_iter + 1):
        y = a @ x
        y_norm = y.norm_l2()
        if not math.isfinite(y_norm) or y_norm <= breakdown_tol:
            raise SingularMatrixError("Power iteration broke down: A x vanished")

        x_next = y * (1.0 / y_norm)
        eigenvalue = x_next.dot(a @ x_next)
        final_delta = _residual_norm(a, x_next, eigenvalue)
        if final_delta <= tol:
            return EigenResult(eigenvalue, x_next, iteration, True, final_delta)
        x = x_next

    return EigenResult(eigenvalue, x, max_iter, False, final_delta)


def inverse_power_method(
    a: Matrix,
    x0: Vector,
    max_iter: int = DEFAULT_EIGEN_MAX_ITER,
    tol: float = DEFAULT_EIGEN_TOL,
) -> EigenResult:
    """Eigenpair of ``a`` with eigenvalue nearest to zero by inverse iteration."""
    _validate_eigen_input(a, x0, max_iter, tol)

    factors = lu(a)
    breakdown_tol = max(relative_tol(a), _EPSILON)
    x = x0.normalize()
    eigenvalue = x.dot(a @ x)
    final_delta = math.inf

    for iteration in range(1, max_iter + 1):
        y = factors.solve(x)
        y_norm = y.norm_l2()
        if not math.isfinite(y_norm) or y_norm <= breakdown_tol:
            raise SingularMatrixError("Inverse iteration broke down")

        x_next = y * (1.0 / y_norm)
        eigenvalue = x_next.dot(a @ x_next)
        final_delta = _residual_norm(a, x_next, eigenvalue)
        if final_delta <= tol:
            return EigenResult(eigenvalue, x_next, iteration, True, final_delta)
        x = x_next

    return EigenResult(eigenvalue, x, max_iter, False, final_delta)


# Shifted QR on Hessenberg form -------------------------------------------


def _subdiag_norm(h: list[list[float]]) -> float:
    return max((abs(h[i][i - 1]) for i in range(1, len(h))), default=0.0)


def _negligible_subdiag(h: list[list[float]], i: int, tol: float) -> bool:
    scale = abs(h[i - 1][i - 1]) + abs(h[i][i]) + 1.0
    return abs(h[i][i - 1]) <= tol * scale


def _wilkinson_shift(h: list[list[float]], m: int) -> float:
    a, b = h[m - 1][m - 1], h[m - 1][m]
    c, d = h[m][m - 1], h[m][m]

    trace_half = 0.5 * (a + d)
    det = a * d - b * c
    disc = trace_half * trace_half - det
    if disc < 0.0:
        return d

    sqrt_disc = math.sqrt(disc)
    mu1 = trace_half + sqrt_disc
    mu2 = trace_half - sqrt_disc
    return mu1 if abs(mu1 - d) < abs(mu2 - d) else mu2


def _apply_reflector_right(rows: list[list[float]], offset: int, v: list[float]) -> None:
    for row in rows:
        scale = 2.0 * sum(row[offset + j] * vj for j, vj in enumerate(v))
        for j, vj in enumerate(v):
            row[offset + j] -= scale * vj


def _hessenberg_reduction(
    a: Matrix, tol: float
) -> tuple[list[list[float]], list[list[float]]]:
    """Reduce ``a`` to upper Hessenberg ``H`` with ``A = Q H Qᵀ``."""
    n = a.rows()
    h = a.tolist()
    q = [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]

    for k in range(max(n - 2, 0)):
        m = n - k - 1
        v = [h[k + 1 + i][k] for i in range(m)]
        x_norm = math.sqrt(sum(value * value for value in v))
        if x_norm <= tol:
            continue

        alpha = -x_norm if v[0] >= 0.0 else x_norm
        v[0] -= alpha
        v_norm = math.sqrt(sum(value * value for value in v))
        if v_norm <= tol:
            continue
        v = [value / v_norm for value in v]

        for j in range(k, n):
            scale = 2.0 * sum(vi * h[k + 1 + i][j] for i, vi in enumerate(v))
            for i, vi in enumerate(v):
                h[k + 1 + i][j] -= vi * scale

        _apply_reflector_right(h, k + 1, v)
        _apply_reflector_right(q, k + 1, v)

        for i in range(k + 2, n):
            h[i][k] = 0.0

    return h, q


def _rotate_columns(
    rows: list[list[float]], k: int, c: float, s: float
) -> None:
    for row in rows:
        left, right = row[k], row[k + 1]
        row[k] = c * left - s * right
        row[k + 1] = s * left + c * right


def _qr_step(
    h: list[list[float]],
    active_end: int,
    shift: float,
    q: list[list[float]] | None,
) -> None:
    """One implicitly shifted QR sweep over ``h[0..=active_end]``."""
    if active_end == 0:
        return

    x = h[0][0] - shift
    z = h[1][0]

    for k in range(active_end):
        r = math.sqrt(x * x + z * z)
        c, s = (x / r, -z / r) if r > _EPSILON else (1.0, 0.0)

        top_row, bottom_row = h[k], h[k + 1]
        for j in range(k, active_end + 1):
            top, bottom = top_row[j], bottom_row[j]
            top_row[j] = c * top - s * bottom
            bottom_row[j] = s * top + c * bottom

        row_max = min(k + 2, active_end)
        _rotate_columns(h[: row_max + 1], k, c, s)

        if q is not None:
            _rotate_columns(q, k, c, s)

        if k + 2 <= active_end:
            x = h[k + 1][k]
            z = h[k + 2][k]

    for j in range(active_end):
        for i in range(j + 2, active_end + 1):
            if abs(h[i][j]) <= _EPSILON:
                h[i][j] = 0.0


def _qr_iterate(
    h: list[list[float]],
    max_iter: int,
    tol: float,
    q: list[list[float]] | None,
) -> tuple[int, bool, float]:
    """Deflating shifted QR iterations; returns (iterations, converged, final_delta)."""
    n = len(h)
    if n <= 1:
        return 0, True, 0.0

    iterations = 0
    active_end = n - 1

    while active_end > 0:
        if _negligible_subdiag(h, active_end, tol):
            h[active_end][active_end - 1] = 0.0
            active_end -= 1
            continue

        if iterations >= max_iter:
            return iterations, False, _subdiag_norm(h)

        shift = _wilkinson_shift(h, active_end)
        _qr_step(h, active_end, shift, q)
        iterations += 1

        for i in range(1, active_end + 1):
            if _negligible_subdiag(h, i, tol):
                h[i][i - 1] = 0.0

        while active_end > 0 and _negligible_subdiag(h, active_end, tol):
            h[active_end][active_end - 1] = 0.0
            active_end -= 1

    return iterations, True, _subdiag_norm(h)


def _algorithm_tol(a: Matrix, tol: float) -> float:
    return max(tol, relative_tol(a), _EPSILON)


def qr_wilkinson_eigenvalues(
    a: Matrix,
    max_iter: int = DEFAULT_EIGEN_MAX_ITER,
    tol: float = DEFAULT_EIGEN_TOL,
) -> QrEigenvaluesResult:
    """Eigenvalues by Hessenberg reduction and Wilkinson-shifted QR iterations."""
    n = _validate_qr_input(a, max_iter, tol)
    algo_tol = _algorithm_tol(a, tol)

    h, _ = _hessenberg_reduction(a, algo_tol)
    iterations, converged, final_delta = _qr_iterate(h, max_iter, algo_tol, None)
    eigenvalues = Vector(h[i][i] for i in range(n))
    return QrEigenvaluesResult(eigenvalues, iterations, converged, final_delta)


def qr_wilkinson_eigenpairs(
    a: Matrix,
    max_iter: int = DEFAULT_EIGEN_MAX_ITER,
    tol: float = DEFAULT_EIGEN_TOL,
) -> QrEigenpairsResult:
    """Eigenvalues and eigenvectors of a symmetric matrix by shifted QR iterations."""
    n = _validate_qr_input(a, max_iter, tol)
    algo_tol = _algorithm_tol(a, tol)
    if not _is_symmetric(a.tolist(), 10.0 * algo_tol):
        raise NotSymmetricError("QR eigenpairs require a symmetric matrix")

    h, q = _hessenberg_reduction(a, algo_tol)
    iterations, converged, final_delta = _qr_iterate(h, max_iter, algo_tol, q)
    eigenvalues = Vector(h[i][i] for i in range(n))
    return QrEigenpairsResult(
        eigenvalues, Matrix.from_rows(q), iterations, converged, final_delta
    )


# Jacobi rotations --------------------------------------------------------


def _largest_offdiagonal(d: list[list[float]]) -> tuple[int, int, float]:
    n = len(d)
    p, q, largest = 0, 1, 0.0
    for i in range(n):
        for j in range(i + 1, n):
            value = abs(d[i][j])
            if value > largest:
                p, q, largest = i, j, value
    return p, q, largest


def jacobi_eigenpairs(
    a: Matrix,
    max_iter: int = DEFAULT_EIGEN_MAX_ITER,
    tol: float = DEFAULT_EIGEN_TOL,
) -> JacobiEigenResult:
    """Eigenvalues and eigenvectors of a symmetric matrix by classical Jacobi rotations."""
    n = _validate_qr_input(a, max_iter, tol)
    algo_tol = _algorithm_tol(a, tol)
    d = a.tolist()
    if not _is_symmetric(d, 10.0 * algo_tol):
        raise NotSymmetricError("Jacobi eigenpairs require a symmetric matrix")

    if n == 1:
        return JacobiEigenResult(Vector([d[0][0]]), Matrix.identity(1), 0, True, 0.0)

    v = [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]
    final_delta = math.inf

    def result(iterations: int, converged: bool) -> JacobiEigenResult:
        return JacobiEigenResult(
            Vector(d[i][i] for i in range(n)),
            Matrix.from_rows(v),
            iterations,
            converged,
            final_delta,
        )

    for iteration in range(1, max_iter + 1):
        p, q, max_offdiag = _largest_offdiagonal(d)
        final_delta = max_offdiag
        if max_offdiag <= algo_tol:
            return result(iteration - 1, True)

        app, aqq, apq = d[p][p], d[q][q], d[p][q]
        theta = 0.5 * math.atan2(2.0 * apq, aqq - app)
        c, s = math.cos(theta), math.sin(theta)

        for k in range(n):
            if k in (p, q):
                continue
            dkp, dkq = d[k][p], d[k][q]
            new_kp = c * dkp - s * dkq
            new_kq = s * dkp + c * dkq
            d[k][p] = d[p][k] = new_kp
            d[k][q] = d[q][k] = new_kq

        c2, s2, cs = c * c, s * s, c * s
        d[p][p] = c2 * app - 2.0 * cs * apq + s2 * aqq
        d[q][q] = s2 * app + 2.0 * cs * apq + c2 * aqq
        d[p][q] = d[q][p] = 0.0

        for row in v:
            vkp, vkq = row[p], row[q]
            row[p] = c * vkp - s * vkq
            row[q] = s * vkp + c * vkq

    return result(max_iter, False)