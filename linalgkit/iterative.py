"""Iterative solvers for square linear systems ``A x = b``."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass

from .errors import InvalidParameterError, SingularMatrixError
from .matrix import Matrix
from .numeric import check_nonzero_diagonal, relative_tol, validate_linear_system
from .vector import Vector

_EPSILON = sys.float_info.epsilon


@dataclass
class IterativeResult:
    """Outcome of an iterative linear-system solver."""

    x: Vector
    iterations: int
    converged: bool
    final_delta: float


def _require_nonzero_diagonal(a: Matrix) -> None:
    if not check_nonzero_diagonal(a):
        raise SingularMatrixError("Matrix has a numerically zero diagonal entry")


def jacobi(a: Matrix, b: Vector, x0: Vector, max_iter: int, tol: float) -> IterativeResult:
    """Solve ``A x = b`` by the Jacobi method."""
    n = validate_linear_system(a, b, x0, max_iter, tol)
    _require_nonzero_diagonal(a)

    rows = a.tolist()
    rhs = b.tolist()
    x_prev = x0.tolist()
    final_delta = math.inf

    for iteration in range(1, max_iter + 1):
        x_next = [
            (rhs[i] - sum(row[j] * x_prev[j] for j in range(n) if j != i)) / row[i]
            for i, row in enumerate(rows)
        ]
        final_delta = max(abs(new - old) for new, old in zip(x_next, x_prev))
        if final_delta <= tol:
            return IterativeResult(Vector(x_next), iteration, True, final_delta)
        x_prev = x_next

    return IterativeResult(Vector(x_prev), max_iter, False, final_delta)


def gauss_seidel(
    a: Matrix, b: Vector, x0: Vector, max_iter: int, tol: float
) -> IterativeResult:
    """Solve ``A x = b`` by the Gauss-Seidel method."""
    n = validate_linear_system(a, b, x0, max_iter, tol)
    _require_nonzero_diagonal(a)

    rows = a.tolist()
    rhs = b.tolist()
    x = x0.tolist()
    final_delta = math.inf

    for iteration in range(1, max_iter + 1):
        prev = list(x)
        final_delta = 0.0
        for i, row in enumerate(rows):
            sigma_lower = sum(row[j] * x[j] for j in range(i))
            sigma_upper = sum(row[j] * prev[j] for j in range(i + 1, n))
            new_value = (rhs[i] - sigma_lower - sigma_upper) / row[i]
            final_delta = max(final_delta, abs(new_value - prev[i]))
            x[i] = new_value

        if final_delta <= tol:
            return IterativeResult(Vector(x), iteration, True, final_delta)

    return IterativeResult(Vector(x), max_iter, False, final_delta)


def simple_iteration(
    a: Matrix, b: Vector, x0: Vector, tau: float, max_iter: int, tol: float
) -> IterativeResult:
    """Solve ``A x = b`` by Richardson iteration ``x <- x + tau (b - A x)``."""
    validate_linear_system(a, b, x0, max_iter, tol)
    if not math.isfinite(tau):
        raise InvalidParameterError("tau must be finite")

    rhs = b.tolist()
    x = x0.tolist()
    final_delta = math.inf

    for iteration in range(1, max_iter + 1):
        ax = (a @ Vector(x)).tolist()
        x_next = [x_i + tau * (b_i - ax_i) for x_i, b_i, ax_i in zip(x, rhs, ax)]
        final_delta = max(abs(new - old) for new, old in zip(x_next, x))
        if final_delta <= tol:
            return IterativeResult(Vector(x_next), iteration, True, final_delta)
        x = x_next

    return IterativeResult(Vector(x), max_iter, False, final_delta)


def _arnoldi_step(
    a: Matrix,
    basis: list[Vector],
    hessenberg: list[list[float]],
    k: int,
    breakdown_tol: float,
) -> bool:
    """Extend the Krylov basis by one vector; True on breakdown."""
    w = a @ basis[k]
    for j in range(k + 1):
        hij = w.dot(basis[j])
        hessenberg[j][k] = hij
        w = w - hij * basis[j]

    h_next = w.norm_l2()
    hessenberg[k + 1][k] = h_next
    if h_next > breakdown_tol:
        basis.append(w * (1.0 / h_next))
        return False
    return True


def _givens_step(
    hessenberg: list[list[float]],
    cosines: list[float],
    sines: list[float],
    g: list[float],
    k: int,
    breakdown_tol: float,
) -> None:
    """Apply previous rotations to column ``k`` and eliminate its subdiagonal."""
    for j in range(k):
        top = hessenberg[j][k]
        bottom = hessenberg[j + 1][k]
        hessenberg[j][k] = cosines[j] * top + sines[j] * bottom
        hessenberg[j + 1][k] = -sines[j] * top + cosines[j] * bottom

    diag = hessenberg[k][k]
    subdiag = hessenberg[k + 1][k]
    denom = math.sqrt(diag * diag + subdiag * subdiag)
    if denom > breakdown_tol:
        cosines[k] = diag / denom
        sines[k] = subdiag / denom
    else:
        cosines[k] = 1.0
        sines[k] = 0.0

    hessenberg[k][k] = cosines[k] * diag + sines[k] * subdiag
    hessenberg[k + 1][k] = 0.0

    gk = g[k]
    g[k] = cosines[k] * gk
    g[k + 1] = -sines[k] * gk


def gmres_restarted(
    a: Matrix, b: Vector, x0: Vector, restart: int, max_iter: int, tol: float
) -> IterativeResult:
    """Solve ``A x = b`` by GMRES restarted every ``restart`` steps."""
    validate_linear_system(a, b, x0, max_iter, tol)
    if restart <= 0:
        raise InvalidParameterError("restart must be positive")

    breakdown_tol = max(relative_tol(a), _EPSILON)
    x = Vector(x0.tolist())
    iterations = 0
    final_delta = math.inf

    while iterations < max_iter:
        r = b - a @ x
        beta = r.norm_l2()
        final_delta = beta
        if beta <= tol:
            return IterativeResult(x, iterations, True, final_delta)

        cycle_len = min(restart, max_iter - iterations)
        basis = [r * (1.0 / beta)]
        hessenberg = [[0.0] * cycle_len for _ in range(cycle_len + 1)]
        cosines = [0.0] * cycle_len
        sines = [0.0] * cycle_len
        g = [0.0] * (cycle_len + 1)
        g[0] = beta

        x_cycle = x
        used_steps = 0

        for k in range(cycle_len):
            breakdown = _arnoldi_step(a, basis, hessenberg, k, breakdown_tol)
            _givens_step(hessenberg, cosines, sines, g, k, breakdown_tol)

            used_steps = k + 1
            final_delta = abs(g[k + 1])

            y = [0.0] * used_steps
            for idx in reversed(range(used_steps)):
                rhs = g[idx] - sum(
                    hessenberg[idx][j] * y[j] for j in range(idx + 1, used_steps)
                )
                pivot = hessenberg[idx][idx]
                if abs(pivot) <= breakdown_tol:
                    raise SingularMatrixError("GMRES least-squares system is singular")
                y[idx] = rhs / pivot

            x_cycle = Vector(x.tolist())
            for coefficient, direction in zip(y, basis):
                x_cycle += coefficient * direction

            if final_delta <= tol:
                return IterativeResult(x_cycle, iterations + used_steps, True, final_delta)
            if breakdown:
                break

        if used_steps == 0:
            break
        x = x_cycle
        iterations += used_steps

    return IterativeResult(x, iterations, False, final_delta)


def gmres(a: Matrix, b: Vector, x0: Vector, max_iter: int, tol: float) -> IterativeResult:
    """Solve ``A x = b`` by GMRES without restarts."""
    return gmres_restarted(a, b, x0, max_iter, max_iter, tol)