import math

import numpy as np
import pytest

from linalgkit.errors import DimensionError, InvalidParameterError, SingularMatrixError
from linalgkit.iterative import (
    IterativeResult,
    gauss_seidel,
    gmres,
    gmres_restarted,
    jacobi,
    simple_iteration,
)
from linalgkit.matrix import Matrix
from linalgkit.vector import Vector


@pytest.fixture
def system():
    a = Matrix(
        4,
        4,
        [10.0, -1.0, 2.0, 0.0, -1.0, 11.0, -1.0, 3.0, 2.0, -1.0, 10.0, -1.0, 0.0, 3.0, -1.0, 8.0],
    )
    b = Vector([6.0, 25.0, -11.0, 15.0])
    expected = Vector([1.0, 2.0, -1.0, 1.0])
    return a, b, expected


def reference_solution(a, b):
    solution = np.linalg.solve(np.array(a.tolist()), np.array(b.tolist()))
    return Vector(float(value) for value in solution)


def test_jacobi_converges_on_diagonally_dominant_system(system):
    a, b, expected = system
    result = jacobi(a, b, Vector.zeros(4), 500, 1e-12)
    assert result.converged
    assert result.final_delta <= 1e-12
    assert result.x.approx_eq(expected, 1e-7)


def test_gauss_seidel_converges_on_diagonally_dominant_system(system):
    a, b, expected = system
    result = gauss_seidel(a, b, Vector.zeros(4), 200, 1e-12)
    assert result.converged
    assert result.x.approx_eq(expected, 1e-9)


def test_simple_iteration_converges_with_small_tau(system):
    a, b, expected = system
    result = simple_iteration(a, b, Vector.zeros(4), 0.05, 3000, 1e-12)
    assert result.converged
    assert result.x.approx_eq(expected, 1e-6)


def test_methods_reject_zero_diagonal_for_jacobi_and_seidel():
    a = Matrix(2, 2, [0.0, 1.0, 1.0, 2.0])
    b = Vector([1.0, 1.0])
    with pytest.raises(SingularMatrixError):
        jacobi(a, b, Vector.zeros(2), 100, 1e-8)
    with pytest.raises(SingularMatrixError):
        gauss_seidel(a, b, Vector.zeros(2), 100, 1e-8)


def test_gmres_converges_on_sample_system(system):
    a, b, expected = system
    result = gmres(a, b, Vector.zeros(4), 20, 1e-12)
    assert result.converged
    assert result.iterations <= 4
    assert result.x.approx_eq(expected, 1e-10)


def test_gmres_rejects_invalid_input():
    a = Matrix(2, 3, [1.0, 0.0, 2.0, 0.0, 1.0, 3.0])
    with pytest.raises(DimensionError):
        gmres(a, Vector([1.0, 2.0]), Vector.zeros(2), 10, 1e-8)


def test_restarted_gmres_converges_with_small_restart(system):
    a, b, expected = system
    result = gmres_restarted(a, b, Vector.zeros(4), 2, 40, 1e-12)
    assert result.converged
    assert result.x.approx_eq(expected, 1e-9)


def test_restarted_gmres_rejects_zero_restart(system):
    a, b, _ = system
    with pytest.raises(InvalidParameterError):
        gmres_restarted(a, b, Vector.zeros(4), 0, 20, 1e-8)


def test_gmres_returns_immediately_for_exact_initial_guess(system):
    a, b, expected = system
    result = gmres(a, b, expected, 10, 1e-8)
    assert result.converged
    assert result.iterations == 0
    assert result.x == expected


def test_methods_match_reference_solution(system):
    a, b, _ = system
    x_ref = reference_solution(a, b)
    x0 = Vector.zeros(4)

    results = [
        (jacobi(a, b, x0, 500, 1e-12), 1e-7),
        (gauss_seidel(a, b, x0, 300, 1e-12), 1e-9),
        (simple_iteration(a, b, x0, 0.05, 3000, 1e-12), 1e-6),
        (gmres(a, b, x0, 30, 1e-12), 1e-10),
        (gmres_restarted(a, b, x0, 2, 50, 1e-12), 1e-9),
    ]
    for result, eps in results:
        assert result.converged
        assert result.x.approx_eq(x_ref, eps)


def test_jacobi_reports_non_convergence(system):
    a, b, _ = system
    result = jacobi(a, b, Vector.zeros(4), 1, 1e-12)
    assert isinstance(result, IterativeResult)
    assert not result.converged
    assert result.iterations == 1
    assert result.x.approx_eq(Vector([0.6, 25.0 / 11.0, -1.1, 1.875]), 1e-12)


def test_gauss_seidel_reports_non_convergence(system):
    a, b, _ = system
    result = gauss_seidel(a, b, Vector.zeros(4), 2, 1e-14)
    assert not result.converged
    assert result.iterations == 2
    assert result.final_delta > 1e-14


def test_simple_iteration_rejects_non_finite_tau(system):
    a, b, _ = system
    with pytest.raises(InvalidParameterError):
        simple_iteration(a, b, Vector.zeros(4), math.inf, 10, 1e-8)


@pytest.mark.parametrize("max_iter, tol", [(0, 1e-8), (10, 0.0), (10, -1.0), (10, math.nan)])
def test_invalid_parameters_are_rejected(system, max_iter, tol):
    a, b, _ = system
    with pytest.raises(InvalidParameterError):
        jacobi(a, b, Vector.zeros(4), max_iter, tol)


def test_mismatched_initial_guess_is_rejected(system):
    a, b, _ = system
    with pytest.raises(DimensionError):
        gauss_seidel(a, b, Vector.zeros(3), 10, 1e-8)