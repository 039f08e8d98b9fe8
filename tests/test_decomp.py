import math

import pytest

from linalgkit.decomp import (
    LDLT,
    LU,
    QR,
    DecompositionSolve,
    ldlt,
    ldlt_with_symmetry_check,
    lu,
    qr,
)
from linalgkit.errors import DimensionError, NotSymmetricError, SingularMatrixError
from linalgkit.matrix import Matrix
from linalgkit.vector import Vector


def assert_matrix_close(lhs, rhs, eps):
    assert lhs.shape() == rhs.shape()
    for i in range(lhs.rows()):
        for j in range(lhs.cols()):
            assert abs(lhs[i, j] - rhs[i, j]) <= eps, (i, j, lhs[i, j], rhs[i, j])


def apply_permutation(p, a):
    return Matrix.from_rows([a.row(index) for index in p])


# LU ------------------------------------------------------------------


def test_lup_reconstructs_pa():
    a = Matrix(3, 3, [2.0, 0.0, 2.0, 1.0, 1.0, 1.0, 3.0, 2.0, 1.0])
    dec = lu(a)
    assert_matrix_close(apply_permutation(dec.permutation(), a), dec.reconstruct_pa(), 1e-10)


def test_lup_requires_pivoting():
    a = Matrix(3, 3, [0.0, 2.0, 1.0, 1.0, 1.0, 0.0, 2.0, 0.0, 1.0])
    dec = lu(a)
    assert dec.permutation()[0] == 2
    assert_matrix_close(apply_permutation(dec.permutation(), a), dec.reconstruct_pa(), 1e-10)


def test_lu_factors_are_triangular():
    a = Matrix(3, 3, [2.0, 0.0, 2.0, 1.0, 1.0, 1.0, 3.0, 2.0, 1.0])
    dec = LU(a)
    for i in range(3):
        assert dec.l()[i, i] == 1.0
        for j in range(3):
            if j > i:
                assert dec.l()[i, j] == 0.0
            if j < i:
                assert dec.u()[i, j] == 0.0


def test_lu_large_diagonal_dominant_reconstructs_pa():
    n = 48

    def entry(i, j):
        if i == j:
            return 40.0 + i * 0.5
        if (i + j) % 11 == 0:
            return math.sin(i - j) * 0.3
        return 0.0

    a = Matrix.from_fn(n, n, entry)
    dec = lu(a)
    assert_matrix_close(apply_permutation(dec.permutation(), a), dec.reconstruct_pa(), 1e-7)


def test_lu_rejects_singular_matrix():
    a = Matrix(2, 2, [1.0, 2.0, 2.0, 4.0])
    with pytest.raises(SingularMatrixError):
        lu(a)


def test_lu_rejects_non_square_matrix():
    a = Matrix(2, 3, [1.0, 0.0, 2.0, 0.0, 1.0, 3.0])
    with pytest.raises(DimensionError):
        LU(a)


def test_lu_solve_rejects_wrong_rhs_dimension():
    dec = LU(Matrix.identity(3))
    with pytest.raises(DimensionError):
        dec.solve(Vector([1.0, 2.0]))


# LDLT ----------------------------------------------------------------


def test_ldlt_reconstructs_symmetric_matrix():
    a = Matrix(3, 3, [4.0, 2.0, 2.0, 2.0, 5.0, 1.0, 2.0, 1.0, 3.0])
    dec = ldlt(a)
    reconstructed = dec.l() @ Matrix.from_diagonal(dec.d()) @ dec.l().transpose()
    assert_matrix_close(a, reconstructed, 1e-10)
    assert_matrix_close(a, dec.reconstruct(), 1e-10)


def test_ldlt_unit_diagonal_l():
    a = Matrix(3, 3, [6.0, 3.0, 2.0, 3.0, 5.0, 1.0, 2.0, 1.0, 4.0])
    dec = ldlt(a)
    for i in range(dec.l().rows()):
        assert abs(dec.l()[i, i] - 1.0) <= 1e-12


def test_ldlt_rejects_nonsymmetric_matrix():
    a = Matrix(3, 3, [1.0, 2.0, 3.0, 0.0, 4.0, 5.0, 6.0, 7.0, 8.0])
    with pytest.raises(NotSymmetricError):
        ldlt(a)
    dec = ldlt_with_symmetry_check(a, False)
    assert dec.d().approx_eq(Vector([1.0, 4.0, -40.25]), 1e-12)
    assert abs(dec.l()[2, 1] - 1.75) <= 1e-12


def test_ldlt_large_tridiagonal_spd():
    n = 80

    def entry(i, j):
        if i == j:
            return 4.0
        if abs(i - j) == 1:
            return -1.0
        return 0.0

    a = Matrix.from_fn(n, n, entry)
    dec = ldlt(a)
    reconstructed = dec.l() @ Matrix.from_diagonal(dec.d()) @ dec.l().transpose()
    assert_matrix_close(a, reconstructed, 1e-8)


def test_ldlt_rejects_singular_matrix():
    with pytest.raises(SingularMatrixError):
        LDLT(Matrix(2, 2, [1.0, 1.0, 1.0, 1.0]))


def test_ldlt_rejects_non_square_matrix():
    with pytest.raises(DimensionError):
        LDLT(Matrix(2, 3, [1.0, 0.0, 0.0, 0.0, 1.0, 0.0]))


# QR ------------------------------------------------------------------


def test_qr_reconstructs_square_matrix():
    a = Matrix(3, 3, [12.0, -51.0, 4.0, 6.0, 167.0, -68.0, -4.0, 24.0, -41.0])
    assert_matrix_close(a, qr(a).reconstruct(), 1e-9)


def test_q_is_orthogonal():
    a = Matrix(4, 3, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 10.0, 2.0, 3.0, 4.0])
    dec = qr(a)
    qtq = dec.q().transpose() @ dec.q()
    assert_matrix_close(qtq, Matrix.identity(dec.q().rows()), 1e-9)


def test_r_is_upper_triangular_for_rectangular():
    a = Matrix(4, 3, [float(v) for v in range(1, 13)])
    r = qr(a).r()
    assert r.shape() == (4, 3)
    for i in range(r.rows()):
        for j in range(r.cols()):
            if i > j:
                assert abs(r[i, j]) <= 1e-9


def test_qr_large_tall_matrix_properties():
    m, n = 96, 40

    def entry(i, j):
        tweak = 0.25 if (i + 3 * j) % 13 == 0 else 0.0
        return math.sin((i + 1) * (j + 2)) + tweak

    a = Matrix.from_fn(m, n, entry)
    dec = qr(a)
    assert_matrix_close(a, dec.reconstruct(), 1e-7)
    qtq = dec.q().transpose() @ dec.q()
    assert_matrix_close(qtq, Matrix.identity(m), 1e-7)


def test_qr_solve_rejects_rectangular():
    a = Matrix(4, 3, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 10.0, 2.0, 3.0, 4.0])
    with pytest.raises(DimensionError):
        QR(a).solve(Vector([1.0, 2.0, 3.0, 4.0]))


# Common solve interface -----------------------------------------------


@pytest.mark.parametrize("factory", [LU, LDLT, QR])
def test_decompositions_solve_system(factory):
    a = Matrix(3, 3, [4.0, 1.0, 1.0, 1.0, 3.0, 0.0, 1.0, 0.0, 2.0])
    b = Vector([1.0, 2.0, 3.0])
    dec = factory(a)
    assert isinstance(dec, DecompositionSolve)
    x = dec.solve(b)
    assert (a @ x).approx_eq(b, 1e-10)


def test_ldlt_solve_rejects_wrong_rhs_dimension():
    a = Matrix(2, 2, [2.0, 1.0, 1.0, 2.0])
    with pytest.raises(DimensionError):
        LDLT(a).solve(Vector([1.0, 2.0, 3.0]))