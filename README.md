# linalgkit

A small linear algebra toolkit written in plain Python. It provides dense
vectors and matrices, compressed sparse matrices (CSR and CSC), direct
decompositions (LU, LDLᵀ, QR), iterative linear solvers, eigenvalue methods
and a singular value decomposition.

## Installation

```
pip install linalgkit
```

To run the test suite from a checkout:

```
pip install ".[test]"
pytest
```

## Modules

| Module                | Contents                                                                   |
|-----------------------|----------------------------------------------------------------------------|
| `linalgkit.vector`    | `Vector`: arithmetic, `dot`, norms, `normalize`, `cross`, `argmin`/`argmax` |
| `linalgkit.matrix`    | `Matrix`: row-major dense matrix, `@` products, `transpose`, triangular solves; `matmul`, `matvec`, `solve_lower_triangular`, `solve_upper_triangular` |
| `linalgkit.numeric`   | `relative_tol`, `validate_linear_system`, `check_nonzero_diagonal`         |
| `linalgkit.decomp`    | `LU` / `lu`, `LDLT` / `ldlt` / `ldlt_with_symmetry_check`, `QR` / `qr`, the `DecompositionSolve` base class |
| `linalgkit.iterative` | `jacobi`, `gauss_seidel`, `simple_iteration`, `gmres`, `gmres_restarted`, `IterativeResult` |
| `linalgkit.sparse`    | `CsrMatrix`, `CscMatrix` with conversions, transposes and products         |
| `linalgkit.eigen`     | `power_method`, `inverse_power_method`, `qr_wilkinson_eigenvalues`, `qr_wilkinson_eigenpairs`, `jacobi_eigenpairs` and their result classes |
| `linalgkit.svd`       | `SVD`, `svd`, `svd_golub_kahan`                                            |
| `linalgkit.errors`    | `LinAlgError` and its subclasses                                           |

## Errors

Failures are raised as exceptions derived from `LinAlgError`:

- `DimensionError`: shapes do not fit (also a `ValueError`);
- `SingularMatrixError`: a pivot or diagonal entry is numerically zero;
- `NotSymmetricError`: a method that needs a symmetric matrix got another one
  (also a `ValueError`);
- `InvalidParameterError`: a non-positive `max_iter`, a non-finite or
  non-positive `tol`, a zero starting vector and the like (also a `ValueError`).

## Examples

### Vectors and matrices

Products of matrices with matrices or vectors use `@`; `*` multiplies by a
scalar.

```python
from linalgkit.matrix import Matrix
from linalgkit.vector import Vector

a = Vector([1.0, 2.0, 3.0])
b = Vector([4.0, 5.0, 6.0])
print(a + b)          # [5.0000, 7.0000, 9.0000]
print(a.dot(b))       # 32.0
print(2.0 * a)        # [2.0000, 4.0000, 6.0000]

m = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0]])
print(m @ m.transpose())
print(m @ Vector([1.0, 1.0]))
print(m[1, 0])        # 3.0
```

### Decompositions

```python
from linalgkit.decomp import ldlt, lu, qr
from linalgkit.matrix import Matrix
from linalgkit.vector import Vector

a = Matrix.from_rows([[4.0, 1.0, 1.0], [1.0, 3.0, 0.0], [1.0, 0.0, 2.0]])
b = Vector([1.0, 2.0, 3.0])

x_lu = lu(a).solve(b)
x_ldlt = ldlt(a).solve(b)
x_qr = qr(a).solve(b)

factors = lu(a)
print(factors.permutation())   # row i of P A is row p[i] of A
print(factors.reconstruct_pa())
```

`lu` raises `SingularMatrixError` for a numerically singular matrix, and
`ldlt` raises `NotSymmetricError` when the input is not symmetric;
`ldlt_with_symmetry_check(a, False)` skips that check. `QR.solve` works for
square matrices only.

### Iterative solvers

```python
from linalgkit.iterative import gauss_seidel, gmres, gmres_restarted
from linalgkit.matrix import Matrix
from linalgkit.vector import Vector

a = Matrix.from_rows([
    [10.0, -1.0, 2.0, 0.0],
    [-1.0, 11.0, -1.0, 3.0],
    [2.0, -1.0, 10.0, -1.0],
    [0.0, 3.0, -1.0, 8.0],
])
b = Vector([6.0, 25.0, -11.0, 15.0])
x0 = Vector.zeros(4)

result = gauss_seidel(a, b, x0, 200, 1e-12)
print(result.converged, result.iterations, result.x)

result = gmres(a, b, x0, 20, 1e-12)
result = gmres_restarted(a, b, x0, 2, 40, 1e-12)
```

Each solver returns an `IterativeResult` with `x`, `iterations`,
`converged` and `final_delta`. Running out of iterations is not an error:
`converged` is then `False`. `jacobi` and `gauss_seidel` raise
`SingularMatrixError` when a diagonal entry is numerically zero.

### Sparse matrices

```python
from linalgkit.matrix import Matrix
from linalgkit.sparse import CscMatrix, CsrMatrix
from linalgkit.vector import Vector

dense = Matrix.from_rows([[1.0, 0.0, 2.0], [0.0, 3.0, 0.0], [4.0, 0.0, 5.0]])
csr = CsrMatrix.from_dense(dense)
print(csr.nnz(), csr.density())        # 5 0.555...
print(csr @ Vector([1.0, 2.0, 3.0]))   # [7.0000, 6.0000, 19.0000]
print(csr.get(0, 1))                   # 0.0
csc = csr.to_csc()
print(dense @ csc)                     # dense times sparse gives a Matrix
```

`get(i, j)` returns zero for entries that are not stored, while `csr[i, j]`
raises `KeyError` for them.

### Eigenvalues and SVD

```python
from linalgkit.eigen import jacobi_eigenpairs, power_method
from linalgkit.matrix import Matrix
from linalgkit.svd import svd
from linalgkit.vector import Vector

s = Matrix.from_rows([[4.0, 1.0, 1.0], [1.0, 3.0, 0.0], [1.0, 0.0, 2.0]])
dominant = power_method(s, Vector([1.0, 1.0, 1.0]), 200, 1e-12)
print(dominant.eigenvalue)

pairs = jacobi_eigenpairs(s, 200, 1e-12)
print(pairs.eigenvalues)
print(pairs.reconstruct_symmetric())

decomposition = svd(s)
print(decomposition.singular_values)   # non-negative, in decreasing order
print(decomposition.reconstruct(3, 3))
print(decomposition.rank(1e-10), decomposition.condition_number(1e-10))
```

The eigenvalue functions default to `max_iter=1000` and `tol=1e-12`;
`svd_golub_kahan` defaults to `max_iter=500` and `tol=1e-10`.
`qr_wilkinson_eigenpairs` and `jacobi_eigenpairs` accept symmetric matrices
only. Eigenvectors are returned as the columns of `eigenvectors`.

## What it does not do

- It has no command-line tool; it is a library to import.
- It does not read or write matrices from files or any storage format.
- Everything except the SVD fallback is pure Python lists, so it is meant for
  small and moderate sizes, not for speed. NumPy is used only by the SVD, as
  a fallback when the bidiagonal iteration does not converge.